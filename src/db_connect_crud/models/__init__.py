"""Pydantic models for configuration, statements and results."""

from .config import DatabaseConfig
from .query import QueryResult, Statement

__all__ = [
    "DatabaseConfig",
    "QueryResult",
    "Statement",
]

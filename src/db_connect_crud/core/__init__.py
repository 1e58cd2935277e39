"""Core functionality for connection handling and statement execution."""

from .connection import DatabaseConnection
from .crud import RESULT_SET_KEY, CrudOperations

__all__ = [
    "DatabaseConnection",
    "CrudOperations",
    "RESULT_SET_KEY",
]

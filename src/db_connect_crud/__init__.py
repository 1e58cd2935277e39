"""
db_connect_crud - Generic relational database access layer

Create, read, update, delete, join and stored-procedure execution over
arbitrary tables, on top of SQLAlchemy engines.
"""

__version__ = "1.0.0"

from .core import RESULT_SET_KEY, CrudOperations, DatabaseConnection
from .exceptions import CrudError, InvalidArgumentError, PersistenceError
from .models import DatabaseConfig, QueryResult, Statement

__all__ = [
    "CrudOperations",
    "DatabaseConnection",
    "DatabaseConfig",
    "QueryResult",
    "Statement",
    "CrudError",
    "InvalidArgumentError",
    "PersistenceError",
    "RESULT_SET_KEY",
]

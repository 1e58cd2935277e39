"""Exceptions raised by CRUD operations."""

from typing import Optional


class CrudError(Exception):
    """Base class for all errors raised by db_connect_crud."""


class InvalidArgumentError(CrudError, ValueError):
    """Raised before any database interaction when a call is malformed."""


class PersistenceError(CrudError):
    """
    Raised when the database rejects or fails a statement.

    The original driver exception is kept on ``cause`` and chained as
    ``__cause__`` by the raising code.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

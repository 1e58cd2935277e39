"""Database connection management with SQLAlchemy."""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import Connection, Engine, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from db_connect_crud.exceptions import PersistenceError
from db_connect_crud.models.config import DatabaseConfig

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """Opens one database connection per request and closes it afterwards."""

    def __init__(self, config: DatabaseConfig):
        """
        Initialize the connection provider.

        Args:
            config: Database endpoint and credentials
        """
        self.config = config
        self.engine: Optional[Engine] = None

    def initialize(self) -> None:
        """
        Create the engine if it does not exist yet.

        NullPool hands out a fresh DBAPI connection on every connect() and
        really closes it on close(), so nothing is pooled or shared.

        Raises:
            ValueError: If the configuration is incomplete
        """
        if self.engine is not None:
            return  # Already initialized

        self.engine = create_engine(
            self.config.connection_url(),
            poolclass=NullPool,
            echo=self.config.echo_sql,
        )

    def dispose(self) -> None:
        """Dispose of the engine and cleanup resources."""
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None

    def acquire(self) -> Optional[Connection]:
        """
        Open a new database connection.

        Configuration and connection faults are logged, not raised.

        Returns:
            An open Connection, or None if one could not be established
        """
        if not self.config.is_complete:
            logger.error(
                "Configuration error: Database configuration missing. Please set "
                f"{', '.join(self.config.missing_fields)} environment variables"
            )
            return None

        try:
            self.initialize()
            conn = self.engine.connect()
        except (SQLAlchemyError, ImportError) as e:
            logger.error(f"Error establishing database connection: {e}", exc_info=True)
            return None

        logger.info("Database connection established")
        return conn

    def release(self, conn: Optional[Connection]) -> None:
        """
        Close a connection obtained from acquire().

        Safe to call with None. Close failures are logged, not raised.
        """
        if conn is None:
            return
        try:
            conn.close()
            logger.info("Database connection closed")
        except SQLAlchemyError as e:
            logger.error(f"Error closing database connection: {e}", exc_info=True)

    @contextmanager
    def get_connection(self) -> Iterator[Connection]:
        """
        Get a connection as a context manager, released on every exit path.

        Yields:
            Connection for executing statements

        Raises:
            PersistenceError: If no connection could be established
        """
        conn = self.acquire()
        if conn is None:
            raise PersistenceError("No database connection available")
        try:
            yield conn
        finally:
            self.release(conn)

    def get_paramstyle(self) -> str:
        """
        Get the DB-API paramstyle of the configured driver.

        Creating the engine loads the driver but opens no connection. Falls
        back to qmark when the engine can't be created; acquire() logs why.
        """
        if self.engine is None:
            if not self.config.is_complete:
                return "qmark"
            try:
                self.initialize()
            except (SQLAlchemyError, ImportError):
                return "qmark"
        return self.engine.dialect.paramstyle

    @property
    def dialect(self) -> str:
        """Get database dialect name."""
        return self.config.dialect

    @property
    def driver(self) -> str:
        """Get database driver name."""
        return self.config.driver

    @property
    def is_initialized(self) -> bool:
        """Check if engine is initialized."""
        return self.engine is not None

    def test_connection(self) -> bool:
        """
        Test database connectivity.

        Returns:
            True if connection successful, False otherwise
        """
        conn = self.acquire()
        if conn is None:
            return False
        try:
            conn.exec_driver_sql("SELECT 1")
            return True
        except SQLAlchemyError:
            return False
        finally:
            self.release(conn)

    def __enter__(self) -> "DatabaseConnection":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.dispose()

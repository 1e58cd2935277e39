"""Pytest configuration and shared fixtures for database tests"""

import os
from typing import Generator, Optional
from unittest.mock import MagicMock

import pytest
from dotenv import load_dotenv

from db_connect_crud.core import CrudOperations, DatabaseConnection
from db_connect_crud.models.config import DatabaseConfig

# Load environment variables
load_dotenv()


# ==================== Configuration Fixtures ====================


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    """URL of a throwaway SQLite database file"""
    return f"sqlite:///{tmp_path / 'crud_test.db'}"


@pytest.fixture
def db_config(sqlite_url: str) -> DatabaseConfig:
    """Complete configuration pointing at the SQLite test database"""
    return DatabaseConfig(url=sqlite_url, user="tester", password="secret")


@pytest.fixture(scope="session")
def pg_database_url() -> Optional[str]:
    """PostgreSQL test database URL from environment"""
    return os.getenv("PG_TEST_DATABASE_URL")


@pytest.fixture
def pg_config(pg_database_url: Optional[str]) -> DatabaseConfig:
    """PostgreSQL database configuration"""
    if not pg_database_url:
        pytest.skip("PG_TEST_DATABASE_URL not set in environment")
    return DatabaseConfig(
        url=pg_database_url,
        user=os.getenv("PG_TEST_USER", "postgres"),
        password=os.getenv("PG_TEST_PASS", "postgres"),
    )


# ==================== Connection Fixtures ====================


@pytest.fixture
def db_connection(
    db_config: DatabaseConfig,
) -> Generator[DatabaseConnection, None, None]:
    """SQLite connection provider with proper cleanup"""
    connection = DatabaseConnection(db_config)
    try:
        yield connection
    finally:
        connection.dispose()


@pytest.fixture
def seeded_connection(db_connection: DatabaseConnection) -> DatabaseConnection:
    """Provider whose database holds a small users/orders data set"""
    with db_connection.get_connection() as conn:
        conn.exec_driver_sql(
            "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL, email TEXT)"
        )
        conn.exec_driver_sql(
            "CREATE TABLE orders (id INTEGER PRIMARY KEY, user_id INTEGER NOT NULL, total REAL)"
        )
        conn.exec_driver_sql(
            "INSERT INTO users (id, name, email) VALUES "
            "(1, 'Ann', 'ann@example.com'), (2, 'Bob', NULL), (3, 'Cid', 'cid@example.com')"
        )
        conn.exec_driver_sql(
            "INSERT INTO orders (id, user_id, total) VALUES "
            "(10, 1, 25.5), (11, 1, 10.0), (12, 2, 99.9)"
        )
        conn.commit()
    return db_connection


@pytest.fixture
def crud(seeded_connection: DatabaseConnection) -> CrudOperations:
    """CRUD operations over the seeded SQLite database"""
    return CrudOperations(seeded_connection)


@pytest.fixture
def pg_connection(
    pg_config: DatabaseConfig,
) -> Generator[DatabaseConnection, None, None]:
    """PostgreSQL connection provider with proper cleanup"""
    connection = DatabaseConnection(pg_config)
    try:
        yield connection
    finally:
        connection.dispose()


# ==================== Test Doubles ====================


@pytest.fixture
def offline_provider() -> MagicMock:
    """Provider double that records every attempt to reach the database"""
    provider = MagicMock(spec=DatabaseConnection)
    provider.get_paramstyle.return_value = "qmark"
    return provider


# ==================== Pytest Configuration ====================


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "sqlite: Tests running against SQLite")
    config.addinivalue_line("markers", "postgresql: PostgreSQL-specific tests")
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring database"
    )

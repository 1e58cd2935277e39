"""Database configuration model."""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, field_validator
from sqlalchemy.engine.url import URL, make_url

# Environment variables read by DatabaseConfig.from_env()
ENV_URL = "DB_URL"
ENV_USER = "DB_USER"
ENV_PASSWORD = "DB_PASS"
ENV_ECHO_SQL = "DB_ECHO_SQL"

# Backends without authentication; credentials are never put in their URLs
_NO_AUTH_BACKENDS = {"sqlite"}

logger = logging.getLogger(__name__)


def _getenv(name: str) -> Optional[str]:
    """Read an environment variable, treating blank values as unset."""
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value


class DatabaseConfig(BaseModel):
    """Endpoint and credentials for the connection provider."""

    url: Optional[str] = Field(
        None,
        description="SQLAlchemy database URL without credentials "
        "(e.g., postgresql+psycopg2://localhost:5432/mydb)",
    )
    user: Optional[str] = Field(None, description="Database user name")
    password: Optional[SecretStr] = Field(None, description="Database password")
    echo_sql: bool = Field(
        default=False,
        description="Echo SQL statements through the sqlalchemy.engine logger",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate database URL format."""
        if v is None:
            return v
        try:
            make_url(v)
        except Exception as e:
            raise ValueError(f"Invalid database URL: {e}")
        return v

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """
        Build a configuration from DB_URL, DB_USER and DB_PASS.

        A ``.env`` file in the working directory is loaded first. Missing or
        blank variables are left unset, and so is an unparseable DB_URL; the
        provider reports them when a connection is requested.
        """
        load_dotenv()

        url = _getenv(ENV_URL)
        if url is not None:
            try:
                make_url(url)
            except Exception as e:
                logger.error(f"Configuration error: {ENV_URL} is not a valid database URL: {e}")
                url = None

        password = _getenv(ENV_PASSWORD)
        return cls(
            url=url,
            user=_getenv(ENV_USER),
            password=SecretStr(password) if password is not None else None,
            echo_sql=os.getenv(ENV_ECHO_SQL, "false").lower() in {"1", "true", "yes"},
        )

    @property
    def missing_fields(self) -> list[str]:
        """Names of the environment variables that were not provided."""
        missing = []
        if self.url is None:
            missing.append(ENV_URL)
        if self.user is None:
            missing.append(ENV_USER)
        if self.password is None:
            missing.append(ENV_PASSWORD)
        return missing

    @property
    def is_complete(self) -> bool:
        """Check that endpoint, user and password are all present."""
        return not self.missing_fields

    @property
    def dialect(self) -> str:
        """Extract database dialect from URL."""
        if self.url is None:
            return ""
        return make_url(self.url).get_backend_name()

    @property
    def driver(self) -> str:
        """Extract driver name from URL."""
        if self.url is None:
            return ""
        parts = make_url(self.url).drivername.split("+")
        return parts[1] if len(parts) > 1 else ""

    def connection_url(self) -> URL:
        """
        Get the URL to connect with, credentials included.

        Raises:
            ValueError: If url, user or password is missing
        """
        if not self.is_complete:
            raise ValueError(
                "Database configuration missing. Please set "
                f"{', '.join(self.missing_fields)} environment variables"
            )

        url = make_url(self.url)
        if self.dialect in _NO_AUTH_BACKENDS:
            return url
        return url.set(
            username=self.user,
            password=self.password.get_secret_value(),
        )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "url": "postgresql+psycopg2://localhost:5432/mydb",
                    "user": "app",
                    "password": "secret",
                    "echo_sql": False,
                }
            ]
        }
    }

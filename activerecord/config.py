"""Configuration management for activerecord."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .constants import (
    CONNECTION_ID_PRIMARY,
    DEFAULT_CHARSET_AND_COLLATE,
)
from .types import Dialect, Environment


class Settings(BaseModel):
    """Library settings."""

    # Environment
    version: str = Field(default="0.1.0", description="Library version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production/testing)",
    )

    # Connection
    dialect: Dialect = Field(
        default=Dialect.SQLITE, description="SQL dialect of the primary connection"
    )
    database_path: str = Field(
        default="db/activerecord.db",
        description="Path of the SQLite database, ':memory:' for an in-memory one",
    )
    table_name_prefix: str = Field(
        default="", description="Prefix prepended to every table name"
    )
    charset_and_collate: str = Field(
        default=DEFAULT_CHARSET_AND_COLLATE,
        description="Charset and collate, separated by a slash",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_statements: bool = Field(
        default=True, description="Whether SQL statements are logged at DEBUG level"
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == Environment.TESTING

    @property
    def dsn(self) -> str:
        """Get the DSN of the primary connection."""
        return f"{self.dialect.value}:{self.database_path}"

    def connection_definition(self) -> "ConnectionDefinition":
        """Get the definition of the primary connection."""
        return ConnectionDefinition(
            id=CONNECTION_ID_PRIMARY,
            dsn=self.dsn,
            table_name_prefix=self.table_name_prefix,
            charset_and_collate=self.charset_and_collate,
        )


class ConnectionDefinition(BaseModel):
    """Definition of a database connection.

    The DSN starts with the dialect, followed by a colon and the
    dialect-specific part, e.g. ``sqlite::memory:`` or
    ``mysql:dbname=acme;host=localhost``.
    """

    id: str = Field(default=CONNECTION_ID_PRIMARY, description="Connection identifier")
    dsn: str = Field(description="Data source name")
    username: str | None = Field(default=None, description="User name")
    password: str | None = Field(default=None, description="Password")
    table_name_prefix: str = Field(
        default="", description="Prefix of the tables, an underscore is appended"
    )
    charset_and_collate: str = Field(
        default=DEFAULT_CHARSET_AND_COLLATE,
        description="Charset and collate, separated by a slash",
    )

    @field_validator("dsn")
    @classmethod
    def validate_dsn(cls, value: str) -> str:
        """Ensure the DSN starts with a dialect."""
        if ":" not in value:
            raise ValueError(f"DSN must start with a dialect: {value}")
        return value

    @field_validator("charset_and_collate")
    @classmethod
    def validate_charset_and_collate(cls, value: str) -> str:
        """Ensure charset and collate are separated by a slash."""
        if "/" not in value:
            raise ValueError(
                f"Charset and collate must be separated by a slash: {value}"
            )
        return value

    @property
    def driver_name(self) -> str:
        """Get the name of the driver, as found in the DSN."""
        return self.dsn.split(":", 1)[0].lower()

    @property
    def dialect(self) -> Dialect:
        """Get the dialect of the connection.

        Raises:
            ValueError: If the driver is not a known dialect
        """
        return Dialect(self.driver_name)

    @property
    def source(self) -> str:
        """Get the dialect-specific part of the DSN."""
        return self.dsn.split(":", 1)[1]

    @property
    def charset(self) -> str:
        """Get the charset, e.g. ``utf8``."""
        return self.charset_and_collate.split("/", 1)[0]

    @property
    def collate(self) -> str:
        """Get the collate, e.g. ``utf8_general_ci``."""
        charset, collate = self.charset_and_collate.split("/", 1)
        return f"{charset}_{collate}"

    @property
    def prefix(self) -> str:
        """Get the table name prefix, with its separator."""
        if not self.table_name_prefix:
            return ""
        return f"{self.table_name_prefix}_"


def load_settings() -> Settings:
    """Load settings from environment variables."""

    # Load .env file if it exists
    load_dotenv()

    log_statements = os.getenv("ACTIVERECORD_LOG_STATEMENTS", "true").lower() in [
        "true",
        "1",
        "yes",
        "on",
    ]

    return Settings(
        environment=Environment(os.getenv("ACTIVERECORD_ENV", "development")),
        dialect=Dialect(os.getenv("ACTIVERECORD_DIALECT", "sqlite").lower()),
        database_path=os.getenv("ACTIVERECORD_DATABASE_PATH", "db/activerecord.db"),
        table_name_prefix=os.getenv("ACTIVERECORD_TABLE_NAME_PREFIX", ""),
        charset_and_collate=os.getenv(
            "ACTIVERECORD_CHARSET_AND_COLLATE", DEFAULT_CHARSET_AND_COLLATE
        ),
        log_level=os.getenv("ACTIVERECORD_LOG_LEVEL", "INFO").upper(),
        log_statements=log_statements,
    )

"""Tests for configuration management."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from activerecord.config import ConnectionDefinition, Settings, load_settings
from activerecord.types import Dialect, Environment


def test_environment_values() -> None:
    """Test environment enum values."""
    assert Environment.DEVELOPMENT == "development"
    assert Environment.PRODUCTION == "production"
    assert Environment.TESTING == "testing"


def test_default_settings() -> None:
    """Test default settings values."""
    with patch.dict(os.environ, {}, clear=True):
        settings = load_settings()

        assert settings.environment == Environment.DEVELOPMENT
        assert settings.dialect == Dialect.SQLITE
        assert settings.database_path == "db/activerecord.db"
        assert settings.table_name_prefix == ""
        assert settings.charset_and_collate == "utf8/general_ci"
        assert settings.log_level == "INFO"
        assert settings.log_statements is True


def test_production_mode_properties() -> None:
    """Test production mode properties."""
    with patch.dict(os.environ, {"ACTIVERECORD_ENV": "production"}, clear=True):
        settings = load_settings()

        assert settings.is_development is False
        assert settings.is_production is True
        assert settings.is_testing is False


def test_testing_mode_properties() -> None:
    """Test testing mode properties."""
    with patch.dict(os.environ, {"ACTIVERECORD_ENV": "testing"}, clear=True):
        settings = load_settings()

        assert settings.is_development is False
        assert settings.is_production is False
        assert settings.is_testing is True


def test_custom_settings() -> None:
    """Test custom settings via environment variables."""
    env_vars = {
        "ACTIVERECORD_DIALECT": "MySQL",
        "ACTIVERECORD_DATABASE_PATH": "dbname=acme;host=localhost",
        "ACTIVERECORD_TABLE_NAME_PREFIX": "acme",
        "ACTIVERECORD_CHARSET_AND_COLLATE": "utf8mb4/unicode_ci",
        "ACTIVERECORD_LOG_LEVEL": "debug",
        "ACTIVERECORD_LOG_STATEMENTS": "off",
    }

    with patch.dict(os.environ, env_vars, clear=True):
        settings = load_settings()

        assert settings.dialect == Dialect.MYSQL
        assert settings.dsn == "mysql:dbname=acme;host=localhost"
        assert settings.log_level == "DEBUG"
        assert settings.log_statements is False

        definition = settings.connection_definition()
        assert definition.id == "primary"
        assert definition.prefix == "acme_"
        assert definition.charset == "utf8mb4"
        assert definition.collate == "utf8mb4_unicode_ci"


def test_invalid_environment() -> None:
    """Test an unknown environment is rejected."""
    with patch.dict(os.environ, {"ACTIVERECORD_ENV": "staging"}, clear=True):
        with pytest.raises(ValueError):
            load_settings()


def test_settings_dsn() -> None:
    settings = Settings(database_path=":memory:")

    assert settings.dsn == "sqlite::memory:"


class TestConnectionDefinition:
    """Test connection definitions."""

    def test_sqlite_dsn(self) -> None:
        definition = ConnectionDefinition(dsn="sqlite::memory:")

        assert definition.driver_name == "sqlite"
        assert definition.dialect == Dialect.SQLITE
        assert definition.source == ":memory:"
        assert definition.prefix == ""

    def test_mysql_dsn(self) -> None:
        definition = ConnectionDefinition(
            dsn="mysql:dbname=acme;host=localhost",
            username="acme",
            password="secret",
            table_name_prefix="test",
        )

        assert definition.dialect == Dialect.MYSQL
        assert definition.source == "dbname=acme;host=localhost"
        assert definition.prefix == "test_"
        assert definition.charset == "utf8"
        assert definition.collate == "utf8_general_ci"

    def test_dsn_requires_a_dialect(self) -> None:
        with pytest.raises(ValidationError, match="DSN must start with a dialect"):
            ConnectionDefinition(dsn="acme.db")

    def test_charset_and_collate_requires_a_slash(self) -> None:
        with pytest.raises(ValidationError, match="separated by a slash"):
            ConnectionDefinition(dsn="sqlite::memory:", charset_and_collate="utf8")

    def test_unknown_dialect(self) -> None:
        definition = ConnectionDefinition(dsn="pgsql:dbname=acme")

        assert definition.driver_name == "pgsql"
        with pytest.raises(ValueError):
            definition.dialect

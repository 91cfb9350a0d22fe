"""Global pytest configuration and fixtures."""

from collections.abc import Generator
from logging import Logger
from pathlib import Path

import pytest

from activerecord import (
    ModelCollection,
    SQLiteConnection,
    reset_default_models,
    set_default_models,
    setup_test_logging,
)
from activerecord.types import Dialect

from tests.acme import RecordingConnection, acme_definitions


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Setup test logging for all tests."""
    setup_test_logging()


@pytest.fixture(scope="function")
def logger() -> Logger:
    """Provide a logger instance for tests."""
    from activerecord import get_logger

    return get_logger("test")


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path using pytest's tmp_path."""
    return tmp_path / "acme.db"


@pytest.fixture
def db_connection(temp_db_path: Path) -> Generator[SQLiteConnection, None, None]:
    """Provide a connection to a temporary SQLite database, with table prefix."""
    with SQLiteConnection(temp_db_path, table_name_prefix="acme") as connection:
        yield connection


@pytest.fixture
def memory_connection() -> Generator[SQLiteConnection, None, None]:
    """Provide a connection to an in-memory SQLite database."""
    with SQLiteConnection() as connection:
        yield connection


@pytest.fixture
def mysql_connection() -> RecordingConnection:
    """Provide a MySQL connection double recording statements."""
    return RecordingConnection(Dialect.MYSQL)


@pytest.fixture
def sqlite_recording_connection() -> RecordingConnection:
    """Provide a SQLite connection double recording statements."""
    return RecordingConnection(Dialect.SQLITE)


@pytest.fixture
def models(db_connection: SQLiteConnection) -> Generator[ModelCollection, None, None]:
    """Provide the installed acme models, also set as default collection."""
    collection = ModelCollection(db_connection, acme_definitions())
    collection.install()
    set_default_models(collection)
    yield collection
    reset_default_models()

"""SQLite database connection implementation."""

import sqlite3
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from activerecord.config import ConnectionDefinition
from activerecord.database.interfaces.connection import DatabaseConnection
from activerecord.database.interfaces.table_renderer import TableRenderer
from activerecord.exceptions import ConnectionNotEstablished, StatementNotValid
from activerecord.log import get_logger, get_sql_logger
from activerecord.types import Dialect, RowType
from activerecord.utils import cast_values

from .table_renderer import SQLiteTableRenderer

logger = get_logger(__name__)
sql_logger = get_sql_logger()

MEMORY = ":memory:"


class SQLiteConnection(DatabaseConnection):
    """SQLite database connection implementation."""

    dialect = Dialect.SQLITE

    def __init__(
        self,
        db_path: str | Path | ConnectionDefinition = MEMORY,
        table_name_prefix: str = "",
    ) -> None:
        """Initialize SQLite connection.

        Args:
            db_path: Path to SQLite database file, ``:memory:``, or a complete
                connection definition
            table_name_prefix: Prefix of the table names, ignored when a
                definition is given
        """
        if isinstance(db_path, ConnectionDefinition):
            definition = db_path
        else:
            definition = ConnectionDefinition(
                dsn=f"sqlite:{db_path}", table_name_prefix=table_name_prefix
            )

        super().__init__(definition)
        self.db_path = definition.source
        self._connection: sqlite3.Connection | None = None
        self._last_insert_id: int | None = None

    def create_renderer(self) -> TableRenderer:
        return SQLiteTableRenderer()

    def connect(self) -> None:
        """Establish SQLite database connection."""
        try:
            if self.db_path != MEMORY:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self._connection = sqlite3.connect(self.db_path, timeout=30.0)
            self._connection.row_factory = sqlite3.Row
            self._configure_connection()
            logger.info(f"Connected to SQLite: {self.db_path}")
        except sqlite3.Error as e:
            logger.error(f"Failed to connect to SQLite database: {e}")
            raise

    def disconnect(self) -> None:
        """Close SQLite database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            logger.info("Disconnected from SQLite")

    @property
    def is_connected(self) -> bool:
        """Check if database is connected."""
        return self._connection is not None

    def _configure_connection(self) -> None:
        """Configure SQLite connection settings."""
        if not self._connection:
            return

        # Optimize for performance
        self._connection.execute("PRAGMA synchronous = NORMAL")
        # Enable foreign keys
        self._connection.execute("PRAGMA foreign_keys = ON")
        # Set busy timeout for better handling of concurrent access
        self._connection.execute("PRAGMA busy_timeout = 30000")

    def _cursor(self, statement: str, args: Sequence[Any]) -> sqlite3.Cursor:
        if not self._connection:
            raise ConnectionNotEstablished("Database not connected")

        args = cast_values(args)
        sql_logger.debug(f"{statement} {args}" if args else statement)

        try:
            cursor = self._connection.execute(statement, args)
            if self._connection.in_transaction:
                self._connection.commit()
            return cursor
        except sqlite3.Error as e:
            logger.error(f"Statement failed: {e}")
            if self._connection.in_transaction:
                self._connection.rollback()
            if _is_prepare_error(e):
                raise StatementNotValid(statement, original=e) from e
            raise StatementNotValid(statement, args, e) from e

    def execute(self, statement: str, args: Sequence[Any] = ()) -> list[RowType]:
        """Execute a statement and fetch its rows.

        Args:
            statement: SQL statement
            args: Statement arguments

        Returns:
            List of rows as dictionaries
        """
        cursor = self._cursor(statement, args)
        self._last_insert_id = cursor.lastrowid or self._last_insert_id
        return [dict(row) for row in cursor.fetchall()]

    def exec(self, statement: str, args: Sequence[Any] = ()) -> int:
        """Execute a statement that returns no rows.

        Args:
            statement: SQL statement
            args: Statement arguments

        Returns:
            Number of affected rows
        """
        cursor = self._cursor(statement, args)
        self._last_insert_id = cursor.lastrowid or self._last_insert_id
        return max(cursor.rowcount, 0)

    def last_insert_id(self) -> int | None:
        return self._last_insert_id

    def table_exists(self, table_name: str) -> bool:
        rows = self.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
            [table_name],
        )
        return bool(rows)

    def vacuum(self) -> None:
        """Rebuild the database file, reclaiming unused space."""
        self.exec("VACUUM")


def _is_prepare_error(error: sqlite3.Error) -> bool:
    """Whether the statement was rejected while being compiled.

    Syntax errors and references to unknown tables or columns are reported
    with the generic error code, before any argument is bound.
    """
    return getattr(error, "sqlite_errorcode", None) == sqlite3.SQLITE_ERROR

"""Database connection interface."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from types import TracebackType
from typing import Any

from activerecord.config import ConnectionDefinition
from activerecord.database.interfaces.table_renderer import TableRenderer
from activerecord.log import get_logger
from activerecord.schema import Schema
from activerecord.types import Dialect, RowType
from activerecord.utils import quote_identifier, quote_literal

logger = get_logger(__name__)


class DatabaseConnection(ABC):
    """Abstract database connection interface.

    A connection executes statements synchronously, one at a time. It is
    owned by a single worker and must be closed by its owner, preferably by
    using it as a context manager.
    """

    dialect: Dialect

    def __init__(self, definition: ConnectionDefinition) -> None:
        """Initialize database connection.

        Args:
            definition: Definition of the connection
        """
        self.definition = definition
        self._renderer: TableRenderer | None = None

    @property
    def id(self) -> str:
        return self.definition.id

    @property
    def table_name_prefix(self) -> str:
        """Get the prefix of the table names, separator included."""
        return self.definition.prefix

    @property
    def charset(self) -> str:
        return self.definition.charset

    @property
    def collate(self) -> str:
        return self.definition.collate

    @property
    def renderer(self) -> TableRenderer:
        """Get the table renderer matching the dialect of the connection."""
        if self._renderer is None:
            self._renderer = self.create_renderer()
        return self._renderer

    @abstractmethod
    def create_renderer(self) -> TableRenderer:
        """Create the table renderer of the dialect."""
        pass

    @abstractmethod
    def connect(self) -> None:
        """Establish database connection."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close database connection."""
        pass

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Check if connection is active."""
        pass

    @abstractmethod
    def execute(self, statement: str, args: Sequence[Any] = ()) -> list[RowType]:
        """Execute a statement and fetch its rows.

        Args:
            statement: SQL statement
            args: Arguments bound to the placeholders of the statement

        Returns:
            List of rows as dictionaries, empty when the statement returns none

        Raises:
            StatementNotValid: If the database rejects the statement
        """
        pass

    @abstractmethod
    def exec(self, statement: str, args: Sequence[Any] = ()) -> int:
        """Execute a statement that returns no rows.

        Args:
            statement: SQL statement
            args: Arguments bound to the placeholders of the statement

        Returns:
            Number of affected rows

        Raises:
            StatementNotValid: If the database rejects the statement
        """
        pass

    @abstractmethod
    def last_insert_id(self) -> int | None:
        """Get the identifier generated by the last INSERT statement."""
        pass

    @abstractmethod
    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists.

        Args:
            table_name: Name of the table, prefix included
        """
        pass

    def quote_identifier(self, identifier: str) -> str:
        return quote_identifier(identifier)

    def quote_literal(self, value: Any) -> str:
        return quote_literal(value)

    def create_table(self, table_name: str, schema: Schema) -> None:
        """Create a table and its indexes.

        Args:
            table_name: Name of the table, prefix included
            schema: Schema of the table
        """
        self.exec(self.renderer.render_create_table(schema, table_name))

        for statement in self.renderer.render_create_indexes(schema, table_name):
            self.exec(statement)

        logger.info(f"Created table: {table_name}")

    def drop_table(self, table_name: str, if_exists: bool = False) -> None:
        """Drop a table.

        Args:
            table_name: Name of the table, prefix included
            if_exists: Whether a missing table is ignored
        """
        self.exec(self.renderer.render_drop_table(table_name, if_exists))
        logger.info(f"Dropped table: {table_name}")

    def __enter__(self) -> "DatabaseConnection":
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Context manager exit."""
        self.disconnect()

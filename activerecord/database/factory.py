"""Factories of connections and table renderers."""

from typing import Any

from activerecord.config import ConnectionDefinition
from activerecord.exceptions import DriverNotDefined
from activerecord.log import get_logger
from activerecord.types import Dialect

from .implementations import MySQLTableRenderer, SQLiteConnection, SQLiteTableRenderer
from .interfaces import DatabaseConnection, TableRenderer

logger = get_logger(__name__)


def renderer_for_dialect(dialect: Dialect | str, **options: Any) -> TableRenderer:
    """Create the table renderer of a dialect.

    Args:
        dialect: SQL dialect, e.g. ``mysql``
        **options: Renderer options, ``charset`` and ``collate`` for MySQL

    Returns:
        Table renderer instance

    Raises:
        DriverNotDefined: If the dialect is not supported
    """
    try:
        dialect = Dialect(dialect)
    except ValueError as e:
        raise DriverNotDefined(str(dialect)) from e

    if dialect == Dialect.MYSQL:
        return MySQLTableRenderer(**options)

    return SQLiteTableRenderer()


def create_connection(definition: ConnectionDefinition) -> DatabaseConnection:
    """Create a connection from its definition, the connection is not opened.

    Args:
        definition: Connection definition

    Returns:
        Database connection instance

    Raises:
        DriverNotDefined: If no connection is available for the driver
    """
    if definition.driver_name != Dialect.SQLITE.value:
        raise DriverNotDefined(definition.driver_name)

    logger.debug(f"Creating connection `{definition.id}`: {definition.dsn}")
    return SQLiteConnection(definition)

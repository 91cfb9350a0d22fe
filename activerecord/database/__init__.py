"""Database connections and DDL rendering."""

from .factory import create_connection, renderer_for_dialect
from .implementations import MySQLTableRenderer, SQLiteConnection, SQLiteTableRenderer
from .interfaces import DatabaseConnection, TableRenderer

__all__ = [
    "DatabaseConnection",
    "MySQLTableRenderer",
    "SQLiteConnection",
    "SQLiteTableRenderer",
    "TableRenderer",
    "create_connection",
    "renderer_for_dialect",
]

"""Database implementations package."""

from .mysql import MySQLTableRenderer
from .sqlite import SQLiteConnection, SQLiteTableRenderer

__all__ = [
    "MySQLTableRenderer",
    "SQLiteConnection",
    "SQLiteTableRenderer",
]

"""SQLite database implementation package."""

from .sqlite_connection import SQLiteConnection
from .table_renderer import SQLiteTableRenderer

__all__ = [
    "SQLiteConnection",
    "SQLiteTableRenderer",
]

"""MySQL implementation package, rendering only."""

from .table_renderer import MySQLTableRenderer

__all__ = [
    "MySQLTableRenderer",
]

"""Database interfaces module."""

from .connection import DatabaseConnection
from .table_renderer import TableRenderer

__all__ = [
    "DatabaseConnection",
    "TableRenderer",
]

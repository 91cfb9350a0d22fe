"""Schema declaration: columns, indexes, primary keys."""

from .builder import SchemaBuilder
from .columns import (
    BelongsTo,
    Blob,
    Boolean,
    Character,
    Column,
    Date,
    DateTime,
    Decimal,
    Integer,
    Serial,
    Text,
    Time,
    Timestamp,
)
from .index import Index
from .schema import Schema

__all__ = [
    "BelongsTo",
    "Blob",
    "Boolean",
    "Character",
    "Column",
    "Date",
    "DateTime",
    "Decimal",
    "Index",
    "Integer",
    "Schema",
    "SchemaBuilder",
    "Serial",
    "Text",
    "Time",
    "Timestamp",
]

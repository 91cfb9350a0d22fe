"""Utility functions shared by the query builder, the model and the renderers."""

from collections.abc import Iterable
from datetime import UTC, date, datetime
from typing import Any

import inflect

from .constants import DATE_DB_FORMAT, DATETIME_DB_FORMAT
from .log import get_logger

logger = get_logger(__name__)

_inflect = inflect.engine()


def utc_now() -> datetime:
    """Get the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def to_utc(value: datetime) -> datetime:
    """Convert a datetime to UTC, naive datetimes are assumed to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_datetime(value: str | int | float | date) -> datetime:
    """Parse a stored or user-supplied value into an aware UTC datetime.

    Args:
        value: A datetime, a date, a timestamp, or a string in ISO8601 or
            database format

    Returns:
        Aware datetime in UTC

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return to_utc(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)

    if isinstance(value, int | float):
        return datetime.fromtimestamp(value, UTC)

    text = value.strip()

    try:
        return to_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass

    for fmt in (DATETIME_DB_FORMAT, DATE_DB_FORMAT):
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=UTC)
        except ValueError:
            continue

    logger.warning(f"Could not parse date: {value}")
    raise ValueError(f"Unable to parse datetime: {value!r}")


def cast_value(value: Any) -> Any:
    """Convert a Python value into a value the database driver can bind.

    Datetimes are stored in UTC using the database format, dates using the
    date format, booleans as 0 or 1.
    """
    if isinstance(value, datetime):
        return to_utc(value).strftime(DATETIME_DB_FORMAT)

    if isinstance(value, date):
        return value.strftime(DATE_DB_FORMAT)

    if value is True:
        return 1

    if value is False:
        return 0

    return value


def cast_values(values: Iterable[Any]) -> list[Any]:
    """Convert each value with :func:`cast_value`."""
    return [cast_value(value) for value in values]


def quote_identifier(identifier: str) -> str:
    """Quote an identifier with backticks, both MySQL and SQLite accept them.

    Qualified identifiers such as ``alias.column`` are quoted part by part.
    """
    return ".".join(f"`{part}`" for part in identifier.split("."))


def quote_literal(value: Any) -> str:
    """Quote a literal value without the help of a connection.

    Numbers are returned as is, strings are wrapped in single quotes with
    inner single quotes doubled.
    """
    value = cast_value(value)

    if value is None:
        return "NULL"

    if isinstance(value, int | float):
        return str(value)

    text = str(value).replace("'", "''")
    return f"'{text}'"


def singularize(word: str) -> str:
    """Singularize a model identifier, e.g. ``categories`` to ``category``.

    Words that are already singular are returned as is.
    """
    return _inflect.singular_noun(word) or word


def flatten_keys(keys: tuple[Any, ...]) -> list[Any]:
    """Normalize ``find(k)``, ``find(k1, k2)`` and ``find([k1, k2])`` arguments.

    Returns:
        List of keys
    """
    if len(keys) == 1 and isinstance(keys[0], list | set | frozenset):
        return list(keys[0])
    return list(keys)

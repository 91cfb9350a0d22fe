"""Temporal record properties.

Properties are composed by name on the record class::

    class Article(ActiveRecord):
        date = TemporalProperty()
        created_at = TemporalProperty(on_create=True)
        updated_at = TemporalProperty(on_update=True)
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .utils import parse_datetime, to_utc, utc_now

NOW = "now"


class TemporalProperty:
    """Date and time property of a record.

    The raw value is None, the token ``"now"``, or a stored value (a
    datetime, a timestamp, or a string in ISO or database format). Reading
    the property normalizes the raw value to an aware UTC datetime and keeps
    the normalized value, so ``"now"`` is resolved once.
    """

    def __init__(self, on_create: bool = False, on_update: bool = False) -> None:
        """Initialize the property.

        Args:
            on_create: Whether an empty property is set to now before a save
            on_update: Whether the property is set to now before every save
        """
        self.name = ""
        self.on_create = on_create
        self.on_update = on_update

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self

        value = instance.__dict__.get(self.name)

        if value is None:
            return None

        if not isinstance(value, datetime) or value.tzinfo is None:
            value = utc_now() if value == NOW else parse_datetime(value)
            instance.__dict__[self.name] = value

        return value

    def __set__(self, instance: Any, value: Any) -> None:
        if isinstance(value, datetime):
            value = to_utc(value)

        instance.__dict__[self.name] = value

    def ensure_not_empty(self, instance: Any, value: Any = NOW) -> None:
        """Set a value when the property is empty."""
        if instance.__dict__.get(self.name) is None:
            self.__set__(instance, value)

    def before_save(self, instance: Any) -> None:
        if self.on_update:
            self.__set__(instance, NOW)
        elif self.on_create:
            self.ensure_not_empty(instance)


def temporal_properties(record_class: type) -> dict[str, TemporalProperty]:
    """Get the temporal properties of a record class, by name."""
    properties: dict[str, TemporalProperty] = {}

    for cls in reversed(record_class.__mro__):
        for name, attribute in vars(cls).items():
            if isinstance(attribute, TemporalProperty):
                properties[name] = attribute

    return properties

"""Per-model identity cache of records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .log import get_logger

if TYPE_CHECKING:
    from .record import ActiveRecord

logger = get_logger(__name__)


class RuntimeRecordCache:
    """Keep the records fetched by a model, keyed by their primary key.

    The cache lives as long as its model and is not synchronized. Composite
    keys are stored as tuples of their column values.
    """

    def __init__(self, primary: str | tuple[str, ...] | None) -> None:
        self.primary = primary
        self._records: dict[Any, ActiveRecord] = {}

    def key_of(self, record: ActiveRecord) -> Any:
        """Get the cache key of a record."""
        if self.primary is None:
            return None

        if isinstance(self.primary, str):
            return getattr(record, self.primary, None)

        return tuple(getattr(record, column, None) for column in self.primary)

    def store(self, record: ActiveRecord) -> ActiveRecord:
        """Store a record, records without a primary key value are not stored."""
        key = self.key_of(record)

        if key is None or (isinstance(key, tuple) and None in key):
            return record

        self._records[key] = record
        return record

    def retrieve(self, key: Any) -> ActiveRecord | None:
        return self._records.get(_normalize_key(key))

    def eliminate(self, key: Any) -> None:
        """Evict a key, missing keys are ignored."""
        if self._records.pop(_normalize_key(key), None) is not None:
            logger.debug(f"Evicted record `{key}` from cache")

    def clear(self) -> None:
        self._records.clear()

    def __contains__(self, key: Any) -> bool:
        return _normalize_key(key) in self._records

    def __len__(self) -> int:
        return len(self._records)


def _normalize_key(key: Any) -> Any:
    if isinstance(key, list):
        return tuple(key)

    return key

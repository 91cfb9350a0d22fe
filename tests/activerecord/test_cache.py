"""Tests for the runtime record cache."""

from types import SimpleNamespace

import pytest

from activerecord import RuntimeRecordCache


def make_record(**properties: object) -> SimpleNamespace:
    return SimpleNamespace(**properties)


class TestRuntimeRecordCache:
    """Test the identity cache."""

    @pytest.fixture
    def cache(self) -> RuntimeRecordCache:
        return RuntimeRecordCache("id")

    def test_store_and_retrieve(self, cache: RuntimeRecordCache) -> None:
        record = make_record(id=1)

        assert cache.store(record) is record
        assert cache.retrieve(1) is record
        assert 1 in cache
        assert len(cache) == 1
        assert cache.retrieve(2) is None

    def test_store_replaces(self, cache: RuntimeRecordCache) -> None:
        cache.store(make_record(id=1))
        record = cache.store(make_record(id=1))

        assert cache.retrieve(1) is record
        assert len(cache) == 1

    def test_records_without_key_are_not_stored(self, cache: RuntimeRecordCache) -> None:
        cache.store(make_record(title="a"))
        cache.store(make_record(id=None))

        assert len(cache) == 0

    def test_eliminate(self, cache: RuntimeRecordCache) -> None:
        cache.store(make_record(id=1))
        cache.eliminate(1)
        cache.eliminate(2)

        assert 1 not in cache

    def test_clear(self, cache: RuntimeRecordCache) -> None:
        cache.store(make_record(id=1))
        cache.store(make_record(id=2))
        cache.clear()

        assert len(cache) == 0

    def test_composite_keys(self) -> None:
        cache = RuntimeRecordCache(("article_id", "tag"))
        record = make_record(article_id=1, tag="pop")

        cache.store(record)
        cache.store(make_record(article_id=1))

        assert cache.key_of(record) == (1, "pop")
        assert cache.retrieve((1, "pop")) is record
        assert cache.retrieve([1, "pop"]) is record
        assert len(cache) == 1

        cache.eliminate([1, "pop"])
        assert (1, "pop") not in cache

    def test_without_primary(self) -> None:
        cache = RuntimeRecordCache(None)
        cache.store(make_record(id=1))

        assert len(cache) == 0

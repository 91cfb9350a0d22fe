"""Tests for utility functions."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from activerecord.utils import (
    cast_value,
    cast_values,
    flatten_keys,
    parse_datetime,
    quote_identifier,
    quote_literal,
    singularize,
    to_utc,
    utc_now,
)


class TestDatetimes:
    """Test datetime helpers."""

    def test_utc_now_is_aware(self) -> None:
        assert utc_now().tzinfo is UTC

    def test_to_utc(self) -> None:
        paris = timezone(timedelta(hours=2))

        assert to_utc(datetime(2024, 1, 1, 12, tzinfo=paris)) == datetime(
            2024, 1, 1, 10, tzinfo=UTC
        )
        assert to_utc(datetime(2024, 1, 1, 12)).tzinfo is UTC

    @pytest.mark.parametrize(
        "value",
        [
            "1958-08-16 07:05:00",
            "1958-08-16T07:05:00",
            "1958-08-16T07:05:00Z",
            "1958-08-16T09:05:00+02:00",
            datetime(1958, 8, 16, 7, 5),
        ],
    )
    def test_parse_datetime(self, value: object) -> None:
        assert parse_datetime(value) == datetime(1958, 8, 16, 7, 5, tzinfo=UTC)  # type: ignore[arg-type]

    def test_parse_timestamp(self) -> None:
        assert parse_datetime(0) == datetime(1970, 1, 1, tzinfo=UTC)

    def test_parse_date(self) -> None:
        assert parse_datetime(date(1958, 8, 16)) == datetime(1958, 8, 16, tzinfo=UTC)
        assert parse_datetime("1958-08-16") == datetime(1958, 8, 16, tzinfo=UTC)

    def test_parse_datetime_not_valid(self) -> None:
        with pytest.raises(ValueError, match="Unable to parse datetime"):
            parse_datetime("yesterday")


class TestCasting:
    """Test the conversion of bound values."""

    def test_cast_value(self) -> None:
        paris = timezone(timedelta(hours=2))

        assert cast_value(datetime(2024, 1, 1, 12, tzinfo=paris)) == "2024-01-01 10:00:00"
        assert cast_value(date(2024, 1, 1)) == "2024-01-01"
        assert cast_value(True) == 1
        assert cast_value(False) == 0
        assert cast_value(None) is None
        assert cast_value("text") == "text"
        assert cast_value(1.5) == 1.5

    def test_cast_values(self) -> None:
        assert cast_values([True, "a", 2]) == [1, "a", 2]


class TestQuoting:
    """Test identifier and literal quoting."""

    @pytest.mark.parametrize(
        "identifier,expected",
        [("title", "`title`"), ("article.title", "`article`.`title`")],
    )
    def test_quote_identifier(self, identifier: str, expected: str) -> None:
        assert quote_identifier(identifier) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, "NULL"),
            (42, "42"),
            (1.5, "1.5"),
            (True, "1"),
            ("madonna", "'madonna'"),
            ("it's", "'it''s'"),
            (date(2024, 1, 1), "'2024-01-01'"),
        ],
    )
    def test_quote_literal(self, value: object, expected: str) -> None:
        assert quote_literal(value) == expected


def test_singularize() -> None:
    assert singularize("articles") == "article"
    assert singularize("categories") == "category"
    assert singularize("physicians") == "physician"
    assert singularize("article") == "article"


def test_flatten_keys() -> None:
    assert flatten_keys((1,)) == [1]
    assert flatten_keys((1, 2)) == [1, 2]
    assert flatten_keys(([1, 2],)) == [1, 2]
    assert flatten_keys(((1, "pop"),)) == [(1, "pop")]

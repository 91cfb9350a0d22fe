"""Tests for models: lookups, writes and the identity cache."""

import pytest

from activerecord import Model, ModelCollection, Query
from activerecord.exceptions import RecordNotFound

from tests.acme import TAGS_SCHEMA, Article, ArticleQuery, RecordingConnection, make_model


@pytest.fixture
def articles(models: ModelCollection) -> Model:
    return models["articles"]


@pytest.fixture
def article_ids(articles: Model) -> list[int]:
    return [
        articles.save({"title": "madonna", "rating": 5, "is_online": True}),
        articles.save({"title": "prince", "rating": 4, "is_online": True}),
        articles.save({"title": "bowie", "rating": 5, "is_online": False}),
    ]


class TestModelAttributes:
    """Test model construction."""

    def test_defaults(self, mysql_connection: RecordingConnection) -> None:
        model = Model("articles", TAGS_SCHEMA, mysql_connection)

        assert model.table_name == "articles"
        assert model.alias == "article"
        assert model.primary == ("article_id", "tag")
        assert model.query_class is Query
        assert model.models["articles"] is model
        assert repr(model) == "<Model articles>"

    def test_table_name_prefix(self) -> None:
        connection = RecordingConnection(table_name_prefix="acme")
        model = Model("articles", TAGS_SCHEMA, connection, table_name="posts", alias="p")

        assert model.table_name == "acme_posts"
        assert model.alias == "p"

    def test_query_class(self, mysql_connection: RecordingConnection) -> None:
        assert isinstance(make_model(mysql_connection).query(), ArticleQuery)


class TestFind:
    """Test lookups by primary key."""

    def test_find_one(self, articles: Model, article_ids: list[int]) -> None:
        record = articles.find(article_ids[0])

        assert isinstance(record, Article)
        assert record.title == "madonna"
        assert record.model is articles
        assert articles.find(article_ids[0]) is record
        assert articles[article_ids[0]] is record

    def test_find_one_missing(self, articles: Model) -> None:
        with pytest.raises(RecordNotFound, match="Record `999` does not exist") as exc_info:
            articles.find(999)

        assert exc_info.value.records == {999: None}

    def test_find_many(self, articles: Model, article_ids: list[int]) -> None:
        first, second, third = article_ids
        cached = articles.find(second)

        records = articles.find(third, 999, second)

        assert list(records) == [third, 999, second]
        assert records[third].title == "bowie"
        assert records[999] is None
        assert records[second] is cached
        assert articles.find([first, third])[third] is records[third]

    def test_find_many_keys_as_strings(self, articles: Model, article_ids: list[int]) -> None:
        first, second, _ = article_ids

        records = articles.find([str(first), str(second), "999"])

        assert list(records) == [str(first), str(second), "999"]
        assert records[str(first)].title == "madonna"
        assert records[str(second)].title == "prince"
        assert records["999"] is None
        assert articles.find(first) is records[str(first)]

    def test_find_many_all_missing(self, articles: Model, article_ids: list[int]) -> None:
        with pytest.raises(RecordNotFound) as exc_info:
            articles.find(998, 999)

        assert exc_info.value.records == {998: None, 999: None}

    def test_find_requires_a_key(self, articles: Model) -> None:
        with pytest.raises(TypeError):
            articles.find()

    def test_find_many_single_statement(self, mysql_connection: RecordingConnection) -> None:
        model = make_model(mysql_connection)
        mysql_connection.results = [[{"id": 2, "title": "b"}, {"id": 1, "title": "a"}]]

        records = model.find(1, 2)

        assert mysql_connection.statements == [
            ("SELECT * FROM `articles` `article` WHERE (`id` IN(1,2))", [])
        ]
        assert [record.title for record in records.values()] == ["a", "b"]

    def test_find_composite_key(self, models: ModelCollection) -> None:
        tags = models["tags"]
        tags.insert({"article_id": 1, "tag": "pop", "weight": 3})
        tags.insert({"article_id": 1, "tag": "rock"})

        record = tags.find((1, "pop"))

        assert record.weight == 3
        assert record.key == (1, "pop")
        assert tags.find((1, "pop")) is record
        assert tags.find((1, "pop"), (1, "jazz"))[(1, "jazz")] is None

        with pytest.raises(ValueError, match="expects keys of 2 values"):
            tags.find(1)


class TestCache:
    """Test the identity cache through the model."""

    def test_save_evicts(self, articles: Model, article_ids: list[int]) -> None:
        key = article_ids[0]
        record = articles.find(key)

        assert articles.save({"title": "like a prayer"}, key) == key
        assert key not in articles.cache

        fresh = articles.find(key)
        assert fresh is not record
        assert fresh.title == "like a prayer"
        assert record.title == "madonna"

    def test_delete_evicts(self, articles: Model, article_ids: list[int]) -> None:
        key = article_ids[0]
        articles.find(key)

        assert articles.delete(key) is True
        assert key not in articles.cache
        assert articles.delete(key) is False

        with pytest.raises(RecordNotFound):
            articles.find(key)

    def test_query_delete_clears_cache(self, articles: Model, article_ids: list[int]) -> None:
        key = article_ids[0]
        articles.find(key)
        articles.find(article_ids[1])

        assert articles.where({"title": "madonna"}).delete() == 1
        assert len(articles.cache) == 0

        with pytest.raises(RecordNotFound):
            articles.find(key)

        assert articles.find(article_ids[1]).title == "prince"

    def test_query_delete_with_join_clears_cache(self, models: ModelCollection) -> None:
        articles = models["articles"]
        category = models["categories"].save({"name": "old"})
        key = articles.save({"title": "a", "category_id": category})
        articles.find(key)

        assert articles.join(with_="categories").where({"name": "old"}).delete() == 1

        with pytest.raises(RecordNotFound):
            articles.find(key)

    def test_item_deletion(self, articles: Model, article_ids: list[int]) -> None:
        key = article_ids[1]

        assert key in articles
        del articles[key]
        assert key not in articles

    def test_uninstall_clears_cache(self, articles: Model, article_ids: list[int]) -> None:
        articles.find(article_ids[0])
        articles.uninstall()

        assert len(articles.cache) == 0
        assert not articles.is_installed()


class TestWrites:
    """Test write statements."""

    def test_save_returns_generated_key(self, articles: Model) -> None:
        first = articles.save({"title": "a"})
        second = articles.save({"title": "b"})

        assert second == first + 1

    def test_insert_mysql(self, mysql_connection: RecordingConnection) -> None:
        model = make_model(mysql_connection)

        assert model.insert({"title": "a", "rating": 3, "unknown": 1}) == 1
        assert mysql_connection.statements[-1] == (
            "INSERT INTO `articles` SET `title` = ?, `rating` = ?",
            ["a", 3],
        )

        model.insert({"id": 1, "title": "a", "is_online": True}, on_duplicate=True)
        assert mysql_connection.statements[-1] == (
            "INSERT INTO `articles` SET `id` = ?, `title` = ?, `is_online` = ?"
            " ON DUPLICATE KEY UPDATE `title` = ?, `is_online` = ?",
            [1, "a", 1, "a", 1],
        )

        model.insert({"title": "a"}, ignore=True)
        assert mysql_connection.last_statement == "INSERT IGNORE INTO `articles` SET `title` = ?"

    def test_insert_sqlite(self, sqlite_recording_connection: RecordingConnection) -> None:
        model = make_model(sqlite_recording_connection)

        model.insert({"title": "a", "rating": 3})
        assert sqlite_recording_connection.statements[-1] == (
            "INSERT INTO `articles` (`title`, `rating`) VALUES (?, ?)",
            ["a", 3],
        )

        model.insert({"id": 1, "title": "a"}, on_duplicate=True)
        assert sqlite_recording_connection.last_statement == (
            "INSERT INTO `articles` (`id`, `title`) VALUES (?, ?)"
            " ON CONFLICT(`id`) DO UPDATE SET `title` = excluded.`title`"
        )

        model.insert({"id": 1}, on_duplicate=True)
        assert sqlite_recording_connection.last_statement == (
            "INSERT INTO `articles` (`id`) VALUES (?) ON CONFLICT(`id`) DO NOTHING"
        )

        model.insert({"title": "a"}, ignore=True)
        assert sqlite_recording_connection.last_statement == (
            "INSERT OR IGNORE INTO `articles` (`title`) VALUES (?)"
        )

        model.insert({})
        assert sqlite_recording_connection.last_statement == (
            "INSERT INTO `articles` DEFAULT VALUES"
        )

    def test_upsert_sqlite(self, articles: Model, article_ids: list[int]) -> None:
        key = article_ids[0]
        articles.insert({"id": key, "title": "updated"}, on_duplicate=True)
        articles.insert({"id": key, "title": "ignored"}, ignore=True)

        assert articles.find(key).title == "updated"
        assert articles.count() == 3

    def test_update(self, mysql_connection: RecordingConnection) -> None:
        model = make_model(mysql_connection)

        assert model.update({"title": "b", "unknown": 1}, 1) == 1
        assert mysql_connection.statements[-1] == (
            "UPDATE `articles` SET `title` = ? WHERE `id` = ?",
            ["b", 1],
        )

        assert model.update({"unknown": 1}, 1) == 0
        assert len(mysql_connection.statements) == 1

    def test_delete_composite_key(self, mysql_connection: RecordingConnection) -> None:
        tags = make_model(mysql_connection, "tags", TAGS_SCHEMA)

        assert tags.delete((1, "pop")) is True
        assert mysql_connection.statements[-1] == (
            "DELETE FROM `tags` WHERE `article_id` = ? AND `tag` = ?",
            [1, "pop"],
        )

    def test_truncate_mysql(self, mysql_connection: RecordingConnection) -> None:
        make_model(mysql_connection).truncate()

        assert mysql_connection.last_statement == "TRUNCATE TABLE `articles`"

    def test_truncate_sqlite(self, articles: Model, article_ids: list[int]) -> None:
        articles.find(article_ids[0])
        articles.truncate()

        assert articles.count() == 0
        assert len(articles.cache) == 0


class TestQueriesOnSQLite:
    """Test queries executed by SQLite."""

    def test_where_and_count(self, articles: Model, article_ids: list[int]) -> None:
        assert articles.count() == 3
        assert articles.where({"is_online": True}).count() == 2
        assert articles.count("rating") == {4: 1, 5: 2}
        assert articles.online().rated(5).count() == 1

    def test_aggregates(self, articles: Model, article_ids: list[int]) -> None:
        assert articles.maximum("rating") == 5
        assert articles.minimum("rating") == 4
        assert articles.sum("rating") == 14

    def test_pairs_and_rc(self, articles: Model, article_ids: list[int]) -> None:
        assert articles.select("id, title").pairs() == dict(
            zip(article_ids, ["madonna", "prince", "bowie"])
        )
        assert articles.select("title").order("-id").rc() == "bowie"

    def test_explicit_order(self, articles: Model, article_ids: list[int]) -> None:
        first, second, third = article_ids
        rows = articles.select("id").order("id", [third, first, second]).all()

        assert [row["id"] for row in rows] == [third, first, second]

    def test_offset_without_limit(self, articles: Model, article_ids: list[int]) -> None:
        records = articles.order("id").offset(1).all()

        assert [record.id for record in records] == article_ids[1:]

    def test_exists(self, articles: Model, article_ids: list[int]) -> None:
        first = article_ids[0]

        assert articles.exists() is True
        assert articles.where({"rating": 1}).exists() is False
        assert articles.exists(first) is True
        assert articles.exists(first, 999) == {first: True, 999: False}
        assert articles.exists(article_ids) is True

    def test_delete_with_join(self, models: ModelCollection, articles: Model) -> None:
        categories = models["categories"]
        old = categories.save({"name": "old"})
        new = categories.save({"name": "new"})
        articles.save({"title": "a", "category_id": old})
        articles.save({"title": "b", "category_id": new})

        deleted = articles.join(with_="categories").where({"name": "old"}).delete()

        assert deleted == 1
        assert [record.title for record in articles.all()] == ["b"]

    def test_datetime_round_trip(self, articles: Model) -> None:
        key = articles.save({"title": "a", "date": "1958-08-16 07:05:00"})
        record = articles.find(key)

        assert record.date.year == 1958
        assert record.date.tzinfo is not None


"""Models: the table-level half of the active record pattern.

A model binds a schema to a table, a connection, and a record class. It finds,
inserts, updates and deletes rows, and keeps the records it found in an
identity cache.

A model may extend a parent model. Its rows are then spread over its table
and the tables of its ancestors, which share the primary key: queries join
the ancestors, and new rows get their key from the root of the lineage.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from functools import partial
from typing import TYPE_CHECKING, Any

from .cache import RuntimeRecordCache
from .database.interfaces import DatabaseConnection
from .exceptions import RecordNotFound, SchemaNotValid, ScopeNotDefined
from .log import get_logger
from .query import Query
from .relations import RelationCollection
from .schema import Schema
from .types import ArgsType, Dialect, KeyType, PrimaryType, RowType
from .utils import cast_value, cast_values, flatten_keys, quote_identifier, singularize

if TYPE_CHECKING:
    from .models import HasManyDefinition, ModelCollection
    from .record import ActiveRecord

logger = get_logger(__name__)

ScopeType = Callable[..., Query]


class Model:
    """A table, its schema and the records stored in it."""

    def __init__(
        self,
        id: str,
        schema: Schema,
        connection: DatabaseConnection,
        record_class: type[ActiveRecord] | None = None,
        query_class: type[Query] | None = None,
        table_name: str | None = None,
        alias: str | None = None,
        scopes: Mapping[str, ScopeType] | None = None,
        has_many: Sequence[HasManyDefinition] = (),
        models: ModelCollection | None = None,
        parent: Model | None = None,
    ) -> None:
        """Initialize a model and register it in its collection.

        Args:
            id: Identifier of the model, e.g. ``articles``
            schema: Schema of the table
            connection: Connection the statements are executed on
            record_class: Class of the records, :class:`ActiveRecord` by default
            query_class: Class of the queries, :class:`Query` by default
            table_name: Name of the table without prefix, the identifier by default
            alias: Alias of the table in queries, the singular identifier by default
            scopes: Named query scopes
            has_many: Has-many relations of the model
            models: Collection the model belongs to, a new collection on the
                same connection by default
            parent: Model extended by this model, both share the primary key

        Raises:
            ModelAlreadyInstantiated: If the collection already holds a model
                with the same identifier
            SchemaNotValid: If the primary key differs from the parent's
        """
        from .record import ActiveRecord

        if models is None:
            from .models import ModelCollection

            models = ModelCollection(connection)

        if parent is not None and (
            not isinstance(schema.primary, str) or schema.primary != parent.primary
        ):
            raise SchemaNotValid(
                f"Model `{id}` extends `{parent.id}`, it must have the same single"
                f" primary key, given: {schema.primary!r}"
            )

        self.id = id
        self.schema = schema
        self.connection = connection
        self.record_class = record_class or ActiveRecord
        self.query_class = query_class or Query
        self.table_name = connection.table_name_prefix + (table_name or id)
        self.alias = alias or singularize(id)
        self.scopes = dict(scopes or {})
        self.models = models
        self.parent = parent
        self.cache = RuntimeRecordCache(schema.primary)
        self._has_many = tuple(has_many)
        self._relations: RelationCollection | None = None
        self._extended_schema: Schema | None = None

        models.register(self)
        logger.debug(f"Instantiated model `{id}` on table `{self.table_name}`")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"

    @property
    def primary(self) -> PrimaryType:
        return self.schema.primary

    @property
    def ancestors(self) -> list[Model]:
        """Get the parent, the parent of the parent, and so on."""
        ancestors = []
        parent = self.parent

        while parent is not None:
            ancestors.append(parent)
            parent = parent.parent

        return ancestors

    @property
    def extended_schema(self) -> Schema:
        """Get the columns of the model and of its ancestors, the root's first."""
        if self.parent is None:
            return self.schema

        if self._extended_schema is None:
            columns: dict[str, Any] = {}

            for model in reversed([self, *self.ancestors]):
                columns.update(model.schema.columns)

            self._extended_schema = Schema(columns, primary=self.primary)

        return self._extended_schema

    @property
    def parent_joins(self) -> str:
        """Get the joins of the ancestor tables, empty without parent."""
        using = quote_identifier(self.primary) if self.parent else ""
        return "".join(
            f" INNER JOIN {quote_identifier(model.table_name)}"
            f" {quote_identifier(model.alias)} USING({using})"
            for model in self.ancestors
        )

    @property
    def generates_keys(self) -> bool:
        """Whether the keys are generated by the database, on the root of the lineage."""
        if self.parent is not None:
            return self.parent.generates_keys

        return self.primary is not None and self.schema.serial_column == self.primary

    @property
    def relations(self) -> RelationCollection:
        """Get the relations of the model, they are built on first access."""
        if self._relations is None:
            self._relations = RelationCollection(self, self._has_many)
        return self._relations

    # Scopes

    def resolve_scope(self, name: str) -> ScopeType | None:
        """Get a scope by name.

        Scopes are looked up in the ``scopes`` mapping, then as
        ``scope_<name>`` methods of the query class, then as ``scope_<name>``
        methods of the model. A scope is called with the query as its first
        argument.
        """
        if name in self.scopes:
            return self.scopes[name]

        method = getattr(self.query_class, f"scope_{name}", None)

        if method is not None:
            return method

        method = getattr(type(self), f"scope_{name}", None)

        if method is not None:
            return partial(method, self)

        return None

    def __getattr__(self, name: str) -> Callable[..., Query]:
        if name.startswith("_") or "scopes" not in self.__dict__:
            raise AttributeError(name)

        if name.startswith("filter_by_"):
            return getattr(self.query(), name)

        if self.resolve_scope(name) is None:
            raise ScopeNotDefined(name, self)

        return partial(self.query().scope, name)

    # Queries

    def query(self) -> Query:
        """Create a query on the table of the model."""
        return self.query_class(self)

    def select(self, expression: str) -> Query:
        return self.query().select(expression)

    def where(self, conditions: str | Mapping[str, Any], *args: Any) -> Query:
        return self.query().where(conditions, *args)

    and_ = where

    def filter_by(self, **columns: Any) -> Query:
        return self.query().filter_by(**columns)

    def join(self, expression: str | None = None, **options: Any) -> Query:
        return self.query().join(expression, **options)

    def group(self, expression: str) -> Query:
        return self.query().group(expression)

    def having(self, conditions: str | Mapping[str, Any], *args: Any) -> Query:
        return self.query().having(conditions, *args)

    def order(self, expression: str, *explicit_values: Any) -> Query:
        return self.query().order(expression, *explicit_values)

    def limit(self, limit: int, *args: int) -> Query:
        return self.query().limit(limit, *args)

    def offset(self, offset: int) -> Query:
        return self.query().offset(offset)

    def all(self) -> list[Any]:
        return self.query().all()

    def one(self) -> Any:
        return self.query().one()

    first = one

    def count(self, column: str | None = None) -> int | dict[Any, int]:
        return self.query().count(column)

    def average(self, column: str) -> Any:
        return self.query().average(column)

    def minimum(self, column: str) -> Any:
        return self.query().minimum(column)

    def maximum(self, column: str) -> Any:
        return self.query().maximum(column)

    def sum(self, column: str) -> Any:
        return self.query().sum(column)

    def pairs(self) -> dict[Any, Any]:
        return self.query().pairs()

    def exists(self, *keys: Any) -> bool | dict[Any, bool]:
        """Check if records exist, see :meth:`Query.exists`."""
        return self.query().exists(*keys)

    # Records

    def new(self, **properties: Any) -> ActiveRecord:
        """Create a record of the model, the record is not saved."""
        return self.record_class(self, **properties)

    def record_from_row(self, row: RowType) -> ActiveRecord:
        return self.record_class.from_row(self, row)

    def find(self, *keys: Any) -> Any:
        """Find records by primary key.

        ``find(key)`` returns a record. ``find(k1, k2)`` and ``find([k1, k2])``
        return the records keyed by the requested keys, with ``None`` for the
        keys that do not exist. Records are looked up in the cache first and
        stored in the cache once fetched.

        Raises:
            RecordNotFound: If the key does not exist, or if none of the keys
                exist
        """
        if not keys:
            raise TypeError("find() requires at least one key")

        if len(keys) == 1 and not isinstance(keys[0], list | set | frozenset):
            return self._find_one(keys[0])

        return self._find_many(flatten_keys(keys))

    def _find_one(self, key: KeyType) -> ActiveRecord:
        record = self.cache.retrieve(key)

        if record is not None:
            return record

        record = self.where(self._key_conditions(key)).one()

        if record is None:
            raise RecordNotFound(
                f"Record `{key}` does not exist in model `{self.id}`.", {key: None}
            )

        return self.cache.store(record)

    def _find_many(self, keys: list[Any]) -> dict[Any, ActiveRecord | None]:
        records: dict[Any, ActiveRecord | None] = {
            key: self.cache.retrieve(key) for key in keys
        }
        missing = [key for key, record in records.items() if record is None]

        if missing and isinstance(self.primary, str):
            # Rows are matched to keys given as another type, e.g. "1" for 1
            requested = {_comparable_key(key): key for key in missing}

            for record in self.where({self.primary: missing}).all():
                self.cache.store(record)
                key = requested.get(_comparable_key(getattr(record, self.primary)))

                if key is not None:
                    records[key] = record
        elif missing:
            for key in missing:
                record = self.where(self._key_conditions(key)).one()
                records[key] = self.cache.store(record) if record else None

        if all(record is None for record in records.values()):
            raise RecordNotFound(
                f"None of the records {keys} exist in model `{self.id}`.", records
            )

        return records

    def _key_conditions(self, key: KeyType) -> dict[str, Any]:
        columns = self.schema.primary_columns

        if not columns:
            raise ValueError(f"Model `{self.id}` has no primary key")

        if len(columns) == 1:
            return {columns[0]: key}

        if not isinstance(key, tuple | list) or len(key) != len(columns):
            raise ValueError(
                f"Model `{self.id}` expects keys of {len(columns)} values, given: {key!r}"
            )

        return dict(zip(columns, key))

    def _key_of_values(self, values: Mapping[str, Any]) -> KeyType | None:
        columns = self.schema.primary_columns

        if not columns or any(values.get(column) is None for column in columns):
            return None

        if len(columns) == 1:
            return values[columns[0]]

        return tuple(values[column] for column in columns)

    def save(self, values: Mapping[str, Any], key: KeyType | None = None) -> KeyType | None:
        """Insert or update a row.

        Updating a row evicts its key from the cache, records already loaded
        are not refreshed. When the model extends a parent, the parent row is
        saved first and its key is used for the row of the model.

        Args:
            values: Values keyed by column identifier
            key: Key of the row to update, None to insert a row

        Returns:
            The key of the row
        """
        if key is None and self.parent is not None:
            key = self.parent.save(values)

            if key is None:
                raise RuntimeError(f"Saving the parent of model `{self.id}` returned no key")

            self.insert({**values, self.primary: key})
            return key

        if key is None:
            self.insert(values)
            key = self._key_of_values(values)
            return key if key is not None else self.connection.last_insert_id()

        self.cache.eliminate(key)
        self.update(values, key)
        return key

    def insert(
        self, values: Mapping[str, Any], on_duplicate: bool = False, ignore: bool = False
    ) -> int:
        """Insert a row in the table of the model, ancestor tables are left alone.

        Args:
            values: Values keyed by column identifier, unknown columns are ignored
            on_duplicate: Whether a row with the same key is updated
            ignore: Whether a row with the same key is kept as is

        Returns:
            Number of affected rows
        """
        values = self.schema.filter_values(values)
        statement, args = self._render_insert(values, on_duplicate, ignore)
        return self.connection.exec(statement, args)

    def _render_insert(
        self, values: dict[str, Any], on_duplicate: bool, ignore: bool
    ) -> tuple[str, ArgsType]:
        table = quote_identifier(self.table_name)
        args = cast_values(values.values())
        updates = {
            column: value
            for column, value in values.items()
            if column not in self.schema.primary_columns
        }

        if self.connection.dialect == Dialect.MYSQL:
            statement = "INSERT IGNORE INTO" if ignore else "INSERT INTO"
            statement += f" {table} SET {_render_assignments(values)}"

            if on_duplicate and updates:
                statement += f" ON DUPLICATE KEY UPDATE {_render_assignments(updates)}"
                args += cast_values(updates.values())

            return statement, args

        statement = "INSERT OR IGNORE INTO" if ignore else "INSERT INTO"

        if values:
            columns = ", ".join(quote_identifier(column) for column in values)
            placeholders = ", ".join("?" for _ in values)
            statement += f" {table} ({columns}) VALUES ({placeholders})"
        else:
            statement += f" {table} DEFAULT VALUES"

        if on_duplicate and values and self.schema.primary_columns:
            conflict = ", ".join(
                quote_identifier(column) for column in self.schema.primary_columns
            )

            if updates:
                assignments = ", ".join(
                    f"{quote_identifier(column)} = excluded.{quote_identifier(column)}"
                    for column in updates
                )
                statement += f" ON CONFLICT({conflict}) DO UPDATE SET {assignments}"
            else:
                statement += f" ON CONFLICT({conflict}) DO NOTHING"

        return statement, args

    def update(self, values: Mapping[str, Any], key: KeyType) -> int:
        """Update the row of a key.

        The columns of ancestor tables are updated as well: in a single
        statement joining them on MySQL, one statement per table on SQLite.

        Returns:
            Number of affected rows, per table
        """
        if self.parent is not None and self.connection.dialect != Dialect.MYSQL:
            return max(
                model._update_table(values, key, model.schema, "")
                for model in [self, *self.ancestors]
            )

        return self._update_table(values, key, self.extended_schema, self.parent_joins)

    def _update_table(
        self, values: Mapping[str, Any], key: KeyType, schema: Schema, joins: str
    ) -> int:
        conditions = self._key_conditions(key)
        values = {
            column: value
            for column, value in schema.filter_values(values).items()
            if not joins or column not in conditions
        }

        if not values:
            return 0

        where = " AND ".join(f"{quote_identifier(column)} = ?" for column in conditions)
        statement = (
            f"UPDATE {quote_identifier(self.table_name)}{joins}"
            f" SET {_render_assignments(values)} WHERE {where}"
        )
        args = cast_values(values.values()) + cast_values(conditions.values())
        return self.connection.exec(statement, args)

    def delete(self, key: KeyType) -> bool:
        """Delete the row of a key, the key is evicted from the cache.

        The rows of the key in ancestor tables are deleted as well.

        Returns:
            Whether a row was deleted
        """
        self.cache.eliminate(key)
        conditions = self._key_conditions(key)
        where = " AND ".join(f"{quote_identifier(column)} = ?" for column in conditions)
        statement = f"DELETE FROM {quote_identifier(self.table_name)} WHERE {where}"
        deleted = bool(self.connection.exec(statement, list(conditions.values())))

        if self.parent is not None:
            self.parent.delete(key)

        return deleted

    def __getitem__(self, key: Any) -> Any:
        return self.find(key)

    def __contains__(self, key: Any) -> bool:
        return self.exists(key) is True

    def __delitem__(self, key: Any) -> None:
        self.delete(key)

    # Table

    def install(self) -> None:
        """Create the table of the model."""
        self.connection.create_table(self.table_name, self.schema)

    def uninstall(self) -> None:
        """Drop the table of the model, a missing table is ignored."""
        self.connection.drop_table(self.table_name, if_exists=True)
        self.cache.clear()

    def is_installed(self) -> bool:
        return self.connection.table_exists(self.table_name)

    def truncate(self) -> None:
        """Delete every row of the table and clear the cache."""
        table = quote_identifier(self.table_name)

        if self.connection.dialect == Dialect.MYSQL:
            self.connection.exec(f"TRUNCATE TABLE {table}")
        else:
            self.connection.exec(f"DELETE FROM {table}")
            self.connection.exec("VACUUM")

        self.cache.clear()
        logger.info(f"Truncated table: {self.table_name}")


def _render_assignments(values: Mapping[str, Any]) -> str:
    return ", ".join(f"{quote_identifier(column)} = ?" for column in values)


def _comparable_key(key: Any) -> str:
    return str(cast_value(key))

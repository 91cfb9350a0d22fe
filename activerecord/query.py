"""Composable queries.

A query is immutable: every builder method returns a new query, so queries
can be branched from a common base without affecting each other::

    base = model.where({"is_online": True})
    recent = base.order("-date").limit(10)
    count = base.count()
"""

from __future__ import annotations

import copy
import re
from collections.abc import Callable, Iterator, Mapping, Sequence
from functools import partial
from typing import TYPE_CHECKING, Any

from .constants import LIMIT_MAX
from .exceptions import ScopeNotDefined
from .log import get_logger
from .types import ArgsType, Dialect, RowType
from .utils import cast_value, quote_identifier

if TYPE_CHECKING:
    from .model import Model
    from .record import ActiveRecord

logger = get_logger(__name__)

JOIN_MODE_INNER = "INNER"

_DESC_PATTERN = re.compile(r"-([a-zA-Z0-9_]+)")


class Query:
    """Accumulate the clauses of a SELECT statement and execute it."""

    def __init__(self, model: Model) -> None:
        self.model = model
        self._select: str | None = None
        self._joins: tuple[str, ...] = ()
        self._joins_args: tuple[Any, ...] = ()
        self._conditions: tuple[str, ...] = ()
        self._conditions_args: tuple[Any, ...] = ()
        self._group: str | None = None
        self._having: str | None = None
        self._having_args: tuple[Any, ...] = ()
        self._order: tuple[Any, ...] = ()
        self._limit: int | None = None
        self._offset: int | None = None

    def _derive(self, **changes: Any) -> Query:
        query = copy.copy(self)

        for name, value in changes.items():
            setattr(query, f"_{name}", value)

        return query

    # Scopes and dynamic filters

    def __getattr__(self, name: str) -> Callable[..., Query]:
        if name.startswith("_"):
            raise AttributeError(name)

        if name.startswith("filter_by_"):
            return partial(self._dynamic_filter, name[len("filter_by_") :])

        if self.model.resolve_scope(name) is None:
            raise ScopeNotDefined(name, self.model)

        return partial(self.scope, name)

    def scope(self, scope_name: str, *args: Any, **kwargs: Any) -> Query:
        """Apply a named scope.

        Scopes are resolved by the model, see :meth:`Model.resolve_scope`.

        Raises:
            ScopeNotDefined: If the scope is not defined
        """
        scope = self.model.resolve_scope(scope_name)

        if scope is None:
            raise ScopeNotDefined(scope_name, self.model)

        return scope(self, *args, **kwargs)

    def _dynamic_filter(self, filter_name: str, *args: Any) -> Query:
        columns = filter_name.split("_and_")

        if len(columns) != len(args):
            raise TypeError(
                f"filter_by_{filter_name}() expects {len(columns)} arguments,"
                f" {len(args)} given"
            )

        return self.where(dict(zip(columns, args)))

    # Builder

    def select(self, expression: str) -> Query:
        """Define the SELECT clause, e.g. ``"id, title"``."""
        return self._derive(select=expression)

    def join(
        self,
        expression: str | None = None,
        *,
        args: Sequence[Any] = (),
        query: Query | None = None,
        with_: Any = None,
        mode: str = JOIN_MODE_INNER,
        as_: str | None = None,
        on: str | None = None,
    ) -> Query:
        """Add a JOIN clause.

        Args:
            expression: A raw JOIN clause, e.g. ``"INNER JOIN `articles` USING(`nid`)"``
            args: Arguments of the raw clause
            query: A query joined as a subquery, its arguments precede the
                arguments of the conditions
            with_: A model, a model identifier, or a record class
            mode: Join mode
            as_: Alias of the joined subquery or model
            on: Column the join is made on

        Raises:
            ValueError: If none of ``expression``, ``query`` or ``with_`` is given
        """
        if expression:
            return self._derive(
                joins=self._joins + (expression,),
                joins_args=self._joins_args + tuple(cast_value(a) for a in args),
            )

        if query is not None:
            return self._join_with_query(query, mode, as_, on)

        if with_ is not None:
            return self._join_with_model(self.model.models.resolve(with_), mode, as_, on)

        raise ValueError("One of [ expression, query, with_ ] needs to be defined")

    def _join_with_query(
        self, query: Query, mode: str, as_: str | None, on: str | None
    ) -> Query:
        as_ = as_ or query.model.alias

        if on is None and isinstance(query.model.primary, str):
            on = query.model.primary

        clause = f"{mode} JOIN({query}) `{as_}`"

        if on:
            clause += " " + self._render_join_on(on, as_, query)

        return self._derive(
            joins=self._joins + (clause,),
            joins_args=self._joins_args + tuple(query.args),
        )

    def _render_join_on(self, column: str, as_: str, query: Query) -> str:
        if query.model.schema.has_column(column) and self.model.schema.has_column(
            column
        ):
            return f"USING(`{column}`)"

        if not self.model.schema.has_column(column):
            raise ValueError(
                f"Unable to resolve column `{column}` from model `{self.model.id}`"
            )

        return f"ON `{as_}`.`{column}` = `{self.model.alias}`.`{column}`"

    def _join_with_model(
        self, model: Model, mode: str, as_: str | None, on: str | None
    ) -> Query:
        as_ = as_ or model.alias

        if on is None:
            on = self._resolve_join_column(model)

        clause = f"{mode} JOIN `{model.table_name}` AS `{as_}` USING(`{on}`)"
        return self._derive(joins=self._joins + (clause,))

    def _resolve_join_column(self, model: Model) -> str:
        for column in self.model.schema.primary_columns:
            if model.extended_schema.has_column(column):
                return column

        return model.schema.primary_columns[0]

    def where(self, conditions: str | Mapping[str, Any], *args: Any) -> Query:
        """Add conditions, all conditions are joined with AND.

        Conditions are either a mapping of columns to values, or a raw
        expression with its arguments::

            query.where({"order_count": 2, "locked": False})
            query.where({"order_id": [123, 456, 789]})
            query.where({"!order_id": [123, 456]})
            query.where("order_count = ? AND locked = ?", 2, False)
            query.where("YEAR(date) = ?", [1958])

        A column prefixed with ``!`` negates the comparison.
        """
        fragment, fragment_args = self._parse_conditions(conditions, args)

        if not fragment:
            return self

        return self._derive(
            conditions=self._conditions + (fragment,),
            conditions_args=self._conditions_args + tuple(fragment_args),
        )

    and_ = where

    def filter_by(self, **columns: Any) -> Query:
        """Add equality conditions, e.g. ``filter_by(name="madonna")``."""
        return self.where(columns)

    def group(self, expression: str) -> Query:
        return self._derive(group=expression)

    def having(self, conditions: str | Mapping[str, Any], *args: Any) -> Query:
        """Define the HAVING clause, replacing a previous one."""
        fragment, fragment_args = self._parse_conditions(conditions, args)
        return self._derive(having=fragment, having_args=tuple(fragment_args))

    def order(self, expression: str, *explicit_values: Any) -> Query:
        """Define the ORDER BY clause.

        ``order("-date, title")`` orders by ``date DESC, title``.
        ``order("id", 3, 1, 2)`` or ``order("id", [3, 1, 2])`` orders by
        explicit values of the column.
        """
        if len(explicit_values) == 1 and isinstance(explicit_values[0], list | tuple):
            explicit_values = tuple(explicit_values[0])

        return self._derive(order=(expression,) + tuple(explicit_values))

    def limit(self, limit: int, *args: int) -> Query:
        """Define the LIMIT clause: ``limit(limit)`` or ``limit(offset, limit)``."""
        if args:
            return self._derive(offset=int(limit), limit=int(args[0]))

        return self._derive(limit=int(limit))

    def offset(self, offset: int) -> Query:
        return self._derive(offset=int(offset))

    def _parse_conditions(
        self, conditions: str | Mapping[str, Any], args: Sequence[Any]
    ) -> tuple[str | None, ArgsType]:
        if isinstance(conditions, Mapping):
            return self._parse_mapping_conditions(conditions)

        if len(args) == 1 and isinstance(args[0], list | tuple):
            args = args[0]

        values = [cast_value(arg) for arg in args]
        return (f"({conditions})" if conditions else None), values

    def _parse_mapping_conditions(
        self, conditions: Mapping[str, Any]
    ) -> tuple[str | None, ArgsType]:
        fragments: list[str] = []
        values: ArgsType = []

        for column, value in conditions.items():
            negate = column.startswith("!")
            column = column[1:] if negate else column
            quoted = quote_identifier(column)

            if isinstance(value, Query):
                operator = "NOT IN" if negate else "IN"
                fragments.append(f"{quoted} {operator}({value})")
                values.extend(value.args)
            elif isinstance(value, list | tuple | set | frozenset):
                operator = "NOT IN" if negate else "IN"
                literals = ",".join(self._quote_in_value(v) for v in value)
                fragments.append(f"{quoted} {operator}({literals})")
            elif value is None:
                operator = "IS NOT NULL" if negate else "IS NULL"
                fragments.append(f"{quoted} {operator}")
            else:
                operator = "!=" if negate else "="
                fragments.append(f"{quoted} {operator} ?")
                values.append(cast_value(value))

        if not fragments:
            return None, []

        return f"({' AND '.join(fragments)})", values

    def _quote_in_value(self, value: Any) -> str:
        value = cast_value(value)

        if isinstance(value, int | float):
            return str(value)

        return self.model.connection.quote_literal(value)

    # Rendering

    @property
    def conditions(self) -> list[str]:
        return list(self._conditions)

    @property
    def conditions_args(self) -> ArgsType:
        return list(self._conditions_args)

    @property
    def joins(self) -> list[str]:
        return list(self._joins)

    @property
    def joins_args(self) -> ArgsType:
        return list(self._joins_args)

    @property
    def having_args(self) -> ArgsType:
        return list(self._having_args)

    @property
    def args(self) -> ArgsType:
        """Get the arguments of the query, in placeholder order."""
        return self.joins_args + self.conditions_args + self.having_args

    def render(self) -> tuple[str, ArgsType]:
        """Render the statement and its arguments."""
        return str(self), self.args

    def __str__(self) -> str:
        return f"SELECT {self._select or '*'} {self._render_from()}{self._render_main()}"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.model.id}: {self}>"

    def _render_from(self) -> str:
        model = self.model
        return f"FROM `{model.table_name}` `{model.alias}`{model.parent_joins}"

    def _render_main(self) -> str:
        statement = ""

        if self._joins:
            statement += " " + " ".join(self._joins)

        if self._conditions:
            statement += " WHERE " + " AND ".join(self._conditions)

        if self._group:
            statement += f" GROUP BY {self._group}"

            if self._having:
                statement += f" HAVING {self._having}"

        if self._order:
            statement += " " + self._render_order()

        if self._offset or self._limit:
            statement += " " + self._render_offset_and_limit()

        return statement

    def _render_order(self) -> str:
        expression, *values = self._order

        if not values:
            return "ORDER BY " + _DESC_PATTERN.sub(r"\1 DESC", expression)

        connection = self.model.connection
        literals = [connection.quote_literal(value) for value in values]

        if connection.dialect == Dialect.MYSQL:
            return f"ORDER BY FIELD({expression}, {', '.join(literals)})"

        whens = " ".join(
            f"WHEN {literal} THEN {position}" for position, literal in enumerate(literals)
        )
        return f"ORDER BY CASE {expression} {whens} END"

    def _render_offset_and_limit(self) -> str:
        if self._offset and self._limit:
            return f"LIMIT {self._offset}, {self._limit}"

        if self._offset:
            return f"LIMIT {self._offset}, {LIMIT_MAX}"

        return f"LIMIT {self._limit}"

    # Execution

    def _execute(self, statement: str | None = None) -> list[RowType]:
        return self.model.connection.execute(statement or str(self), self.args)

    @property
    def selects_records(self) -> bool:
        """Whether the rows of the query are mapped to records."""
        select = (self._select or "*").replace("`", "").strip()
        return select in ("*", f"{self.model.alias}.*")

    def all(self) -> list[ActiveRecord] | list[RowType]:
        """Execute the query.

        Returns:
            Records, or rows as dictionaries when a custom select is used
        """
        rows = self._execute()

        if not self.selects_records:
            return rows

        return [self.model.record_from_row(row) for row in rows]

    def one(self) -> ActiveRecord | RowType | None:
        """Execute the query limited to one row.

        Returns:
            The first record, or row, or None if the query matches nothing
        """
        query = self._derive(limit=1)
        results = query.all()
        return results[0] if results else None

    first = one

    def pairs(self) -> dict[Any, Any]:
        """Get the values of the second column keyed by the values of the first."""
        pairs = {}

        for row in self._execute():
            key, value, *_ = row.values()
            pairs[key] = value

        return pairs

    def rc(self) -> Any:
        """Get the value of the first column of the first row."""
        rows = self._derive(limit=1)._execute()

        if not rows:
            return None

        return next(iter(rows[0].values()))

    def exists(self, *keys: Any) -> bool | dict[Any, bool]:
        """Check if records exist.

        Without keys, check if the query matches any record. With one key,
        check if the query matches that record. With several keys, return
        True if they all exist, otherwise a mapping of the keys to their
        existence.
        """
        if not keys:
            return self._derive(select="1", limit=1, offset=None).rc() is not None

        if len(keys) == 1 and isinstance(keys[0], list | set | frozenset):
            keys = tuple(keys[0])

        primary = self.model.primary

        if not isinstance(primary, str):
            raise ValueError(
                f"Existence by key requires a single primary key, model `{self.model.id}`"
            )

        query = self._derive(
            select=quote_identifier(primary), limit=None, offset=None
        ).where({primary: list(keys)})
        found = {row[primary] for row in query._execute()}

        if len(keys) == 1:
            return keys[0] in found

        exists = {key: key in found for key in keys}

        if all(exists.values()):
            return True

        return exists

    def _compute(self, function: str, column: str | None = None) -> Any:
        query = self

        if column is None:
            select = f"{function}(*)"
        elif function == "COUNT":
            select = f"`{column}`, {function}(`{column}`)"
            query = self.group(f"`{column}`")
        else:
            select = f"{function}(`{column}`)"

        statement = f"SELECT {select} AS count {query._render_from()}{query._render_main()}"
        rows = query._execute(statement)

        if function == "COUNT" and column:
            return {row[column]: row["count"] for row in rows}

        return rows[0]["count"] if rows else None

    def count(self, column: str | None = None) -> int | dict[Any, int]:
        """Count the records matching the query.

        Args:
            column: When given, count the records for each value of the column

        Returns:
            Number of records, or a mapping of column values to counts
        """
        result = self._compute("COUNT", column)

        if column:
            return result

        return int(result or 0)

    def average(self, column: str) -> Any:
        return self._compute("AVG", column)

    def minimum(self, column: str) -> Any:
        return self._compute("MIN", column)

    def maximum(self, column: str) -> Any:
        return self._compute("MAX", column)

    def sum(self, column: str) -> Any:
        return self._compute("SUM", column)

    def delete(self) -> int:
        """Delete the records matching the conditions of the query.

        The cache of the model is cleared. Records of a model extending a
        parent are deleted one key at a time, from every table of the lineage.

        Returns:
            Number of deleted records
        """
        model = self.model
        table = f"`{model.table_name}`"

        if model.parent is not None:
            keys = self._derive(
                select=f"`{model.alias}`.`{model.primary}`", order=(), limit=None, offset=None
            )._execute()
            return sum(model.delete(next(iter(row.values()))) for row in keys)

        if not self._joins:
            statement = f"DELETE FROM {table}"
            if self._conditions:
                statement += " WHERE " + " AND ".join(self._conditions)
        elif model.connection.dialect == Dialect.MYSQL:
            statement = (
                f"DELETE `{model.alias}` FROM {table} AS `{model.alias}`"
                f"{self._render_main()}"
            )
        else:
            primary = quote_identifier(model.schema.primary_columns[0])
            selection = self._derive(
                select=f"`{model.alias}`.{primary}", order=(), limit=None, offset=None
            )
            statement = f"DELETE FROM {table} WHERE {primary} IN({selection})"

        logger.debug(f"Deleting from {model.table_name}")
        deleted = model.connection.exec(statement, self.args)
        model.cache.clear()
        return deleted

    def __iter__(self) -> Iterator[Any]:
        return iter(self.all())

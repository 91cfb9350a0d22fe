"""Schema of a table: its columns, its primary key and its indexes."""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from activerecord.exceptions import SchemaNotValid
from activerecord.types import PrimaryType

from .columns import BelongsTo, Column
from .index import Index


class Schema(Mapping[str, Column]):
    """Immutable mapping of column identifiers to columns.

    Columns are kept in definition order, which is the order of the column
    definitions in the DDL.
    """

    def __init__(
        self,
        columns: Mapping[str, Column],
        primary: str | list[str] | tuple[str, ...] | None = None,
        indexes: list[Index] | tuple[Index, ...] = (),
    ) -> None:
        """Initialize a schema.

        Args:
            columns: Column identifiers mapped to columns
            primary: Identifier, or identifiers, of the primary key
            indexes: Indexes of the table

        Raises:
            SchemaNotValid: If the primary key or an index references an unknown
                column, or if there is more than one serial column
        """
        for identifier, column in columns.items():
            if not isinstance(column, Column):
                raise SchemaNotValid(
                    f"Expected a Column for `{identifier}`, given: {type(column).__name__}"
                )

        self._columns = MappingProxyType(dict(columns))
        self._primary = self._normalize_primary(primary)
        self._indexes = tuple(indexes)

        self._validate()

    @staticmethod
    def _normalize_primary(primary: PrimaryType | list[str]) -> PrimaryType:
        if primary is None or isinstance(primary, str):
            return primary

        primary = tuple(primary)

        if not primary:
            return None

        if len(primary) == 1:
            return primary[0]

        return primary

    def _validate(self) -> None:
        for identifier in self.primary_columns:
            if identifier not in self._columns:
                raise SchemaNotValid(f"Primary key column `{identifier}` is not defined")

        for index in self._indexes:
            for identifier in index.columns:
                if identifier not in self._columns:
                    raise SchemaNotValid(
                        f"Index `{index.resolved_name}` references an undefined"
                        f" column: `{identifier}`"
                    )

        serials = [
            identifier
            for identifier, column in self._columns.items()
            if column.is_serial
        ]

        if len(serials) > 1:
            raise SchemaNotValid(
                f"A schema can only have one serial column, given: {', '.join(serials)}"
            )

    def __getitem__(self, identifier: str) -> Column:
        return self._columns[identifier]

    def __iter__(self) -> Iterator[str]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return (
            list(self._columns.items()) == list(other._columns.items())
            and self._primary == other._primary
            and self._indexes == other._indexes
        )

    def __hash__(self) -> int:
        return hash((tuple(self._columns.items()), self._primary, self._indexes))

    def __repr__(self) -> str:
        return (
            f"Schema(columns={dict(self._columns)!r}, primary={self._primary!r},"
            f" indexes={self._indexes!r})"
        )

    @property
    def columns(self) -> Mapping[str, Column]:
        """Get the columns, in definition order."""
        return self._columns

    @property
    def primary(self) -> PrimaryType:
        """Get the primary key: None, an identifier, or a tuple of identifiers."""
        return self._primary

    @property
    def primary_columns(self) -> tuple[str, ...]:
        """Get the primary key as a tuple of identifiers, possibly empty."""
        if self._primary is None:
            return ()
        if isinstance(self._primary, str):
            return (self._primary,)
        return self._primary

    @property
    def indexes(self) -> tuple[Index, ...]:
        return self._indexes

    @property
    def serial_column(self) -> str | None:
        """Get the identifier of the serial column, if any."""
        for identifier, column in self._columns.items():
            if column.is_serial:
                return identifier
        return None

    @property
    def belongs_to(self) -> dict[str, BelongsTo]:
        """Get the foreign key columns, keyed by identifier."""
        return {
            identifier: column
            for identifier, column in self._columns.items()
            if isinstance(column, BelongsTo)
        }

    def has_column(self, identifier: str) -> bool:
        return identifier in self._columns

    def filter_values(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Discard the values whose key is not a column identifier.

        Args:
            values: Values keyed by column identifier

        Returns:
            The values of the known columns, in the order they were given
        """
        return {
            identifier: value
            for identifier, value in values.items()
            if identifier in self._columns
        }

"""Fluent schema declaration."""

from typing import Any

from activerecord.constants import DEFAULT_CHARACTER_SIZE
from activerecord.exceptions import SchemaNotValid
from activerecord.log import get_logger
from activerecord.types import BlobSize, IntegerSize, TextSize

from .columns import (
    BelongsTo,
    Blob,
    Boolean,
    Character,
    Column,
    Date,
    DateTime,
    Decimal,
    DefaultType,
    Integer,
    Serial,
    Text,
    Time,
    Timestamp,
)
from .index import Index
from .schema import Schema

logger = get_logger(__name__)


class SchemaBuilder:
    """Declare the columns, the primary key and the indexes of a table.

    Every method returns the builder so calls can be chained::

        schema = (
            SchemaBuilder()
            .add_serial("id", primary=True)
            .add_character("title", 80)
            .add_index("title")
            .build()
        )
    """

    def __init__(self) -> None:
        self._columns: dict[str, Column] = {}
        self._primary: list[str] = []
        self._indexes: list[Index] = []

    def define_column(
        self, identifier: str, column: Column, primary: bool = False
    ) -> "SchemaBuilder":
        """Define a column.

        Args:
            identifier: Column identifier
            column: Column definition
            primary: Whether the column is part of the primary key

        Raises:
            SchemaNotValid: If the column is already defined
        """
        if identifier in self._columns:
            raise SchemaNotValid(f"Column `{identifier}` is already defined")

        self._columns[identifier] = column

        if primary:
            self._primary.append(identifier)

        return self

    def define_index(
        self,
        columns: str | list[str] | tuple[str, ...],
        unique: bool = False,
        name: str | None = None,
    ) -> "SchemaBuilder":
        """Define an index.

        Raises:
            SchemaNotValid: If the index references an undefined column
        """
        index = Index(columns, unique=unique, name=name)  # type: ignore[arg-type]

        for identifier in index.columns:
            if identifier not in self._columns:
                raise SchemaNotValid(
                    f"Index `{index.resolved_name}` references an undefined"
                    f" column: `{identifier}`"
                )

        self._indexes.append(index)
        return self

    def set_primary(self, primary: str | list[str] | tuple[str, ...]) -> "SchemaBuilder":
        """Set the primary key, replacing the one defined so far.

        Raises:
            SchemaNotValid: If a column of the key is not defined
        """
        identifiers = [primary] if isinstance(primary, str) else list(primary)

        for identifier in identifiers:
            if identifier not in self._columns:
                raise SchemaNotValid(f"Primary key column `{identifier}` is not defined")

        self._primary = identifiers
        return self

    def build(self) -> Schema:
        """Build the schema."""
        schema = Schema(self._columns, self._primary, self._indexes)
        logger.debug(
            f"Built schema with {len(schema)} columns, primary: {schema.primary}"
        )
        return schema

    # Convenience methods

    def add_boolean(
        self, identifier: str, null: bool = False, default: DefaultType = None
    ) -> "SchemaBuilder":
        return self.define_column(identifier, Boolean(null=null, default=default))

    def add_integer(
        self,
        identifier: str,
        size: int = IntegerSize.REGULAR,
        unsigned: bool = False,
        null: bool = False,
        unique: bool = False,
        default: DefaultType = None,
        primary: bool = False,
    ) -> "SchemaBuilder":
        column = Integer(
            size, unsigned=unsigned, null=null, unique=unique, default=default
        )
        return self.define_column(identifier, column, primary)

    def add_decimal(
        self,
        identifier: str,
        precision: int = 10,
        scale: int = 0,
        approximate: bool = False,
        null: bool = False,
        default: DefaultType = None,
    ) -> "SchemaBuilder":
        column = Decimal(
            precision, scale, approximate, null=null, default=default
        )
        return self.define_column(identifier, column)

    def add_serial(
        self,
        identifier: str,
        size: int = IntegerSize.REGULAR,
        primary: bool = False,
    ) -> "SchemaBuilder":
        return self.define_column(identifier, Serial(size), primary)

    def add_foreign(
        self,
        identifier: str,
        associate: str,
        null: bool = False,
        unique: bool = False,
        as_: str | None = None,
        primary: bool = False,
    ) -> "SchemaBuilder":
        """Add a foreign key column, which also declares a belongs-to relation."""
        column = BelongsTo(associate=associate, as_=as_, null=null, unique=unique)
        return self.define_column(identifier, column, primary)

    def add_character(
        self,
        identifier: str,
        size: int = DEFAULT_CHARACTER_SIZE,
        fixed: bool = False,
        null: bool = False,
        unique: bool = False,
        default: DefaultType = None,
        collate: str | None = None,
        primary: bool = False,
    ) -> "SchemaBuilder":
        column = Character(
            size, fixed, null=null, unique=unique, default=default, collate=collate
        )
        return self.define_column(identifier, column, primary)

    add_varchar = add_character

    def add_char(self, identifier: str, size: int = 1, **options: Any) -> "SchemaBuilder":
        return self.add_character(identifier, size, fixed=True, **options)

    def add_binary(
        self,
        identifier: str,
        size: int = DEFAULT_CHARACTER_SIZE,
        fixed: bool = False,
        null: bool = False,
        unique: bool = False,
        primary: bool = False,
    ) -> "SchemaBuilder":
        column = Character(size, fixed, binary=True, null=null, unique=unique)
        return self.define_column(identifier, column, primary)

    def add_text(
        self,
        identifier: str,
        size: TextSize = TextSize.REGULAR,
        null: bool = False,
        unique: bool = False,
        default: DefaultType = None,
        collate: str | None = None,
    ) -> "SchemaBuilder":
        column = Text(size, null=null, unique=unique, default=default, collate=collate)
        return self.define_column(identifier, column)

    def add_blob(
        self,
        identifier: str,
        size: BlobSize = BlobSize.REGULAR,
        null: bool = False,
        unique: bool = False,
    ) -> "SchemaBuilder":
        return self.define_column(identifier, Blob(size, null=null, unique=unique))

    def add_date(
        self, identifier: str, null: bool = False, default: DefaultType = None
    ) -> "SchemaBuilder":
        return self.define_column(identifier, Date(null=null, default=default))

    def add_time(
        self, identifier: str, null: bool = False, default: DefaultType = None
    ) -> "SchemaBuilder":
        return self.define_column(identifier, Time(null=null, default=default))

    def add_datetime(
        self, identifier: str, null: bool = False, default: DefaultType = None
    ) -> "SchemaBuilder":
        return self.define_column(identifier, DateTime(null=null, default=default))

    def add_timestamp(
        self, identifier: str, null: bool = False, default: DefaultType = None
    ) -> "SchemaBuilder":
        return self.define_column(identifier, Timestamp(null=null, default=default))

    add_index = define_index

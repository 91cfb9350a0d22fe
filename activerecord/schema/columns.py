"""Column definitions.

Columns are immutable values validated when they are constructed, an invalid
column never reaches a renderer. Options shared by every column (``null``,
``default``, ``unique``, ``collate``) are keyword-only, the options specific to
a column type can be given positionally, e.g. ``Character(80)``.
"""

from dataclasses import dataclass, field
from typing import ClassVar

from activerecord.constants import (
    DEFAULT_CHARACTER_SIZE,
    MAX_DECIMAL_PRECISION,
    MAX_DECIMAL_SCALE,
    MAX_FIXED_CHARACTER_SIZE,
    MAX_VARIABLE_CHARACTER_SIZE,
)
from activerecord.exceptions import SchemaNotValid
from activerecord.types import BlobSize, DefaultToken, IntegerSize, TextSize

DefaultType = str | int | float | DefaultToken | None


@dataclass(frozen=True, kw_only=True)
class Column:
    """Base column definition."""

    null: bool = False
    default: DefaultType = None
    unique: bool = False
    collate: str | None = None

    # Default tokens accepted by the column type
    allowed_tokens: ClassVar[frozenset[DefaultToken]] = frozenset()

    def __post_init__(self) -> None:
        if isinstance(self.default, DefaultToken):
            if self.default not in self.allowed_tokens:
                raise SchemaNotValid(
                    f"Default `{self.default.value}` is not allowed for"
                    f" {type(self).__name__} columns"
                )

    @property
    def is_serial(self) -> bool:
        """Whether the value of the column is generated by the database."""
        return False


@dataclass(frozen=True)
class Integer(Column):
    """Integer column.

    A serial integer is automatically incremented by the database. It must be
    at least 2 bytes, unsigned, not nullable and unique.
    """

    size: int = IntegerSize.REGULAR
    unsigned: bool = False
    serial: bool = False

    def __post_init__(self) -> None:
        super().__post_init__()

        if self.size not in IntegerSize.__members__.values():
            raise SchemaNotValid("Size must be one of the allowed ones")

        if self.serial:
            if self.size < IntegerSize.SMALL:
                raise SchemaNotValid("A serial integer must be at least 2 bytes")
            if not self.unsigned:
                raise SchemaNotValid("A serial integer must be unsigned")
            if self.null:
                raise SchemaNotValid("A serial integer cannot be nullable")
            if not self.unique:
                raise SchemaNotValid("A serial integer must be unique")

    @property
    def is_serial(self) -> bool:
        return self.serial


@dataclass(frozen=True)
class Boolean(Integer):
    """Boolean column, stored as an unsigned tiny integer."""

    size: int = field(default=IntegerSize.TINY, init=False)
    unsigned: bool = field(default=True, init=False)
    serial: bool = field(default=False, init=False)


@dataclass(frozen=True)
class Serial(Integer):
    """Auto-incremented unsigned integer, usually the primary key."""

    unsigned: bool = field(default=True, init=False)
    serial: bool = field(default=True, init=False)
    unique: bool = field(default=True, init=False)
    null: bool = field(default=False, init=False)

    def equivalent_integer_spec(self) -> Integer:
        """Get the plain integer column this serial column stands for."""
        return Integer(self.size, unsigned=True, serial=True, unique=True)


@dataclass(frozen=True)
class BelongsTo(Column):
    """Foreign key column, also declares a belongs-to relation.

    Attributes:
        associate: Identifier of the related model
        size: Number of bytes of the integer
        as_: Name of the relation, defaults to the singular of ``associate``
    """

    associate: str = ""
    size: int = IntegerSize.REGULAR
    as_: str | None = None

    def __post_init__(self) -> None:
        super().__post_init__()

        if not self.associate:
            raise SchemaNotValid("A belongs-to column requires an associate model")

        if self.size not in IntegerSize.__members__.values():
            raise SchemaNotValid("Size must be one of the allowed ones")


@dataclass(frozen=True)
class Decimal(Column):
    """Fixed-point number, or floating-point number when ``approximate``."""

    precision: int = 10
    scale: int = 0
    approximate: bool = False

    def __post_init__(self) -> None:
        super().__post_init__()

        if not 1 <= self.precision <= MAX_DECIMAL_PRECISION:
            raise SchemaNotValid(
                f"Precision must be between 1 and {MAX_DECIMAL_PRECISION},"
                f" given: {self.precision}"
            )

        if not 0 <= self.scale <= MAX_DECIMAL_SCALE:
            raise SchemaNotValid(
                f"Scale must be between 0 and {MAX_DECIMAL_SCALE}, given: {self.scale}"
            )

        if self.scale > self.precision:
            raise SchemaNotValid(
                f"Scale cannot be greater than precision, given: {self.scale}"
            )


@dataclass(frozen=True)
class Character(Column):
    """Character string, fixed or variable, optionally binary."""

    size: int = DEFAULT_CHARACTER_SIZE
    fixed: bool = False
    binary: bool = False

    def __post_init__(self) -> None:
        super().__post_init__()

        if self.size < 1:
            raise SchemaNotValid(f"Size must be positive, given: {self.size}")

        if self.fixed and self.size > MAX_FIXED_CHARACTER_SIZE:
            raise SchemaNotValid(
                "For fixed character, the size must be less than"
                f" {MAX_FIXED_CHARACTER_SIZE}, given: {self.size}"
            )

        if not self.fixed and self.size > MAX_VARIABLE_CHARACTER_SIZE:
            raise SchemaNotValid(
                "For variable character, the size must be less than"
                f" {MAX_VARIABLE_CHARACTER_SIZE}, given: {self.size}"
            )

        if self.binary and self.collate:
            raise SchemaNotValid("Binary strings cannot have a collate")


@dataclass(frozen=True)
class Text(Column):
    size: TextSize = TextSize.REGULAR


@dataclass(frozen=True)
class Blob(Column):
    size: BlobSize = BlobSize.REGULAR

    def __post_init__(self) -> None:
        super().__post_init__()

        if self.collate:
            raise SchemaNotValid("Blobs cannot have a collate")


@dataclass(frozen=True, kw_only=True)
class _Temporal(Column):
    """Temporal column, accepts named time functions as default.

    A default given as the name of an allowed token, e.g.
    ``"CURRENT_TIMESTAMP"``, is normalized to the token.
    """

    def __post_init__(self) -> None:
        if isinstance(self.default, str) and not isinstance(
            self.default, DefaultToken
        ):
            if self.default in DefaultToken.__members__:
                object.__setattr__(self, "default", DefaultToken(self.default))

        super().__post_init__()


@dataclass(frozen=True, kw_only=True)
class Date(_Temporal):
    allowed_tokens: ClassVar[frozenset[DefaultToken]] = frozenset(
        {DefaultToken.CURRENT_DATE}
    )


@dataclass(frozen=True, kw_only=True)
class Time(_Temporal):
    allowed_tokens: ClassVar[frozenset[DefaultToken]] = frozenset(
        {DefaultToken.CURRENT_TIME}
    )


@dataclass(frozen=True, kw_only=True)
class DateTime(_Temporal):
    allowed_tokens: ClassVar[frozenset[DefaultToken]] = frozenset(
        {DefaultToken.CURRENT_TIMESTAMP, DefaultToken.NOW}
    )


@dataclass(frozen=True, kw_only=True)
class Timestamp(_Temporal):
    allowed_tokens: ClassVar[frozenset[DefaultToken]] = frozenset(
        {DefaultToken.CURRENT_TIMESTAMP, DefaultToken.NOW}
    )


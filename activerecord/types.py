"""Common type definitions for the activerecord package."""

from enum import Enum, IntEnum
from typing import Any, TypeAlias

RowType: TypeAlias = dict[str, Any]
ArgsType: TypeAlias = list[Any]
KeyType: TypeAlias = int | str | tuple[Any, ...]
PrimaryType: TypeAlias = str | tuple[str, ...] | None


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class Dialect(str, Enum):
    """SQL dialects the renderers know about."""

    MYSQL = "mysql"
    SQLITE = "sqlite"


class IntegerSize(IntEnum):
    """Number of bytes used to store an integer."""

    TINY = 1
    SMALL = 2
    MEDIUM = 3
    REGULAR = 4
    BIG = 8


class TextSize(str, Enum):
    """Size classes of TEXT columns, used as the type prefix."""

    TINY = "TINY"
    SMALL = "SMALL"
    REGULAR = ""
    MEDIUM = "MEDIUM"
    LONG = "LONG"


class BlobSize(str, Enum):
    """Size classes of BLOB columns, used as the type prefix."""

    TINY = "TINY"
    REGULAR = ""
    MEDIUM = "MEDIUM"
    LONG = "LONG"


class DefaultToken(str, Enum):
    """Named time functions accepted as column defaults.

    Tokens are rendered unquoted, unlike literal defaults.
    """

    CURRENT_TIMESTAMP = "CURRENT_TIMESTAMP"
    CURRENT_DATE = "CURRENT_DATE"
    CURRENT_TIME = "CURRENT_TIME"
    NOW = "NOW"

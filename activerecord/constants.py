"""Constants shared by the schema, the renderers and the query builder."""

from typing import Final

# Used as the row count of "LIMIT offset, count" when only an offset is set
LIMIT_MAX: Final[int] = 9223372036854775807

MAX_FIXED_CHARACTER_SIZE: Final[int] = 255
MAX_VARIABLE_CHARACTER_SIZE: Final[int] = 65535

MAX_DECIMAL_PRECISION: Final[int] = 65
MAX_DECIMAL_SCALE: Final[int] = 30

DEFAULT_CHARACTER_SIZE: Final[int] = 255

DEFAULT_CHARSET_AND_COLLATE: Final[str] = "utf8/general_ci"
DEFAULT_COLLATE: Final[str] = "utf8_general_ci"

# Format used to store datetimes, always in UTC
DATETIME_DB_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"
DATE_DB_FORMAT: Final[str] = "%Y-%m-%d"

CONNECTION_ID_PRIMARY: Final[str] = "primary"

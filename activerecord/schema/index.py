"""Index definition."""

from dataclasses import dataclass

from activerecord.exceptions import SchemaNotValid


@dataclass(frozen=True)
class Index:
    """Index over one or more columns.

    Column order is significant, it is the order of the index key.

    Attributes:
        columns: Column identifiers, a single identifier is accepted
        unique: Whether the index is unique
        name: Name of the index, derived from the columns when omitted
    """

    columns: tuple[str, ...]
    unique: bool = False
    name: str | None = None

    def __post_init__(self) -> None:
        columns = self.columns

        if isinstance(columns, str):
            columns = (columns,)
        else:
            columns = tuple(columns)

        if not columns:
            raise SchemaNotValid("An index requires at least one column")

        object.__setattr__(self, "columns", columns)

    @property
    def resolved_name(self) -> str:
        """Get the name of the index, the columns joined with ``_`` by default."""
        return self.name or "_".join(self.columns)

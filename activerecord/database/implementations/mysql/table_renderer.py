"""MySQL-specific table renderer implementation."""

from activerecord.constants import DEFAULT_COLLATE
from activerecord.database.interfaces.table_renderer import TableRenderer
from activerecord.schema import Column, Integer, Schema
from activerecord.types import DefaultToken, Dialect


class MySQLTableRenderer(TableRenderer):
    """MySQL-specific table renderer."""

    dialect = Dialect.MYSQL

    def __init__(self, charset: str | None = None, collate: str = DEFAULT_COLLATE) -> None:
        """Initialize MySQL table renderer.

        Args:
            charset: Character set of the table, omitted when None
            collate: Collate of the table
        """
        self.charset = charset
        self.collate = collate

    def render_column_constraint(
        self, schema: Schema, identifier: str, column: Column
    ) -> str:
        """Render the constraint of a column for MySQL.

        Args:
            schema: Schema of the table
            identifier: Column identifier
            column: Column definition

        Returns:
            Column constraint, e.g. ``UNSIGNED NOT NULL AUTO_INCREMENT UNIQUE``
        """
        constraint = ""

        if isinstance(column, Integer) and column.unsigned:
            constraint += " UNSIGNED"

        constraint += " NULL" if column.null else " NOT NULL"

        if column.is_serial:
            constraint += " AUTO_INCREMENT"

        if column.default is not None:
            constraint += f" DEFAULT {self.render_default(column.default)}"

        if column.unique:
            constraint += " UNIQUE"

        if column.collate:
            constraint += f" COLLATE {column.collate}"

        return constraint.lstrip()

    def render_default_token(self, token: DefaultToken) -> str:
        # Expressions are only accepted as default when wrapped in parentheses
        if token == DefaultToken.NOW:
            return "(NOW())"
        return f"({token.value})"

    def render_table_constraints(self, schema: Schema) -> list[str]:
        constraints = []

        if schema.primary_columns:
            constraints.append(f"PRIMARY KEY ({', '.join(schema.primary_columns)})")

        constraints.extend(self.render_unique_constraints(schema))
        return constraints

    def render_table_options(self) -> list[str]:
        options = []

        if self.charset:
            options.append(f"CHARACTER SET {self.charset}")

        options.append(f"COLLATE {self.collate}")
        return options

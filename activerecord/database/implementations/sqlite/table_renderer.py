"""SQLite-specific table renderer implementation."""

from activerecord.database.interfaces.table_renderer import TableRenderer
from activerecord.exceptions import SchemaNotValid
from activerecord.schema import BelongsTo, Column, Schema
from activerecord.types import DefaultToken, Dialect


class SQLiteTableRenderer(TableRenderer):
    """SQLite-specific table renderer.

    AUTOINCREMENT is only accepted on a column declared ``INTEGER PRIMARY KEY``,
    so a serial column that is the whole primary key carries the primary key
    clause itself. A serial column part of a composite primary key is
    rendered as a plain integer.
    """

    dialect = Dialect.SQLITE

    def validate(self, schema: Schema) -> None:
        serial = schema.serial_column

        if serial and serial not in schema.primary_columns:
            raise SchemaNotValid(
                f"The serial column `{serial}` must be the primary key, or part of it"
            )

    @staticmethod
    def autoincrement_column(schema: Schema) -> str | None:
        """Get the column rendered as ``INTEGER PRIMARY KEY AUTOINCREMENT``, if any."""
        serial = schema.serial_column
        return serial if serial and schema.primary == serial else None

    def render_type_name(self, identifier: str, column: Column) -> str:
        # SQLite doesn't like sizes on serial and foreign key columns
        if column.is_serial or isinstance(column, BelongsTo):
            return "INTEGER"

        return super().render_type_name(identifier, column)

    def render_column_constraint(
        self, schema: Schema, identifier: str, column: Column
    ) -> str:
        """Render the constraint of a column for SQLite.

        Args:
            schema: Schema of the table
            identifier: Column identifier
            column: Column definition

        Returns:
            Column constraint, e.g. ``PRIMARY KEY AUTOINCREMENT NOT NULL UNIQUE``
        """
        constraint = ""

        if identifier == self.autoincrement_column(schema):
            constraint += " PRIMARY KEY AUTOINCREMENT"

        constraint += " NULL" if column.null else " NOT NULL"

        if column.default is not None:
            constraint += f" DEFAULT {self.render_default(column.default)}"

        if column.unique:
            constraint += " UNIQUE"

        if column.collate:
            constraint += f" COLLATE {column.collate}"

        return constraint.lstrip()

    def render_default_token(self, token: DefaultToken) -> str:
        if token == DefaultToken.NOW:
            return DefaultToken.CURRENT_TIMESTAMP.value
        return token.value

    def render_table_constraints(self, schema: Schema) -> list[str]:
        constraints = []
        primary = schema.primary_columns

        if primary and self.autoincrement_column(schema) is None:
            constraints.append(f"PRIMARY KEY ({', '.join(primary)})")

        constraints.extend(self.render_unique_constraints(schema))
        return constraints

    def render_table_options(self) -> list[str]:
        return []

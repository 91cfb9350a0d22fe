"""Abstract table renderer for different SQL dialects."""

from abc import ABC, abstractmethod

from activerecord.schema import (
    BelongsTo,
    Blob,
    Boolean,
    Character,
    Column,
    Date,
    DateTime,
    Decimal,
    Integer,
    Schema,
    Text,
    Time,
    Timestamp,
)
from activerecord.schema.columns import DefaultType
from activerecord.types import DefaultToken, Dialect
from activerecord.utils import quote_literal


class TableRenderer(ABC):
    """Render the DDL of a schema.

    The mapping of column types to SQL types is shared, dialects override the
    column constraints, the table constraints and the table options.
    """

    dialect: Dialect

    def render(self, schema: Schema, table_name: str) -> str:
        """Render the statements creating a table and its indexes.

        Returns:
            CREATE TABLE statement, followed by the CREATE INDEX statements
        """
        return " ".join(
            [self.render_create_table(schema, table_name)]
            + self.render_create_indexes(schema, table_name)
        )

    def render_create_table(self, schema: Schema, table_name: str) -> str:
        """Generate CREATE TABLE SQL.

        Args:
            schema: Schema of the table
            table_name: Name of the table, prefix included

        Returns:
            CREATE TABLE SQL statement
        """
        self.validate(schema)

        definitions = [
            self.render_column(schema, identifier, column)
            for identifier, column in schema.items()
        ]
        definitions.extend(self.render_table_constraints(schema))

        options = " ".join(self.render_table_options())
        suffix = f" {options}" if options else ""

        return f"CREATE TABLE {table_name} ({', '.join(definitions)}){suffix};"

    def render_create_indexes(self, schema: Schema, table_name: str) -> list[str]:
        """Generate CREATE INDEX SQL, one statement per index.

        Unnamed unique indexes are rendered as table constraints instead.

        Args:
            schema: Schema of the table
            table_name: Name of the table, prefix included

        Returns:
            CREATE INDEX SQL statements
        """
        statements = []

        for index in schema.indexes:
            if index.unique and not index.name:
                continue

            unique = "UNIQUE " if index.unique else ""
            columns = ", ".join(index.columns)
            statements.append(
                f"CREATE {unique}INDEX {index.resolved_name} ON {table_name} ({columns});"
            )

        return statements

    def render_drop_table(self, table_name: str, if_exists: bool = False) -> str:
        """Generate DROP TABLE SQL."""
        condition = "IF EXISTS " if if_exists else ""
        return f"DROP TABLE {condition}{table_name};"

    def validate(self, schema: Schema) -> None:
        """Check that the schema can be rendered for the dialect.

        Raises:
            SchemaNotValid: If the dialect cannot represent the schema
        """
        pass

    def render_column(self, schema: Schema, identifier: str, column: Column) -> str:
        type_name = self.render_type_name(identifier, column)
        constraint = self.render_column_constraint(schema, identifier, column)
        return f"{identifier} {type_name} {constraint}"

    def render_type_name(self, identifier: str, column: Column) -> str:
        """Map a column to its SQL type."""
        if isinstance(column, Boolean):
            return "BOOLEAN"

        if isinstance(column, Integer | BelongsTo):
            return f"INTEGER({int(column.size)})"

        if isinstance(column, Decimal):
            if column.approximate:
                return f"FLOAT({column.precision})"
            return f"DECIMAL({column.precision}, {column.scale})"

        if isinstance(column, Character):
            if column.binary:
                kind = "BINARY" if column.fixed else "VARBINARY"
            else:
                kind = "CHAR" if column.fixed else "VARCHAR"
            return f"{kind}({column.size})"

        if isinstance(column, Text | Blob):
            suffix = "TEXT" if isinstance(column, Text) else "BLOB"
            return f"{column.size.value}{suffix}"

        temporal_types: dict[type[Column], str] = {
            DateTime: "DATETIME",
            Timestamp: "TIMESTAMP",
            Date: "DATE",
            Time: "TIME",
        }

        if type(column) in temporal_types:
            return temporal_types[type(column)]

        raise TypeError(f"Don't know what to do with {type(column).__name__}")

    def render_default(self, default: DefaultType) -> str:
        """Render a default value, named tokens are left unquoted."""
        if isinstance(default, DefaultToken):
            return self.render_default_token(default)
        return quote_literal(default)

    @abstractmethod
    def render_default_token(self, token: DefaultToken) -> str:
        pass

    @abstractmethod
    def render_column_constraint(
        self, schema: Schema, identifier: str, column: Column
    ) -> str:
        """Render what follows the type of a column: nullability, default..."""
        pass

    @abstractmethod
    def render_table_constraints(self, schema: Schema) -> list[str]:
        """Render the table constraints: primary key, unnamed unique indexes."""
        pass

    @abstractmethod
    def render_table_options(self) -> list[str]:
        """Render the options following the closing parenthesis."""
        pass

    @staticmethod
    def render_unique_constraints(schema: Schema) -> list[str]:
        return [
            f"UNIQUE ({', '.join(index.columns)})"
            for index in schema.indexes
            if index.unique and not index.name
        ]


"""Exceptions raised by the activerecord package."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from activerecord.model import Model
    from activerecord.record import ActiveRecord


class ActiveRecordError(Exception):
    """Base exception for activerecord errors."""

    pass


class SchemaNotValid(ActiveRecordError, ValueError):
    """Raised when a column, an index or a schema is defined with invalid options."""

    pass


class DriverNotDefined(ActiveRecordError, ValueError):
    """Raised when no renderer or connection exists for a dialect."""

    def __init__(self, dialect: str) -> None:
        self.dialect = dialect
        super().__init__(f"Driver not defined for: {dialect}.")


class ConnectionNotEstablished(ActiveRecordError, RuntimeError):
    """Raised when a statement is issued on a closed connection."""

    pass


class StatementNotValid(ActiveRecordError, RuntimeError):
    """Raised when the database rejects a statement.

    A statement rejected while being prepared only carries its SQL, ``args``
    is ``None``. A statement rejected while being executed carries the
    arguments it was bound to, they are included in the message.
    """

    def __init__(
        self,
        statement: str,
        args: list[Any] | tuple[Any, ...] | None = None,
        original: BaseException | None = None,
    ) -> None:
        self.statement = statement
        self.args_ = list(args) if args is not None else None
        self.original = original
        self.code = _diagnostic_code(original)
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        message = ""

        if self.original is not None:
            message = f"{self.code} {self.original} - "

        message += f"`{self.statement}`"

        if self.args_:
            message += " " + json.dumps(self.args_, default=str)

        return message


def _diagnostic_code(original: BaseException | None) -> str | None:
    if original is None:
        return None

    return getattr(original, "sqlite_errorname", None) or type(original).__name__


class RecordNotFound(ActiveRecordError, LookupError):
    """Raised when one record, or every record of a set, cannot be found.

    ``records`` maps each requested key to the record found, or ``None``.
    """

    def __init__(self, message: str, records: dict[Any, Any] | None = None) -> None:
        self.records = records or {}
        super().__init__(message)


class RecordNotValid(ActiveRecordError, ValueError):
    """Raised when a record fails validation before being saved."""

    DEFAULT_MESSAGE = "The record is not valid."

    def __init__(self, record: ActiveRecord, errors: dict[str, list[str]]) -> None:
        self.record = record
        self.errors = errors
        super().__init__(self._format_message(errors))

    @classmethod
    def _format_message(cls, errors: dict[str, list[str]]) -> str:
        message = cls.DEFAULT_MESSAGE + "\n"

        for attribute, attribute_errors in errors.items():
            for error in attribute_errors:
                message += f"\n- {attribute}: {error}"

        return message


class ScopeNotDefined(ActiveRecordError, AttributeError):
    """Raised when an unknown scope is invoked on a model or a query."""

    def __init__(self, scope_name: str, model: Model) -> None:
        self.scope_name = scope_name
        self.model = model
        super().__init__(f"Unknown scope `{scope_name}` for model `{model.id}`.")


class RelationNotDefined(ActiveRecordError, LookupError):
    """Raised when an unknown relation is requested from a model."""

    def __init__(self, relation_name: str, model: Model) -> None:
        self.relation_name = relation_name
        self.model = model
        super().__init__(f"Unknown relation `{relation_name}` for model `{model.id}`.")


class ActiveRecordClassNotValid(ActiveRecordError, ValueError):
    """Raised when a model is not bound to a concrete record class."""

    def __init__(self, record_class: type | None, message: str | None = None) -> None:
        self.record_class = record_class
        name = record_class.__qualname__ if record_class else None
        super().__init__(message or f"ActiveRecord class is not valid: {name}.")


class ModelAlreadyInstantiated(ActiveRecordError, RuntimeError):
    """Raised when a model identifier is defined or instantiated twice."""

    def __init__(self, model_id: str) -> None:
        self.model_id = model_id
        super().__init__(f"Model already instantiated: {model_id}.")


class ModelNotDefined(ActiveRecordError, LookupError):
    """Raised when an unknown model identifier is requested."""

    def __init__(self, model_id: str) -> None:
        self.model_id = model_id
        super().__init__(f"Model not defined: {model_id}.")

"""Records: the row-level half of the active record pattern."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ValidationError

from .exceptions import RecordNotValid
from .log import get_logger
from .models import get_default_models, get_model, has_default_models
from .properties import temporal_properties
from .relations import BelongsToRelation
from .types import KeyType, RowType

if TYPE_CHECKING:
    from .model import Model

logger = get_logger(__name__)


class ActiveRecord:
    """A row of a table, with its properties as attributes.

    Subclasses are bound to a model, either explicitly with ``model_id`` or
    through the record class of a model definition::

        class Article(ActiveRecord):
            model_id = "articles"
            validator = ArticleValidator
            created_at = TemporalProperty(on_create=True)

    Attributes that are neither set nor defined are resolved, in order, as
    schema columns (None when unset), relations, and scopes of the model.
    """

    model_id: ClassVar[str | None] = None
    validator: ClassVar[type[BaseModel] | None] = None

    def __init__(self, model: Model | str | None = None, **properties: Any) -> None:
        """Initialize a record.

        Args:
            model: The model of the record, its identifier in the default
                collection, or None to resolve it from the record class
            **properties: Properties of the record
        """
        object.__setattr__(self, "_model", model)

        for name, value in properties.items():
            setattr(self, name, value)

    @classmethod
    def from_row(cls, model: Model, row: RowType) -> ActiveRecord:
        """Create a record from a row fetched from the database."""
        record = cls.__new__(cls)
        object.__setattr__(record, "_model", model)
        record.__dict__.update(row)
        return record

    @property
    def model(self) -> Model:
        """Get the model of the record.

        Raises:
            RuntimeError: If the model is not given and there is no default
                model collection
            ModelNotDefined: If the model cannot be found
        """
        from .model import Model

        model = self._model

        if isinstance(model, Model):
            return model

        if isinstance(model, str):
            model = get_model(model)
        else:
            model = get_default_models().model_for_record(type(self))

        object.__setattr__(self, "_model", model)
        return model

    def _model_or_none(self) -> Model | None:
        from .model import Model

        if isinstance(self._model, Model) or has_default_models():
            return self.model

        return None

    @property
    def key(self) -> KeyType | None:
        """Get the value of the primary key, a tuple for composite keys."""
        return self.model.cache.key_of(self)

    def __getattr__(self, name: str) -> Any:
        # Properties raising AttributeError end up here
        if name.startswith("_") or name in ("model", "key"):
            raise AttributeError(name)

        model = self._model_or_none()

        if model is None:
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}' and no model"
            )

        if name in model.extended_schema:
            return None

        if type(self) is not ActiveRecord and name in model.relations:
            return model.relations[name](self)

        if model.resolve_scope(name) is not None:
            return getattr(model, name)

        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        relation = self._belongs_to_relation(name)

        if relation is not None:
            relation.assign(self, value)
            return

        object.__setattr__(self, name, value)

    def _belongs_to_relation(self, name: str) -> BelongsToRelation | None:
        if name.startswith("_") or type(self) is ActiveRecord:
            return None

        model = self._model_or_none()

        if model is None or name in model.extended_schema or name not in model.relations:
            return None

        relation = model.relations[name]
        return relation if isinstance(relation, BelongsToRelation) else None

    def __repr__(self) -> str:
        from .model import Model

        model = self.__dict__.get("_model")

        if isinstance(model, Model):
            return f"<{type(self).__name__} {model.id}:{self.key!r}>"

        return f"<{type(self).__name__}>"

    def relation(self, name: str) -> Any:
        """Resolve a relation of the record.

        Returns:
            A record or None for a belongs-to relation, a query for a has-many one

        Raises:
            RelationNotDefined: If the relation is not defined
            ActiveRecordClassNotValid: If the model of the record is bound to
                the ActiveRecord base class
        """
        return self.model.relations[name](self)

    def to_dict(self) -> dict[str, Any]:
        """Get the persistent properties of the record.

        Unset properties are omitted, except for nullable columns.
        """
        values = {}

        for column_id, column in self.model.extended_schema.items():
            value = getattr(self, column_id)

            if value is None and not column.null:
                continue

            values[column_id] = value

        return values

    def validate(self) -> dict[str, list[str]]:
        """Validate the record.

        Returns:
            Error messages keyed by property, empty when the record is valid
        """
        if self.validator is None:
            return {}

        data = {column_id: getattr(self, column_id) for column_id in self.model.extended_schema}

        try:
            self.validator.model_validate(data)
        except ValidationError as e:
            errors: dict[str, list[str]] = {}

            for error in e.errors():
                field = ".".join(str(part) for part in error["loc"]) or "__root__"
                errors.setdefault(field, []).append(error["msg"])

            return errors

        return {}

    def before_save(self) -> None:
        """Hook called after validation, before the record is written.

        Temporal properties declared with ``on_create`` or ``on_update`` are
        set here.
        """
        for temporal_property in temporal_properties(type(self)).values():
            temporal_property.before_save(self)

    def save(self) -> ActiveRecord:
        """Validate the record, then insert or update it.

        A record whose key is generated by the database is updated when its
        key is set, inserted otherwise. Other records are inserted, or
        updated when a row with the same key exists.

        Raises:
            RecordNotValid: If the record is not valid, nothing is written
        """
        errors = self.validate()

        if errors:
            raise RecordNotValid(self, errors)

        self.before_save()
        model = self.model
        values = self.to_dict()
        primary = model.primary

        if primary is None:
            model.insert(values)
            return self

        if isinstance(primary, tuple) or (
            not model.generates_keys and values.get(primary) is not None
        ):
            model.cache.eliminate(self.key)
            model.insert(values, on_duplicate=True)
            return self

        key = values.pop(primary, None)
        key = model.save(values, key)
        object.__setattr__(self, primary, key)
        logger.debug(f"Saved record `{key}` of model `{model.id}`")
        return self

    def delete(self) -> bool:
        """Delete the record.

        Returns:
            Whether a row was deleted

        Raises:
            ValueError: If the record has no key
        """
        key = self.key

        if key is None or (isinstance(key, tuple) and None in key):
            raise ValueError(f"Unable to delete a record without key: {self!r}")

        return self.model.delete(key)

"""Collection of models.

Models are declared with :class:`ModelDefinition` and instantiated on first
access, so definitions may reference each other in any order::

    models = ModelCollection(connection, [
        ModelDefinition("brands", brands_schema, record_class=Brand,
                        has_many=[HasManyDefinition("cars")]),
        ModelDefinition("cars", cars_schema, record_class=Car),
    ])
    models.install()
    models["cars"].find(1)

A process-wide collection can be set with :func:`set_default_models`, records
created without a model resolve theirs through it.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .constants import CONNECTION_ID_PRIMARY
from .database.interfaces import DatabaseConnection
from .exceptions import ModelAlreadyInstantiated, ModelNotDefined
from .log import get_logger
from .model import Model, ScopeType
from .query import Query
from .schema import Schema

if TYPE_CHECKING:
    from .record import ActiveRecord

logger = get_logger(__name__)


@dataclass(frozen=True)
class HasManyDefinition:
    """Has-many relation of a model.

    Attributes:
        associate: Identifier of the related model
        as_: Name of the relation, the related identifier by default
        local_key: Column of the owner, its primary key by default
        foreign_key: Column of the related model, the owner primary key by default
        through: Identifier of a pivot model
    """

    associate: str
    as_: str | None = None
    local_key: str | None = None
    foreign_key: str | None = None
    through: str | None = None


@dataclass(frozen=True)
class ModelDefinition:
    """Everything needed to instantiate a model.

    ``extends`` is the identifier of a parent model: the rows of the model
    extend the rows of the parent, which are joined in queries.
    """

    id: str
    schema: Schema
    record_class: type[ActiveRecord] | None = None
    query_class: type[Query] | None = None
    model_class: type[Model] = Model
    table_name: str | None = None
    alias: str | None = None
    connection: str = CONNECTION_ID_PRIMARY
    has_many: tuple[HasManyDefinition, ...] | list[HasManyDefinition] = ()
    scopes: Mapping[str, ScopeType] = field(default_factory=dict)
    extends: str | None = None


class ModelCollection:
    """Models by identifier, instantiated once each."""

    def __init__(
        self,
        connections: DatabaseConnection | Mapping[str, DatabaseConnection],
        definitions: Iterable[ModelDefinition] = (),
    ) -> None:
        """Initialize the collection.

        Args:
            connections: The primary connection, or connections by identifier
            definitions: Model definitions
        """
        if isinstance(connections, DatabaseConnection):
            connections = {CONNECTION_ID_PRIMARY: connections}

        self.connections = dict(connections)
        self._definitions: dict[str, ModelDefinition] = {}
        self._models: dict[str, Model] = {}

        for definition in definitions:
            self.define(definition)

    def define(self, definition: ModelDefinition) -> None:
        """Add a model definition, replacing a previous one.

        Raises:
            ModelAlreadyInstantiated: If the model is already instantiated
        """
        if definition.id in self._models:
            raise ModelAlreadyInstantiated(definition.id)

        self._definitions[definition.id] = definition

    def register(self, model: Model) -> None:
        """Add an instantiated model.

        Raises:
            ModelAlreadyInstantiated: If a model with the same identifier is
                already instantiated
        """
        if model.id in self._models:
            raise ModelAlreadyInstantiated(model.id)

        self._models[model.id] = model

    def __getitem__(self, model_id: str) -> Model:
        model = self._models.get(model_id)

        if model is not None:
            return model

        definition = self._definitions.get(model_id)

        if definition is None:
            raise ModelNotDefined(model_id)

        return self._instantiate(definition)

    def _instantiate(self, definition: ModelDefinition) -> Model:
        try:
            connection = self.connections[definition.connection]
        except KeyError as e:
            raise ValueError(
                f"Connection `{definition.connection}` of model `{definition.id}`"
                " is not defined"
            ) from e

        return definition.model_class(
            definition.id,
            definition.schema,
            connection,
            record_class=definition.record_class,
            query_class=definition.query_class,
            table_name=definition.table_name,
            alias=definition.alias,
            scopes=definition.scopes,
            has_many=tuple(definition.has_many),
            models=self,
            parent=self[definition.extends] if definition.extends else None,
        )

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._definitions or model_id in self._models

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids)

    def __len__(self) -> int:
        return len(self.ids)

    @property
    def ids(self) -> list[str]:
        """Get the identifiers of the models, defined or instantiated."""
        return list(dict.fromkeys([*self._definitions, *self._models]))

    def is_instantiated(self, model_id: str) -> bool:
        return model_id in self._models

    def resolve(self, model: Model | str | type | Any) -> Model:
        """Get a model from a model, an identifier, a record or a record class."""
        if isinstance(model, Model):
            return model

        if isinstance(model, str):
            return self[model]

        return self.model_for_record(model)

    def model_for_record(self, record: type[ActiveRecord] | ActiveRecord) -> Model:
        """Get the model of a record class, or of a record.

        Raises:
            ModelNotDefined: If no model is bound to the record class
        """
        record_class = record if isinstance(record, type) else type(record)

        for model_id, definition in self._definitions.items():
            if definition.record_class is record_class:
                return self[model_id]

        for model in self._models.values():
            if model.record_class is record_class:
                return model

        model_id = getattr(record_class, "model_id", None)

        if model_id and model_id in self:
            return self[model_id]

        raise ModelNotDefined(record_class.__qualname__)

    def install(self) -> None:
        """Create the tables of every model, existing tables are kept."""
        for model_id in self:
            model = self[model_id]
            if not model.is_installed():
                model.install()

        logger.info(f"Installed {len(self)} models")

    def uninstall(self) -> None:
        """Drop the tables of every model."""
        for model_id in reversed(self.ids):
            self[model_id].uninstall()

        logger.info(f"Uninstalled {len(self)} models")

    def is_installed(self) -> bool:
        return all(self[model_id].is_installed() for model_id in self)


_default_models: ModelCollection | None = None


def set_default_models(models: ModelCollection) -> None:
    """Set the process-wide collection used by records created without a model."""
    global _default_models
    _default_models = models


def has_default_models() -> bool:
    return _default_models is not None


def get_default_models() -> ModelCollection:
    if _default_models is None:
        raise RuntimeError("No default model collection, call set_default_models()")

    return _default_models


def reset_default_models() -> None:
    global _default_models
    _default_models = None


def get_model(model_id: str) -> Model:
    """Get a model of the process-wide collection.

    Raises:
        RuntimeError: If no default collection is set
        ModelNotDefined: If the model is not defined
    """
    return get_default_models()[model_id]

"""ActiveRecord-style ORM: schemas, dialect renderers, queries, models and records."""

from .bootstrap import bootstrap, configure_logging, create_default_connection, shutdown
from .cache import RuntimeRecordCache
from .config import ConnectionDefinition, Settings, load_settings
from .database import (
    DatabaseConnection,
    MySQLTableRenderer,
    SQLiteConnection,
    SQLiteTableRenderer,
    TableRenderer,
    create_connection,
    renderer_for_dialect,
)
from .exceptions import (
    ActiveRecordClassNotValid,
    ActiveRecordError,
    ConnectionNotEstablished,
    DriverNotDefined,
    ModelAlreadyInstantiated,
    ModelNotDefined,
    RecordNotFound,
    RecordNotValid,
    RelationNotDefined,
    SchemaNotValid,
    ScopeNotDefined,
    StatementNotValid,
)
from .log import (
    get_logger,
    setup_logging,
    setup_production_logging,
    setup_test_logging,
)
from .model import Model
from .models import (
    HasManyDefinition,
    ModelCollection,
    ModelDefinition,
    get_model,
    reset_default_models,
    set_default_models,
)
from .properties import TemporalProperty
from .query import Query
from .record import ActiveRecord
from .relations import BelongsToRelation, HasManyRelation, RelationCollection
from .types import Dialect, Environment

__all__ = [
    "ActiveRecord",
    "ActiveRecordClassNotValid",
    "ActiveRecordError",
    "BelongsToRelation",
    "ConnectionDefinition",
    "ConnectionNotEstablished",
    "DatabaseConnection",
    "Dialect",
    "DriverNotDefined",
    "Environment",
    "HasManyDefinition",
    "HasManyRelation",
    "Model",
    "ModelAlreadyInstantiated",
    "ModelCollection",
    "ModelDefinition",
    "ModelNotDefined",
    "MySQLTableRenderer",
    "Query",
    "RecordNotFound",
    "RecordNotValid",
    "RelationCollection",
    "RelationNotDefined",
    "RuntimeRecordCache",
    "SQLiteConnection",
    "SQLiteTableRenderer",
    "SchemaNotValid",
    "ScopeNotDefined",
    "Settings",
    "StatementNotValid",
    "TableRenderer",
    "TemporalProperty",
    "bootstrap",
    "configure_logging",
    "create_connection",
    "create_default_connection",
    "get_logger",
    "get_model",
    "load_settings",
    "renderer_for_dialect",
    "reset_default_models",
    "set_default_models",
    "setup_logging",
    "setup_production_logging",
    "setup_test_logging",
    "shutdown",
]

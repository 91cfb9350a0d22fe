"""Set up logging, the primary connection and the default models from settings."""

from collections.abc import Iterable

from .config import Settings, load_settings
from .database import DatabaseConnection, create_connection
from .log import get_logger, setup_logging
from .models import (
    ModelCollection,
    ModelDefinition,
    get_default_models,
    has_default_models,
    reset_default_models,
    set_default_models,
)

logger = get_logger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure logging with the level and statement logging of the settings."""
    setup_logging(
        level=settings.log_level,
        is_test_env=settings.is_testing,
        log_statements=settings.log_statements,
    )


def create_default_connection(settings: Settings) -> DatabaseConnection:
    """Create and open the primary connection described by the settings.

    Raises:
        DriverNotDefined: If no connection is available for the dialect
    """
    connection = create_connection(settings.connection_definition())
    connection.connect()
    return connection


def bootstrap(
    definitions: Iterable[ModelDefinition] = (),
    settings: Settings | None = None,
    install: bool = False,
) -> ModelCollection:
    """Configure the library and set the process-wide model collection.

    Args:
        definitions: Definitions of the models
        settings: Settings to use, loaded from the environment by default
        install: Whether the tables of the models are created

    Returns:
        The default model collection, on the primary connection
    """
    settings = settings or load_settings()

    configure_logging(settings)
    connection = create_default_connection(settings)
    models = ModelCollection(connection, definitions)

    if install:
        models.install()

    set_default_models(models)
    logger.info(
        f"Bootstrapped {len(models)} models in {settings.environment.value} mode"
        f" on {settings.dsn}"
    )
    return models


def shutdown() -> None:
    """Close the connections of the default collection and unset it."""
    if not has_default_models():
        return

    for connection in get_default_models().connections.values():
        connection.disconnect()

    reset_default_models()
    logger.info("Default models released")

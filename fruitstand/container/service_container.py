"""
================================================================================
SERVICE CONTAINER - STORAGE HANDLE INITIALIZATION
================================================================================

Main dependency injection container.

Owns the single process-wide storage handle (SQLAlchemy AsyncEngine) and the
FruitRepository built on it. Created once at startup, stored on
app.state.container and handed to handlers through Depends(); handlers
never look it up from module globals.

USAGE:

  container = ServiceContainer(settings)
  await container.initialize()
  repository = container.get_repository()
  fruits = await repository.list_all(scope)

FLOW:

  .env: DB_HOST=localhost DB_PORT=5432 ...
    ↓
  Settings.database_url = postgresql+asyncpg://postgres@localhost:5432/postgres
    ↓
  create_async_engine(database_url)
    ↓
  FruitRepository(engine).ping()   (SELECT 1, fails startup if unreachable)
    ↓
  Return to application
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from fruitstand.config.settings import Settings
from fruitstand.core.exceptions import ServiceInitializationError, StorageError
from fruitstand.core.fruit_repository import FruitRepository

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Dependency injection container for the storage handle.

    An engine passed in (tests, embedding apps) is used as-is and left open
    on shutdown; an engine the container creates is disposed on shutdown.
    """

    def __init__(self, settings: Settings, engine: Optional[AsyncEngine] = None) -> None:
        """
        Initialize container with settings.

        Args:
            settings: Configuration object (from .env)
            engine: Optional pre-built AsyncEngine
        """
        self.settings = settings

        self._engine: Optional[AsyncEngine] = engine
        self._owns_engine = engine is None
        self._repository: Optional[FruitRepository] = None

        logger.info("ServiceContainer instantiated")

    @property
    def initialized(self) -> bool:
        return self._repository is not None

    async def initialize(self) -> None:
        """
        Create the engine (if needed) and verify the database is reachable.

        Raises:
            ServiceInitializationError: engine creation or ping failed
        """
        logger.info("=" * 80)
        logger.info("INITIALIZING SERVICE CONTAINER")
        logger.info("=" * 80)

        try:
            if self._engine is None:
                self._engine = create_async_engine(self.settings.database_url)
                logger.info(
                    f"Engine created: {self._engine.url.render_as_string(hide_password=True)}"
                )

            repository = FruitRepository(self._engine)
            await repository.ping()

        except StorageError as e:
            logger.error(f"Database ping failed: {e.message}", exc_info=True)
            raise ServiceInitializationError(
                f"Failed to connect to database: {e.message}"
            ) from e
        except Exception as e:
            logger.error(
                f"ServiceContainer initialization failed: {str(e)}",
                exc_info=True,
            )
            raise ServiceInitializationError(
                f"Failed to initialize container: {str(e)}"
            ) from e

        self._repository = repository
        logger.info("Successfully connected!")

    async def shutdown(self) -> None:
        """Dispose the engine if this container created it."""
        logger.info("Shutting down ServiceContainer...")

        if self._engine is not None and self._owns_engine:
            try:
                await self._engine.dispose()
                logger.info("✓ Engine disposed")
            except Exception as e:
                logger.error(f"Error disposing engine: {str(e)}")

        self._repository = None
        logger.info("✓ ServiceContainer shutdown complete")

    # ========================================================================
    # ACCESSOR METHODS
    # ========================================================================

    def get_engine(self) -> AsyncEngine:
        """Get the shared AsyncEngine."""
        if self._engine is None:
            raise RuntimeError("Engine not initialized")
        return self._engine

    def get_repository(self) -> FruitRepository:
        """Get the FruitRepository instance."""
        if self._repository is None:
            raise RuntimeError(
                "Repository not initialized. Check ServiceContainer.initialize()."
            )
        return self._repository

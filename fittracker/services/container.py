"""
Service Container - Dependency Injection Container

Simple DI container for the gamification service and its storage backend.
Uses lazy loading to only instantiate services when first accessed.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

from fittracker import config
from fittracker.db.connection import Database
from fittracker.db.repository import GamificationRepository, InMemoryGamificationRepository

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Simple dependency injection container for services.

    Services are lazy-loaded on first access via properties.
    The storage backend is chosen by `backend` ('memory' or 'postgres').
    """

    backend: str = "memory"
    db: Optional[Database] = None  # Required for the postgres backend

    _repository: Optional[GamificationRepository] = field(default=None, init=False, repr=False)
    _gamification_service: Optional[object] = field(default=None, init=False, repr=False)

    @property
    def repository(self) -> GamificationRepository:
        """Get the gamification repository (lazy-loaded)"""
        if self._repository is None:
            if self.backend == "postgres":
                if self.db is None:
                    raise RuntimeError("The postgres backend needs a Database instance")
                from fittracker.db.queries.gamification import PostgresGamificationRepository
                self._repository = PostgresGamificationRepository(self.db)
            else:
                self._repository = InMemoryGamificationRepository()
            logger.debug(f"{type(self._repository).__name__} instantiated")
        return self._repository

    @property
    def gamification_service(self):
        """Get GamificationService instance (lazy-loaded)"""
        if self._gamification_service is None:
            from fittracker.services.gamification_service import GamificationService
            self._gamification_service = GamificationService(self.repository)
            logger.debug("GamificationService instantiated")
        return self._gamification_service


# Global container instance (initialized by init_container)
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """
    Get the global service container.

    Raises:
        RuntimeError: If container not initialized (call init_container first)
    """
    if _container is None:
        raise RuntimeError(
            "Service container not initialized. "
            "Call init_container() during startup before using services."
        )
    return _container


def init_container(
    backend: Optional[str] = None,
    db: Optional[Database] = None,
) -> ServiceContainer:
    """
    Initialize the global service container.

    Args:
        backend: 'memory' or 'postgres' (defaults to GAMIFICATION_BACKEND)
        db: Database instance for the postgres backend

    Returns:
        ServiceContainer: The initialized container
    """
    global _container

    _container = ServiceContainer(backend=backend or config.GAMIFICATION_BACKEND, db=db)

    logger.info(f"Service container initialized (backend={_container.backend})")
    return _container


def reset_container() -> None:
    """Drop the global container"""
    global _container
    _container = None

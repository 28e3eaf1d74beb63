"""
Storage backend selection

``get_storage`` is a FastAPI dependency; tests replace it through
``app.dependency_overrides``.
"""
import logging
from functools import lru_cache

from .config import settings
from stockledger.storage.base import StorageAdapter
from stockledger.storage.memory import InMemoryStorageAdapter

logger = logging.getLogger(__name__)


def build_storage(backend: str = None) -> StorageAdapter:
    """Create the storage adapter named by STORAGE_BACKEND"""
    backend = (backend or settings.STORAGE_BACKEND).lower()
    options = dict(
        max_attempts=settings.TRANSACTION_MAX_ATTEMPTS,
        retry_delay=settings.TRANSACTION_RETRY_DELAY,
        default_timeout=settings.TRANSACTION_TIMEOUT,
    )

    if backend == "memory":
        logger.info("Using in-memory storage backend")
        return InMemoryStorageAdapter(**options)

    if backend == "postgres":
        # Imported lazily so the memory backend works without a database driver configured
        from stockledger.storage.postgres import PostgresStorageAdapter

        logger.info("Using PostgreSQL storage backend")
        storage = PostgresStorageAdapter(settings.DATABASE_URL, **options)
        storage.ensure_schema()
        return storage

    raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r} (expected 'memory' or 'postgres')")


@lru_cache()
def get_storage() -> StorageAdapter:
    """
    FastAPI dependency returning the process-wide storage adapter

    Usage:
        @router.get("/items")
        def read_items(storage: StorageAdapter = Depends(get_storage)):
            ...
    """
    return build_storage()

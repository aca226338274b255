"""
Cache Store Factory

Creates the appropriate response cache based on configuration.
"""

import logging
from typing import Optional

from config import CACHE_BACKEND, CACHE_DB_PATH

from .base import CacheStore
from .memory_store import MemoryCacheStore
from .sqlite_store import SQLiteCacheStore

logger = logging.getLogger(__name__)


def get_cache_store(backend: Optional[str] = None) -> CacheStore:
    """
    Factory function to create the cache store.

    Args:
        backend: "memory" | "sqlite" (Default: CACHE_BACKEND)

    Returns:
        CacheStore instance (noch nicht initialisiert, init() macht main.py)
    """
    backend = (backend or CACHE_BACKEND).lower()

    if backend == "memory":
        logger.info("Using in-memory response cache")
        return MemoryCacheStore()

    if backend == "sqlite":
        logger.info(f"Using SQLite response cache ({CACHE_DB_PATH})")
        return SQLiteCacheStore(db_path=CACHE_DB_PATH)

    raise ValueError(f"Unknown cache backend: {backend}. Supported: memory, sqlite")

"""
Response Cache Package
"""

from .base import CacheEntry, CacheStore
from .memory_store import MemoryCacheStore
from .sqlite_store import SQLiteCacheStore
from .store_factory import get_cache_store

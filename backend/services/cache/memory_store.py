"""
Memory Cache Implementation

Prozesslokaler TTL-Cache. Default-Backend und Test-Fake (Clock injizierbar).
"""

import logging
import time
from typing import Callable, Dict, Optional

from .base import CacheEntry, CacheStore

logger = logging.getLogger(__name__)


class MemoryCacheStore(CacheStore):

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    async def get(self, key: str) -> Optional[bytes]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            # natürlicher Ablauf
            del self._entries[key]
            return None

        return entry.body

    async def put(self, key: str, value: bytes, ttl: float) -> None:
        now = self._clock()
        # abgelaufene Einträge freigeben, auch wenn ihr Key nie wieder gelesen wird
        expired = [k for k, entry in self._entries.items() if entry.is_expired(now)]
        for k in expired:
            del self._entries[k]

        self._entries[key] = CacheEntry(key=key, body=value, stored_at=now, ttl=ttl)
        logger.debug(f"Cached {len(value)} bytes for {key} (ttl={ttl}s)")

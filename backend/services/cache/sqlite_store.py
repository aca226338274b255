"""
SQLite Cache Implementation

Geteilter Response-Cache für mehrere Worker-Prozesse auf einem Host.
"""

import asyncio
import logging
import os
import sqlite3
import time
from typing import Callable, Optional

from .base import CacheStore

logger = logging.getLogger(__name__)


class SQLiteCacheStore(CacheStore):
    """
    SQLite-basierter TTL-Cache.

    Concurrency:
    - WAL mode, damit Leser nicht von Schreibern blockiert werden
    - Schreibzugriffe innerhalb eines Prozesses über asyncio.Lock serialisiert
    - INSERT OR REPLACE: last write wins zwischen Prozessen
    """

    def __init__(self, db_path: str = "data/cache.db", clock: Callable[[], float] = time.time):
        self.db_path = db_path
        self._clock = clock
        self.db_write_lock = asyncio.Lock()
        self._conn: Optional[sqlite3.Connection] = None

    async def init(self) -> None:
        """Initialize SQLite database and create the cache table."""
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        conn = self._connect()
        cursor = conn.cursor()

        # SQLite PRAGMAs für bessere Concurrency
        cursor.execute("PRAGMA journal_mode=WAL;")
        cursor.execute("PRAGMA synchronous=NORMAL;")
        cursor.execute("PRAGMA busy_timeout=5000;")

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS response_cache (
                key TEXT PRIMARY KEY,
                body BLOB NOT NULL,
                stored_at REAL NOT NULL,
                ttl REAL NOT NULL
            )
        ''')
        conn.commit()

        logger.info(f"SQLite cache ready at {self.db_path}")

    def _connect(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        return self._conn

    async def get(self, key: str) -> Optional[bytes]:
        cursor = self._connect().execute(
            'SELECT body, stored_at, ttl FROM response_cache WHERE key = ?', (key,)
        )
        row = cursor.fetchone()
        if row is None:
            return None

        body, stored_at, ttl = row
        if self._clock() >= stored_at + ttl:
            return None

        return bytes(body)

    async def put(self, key: str, value: bytes, ttl: float) -> None:
        async with self.db_write_lock:
            conn = self._connect()
            now = self._clock()
            # abgelaufene Einträge freigeben
            conn.execute('DELETE FROM response_cache WHERE stored_at + ttl <= ?', (now,))
            conn.execute(
                'INSERT OR REPLACE INTO response_cache (key, body, stored_at, ttl) VALUES (?, ?, ?, ?)',
                (key, sqlite3.Binary(value), now, ttl)
            )
            conn.commit()

    async def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("SQLite cache connection closed")

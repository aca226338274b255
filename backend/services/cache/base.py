"""
Base Cache Interface for Response-Cache Adapters

Definiert das Interface, das alle Cache-Backends implementieren müssen.
Der Cache ist die einzige geteilte, veränderliche Ressource des Routers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CacheEntry:
    """Ein Cache-Eintrag, gekeyt über die exakte Upstream-URL"""
    key: str
    body: bytes
    stored_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now >= self.stored_at + self.ttl


class CacheStore(ABC):
    """
    Abstract base class for response cache backends.

    Alle Methoden sind async, damit lokale (Memory) und geteilte (SQLite)
    Backends austauschbar sind. Einträge laufen nur zeitbasiert ab, es gibt
    kein explizites Löschen. Schreibzugriffe sind idempotente Snapshots:
    last write wins.
    """

    async def init(self) -> None:
        """Initialize the store (create tables, open connections, etc.)"""

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """
        Liefert den Body für key, falls vorhanden und nicht abgelaufen.

        Returns:
            Body-Bytes oder None
        """

    @abstractmethod
    async def put(self, key: str, value: bytes, ttl: float) -> None:
        """Speichert value unter key für ttl Sekunden (überschreibt)."""

    async def close(self) -> None:
        """Gibt Ressourcen frei"""

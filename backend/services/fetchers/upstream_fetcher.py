"""
Upstream Fetcher - lädt Reddit-Thread-JSON mit Cache, Timeout und Validierung
"""

import asyncio
import json
import logging
from typing import Optional

import httpx

from config import CACHE_TTL_SECONDS, FETCH_TIMEOUT, MAX_RESPONSE_BYTES, UPSTREAM_USER_AGENT
from services.cache import CacheStore
from services.errors import ErrorCode

from .types import Failed, Fetched, FetchOutcome, TargetSpec

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class UpstreamFetcher:
    """
    Fetcht Reddit-JSON mit einem wiederverwendbaren httpx.AsyncClient.

    Ablauf pro Request (strikt sequentiell):
    1. Cache-Lookup (Hit -> kein Netzwerk-Call)
    2. GET mit festem Timeout (Deadline -> Request wird abgebrochen)
    3. Status-Mapping (429, 403, sonstige non-2xx)
    4. Content-Type-Check
    5. Größen-Check nach vollständigem Lesen
    6. JSON-Parse
    7. Cache befüllen

    Keine Retries. Fehler kommen als Failed(...) zurück, nicht als Exception.
    Implementiert Context Manager für garantierte Ressourcen-Freigabe.
    """

    def __init__(self, cache_store: CacheStore, client: Optional[httpx.AsyncClient] = None,
                 timeout: float = FETCH_TIMEOUT, max_response_bytes: int = MAX_RESPONSE_BYTES,
                 cache_ttl: float = CACHE_TTL_SECONDS, user_agent: str = UPSTREAM_USER_AGENT):
        self.cache_store = cache_store
        self.timeout = timeout
        self.max_response_bytes = max_response_bytes
        self.cache_ttl = cache_ttl
        self.user_agent = user_agent
        self._client = client

    async def __aenter__(self):
        """Context Manager Entry - stellt Client bereit"""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context Manager Exit - schließt Client garantiert"""
        await self.close()

    async def _ensure_client(self):
        """Stellt sicher, dass ein Client verfügbar ist"""
        if self._client is None:
            # Deadline regelt fetch_content() selbst, daher kein Client-Timeout
            self._client = httpx.AsyncClient(timeout=None, follow_redirects=False)
            logger.debug("Upstream httpx client created")

    async def close(self):
        """Schließt den Client"""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.debug("Upstream httpx client closed")

    async def fetch_content(self, target: TargetSpec) -> FetchOutcome:
        """
        Lädt das JSON zu einem validierten Ziel.

        Args:
            target: TargetSpec aus validate_target()

        Returns:
            Fetched(raw_body, content_type, data) oder Failed(code, detail, retry_after)
        """
        url = target.upstream_url

        cached = await self.cache_store.get(url)
        if cached is not None:
            logger.debug(f"Cache hit for {url}")
            return Fetched(raw_body=cached, content_type=JSON_CONTENT_TYPE, data=json.loads(cached))

        await self._ensure_client()

        try:
            # wait_for bricht den laufenden Request bei Ablauf ab und gibt die Verbindung frei
            response = await asyncio.wait_for(
                self._client.get(url, headers={"User-Agent": self.user_agent}),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return self._failed(url, ErrorCode.UPSTREAM_TIMEOUT)
        except httpx.RequestError as e:
            logger.warning(f"Upstream transport error for {url}: {e!r}")
            return self._failed(url, ErrorCode.UPSTREAM_UNREACHABLE)

        if response.status_code == 429:
            return self._failed(url, ErrorCode.RATE_LIMITED,
                                retry_after=response.headers.get("Retry-After"))
        if response.status_code == 403:
            return self._failed(url, ErrorCode.UPSTREAM_FORBIDDEN)
        if not response.is_success:
            return self._failed(url, ErrorCode.UPSTREAM_ERROR,
                                f"Reddit returned HTTP {response.status_code}")

        content_type = response.headers.get("content-type", "")
        if JSON_CONTENT_TYPE not in content_type.lower():
            return self._failed(url, ErrorCode.UPSTREAM_PARSE_ERROR,
                                f"Expected JSON, got {content_type or 'unknown'}")

        # Body ist bereits vollständig gelesen; Limit wird erst danach geprüft
        body = response.content
        if len(body) > self.max_response_bytes:
            return self._failed(url, ErrorCode.RESPONSE_TOO_LARGE)

        try:
            data = json.loads(body)
        except ValueError:
            return self._failed(url, ErrorCode.UPSTREAM_PARSE_ERROR, "Reddit returned invalid JSON")

        await self.cache_store.put(url, body, self.cache_ttl)
        logger.info(f"Fetched {len(body)} bytes from {url}")

        return Fetched(raw_body=body, content_type=JSON_CONTENT_TYPE, data=data)

    def _failed(self, url: str, code: ErrorCode, detail: Optional[str] = None,
                retry_after: Optional[str] = None) -> Failed:
        logger.warning(f"Upstream fetch failed for {url}: {code.value}" + (f" ({detail})" if detail else ""))
        return Failed(code=code, detail=detail, retry_after=retry_after)

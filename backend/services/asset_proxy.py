"""
Asset Proxy - transparenter Tunnel zu einem statischen Origin

Kein Caching, keine Retries. Status, Header und Body des Origins werden
unverändert zurückgestreamt.
"""

import logging
from typing import Optional
from urllib.parse import urlsplit

import httpx
from fastapi import Request
from fastapi.responses import PlainTextResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

from utils.url_utils import strip_prefix

logger = logging.getLogger(__name__)

# Hop-by-hop Header verwaltet der ASGI-Server selbst
HOP_BY_HOP_HEADERS = {"connection", "keep-alive", "transfer-encoding"}


class AssetProxy:
    """
    Leitet Requests an origin weiter (Pfad-Präfix entfernt, Host umgeschrieben).

    Wird sowohl für die SPA auf dem Static-Origin als auch für das
    Passthrough außerhalb des Präfixes verwendet.
    """

    def __init__(self, origin: str, client: Optional[httpx.AsyncClient] = None):
        self.origin = origin.rstrip("/")
        self.origin_host = urlsplit(self.origin).netloc
        self._client = client

    async def __aenter__(self):
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_client(self):
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=None, follow_redirects=False)
            logger.debug(f"Origin client created for {self.origin}")

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None

    def build_url(self, path: str, query: str, path_prefix: str = "") -> str:
        """
        Origin-URL für einen eingehenden Pfad.

        Beispiel:
            >>> AssetProxy("https://r2md.pages.dev").build_url("/reddit/assets/a.js", "v=1", "/reddit")
            'https://r2md.pages.dev/assets/a.js?v=1'
        """
        url = self.origin + strip_prefix(path, path_prefix)
        if query:
            url = f"{url}?{query}"
        return url

    async def forward(self, request: Request, path_prefix: str = "") -> Response:
        """
        Forwarded den Request und streamt die Origin-Antwort zurück.

        Args:
            request: eingehender Request
            path_prefix: zu entfernendes Pfad-Präfix ("" = Pfad unverändert)

        Returns:
            StreamingResponse mit Status/Headern/Body des Origins
        """
        await self._ensure_client()

        query = request.scope.get("query_string", b"").decode("latin-1")
        url = self.build_url(request.url.path, query, path_prefix)

        headers = [(k, v) for k, v in request.headers.raw if k.lower() != b"host"]
        headers.append((b"host", self.origin_host.encode("latin-1")))

        origin_request = self._client.build_request(
            request.method, url, headers=headers, content=await request.body()
        )

        try:
            origin_response = await self._client.send(origin_request, stream=True)
        except httpx.RequestError as e:
            logger.error(f"Origin unreachable for {request.method} {url}: {e!r}")
            return PlainTextResponse("Bad Gateway", status_code=502)

        logger.debug(f"{request.method} {request.url.path} -> {url} ({origin_response.status_code})")

        response = StreamingResponse(
            origin_response.aiter_raw(),
            status_code=origin_response.status_code,
            background=BackgroundTask(origin_response.aclose),
        )
        # Header 1:1 übernehmen (inkl. mehrfacher Set-Cookie)
        response.raw_headers = [
            (k.lower(), v) for k, v in origin_response.headers.raw
            if k.lower().decode("latin-1") not in HOP_BY_HOP_HEADERS
        ]
        return response

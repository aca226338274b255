from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, Response
from datetime import datetime
import logging

from config import API_ROUTE, PASSTHROUGH_ORIGIN, PATH_PREFIX, PUBLIC_BASE_URL, STATIC_ORIGIN, CACHE_TTL_SECONDS
from services.asset_proxy import AssetProxy
from services.cache import get_cache_store
from services.crawler import is_crawler
from services.errors import ErrorCode, error_response
from services.fetchers.types import Failed, Invalid
from services.fetchers.upstream_fetcher import UpstreamFetcher
from services.preview import build_preview
from utils.url_utils import build_canonical_url, get_base_url, is_under_prefix
from validators import validate_target

logger = logging.getLogger(__name__)

app = FastAPI(title="r2md Edge Router", version="1.0.0")

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


# Dependencies (in Tests via app.dependency_overrides ersetzbar)
def get_upstream_fetcher() -> UpstreamFetcher:
    return app.state.upstream_fetcher


def get_static_proxy() -> AssetProxy:
    return app.state.static_proxy


def get_passthrough_proxy() -> AssetProxy:
    return app.state.passthrough_proxy


# Health Check Endpoints
@app.get("/health/ready")
async def health_ready():
    """Health check endpoint"""
    return {"status": "ready", "timestamp": datetime.now().isoformat()}

@app.get("/health/live")
async def health_live():
    """Liveness check endpoint"""
    return {"status": "alive", "timestamp": datetime.now().isoformat()}


async def handle_api_fetch(request: Request, fetcher: UpstreamFetcher) -> Response:
    """
    Reddit-Proxy: GET {prefix}/api/fetch?url=<thread>

    Liefert das Thread-JSON unverändert oder einen typisierten Fehler.
    """
    if request.method != "GET":
        return error_response(ErrorCode.METHOD_NOT_ALLOWED)

    outcome = validate_target(request.query_params.get("url"))
    if isinstance(outcome, Invalid):
        return error_response(outcome.code)

    result = await fetcher.fetch_content(outcome.target)
    if isinstance(result, Failed):
        return error_response(result.code, result.detail, result.retry_after)

    return Response(
        content=result.raw_body,
        status_code=200,
        headers={
            "Content-Type": result.content_type,
            "Cache-Control": f"public, max-age={CACHE_TTL_SECONDS}",
        },
    )


async def handle_preview(request: Request, target: str, fetcher: UpstreamFetcher) -> Response:
    """OG-Preview für Crawler - immer 200 mit gültigem HTML"""
    # hinter TLS-terminierenden Proxies ist request.url.scheme nicht verlässlich
    base_url = PUBLIC_BASE_URL or get_base_url(request.url.scheme, request.url.netloc)
    canonical_url = build_canonical_url(base_url, PATH_PREFIX, target)

    preview = await build_preview(target, fetcher, canonical_url)
    return HTMLResponse(content=preview.html, status_code=200, media_type="text/html; charset=utf-8")


# Catch-all Router (muss als letzte Route registriert werden)
@app.api_route("/{full_path:path}", methods=ALL_METHODS, include_in_schema=False)
async def route_request(
    request: Request,
    fetcher: UpstreamFetcher = Depends(get_upstream_fetcher),
    static_proxy: AssetProxy = Depends(get_static_proxy),
    passthrough_proxy: AssetProxy = Depends(get_passthrough_proxy),
):
    """
    Router-State-Machine, erster Treffer gewinnt:
    1. außerhalb des Präfixes      -> Passthrough zum ursprünglichen Ziel
    2. API-Route                   -> Validator + Fetcher (JSON)
    3. ?url= und Crawler-UA        -> OG-Preview
    4. sonst                       -> Static Origin (Präfix entfernt)
    """
    path = request.url.path

    if not is_under_prefix(path, PATH_PREFIX):
        logger.debug(f"Passthrough: {request.method} {path}")
        return await passthrough_proxy.forward(request)

    if path == API_ROUTE:
        return await handle_api_fetch(request, fetcher)

    target = request.query_params.get("url")
    if target and is_crawler(request.headers.get("user-agent")):
        logger.info(f"Crawler preview for {target}")
        return await handle_preview(request, target, fetcher)

    return await static_proxy.forward(request, PATH_PREFIX)


# Startup Event
@app.on_event("startup")
async def startup_event():
    """Initialisiert Cache und HTTP-Clients beim Server-Start"""
    cache_store = get_cache_store()
    await cache_store.init()

    app.state.cache_store = cache_store
    app.state.upstream_fetcher = await UpstreamFetcher(cache_store).__aenter__()
    app.state.static_proxy = await AssetProxy(STATIC_ORIGIN).__aenter__()
    app.state.passthrough_proxy = await AssetProxy(PASSTHROUGH_ORIGIN).__aenter__()
    logger.info(f"✅ Router started (prefix={PATH_PREFIX}, static={STATIC_ORIGIN})")

# Shutdown Event - HTTP-Clients und Cache freigeben
@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup beim Server-Shutdown"""
    try:
        await app.state.upstream_fetcher.close()
        await app.state.static_proxy.close()
        await app.state.passthrough_proxy.close()
        await app.state.cache_store.close()
        logger.info("✅ Clients closed successfully")
    except Exception as e:
        logger.error(f"❌ Error during shutdown: {e}")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

"""Shared fixtures: fake clock, in-memory cache, mocked upstream and origins."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from services.asset_proxy import AssetProxy
from services.cache import MemoryCacheStore
from services.fetchers.upstream_fetcher import UpstreamFetcher

VALID_THREAD = "https://www.reddit.com/r/test/comments/abc123/some_title"
VALID_THREAD_JSON_URL = "https://www.reddit.com/r/test/comments/abc123/some_title.json"

REDDIT_JSON = json.dumps([
    {"kind": "Listing", "data": {"children": [
        {"kind": "t3", "data": {"title": "Test", "author": "alice", "subreddit": "test"}},
    ]}},
    {"kind": "Listing", "data": {"children": []}},
]).encode()

BOT_UA = "Slackbot-LinkExpanding 1.0 (+https://api.slack.com/robots)"
BROWSER_UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0 Safari/537.36"


class FakeClock:
    """Steuerbare Uhr für TTL-Tests"""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingHandler:
    """MockTransport-Handler, der Requests mitschreibt und eine feste Antwort liefert."""

    def __init__(self, responder):
        self.responder = responder
        self.requests = []

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        return self.responder(request)


def json_response(body: bytes = REDDIT_JSON, status: int = 200, **headers) -> httpx.Response:
    return httpx.Response(status, content=body, headers={"content-type": "application/json", **headers})


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache_store(clock):
    return MemoryCacheStore(clock=clock)


@pytest.fixture
def upstream():
    """Reddit-Upstream; Antwort pro Test über upstream.responder setzen."""
    return RecordingHandler(lambda request: json_response())


@pytest.fixture
def static_origin():
    return RecordingHandler(
        lambda request: httpx.Response(
            200, stream=httpx.ByteStream(b"<html>pages</html>"), headers={"content-type": "text/html"}
        )
    )


@pytest.fixture
def passthrough_origin():
    return RecordingHandler(
        lambda request: httpx.Response(200, stream=httpx.ByteStream(b"passthrough"))
    )


@pytest.fixture
def fetcher(cache_store, upstream):
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    return UpstreamFetcher(cache_store, client=client)


@pytest.fixture
def client(fetcher, static_origin, passthrough_origin):
    """TestClient mit gemocktem Upstream, Static-Origin und Passthrough."""
    from main import app, get_passthrough_proxy, get_static_proxy, get_upstream_fetcher

    static_proxy = AssetProxy(
        "https://r2md.pages.dev", client=httpx.AsyncClient(transport=httpx.MockTransport(static_origin))
    )
    passthrough_proxy = AssetProxy(
        "https://peirce.net", client=httpx.AsyncClient(transport=httpx.MockTransport(passthrough_origin))
    )

    app.dependency_overrides[get_upstream_fetcher] = lambda: fetcher
    app.dependency_overrides[get_static_proxy] = lambda: static_proxy
    app.dependency_overrides[get_passthrough_proxy] = lambda: passthrough_proxy

    yield TestClient(app, base_url="https://peirce.net")

    app.dependency_overrides.clear()

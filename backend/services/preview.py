"""
Preview Synthesizer - Open-Graph-HTML für Link-Preview-Crawler

Crawler können mit Fehlerseiten nichts anfangen. Jeder Fehler (Validierung,
Fetch, unerwartete Payload-Struktur) wird deshalb zur generischen Fallback-
Preview; diese Funktion liefert immer gültiges HTML.
"""

import html
import logging
from dataclasses import dataclass
from typing import Any, Optional

from services.fetchers.types import Failed, Invalid
from services.fetchers.upstream_fetcher import UpstreamFetcher
from validators import validate_target

logger = logging.getLogger(__name__)

SITE_NAME = "R→MD"
FALLBACK_TITLE = f"Reddit Thread — {SITE_NAME}"
FALLBACK_DESCRIPTION = "Convert Reddit threads to clean markdown"


@dataclass(frozen=True)
class PreviewMetadata:
    title: str
    description: str
    canonical_url: str


@dataclass(frozen=True)
class RenderedPreview:
    html: str
    metadata: PreviewMetadata
    fallback: bool = False


def fallback_metadata(canonical_url: str) -> PreviewMetadata:
    return PreviewMetadata(FALLBACK_TITLE, FALLBACK_DESCRIPTION, canonical_url)


def extract_metadata(data: Any, canonical_url: str) -> Optional[PreviewMetadata]:
    """
    Extrahiert Titel/Autor/Subreddit aus dem Reddit-Thread-JSON.

    Erwartete Struktur: [ {data: {children: [ {data: {title, author, subreddit}} ]}}, ... ]

    Returns:
        PreviewMetadata oder None, wenn Struktur oder Titel fehlen
    """
    try:
        post = data[0]["data"]["children"][0]["data"]
    except (LookupError, TypeError):
        return None

    if not isinstance(post, dict):
        return None

    title = post.get("title")
    if not title or not isinstance(title, str):
        return None

    author = post.get("author") or "unknown"
    subreddit = post.get("subreddit") or "reddit"
    description = f"u/{author} in r/{subreddit} — converted to markdown"

    return PreviewMetadata(title, description, canonical_url)


def render_preview_html(metadata: PreviewMetadata) -> str:
    """Rendert das feste OG-Dokument; alle dynamischen Werte werden escaped."""
    t = html.escape(metadata.title, quote=True)
    d = html.escape(metadata.description, quote=True)
    u = html.escape(metadata.canonical_url, quote=True)
    site = html.escape(SITE_NAME, quote=True)

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{t} — {site}</title>
  <meta property="og:title" content="{t}">
  <meta property="og:description" content="{d}">
  <meta property="og:site_name" content="{site}">
  <meta property="og:type" content="article">
  <meta property="og:url" content="{u}">
  <meta name="twitter:card" content="summary">
</head>
<body>
  <p>Redirecting to <a href="{u}">{site}</a>…</p>
</body>
</html>"""


async def build_preview(target_param: Optional[str], fetcher: UpstreamFetcher,
                        canonical_url: str) -> RenderedPreview:
    """
    Baut die Preview für einen Crawler-Request.

    Args:
        target_param: roher ?url= Wert
        fetcher: UpstreamFetcher (teilt den Cache mit der API-Route)
        canonical_url: URL der interaktiven Seite (og:url)

    Returns:
        RenderedPreview, bei jedem Fehler mit fallback=True
    """
    outcome = validate_target(target_param)
    if isinstance(outcome, Invalid):
        logger.info(f"Preview fallback: invalid target ({outcome.code.value})")
        return _fallback(canonical_url)

    result = await fetcher.fetch_content(outcome.target)
    if isinstance(result, Failed):
        logger.warning(f"Preview fallback: fetch failed ({result.code.value})")
        return _fallback(canonical_url)

    metadata = extract_metadata(result.data, canonical_url)
    if metadata is None:
        logger.warning(f"Preview fallback: unexpected payload for {outcome.target.upstream_url}")
        return _fallback(canonical_url)

    return RenderedPreview(html=render_preview_html(metadata), metadata=metadata)


def _fallback(canonical_url: str) -> RenderedPreview:
    metadata = fallback_metadata(canonical_url)
    return RenderedPreview(html=render_preview_html(metadata), metadata=metadata, fallback=True)

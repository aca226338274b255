"""
URL Utilities - Pfad-Rewriting und kanonische Preview-URLs
"""

from urllib.parse import quote

# entspricht encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def is_under_prefix(path: str, prefix: str) -> bool:
    """
    Prüft, ob path im verwalteten Präfix liegt.

    Beispiel:
        >>> is_under_prefix("/reddit/assets/x.js", "/reddit")
        True

        >>> is_under_prefix("/redditfoo", "/reddit")
        False
    """
    if not prefix or prefix == "/":
        return True
    return path == prefix or path.startswith(prefix + "/")


def strip_prefix(path: str, prefix: str) -> str:
    """
    Entfernt das Präfix und liefert immer einen absoluten Pfad.

    Beispiel:
        >>> strip_prefix("/reddit", "/reddit")
        '/'

        >>> strip_prefix("/reddit/assets/index.js", "/reddit")
        '/assets/index.js'
    """
    if not prefix or not is_under_prefix(path, prefix):
        return path or "/"

    stripped = path[len(prefix):]
    if not stripped.startswith("/"):
        stripped = "/" + stripped
    return stripped


def build_canonical_url(base_url: str, prefix: str, target: str) -> str:
    """
    Baut die kanonische URL der interaktiven Seite für einen Thread.

    Beispiel:
        >>> build_canonical_url("https://peirce.net/", "/reddit", "https://www.reddit.com/r/a/comments/b")
        'https://peirce.net/reddit?url=https%3A%2F%2Fwww.reddit.com%2Fr%2Fa%2Fcomments%2Fb'
    """
    return f"{base_url.rstrip('/')}{prefix}?url={quote(target, safe=_URI_COMPONENT_SAFE)}"


def get_base_url(scheme: str, netloc: str) -> str:
    """Base URL (scheme://domain) aus Request-Bestandteilen"""
    return f"{scheme}://{netloc}"

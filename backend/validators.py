"""
Input Validation Module

SECURITY: Validiert die vom Client gelieferte Ziel-URL, bevor irgendein
Request an Reddit geht. Schützt vor SSRF: nur HTTPS, nur erlaubte Reddit-Hosts,
nur Thread-Pfade. Reine Funktion ohne I/O.
"""

import re
from typing import Optional
from urllib.parse import urlsplit

from config import ALLOWED_HOSTS
from services.errors import ErrorCode
from services.fetchers.types import Invalid, TargetSpec, Valid, ValidationOutcome

# /r/<subreddit>/comments/<id>[/<slug>...]
THREAD_PATH_REGEX = re.compile(r'^/r/[A-Za-z0-9_]+/comments/[a-z0-9]+(/[^?#]*)?$')

UPSTREAM_SUFFIX = ".json"


def remove_dot_segments(path: str) -> str:
    """
    Löst "." und ".." Pfad-Segmente auf (auch %2e/%2E), wie es der Client
    beim Request ohnehin tun würde.

    Beispiel:
        >>> remove_dot_segments("/r/x/comments/abc/../../../../api/v1/me")
        '/api/v1/me'
    """
    output = []
    for segment in path.split("/")[1:]:
        dots = segment.lower().replace("%2e", ".")
        if dots == ".":
            continue
        if dots == "..":
            if output:
                output.pop()
            continue
        output.append(segment)

    return "/" + "/".join(output)


def validate_target(raw_target: Optional[str]) -> ValidationOutcome:
    """
    Validiert eine Reddit-Thread-URL und leitet die Upstream-JSON-URL ab.

    Regeln (in dieser Reihenfolge, erster Fehler gewinnt):
    1. fehlt          -> missing_url
    2. nicht absolut  -> invalid_url
    3. nicht https    -> https_required
    4. Host unbekannt -> host_not_allowed
    5. kein Thread    -> invalid_path

    Args:
        raw_target: Wert des ?url= Parameters (oder None)

    Returns:
        Valid(TargetSpec) oder Invalid(ErrorCode)

    Examples:
        >>> validate_target("https://www.reddit.com/r/test/comments/abc123/title/")
        Valid(target=TargetSpec(upstream_url='https://www.reddit.com/r/test/comments/abc123/title.json', ...))

        >>> validate_target("http://www.reddit.com/r/test/comments/abc123")
        Invalid(code=<ErrorCode.HTTPS_REQUIRED: 'https_required'>)
    """
    if not raw_target:
        return Invalid(ErrorCode.MISSING_URL)

    try:
        parsed = urlsplit(raw_target.strip())
        hostname = parsed.hostname
        parsed.port  # ungültige Ports werfen erst hier
    except ValueError:
        return Invalid(ErrorCode.INVALID_URL)

    if not parsed.scheme or not hostname:
        return Invalid(ErrorCode.INVALID_URL)

    if parsed.scheme.lower() != "https":
        return Invalid(ErrorCode.HTTPS_REQUIRED)

    if hostname not in ALLOWED_HOSTS:
        return Invalid(ErrorCode.HOST_NOT_ALLOWED)

    clean_path = remove_dot_segments(parsed.path).rstrip("/")
    # bereits abgeleitete Upstream-URLs validieren auf dasselbe Ziel
    if clean_path.endswith(UPSTREAM_SUFFIX):
        clean_path = clean_path[:-len(UPSTREAM_SUFFIX)].rstrip("/")
    if not THREAD_PATH_REGEX.fullmatch(clean_path):
        return Invalid(ErrorCode.INVALID_PATH)

    return Valid(TargetSpec(
        upstream_url=f"https://{hostname}{clean_path}{UPSTREAM_SUFFIX}",
        hostname=hostname,
        canonical_path=clean_path,
    ))

"""
Shared Types für Validator, Fetcher und Preview
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from services.errors import ErrorCode


@dataclass(frozen=True)
class TargetSpec:
    """Validiertes Reddit-Ziel. Nur über validate_target() erzeugt."""
    upstream_url: str
    hostname: str
    canonical_path: str


@dataclass(frozen=True)
class Valid:
    target: TargetSpec


@dataclass(frozen=True)
class Invalid:
    code: ErrorCode


ValidationOutcome = Union[Valid, Invalid]


@dataclass(frozen=True)
class Fetched:
    """Erfolgreich geladener und validierter Upstream-Payload"""
    raw_body: bytes
    content_type: str
    data: Any = None  # bereits dekodiertes JSON


@dataclass(frozen=True)
class Failed:
    """Upstream-Fehler, normalisiert auf die Fehler-Taxonomie"""
    code: ErrorCode
    detail: Optional[str] = None
    retry_after: Optional[str] = None


FetchOutcome = Union[Fetched, Failed]

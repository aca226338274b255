"""
Fehler-Taxonomie des Edge-Routers

Jeder ErrorCode ist Teil des externen API-Vertrags (Wire-Wert) und bildet
auf genau einen HTTP-Status ab. Umbenennen = Breaking Change.
"""

from enum import Enum
from typing import Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorCode(str, Enum):
    MISSING_URL = "missing_url"
    INVALID_URL = "invalid_url"
    HTTPS_REQUIRED = "https_required"
    HOST_NOT_ALLOWED = "host_not_allowed"
    INVALID_PATH = "invalid_path"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_FORBIDDEN = "upstream_forbidden"
    UPSTREAM_ERROR = "upstream_error"
    UPSTREAM_PARSE_ERROR = "upstream_parse_error"
    RESPONSE_TOO_LARGE = "response_too_large"
    UPSTREAM_TIMEOUT = "upstream_timeout"
    UPSTREAM_UNREACHABLE = "upstream_unreachable"

    @property
    def http_status(self) -> int:
        return HTTP_STATUS[self]


HTTP_STATUS = {
    ErrorCode.MISSING_URL: 400,
    ErrorCode.INVALID_URL: 400,
    ErrorCode.HTTPS_REQUIRED: 400,
    ErrorCode.HOST_NOT_ALLOWED: 400,
    ErrorCode.INVALID_PATH: 400,
    ErrorCode.METHOD_NOT_ALLOWED: 405,
    ErrorCode.RATE_LIMITED: 429,
    ErrorCode.UPSTREAM_FORBIDDEN: 502,
    ErrorCode.UPSTREAM_ERROR: 502,
    ErrorCode.UPSTREAM_PARSE_ERROR: 502,
    ErrorCode.RESPONSE_TOO_LARGE: 502,
    ErrorCode.UPSTREAM_TIMEOUT: 504,
    ErrorCode.UPSTREAM_UNREACHABLE: 502,
}

# Standard-Meldungen; Fetcher-Fehler können eine spezifischere Meldung mitgeben
DEFAULT_MESSAGES = {
    ErrorCode.MISSING_URL: "Provide a Reddit thread URL as ?url=…",
    ErrorCode.INVALID_URL: "Not a valid URL",
    ErrorCode.HTTPS_REQUIRED: "Only HTTPS URLs are allowed",
    ErrorCode.HOST_NOT_ALLOWED: "Only Reddit URLs are allowed",
    ErrorCode.INVALID_PATH: "URL must be a Reddit thread (/r/…/comments/…)",
    ErrorCode.RATE_LIMITED: "Reddit is rate-limiting requests",
    ErrorCode.UPSTREAM_FORBIDDEN: "Reddit blocked this request",
    ErrorCode.UPSTREAM_ERROR: "Reddit returned an error",
    ErrorCode.UPSTREAM_PARSE_ERROR: "Reddit returned invalid JSON",
    ErrorCode.RESPONSE_TOO_LARGE: "Response exceeded 5 MB limit",
    ErrorCode.UPSTREAM_TIMEOUT: "Reddit took too long to respond",
    ErrorCode.UPSTREAM_UNREACHABLE: "Could not reach Reddit",
}


class ErrorBody(BaseModel):
    error: ErrorCode
    message: Optional[str] = None


def error_response(code: ErrorCode, message: Optional[str] = None,
                   retry_after: Optional[str] = None) -> JSONResponse:
    """
    Baut die JSON-Fehlerantwort {error, message} mit dem zugehörigen Status.

    405 trägt bewusst keine message. Retry-After wird nur gesetzt, wenn der
    Upstream ihn geliefert hat - nie ein synthetischer Default.
    """
    if message is None and code is not ErrorCode.METHOD_NOT_ALLOWED:
        message = DEFAULT_MESSAGES.get(code)

    body = ErrorBody(error=code, message=message)
    headers = {"Retry-After": retry_after} if retry_after else None

    return JSONResponse(
        content=body.model_dump(mode="json", exclude_none=True),
        status_code=code.http_status,
        headers=headers,
    )

"""Small HTTP-related constants and header helpers shared across polar_client.

This module is intentionally tiny to avoid circular imports and drift.
"""

from __future__ import annotations

from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

API_VERSION = "v1"

PRODUCTION_BASE_URL = "https://api.polar.sh"
SANDBOX_BASE_URL = "https://sandbox-api.polar.sh"

# Statuses the retry loop acts on by default. Server errors are opt-in.
DEFAULT_RETRY_STATUS_CODES: frozenset[int] = frozenset({429})
SERVER_ERROR_STATUS_CODES: frozenset[int] = frozenset({500, 502, 503, 504})

VALIDATION_STATUS_CODES: frozenset[int] = frozenset({400, 422})

# Listing endpoints reject larger pages.
MAX_PAGE_SIZE = 100

DEFAULT_STATUS_MESSAGES: dict[int, str] = {
    400: "The request was invalid or malformed.",
    401: "Authentication failed or was not provided.",
    403: "Access to the requested resource is forbidden.",
    404: "The requested resource was not found.",
    405: "The HTTP method is not allowed for this endpoint.",
    409: "The request conflicts with the current state of the resource.",
    422: "The request failed validation.",
    429: "Rate limit exceeded. Please try again later.",
    500: "An internal server error occurred.",
    502: "The server received an invalid response.",
    503: "The service is temporarily unavailable.",
    504: "The gateway timed out.",
}


def api_path(*segments: str, collection: bool = False) -> str:
    """Join path segments under the versioned API prefix.

    Collection endpoints (list/create) carry a trailing slash on the wire.
    """
    parts = [API_VERSION, *(s.strip("/") for s in segments if s)]
    path = "/" + "/".join(parts)
    return f"{path}/" if collection else path


def parse_retry_after(value: str | None, *, now: datetime | None = None) -> float | None:
    """Parse a ``Retry-After`` header (delta seconds or HTTP date) into seconds."""
    if value is None or not value.strip():
        return None
    raw = value.strip()
    try:
        seconds = float(raw)
    except ValueError:
        seconds = None
    if seconds is not None:
        return seconds if seconds >= 0 else None

    try:
        when = parsedate_to_datetime(raw)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    delta = (when - (now or datetime.now(UTC))).total_seconds()
    return max(0.0, delta)

"""Error model and exception hierarchy for polar_client.

Expected API failures are carried as ``PolarError`` values inside a
``Failure`` result. Exceptions are reserved for configuration problems and
for callers that opt into raising via ``ensure_success()``.
"""

from __future__ import annotations

from dataclasses import dataclass
import enum
from typing import TYPE_CHECKING, Any

from polar_client._http import VALIDATION_STATUS_CODES

if TYPE_CHECKING:
    from collections.abc import Iterator


class ErrorKind(enum.Enum):
    """Closed taxonomy of failure kinds."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    NETWORK_ERROR = "network_error"
    DESERIALIZATION = "deserialization"
    UNKNOWN = "unknown"


def kind_for_status(status_code: int) -> ErrorKind:
    """Classify a non-2xx HTTP status into the error taxonomy."""
    if status_code in VALIDATION_STATUS_CODES:
        return ErrorKind.VALIDATION
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    if 500 <= status_code <= 599:
        return ErrorKind.SERVER_ERROR
    return ErrorKind.UNKNOWN


@dataclass(frozen=True)
class PolarError:
    """Structured description of a failed API call.

    ``status_code`` is ``0`` when no HTTP response was received
    (network errors).
    """

    kind: ErrorKind
    status_code: int
    message: str
    detail: Any = None
    #: ``type``/``code`` reported by the API, when present.
    error_type: str | None = None
    response_body: str | None = None
    retry_after_s: float | None = None

    @property
    def is_rate_limit_error(self) -> bool:
        return self.kind is ErrorKind.RATE_LIMITED

    @property
    def is_not_found_error(self) -> bool:
        return self.kind is ErrorKind.NOT_FOUND

    @property
    def is_validation_error(self) -> bool:
        return self.kind is ErrorKind.VALIDATION

    @property
    def is_server_error(self) -> bool:
        return self.kind is ErrorKind.SERVER_ERROR

    @property
    def is_network_error(self) -> bool:
        return self.kind is ErrorKind.NETWORK_ERROR

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    @property
    def is_auth_error(self) -> bool:
        return self.status_code in {401, 403}

    @property
    def is_conflict_error(self) -> bool:
        return self.status_code == 409

    @classmethod
    def not_found(cls, message: str = "Resource not found") -> PolarError:
        return cls(kind=ErrorKind.NOT_FOUND, status_code=404, message=message)

    @classmethod
    def network(cls, exc: BaseException) -> PolarError:
        """Wrap a transport-level exception raised before any response arrived."""
        cause = str(exc) or type(exc).__name__
        return cls(
            kind=ErrorKind.NETWORK_ERROR,
            status_code=0,
            message=f"Network error: {cause}",
            error_type=type(exc).__name__,
        )

    @classmethod
    def deserialization(
        cls, status_code: int, exc: BaseException, body: str | None = None
    ) -> PolarError:
        return cls(
            kind=ErrorKind.DESERIALIZATION,
            status_code=status_code,
            message=f"Failed to deserialize response: {exc}",
            error_type=type(exc).__name__,
            response_body=body,
        )

    def __str__(self) -> str:
        return f"{self.message} (status={self.status_code}, kind={self.kind.value})"


class PolarClientError(Exception):
    """Base exception for all polar_client errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(PolarClientError):
    """Configuration validation or resolution failed."""


class APIError(PolarClientError):
    """An API call failed and the caller asked for exception-based flow.

    The originating ``PolarError`` is kept on ``error`` so nothing is lost
    when crossing from the result channel into an exception.
    """

    def __init__(
        self,
        message: str,
        *,
        error: PolarError,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.error = error
        self.status_code = error.status_code
        self.kind = error.kind
        self.detail = error.detail
        self.retry_after_s = error.retry_after_s

    @classmethod
    def from_error(cls, error: PolarError) -> APIError:
        """Build the most specific exception for *error*."""
        err_cls: type[APIError] = _EXCEPTION_FOR_KIND.get(error.kind, APIError)
        return err_cls(
            f"API Error: {error.message} (Status: {error.status_code})",
            error=error,
            hint=_hint_for(error),
        )


class RateLimitError(APIError):
    """Rate limit exceeded (HTTP 429)."""


class NotFoundError(APIError):
    """Resource not found (HTTP 404)."""


class ValidationError(APIError):
    """Request rejected by API validation (HTTP 400/422)."""


class NetworkError(APIError):
    """No response was received from the API."""


_EXCEPTION_FOR_KIND: dict[ErrorKind, type[APIError]] = {
    ErrorKind.RATE_LIMITED: RateLimitError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.NETWORK_ERROR: NetworkError,
}


def _hint_for(error: PolarError) -> str | None:
    if error.is_auth_error:
        return "Check the access token (set POLAR_ACCESS_TOKEN or PolarConfig.access_token)."
    if error.is_rate_limit_error:
        return "Lower PolarConfig.requests_per_minute or raise RetryPolicy.max_attempts."
    if error.is_network_error:
        return "Check connectivity to the API host or raise PolarConfig.timeout_s."
    return None


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)

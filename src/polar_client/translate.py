"""Response-to-result translation.

A single pure translator turns a raw HTTP response into a ``PolarResult``.
It never raises for anything the API can send back: unexpected statuses land
in ``ErrorKind.UNKNOWN`` and unparseable bodies in
``ErrorKind.DESERIALIZATION``.

Three entry points share it:

- ``translate``: 404 is a ``NOT_FOUND`` failure.
- ``translate_nullable``: 404 and empty 2xx bodies are ``Success(None)``.
- ``translate_void``: any 2xx is ``Success(None)``, body ignored.
"""

from __future__ import annotations

import functools
import json
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from polar_client._http import DEFAULT_STATUS_MESSAGES, parse_retry_after
from polar_client.errors import ErrorKind, PolarError, kind_for_status
from polar_client.result import Failure, PolarResult, Success, VoidResult

if TYPE_CHECKING:
    from collections.abc import Mapping

    import httpx

_MESSAGE_FIELDS = ("message", "error", "detail", "description")
_TYPE_FIELDS = ("type", "code", "error_code", "error_type")
_DETAIL_FIELDS = ("detail", "details", "data", "context", "validation_errors")

_FALLBACK_MESSAGE = "An error occurred while processing the request."


@functools.cache
def _adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


@functools.cache
def _accepts_none(target: Any) -> bool:
    try:
        _adapter(target).validate_python(None)
    except PydanticValidationError:
        return False
    return True


def translate[T](response: httpx.Response, target: type[T] | Any) -> PolarResult[T]:
    """Translate *response* into a result whose success value is a *target*."""
    return translate_status(
        response.status_code, response.content, target, headers=response.headers
    )


def translate_nullable[T](
    response: httpx.Response, target: type[T] | Any
) -> PolarResult[T | None]:
    """Like ``translate`` but a missing resource is ``Success(None)``."""
    return translate_status(
        response.status_code,
        response.content,
        target,
        headers=response.headers,
        nullable=True,
    )


def translate_void(response: httpx.Response) -> VoidResult:
    """Translate a side-effect-only call (delete, revoke, ...)."""
    return translate_status(
        response.status_code, response.content, None, headers=response.headers
    )


def translate_status(
    status_code: int,
    body: bytes | str | None,
    target: Any,
    *,
    headers: Mapping[str, str] | None = None,
    nullable: bool = False,
) -> PolarResult[Any]:
    """Translate a raw status/body pair.

    Args:
        status_code: HTTP status of the response.
        body: Raw response body.
        target: Expected success payload type, validated with pydantic.
            ``None`` discards the body (void operations).
        headers: Response headers; only ``Retry-After`` is consulted.
        nullable: Map 404 and empty 2xx bodies to ``Success(None)``.
    """
    text = _decode(body)

    if 200 <= status_code < 300:
        if target is None:
            return Success(None)
        if not text.strip():
            if nullable or _accepts_none(target):
                return Success(None)
            return Failure(
                PolarError(
                    kind=ErrorKind.DESERIALIZATION,
                    status_code=status_code,
                    message="Response body was empty",
                    response_body=text,
                )
            )
        try:
            value = _adapter(target).validate_json(text)
        except ValueError as exc:
            return Failure(PolarError.deserialization(status_code, exc, text))
        return Success(value)

    if status_code == 404 and nullable:
        return Success(None)

    return Failure(parse_error(status_code, text, headers=headers))


def parse_error(
    status_code: int,
    text: str,
    *,
    headers: Mapping[str, str] | None = None,
) -> PolarError:
    """Build a ``PolarError`` from a non-2xx response."""
    retry_after_s = None
    if headers is not None:
        retry_after_s = parse_retry_after(_header(headers, "Retry-After"))

    default_message = DEFAULT_STATUS_MESSAGES.get(
        status_code, f"HTTP {status_code}: {text}" if text else f"HTTP {status_code}"
    )
    message = default_message
    error_type: str | None = None
    detail: Any = None

    payload = _load_json_object(text)
    if payload is not None:
        message = _error_message(payload) or default_message
        error_type = _first_string(payload, _TYPE_FIELDS)
        detail = _first_present(payload, _DETAIL_FIELDS)

    if status_code == 429:
        message = _with_rate_limit_context(message, retry_after_s)

    return PolarError(
        kind=kind_for_status(status_code),
        status_code=status_code,
        message=message,
        detail=detail,
        error_type=error_type,
        response_body=text or None,
        retry_after_s=retry_after_s,
    )


def _decode(body: bytes | str | None) -> str:
    if body is None:
        return ""
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is None:
        value = headers.get(name.lower())
    return value


def _load_json_object(text: str) -> dict[str, Any] | None:
    if not text.strip():
        return None
    try:
        payload = json.loads(text)
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def _error_message(payload: dict[str, Any]) -> str | None:
    for field in _MESSAGE_FIELDS:
        if field not in payload:
            continue
        value = payload[field]
        if isinstance(value, str):
            return value
        if isinstance(value, list):
            joined = _join_validation_items(value)
            if joined:
                return joined
        if isinstance(value, int | float):
            return str(value)
        return json.dumps(value)

    errors = payload.get("errors")
    if isinstance(errors, list):
        messages = [
            e["message"]
            for e in errors
            if isinstance(e, dict) and isinstance(e.get("message"), str)
        ]
        if messages:
            return "; ".join(messages)
    return None


def _join_validation_items(items: list[Any]) -> str:
    """Flatten FastAPI-style ``[{"loc": [...], "msg": "..."}]`` entries."""
    parts: list[str] = []
    for item in items:
        if isinstance(item, dict) and isinstance(item.get("msg"), str):
            loc = item.get("loc")
            if isinstance(loc, list) and loc:
                parts.append(f"{'.'.join(str(p) for p in loc)}: {item['msg']}")
            else:
                parts.append(item["msg"])
        elif isinstance(item, str):
            parts.append(item)
    return "; ".join(parts)


def _first_string(payload: dict[str, Any], fields: tuple[str, ...]) -> str | None:
    for field in fields:
        value = payload.get(field)
        if isinstance(value, str):
            return value
    return None


def _first_present(payload: dict[str, Any], fields: tuple[str, ...]) -> Any:
    for field in fields:
        if field in payload:
            return payload[field]
    return None


def _with_rate_limit_context(message: str, retry_after_s: float | None) -> str:
    if retry_after_s is not None:
        return f"{message} Retry after {retry_after_s:.0f} seconds."
    return f"{message} Consider reducing request frequency."

"""HTTP transport shared by every resource client.

Owns the ``httpx.AsyncClient``, the rate limiter and the retry policy.
Resource clients only see four calls: ``request`` (raw, resilient),
``call``, ``call_nullable`` and ``call_void`` (result-returning).
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
import logging
from typing import Any, Literal

import httpx
from pydantic import BaseModel

from polar_client.config import PolarConfig
from polar_client.errors import PolarError
from polar_client.rate_limit import RateLimiter
from polar_client.result import Failure, PolarResult, VoidResult
from polar_client.retry import execute_resilient, is_transient_network_error
from polar_client.translate import translate, translate_nullable, translate_void

logger = logging.getLogger(__name__)

HTTPMethod = Literal["GET", "POST", "PATCH", "DELETE"]


class UndecodableBodyError(Exception):
    """A response arrived but its body could not be decoded (bad content encoding)."""

    def __init__(self, status_code: int, cause: httpx.DecodingError) -> None:
        super().__init__(f"HTTP {status_code} body could not be decoded: {cause}")
        self.status_code = status_code
        self.cause = cause


class Transport:
    """Resilient, result-returning HTTP access to the Polar API."""

    def __init__(
        self,
        config: PolarConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        limiter: RateLimiter | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize with a validated config.

        A caller-supplied ``http_client`` is configured with the base URL,
        headers and timeout but not closed by ``aclose()``.
        """
        self.config = config
        self._owns_client = http_client is None
        if http_client is None:
            http_client = httpx.AsyncClient()
        http_client.base_url = httpx.URL(config.resolved_base_url)
        http_client.headers.update(config.headers)
        http_client.timeout = httpx.Timeout(config.timeout_s)
        self._client = http_client
        self.limiter = limiter or RateLimiter(config.requests_per_minute, sleep=sleep)
        self._sleep = sleep

    async def request(
        self,
        method: HTTPMethod,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        """Send a request through the rate limiter and retry loop.

        Transport exceptions that survive every retry propagate, as does
        ``UndecodableBodyError`` for a body httpx cannot decode.
        """
        query = _clean_params(params)
        body = _to_jsonable(json)

        async def send() -> httpx.Response:
            request = self._client.build_request(method, path, params=query, json=body)
            response = await self._client.send(request, stream=True)
            try:
                await response.aread()
            except httpx.DecodingError as exc:
                raise UndecodableBodyError(response.status_code, exc) from exc
            finally:
                await response.aclose()
            return response

        return await execute_resilient(
            send, policy=self.config.retry, limiter=self.limiter, sleep=self._sleep
        )

    async def call(
        self,
        method: HTTPMethod,
        path: str,
        target: Any,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> PolarResult[Any]:
        """Request and translate; 404 is a ``NOT_FOUND`` failure."""
        return await self._send(
            method, path, lambda r: translate(r, target), params=params, json=json
        )

    async def call_nullable(
        self,
        method: HTTPMethod,
        path: str,
        target: Any,
        *,
        params: Mapping[str, Any] | None = None,
    ) -> PolarResult[Any]:
        """Request and translate; 404 is ``Success(None)``."""
        return await self._send(
            method, path, lambda r: translate_nullable(r, target), params=params
        )

    async def call_void(
        self,
        method: HTTPMethod,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> VoidResult:
        return await self._send(method, path, translate_void, params=params, json=json)

    async def _send(
        self,
        method: HTTPMethod,
        path: str,
        translator: Callable[[httpx.Response], PolarResult[Any]],
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> PolarResult[Any]:
        try:
            response = await self.request(method, path, params=params, json=json)
        except UndecodableBodyError as exc:
            logger.info("%s %s -> %d with undecodable body", method, path, exc.status_code)
            return Failure(PolarError.deserialization(exc.status_code, exc.cause))
        except Exception as exc:
            if not is_transient_network_error(exc):
                raise
            logger.info("%s %s failed without a response: %s", method, path, exc)
            return Failure(PolarError.network(exc))
        result = translator(response)
        if isinstance(result, Failure):
            logger.debug(
                "%s %s -> %d (%s)",
                method,
                path,
                response.status_code,
                result.error.kind.value,
            )
        return result

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _clean_params(params: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Drop ``None`` values and render booleans the way the API expects."""
    if not params:
        return None
    cleaned: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
        else:
            cleaned[key] = value
    return cleaned or None


def _to_jsonable(body: Any) -> Any:
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", exclude_none=True)
    return body

"""Bounded async retry around outbound HTTP calls.

Design goals:
- Small API surface
- Explicit state (policy + attempt counters)
- Retry only on transient conditions: transport failures and the statuses
  the policy names (429 by default)
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
import random
import time
from typing import TYPE_CHECKING

import httpx

from polar_client._http import DEFAULT_RETRY_STATUS_CODES, parse_retry_after
from polar_client.errors import _walk_exception_chain

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from polar_client.rate_limit import RateLimiter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry policy with exponential backoff and additive jitter.

    ``max_attempts`` counts every attempt, the first one included.
    """

    max_attempts: int = 4
    initial_delay_s: float = 1.0
    backoff_multiplier: float = 2.0
    max_delay_s: float = 30.0
    #: Up to this fraction of the backoff delay is added as random jitter.
    jitter_factor: float = 0.1
    respect_retry_after: bool = True
    #: Add ``SERVER_ERROR_STATUS_CODES`` here to retry 5xx responses too.
    retry_statuses: frozenset[int] = field(
        default_factory=lambda: DEFAULT_RETRY_STATUS_CODES
    )
    max_elapsed_s: float | None = None

    def __post_init__(self) -> None:
        """Validate invariants to keep retry behavior predictable."""
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy.max_attempts must be >= 1")
        if self.initial_delay_s < 0:
            raise ValueError("RetryPolicy.initial_delay_s must be >= 0")
        if self.backoff_multiplier <= 0:
            raise ValueError("RetryPolicy.backoff_multiplier must be > 0")
        if self.max_delay_s < 0:
            raise ValueError("RetryPolicy.max_delay_s must be >= 0")
        if not 0 <= self.jitter_factor <= 1:
            raise ValueError("RetryPolicy.jitter_factor must be within [0, 1]")
        if self.max_elapsed_s is not None and self.max_elapsed_s < 0:
            raise ValueError("RetryPolicy.max_elapsed_s must be >= 0 or None")
        object.__setattr__(self, "retry_statuses", frozenset(self.retry_statuses))


def is_transient_network_error(exc: BaseException) -> bool:
    """Return True when *exc* (or anything it wraps) is a transport failure."""
    if isinstance(exc, asyncio.CancelledError):
        return False
    for e in _walk_exception_chain(exc):
        if isinstance(e, (TimeoutError, asyncio.TimeoutError)):
            return True
        # TransportError covers connect/read/write failures and timeouts.
        if isinstance(e, httpx.TransportError):
            return True
    return False


def should_retry_response(response: httpx.Response, policy: RetryPolicy) -> bool:
    return response.status_code in policy.retry_statuses


def compute_backoff_delay(
    policy: RetryPolicy, *, retry_index: int, retry_after_s: float | None = None
) -> float:
    """Delay before retry number *retry_index* (1 for the first retry)."""
    base = policy.initial_delay_s * (
        policy.backoff_multiplier ** max(0, retry_index - 1)
    )
    base = min(policy.max_delay_s, base)
    if base > 0 and policy.jitter_factor > 0:
        base += random.random() * base * policy.jitter_factor  # noqa: S311
    if policy.respect_retry_after and retry_after_s is not None:
        base = max(base, min(retry_after_s, policy.max_delay_s))
    return max(0.0, base)


async def execute_resilient(
    operation: Callable[[], Awaitable[httpx.Response]],
    *,
    policy: RetryPolicy,
    limiter: RateLimiter | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> httpx.Response:
    """Run *operation* with rate-limit admission and bounded retries.

    Every attempt, retries included, first waits for the limiter. When
    attempts run out the last response is returned (or the last exception
    re-raised) unmodified.
    """
    start = time.monotonic()
    last_exc: BaseException | None = None
    last_response: httpx.Response | None = None

    for attempt in range(1, policy.max_attempts + 1):
        if limiter is not None:
            await limiter.acquire()

        retry_after_s: float | None = None
        try:
            response = await operation()
        except Exception as exc:
            if not is_transient_network_error(exc):
                raise
            last_exc, last_response = exc, None
            reason = type(exc).__name__
        else:
            if not should_retry_response(response, policy):
                return response
            last_exc, last_response = None, response
            reason = f"HTTP {response.status_code}"
            retry_after_s = parse_retry_after(response.headers.get("Retry-After"))

        if attempt >= policy.max_attempts:
            break

        delay = compute_backoff_delay(
            policy, retry_index=attempt, retry_after_s=retry_after_s
        )
        if policy.max_elapsed_s is not None:
            remaining = policy.max_elapsed_s - (time.monotonic() - start)
            if remaining <= 0:
                break
            delay = min(delay, remaining)

        logger.debug(
            "Retrying request (attempt %d/%d) in %.2fs after %s",
            attempt + 1,
            policy.max_attempts,
            delay,
            reason,
        )
        if delay > 0:
            await sleep(delay)

    logger.warning("Giving up after %d attempt(s): %s", attempt, reason)
    if last_response is not None:
        return last_response
    if last_exc is None:  # pragma: no cover
        raise RuntimeError("execute_resilient exhausted without an outcome")
    raise last_exc

"""PolarClient: entry point wiring config, transport and resources."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Self

from polar_client.config import PolarConfig
from polar_client.resources import (
    Benefits,
    Checkouts,
    Customers,
    LicenseKeys,
    Orders,
    Products,
    Subscriptions,
)
from polar_client.transport import Transport

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from types import TracebackType

    import httpx

    from polar_client.rate_limit import RateLimiter


class PolarClient:
    """Async client for the Polar API.

    Every method returns a ``PolarResult``; call ``ensure_success()`` on it
    (or wrap the call in ``value_or_raise``) for exception-based flow.

    Example:
        async with PolarClient(environment="sandbox") as polar:
            result = await polar.products.list(limit=20)
            for product in result.ensure_success().items:
                print(product.name)
    """

    def __init__(
        self,
        config: PolarConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        limiter: RateLimiter | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        **overrides: Any,
    ) -> None:
        """Create a client from a config, or from PolarConfig keyword overrides."""
        if config is None:
            config = PolarConfig(**overrides)
        elif overrides:
            raise TypeError("Pass either config or PolarConfig keyword arguments, not both")
        self.config = config
        self._transport = Transport(
            config, http_client=http_client, limiter=limiter, sleep=sleep
        )
        self.products = Products(self._transport)
        self.orders = Orders(self._transport)
        self.subscriptions = Subscriptions(self._transport)
        self.customers = Customers(self._transport)
        self.checkouts = Checkouts(self._transport)
        self.benefits = Benefits(self._transport)
        self.license_keys = LicenseKeys(self._transport)

    @property
    def rate_limit_status(self) -> tuple[int, int]:
        """``(available, limit)`` requests in the current rolling minute."""
        return self._transport.limiter.status()

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

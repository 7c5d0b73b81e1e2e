"""Checkout sessions resource."""

from __future__ import annotations

from polar_client._http import api_path
from polar_client.models import Checkout, CheckoutCreateRequest
from polar_client.resources.base import Resource
from polar_client.result import PolarResult


class Checkouts(Resource[Checkout]):
    path = "checkouts"
    model = Checkout

    async def create(self, request: CheckoutCreateRequest) -> PolarResult[Checkout]:
        return await self._create(request)

    async def get_by_client_secret(
        self, client_secret: str
    ) -> PolarResult[Checkout | None]:
        if not client_secret:
            raise ValueError("client_secret must be non-empty")
        return await self._transport.call_nullable(
            "GET", api_path(self.path, "client", client_secret), Checkout
        )

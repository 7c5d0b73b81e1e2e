"""Customers resource."""

from __future__ import annotations

from polar_client._http import api_path
from polar_client.models import Customer, CustomerCreateRequest, CustomerUpdateRequest
from polar_client.resources.base import Resource
from polar_client.result import PolarResult, VoidResult


class Customers(Resource[Customer]):
    path = "customers"
    model = Customer

    async def create(self, request: CustomerCreateRequest) -> PolarResult[Customer]:
        return await self._create(request)

    async def update(
        self, customer_id: str, request: CustomerUpdateRequest
    ) -> PolarResult[Customer]:
        return await self._update(customer_id, request)

    async def delete(self, customer_id: str) -> VoidResult:
        return await self._delete(customer_id)

    async def get_external(self, external_id: str) -> PolarResult[Customer | None]:
        """Look up a customer by the ID your system assigned to it."""
        if not external_id:
            raise ValueError("external_id must be non-empty")
        return await self._transport.call_nullable(
            "GET", api_path(self.path, "external", external_id), Customer
        )

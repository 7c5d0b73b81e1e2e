"""Orders resource."""

from __future__ import annotations

from polar_client.models import Order, OrderInvoice, OrderUpdateRequest
from polar_client.resources.base import Resource
from polar_client.result import PolarResult, VoidResult


class Orders(Resource[Order]):
    path = "orders"
    model = Order

    async def update(
        self, order_id: str, request: OrderUpdateRequest
    ) -> PolarResult[Order]:
        return await self._update(order_id, request)

    async def get_invoice(self, order_id: str) -> PolarResult[OrderInvoice]:
        return await self._transport.call(
            "GET", self._item_path(order_id, "invoice"), OrderInvoice
        )

    async def generate_invoice(self, order_id: str) -> VoidResult:
        """Ask the API to (re)generate the invoice; it is built asynchronously."""
        return await self._transport.call_void(
            "POST", self._item_path(order_id, "invoice")
        )

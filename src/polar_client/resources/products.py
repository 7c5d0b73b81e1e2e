"""Products resource."""

from __future__ import annotations

from polar_client.models import (
    Product,
    ProductCreateRequest,
    ProductPrice,
    ProductUpdateRequest,
)
from polar_client.resources.base import Resource
from polar_client.result import PolarResult


class Products(Resource[Product]):
    path = "products"
    model = Product

    async def create(self, request: ProductCreateRequest) -> PolarResult[Product]:
        return await self._create(request)

    async def update(
        self, product_id: str, request: ProductUpdateRequest
    ) -> PolarResult[Product]:
        return await self._update(product_id, request)

    async def archive(self, product_id: str) -> PolarResult[Product]:
        """Archive a product; archived products stay readable but unsellable."""
        return await self._update(product_id, {"is_archived": True})

    async def create_price(
        self, product_id: str, price: dict[str, object]
    ) -> PolarResult[ProductPrice]:
        return await self._transport.call(
            "POST",
            self._item_path(product_id, "prices", collection=True),
            ProductPrice,
            json=price,
        )

"""Subscriptions resource."""

from __future__ import annotations

from polar_client.models import Subscription, SubscriptionUpdateRequest
from polar_client.resources.base import Resource
from polar_client.result import PolarResult


class Subscriptions(Resource[Subscription]):
    path = "subscriptions"
    model = Subscription

    async def update(
        self, subscription_id: str, request: SubscriptionUpdateRequest
    ) -> PolarResult[Subscription]:
        return await self._update(subscription_id, request)

    async def cancel_at_period_end(
        self, subscription_id: str
    ) -> PolarResult[Subscription]:
        return await self._update(subscription_id, {"cancel_at_period_end": True})

    async def revoke(self, subscription_id: str) -> PolarResult[Subscription]:
        """End the subscription immediately."""
        return await self._transport.call(
            "DELETE", self._item_path(subscription_id), Subscription
        )

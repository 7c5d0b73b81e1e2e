"""Benefits resource."""

from __future__ import annotations

from polar_client.models import Benefit, BenefitCreateRequest, BenefitUpdateRequest
from polar_client.resources.base import Resource
from polar_client.result import PolarResult, VoidResult


class Benefits(Resource[Benefit]):
    path = "benefits"
    model = Benefit

    async def create(self, request: BenefitCreateRequest) -> PolarResult[Benefit]:
        return await self._create(request)

    async def update(
        self, benefit_id: str, request: BenefitUpdateRequest
    ) -> PolarResult[Benefit]:
        return await self._update(benefit_id, request)

    async def delete(self, benefit_id: str) -> VoidResult:
        return await self._delete(benefit_id)

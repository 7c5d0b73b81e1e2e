"""License keys resource.

Validation, activation and deactivation go through the customer-portal
endpoints, which take the key itself rather than its ID.
"""

from __future__ import annotations

from polar_client._http import api_path
from polar_client.models import (
    LicenseKey,
    LicenseKeyActivateRequest,
    LicenseKeyActivation,
    LicenseKeyDeactivateRequest,
    LicenseKeyUpdateRequest,
    LicenseKeyValidateRequest,
)
from polar_client.resources.base import Resource
from polar_client.result import PolarResult, VoidResult

_PORTAL = "customer-portal/license-keys"


class LicenseKeys(Resource[LicenseKey]):
    path = "license-keys"
    model = LicenseKey

    async def update(
        self, license_key_id: str, request: LicenseKeyUpdateRequest
    ) -> PolarResult[LicenseKey]:
        return await self._update(license_key_id, request)

    async def validate(self, request: LicenseKeyValidateRequest) -> PolarResult[LicenseKey]:
        return await self._transport.call(
            "POST", api_path(_PORTAL, "validate"), LicenseKey, json=request
        )

    async def activate(
        self, request: LicenseKeyActivateRequest
    ) -> PolarResult[LicenseKeyActivation]:
        return await self._transport.call(
            "POST", api_path(_PORTAL, "activate"), LicenseKeyActivation, json=request
        )

    async def deactivate(self, request: LicenseKeyDeactivateRequest) -> VoidResult:
        return await self._transport.call_void(
            "POST", api_path(_PORTAL, "deactivate"), json=request
        )

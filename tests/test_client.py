"""End-to-end client behavior over a mocked HTTP transport."""

from __future__ import annotations

import json

import httpx
import pytest

from polar_client import (
    ErrorKind,
    Failure,
    NotFoundError,
    PolarClient,
    PolarConfig,
    RetryPolicy,
    Success,
    value_or_raise,
)
from polar_client.models import (
    BenefitUpdateRequest,
    CheckoutCreateRequest,
    CustomerCreateRequest,
    CustomerUpdateRequest,
    LicenseKeyActivateRequest,
    LicenseKeyDeactivateRequest,
    LicenseKeyUpdateRequest,
    LicenseKeyValidateRequest,
    OrderUpdateRequest,
    Product,
    ProductCreateRequest,
    ProductUpdateRequest,
    SubscriptionUpdateRequest,
)

pytestmark = pytest.mark.integration

PRODUCT = {"id": "p1", "name": "Pro plan"}


class Recorder:
    """Mock handler that records requests and replies from a script."""

    def __init__(self, *responses: httpx.Response | Exception) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


# =============================================================================
# Wire format
# =============================================================================


@pytest.mark.asyncio
async def test_get_sends_auth_and_versioned_path(make_client) -> None:
    handler = Recorder(httpx.Response(200, json=PRODUCT))
    client = make_client(handler)

    result = await client.products.get("p1")

    assert isinstance(result, Success)
    assert isinstance(result.value, Product)
    assert result.value.name == "Pro plan"
    request = handler.last
    assert request.method == "GET"
    assert str(request.url) == "https://api.polar.sh/v1/products/p1"
    assert request.headers["Authorization"] == "Bearer test-token"
    assert request.headers["Accept"] == "application/json"


@pytest.mark.asyncio
async def test_sandbox_environment_uses_sandbox_host(make_client) -> None:
    handler = Recorder(httpx.Response(200, json=PRODUCT))
    client = make_client(handler, environment="sandbox")

    await client.products.get("p1")

    assert handler.last.url.host == "sandbox-api.polar.sh"


@pytest.mark.asyncio
async def test_create_posts_json_without_nulls(make_client) -> None:
    handler = Recorder(httpx.Response(201, json=PRODUCT))
    client = make_client(handler)

    result = await client.products.create(ProductCreateRequest(name="Pro plan"))

    assert result.is_success
    request = handler.last
    assert request.method == "POST"
    assert request.url.path == "/v1/products/"
    assert json.loads(request.content) == {"name": "Pro plan", "prices": []}


@pytest.mark.asyncio
async def test_list_params_are_cleaned(make_client) -> None:
    handler = Recorder(httpx.Response(200, json={"items": [], "pagination": {}}))
    client = make_client(handler)

    await client.subscriptions.list(active=True, customer_id=None, product_id="p1")

    params = handler.last.url.params
    assert params["active"] == "true"
    assert params["product_id"] == "p1"
    assert "customer_id" not in params


# =============================================================================
# Listing
# =============================================================================


@pytest.mark.asyncio
async def test_list_clamps_limit_and_stamps_position(make_client) -> None:
    body = {"items": [PRODUCT], "pagination": {"total_count": 250, "max_page": 3}}
    handler = Recorder(httpx.Response(200, json=body))
    client = make_client(handler)

    page = (await client.products.list(page=2, limit=500)).ensure_success()

    assert handler.last.url.params["limit"] == "100"
    assert handler.last.url.params["page"] == "2"
    assert page.pagination.page == 2
    assert page.pagination.limit == 100
    assert page.pagination.has_next is True
    assert page.items[0].id == "p1"


@pytest.mark.asyncio
async def test_list_rejects_page_zero(make_client) -> None:
    client = make_client(Recorder(httpx.Response(200, json={})))
    with pytest.raises(ValueError):
        await client.products.list(page=0)


@pytest.mark.asyncio
async def test_iter_all_walks_every_page(make_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        items = [{"id": f"c{page}-{i}", "email": f"{page}{i}@x.io"} for i in range(2)]
        return httpx.Response(
            200, json={"items": items, "pagination": {"total_count": 4, "max_page": 2}}
        )

    client = make_client(handler)

    ids = [r.ensure_success().id async for r in client.customers.iter_all()]

    assert ids == ["c1-0", "c1-1", "c2-0", "c2-1"]


@pytest.mark.asyncio
async def test_iter_all_stops_at_first_failure(make_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["page"] == "1":
            return httpx.Response(
                200,
                json={
                    "items": [{"id": "o1"}],
                    "pagination": {"total_count": 2, "max_page": 2},
                },
            )
        return httpx.Response(500, json={"detail": "boom"})

    client = make_client(handler)

    results = [r async for r in client.orders.iter_all()]

    assert len(results) == 2
    assert results[0].is_success
    assert isinstance(results[1], Failure)
    assert results[1].error.kind is ErrorKind.SERVER_ERROR


# =============================================================================
# Not-found rule
# =============================================================================


@pytest.mark.asyncio
async def test_get_missing_resource_is_success_none(make_client) -> None:
    client = make_client(Recorder(httpx.Response(404, json={"detail": "Not found"})))

    result = await client.products.get("missing")

    assert result == Success(None)


@pytest.mark.asyncio
async def test_action_on_missing_resource_is_not_found_failure(make_client) -> None:
    client = make_client(Recorder(httpx.Response(404, json={"detail": "Not found"})))

    result = await client.subscriptions.revoke("missing")

    assert isinstance(result, Failure)
    assert result.error.kind is ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_value_or_raise_surfaces_not_found(make_client) -> None:
    client = make_client(Recorder(httpx.Response(404, json={"detail": "Not found"})))

    with pytest.raises(NotFoundError) as exc:
        await value_or_raise(client.benefits.delete("missing"))

    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_get_external_customer(make_client) -> None:
    handler = Recorder(httpx.Response(200, json={"id": "c1", "email": "a@b.io"}))
    client = make_client(handler)

    result = await client.customers.get_external("ext-1")

    assert result.ensure_success().id == "c1"
    assert handler.last.url.path == "/v1/customers/external/ext-1"


@pytest.mark.asyncio
async def test_empty_id_is_rejected_before_sending(make_client) -> None:
    handler = Recorder(httpx.Response(200, json=PRODUCT))
    client = make_client(handler)

    with pytest.raises(ValueError):
        await client.products.get("  ")
    assert handler.requests == []


# =============================================================================
# Void operations
# =============================================================================


@pytest.mark.asyncio
async def test_delete_returns_void_success(make_client) -> None:
    handler = Recorder(httpx.Response(204))
    client = make_client(handler)

    result = await client.customers.delete("c1")

    assert result == Success(None)
    assert handler.last.method == "DELETE"
    assert handler.last.url.path == "/v1/customers/c1"


@pytest.mark.asyncio
async def test_generate_invoice_posts_to_invoice_path(make_client) -> None:
    handler = Recorder(httpx.Response(202))
    client = make_client(handler)

    assert (await client.orders.generate_invoice("o1")).is_success
    assert handler.last.method == "POST"
    assert handler.last.url.path == "/v1/orders/o1/invoice"


# =============================================================================
# Other resources
# =============================================================================


@pytest.mark.asyncio
async def test_checkout_create(make_client) -> None:
    handler = Recorder(
        httpx.Response(201, json={"id": "co1", "url": "https://polar.sh/checkout/co1"})
    )
    client = make_client(handler)

    result = await client.checkouts.create(CheckoutCreateRequest(products=["p1"]))

    assert result.ensure_success().url == "https://polar.sh/checkout/co1"
    assert json.loads(handler.last.content) == {"products": ["p1"]}


@pytest.mark.asyncio
async def test_license_key_validate_uses_portal_endpoint(make_client) -> None:
    handler = Recorder(httpx.Response(200, json={"id": "lk1", "status": "granted"}))
    client = make_client(handler)

    request = LicenseKeyValidateRequest(key="KEY-123", organization_id="org1")
    result = await client.license_keys.validate(request)

    assert result.ensure_success().status == "granted"
    assert handler.last.url.path == "/v1/customer-portal/license-keys/validate"


@pytest.mark.asyncio
async def test_validation_failure_is_returned_not_raised(make_client) -> None:
    body = {"detail": [{"loc": ["body", "email"], "msg": "value is not a valid email"}]}
    client = make_client(Recorder(httpx.Response(422, json=body)))

    result = await client.customers.create(CustomerCreateRequest(email="nope"))

    assert result.is_validation_error
    assert result.error is not None
    assert result.error.message == "body.email: value is not a valid email"


# =============================================================================
# Resilience
# =============================================================================


@pytest.mark.asyncio
async def test_rate_limited_call_is_retried_then_succeeds(make_client, clock) -> None:
    handler = Recorder(
        httpx.Response(429),
        httpx.Response(429),
        httpx.Response(429),
        httpx.Response(200, json=PRODUCT),
    )
    client = make_client(handler, retry=RetryPolicy(max_attempts=5, jitter_factor=0))

    result = await client.products.get("p1")

    assert result.is_success
    assert len(handler.requests) == 4
    assert clock.sleeps == [1.0, 2.0, 4.0]


@pytest.mark.asyncio
async def test_rate_limit_exhausted_surfaces_rate_limited(make_client) -> None:
    handler = Recorder(httpx.Response(429, headers={"Retry-After": "2"}))
    client = make_client(handler, retry=RetryPolicy(max_attempts=3, jitter_factor=0))

    result = await client.products.get("p1")

    assert result.is_rate_limit_error
    assert result.error is not None
    assert result.error.retry_after_s == 2.0
    assert len(handler.requests) == 3


@pytest.mark.asyncio
async def test_network_failure_becomes_network_error(make_client) -> None:
    handler = Recorder(httpx.ConnectError("connection refused"))
    client = make_client(handler, retry=RetryPolicy(max_attempts=2, jitter_factor=0))

    result = await client.orders.get("o1")

    assert isinstance(result, Failure)
    assert result.error.kind is ErrorKind.NETWORK_ERROR
    assert result.error.status_code == 0
    assert len(handler.requests) == 2


@pytest.mark.asyncio
async def test_server_error_is_not_retried_by_default(make_client) -> None:
    handler = Recorder(httpx.Response(502))
    client = make_client(handler)

    result = await client.products.get("p1")

    assert result.is_server_error
    assert len(handler.requests) == 1


@pytest.mark.asyncio
async def test_rate_limit_status_tracks_requests(make_client) -> None:
    client = make_client(
        Recorder(httpx.Response(200, json=PRODUCT)), requests_per_minute=10
    )

    await client.products.get("p1")
    await client.products.get("p1")

    assert client.rate_limit_status == (8, 10)


# =============================================================================
# Construction and lifecycle
# =============================================================================


def test_client_from_keyword_overrides() -> None:
    client = PolarClient(access_token="tok", environment="sandbox")
    assert client.config.resolved_base_url == "https://sandbox-api.polar.sh"


def test_client_rejects_config_and_overrides() -> None:
    with pytest.raises(TypeError):
        PolarClient(PolarConfig(access_token="tok"), timeout_s=10)


@pytest.mark.asyncio
async def test_async_context_manager_closes_owned_client() -> None:
    async with PolarClient(access_token="tok") as client:
        http_client = client._transport._client
    assert http_client.is_closed


@pytest.mark.asyncio
async def test_supplied_http_client_is_left_open(make_client) -> None:
    client = make_client(Recorder(httpx.Response(200, json=PRODUCT)))
    http_client = client._transport._client

    await client.aclose()

    assert not http_client.is_closed
    await http_client.aclose()


# =============================================================================
# Failures that never reach the translator
# =============================================================================


@pytest.mark.asyncio
async def test_undecodable_body_is_deserialization_failure(make_client) -> None:
    handler = Recorder(
        httpx.Response(
            200,
            stream=httpx.ByteStream(b"not gzip at all"),
            headers={"Content-Encoding": "gzip"},
        )
    )
    client = make_client(handler)

    result = await client.products.get("p1")

    assert isinstance(result, Failure)
    assert result.error.kind is ErrorKind.DESERIALIZATION
    assert result.error.status_code == 200
    assert len(handler.requests) == 1


@pytest.mark.asyncio
async def test_wrapped_connect_error_becomes_network_error(make_client) -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        try:
            raise httpx.ConnectError("connection refused")
        except httpx.ConnectError as exc:
            raise RuntimeError("adapter failed") from exc

    client = make_client(handler, retry=RetryPolicy(max_attempts=2, jitter_factor=0))

    result = await client.products.get("p1")

    assert isinstance(result, Failure)
    assert result.error.kind is ErrorKind.NETWORK_ERROR
    assert result.error.status_code == 0
    assert len(requests) == 2


@pytest.mark.asyncio
async def test_programming_errors_still_propagate(make_client) -> None:
    client = make_client(Recorder(ValueError("handler bug")))

    with pytest.raises(ValueError, match="handler bug"):
        await client.products.get("p1")


# =============================================================================
# Resource actions
# =============================================================================

# Carries every required field of every response model; extra fields are kept.
ANY_RESOURCE = {
    "id": "x1",
    "name": "Thing",
    "status": "active",
    "url": "https://polar.sh/invoice.pdf",
    "email": "a@b.io",
    "type": "custom",
    "description": "Discord role",
}


@pytest.mark.parametrize(
    ("call", "method", "path", "payload"),
    [
        pytest.param(
            lambda c: c.products.update("p1", ProductUpdateRequest(name="New")),
            "PATCH",
            "/v1/products/p1",
            {"name": "New"},
            id="products.update",
        ),
        pytest.param(
            lambda c: c.products.archive("p1"),
            "PATCH",
            "/v1/products/p1",
            {"is_archived": True},
            id="products.archive",
        ),
        pytest.param(
            lambda c: c.products.create_price(
                "p1", {"amount_type": "fixed", "price_amount": 1000}
            ),
            "POST",
            "/v1/products/p1/prices/",
            {"amount_type": "fixed", "price_amount": 1000},
            id="products.create_price",
        ),
        pytest.param(
            lambda c: c.customers.update("c1", CustomerUpdateRequest(name="Ann")),
            "PATCH",
            "/v1/customers/c1",
            {"name": "Ann"},
            id="customers.update",
        ),
        pytest.param(
            lambda c: c.orders.update("o1", OrderUpdateRequest(billing_name="Ann")),
            "PATCH",
            "/v1/orders/o1",
            {"billing_name": "Ann"},
            id="orders.update",
        ),
        pytest.param(
            lambda c: c.orders.get_invoice("o1"),
            "GET",
            "/v1/orders/o1/invoice",
            None,
            id="orders.get_invoice",
        ),
        pytest.param(
            lambda c: c.subscriptions.update(
                "s1", SubscriptionUpdateRequest(product_id="p2")
            ),
            "PATCH",
            "/v1/subscriptions/s1",
            {"product_id": "p2"},
            id="subscriptions.update",
        ),
        pytest.param(
            lambda c: c.subscriptions.cancel_at_period_end("s1"),
            "PATCH",
            "/v1/subscriptions/s1",
            {"cancel_at_period_end": True},
            id="subscriptions.cancel_at_period_end",
        ),
        pytest.param(
            lambda c: c.checkouts.get_by_client_secret("cs_secret"),
            "GET",
            "/v1/checkouts/client/cs_secret",
            None,
            id="checkouts.get_by_client_secret",
        ),
        pytest.param(
            lambda c: c.benefits.update(
                "b1", BenefitUpdateRequest(description="Discord role")
            ),
            "PATCH",
            "/v1/benefits/b1",
            {"description": "Discord role"},
            id="benefits.update",
        ),
        pytest.param(
            lambda c: c.license_keys.update(
                "lk1", LicenseKeyUpdateRequest(status="revoked")
            ),
            "PATCH",
            "/v1/license-keys/lk1",
            {"status": "revoked"},
            id="license_keys.update",
        ),
        pytest.param(
            lambda c: c.license_keys.activate(
                LicenseKeyActivateRequest(
                    key="KEY-123", organization_id="org1", label="laptop"
                )
            ),
            "POST",
            "/v1/customer-portal/license-keys/activate",
            {"key": "KEY-123", "organization_id": "org1", "label": "laptop"},
            id="license_keys.activate",
        ),
        pytest.param(
            lambda c: c.license_keys.deactivate(
                LicenseKeyDeactivateRequest(
                    key="KEY-123", organization_id="org1", activation_id="a1"
                )
            ),
            "POST",
            "/v1/customer-portal/license-keys/deactivate",
            {"key": "KEY-123", "organization_id": "org1", "activation_id": "a1"},
            id="license_keys.deactivate",
        ),
    ],
)
@pytest.mark.asyncio
async def test_resource_action_wire_format(
    make_client, call, method: str, path: str, payload: dict | None
) -> None:
    handler = Recorder(httpx.Response(200, json=ANY_RESOURCE))
    client = make_client(handler)

    result = await call(client)

    assert result.is_success
    request = handler.last
    assert request.method == method
    assert request.url.path == path
    if payload is None:
        assert request.content == b""
    else:
        assert json.loads(request.content) == payload


@pytest.mark.asyncio
async def test_checkout_by_missing_client_secret_is_success_none(make_client) -> None:
    client = make_client(Recorder(httpx.Response(404, json={"detail": "Not found"})))

    result = await client.checkouts.get_by_client_secret("cs_gone")

    assert result == Success(None)


@pytest.mark.asyncio
async def test_invoice_of_missing_order_is_not_found_failure(make_client) -> None:
    client = make_client(Recorder(httpx.Response(404, json={"detail": "Not found"})))

    result = await client.orders.get_invoice("missing")

    assert result.is_not_found_error


@pytest.mark.asyncio
async def test_create_price_rejects_empty_product_id(make_client) -> None:
    handler = Recorder(httpx.Response(200, json=ANY_RESOURCE))
    client = make_client(handler)

    with pytest.raises(ValueError):
        await client.products.create_price("", {"amount_type": "free"})
    assert handler.requests == []

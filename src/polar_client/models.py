"""Pydantic models for the wire shapes polar_client consumes.

Only identifying and commonly used fields are typed. ``extra="allow"``
keeps every other field the API returns, so models never drop data when
the API grows.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PolarModel(BaseModel):
    """Base for response models: snake_case wire names, unknown fields kept."""

    model_config = ConfigDict(extra="allow", frozen=True)


class RequestModel(BaseModel):
    """Base for request bodies: unknown fields forwarded as-is."""

    model_config = ConfigDict(extra="allow")


# --- Pagination ---


class Pagination(PolarModel):
    """Pagination metadata of a listing response.

    The API reports ``total_count`` and ``max_page``; ``page`` and ``limit``
    are filled in from the request that produced the page.
    """

    total_count: int = 0
    max_page: int = 0
    page: int | None = None
    limit: int | None = None

    @property
    def has_next(self) -> bool:
        return self.page is not None and self.page < self.max_page


class Page(PolarModel, Generic[T]):
    """One slice of a paginated listing."""

    items: list[T] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)


# --- Products ---


class ProductPrice(PolarModel):
    id: str
    amount_type: str | None = None
    price_amount: int | None = None
    price_currency: str | None = None
    recurring_interval: str | None = None
    is_archived: bool = False


class Product(PolarModel):
    id: str
    name: str
    description: str | None = None
    is_recurring: bool = False
    is_archived: bool = False
    organization_id: str | None = None
    prices: list[ProductPrice] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class ProductCreateRequest(RequestModel):
    name: str = Field(min_length=1)
    description: str | None = None
    recurring_interval: str | None = None
    prices: list[dict[str, Any]] = Field(default_factory=list)
    organization_id: str | None = None
    metadata: dict[str, Any] | None = None


class ProductUpdateRequest(RequestModel):
    name: str | None = None
    description: str | None = None
    is_archived: bool | None = None
    metadata: dict[str, Any] | None = None


# --- Customers ---


class Customer(PolarModel):
    id: str
    email: str
    name: str | None = None
    external_id: str | None = None
    organization_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class CustomerCreateRequest(RequestModel):
    email: str = Field(min_length=3)
    name: str | None = None
    external_id: str | None = None
    organization_id: str | None = None
    metadata: dict[str, Any] | None = None


class CustomerUpdateRequest(RequestModel):
    email: str | None = None
    name: str | None = None
    metadata: dict[str, Any] | None = None


# --- Orders ---


class Order(PolarModel):
    id: str
    status: str | None = None
    customer_id: str | None = None
    product_id: str | None = None
    subscription_id: str | None = None
    total_amount: int | None = None
    currency: str | None = None
    created_at: datetime | None = None


class OrderUpdateRequest(RequestModel):
    billing_name: str | None = None
    billing_address: dict[str, Any] | None = None


class OrderInvoice(PolarModel):
    url: str


# --- Subscriptions ---


class Subscription(PolarModel):
    id: str
    status: str
    customer_id: str | None = None
    product_id: str | None = None
    cancel_at_period_end: bool = False
    current_period_end: datetime | None = None


class SubscriptionUpdateRequest(RequestModel):
    product_id: str | None = None
    cancel_at_period_end: bool | None = None
    discount_id: str | None = None


# --- Checkouts ---


class Checkout(PolarModel):
    id: str
    status: str | None = None
    url: str | None = None
    client_secret: str | None = None
    customer_email: str | None = None
    expires_at: datetime | None = None


class CheckoutCreateRequest(RequestModel):
    products: list[str] = Field(min_length=1)
    success_url: str | None = None
    customer_email: str | None = None
    metadata: dict[str, Any] | None = None


# --- Benefits ---


class Benefit(PolarModel):
    id: str
    type: str
    description: str
    organization_id: str | None = None
    deletable: bool = True


class BenefitCreateRequest(RequestModel):
    type: str
    description: str = Field(min_length=3, max_length=42)
    properties: dict[str, Any] = Field(default_factory=dict)
    organization_id: str | None = None


class BenefitUpdateRequest(RequestModel):
    description: str | None = None
    properties: dict[str, Any] | None = None


# --- License keys ---


class LicenseKey(PolarModel):
    id: str
    key: str | None = None
    display_key: str | None = None
    status: str | None = None
    customer_id: str | None = None
    benefit_id: str | None = None
    limit_activations: int | None = None
    usage: int = 0
    expires_at: datetime | None = None


class LicenseKeyUpdateRequest(RequestModel):
    status: str | None = None
    usage: int | None = None
    limit_activations: int | None = None
    limit_usage: int | None = None
    expires_at: datetime | None = None


class LicenseKeyValidateRequest(RequestModel):
    key: str
    organization_id: str
    activation_id: str | None = None
    increment_usage: int | None = None


class LicenseKeyActivateRequest(RequestModel):
    key: str
    organization_id: str
    label: str
    meta: dict[str, Any] | None = None


class LicenseKeyDeactivateRequest(RequestModel):
    key: str
    organization_id: str
    activation_id: str


class LicenseKeyActivation(PolarModel):
    id: str
    license_key_id: str | None = None
    label: str | None = None

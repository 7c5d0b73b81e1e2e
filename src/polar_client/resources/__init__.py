"""Resource clients, one per API resource."""

from polar_client.resources.base import Resource
from polar_client.resources.benefits import Benefits
from polar_client.resources.checkouts import Checkouts
from polar_client.resources.customers import Customers
from polar_client.resources.license_keys import LicenseKeys
from polar_client.resources.orders import Orders
from polar_client.resources.products import Products
from polar_client.resources.subscriptions import Subscriptions

__all__ = [
    "Benefits",
    "Checkouts",
    "Customers",
    "LicenseKeys",
    "Orders",
    "Products",
    "Resource",
    "Subscriptions",
]

"""polar_client: typed async client for the Polar payments API.

Public API:
    - PolarClient: Resource clients (products, orders, ...) over one transport
    - PolarConfig: Configuration dataclass
    - PolarResult / Success / Failure: Result returned by every call
    - PolarError / ErrorKind: Structured failure description
    - RetryPolicy / RateLimiter: Resilience settings
"""

from __future__ import annotations

import logging

from polar_client.client import PolarClient
from polar_client.config import PolarConfig
from polar_client.errors import (
    APIError,
    ConfigurationError,
    ErrorKind,
    NetworkError,
    NotFoundError,
    PolarClientError,
    PolarError,
    RateLimitError,
    ValidationError,
)
from polar_client.models import Page, Pagination
from polar_client.rate_limit import RateLimiter
from polar_client.result import (
    Failure,
    PolarResult,
    Success,
    VoidResult,
    combine,
    from_optional,
    value_or_raise,
)
from polar_client.retry import RetryPolicy, execute_resilient
from polar_client.translate import translate, translate_nullable, translate_void

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("polar-client")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("polar_client").addHandler(logging.NullHandler())

__all__ = [
    "APIError",
    "ConfigurationError",
    "ErrorKind",
    "Failure",
    "NetworkError",
    "NotFoundError",
    "Page",
    "Pagination",
    "PolarClient",
    "PolarClientError",
    "PolarConfig",
    "PolarError",
    "PolarResult",
    "RateLimitError",
    "RateLimiter",
    "RetryPolicy",
    "Success",
    "ValidationError",
    "VoidResult",
    "combine",
    "execute_resilient",
    "from_optional",
    "translate",
    "translate_nullable",
    "translate_void",
    "value_or_raise",
]

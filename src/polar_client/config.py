"""Configuration: frozen PolarConfig with explicit validation."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Literal

from dotenv import load_dotenv

from polar_client._http import PRODUCTION_BASE_URL, SANDBOX_BASE_URL
from polar_client.errors import ConfigurationError
from polar_client.retry import RetryPolicy

load_dotenv()

Environment = Literal["production", "sandbox"]

ACCESS_TOKEN_ENV_VAR = "POLAR_ACCESS_TOKEN"
ENVIRONMENT_ENV_VAR = "POLAR_ENVIRONMENT"

_BASE_URLS: dict[Environment, str] = {
    "production": PRODUCTION_BASE_URL,
    "sandbox": SANDBOX_BASE_URL,
}

DEFAULT_USER_AGENT = "polar-client-python"


@dataclass(frozen=True)
class PolarConfig:
    """Immutable configuration for a PolarClient.

    The access token is auto-resolved from ``POLAR_ACCESS_TOKEN`` and the
    environment from ``POLAR_ENVIRONMENT`` when not passed explicitly.

    Example:
        config = PolarConfig(environment="sandbox")
        # Token is read from POLAR_ACCESS_TOKEN
    """

    access_token: str | None = None
    #: Auto-resolved from ``POLAR_ENVIRONMENT`` when *None*; defaults to production.
    environment: Environment | None = None
    #: Overrides the environment's base URL (e.g. a local mock server).
    base_url: str | None = None
    timeout_s: float = 30.0
    requests_per_minute: int = 300
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    user_agent: str | None = None

    def __post_init__(self) -> None:
        """Auto-resolve environment values and validate configuration."""
        if self.environment is None:
            env_value = os.environ.get(ENVIRONMENT_ENV_VAR, "production").strip().lower()
            object.__setattr__(self, "environment", env_value)
        if self.environment not in _BASE_URLS:
            raise ConfigurationError(
                f"Unknown environment: {self.environment!r}",
                hint="Supported environments: 'production', 'sandbox'",
            )

        if not 1 <= self.timeout_s <= 300:
            raise ConfigurationError(
                f"timeout_s must be within [1, 300], got {self.timeout_s}",
                hint="This bounds each HTTP request, in seconds.",
            )
        if not 1 <= self.requests_per_minute <= 10_000:
            raise ConfigurationError(
                "requests_per_minute must be within [1, 10000], "
                f"got {self.requests_per_minute}",
                hint="This is the client-side budget per rolling minute.",
            )
        if self.retry.max_attempts > 11:
            raise ConfigurationError(
                f"retry.max_attempts must be <= 11, got {self.retry.max_attempts}",
                hint="At most 10 retries after the first attempt are allowed.",
            )

        if self.access_token is None:
            object.__setattr__(
                self, "access_token", os.environ.get(ACCESS_TOKEN_ENV_VAR)
            )
        if not self.access_token or not self.access_token.strip():
            raise ConfigurationError(
                "Access token is required",
                hint=f"Set {ACCESS_TOKEN_ENV_VAR} environment variable or pass access_token=...",
            )

    @property
    def resolved_base_url(self) -> str:
        if self.base_url:
            return self.base_url.rstrip("/")
        return _BASE_URLS[self.environment or "production"]

    @property
    def headers(self) -> dict[str, str]:
        """Default headers sent with every request."""
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
            "User-Agent": self.user_agent or DEFAULT_USER_AGENT,
        }

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"PolarConfig(environment={self.environment!r}, "
            f"base_url={self.resolved_base_url!r}, "
            f"access_token={'[REDACTED]' if self.access_token else None}, "
            f"requests_per_minute={self.requests_per_minute})"
        )

    __repr__ = __str__

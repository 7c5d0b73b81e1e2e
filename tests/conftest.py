"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration, marker registration,
a controllable clock for retry/rate-limit tests, and a client factory backed
by ``httpx.MockTransport``. Environment fixtures are autouse unless noted.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from contextlib import suppress
from dataclasses import dataclass, field
import logging
import os

import httpx
import pytest

from polar_client import PolarClient, PolarConfig, RateLimiter, RetryPolicy

# =============================================================================
# Test Doubles
# =============================================================================


@dataclass
class FakeClock:
    """Monotonic clock whose ``sleep`` advances time instantly.

    Pass ``clock`` as a limiter clock and ``clock.sleep`` wherever a sleep
    function is accepted; ``sleeps`` records every requested delay.
    """

    now: float = 0.0
    sleeps: list[float] = field(default_factory=list)

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


Handler = Callable[[httpx.Request], httpx.Response]


# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_polar_env(request, monkeypatch):
    """Ensure a clean POLAR_* environment for each test.

    Opt-out: @pytest.mark.allow_env_pollution or @pytest.mark.api
    """
    if request.node.get_closest_marker("allow_env_pollution") or (
        "api" in request.node.keywords
    ):
        return

    for key in list(os.environ.keys()):
        if key.startswith("POLAR_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_client(clock: FakeClock):
    """Build a PolarClient whose HTTP traffic is served by *handler*.

    Retries use the fake clock, so backoff never really sleeps.
    """

    def _make(
        handler: Handler,
        *,
        retry: RetryPolicy | None = None,
        requests_per_minute: int = 300,
        **config_kwargs,
    ) -> PolarClient:
        config = PolarConfig(
            access_token="test-token",
            retry=retry or RetryPolicy(jitter_factor=0.0),
            requests_per_minute=requests_per_minute,
            **config_kwargs,
        )
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        limiter = RateLimiter(requests_per_minute, clock=clock, sleep=clock.sleep)
        return PolarClient(
            config, http_client=http_client, limiter=limiter, sleep=clock.sleep
        )

    return _make


# =============================================================================
# Pytest Hooks
# =============================================================================

API_TESTS_REASON = "API tests require POLAR_ACCESS_TOKEN and ENABLE_API_TESTS=1"


def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "integration: Component integration tests with mocked HTTP",
        "api: Real API integration tests (requires access token)",
        "allow_dotenv: Let python-dotenv read .env files",
        "allow_env_pollution: Keep POLAR_* environment variables",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


def _api_tests_enabled() -> bool:
    return bool(os.getenv("ENABLE_API_TESTS") and os.getenv("POLAR_ACCESS_TOKEN"))


def pytest_collection_modifyitems(items):
    """Automatically skip API tests when not explicitly enabled."""
    if _api_tests_enabled():
        return
    skip_api = pytest.mark.skip(reason=API_TESTS_REASON)
    for item in items:
        if "api" in item.keywords:
            item.add_marker(skip_api)

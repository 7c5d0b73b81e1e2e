"""Result type returned by every API call.

``PolarResult[T]`` is a tagged union of ``Success[T]`` and ``Failure``.
Expected failures (validation, not found, rate limits, ...) travel as
values; callers either branch on ``is_success``/``is_failure`` (or use
``match``) or opt into exceptions with ``ensure_success()``.

Example:
    result = await client.products.get("p1")
    match result:
        case Success(product):
            print(product.name)
        case Failure(error):
            print(error.message)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
import dataclasses
from typing import Any, NoReturn

from polar_client.errors import APIError, PolarError


@dataclasses.dataclass(frozen=True, slots=True)
class Success[T]:
    """A successful API call carrying its value."""

    value: T

    @property
    def is_success(self) -> bool:
        return True

    @property
    def is_failure(self) -> bool:
        return False

    @property
    def error(self) -> None:
        return None

    @property
    def is_rate_limit_error(self) -> bool:
        return False

    @property
    def is_not_found_error(self) -> bool:
        return False

    @property
    def is_validation_error(self) -> bool:
        return False

    @property
    def is_server_error(self) -> bool:
        return False

    @property
    def is_auth_error(self) -> bool:
        return False

    @property
    def is_client_error(self) -> bool:
        return False

    @property
    def is_network_error(self) -> bool:
        return False

    @property
    def is_conflict_error(self) -> bool:
        return False

    def ensure_success(self) -> T:
        """Return the value."""
        return self.value

    def value_or[D](self, default: D) -> T | D:
        del default
        return self.value

    def value_or_none_if_not_found(self) -> T:
        return self.value

    def map[U](self, fn: Callable[[T], U]) -> Success[U]:
        return Success(fn(self.value))

    def bind[U](self, fn: Callable[[T], PolarResult[U]]) -> PolarResult[U]:
        return fn(self.value)

    def match[R](
        self, on_success: Callable[[T], R], on_failure: Callable[[PolarError], R]
    ) -> R:
        del on_failure
        return on_success(self.value)

    def to_void(self) -> Success[None]:
        return Success(None)


@dataclasses.dataclass(frozen=True, slots=True)
class Failure:
    """A failed API call carrying a structured ``PolarError``."""

    error: PolarError

    @property
    def is_success(self) -> bool:
        return False

    @property
    def is_failure(self) -> bool:
        return True

    @property
    def is_rate_limit_error(self) -> bool:
        return self.error.is_rate_limit_error

    @property
    def is_not_found_error(self) -> bool:
        return self.error.is_not_found_error

    @property
    def is_validation_error(self) -> bool:
        return self.error.is_validation_error

    @property
    def is_server_error(self) -> bool:
        return self.error.is_server_error

    @property
    def is_auth_error(self) -> bool:
        return self.error.is_auth_error

    @property
    def is_client_error(self) -> bool:
        return self.error.is_client_error

    @property
    def is_network_error(self) -> bool:
        return self.error.is_network_error

    @property
    def is_conflict_error(self) -> bool:
        return self.error.is_conflict_error

    def ensure_success(self) -> NoReturn:
        """Raise the ``APIError`` matching this failure.

        Adapter for call sites that prefer exception-based control flow.
        """
        raise APIError.from_error(self.error)

    def value_or[D](self, default: D) -> D:
        return default

    def value_or_none_if_not_found(self) -> None:
        """Return ``None`` for a 404 failure, raise for anything else."""
        if self.error.is_not_found_error:
            return None
        raise APIError.from_error(self.error)

    def map(self, fn: Callable[[Any], Any]) -> Failure:
        del fn
        return self

    def bind(self, fn: Callable[[Any], Any]) -> Failure:
        del fn
        return self

    def match[R](
        self, on_success: Callable[[Any], R], on_failure: Callable[[PolarError], R]
    ) -> R:
        del on_success
        return on_failure(self.error)

    def to_void(self) -> Failure:
        return self


type PolarResult[T] = Success[T] | Failure
type VoidResult = Success[None] | Failure


def combine(*results: PolarResult[Any]) -> VoidResult:
    """Return the first failure among *results*, else ``Success(None)``."""
    for result in results:
        if isinstance(result, Failure):
            return result
    return Success(None)


def from_optional[T](
    value: T | None, message: str = "Resource not found"
) -> PolarResult[T]:
    """Lift an optional value: ``None`` becomes a not-found failure."""
    if value is None:
        return Failure(PolarError.not_found(message))
    return Success(value)


async def value_or_raise[T](awaitable: Awaitable[PolarResult[T]]) -> T:
    """Await a result-returning call and unwrap it, raising ``APIError`` on failure.

    Example:
        product = await value_or_raise(client.products.create(request))
    """
    result = await awaitable
    return result.ensure_success()

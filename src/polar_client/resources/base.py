"""Shared plumbing for resource clients: listing, paging, get-by-ID.

Endpoint rule for not-found handling: singleton lookups (``get``) use the
nullable translator, so a missing resource is ``Success(None)``; listings,
creates, updates and actions report 404 as a ``NOT_FOUND`` failure.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any, ClassVar

from polar_client._http import MAX_PAGE_SIZE, api_path
from polar_client.models import Page, PolarModel
from polar_client.result import Failure, PolarResult, Success, VoidResult

if TYPE_CHECKING:
    from polar_client.transport import Transport


class Resource[M: PolarModel]:
    """Base resource client; subclasses set ``path`` and ``model``."""

    path: ClassVar[str]
    model: ClassVar[type[PolarModel]]

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def list(
        self, page: int = 1, limit: int = 10, **filters: Any
    ) -> PolarResult[Page[M]]:
        """Fetch one page. ``limit`` is clamped to the API maximum of 100."""
        if page < 1:
            raise ValueError("page must be >= 1")
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        result = await self._transport.call(
            "GET",
            api_path(self.path, collection=True),
            Page[self.model],
            params={"page": page, "limit": limit, **filters},
        )
        return result.map(lambda p: _with_position(p, page, limit))

    async def iter_all(self, **filters: Any) -> AsyncIterator[PolarResult[M]]:
        """Yield every item across all pages, one result per item.

        Stops after yielding the first failure.
        """
        page = 1
        while True:
            result = await self.list(page=page, limit=MAX_PAGE_SIZE, **filters)
            if isinstance(result, Failure):
                yield result
                return
            for item in result.value.items:
                yield Success(item)
            if page >= result.value.pagination.max_page:
                return
            page += 1

    async def get(self, resource_id: str) -> PolarResult[M | None]:
        """Fetch one resource; a missing one is ``Success(None)``."""
        return await self._transport.call_nullable(
            "GET", self._item_path(resource_id), self.model
        )

    async def _create(self, body: Any, target: Any = None) -> PolarResult[Any]:
        return await self._transport.call(
            "POST",
            api_path(self.path, collection=True),
            target or self.model,
            json=body,
        )

    async def _update(
        self, resource_id: str, body: Any, target: Any = None
    ) -> PolarResult[Any]:
        return await self._transport.call(
            "PATCH", self._item_path(resource_id), target or self.model, json=body
        )

    async def _delete(self, resource_id: str) -> VoidResult:
        return await self._transport.call_void("DELETE", self._item_path(resource_id))

    def _item_path(
        self, resource_id: str, *suffix: str, collection: bool = False
    ) -> str:
        if not resource_id or not resource_id.strip():
            raise ValueError(f"{type(self).__name__}: resource id must be non-empty")
        return api_path(self.path, resource_id, *suffix, collection=collection)


def _with_position[T](page: Page[T], number: int, limit: int) -> Page[T]:
    """Record which page/limit produced *page*; the API only reports totals."""
    pagination = page.pagination.model_copy(update={"page": number, "limit": limit})
    return page.model_copy(update={"pagination": pagination})

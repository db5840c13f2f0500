"""
Paged results of list and fulltext calls.

Fakturoid returns at most 20 records per page and describes the
neighbouring pages in a ``Link`` header (``rel="first"``, ``"prev"``,
``"next"`` and ``"last"``).  The header is the only source used to
decide whether more pages exist; a response without it is a single
page.
"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    AsyncIterator,
    Dict,
    Generic,
    Iterator,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Type,
    TypeVar,
)
from urllib.parse import parse_qs, urlsplit

from .models import FakturoidModel

if TYPE_CHECKING:
    from .client import AsyncFakturoidClient, FakturoidClient

M = TypeVar("M", bound=FakturoidModel)


class _BasePagedResponse(Generic[M]):
    def __init__(
        self,
        client: Any,
        model: Type[M],
        url: str,
        params: Mapping[str, str],
        items: Sequence[M],
        links: Mapping[str, Any],
    ) -> None:
        self._client = client
        self._model = model
        self._url = url
        self._params: Dict[str, str] = dict(params)
        self._items: Tuple[M, ...] = tuple(items)
        self._links: Dict[str, Any] = dict(links)

    @property
    def data(self) -> Tuple[M, ...]:
        """Records on the current page."""
        return self._items

    @property
    def page(self) -> int:
        return int(self._params.get("page", 1))

    @property
    def params(self) -> Dict[str, str]:
        """Query parameters the page was requested with."""
        return dict(self._params)

    @property
    def has_next(self) -> bool:
        return "next" in self._links

    @property
    def has_prev(self) -> bool:
        return "prev" in self._links

    def __iter__(self) -> Iterator[M]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} {self._model.__name__} page={self.page} "
            f"items={len(self._items)} has_next={self.has_next}>"
        )

    def _params_for(self, page: int) -> Dict[str, str]:
        params = dict(self._params)
        params["page"] = str(page)
        return params

    def _last_page_number(self) -> Optional[int]:
        link = self._links.get("last")
        if not link:
            return None
        query = parse_qs(urlsplit(link.get("url", "")).query)
        try:
            return int(query["page"][0])
        except (KeyError, IndexError, ValueError):
            return None


class PagedResponse(_BasePagedResponse[M]):
    """One page of records fetched by :class:`~fakturoid_client.client.FakturoidClient`."""

    _client: "FakturoidClient"

    def _fetch(self, page: int) -> "PagedResponse[M]":
        return self._client._fetch_page(self._model, self._url, self._params_for(page))

    def next_page(self) -> Optional["PagedResponse[M]"]:
        """Fetch the following page, or return ``None`` when this is the last one."""
        if not self.has_next:
            return None
        return self._fetch(self.page + 1)

    def prev_page(self) -> Optional["PagedResponse[M]"]:
        """Fetch the preceding page, or return ``None`` on the first one."""
        if not self.has_prev:
            return None
        return self._fetch(self.page - 1)

    def first_page(self) -> "PagedResponse[M]":
        if "first" not in self._links or self.page == 1:
            return self
        return self._fetch(1)

    def last_page(self) -> "PagedResponse[M]":
        last = self._last_page_number()
        if last is None or last == self.page:
            return self
        return self._fetch(last)

    def iter_pages(self) -> Iterator["PagedResponse[M]"]:
        """Yield this page and every following page."""
        current: Optional[PagedResponse[M]] = self
        while current is not None:
            yield current
            current = current.next_page()

    def iter_items(self) -> Iterator[M]:
        for page in self.iter_pages():
            yield from page.data


class AsyncPagedResponse(_BasePagedResponse[M]):
    """One page of records fetched by :class:`~fakturoid_client.client.AsyncFakturoidClient`."""

    _client: "AsyncFakturoidClient"

    async def _fetch(self, page: int) -> "AsyncPagedResponse[M]":
        return await self._client._fetch_page(self._model, self._url, self._params_for(page))

    async def next_page(self) -> Optional["AsyncPagedResponse[M]"]:
        """Fetch the following page, or return ``None`` when this is the last one."""
        if not self.has_next:
            return None
        return await self._fetch(self.page + 1)

    async def prev_page(self) -> Optional["AsyncPagedResponse[M]"]:
        """Fetch the preceding page, or return ``None`` on the first one."""
        if not self.has_prev:
            return None
        return await self._fetch(self.page - 1)

    async def first_page(self) -> "AsyncPagedResponse[M]":
        if "first" not in self._links or self.page == 1:
            return self
        return await self._fetch(1)

    async def last_page(self) -> "AsyncPagedResponse[M]":
        last = self._last_page_number()
        if last is None or last == self.page:
            return self
        return await self._fetch(last)

    async def iter_pages(self) -> AsyncIterator["AsyncPagedResponse[M]"]:
        """Yield this page and every following page."""
        current: Optional[AsyncPagedResponse[M]] = self
        while current is not None:
            yield current
            current = await current.next_page()

    async def iter_items(self) -> AsyncIterator[M]:
        async for page in self.iter_pages():
            for item in page.data:
                yield item

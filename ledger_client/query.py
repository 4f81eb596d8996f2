# ledger_client/query.py
"""
Cursor-paginated queries against list-* and sum-* endpoints.

A query is an immutable value: collection name, method and a private copy of
its (snake-cased) params. Params are validated when the query is built, so a
bad filter fails before any network call. A page request with a cursor sends
only the cursor; filters are never re-sent on continuation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, AsyncIterator, Callable, Dict, Iterator, Mapping, Optional, Tuple

from .casing import snakeize
from .page import Page, PageParams
from .validation import Validator, validate

log = logging.getLogger("ledger_client.query")

Requester = Callable[[str, Mapping[str, Any]], Any]

_SCHEMAS: Dict[tuple, str] = {
    ("keys", "list"): "KeyQueryParamsSchema",
    ("balances", "list"): "BalanceQueryParamsSchema",
    ("indexes", "list"): "IndexQueryParamsSchema",
}


def schema_for(item_name: str, method: str) -> str:
    if method == "sum":
        return "SumParamsSchema"
    return _SCHEMAS.get((item_name, method), "QueryParamsSchema")


@dataclass(frozen=True)
class _QueryBase:
    requester: Requester = field(repr=False, compare=False)
    item_name: str
    method: str = "list"
    params: Mapping[str, Any] = field(default_factory=dict)
    validator: Validator = field(default=validate, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.method not in ("list", "sum"):
            raise ValueError(f"unsupported query method: {self.method!r}")
        params = snakeize(dict(self.params or {}))
        self.validator(params, schema_for(self.item_name, self.method))
        object.__setattr__(self, "params", MappingProxyType(params))

    @property
    def path(self) -> str:
        return f"/{self.method}-{self.item_name}"

    @staticmethod
    def _resolve(
        page_params: Optional[PageParams], cursor: Optional[str], size: Optional[int]
    ) -> Tuple[Optional[str], Optional[int]]:
        if page_params is not None:
            cursor = cursor or page_params.cursor
            size = size if size is not None else page_params.size
        return cursor, size

    def page_body(self, *, cursor: Optional[str] = None, size: Optional[int] = None) -> Dict[str, Any]:
        cursor = cursor or self.params.get("cursor")

        if cursor:
            body: Dict[str, Any] = {"cursor": cursor}
        else:
            body = dict(self.params)
        if size is not None:
            body["page_size"] = size
        return body

    @staticmethod
    def _should_continue(page: Page) -> bool:
        if page.last_page:
            return False
        if not page.cursor:
            log.warning("server reported more pages without a cursor; stopping iteration")
            return False
        return True


@dataclass(frozen=True)
class Query(_QueryBase):
    def page(
        self,
        page_params: Optional[PageParams] = None,
        *,
        cursor: Optional[str] = None,
        size: Optional[int] = None,
    ) -> Page:
        cursor, size = self._resolve(page_params, cursor, size)
        data = self.requester(self.path, self.page_body(cursor=cursor, size=size))
        return Page.from_response(data, self, size=size)

    def all(self, size: Optional[int] = None) -> Iterator[Any]:
        """Lazily yields every item across pages in server order."""
        page = self.page(size=size)
        while True:
            yield from page.items
            if not self._should_continue(page):
                return
            page = page.next_page()


@dataclass(frozen=True)
class AsyncQuery(_QueryBase):
    async def page(
        self,
        page_params: Optional[PageParams] = None,
        *,
        cursor: Optional[str] = None,
        size: Optional[int] = None,
    ) -> Page:
        cursor, size = self._resolve(page_params, cursor, size)
        data = await self.requester(self.path, self.page_body(cursor=cursor, size=size))
        return Page.from_response(data, self, size=size)

    async def all(self, size: Optional[int] = None) -> AsyncIterator[Any]:
        page = await self.page(size=size)
        while True:
            for item in page.items:
                yield item
            if not self._should_continue(page):
                return
            page = await page.next_page()


__all__ = ["Query", "AsyncQuery", "Requester", "schema_for"]

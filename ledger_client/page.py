# ledger_client/page.py
"""
Страница результатов запроса.

Page - неизменяемая запись; next_page() не меняет страницу, а строит
следующую по курсору через владеющий запрос (Query или AsyncQuery).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping, Optional, Tuple, Union

if TYPE_CHECKING:  # pragma: no cover
    from .query import AsyncQuery, Query


@dataclass(frozen=True)
class PageParams:
    cursor: Optional[str] = None
    size: Optional[int] = None


@dataclass(frozen=True)
class Page:
    items: Tuple[Any, ...] = ()
    cursor: Optional[str] = None
    last_page: bool = True
    query: Optional[Union["Query", "AsyncQuery"]] = field(default=None, repr=False, compare=False)
    size: Optional[int] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_response(
        cls,
        data: Mapping[str, Any],
        query: Optional[Union["Query", "AsyncQuery"]] = None,
        *,
        size: Optional[int] = None,
    ) -> "Page":
        """
        Страница из тела ответа list/sum. Без lastPage страница считается
        не последней: продолжение решает наличие курсора.
        """
        return cls(
            items=tuple(data.get("items") or ()),
            cursor=data.get("cursor") or None,
            last_page=bool(data.get("lastPage", False)),
            query=query,
            size=size,
        )

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def next_page(self):
        """
        Следующая страница: Page для синхронного запроса,
        awaitable[Page] для асинхронного.
        """
        if self.query is None:
            raise ValueError("page is not bound to a query")
        if not self.cursor:
            raise ValueError("page has no cursor")
        return self.query.page(cursor=self.cursor, size=self.size)


__all__ = ["Page", "PageParams"]

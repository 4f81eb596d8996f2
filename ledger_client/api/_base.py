# ledger_client/api/_base.py
"""
Base for resource facades.

Facades are shared by the sync and async clients: request() returns a dict
for LedgerClient and an awaitable for AsyncLedgerClient, query() returns a
Query or an AsyncQuery. Validation always runs at call time, before any I/O.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Union

from ..casing import snakeize

if TYPE_CHECKING:  # pragma: no cover
    from ..client import AsyncLedgerClient, LedgerClient

Params = Optional[Mapping[str, Any]]


def merge_params(params: Params, fields: Mapping[str, Any]) -> Dict[str, Any]:
    return {**dict(params or {}), **fields}


class Resource:
    item_name: str = ""

    def __init__(self, client: Union["LedgerClient", "AsyncLedgerClient"]) -> None:
        self._client = client

    def _request(self, path: str, body: Params = None, schema: Optional[str] = None) -> Any:
        body = dict(body or {})
        if schema is not None:
            self._client.validator(snakeize(body), schema)
        return self._client.request(path, body)

    def _query(self, params: Params = None, method: str = "list") -> Any:
        return self._client.query(self.item_name, method, params)


__all__ = ["Resource", "Params", "merge_params"]

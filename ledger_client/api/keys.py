# ledger_client/api/keys.py
from __future__ import annotations

from typing import Any, Optional, Sequence

from ._base import Params, Resource, merge_params


class Keys(Resource):
    """Ключи подписи (/create-key, /list-keys)."""

    item_name = "keys"

    def create(self, params: Params = None, **fields: Any) -> Any:
        return self._request("/create-key", merge_params(params, fields), "CreateKeySchema")

    def list(self, params: Params = None, *, ids: Optional[Sequence[str]] = None, **fields: Any) -> Any:
        query = merge_params(params, fields)
        if ids is not None:
            query["ids"] = list(ids)
        # запрос по списку id возвращает их одной страницей
        if query.get("ids"):
            query["page_size"] = len(query["ids"])
            query.pop("pageSize", None)
        return self._query(query)

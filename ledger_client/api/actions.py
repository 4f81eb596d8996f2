# ledger_client/api/actions.py
from __future__ import annotations

from typing import Any

from ._base import Params, Resource, merge_params


class Actions(Resource):
    item_name = "actions"

    def list(self, params: Params = None, **fields: Any) -> Any:
        return self._query(merge_params(params, fields))

    def sum(self, params: Params = None, **fields: Any) -> Any:
        """Сумма по действиям; group_by - поля группировки."""
        return self._query(merge_params(params, fields), method="sum")

    def update_tags(self, params: Params = None, **fields: Any) -> Any:
        return self._request("/update-action-tags", merge_params(params, fields), "UpdateTagsSchema")

# ledger_client/api/indexes.py
from __future__ import annotations

from typing import Any

from ._base import Params, Resource, merge_params


class Indexes(Resource):
    item_name = "indexes"

    def create(self, params: Params = None, **fields: Any) -> Any:
        """type: "token" | "action", method: "sum", filter, group_by."""
        return self._request("/create-index", merge_params(params, fields), "CreateIndexSchema")

    def delete(self, params: Params = None, **fields: Any) -> Any:
        return self._request("/delete-index", merge_params(params, fields), "DeleteIndexSchema")

    def list(self, params: Params = None, **fields: Any) -> Any:
        return self._query(merge_params(params, fields))

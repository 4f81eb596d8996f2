# ledger_client/api/flavors.py
from __future__ import annotations

from typing import Any

from ._base import Params, Resource, merge_params


class Flavors(Resource):
    """Типы токенов (/create-flavor, /update-flavor-tags, /list-flavors)."""

    item_name = "flavors"

    def create(self, params: Params = None, **fields: Any) -> Any:
        return self._request("/create-flavor", merge_params(params, fields), "CreateFlavorSchema")

    def update_tags(self, params: Params = None, **fields: Any) -> Any:
        return self._request("/update-flavor-tags", merge_params(params, fields), "UpdateTagsSchema")

    def list(self, params: Params = None, **fields: Any) -> Any:
        return self._query(merge_params(params, fields))

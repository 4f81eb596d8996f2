# ledger_client/api/assets.py
from __future__ import annotations

import warnings
from typing import Any

from ._base import Params, Resource, merge_params


class Assets(Resource):
    """
    Активы старого API. Оставлены для совместимости, используйте flavors.
    """

    item_name = "assets"

    def _deprecated(self) -> None:
        warnings.warn("assets API is deprecated, use flavors", DeprecationWarning, stacklevel=3)

    def create(self, params: Params = None, **fields: Any) -> Any:
        self._deprecated()
        return self._request("/create-asset", merge_params(params, fields), "CreateAssetSchema")

    def update_tags(self, params: Params = None, **fields: Any) -> Any:
        self._deprecated()
        return self._request("/update-asset-tags", merge_params(params, fields), "UpdateAssetTagsSchema")

    def list(self, params: Params = None, **fields: Any) -> Any:
        self._deprecated()
        return self._query(merge_params(params, fields))

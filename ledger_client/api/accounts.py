# ledger_client/api/accounts.py
from __future__ import annotations

from typing import Any

from ._base import Params, Resource, merge_params


class Accounts(Resource):
    """
    Счета (/create-account, /update-account-tags, /list-accounts).

    create(id="alice", key_ids=[key_id], quorum=1, tags={...})
    """

    item_name = "accounts"

    def create(self, params: Params = None, **fields: Any) -> Any:
        return self._request("/create-account", merge_params(params, fields), "CreateAccountSchema")

    def update_tags(self, params: Params = None, **fields: Any) -> Any:
        return self._request("/update-account-tags", merge_params(params, fields), "UpdateTagsSchema")

    def list(self, params: Params = None, **fields: Any) -> Any:
        return self._query(merge_params(params, fields))

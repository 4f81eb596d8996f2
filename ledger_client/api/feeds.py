# ledger_client/api/feeds.py
from __future__ import annotations

from typing import Any

from ._base import Params, Resource, merge_params


class Feeds(Resource):
    """Фиды действий/транзакций. Потребление фида (consume/ack) не поддерживается."""

    item_name = "feeds"

    def create(self, params: Params = None, **fields: Any) -> Any:
        return self._request("/create-feed", merge_params(params, fields), "CreateFeedSchema")

    def get(self, params: Params = None, **fields: Any) -> Any:
        return self._request("/get-feed", merge_params(params, fields), "FeedIdSchema")

    def delete(self, params: Params = None, **fields: Any) -> Any:
        return self._request("/delete-feed", merge_params(params, fields), "FeedIdSchema")

    def list(self, params: Params = None, **fields: Any) -> Any:
        return self._query(merge_params(params, fields))

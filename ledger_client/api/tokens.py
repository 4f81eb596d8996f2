# ledger_client/api/tokens.py
from __future__ import annotations

from typing import Any

from ._base import Params, Resource, merge_params


class Tokens(Resource):
    """
    Токены. sum() может вернуть пустые промежуточные страницы,
    поэтому итерируйте через all(), а не по первой странице.
    """

    item_name = "tokens"

    def list(self, params: Params = None, **fields: Any) -> Any:
        return self._query(merge_params(params, fields))

    def sum(self, params: Params = None, **fields: Any) -> Any:
        return self._query(merge_params(params, fields), method="sum")

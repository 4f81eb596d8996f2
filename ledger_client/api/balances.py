# ledger_client/api/balances.py
from __future__ import annotations

from typing import Any

from ._base import Params, Resource, merge_params


class Balances(Resource):
    item_name = "balances"

    def list(self, params: Params = None, **fields: Any) -> Any:
        return self._query(merge_params(params, fields))

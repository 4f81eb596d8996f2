# ledger_client/api/stats.py
from __future__ import annotations

from typing import Any

from ._base import Resource


class Stats(Resource):
    def get(self) -> Any:
        """Счётчики леджера: flavorCount, accountCount, txCount."""
        return self._request("/stats")

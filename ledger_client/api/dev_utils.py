# ledger_client/api/dev_utils.py
from __future__ import annotations

from typing import Any

from ._base import Resource


class DevUtils(Resource):
    def reset(self) -> Any:
        """Удаляет все данные леджера. Только для тестовых леджеров."""
        return self._request("/reset", {})

# ledger_client/builder.py
"""
Построитель транзакций.

Действия (issue/transfer/retire) проверяются по схеме и нормализуются
(amount -> int) в момент добавления, до любого сетевого вызова.
Добавленное действие больше не меняется.

Пример:
    client.transactions.transact(lambda b: (
        b.issue(flavor_id="usd", amount=100, destination_account_id="alice"),
        b.transfer(flavor_id="usd", amount=50, source_account_id="alice",
                   destination_account_id="bob"),
    ))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .casing import snakeize
from .validation import Validator, normalize_amount, validate

ACTION_SCHEMAS: Dict[str, str] = {
    "issue": "IssueActionSchema",
    "transfer": "TransferActionSchema",
    "retire": "RetireActionSchema",
}


@dataclass(frozen=True)
class Action:
    type: str
    amount: int
    params: Mapping[str, Any] = field(default_factory=dict)

    def to_body(self) -> Dict[str, Any]:
        return {"type": self.type, "amount": self.amount, **self.params}


class TransactionBuilder:
    def __init__(self, *, validator: Validator = validate) -> None:
        self._validator = validator
        self._actions: List[Action] = []
        self.transaction_tags: Optional[Mapping[str, Any]] = None

    @property
    def actions(self) -> Tuple[Action, ...]:
        return tuple(self._actions)

    def issue(self, params: Optional[Mapping[str, Any]] = None, **fields: Any) -> "TransactionBuilder":
        """Выпуск токенов на счёт назначения."""
        return self._add("issue", params, fields)

    def transfer(self, params: Optional[Mapping[str, Any]] = None, **fields: Any) -> "TransactionBuilder":
        """Перевод между счетами."""
        return self._add("transfer", params, fields)

    def retire(self, params: Optional[Mapping[str, Any]] = None, **fields: Any) -> "TransactionBuilder":
        """Погашение токенов со счёта источника."""
        return self._add("retire", params, fields)

    def _add(self, action_type: str, params: Optional[Mapping[str, Any]], fields: Mapping[str, Any]) -> "TransactionBuilder":
        merged = snakeize({**dict(params or {}), **fields})
        self._validator(merged, ACTION_SCHEMAS[action_type])
        amount = normalize_amount(merged.pop("amount", None))
        self._actions.append(Action(action_type, amount, MappingProxyType(merged)))
        return self

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"actions": [a.to_body() for a in self._actions]}
        if self.transaction_tags is not None:
            body["transaction_tags"] = dict(self.transaction_tags)
        return body


__all__ = ["Action", "TransactionBuilder", "ACTION_SCHEMAS"]

# ledger_client/api/transactions.py
"""
Транзакции.

transact(fn) - построить, подписать и отправить за один вызов.
build(fn) / sign(template) / submit(template) - та же операция в три шага.

fn(builder) выполняется синхронно в момент вызова; если он бросает
исключение, запрос не отправляется.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Union

from ..builder import TransactionBuilder
from ._base import Params, Resource, merge_params

BuilderFn = Callable[[TransactionBuilder], Any]


class Transactions(Resource):
    item_name = "transactions"

    def list(self, params: Params = None, **fields: Any) -> Any:
        return self._query(merge_params(params, fields))

    def _build(self, block: Union[BuilderFn, TransactionBuilder]) -> TransactionBuilder:
        if isinstance(block, TransactionBuilder):
            return block
        builder = TransactionBuilder(validator=self._client.validator)
        block(builder)
        return builder

    def transact(self, block: Union[BuilderFn, TransactionBuilder]) -> Any:
        return self._request("/transact", self._build(block).to_body())

    def build(self, block: Union[BuilderFn, TransactionBuilder]) -> Any:
        return self._request("/build-transaction", self._build(block).to_body())

    def sign(self, template: Mapping[str, Any]) -> Any:
        return self._request("/sign-transaction", {"transaction": dict(template)})

    def submit(self, template: Mapping[str, Any]) -> Any:
        return self._request("/submit-transaction", {"transaction": dict(template)})

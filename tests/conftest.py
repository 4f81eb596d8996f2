# tests/conftest.py
# -*- coding: utf-8 -*-
"""
Общие фикстуры:
- FakeClock / RecordingSleep - детерминированное время для повторов;
- FakeLedger - in-memory бэкенд поверх httpx.MockTransport
  (/hello, ключи, счета, flavors, transact, list/sum с курсорами);
- фабрики LedgerClient / AsyncLedgerClient.
"""

from __future__ import annotations

import itertools
import json
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from ledger_client import AsyncLedgerClient, ClientSettings, LedgerClient

API_HOST = "api.test"
LEDGER_ADDR = "ledger.test"
TEAM = "team"


# =========================
# ВРЕМЯ
# =========================

class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Вместо реального sleep двигает FakeClock и запоминает задержки."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        self.clock.advance(seconds)


class AsyncRecordingSleep(RecordingSleep):
    async def __call__(self, seconds: float) -> None:  # type: ignore[override]
        super().__call__(seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep(clock: FakeClock) -> RecordingSleep:
    return RecordingSleep(clock)


@pytest.fixture
def async_sleep(clock: FakeClock) -> AsyncRecordingSleep:
    return AsyncRecordingSleep(clock)


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings(api_host=API_HOST, never_retry_codes=[])


# =========================
# ОТВЕТЫ
# =========================

_request_ids = itertools.count(1)


def reply(status: int = 200, body: Any = None, *, request_id: Optional[str] = "auto") -> httpx.Response:
    headers = {}
    if request_id == "auto":
        request_id = f"req-{next(_request_ids)}"
    if request_id:
        headers["Chain-Request-Id"] = request_id
    if status == 204:
        return httpx.Response(204, headers=headers)
    return httpx.Response(status, json=body if body is not None else {}, headers=headers)


def error_reply(status: int, message: str, *, seq_code: str = "SEQ000", retriable: bool = False, **extra: Any) -> httpx.Response:
    return reply(status, {"message": message, "seq_code": seq_code, "retriable": retriable, **extra})


# =========================
# FAKE LEDGER
# =========================

class FakeLedger:
    """
    Минимальная модель ledger API. Фильтры: "field=$N" через AND.
    """

    def __init__(self, *, ttl_seconds: int = 300) -> None:
        self.ttl_seconds = ttl_seconds
        self.requests: List[httpx.Request] = []
        self.hello_count = 0
        self.keys: List[Dict[str, Any]] = []
        self.accounts: List[Dict[str, Any]] = []
        self.flavors: List[Dict[str, Any]] = []
        self.transactions: List[Dict[str, Any]] = []
        self.balances: Dict[Tuple[str, str], int] = defaultdict(int)
        self._cursors: Dict[str, Tuple[List[Dict[str, Any]], int, int]] = {}
        self._ids = itertools.count(1)

    # ---- транспорт ----

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = json.loads(request.content or b"{}")
        path = request.url.path
        if request.url.host == API_HOST and path == "/hello":
            self.hello_count += 1
            return reply(200, {"team_name": TEAM, "addr": LEDGER_ADDR, "addr_ttl_seconds": self.ttl_seconds})
        prefix = f"/{TEAM}/"
        if request.url.host != LEDGER_ADDR or not path.startswith(prefix):
            return error_reply(404, "unknown route", seq_code="SEQ404")
        op = path.split("/")[-1]
        handler = getattr(self, "op_" + op.replace("-", "_"), None)
        if handler is None:
            return error_reply(404, f"unknown operation {op}", seq_code="SEQ404")
        return handler(body)

    @property
    def ledger_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path != "/hello"]

    def _new_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids)}"

    # ---- пагинация ----

    def _page(self, items: List[Dict[str, Any]], body: Dict[str, Any]) -> httpx.Response:
        if "cursor" in body:
            items, offset, size = self._cursors[body["cursor"]]
            size = body.get("page_size", size)
        else:
            offset, size = 0, body.get("page_size", 100)
        chunk = items[offset:offset + size]
        nxt = offset + size
        cursor = f"cur-{next(self._ids)}"
        self._cursors[cursor] = (items, nxt, size)
        return reply(200, {"items": chunk, "cursor": cursor, "last_page": nxt >= len(items)})

    @staticmethod
    def _matches(item: Dict[str, Any], flt: Optional[str], params: List[Any]) -> bool:
        if not flt:
            return True
        for clause in flt.split(" AND "):
            field, _, ref = clause.partition("=")
            value = params[int(ref.strip().lstrip("$")) - 1]
            if item.get(field.strip()) != value:
                return False
        return True

    def _filtered(self, items: List[Dict[str, Any]], body: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [i for i in items if self._matches(i, body.get("filter"), body.get("filter_params", []))]

    # ---- операции ----

    def op_create_key(self, body):
        key = {"id": body.get("id") or self._new_id("key")}
        self.keys.append(key)
        return reply(200, key)

    def op_list_keys(self, body):
        items = self.keys
        if body.get("ids"):
            items = [k for k in items if k["id"] in body["ids"]]
        return self._page(items, body)

    def op_create_account(self, body):
        account = {
            "id": body.get("id") or self._new_id("acc"),
            "key_ids": body["key_ids"],
            "quorum": body.get("quorum", 1),
            "tags": body.get("tags") or {},
        }
        self.accounts.append(account)
        return reply(200, account)

    def op_list_accounts(self, body):
        return self._page(self._filtered(self.accounts, body), body)

    def op_create_flavor(self, body):
        flavor = {
            "id": body.get("id") or self._new_id("flv"),
            "key_ids": body["key_ids"],
            "quorum": body.get("quorum", 1),
            "tags": body.get("tags") or {},
        }
        self.flavors.append(flavor)
        return reply(200, flavor)

    def op_transact(self, body):
        staged = defaultdict(int, self.balances)
        errors = []
        for index, action in enumerate(body["actions"]):
            flavor, amount = action["flavor_id"], action["amount"]
            if action["type"] in ("transfer", "retire"):
                src = (action["source_account_id"], flavor)
                if staged[src] < amount:
                    errors.append({"index": index, "seq_code": "SEQ735", "message": "insufficient balance"})
                    continue
                staged[src] -= amount
            if action["type"] in ("issue", "transfer"):
                staged[(action["destination_account_id"], flavor)] += amount
        if errors:
            return error_reply(400, "one or more actions failed", seq_code="SEQ702", data={"actions": errors})
        self.balances = staged
        tx = {
            "id": self._new_id("tx"),
            "actions": [dict(a, id=self._new_id("act")) for a in body["actions"]],
            "tags": body.get("transaction_tags") or {},
        }
        self.transactions.append(tx)
        return reply(200, tx)

    def op_list_transactions(self, body):
        return self._page(self._filtered(self.transactions, body), body)

    def op_list_balances(self, body):
        rows = [
            {"account_id": acc, "flavor_id": flv, "amount": amount}
            for (acc, flv), amount in sorted(self.balances.items())
            if amount
        ]
        rows = self._filtered(rows, body)
        sum_by = body.get("sum_by")
        if sum_by:
            grouped: Dict[Tuple, int] = defaultdict(int)
            for row in rows:
                grouped[tuple(row[f] for f in sum_by)] += row["amount"]
            rows = [dict(zip(sum_by, key), amount=total) for key, total in grouped.items()]
        return self._page(rows, body)

    def op_stats(self, body):
        return reply(200, {"flavor_count": len(self.flavors), "account_count": len(self.accounts), "tx_count": len(self.transactions)})

    def op_reset(self, body):
        for collection in (self.keys, self.accounts, self.flavors, self.transactions):
            collection.clear()
        self.balances.clear()
        self._cursors.clear()
        return reply(204)


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


# =========================
# КЛИЕНТЫ
# =========================

@pytest.fixture
def make_client(settings, clock, sleep):
    created: List[LedgerClient] = []

    def factory(handler: Optional[Callable[[httpx.Request], httpx.Response]] = None, **kwargs: Any) -> LedgerClient:
        kwargs.setdefault("ledger_name", "test")
        kwargs.setdefault("credential", "secret-credential")
        kwargs.setdefault("settings", settings)
        c = LedgerClient(
            transport=httpx.MockTransport(handler or FakeLedger()),
            clock=clock,
            sleep=sleep,
            **kwargs,
        )
        created.append(c)
        return c

    yield factory
    for c in created:
        c.close()


@pytest.fixture
def make_async_client(settings, clock, async_sleep):
    def factory(handler: Optional[Callable[[httpx.Request], httpx.Response]] = None, **kwargs: Any) -> AsyncLedgerClient:
        kwargs.setdefault("ledger_name", "test")
        kwargs.setdefault("credential", "secret-credential")
        kwargs.setdefault("settings", settings)
        return AsyncLedgerClient(
            transport=httpx.MockTransport(handler or FakeLedger()),
            clock=clock,
            sleep=async_sleep,
            **kwargs,
        )

    return factory

# ledger_client/client.py
"""
Клиенты ledger API: синхронный (LedgerClient) и асинхронный (AsyncLedgerClient).

Пример:
    from ledger_client import LedgerClient

    with LedgerClient(ledger_name="demo", credential="...") as client:
        key = client.keys.create()
        client.accounts.create(id="alice", key_ids=[key["id"]], quorum=1)
        for balance in client.balances.list(filter="account_id=$1", filter_params=["alice"]).all():
            ...

Параметры подключения берутся из ClientSettings (env LEDGER_*, SEQADDR),
если settings не передан явно.
"""

from __future__ import annotations

import asyncio
import time
import warnings
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

import httpx

from .api import (
    Accounts,
    Actions,
    Assets,
    Balances,
    DevUtils,
    Feeds,
    Flavors,
    Indexes,
    Keys,
    Stats,
    Tokens,
    Transactions,
)
from .connection import AsyncConnection, Connection
from .query import AsyncQuery, Query
from .settings import ClientSettings, get_settings
from .transport import AsyncTransport, Transport
from .validation import Validator, validate


def _ledger_name(ledger_name: Optional[str], ledger: Optional[str]) -> str:
    if ledger_name and ledger:
        raise ValueError("provide either ledger_name or ledger, not both")
    if not ledger_name and not ledger:
        raise ValueError("ledger_name is required")
    if ledger:
        warnings.warn("'ledger' is deprecated, use 'ledger_name'", DeprecationWarning, stacklevel=3)
    return ledger_name or ledger  # type: ignore[return-value]


class _ClientBase:
    def __init__(
        self,
        ledger_name: Optional[str],
        *,
        ledger: Optional[str],
        settings: Optional[ClientSettings],
        validator: Validator,
    ) -> None:
        self.ledger_name = _ledger_name(ledger_name, ledger)
        self.settings = settings or get_settings()
        self.validator = validator

        self.keys = Keys(self)
        self.accounts = Accounts(self)
        self.flavors = Flavors(self)
        self.assets = Assets(self)
        self.actions = Actions(self)
        self.tokens = Tokens(self)
        self.balances = Balances(self)
        self.transactions = Transactions(self)
        self.feeds = Feeds(self)
        self.indexes = Indexes(self)
        self.stats = Stats(self)
        self.dev_utils = DevUtils(self)


# ----------------------------- Синхронный клиент -----------------------------


class LedgerClient(_ClientBase):
    """
    Синхронный клиент. Потокобезопасен в части разрешения сессии.
    """

    def __init__(
        self,
        ledger_name: Optional[str] = None,
        credential: Optional[str] = None,
        *,
        ledger: Optional[str] = None,
        settings: Optional[ClientSettings] = None,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
        validator: Validator = validate,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(ledger_name, ledger=ledger, settings=settings, validator=validator)
        self._transport = Transport(self.settings, http_transport=transport, clock=clock, sleep=sleep)
        self.connection = Connection(
            self.ledger_name, credential, self.settings, self._transport, headers=headers, clock=clock
        )

    def __enter__(self) -> "LedgerClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.connection.close()

    def request(self, path: str, body: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return self.connection.request(path, body)

    def query(self, item_name: str, method: str = "list", params: Optional[Mapping[str, Any]] = None) -> Query:
        return Query(self.request, item_name, method, params or {}, validator=self.validator)


# ----------------------------- Асинхронный клиент -----------------------------


class AsyncLedgerClient(_ClientBase):
    """
    Асинхронный клиент. Методы ресурсов возвращают корутины,
    list()/sum() - AsyncQuery с async-итератором all().
    """

    def __init__(
        self,
        ledger_name: Optional[str] = None,
        credential: Optional[str] = None,
        *,
        ledger: Optional[str] = None,
        settings: Optional[ClientSettings] = None,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        validator: Validator = validate,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        super().__init__(ledger_name, ledger=ledger, settings=settings, validator=validator)
        self._transport = AsyncTransport(self.settings, http_transport=transport, clock=clock, sleep=sleep)
        self.connection = AsyncConnection(
            self.ledger_name, credential, self.settings, self._transport, headers=headers, clock=clock
        )

    async def __aenter__(self) -> "AsyncLedgerClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.connection.aclose()

    def request(self, path: str, body: Optional[Mapping[str, Any]] = None) -> Awaitable[Dict[str, Any]]:
        return self.connection.request(path, body)

    def query(self, item_name: str, method: str = "list", params: Optional[Mapping[str, Any]] = None) -> AsyncQuery:
        return AsyncQuery(self.request, item_name, method, params or {}, validator=self.validator)


__all__ = ["LedgerClient", "AsyncLedgerClient"]

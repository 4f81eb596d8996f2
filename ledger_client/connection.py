# ledger_client/connection.py
"""
Соединение с конкретным леджером: сессия + транспорт + заголовки.

request(path, body) разрешает сессию (handshake /hello при необходимости)
и отправляет POST на {ledger_url}{path} с Credential и пользовательскими
заголовками.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Mapping, Optional

from .session import AsyncSessionResolver, LedgerSession, SessionResolver
from .settings import ClientSettings
from .telemetry.logging import bind_context, cv_request_id
from .transport import AsyncTransport, Transport

CREDENTIAL_HEADER = "Credential"


def _current_request_id() -> Optional[str]:
    # transport binds Chain-Request-Id of the last response in this context
    rid = cv_request_id.get()
    return None if rid == "-" else rid


class _ConnectionBase:
    def __init__(
        self,
        ledger_name: str,
        credential: Optional[str],
        settings: ClientSettings,
        *,
        headers: Optional[Mapping[str, str]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ledger_name = ledger_name
        self._credential = credential
        self._settings = settings
        self._custom_headers: Dict[str, str] = dict(headers or {})
        self._clock = clock

    @property
    def hello_url(self) -> str:
        return f"{self._settings.base_url}/hello"

    def _headers(self, extra: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        h: Dict[str, str] = {}
        if self._credential:
            h[CREDENTIAL_HEADER] = self._credential
        h.update(self._custom_headers)
        if extra:
            h.update(extra)
        return h

    def _hello_body(self) -> Dict[str, Any]:
        return {"ledger_name": self.ledger_name}

    def _session_from(self, data: Mapping[str, Any]) -> LedgerSession:
        return LedgerSession.from_hello(
            data,
            ledger_name=self.ledger_name,
            now=self._clock(),
            scheme=self._settings.scheme,
            request_id=_current_request_id(),
        )


class Connection(_ConnectionBase):
    def __init__(
        self,
        ledger_name: str,
        credential: Optional[str],
        settings: ClientSettings,
        transport: Transport,
        *,
        headers: Optional[Mapping[str, str]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(ledger_name, credential, settings, headers=headers, clock=clock)
        self._transport = transport
        self._resolver = SessionResolver(
            self._handshake,
            clock=clock,
            refresh_window=settings.session_refresh_window_seconds,
        )

    @property
    def resolver(self) -> SessionResolver:
        return self._resolver

    def _handshake(self) -> LedgerSession:
        data = self._transport.send(self.hello_url, self._hello_body(), self._headers())
        return self._session_from(data)

    def request(
        self,
        path: str,
        body: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        *,
        idempotency_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        bind_context(ledger_name=self.ledger_name)
        session = self._resolver.resolve()
        return self._transport.send(
            session.ledger_url + path, body, self._headers(headers), idempotency_key=idempotency_key
        )

    def close(self) -> None:
        self._transport.close()


class AsyncConnection(_ConnectionBase):
    def __init__(
        self,
        ledger_name: str,
        credential: Optional[str],
        settings: ClientSettings,
        transport: AsyncTransport,
        *,
        headers: Optional[Mapping[str, str]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(ledger_name, credential, settings, headers=headers, clock=clock)
        self._transport = transport
        self._resolver = AsyncSessionResolver(
            self._handshake,
            clock=clock,
            refresh_window=settings.session_refresh_window_seconds,
        )

    @property
    def resolver(self) -> AsyncSessionResolver:
        return self._resolver

    async def _handshake(self) -> LedgerSession:
        data = await self._transport.send(self.hello_url, self._hello_body(), self._headers())
        return self._session_from(data)

    async def request(
        self,
        path: str,
        body: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        *,
        idempotency_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        bind_context(ledger_name=self.ledger_name)
        session = await self._resolver.resolve()
        return await self._transport.send(
            session.ledger_url + path, body, self._headers(headers), idempotency_key=idempotency_key
        )

    async def aclose(self) -> None:
        await self._transport.aclose()


__all__ = ["Connection", "AsyncConnection", "CREDENTIAL_HEADER"]

# ledger_client/transport.py
"""
HTTP-транспорт с повторами (sync и async, httpx).

Один вызов send() - один логический запрос:
- тело переводится в snake_case и сериализуется в JSON;
- Idempotency-Key генерируется один раз и не меняется между повторами;
- Id-Attempt = "<request_id>/<attempt>" меняется на каждой попытке;
- сетевые ошибки и ответы без Chain-Request-Id повторяются в коротком бюджете;
- ошибки бэкенда с retriable=true (и "Request limit exceeded") - в длинном;
- остальное поднимается сразу классифицированным исключением.

Часы и sleep инъектируются (тесты используют фейковое время).
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple

import httpx
from opentelemetry import trace

from .casing import camelize, snakeize
from .errors import (
    REQUEST_ID_HEADER,
    ApiError,
    ConnectivityError,
    JsonError,
    LedgerError,
    NoRequestIdError,
    classify,
)
from .settings import ClientSettings
from .telemetry.logging import bind_context
from .utils import idgen
from .utils.retry import Budget, RetryPolicy, RetryState

log = logging.getLogger("ledger_client.transport")
_tracer = trace.get_tracer("ledger_client")

RATE_LIMIT_MESSAGE = "Request limit exceeded"

Clock = Callable[[], float]


def _json_default(o: Any) -> Any:
    if isinstance(o, Decimal):
        # целые Decimal уходят как точное целое JSON-число
        if o.is_finite() and o == o.to_integral_value():
            return int(o)
        return str(o)
    if isinstance(o, (set, frozenset)):
        return list(o)
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


class _TransportBase:
    def __init__(
        self,
        settings: ClientSettings,
        *,
        clock: Clock = time.monotonic,
    ) -> None:
        self._settings = settings
        self._policy: RetryPolicy = settings.retry_policy()
        self._clock = clock
        self._never_retry = frozenset(settings.never_retry_codes)

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    # ----------------- запрос -----------------

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            self._settings.request_timeout_seconds,
            connect=self._settings.connect_timeout_seconds,
        )

    @staticmethod
    def _encode(body: Optional[Mapping[str, Any]]) -> bytes:
        payload = snakeize(dict(body or {}))
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=_json_default).encode("utf-8")

    def _headers(
        self,
        extra: Optional[Mapping[str, str]],
        idempotency_key: str,
        req_id: str,
        attempt: int,
    ) -> Dict[str, str]:
        h: Dict[str, str] = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": self._settings.user_agent,
            "Idempotency-Key": idempotency_key,
            "Id-Attempt": idgen.attempt_id(req_id, attempt),
        }
        if extra:
            h.update(extra)
        return h

    # ----------------- ответ -----------------

    def _evaluate(self, resp: httpx.Response) -> Tuple[Any, Optional[Budget]]:
        """
        (тело, None) при успехе; (ошибка, бюджет) если ошибку можно повторить.
        Неповторяемые ошибки поднимаются сразу.
        """
        request_id = resp.headers.get(REQUEST_ID_HEADER)
        if not request_id:
            return NoRequestIdError(resp), Budget.CONNECTIVITY
        bind_context(request_id=request_id)

        if resp.status_code == 204:
            return {}, None

        try:
            body = json.loads(resp.content, parse_float=Decimal)
        except ValueError as e:
            raise JsonError(resp) from e

        if 200 <= resp.status_code < 300:
            return camelize(body), None

        err = classify(
            resp.status_code,
            camelize(body) if isinstance(body, dict) else None,
            request_id=request_id,
            response=resp,
        )
        if self._is_retriable(err):
            return err, Budget.BACKEND
        raise err

    def _is_retriable(self, err: ApiError) -> bool:
        if err.seq_code and err.seq_code in self._never_retry:
            return False
        return err.retriable or err.raw_message == RATE_LIMIT_MESSAGE

    def _next_delay(self, state: RetryState, err: LedgerError, budget: Budget, url: str) -> float:
        delay = state.next_delay(budget)
        if delay is None:
            log.info(
                "retry budget exhausted",
                extra={"url": url, "attempt": state.attempt, "budget": budget.value, "error": err.kind},
            )
            if isinstance(err, ConnectivityError):
                raise err from err.source
            raise err
        log.warning(
            "retrying request attempt=%d delay_ms=%d error=%s",
            state.attempt - 1,
            int(delay * 1000),
            err.kind,
            extra={"url": url, "budget": budget.value},
        )
        return delay


# ----------------------------- Синхронный транспорт -----------------------------


class Transport(_TransportBase):
    def __init__(
        self,
        settings: ClientSettings,
        *,
        http_transport: Optional[httpx.BaseTransport] = None,
        clock: Clock = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(settings, clock=clock)
        self._sleep = sleep
        self._client = httpx.Client(timeout=self._timeout(), transport=http_transport)

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def send(
        self,
        url: str,
        body: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        *,
        idempotency_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        content = self._encode(body)
        key = idempotency_key or idgen.idempotency_key()
        req_id = idgen.request_id()
        state = RetryState(self._policy, clock=self._clock)

        while True:
            with _tracer.start_as_current_span("ledger.request", kind=trace.SpanKind.CLIENT) as span:
                span.set_attribute("http.url", url)
                span.set_attribute("ledger.attempt", state.attempt)
                try:
                    resp = self._client.post(
                        url, content=content, headers=self._headers(headers, key, req_id, state.attempt)
                    )
                except httpx.TransportError as e:
                    outcome, budget = ConnectivityError(e), Budget.CONNECTIVITY
                else:
                    span.set_attribute("http.status_code", resp.status_code)
                    outcome, budget = self._evaluate(resp)
            if budget is None:
                return outcome
            self._sleep(self._next_delay(state, outcome, budget, url))


# ----------------------------- Асинхронный транспорт -----------------------------


class AsyncTransport(_TransportBase):
    def __init__(
        self,
        settings: ClientSettings,
        *,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Clock = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        super().__init__(settings, clock=clock)
        self._sleep = sleep
        self._client = httpx.AsyncClient(timeout=self._timeout(), transport=http_transport)

    async def __aenter__(self) -> "AsyncTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def send(
        self,
        url: str,
        body: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        *,
        idempotency_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        content = self._encode(body)
        key = idempotency_key or idgen.idempotency_key()
        req_id = idgen.request_id()
        state = RetryState(self._policy, clock=self._clock)

        while True:
            with _tracer.start_as_current_span("ledger.request", kind=trace.SpanKind.CLIENT) as span:
                span.set_attribute("http.url", url)
                span.set_attribute("ledger.attempt", state.attempt)
                try:
                    resp = await self._client.post(
                        url, content=content, headers=self._headers(headers, key, req_id, state.attempt)
                    )
                except httpx.TransportError as e:
                    outcome, budget = ConnectivityError(e), Budget.CONNECTIVITY
                else:
                    span.set_attribute("http.status_code", resp.status_code)
                    outcome, budget = self._evaluate(resp)
            if budget is None:
                return outcome
            await self._sleep(self._next_delay(state, outcome, budget, url))


__all__ = ["Transport", "AsyncTransport", "RATE_LIMIT_MESSAGE"]

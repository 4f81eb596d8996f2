# ledger_client/errors.py
# -*- coding: utf-8 -*-
"""
Таксономия ошибок SDK.

- ConnectivityError  - транспорт упал до получения HTTP-ответа.
- NoRequestIdError   - ответ пришёл без Chain-Request-Id (прокси/сеть).
- JsonError          - тело ответа не разбирается как JSON.
- ProtocolError      - JSON разобран, но не соответствует протоколу.
- ApiError           - структурированная ошибка бэкенда (4xx/5xx):
    NotFoundError (404), ServerError (5xx), BadRequestError (прочее),
    AuthError (401/403, подкласс BadRequestError).
- InvalidParametersError - локальная валидация до отправки запроса.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

import httpx

REQUEST_ID_HEADER = "Chain-Request-Id"


def format_error_message(
    message: str,
    *,
    seq_code: Optional[str] = None,
    detail: Optional[str] = None,
    request_id: Optional[str] = None,
) -> str:
    tokens = []
    if seq_code:
        tokens.append(f"Code: {seq_code}")
    tokens.append(f"Message: {message}")
    if detail:
        tokens.append(f"Detail: {detail}")
    if request_id:
        tokens.append(f"Request-ID: {request_id}")
    return " ".join(tokens)


class LedgerError(Exception):
    """Базовое исключение SDK."""

    def __init__(self, message: str, *, request_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.request_id = request_id

    @property
    def kind(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        text = f"{self.kind}: {self.message}"
        if self.request_id and self.request_id not in self.message:
            text += f" Request-ID: {self.request_id}"
        return text


class ConnectivityError(LedgerError):
    """Сетевые ошибки и таймауты: HTTP-ответа нет."""

    def __init__(self, source: BaseException) -> None:
        super().__init__(f"Fetch error: {source}")
        self.source = source


class NoRequestIdError(LedgerError):
    """Ответ без заголовка Chain-Request-Id."""

    def __init__(self, response: Optional[httpx.Response] = None) -> None:
        super().__init__(
            f"{REQUEST_ID_HEADER} header is missing. "
            "There may be an issue with your proxy or network configuration."
        )
        self.response = response


class JsonError(LedgerError):
    """Тело ответа не является корректным JSON."""

    def __init__(self, response: Optional[httpx.Response] = None) -> None:
        request_id = response.headers.get(REQUEST_ID_HEADER) if response is not None else None
        super().__init__("Could not parse JSON response", request_id=request_id)
        self.response = response


class ProtocolError(LedgerError):
    """Ответ разобран, но не соответствует протоколу (например, /hello без addr)."""


class InvalidParametersError(LedgerError):
    """Параметры запроса не прошли локальную проверку схемы."""

    def __init__(self, message: str, *, path: Tuple[Any, ...] = (), schema: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path
        self.schema = schema


@dataclass(frozen=True)
class ActionError:
    index: int
    seq_code: Optional[str]
    message: Optional[str]


class ApiError(LedgerError):
    """
    Структурированная ошибка бэкенда.

    Исходное сообщение сервера доступно как raw_message; message содержит
    отформатированную строку с кодом, деталями и Request-ID.
    """

    def __init__(
        self,
        status_code: int,
        body: Optional[Mapping[str, Any]] = None,
        *,
        request_id: Optional[str] = None,
        response: Optional[httpx.Response] = None,
    ) -> None:
        body = dict(body or {})
        raw_message = str(body.get("message") or "")
        seq_code = body.get("seqCode") or body.get("code")
        detail = body.get("detail")
        super().__init__(
            format_error_message(raw_message, seq_code=seq_code, detail=detail, request_id=request_id),
            request_id=request_id,
        )
        self.status_code = status_code
        self.raw_message = raw_message
        self.seq_code: Optional[str] = seq_code
        self.detail: Optional[str] = detail
        self.retriable = bool(body.get("retriable", False))
        self.temporary = bool(body.get("temporary", False))
        self.data: Mapping[str, Any] = body.get("data") or {}
        self.body = body
        self.response = response

    @property
    def action_errors(self) -> Tuple[ActionError, ...]:
        """
        Ошибки отдельных действий многоактовой транзакции.
        Бэкенд кладёт их в data.actions; индекс может лежать на верхнем
        уровне элемента или внутри его data.
        """
        items = self.data.get("actions") if isinstance(self.data, Mapping) else None
        if not items:
            return ()
        out = []
        for pos, item in enumerate(items):
            if not isinstance(item, Mapping):
                continue
            nested = item.get("data") if isinstance(item.get("data"), Mapping) else {}
            index = item.get("index", nested.get("index", pos))
            out.append(
                ActionError(
                    index=int(index),
                    seq_code=item.get("seqCode") or item.get("code"),
                    message=item.get("message"),
                )
            )
        return tuple(out)


class BadRequestError(ApiError):
    """Ошибка запроса (4xx, кроме 404)."""


class AuthError(BadRequestError):
    """Проблемы аутентификации/авторизации (401/403)."""


class NotFoundError(ApiError):
    """Ресурс не найден (404)."""


class ServerError(ApiError):
    """Серверные ошибки (>=500)."""


def classify(
    status_code: int,
    body: Optional[Mapping[str, Any]],
    *,
    request_id: Optional[str] = None,
    response: Optional[httpx.Response] = None,
) -> ApiError:
    if status_code == 404:
        cls = NotFoundError
    elif status_code >= 500:
        cls = ServerError
    elif status_code in (401, 403):
        cls = AuthError
    else:
        cls = BadRequestError
    return cls(status_code, body, request_id=request_id, response=response)


__all__ = [
    "REQUEST_ID_HEADER",
    "LedgerError",
    "ConnectivityError",
    "NoRequestIdError",
    "JsonError",
    "ProtocolError",
    "InvalidParametersError",
    "ApiError",
    "ActionError",
    "BadRequestError",
    "AuthError",
    "NotFoundError",
    "ServerError",
    "classify",
    "format_error_message",
]

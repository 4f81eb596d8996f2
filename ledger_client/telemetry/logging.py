# -*- coding: utf-8 -*-
"""
ledger_client.telemetry.logging - настройка логирования клиента.

Возможности:
- JSON‑логи (однострочно), UTC‑время в RFC3339.
- Контекст через contextvars: ledger_name, request_id (последний Chain-Request-Id).
- Маскировка секретов (credential, macaroon, authorization, idempotency-key и т. п.).
- Безопасные дефолты уровней для шумных библиотек (httpx/httpcore).

Библиотека сама обработчики не ставит: setup_logging() вызывает приложение.
Зависимости: только стандартная библиотека Python.
"""

from __future__ import annotations

import contextvars
import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# ============================ Контекст запроса ============================

cv_request_id: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")
cv_ledger_name: contextvars.ContextVar[str] = contextvars.ContextVar("ledger_name", default="-")


def bind_context(*, request_id: Optional[str] = None, ledger_name: Optional[str] = None) -> None:
    if request_id: cv_request_id.set(request_id)
    if ledger_name: cv_ledger_name.set(ledger_name)


def clear_context() -> None:
    cv_request_id.set("-")
    cv_ledger_name.set("-")


# ============================ Маскировка/редакция ============================

_SENSITIVE_KEYS = re.compile(
    r"(credential|macaroon|authorization|password|secret|token|api[_-]?key|idempotency[_-]?key|cookie)",
    re.IGNORECASE,
)
_SENSITIVE_VALUE = re.compile(
    r"(?i)(bearer\s+[a-z0-9._-]+|basic\s+[a-z0-9=:+/_-]+|eyJ[a-zA-Z0-9_-]{10,})"
)
_MASK = "[REDACTED]"


def _redact(obj: Any) -> Any:
    # Маскируем значения по ключам и "похожие на токены" строки.
    if isinstance(obj, dict):
        return {k: (_MASK if _SENSITIVE_KEYS.search(str(k)) else _redact(v)) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_redact(v) for v in obj]
    if isinstance(obj, str) and _SENSITIVE_VALUE.search(obj):
        return _MASK
    return obj


# ============================ JSON Formatter ============================

_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    def __init__(self, *, static_fields: Optional[Dict[str, Any]] = None):
        super().__init__()
        self.static_fields = static_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        base: Dict[str, Any] = {
            "ts": ts,
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "ledger": cv_ledger_name.get(),
            "request_id": cv_request_id.get(),
        }
        if record.exc_info:
            base["exc_type"] = record.exc_info[0].__name__ if record.exc_info[0] else None
            base["exc"] = self.formatException(record.exc_info)

        extras = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
        base.update(self.static_fields)
        if extras:
            base["extra"] = _redact(extras)
        return json.dumps(base, ensure_ascii=False, separators=(",", ":"), default=str)


class PlainFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__("[%(asctime)s] %(levelname)s %(name)s: %(message)s")


# ============================ Публичное API ============================

def setup_logging(
    *,
    level: str = "INFO",
    json_format: bool = True,
    third_party_levels: Optional[Dict[str, str]] = None,
    static_fields: Optional[Dict[str, Any]] = None,
) -> logging.Handler:
    """
    Подключает обработчик stderr к логгеру "ledger_client".

    level: уровень логгера SDK (строка, как в stdlib)
    json_format: JSON-строки или обычный текст
    third_party_levels: словарь уровней для библиотек {"httpx": "WARNING"}
    static_fields: статические поля, добавляемые в каждый лог
    """
    root = logging.getLogger("ledger_client")
    root.setLevel(_to_level(level))
    for h in list(root.handlers):
        if getattr(h, "_ledger_client_handler", False):
            root.removeHandler(h)

    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(JsonFormatter(static_fields=static_fields) if json_format else PlainFormatter())
    handler._ledger_client_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    for name, lvl in (third_party_levels or {}).items():
        logging.getLogger(name).setLevel(_to_level(lvl))
    return handler


def configure_from_settings(settings: Any) -> logging.Handler:
    cfg = settings.logging
    return setup_logging(
        level=cfg.level,
        json_format=cfg.json_format,
        third_party_levels=dict(cfg.quiet_loggers),
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(f"ledger_client.{name}" if name else "ledger_client")


def _to_level(v: str | int) -> int:
    if isinstance(v, int):
        return v
    level = logging.getLevelName(str(v).upper())
    return level if isinstance(level, int) else logging.INFO


__all__ = [
    "bind_context",
    "clear_context",
    "cv_request_id",
    "cv_ledger_name",
    "JsonFormatter",
    "PlainFormatter",
    "setup_logging",
    "configure_from_settings",
    "get_logger",
]

# ledger_client/utils/idgen.py
"""
Генерация идентификаторов для запросов к ledger API.

- idempotency_key(): случайный UUIDv4, один на логический запрос
  (одинаков для всех повторов этого запроса).
- request_id(): короткий корреляционный идентификатор клиента, Base58 от 64 бит.
- attempt_id(): "<request_id>/<attempt>" для заголовка Id-Attempt.

Криптографическая энтропия: os.urandom.
"""

from __future__ import annotations

import os
import uuid

# Bitcoin Base58 (без 0,O,I,l)
_B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


def b58_encode(b: bytes) -> str:
    n = int.from_bytes(b, "big", signed=False)
    out = []
    while n:
        n, rem = divmod(n, 58)
        out.append(_B58_ALPHABET[rem])
    out.reverse()
    # ведущие нули в Base58 кодируются как '1'
    pad = len(b) - len(b.lstrip(b"\x00"))
    return "1" * pad + "".join(out)


def idempotency_key() -> str:
    return str(uuid.uuid4())


def request_id() -> str:
    return b58_encode(os.urandom(8))


def attempt_id(req_id: str, attempt: int) -> str:
    return f"{req_id}/{attempt}"


__all__ = ["b58_encode", "idempotency_key", "request_id", "attempt_id"]

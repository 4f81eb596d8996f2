# ledger_client/utils/retry.py
# -*- coding: utf-8 -*-
"""
Retry policy and per-call retry state for the ledger transport.

Features:
- Capped exponential backoff: base * 2**(attempt-1), bounded by max delay.
- Two time budgets: a short one for connectivity/protocol failures and a
  long one for errors the backend itself marks as retriable.
- A budget is never overrun by a sleep: if the next delay would cross it,
  the caller gets the last error instead.

No external dependencies.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional


class Budget(str, Enum):
    CONNECTIVITY = "connectivity"
    BACKEND = "backend"


@dataclass(frozen=True)
class RetryPolicy:
    base_delay_ms: int = 40
    max_delay_ms: int = 20_000
    connection_timeout_ms: int = 5_000   # connectivity / missing request id
    timeout_ms: int = 120_000            # backend-flagged retriable errors

    def __post_init__(self) -> None:
        if self.base_delay_ms <= 0:
            raise ValueError("base_delay_ms must be > 0")
        if self.max_delay_ms < self.base_delay_ms:
            raise ValueError("max_delay_ms must be >= base_delay_ms")
        if self.connection_timeout_ms <= 0 or self.timeout_ms <= 0:
            raise ValueError("retry timeouts must be > 0")

    def delay_ms(self, attempt: int) -> int:
        """
        Delay to wait after the given (1-based) attempt failed.
        """
        if attempt < 1:
            raise ValueError("attempt must be >= 1")
        # cap the exponent to keep the intermediate value small
        exp = min(attempt - 1, 32)
        return min(self.max_delay_ms, self.base_delay_ms * (2 ** exp))

    def budget_ms(self, budget: Budget) -> int:
        if budget is Budget.CONNECTIVITY:
            return self.connection_timeout_ms
        return self.timeout_ms


@dataclass
class RetryState:
    """
    Attempt counter and start time of one logical request.
    """

    policy: RetryPolicy
    clock: Callable[[], float] = time.monotonic
    attempt: int = 1
    started_at: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        self.started_at = self.clock()

    def elapsed_ms(self) -> float:
        return (self.clock() - self.started_at) * 1000.0

    def next_delay(self, budget: Budget) -> Optional[float]:
        """
        Seconds to sleep before the next attempt, or None when the budget
        would be exceeded. Advances the attempt counter on success.
        """
        delay_ms = self.policy.delay_ms(self.attempt)
        if self.elapsed_ms() + delay_ms > self.policy.budget_ms(budget):
            return None
        self.attempt += 1
        return delay_ms / 1000.0


__all__ = [
    "Budget",
    "RetryPolicy",
    "RetryState",
]

# ledger_client/session.py
# -*- coding: utf-8 -*-
"""
Ledger session resolution.

A session binds a ledger name to the concrete ledger URL returned by the
/hello handshake, valid until a deadline. Resolvers cache the session, refresh
it in the background shortly before the deadline and make sure at most one
handshake is in flight at any time.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional

from .errors import ProtocolError

log = logging.getLogger("ledger_client.session")

Clock = Callable[[], float]


@dataclass(frozen=True)
class LedgerSession:
    ledger_url: str
    deadline: float
    team_name: str
    address: str

    @classmethod
    def from_hello(
        cls,
        data: Mapping[str, Any],
        *,
        ledger_name: str,
        now: float,
        scheme: str = "https",
        request_id: Optional[str] = None,
    ) -> "LedgerSession":
        team = data.get("teamName") or data.get("team_name")
        addr = data.get("addr")
        ttl = data.get("addrTtlSeconds", data.get("addr_ttl_seconds"))
        if not team or not addr or ttl is None:
            raise ProtocolError(f"malformed hello response: {dict(data)!r}", request_id=request_id)
        try:
            ttl = float(ttl)
        except (TypeError, ValueError):
            raise ProtocolError(f"malformed hello response: {dict(data)!r}", request_id=request_id) from None
        return cls(
            ledger_url=f"{scheme}://{addr}/{team}/{ledger_name}",
            deadline=now + ttl,
            team_name=str(team),
            address=str(addr),
        )

    def expired(self, now: float) -> bool:
        return now >= self.deadline

    def needs_refresh(self, now: float, window: float) -> bool:
        return self.deadline - now <= window


def _spawn_daemon(fn: Callable[[], None]) -> None:
    threading.Thread(target=fn, name="ledger-session-refresh", daemon=True).start()


class SessionResolver:
    """
    Thread-safe resolver for the sync client.

    Cold cache: the first caller runs the handshake, the others wait on the
    same Future. Inside the refresh window the cached session is returned
    immediately and the handshake runs on a daemon thread.
    """

    def __init__(
        self,
        handshake: Callable[[], LedgerSession],
        *,
        clock: Clock = time.monotonic,
        refresh_window: float = 30.0,
        spawn: Callable[[Callable[[], None]], None] = _spawn_daemon,
    ) -> None:
        self._handshake = handshake
        self._clock = clock
        self._window = refresh_window
        self._spawn = spawn
        self._lock = threading.Lock()
        self._session: Optional[LedgerSession] = None
        self._inflight: Optional[Future] = None

    @property
    def session(self) -> Optional[LedgerSession]:
        return self._session

    def resolve(self) -> LedgerSession:
        background: Optional[Future] = None
        with self._lock:
            session = self._session
            now = self._clock()
            if session is not None and not session.expired(now):
                if session.needs_refresh(now, self._window) and self._inflight is None:
                    background = self._inflight = Future()
                    background.add_done_callback(self._log_background_failure)
                if background is None:
                    return session
            else:
                fut = self._inflight
                owner = fut is None
                if owner:
                    fut = self._inflight = Future()

        if background is not None:
            self._spawn(functools.partial(self._run, background))
            return session

        if owner:
            self._run(fut)
        return fut.result()

    def _run(self, fut: Future) -> None:
        try:
            session = self._handshake()
        except Exception as e:
            with self._lock:
                self._inflight = None
            fut.set_exception(e)
            return
        with self._lock:
            self._session = session
            self._inflight = None
        fut.set_result(session)

    @staticmethod
    def _log_background_failure(fut: Future) -> None:
        exc = fut.exception()
        if exc is not None:
            log.warning("background session refresh failed: %s", exc)


class AsyncSessionResolver:
    """
    Resolver for the async client. The in-flight handshake is a shared
    asyncio.Task; waiters await it through asyncio.shield so that a cancelled
    caller does not cancel the handshake for everyone else.
    """

    def __init__(
        self,
        handshake: Callable[[], Awaitable[LedgerSession]],
        *,
        clock: Clock = time.monotonic,
        refresh_window: float = 30.0,
    ) -> None:
        self._handshake = handshake
        self._clock = clock
        self._window = refresh_window
        self._session: Optional[LedgerSession] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def session(self) -> Optional[LedgerSession]:
        return self._session

    @property
    def pending(self) -> Optional[asyncio.Task]:
        return self._task

    async def resolve(self) -> LedgerSession:
        session = self._session
        now = self._clock()
        if session is not None and not session.expired(now):
            if session.needs_refresh(now, self._window) and self._task is None:
                self._start(background=True)
            return session
        task = self._task or self._start(background=False)
        return await asyncio.shield(task)

    def _start(self, *, background: bool) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._refresh())
        task.add_done_callback(functools.partial(self._on_done, background=background))
        self._task = task
        return task

    async def _refresh(self) -> LedgerSession:
        session = await self._handshake()
        self._session = session
        return session

    def _on_done(self, task: asyncio.Task, *, background: bool) -> None:
        if self._task is task:
            self._task = None
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None and background:
            log.warning("background session refresh failed: %s", exc)


__all__ = ["LedgerSession", "SessionResolver", "AsyncSessionResolver"]

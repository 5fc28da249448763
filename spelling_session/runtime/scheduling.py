from __future__ import annotations

import asyncio
from typing import Callable, Protocol


class CancelHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def schedule_every_interval(self, callback: Callable[[], None], ms: int) -> CancelHandle: ...

    def schedule_once(self, callback: Callable[[], None], ms: int) -> CancelHandle: ...


class _RepeatingHandle:
    def __init__(self, loop: asyncio.AbstractEventLoop, callback: Callable[[], None], ms: int) -> None:
        self._loop = loop
        self._callback = callback
        self._delay = ms / 1000
        self._cancelled = False
        self._timer = loop.call_later(self._delay, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._timer = self._loop.call_later(self._delay, self._fire)
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        self._timer.cancel()


class AsyncioScheduler:
    """Timers on the running asyncio loop; callbacks run on that loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _resolve_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def schedule_every_interval(self, callback: Callable[[], None], ms: int) -> CancelHandle:
        if ms <= 0:
            raise ValueError("interval must be positive")
        return _RepeatingHandle(self._resolve_loop(), callback, ms)

    def schedule_once(self, callback: Callable[[], None], ms: int) -> CancelHandle:
        return self._resolve_loop().call_later(max(0, ms) / 1000, callback)

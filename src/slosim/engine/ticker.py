from __future__ import annotations

import asyncio
from typing import Callable, Protocol

TickCallback = Callable[[], None]


class Ticker(Protocol):
    @property
    def running(self) -> bool:
        ...

    def start(self, interval_ms: float, callback: TickCallback) -> None:
        ...

    def stop(self) -> None:
        ...


class LoopTicker:
    """Periodic callback on the running asyncio event loop.

    Every firing reschedules itself with ``call_later``; ``stop`` cancels the
    pending handle, so no callback runs after it returns.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._injected_loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._interval_sec = 0.0
        self._callback: TickCallback | None = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self, interval_ms: float, callback: TickCallback) -> None:
        if self._handle is not None:
            return
        loop = self._injected_loop or asyncio.get_running_loop()
        self._interval_sec = interval_ms / 1000.0
        self._callback = callback
        self._schedule(loop)

    def stop(self) -> None:
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None
        self._callback = None

    def _schedule(self, loop: asyncio.AbstractEventLoop) -> None:
        self._handle = loop.call_later(self._interval_sec, self._fire, loop)

    def _fire(self, loop: asyncio.AbstractEventLoop) -> None:
        callback = self._callback
        if callback is None:
            return
        self._schedule(loop)
        callback()


class ManualTicker:
    """Ticker driven by explicit ``fire`` calls instead of a clock."""

    def __init__(self) -> None:
        self._callback: TickCallback | None = None
        self.interval_ms = 0.0

    @property
    def running(self) -> bool:
        return self._callback is not None

    def start(self, interval_ms: float, callback: TickCallback) -> None:
        if self._callback is not None:
            return
        self.interval_ms = interval_ms
        self._callback = callback

    def stop(self) -> None:
        self._callback = None

    def fire(self, times: int = 1) -> int:
        fired = 0
        for _ in range(times):
            if self._callback is None:
                break
            self._callback()
            fired += 1
        return fired

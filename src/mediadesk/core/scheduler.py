"""Timer capability used by the progress monitor.

The monitor never touches the event loop's clock directly; it asks a
``Scheduler`` for one-shot and repeating timers.  Production code uses
:class:`AsyncioScheduler`, tests drive a manual clock.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle: ...


class _RepeatingTimer:
    """Fires ``callback`` every ``interval`` seconds until cancelled.

    The next tick is armed before the callback runs, so a slow callback (or a
    slow query it starts) never delays the cadence.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], None]):
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._handle: Optional[asyncio.TimerHandle] = loop.call_later(interval, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._handle = self._loop.call_later(self._interval, self._fire)
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class AsyncioScheduler:
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return self.loop.call_later(delay, callback)

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        return _RepeatingTimer(self.loop, interval, callback)

"""Polling state machine behind the progress indicator.

The backend has no push channel, so while a job runs the monitor queries
``get_progress_info`` on a fixed cadence and keeps the latest snapshot.  Once
the job is done (a 100% snapshot, or no progress while nothing is processing)
the indicator stays on screen for a grace period and is then cleared.

States::

    IDLE --processing--> POLLING --100% / no progress--> VISIBLE_COMPLETED --grace--> HIDDEN
                            ^                                   |
                            +------- newer, non-final progress -+

``state`` is derived from the live timers, so it can never disagree with
what is actually scheduled.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from mediadesk.core.events import Listeners, Subscription
from mediadesk.core.scheduler import Scheduler, TimerHandle
from mediadesk.errors import PollTransient
from mediadesk.models import ProgressInfo
from mediadesk.rpc.bridge import Operation, RpcBridge

LOGGER = logging.getLogger("mediadesk.progress_monitor")

DEFAULT_POLL_INTERVAL = 1.0 / 60.0
DEFAULT_HIDE_GRACE_PERIOD = 5.0


class MonitorState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    VISIBLE_COMPLETED = "visible_completed"
    HIDDEN = "hidden"


@dataclass(frozen=True)
class ProgressView:
    state: MonitorState
    snapshot: Optional[ProgressInfo]
    visible: bool
    processing: bool


ViewListener = Callable[[ProgressView], None]


class ProgressMonitor:
    def __init__(
        self,
        bridge: RpcBridge,
        scheduler: Scheduler,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        grace_period: float = DEFAULT_HIDE_GRACE_PERIOD,
        name: str = "progress",
    ):
        self.bridge = bridge
        self.scheduler = scheduler
        self.poll_interval = poll_interval
        self.grace_period = grace_period
        self.name = name
        self.last_poll_error: Optional[PollTransient] = None

        self._snapshot: Optional[ProgressInfo] = None
        self._visible = False
        self._processing = False
        self._rest_state = MonitorState.IDLE
        self._poll_timer: Optional[TimerHandle] = None
        self._hide_timer: Optional[TimerHandle] = None
        self._inflight: Optional[asyncio.Future] = None
        self._failures = 0
        self._closed = False
        # processing cycles: bumped each time a job starts
        self._cycle = 0
        self._finished_cycle = -1
        self._progressed_cycle = -1
        self._hide_cycle: Optional[int] = None

        self._listeners: Listeners[ViewListener] = Listeners(f"{name} monitor")
        self._waiters: list[asyncio.Future] = []

    # -- read side -------------------------------------------------------

    @property
    def state(self) -> MonitorState:
        if self._hide_timer is not None:
            return MonitorState.VISIBLE_COMPLETED
        if self._poll_timer is not None:
            return MonitorState.POLLING
        return self._rest_state

    @property
    def snapshot(self) -> Optional[ProgressInfo]:
        return self._snapshot

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def processing(self) -> bool:
        return self._processing

    @property
    def polling(self) -> bool:
        return self._poll_timer is not None

    @property
    def hide_pending(self) -> bool:
        return self._hide_timer is not None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def settled(self) -> bool:
        """Nothing running and nothing scheduled."""
        return self._closed or (
            not self._processing and self._poll_timer is None and self._hide_timer is None
        )

    def view(self) -> ProgressView:
        return ProgressView(self.state, self._snapshot, self._visible, self._processing)

    def add_listener(self, listener: ViewListener) -> Subscription:
        return self._listeners.add(listener)

    async def wait_settled(self) -> None:
        if self.settled:
            return
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        await waiter

    # -- inputs ----------------------------------------------------------

    def set_processing(self, processing: bool) -> None:
        if self._closed or processing == self._processing:
            return
        self._processing = processing
        if processing:
            self._cycle += 1
        LOGGER.debug("%s: processing=%s", self.name, processing)
        self._evaluate()
        self._notify()

    def close(self) -> None:
        """Cancel every timer and the query in flight; no callbacks afterwards."""
        if self._closed:
            return
        self._closed = True
        self._stop_polling()
        self._cancel_hide()
        if self._inflight is not None:
            self._inflight.cancel()
        self._listeners.clear()
        for waiter in self._waiters:
            if not waiter.done():
                waiter.set_result(None)
        self._waiters.clear()
        LOGGER.debug("%s monitor closed", self.name)

    # -- polling ---------------------------------------------------------

    def _should_poll(self) -> bool:
        if self._closed:
            return False
        if self._hide_timer is not None:
            # only a countdown owned by the running job ends its polling
            return self._processing and self._hide_cycle != self._cycle
        if self._processing:
            return self._finished_cycle != self._cycle
        return self._visible

    def _evaluate(self) -> None:
        if self._should_poll():
            if self._poll_timer is None:
                self._start_polling()
            return
        if self._poll_timer is not None:
            self._stop_polling()
            if not self._visible:
                self._rest_state = MonitorState.IDLE

    def _start_polling(self) -> None:
        self._poll_timer = self.scheduler.call_every(self.poll_interval, self._tick)
        self._tick()

    def _stop_polling(self) -> None:
        if self._poll_timer is not None:
            self._poll_timer.cancel()
            self._poll_timer = None

    def _tick(self) -> None:
        # never overlap queries; the cadence itself keeps running
        if self._closed or self._inflight is not None:
            return
        self._inflight = asyncio.ensure_future(self._query())

    async def _query(self) -> None:
        info: Optional[ProgressInfo] = None
        try:
            raw = await self.bridge.call(Operation.GET_PROGRESS_INFO)
            if raw is not None:
                info = ProgressInfo.model_validate(raw)
            self._failures = 0
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.last_poll_error = PollTransient(str(exc))
            self._failures += 1
            if self._failures == 1:
                LOGGER.warning("Failed to fetch progress info: %s", exc)
            else:
                LOGGER.debug("Failed to fetch progress info (%d in a row): %s", self._failures, exc)
        finally:
            self._inflight = None
        if self._closed:
            return
        self._apply(info)

    # -- transitions -----------------------------------------------------

    def _apply(self, info: Optional[ProgressInfo]) -> None:
        if info is None:
            self._on_no_progress()
        elif info.is_complete:
            self._snapshot = info
            self._visible = True
            if self._hide_timer is None:
                LOGGER.info("%s: %s complete (%d/%d)", self.name, info.status, info.current, info.total)
                self._schedule_hide()
        else:
            self._snapshot = info
            self._visible = True
            if self._processing:
                self._progressed_cycle = self._cycle
            if self._hide_timer is not None:
                LOGGER.debug("%s: new progress, hide countdown cancelled", self.name)
                self._cancel_hide()
            if self._poll_timer is None and self._should_poll():
                self._start_polling()
        self._notify()

    def _on_no_progress(self) -> None:
        if self._processing or self._hide_timer is not None:
            # keep showing the last snapshot
            return
        if self._visible:
            self._schedule_hide()
            return
        if self._poll_timer is not None:
            self._stop_polling()
            self._rest_state = MonitorState.IDLE

    def _schedule_hide(self) -> None:
        self._cancel_hide()
        # a 100% only completes the running job if that job reported progress
        # first; otherwise it may be left over from the previous one
        owned = self._processing and self._progressed_cycle == self._cycle
        self._hide_cycle = self._cycle if owned else None
        self._hide_timer = self.scheduler.call_later(self.grace_period, self._hide)
        if not self._should_poll():
            self._stop_polling()

    def _cancel_hide(self) -> None:
        if self._hide_timer is not None:
            self._hide_timer.cancel()
            self._hide_timer = None
        self._hide_cycle = None

    def _hide(self) -> None:
        if self._closed:
            return
        if self._processing and self._hide_cycle == self._cycle:
            # this job already reported completion; wait for the next one
            self._finished_cycle = self._cycle
        self._hide_timer = None
        self._hide_cycle = None
        self._snapshot = None
        self._visible = False
        self._rest_state = MonitorState.HIDDEN
        LOGGER.debug("%s: progress hidden", self.name)
        self._evaluate()
        self._notify()

    def _notify(self) -> None:
        if self._closed:
            return
        self._listeners.emit(self.view())
        if self._waiters and self.settled:
            waiters, self._waiters = self._waiters, []
            for waiter in waiters:
                if not waiter.done():
                    waiter.set_result(None)


__all__ = [
    "DEFAULT_HIDE_GRACE_PERIOD",
    "DEFAULT_POLL_INTERVAL",
    "MonitorState",
    "ProgressMonitor",
    "ProgressView",
]

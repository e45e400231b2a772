"""Runs an :class:`AppSession` on its own asyncio loop inside a QThread.

The core is single threaded: every touch of the session happens on the
worker loop.  The GUI talks to it through the thread-safe helpers below and
listens to the Qt signals, which Qt queues back onto the GUI thread.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from typing import Any, Optional

from PyQt5.QtCore import QThread, pyqtSignal

from mediadesk.config.client_config import ClientConfig
from mediadesk.core.job_controller import JobKind
from mediadesk.core.progress_monitor import ProgressView
from mediadesk.core.session import AppSession, MediaView
from mediadesk.core.settings_store import INITIALIZED, VIDEO_SETTINGS
from mediadesk.errors import InvalidSettings
from mediadesk.favorites import toggle_favorite_codec, toggle_favorite_format
from mediadesk.rpc.http_bridge import HttpRpcBridge

LOGGER = logging.getLogger("mediadesk.ui.worker")


def log_failure(future: concurrent.futures.Future) -> None:
    """Done-callback for work handed to the worker loop."""
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        LOGGER.error("Worker task failed: %s", exc, exc_info=exc)


class SessionWorker(QThread):
    status_changed = pyqtSignal(str)
    # kind, form snapshot, capabilities
    form_seeded = pyqtSignal(str, object, object)
    video_settings_changed = pyqtSignal(object)
    progress_changed = pyqtSignal(str, object)
    processing_changed = pyqtSignal(str, bool)
    validation_failed = pyqtSignal(str, object)
    error_occurred = pyqtSignal(str)

    def __init__(self, config: ClientConfig):
        super().__init__()
        self.config = config
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._session: Optional[AppSession] = None
        self._views: dict[JobKind, MediaView] = {}
        self._stopped: Optional[asyncio.Event] = None

    def run(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        bridge = HttpRpcBridge.from_config(self.config)
        try:
            self._loop.run_until_complete(self._main(bridge))
        except Exception as exc:
            LOGGER.exception("Session worker crashed")
            self.error_occurred.emit(f"Session worker crashed: {exc}")
        finally:
            bridge.close()
            self.status_changed.emit("stopped")
            self._loop.close()
            self._loop = None
            self._session = None
            self._views.clear()

    async def _main(self, bridge: HttpRpcBridge) -> None:
        self._stopped = asyncio.Event()
        session = AppSession(bridge, config=self.config)
        self._session = session
        for kind in JobKind:
            self._views[kind] = self._open_view(session, kind)
        session.store.subscribe(self._on_store_event)
        self.status_changed.emit("loading")
        if await session.start():
            self.status_changed.emit("ready")
        else:
            self.error_occurred.emit("Backend unavailable, settings could not be loaded.")
            self.status_changed.emit("offline")
        try:
            await self._stopped.wait()
        finally:
            session.close()

    def _open_view(self, session: AppSession, kind: JobKind) -> MediaView:
        view = session.open_view(kind)
        view.jobs.add_listener(lambda value, k=kind: self.processing_changed.emit(k.value, value))
        view.monitor.add_listener(lambda pv, k=kind: self._emit_progress(k, pv))
        if view.sync.seeded:
            self._emit_seed(kind)
        return view

    def _emit_progress(self, kind: JobKind, view: ProgressView) -> None:
        self.progress_changed.emit(kind.value, view)

    def _emit_seed(self, kind: JobKind) -> None:
        view = self._views[kind]
        self.form_seeded.emit(kind.value, view.form.snapshot(), self._session.store.capabilities)

    def _on_store_event(self, event: str) -> None:
        if event == INITIALIZED:
            for kind in JobKind:
                self._emit_seed(kind)
            self.video_settings_changed.emit(self._session.store.get_video_settings())
        elif event == VIDEO_SETTINGS:
            self.video_settings_changed.emit(self._session.store.get_video_settings())

    # -- thread-safe entry points for the GUI -----------------------------

    def _call_soon(self, func, *args: Any) -> None:
        if self._loop is None:
            LOGGER.debug("Session worker not running, dropping %s", getattr(func, "__name__", func))
            return
        self._loop.call_soon_threadsafe(func, *args)

    def _submit_coro(self, coro) -> None:
        if self._loop is None:
            coro.close()
            return
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        future.add_done_callback(log_failure)

    def set_field(self, kind: str, name: str, value: Any) -> None:
        self._call_soon(self._set_field, JobKind(kind), name, value)

    def _set_field(self, kind: JobKind, name: str, value: Any) -> None:
        setattr(self._views[kind].form, name, value)

    def submit(self, kind: str) -> None:
        self._submit_coro(self._submit(JobKind(kind)))

    async def _submit(self, kind: JobKind) -> None:
        view = self._views[kind]
        try:
            ok = await view.submit()
        except InvalidSettings as exc:
            self.validation_failed.emit(kind.value, exc.errors)
            return
        if not ok:
            self.error_occurred.emit(f"Processing failed: {view.jobs.last_error}")

    def cancel(self, kind: str) -> None:
        self._call_soon(self._cancel, JobKind(kind))

    def _cancel(self, kind: JobKind) -> None:
        self._views[kind].cancel()

    def toggle_favorite(self, what: str, value: str) -> None:
        toggle = toggle_favorite_format if what == "format" else toggle_favorite_codec
        self._call_soon(lambda: toggle(self._session.store, value))

    def reload(self) -> None:
        self._submit_coro(self._reload())

    async def _reload(self) -> None:
        if not await self._session.reload():
            self.error_occurred.emit("Backend unavailable, settings could not be reloaded.")

    def reveal(self, what: str) -> None:
        self._submit_coro(self._reveal(what))

    async def _reveal(self, what: str) -> None:
        if what == "config":
            ok = await self._session.reveal_config_location()
        else:
            ok = await self._session.reveal_log_location()
        if not ok:
            self.error_occurred.emit(f"Could not open the {what} folder.")

    def request_stop(self) -> None:
        if self._loop and self._stopped is not None:
            self._loop.call_soon_threadsafe(self._stopped.set)

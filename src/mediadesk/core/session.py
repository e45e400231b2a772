"""Explicit owner of the shared settings store and the per-view pieces.

One :class:`AppSession` exists per running application.  Views get the
session handed to them instead of reaching for module globals, and every
view is torn down through :meth:`MediaView.close`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from mediadesk.config.client_config import ClientConfig
from mediadesk.core.form_sync import FormSyncAdapter
from mediadesk.core.forms import ImageForm, MediaForm, VideoForm
from mediadesk.core.job_controller import JobKind, JobSubmissionController
from mediadesk.core.progress_monitor import ProgressMonitor
from mediadesk.core.scheduler import AsyncioScheduler, Scheduler
from mediadesk.core.settings_store import SettingsStore
from mediadesk.errors import BackendUnavailable
from mediadesk.rpc.bridge import Operation, RpcBridge

LOGGER = logging.getLogger("mediadesk.session")


class MediaView:
    """Form, form sync, job controller and progress monitor of one page."""

    def __init__(self, session: "AppSession", kind: JobKind):
        self.kind = kind
        self.form: MediaForm = ImageForm() if kind is JobKind.IMAGE else VideoForm()
        self.sync = FormSyncAdapter(self.form, session.store, kind)
        self.jobs = JobSubmissionController(session.bridge, session.store, kind)
        self.monitor = ProgressMonitor(
            session.bridge,
            session.scheduler,
            poll_interval=session.config.poll_interval,
            grace_period=session.config.hide_grace_period,
            name=f"{kind.value} progress",
        )
        self._processing_sub = self.jobs.add_listener(self.monitor.set_processing)
        self._closed = False
        self.sync.bind()

    @property
    def processing(self) -> bool:
        return self.jobs.processing

    async def submit(self) -> bool:
        return await self.jobs.submit(self.form.snapshot())

    def cancel(self) -> asyncio.Task:
        return self.jobs.cancel()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._processing_sub.unsubscribe()
        self.sync.close()
        self.monitor.close()


class AppSession:
    def __init__(
        self,
        bridge: RpcBridge,
        scheduler: Optional[Scheduler] = None,
        config: Optional[ClientConfig] = None,
    ):
        self.bridge = bridge
        self.scheduler = scheduler or AsyncioScheduler()
        self.config = config or ClientConfig()
        self.store = SettingsStore(bridge)
        self._views: list[MediaView] = []

    @property
    def views(self) -> tuple[MediaView, ...]:
        return tuple(self._views)

    async def start(self) -> bool:
        """Load settings; on failure the app stays usable but uninitialized."""
        try:
            await self.store.load()
        except BackendUnavailable as exc:
            LOGGER.error("Backend unavailable, settings not loaded: %s", exc)
            return False
        return True

    async def reload(self) -> bool:
        return await self.start()

    def open_view(self, kind: JobKind) -> MediaView:
        view = MediaView(self, kind)
        self._views.append(view)
        return view

    def close_view(self, view: MediaView) -> None:
        view.close()
        if view in self._views:
            self._views.remove(view)

    async def reveal_config_location(self) -> bool:
        return await self._reveal(Operation.SHOW_CONFIG_IN_FOLDER, "config")

    async def reveal_log_location(self) -> bool:
        return await self._reveal(Operation.SHOW_LOG_IN_FOLDER, "log")

    async def _reveal(self, operation: str, what: str) -> bool:
        try:
            await self.bridge.call(operation)
            return True
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            LOGGER.error("Failed to show %s in folder: %s", what, exc)
            return False

    def close(self) -> None:
        for view in list(self._views):
            self.close_view(view)


__all__ = ["AppSession", "MediaView"]

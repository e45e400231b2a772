"""Starts and cancels backend jobs for one view and tracks ``processing``."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from mediadesk.core.events import Listeners, Subscription
from mediadesk.core.settings_store import SettingsStore
from mediadesk.errors import CancellationIgnored, SubmissionRejected
from mediadesk.models import MediaSettings
from mediadesk.rpc.bridge import Operation, RpcBridge
from mediadesk.validation import validate_image_settings, validate_video_settings

LOGGER = logging.getLogger("mediadesk.job_controller")


class JobKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"

    @property
    def operation(self) -> str:
        return Operation.PROCESS_IMAGES if self is JobKind.IMAGE else Operation.PROCESS_VIDEOS

    @property
    def payload_key(self) -> str:
        return "imageSettings" if self is JobKind.IMAGE else "videoSettings"


ProcessingListener = Callable[[bool], None]


class JobSubmissionController:
    def __init__(self, bridge: RpcBridge, store: SettingsStore, kind: JobKind):
        self.bridge = bridge
        self.store = store
        self.kind = kind
        self.last_error: Optional[Exception] = None
        self._processing = False
        self._generation = 0
        self._listeners: Listeners[ProcessingListener] = Listeners(f"{kind.value} jobs")
        self._cancel_tasks: set[asyncio.Task] = set()

    @property
    def processing(self) -> bool:
        return self._processing

    def add_listener(self, listener: ProcessingListener) -> Subscription:
        return self._listeners.add(listener)

    def _set_processing(self, value: bool) -> None:
        if self._processing == value:
            return
        self._processing = value
        self._listeners.emit(value)

    def build_payload(self, form_snapshot: Mapping[str, Any]) -> MediaSettings:
        """Validate the form snapshot into the settings value sent to the backend.

        Video snapshots are laid over the last stored video settings so fields
        the form does not carry (the favorite lists) survive.  Image snapshots
        are used as they are.  Raises :class:`InvalidSettings`.
        """
        caps = self.store.capabilities
        if self.kind is JobKind.IMAGE:
            return validate_image_settings(form_snapshot, caps.image_formats)
        stored = self.store.get_video_settings()
        data = {**dict(stored), **form_snapshot} if stored is not None else dict(form_snapshot)
        return validate_video_settings(data, caps.video_formats, caps.video_codecs)

    async def submit(self, form_snapshot: Mapping[str, Any]) -> bool:
        """Start a job.  Returns ``False`` when the backend rejected it.

        Validation errors are raised before ``processing`` changes and before
        any backend call.  ``processing`` is cleared on every exit path unless
        a newer submit or a cancel already took over.
        """
        settings = self.build_payload(form_snapshot)
        self._generation += 1
        generation = self._generation
        self.last_error = None
        self._set_processing(True)
        LOGGER.info("Starting %s job: %s -> %s", self.kind.value, settings.input_directory, settings.output_directory)
        try:
            await self.bridge.call(self.kind.operation, {self.kind.payload_key: settings.to_wire()})
            LOGGER.info("%s job finished", self.kind.value.capitalize())
            return True
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.last_error = SubmissionRejected(str(exc))
            LOGGER.error("Processing failed: %s", exc)
            return False
        finally:
            if generation == self._generation:
                self._set_processing(False)

    def cancel(self) -> asyncio.Task:
        """Clear ``processing`` now and ask the backend to cancel in the background."""
        self._generation += 1
        self._set_processing(False)
        task = asyncio.ensure_future(self._send_cancel())
        self._cancel_tasks.add(task)
        task.add_done_callback(self._cancel_tasks.discard)
        return task

    async def _send_cancel(self) -> None:
        try:
            await self.bridge.call(Operation.CANCEL_PROCESS)
            LOGGER.info("Cancel request accepted for %s job", self.kind.value)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.last_error = CancellationIgnored(str(exc))
            LOGGER.warning("Failed to cancel processing: %s", exc)


__all__ = ["JobKind", "JobSubmissionController"]

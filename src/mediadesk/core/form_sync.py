"""Keeps a live form and the settings store consistent without loops.

Flow is one-way after a single seeding step:

* when the store first becomes initialized the form is reset from it, once;
* every later form change pushes a complete settings value into the store;
* the store never writes back into the form.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from mediadesk.core.events import Subscription
from mediadesk.core.forms import MediaForm
from mediadesk.core.job_controller import JobKind
from mediadesk.core.settings_store import INITIALIZED, SettingsStore
from mediadesk.models import ImageSettings, MediaSettings, VideoSettings, settings_from_snapshot

LOGGER = logging.getLogger("mediadesk.form_sync")


class FormSyncAdapter:
    def __init__(self, form: MediaForm, store: SettingsStore, kind: JobKind):
        self.form = form
        self.store = store
        self.kind = kind
        self._seeded = False
        self._closed = False
        self._store_sub: Optional[Subscription] = None
        self._form_sub: Optional[Subscription] = None

    @property
    def seeded(self) -> bool:
        return self._seeded

    def bind(self) -> "FormSyncAdapter":
        if self._closed:
            raise RuntimeError("FormSyncAdapter is closed")
        if self._form_sub is not None:
            return self
        self._form_sub = self.form.watch(self._on_form_change)
        if self.store.is_initialized:
            self._seed()
        else:
            self._store_sub = self.store.subscribe(self._on_store_event)
        return self

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for sub in (self._form_sub, self._store_sub):
            if sub is not None:
                sub.unsubscribe()
        self._form_sub = None
        self._store_sub = None
        LOGGER.debug("%s form sync closed", self.kind.value)

    def _stored_settings(self) -> Optional[MediaSettings]:
        if self.kind is JobKind.IMAGE:
            return self.store.get_image_settings()
        return self.store.get_video_settings()

    def _on_store_event(self, event: str) -> None:
        if event == INITIALIZED and not self._closed:
            self._seed()

    def _seed(self) -> None:
        if self._seeded:
            return
        settings = self._stored_settings()
        if settings is None:
            return
        self._seeded = True
        if self._store_sub is not None:
            self._store_sub.unsubscribe()
            self._store_sub = None
        self.form.reset(settings)
        LOGGER.debug("%s form seeded from stored settings", self.kind.value)

    def _on_form_change(self, field: str, snapshot: dict[str, Any]) -> None:
        if self._closed:
            return
        if not self.store.is_initialized:
            LOGGER.debug("Discarding %s edit of %s, settings not loaded", self.kind.value, field)
            return
        if self.kind is JobKind.IMAGE:
            self.store.update_image_settings(settings_from_snapshot(ImageSettings, snapshot))
            return
        # the video form lacks the favorite lists, keep the stored ones
        current = self.store.get_video_settings()
        merged = {**dict(current), **snapshot} if current is not None else snapshot
        self.store.update_video_settings(settings_from_snapshot(VideoSettings, merged))


__all__ = ["FormSyncAdapter"]

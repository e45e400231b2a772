"""In-memory owner of the persisted media configuration.

The store is filled once from the backend (configuration plus the three
capability lists, fetched concurrently) and afterwards only changes through
``update_*_settings``.  Updates are full replacements kept in memory; the
backend persists settings itself when a job is submitted.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from pydantic import ValidationError

from mediadesk.core.events import Listeners, Subscription
from mediadesk.errors import BackendUnavailable
from mediadesk.models import AppConfig, ImageSettings, SupportedCapabilities, VideoSettings
from mediadesk.rpc.bridge import Operation, RpcBridge

LOGGER = logging.getLogger("mediadesk.settings_store")

# events passed to subscribers
INITIALIZED = "initialized"
IMAGE_SETTINGS = "image_settings"
VIDEO_SETTINGS = "video_settings"

StoreListener = Callable[[str], None]


def _consume_exception(future: asyncio.Future) -> None:
    # a caller that stopped waiting must not leave "exception never retrieved" noise
    if not future.cancelled():
        future.exception()


def _string_list(operation: str, value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        raise BackendUnavailable(f"{operation} returned {type(value).__name__}, expected a list")
    return tuple(str(item) for item in value)


class SettingsStore:
    def __init__(self, bridge: RpcBridge):
        self.bridge = bridge
        self._config: Optional[AppConfig] = None
        self._capabilities: Optional[SupportedCapabilities] = None
        self._initialized = False
        self._loading: Optional[asyncio.Future] = None
        self._listeners: Listeners[StoreListener] = Listeners("settings store")

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def capabilities(self) -> SupportedCapabilities:
        """Supported formats/codecs; empty lists until the first successful load."""
        return self._capabilities or SupportedCapabilities()

    def get_image_settings(self) -> Optional[ImageSettings]:
        """Current image settings, or ``None`` when nothing has been loaded."""
        return self._config.image_settings if self._config else None

    def get_video_settings(self) -> Optional[VideoSettings]:
        return self._config.video_settings if self._config else None

    def subscribe(self, listener: StoreListener) -> Subscription:
        return self._listeners.add(listener)

    def update_image_settings(self, settings: ImageSettings) -> None:
        """Replace the image half of the configuration.  Memory only.

        Before the first successful load there is nothing to replace and the
        value is dropped.
        """
        if self._config is None:
            LOGGER.debug("Dropping image settings update, config not loaded yet")
            return
        self._config = self._config.model_copy(update={"image_settings": settings})
        self._listeners.emit(IMAGE_SETTINGS)

    def update_video_settings(self, settings: VideoSettings) -> None:
        """Replace the video half of the configuration.  Memory only."""
        if self._config is None:
            LOGGER.debug("Dropping video settings update, config not loaded yet")
            return
        self._config = self._config.model_copy(update={"video_settings": settings})
        self._listeners.emit(VIDEO_SETTINGS)

    async def load(self) -> AppConfig:
        """Fetch configuration and capabilities from the backend.

        Concurrent callers share one in-flight load.  Raises
        :class:`BackendUnavailable` if any of the calls fail; the store then
        keeps whatever it had before (nothing, on first start).  There is no
        automatic retry, callers reload explicitly.
        """
        if self._loading is None or self._loading.done():
            self._loading = asyncio.ensure_future(self._load())
            self._loading.add_done_callback(_consume_exception)
        return await asyncio.shield(self._loading)

    async def _load(self) -> AppConfig:
        calls = [self.bridge.call(Operation.LOAD_CONFIG)]
        need_capabilities = self._capabilities is None
        if need_capabilities:
            calls += [
                self.bridge.call(Operation.GET_SUPPORTED_IMAGE_FORMATS),
                self.bridge.call(Operation.GET_SUPPORTED_VIDEO_FORMATS),
                self.bridge.call(Operation.GET_SUPPORTED_VIDEO_CODECS),
            ]

        results = await asyncio.gather(*calls, return_exceptions=True)
        for result in results:
            if isinstance(result, asyncio.CancelledError):
                raise result
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            for failure in failures:
                LOGGER.error("Failed to load config: %s", failure)
            raise BackendUnavailable(str(failures[0])) from failures[0]

        try:
            config = AppConfig.model_validate(results[0] or {})
            if need_capabilities:
                capabilities = SupportedCapabilities(
                    image_formats=_string_list(Operation.GET_SUPPORTED_IMAGE_FORMATS, results[1]),
                    video_formats=_string_list(Operation.GET_SUPPORTED_VIDEO_FORMATS, results[2]),
                    video_codecs=_string_list(Operation.GET_SUPPORTED_VIDEO_CODECS, results[3]),
                )
        except ValidationError as exc:
            LOGGER.error("Backend returned an unreadable config: %s", exc)
            raise BackendUnavailable(f"unreadable configuration: {exc}") from exc
        except BackendUnavailable as exc:
            LOGGER.error("Failed to load capabilities: %s", exc)
            raise

        self._config = config
        if need_capabilities:
            self._capabilities = capabilities
            LOGGER.info(
                "Backend supports %d image formats, %d video formats, %d video codecs",
                len(capabilities.image_formats),
                len(capabilities.video_formats),
                len(capabilities.video_codecs),
            )
        first = not self._initialized
        self._initialized = True
        LOGGER.info("Configuration %s", "loaded" if first else "reloaded")
        if first:
            self._listeners.emit(INITIALIZED)
        else:
            self._listeners.emit(IMAGE_SETTINGS)
            self._listeners.emit(VIDEO_SETTINGS)
        return config


__all__ = ["SettingsStore", "INITIALIZED", "IMAGE_SETTINGS", "VIDEO_SETTINGS"]

"""Logical backend operations and the bridge protocol the core depends on."""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable


class Operation:
    LOAD_CONFIG = "load_config"
    GET_SUPPORTED_IMAGE_FORMATS = "get_supported_image_formats"
    GET_SUPPORTED_VIDEO_FORMATS = "get_supported_video_formats"
    GET_SUPPORTED_VIDEO_CODECS = "get_supported_video_codecs"
    PROCESS_IMAGES = "process_images"
    PROCESS_VIDEOS = "process_videos"
    CANCEL_PROCESS = "cancel_process"
    GET_PROGRESS_INFO = "get_progress_info"
    SHOW_CONFIG_IN_FOLDER = "show_config_in_folder"
    SHOW_LOG_IN_FOLDER = "show_log_in_folder"


@runtime_checkable
class RpcBridge(Protocol):
    async def call(self, operation: str, payload: Optional[dict[str, Any]] = None) -> Any:
        """Invoke ``operation`` on the backend and return its decoded result.

        Implementations raise :class:`mediadesk.errors.RpcError` on failure.
        """
        ...

"""Favorite video formats and codecs.

Favorites are part of the stored video settings, not of the video form, so
toggling one writes a complete :class:`VideoSettings` straight into the store.
The form never sees these changes.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from mediadesk.core.settings_store import SettingsStore

LOGGER = logging.getLogger("mediadesk.favorites")


def order_options(options: Iterable[str], favorites: Sequence[str] = ()) -> list[str]:
    """Favorites first (in favorite order), then everything else alphabetically.

    Favorites the backend does not offer are left out.
    """
    options = list(dict.fromkeys(options))
    available = set(options)
    head = [fav for fav in dict.fromkeys(favorites) if fav in available]
    chosen = set(head)
    tail = sorted((opt for opt in options if opt not in chosen), key=str.lower)
    return head + tail


def _toggled(values: Sequence[str], value: str) -> list[str]:
    if value in values:
        return [item for item in values if item != value]
    return [*values, value]


def toggle_favorite_format(store: SettingsStore, fmt: str) -> bool:
    """Add or remove ``fmt`` from the favorite formats.  Returns ``False`` before load."""
    current = store.get_video_settings()
    if current is None:
        LOGGER.debug("Cannot toggle favorite format %s, settings not loaded", fmt)
        return False
    favorites = _toggled(current.format_favorite_list, fmt)
    store.update_video_settings(current.model_copy(update={"format_favorite_list": favorites}))
    return True


def toggle_favorite_codec(store: SettingsStore, codec: str) -> bool:
    current = store.get_video_settings()
    if current is None:
        LOGGER.debug("Cannot toggle favorite codec %s, settings not loaded", codec)
        return False
    favorites = _toggled(current.codec_favorite_list, codec)
    store.update_video_settings(current.model_copy(update={"codec_favorite_list": favorites}))
    return True


__all__ = ["order_options", "toggle_favorite_format", "toggle_favorite_codec"]

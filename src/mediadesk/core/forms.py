"""Live form state for the image and video views.

Each form is a plain dataclass whose field assignments notify watchers, so
the rest of the core can observe "any field changed" without a dynamic
key/value watch.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel

from mediadesk.core.events import Listeners, Subscription
from mediadesk.models import LogoCorner

FormWatcher = Callable[[str, dict[str, Any]], None]


@dataclass
class ObservableForm:
    def __post_init__(self) -> None:
        object.__setattr__(self, "_watchers", Listeners(type(self).__name__))
        object.__setattr__(self, "_ready", True)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or not getattr(self, "_ready", False):
            object.__setattr__(self, name, value)
            return
        if name not in self.field_names():
            raise AttributeError(f"{type(self).__name__} has no field {name!r}")
        old = getattr(self, name)
        object.__setattr__(self, name, value)
        if old != value:
            self._watchers.emit(name, self.snapshot())

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def snapshot(self) -> dict[str, Any]:
        values = {}
        for name in self.field_names():
            value = getattr(self, name)
            values[name] = list(value) if isinstance(value, list) else value
        return values

    def watch(self, callback: FormWatcher) -> Subscription:
        """Call ``callback(field_name, snapshot)`` after every field change."""
        return self._watchers.add(callback)

    def update(self, **values: Any) -> None:
        for name, value in values.items():
            setattr(self, name, value)

    def reset(self, values: Mapping[str, Any] | BaseModel) -> None:
        """Overwrite fields without notifying watchers (used for seeding)."""
        if isinstance(values, BaseModel):
            values = dict(values)
        names = self.field_names()
        for name, value in values.items():
            if name in names:
                object.__setattr__(self, name, list(value) if isinstance(value, list) else value)


@dataclass
class MediaForm(ObservableForm):
    input_directory: str = ""
    output_directory: str = ""
    search_child_folders: bool = False
    keep_child_folders_structure_in_output_directory: bool = False
    min_pixel_count: int = 1
    add_logo: bool = False
    logo_path: Optional[str] = None
    logo_scale: int = 10
    logo_x_offset_scale: int = 0
    logo_y_offset_scale: int = 0
    logo_corner: LogoCorner = LogoCorner.TOP_LEFT
    should_convert_format: bool = False
    format: str = ""
    clear_files_input_directory: bool = False
    clear_files_output_directory: bool = False
    overwrite_existing_files_output_directory: bool = False


@dataclass
class ImageForm(MediaForm):
    pass


@dataclass
class VideoForm(MediaForm):
    """Image fields plus the codec choice; favorites live in the store only."""

    format: str = "mp4"
    codec: str = "h264"
    should_convert_codec: bool = False


__all__ = ["ObservableForm", "MediaForm", "ImageForm", "VideoForm"]

"""Typed shapes exchanged with the processing backend.

The backend speaks camelCase JSON; attributes here are snake_case and the
models accept either spelling.  These models are structural only: range and
cross-field rules live in :mod:`mediadesk.validation`, so a persisted config
with, say, ``minPixelCount: 0`` still loads and is rejected only when the user
tries to submit it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Type, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class LogoCorner(str, Enum):
    TOP_LEFT = "topLeft"
    TOP_RIGHT = "topRight"
    BOTTOM_LEFT = "bottomLeft"
    BOTTOM_RIGHT = "bottomRight"

    @classmethod
    def parse(cls, value: Any) -> "LogoCorner":
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        # older configs wrote the PascalCase variant name (``TopLeft``)
        text = text[:1].lower() + text[1:]
        return cls(text)


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class MediaSettings(WireModel):
    """Fields shared by image and video jobs."""

    input_directory: str = "input"
    output_directory: str = "output"
    search_child_folders: bool = False
    keep_child_folders_structure_in_output_directory: bool = False
    min_pixel_count: int = 1080
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

    @field_validator("logo_corner", mode="before")
    @classmethod
    def _parse_corner(cls, value: Any) -> Any:
        if isinstance(value, str):
            return LogoCorner.parse(value)
        return value


class ImageSettings(MediaSettings):
    format: str = "png"


class VideoSettings(MediaSettings):
    format: str = "mp4"
    codec: str = "h264"
    should_convert_codec: bool = False
    format_favorite_list: list[str] = Field(
        default_factory=lambda: ["mkv", "mov", "mp4"],
        validation_alias=AliasChoices("formatFavoriteList", "format_favorite_list", "favorite_formats"),
        serialization_alias="formatFavoriteList",
    )
    codec_favorite_list: list[str] = Field(
        default_factory=lambda: ["h264", "hevc", "vp9"],
        validation_alias=AliasChoices("codecFavoriteList", "codec_favorite_list", "favorite_codecs"),
        serialization_alias="codecFavoriteList",
    )


class AppConfig(WireModel):
    """The persisted configuration aggregate returned by ``load_config``."""

    image_settings: ImageSettings = Field(default_factory=ImageSettings)
    video_settings: VideoSettings = Field(default_factory=VideoSettings)


@dataclass(frozen=True)
class SupportedCapabilities:
    image_formats: tuple[str, ...] = ()
    video_formats: tuple[str, ...] = ()
    video_codecs: tuple[str, ...] = ()


def _seconds(value: Any) -> Any:
    # the Rust backend serialises Duration as {"secs": .., "nanos": ..}
    if isinstance(value, Mapping) and "secs" in value:
        return float(value.get("secs", 0)) + float(value.get("nanos", 0)) / 1e9
    return value


class ProgressInfo(WireModel):
    """One progress snapshot.  Replaced wholesale on every poll, never mutated."""

    model_config = ConfigDict(frozen=True)

    status: str = ""
    current: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    percentage: float = Field(default=0.0, ge=0.0)
    items_per_second: float = Field(
        default=0.0,
        ge=0.0,
        validation_alias=AliasChoices("itemsPerSecond", "items_per_second", "imagesPerSecond", "images_per_second"),
        serialization_alias="itemsPerSecond",
    )
    elapsed_time: float = Field(default=0.0, ge=0.0)
    estimated_remaining: Optional[float] = Field(default=None, ge=0.0)

    @field_validator("elapsed_time", "estimated_remaining", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> Any:
        return _seconds(value)

    @model_validator(mode="after")
    def _check_counts(self) -> "ProgressInfo":
        if self.current > self.total:
            raise ValueError(f"current ({self.current}) exceeds total ({self.total})")
        return self

    @property
    def is_complete(self) -> bool:
        return self.percentage >= 100.0


SettingsT = TypeVar("SettingsT", bound=MediaSettings)


def settings_from_snapshot(model: Type[SettingsT], snapshot: Mapping[str, Any]) -> SettingsT:
    """Build a settings value from form fields without validating it.

    In-progress edits are allowed to be invalid; the validator only runs on
    submission.
    """
    known = {name: value for name, value in snapshot.items() if name in model.model_fields}
    return model.model_construct(**known)


__all__ = [
    "LogoCorner",
    "MediaSettings",
    "ImageSettings",
    "VideoSettings",
    "AppConfig",
    "SupportedCapabilities",
    "ProgressInfo",
    "settings_from_snapshot",
]

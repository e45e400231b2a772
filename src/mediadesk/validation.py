"""Submission-time validation of media settings.

Mirrors the form schemas of the desktop client: field ranges, the
"logo requires a path" rule and membership of the chosen format/codec in the
backend's capability lists.  The core calls :func:`validate_image_settings` /
:func:`validate_video_settings` right before a job is started and never
re-derives these rules anywhere else.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from mediadesk.errors import InvalidSettings
from mediadesk.models import ImageSettings, LogoCorner, MediaSettings, VideoSettings

# used when the backend has not told us what it supports yet
DEFAULT_VIDEO_FORMATS = ("mp4", "mov", "mkv")

LOGO_PATH_REQUIRED = "Logo path is required when adding a logo"

_MESSAGES = {
    ("input_directory", None): "Selecting an input directory is required.",
    ("output_directory", None): "Selecting an output directory is required.",
    ("format", None): "Selecting a format is required.",
    ("min_pixel_count", "greater_than_equal"): "Minimum pixel count can't be lower than 1",
    ("logo_scale", "greater_than_equal"): "Logo scale can't be lower than 1",
    ("logo_scale", "less_than_equal"): "Logo scale can't be higher than 100",
    ("logo_x_offset_scale", "greater_than_equal"): "Logo X offset scale can't be lower than 0",
    ("logo_x_offset_scale", "less_than_equal"): "Logo X offset scale can't be higher than 100",
    ("logo_y_offset_scale", "greater_than_equal"): "Logo Y offset scale can't be lower than 0",
    ("logo_y_offset_scale", "less_than_equal"): "Logo Y offset scale can't be higher than 100",
}


class MediaFormSchema(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    input_directory: str = Field(min_length=1)
    output_directory: str = Field(min_length=1)
    search_child_folders: bool
    keep_child_folders_structure_in_output_directory: bool
    min_pixel_count: int = Field(ge=1)
    add_logo: bool
    logo_path: Optional[str] = None
    logo_scale: int = Field(ge=1, le=100)
    logo_x_offset_scale: int = Field(ge=0, le=100)
    logo_y_offset_scale: int = Field(ge=0, le=100)
    logo_corner: LogoCorner
    should_convert_format: bool
    format: str = Field(min_length=1)
    clear_files_input_directory: bool
    clear_files_output_directory: bool
    overwrite_existing_files_output_directory: bool


def _normalise_keys(model: Type[MediaSettings], data: Mapping[str, Any]) -> dict[str, Any]:
    by_alias = {}
    for name, info in model.model_fields.items():
        by_alias[to_camel(name)] = name
        if info.serialization_alias:
            by_alias[info.serialization_alias] = name
    return {by_alias.get(key, key): value for key, value in data.items()}


def _message(field: str, error: Mapping[str, Any]) -> str:
    return (
        _MESSAGES.get((field, error["type"]))
        or _MESSAGES.get((field, None))
        or str(error["msg"])
    )


def _check(
    model: Type[MediaSettings],
    data: Mapping[str, Any],
    formats: Iterable[str],
    codecs: Optional[Iterable[str]] = None,
):
    values = _normalise_keys(model, data)
    errors: dict[str, str] = {}
    if isinstance(values.get("logo_corner"), str):
        try:
            values["logo_corner"] = LogoCorner.parse(values["logo_corner"])
        except ValueError:
            pass

    try:
        MediaFormSchema.model_validate(values)
    except ValidationError as exc:
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else "form"
            errors.setdefault(to_camel(field), _message(field, error))

    if values.get("add_logo") and not str(values.get("logo_path") or "").strip():
        errors.setdefault("logoPath", LOGO_PATH_REQUIRED)

    allowed = tuple(formats)
    fmt = values.get("format")
    if allowed and fmt and "format" not in errors and fmt not in allowed:
        errors["format"] = f"Unsupported format '{fmt}'"

    if codecs is not None:
        allowed_codecs = tuple(codecs)
        codec = values.get("codec")
        if allowed_codecs and codec not in allowed_codecs:
            errors["codec"] = f"Unsupported codec '{codec}'"

    if errors:
        raise InvalidSettings(errors)
    try:
        return model.model_validate(values)
    except ValidationError as exc:
        raise InvalidSettings(
            {to_camel(str(e["loc"][0])) if e["loc"] else "form": str(e["msg"]) for e in exc.errors()}
        ) from exc


def validate_image_settings(data: Mapping[str, Any], formats: Iterable[str] = ()) -> ImageSettings:
    """Return a typed :class:`ImageSettings` or raise :class:`InvalidSettings`."""
    return _check(ImageSettings, data, formats)


def validate_video_settings(
    data: Mapping[str, Any],
    formats: Iterable[str] = (),
    codecs: Iterable[str] = (),
) -> VideoSettings:
    formats = tuple(formats) or DEFAULT_VIDEO_FORMATS
    return _check(VideoSettings, data, formats, codecs)


__all__ = [
    "DEFAULT_VIDEO_FORMATS",
    "LOGO_PATH_REQUIRED",
    "MediaFormSchema",
    "validate_image_settings",
    "validate_video_settings",
]

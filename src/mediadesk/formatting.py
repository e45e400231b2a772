"""Human readable progress text shared by the Qt panel and the CLI."""

from __future__ import annotations

import math

from mediadesk.models import ProgressInfo


def format_time(seconds: float) -> str:
    """``3723.5`` -> ``"1h 2m 3.500s"``; hours and minutes only when non-zero."""
    seconds = max(0.0, float(seconds))
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    rest = math.fmod(seconds, 60.0)
    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    parts.append(f"{rest:.3f}s")
    return " ".join(parts)


def describe_progress(info: ProgressInfo, separator: str = "  |  ") -> str:
    parts = [
        info.status or "Processing",
        f"{info.items_per_second:.1f} items/sec",
        f"Elapsed: {format_time(info.elapsed_time)}",
    ]
    if info.estimated_remaining:
        parts.append(f"Remaining: {format_time(info.estimated_remaining)}")
    parts.append(f"{info.current} / {info.total} ({info.percentage:.1f}%)")
    return separator.join(parts)


__all__ = ["format_time", "describe_progress"]

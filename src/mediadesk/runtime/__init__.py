"""Runtime storage helpers for user-generated data."""

from .storage import (  # noqa: F401
    ensure_runtime_dirs,
    logs_path,
    settings_path,
    storage_root,
)

__all__ = [
    "ensure_runtime_dirs",
    "logs_path",
    "settings_path",
    "storage_root",
]

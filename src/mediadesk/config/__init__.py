"""Client-side configuration for mediadesk."""

from .client_config import (  # noqa: F401
    ClientConfig,
    load_client_config,
    save_client_config,
)

__all__ = ["ClientConfig", "load_client_config", "save_client_config"]

"""YAML-backed tunables for the desktop client.

These are settings of the client itself (where the backend lives, how often
progress is polled, how long a finished progress bar lingers).  The media
settings the user edits are owned by the backend and cached in
:class:`mediadesk.core.settings_store.SettingsStore`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from mediadesk.runtime.storage import ensure_runtime_dirs, settings_path

LOGGER = logging.getLogger("mediadesk.config")

BACKEND_URL_ENV = "MEDIADESK_BACKEND_URL"
DEFAULT_BACKEND_URL = "http://127.0.0.1:8765"
MIN_GRACE_PERIOD = 2.0
MAX_GRACE_PERIOD = 5.0


def _read_template() -> str:
    template = resources.files("mediadesk.config").joinpath("client.example.yaml")
    return template.read_text(encoding="utf-8")


@dataclass
class ClientConfig:
    backend_url: str = DEFAULT_BACKEND_URL
    rpc_timeout: float = 30.0
    rpc_max_retries: int = 2
    rpc_backoff: float = 0.5
    poll_rate_hz: float = 60.0
    hide_grace_period: float = 5.0
    log_level: str = "INFO"

    @property
    def poll_interval(self) -> float:
        return 1.0 / self.poll_rate_hz

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ClientConfig":
        backend_url = os.environ.get(BACKEND_URL_ENV) or str(raw.get("backend_url") or DEFAULT_BACKEND_URL)
        poll_rate_hz = float(raw.get("poll_rate_hz", 60))
        if poll_rate_hz <= 0:
            LOGGER.warning("poll_rate_hz must be positive, got %s; using 60", poll_rate_hz)
            poll_rate_hz = 60.0
        grace = float(raw.get("hide_grace_period", 5.0))
        clamped = min(MAX_GRACE_PERIOD, max(MIN_GRACE_PERIOD, grace))
        if clamped != grace:
            LOGGER.warning("hide_grace_period %.2fs outside %.0f-%.0fs, using %.2fs",
                           grace, MIN_GRACE_PERIOD, MAX_GRACE_PERIOD, clamped)
        return cls(
            backend_url=backend_url.rstrip("/"),
            rpc_timeout=float(raw.get("rpc_timeout", 30)),
            rpc_max_retries=max(0, int(raw.get("rpc_max_retries", 2))),
            rpc_backoff=float(raw.get("rpc_backoff", 0.5)),
            poll_rate_hz=poll_rate_hz,
            hide_grace_period=clamped,
            log_level=str(raw.get("log_level", "INFO")).upper(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "backend_url": self.backend_url,
            "rpc_timeout": self.rpc_timeout,
            "rpc_max_retries": self.rpc_max_retries,
            "rpc_backoff": self.rpc_backoff,
            "poll_rate_hz": self.poll_rate_hz,
            "hide_grace_period": self.hide_grace_period,
            "log_level": self.log_level,
        }


def load_client_config(path: str | Path | None = None):
    """Load the client config, copying the template on first use."""
    ensure_runtime_dirs()
    cfg_path = Path(path) if path else settings_path("client.yaml")
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    created = False
    if not cfg_path.exists():
        cfg_path.write_text(_read_template(), encoding="utf-8")
        created = True
        LOGGER.info("Created default client config at %s", cfg_path)
    data = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        LOGGER.warning("Ignoring malformed client config %s", cfg_path)
        data = {}
    return ClientConfig.from_dict(data), cfg_path, created


def save_client_config(config: ClientConfig, path: str | Path | None = None) -> Path:
    """Persist the client config to disk."""
    cfg_path = Path(path) if path else settings_path("client.yaml")
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    with cfg_path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(config.to_dict(), fh, allow_unicode=True, sort_keys=False)
    return cfg_path

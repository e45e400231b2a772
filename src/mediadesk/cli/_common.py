"""Shared bootstrap for CLI commands: client config, logging, bridge."""

from __future__ import annotations

import logging
from typing import Optional

from mediadesk.config.client_config import ClientConfig, load_client_config
from mediadesk.rpc.http_bridge import HttpRpcBridge
from mediadesk.runtime.storage import logs_path
from mediadesk.utils.logging import setup_logging

LOG_FILE_NAME = "mediadesk.log"

_state: dict[str, Optional[str]] = {"log_level": None}


def set_log_level(level: Optional[str]) -> None:
    _state["log_level"] = level


def bootstrap() -> ClientConfig:
    config, cfg_path, created = load_client_config()
    setup_logging(_state["log_level"] or config.log_level, logs_path(LOG_FILE_NAME))
    if created:
        logging.getLogger("mediadesk.cli").info("Wrote default client config to %s", cfg_path)
    return config


def make_bridge(config: ClientConfig) -> HttpRpcBridge:
    return HttpRpcBridge.from_config(config)

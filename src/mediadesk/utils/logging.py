"""Root logging setup shared by the CLI and the desktop shell."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """Log to stdout, and also to ``log_file`` when one is given.

    Replaces any handlers installed earlier, so calling it twice is safe.
    """
    numeric = getattr(logging, str(level).upper(), logging.INFO)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=numeric, format=LOG_FORMAT, handlers=handlers, force=True)
    # urllib3 is chatty at DEBUG because the progress poll runs 60 times a second
    logging.getLogger("urllib3").setLevel(max(numeric, logging.WARNING))

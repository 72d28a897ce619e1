"""File-based debug logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FILENAME = "h_debug.log"


def setup_file_logging(output_dir: Path) -> Path:
    """Send everything under the ``h`` logger to a debug file in *output_dir*."""
    log_path = output_dir / LOG_FILENAME
    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root = logging.getLogger("h")
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)
    logging.getLogger("h.cli").info("Debug logging started → %s", log_path)
    return log_path

"""Filesystem helpers."""

from __future__ import annotations

import logging
import time
from pathlib import Path

logger = logging.getLogger(__name__)


def ensure_directory(path: Path) -> Path:
    """Create a directory if it does not exist."""

    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)
    return path


def default_sheet_filename(timestamp_ms: int | None = None) -> str:
    """Return ``spritesheet-<epoch ms>.png``."""

    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"spritesheet-{timestamp_ms}.png"


def with_suffix(path: Path, suffix: str) -> Path:
    if not suffix.startswith("."):
        suffix = "." + suffix
    return path.with_suffix(suffix)

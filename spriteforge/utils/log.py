"""Logging setup shared by applications embedding the pipeline."""

from __future__ import annotations

import logging

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
    )
    logging.getLogger("spriteforge").setLevel(level)

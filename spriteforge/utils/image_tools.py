"""Pillow conversions between pixel buffers and images."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image

from ..core import PixelBuffer
from . import file_tools

logger = logging.getLogger(__name__)

RESAMPLE = Image.Resampling.BILINEAR


def to_image(buffer: PixelBuffer) -> Image.Image:
    return Image.frombytes("RGBA", buffer.size, buffer.data)


def from_image(image: Image.Image) -> PixelBuffer:
    rgba = image.convert("RGBA")
    return PixelBuffer(width=rgba.width, height=rgba.height, data=rgba.tobytes())


def resize(buffer: PixelBuffer, width: int, height: int, resample=RESAMPLE) -> Image.Image:
    """Scale a buffer into a width x height RGBA image."""

    image = to_image(buffer)
    if image.size == (width, height):
        return image
    return image.resize((width, height), resample=resample)


def load_image(path: Path) -> PixelBuffer:
    """Load an image file as an RGBA buffer."""

    if not path.exists():
        raise FileNotFoundError(path)
    with Image.open(path) as image:
        return from_image(image)


def save_png(buffer: PixelBuffer, path: Path) -> Path:
    """Persist a buffer as PNG."""

    file_tools.ensure_directory(path.parent)
    to_image(buffer).save(path, format="PNG")
    logger.debug("Saved %sx%s image to %s", buffer.width, buffer.height, path)
    return path

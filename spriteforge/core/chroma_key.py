"""Chroma key alpha matting.

Pixels close to the key colour (Euclidean distance in RGB) become
transparent, a linear band beyond that fades back to opaque, and everything
else keeps its alpha. RGB channels are never touched.
"""

from __future__ import annotations

import logging

import numpy as np

from . import ChromaKeySettings, PixelBuffer
from .errors import ValidationError
from ..utils import validators

logger = logging.getLogger(__name__)

# sqrt(255**2 * 3), rounded
MAX_RGB_DISTANCE = 442
SMOOTHNESS_RANGE = 100
DEFAULT_KEY_COLOR = (0, 255, 0)


def parse_key_color(value: str) -> tuple[int, int, int]:
    """Lenient '#rrggbb' parser; anything unparseable means green."""

    try:
        return validators.parse_hex_color(value)
    except ValidationError:
        return DEFAULT_KEY_COLOR


def format_key_color(rgb: tuple[int, int, int]) -> str:
    r, g, b = rgb
    return f"#{r:02x}{g:02x}{b:02x}"


def thresholds(settings: ChromaKeySettings) -> tuple[float, float]:
    """Return (threshold, smoothing range) in RGB distance units."""

    return settings.similarity * MAX_RGB_DISTANCE, settings.smoothness * SMOOTHNESS_RANGE


def key_alpha(distance: np.ndarray, alpha: np.ndarray, threshold: float, smooth_range: float) -> np.ndarray:
    """Compute output alpha for colour distances against the key."""

    out = alpha.copy()
    inside = distance < threshold
    out[inside] = 0
    if smooth_range > 0:
        band = ~inside & (distance < threshold + smooth_range)
        ramp = np.floor((distance[band] - threshold) / smooth_range * 255)
        out[band] = ramp.astype(np.uint8)
    return out


def apply_chroma_key(buffer: PixelBuffer, settings: ChromaKeySettings) -> PixelBuffer:
    """Return a new buffer with the key colour keyed out. The input is left untouched."""

    if not settings.enabled:
        return buffer.copy()

    pixels = buffer.to_array()
    rgb = pixels[..., :3].astype(np.float64)
    key = np.asarray(settings.key_color, dtype=np.float64)
    distance = np.sqrt(np.sum((rgb - key) ** 2, axis=-1))

    threshold, smooth_range = thresholds(settings)
    pixels[..., 3] = key_alpha(distance, pixels[..., 3], threshold, smooth_range)
    logger.debug(
        "Keyed %sx%s buffer against %s (threshold %.1f, band %.1f)",
        buffer.width,
        buffer.height,
        format_key_color(settings.key_color),
        threshold,
        smooth_range,
    )
    return PixelBuffer.from_array(pixels)

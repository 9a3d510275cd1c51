"""Validation helpers for user inputs."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from ..core.errors import InvalidRangeError, InvalidVideoError, ValidationError


ALLOWED_VIDEO_EXTENSIONS = {".mp4", ".mov", ".avi", ".mkv", ".webm"}
_HEX_COLOR = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)


def validate_video_path(path: Path) -> Path:
    """Ensure the video path exists and appears to be a supported format."""

    if not path:
        raise InvalidVideoError(Path("<unset>"), reason="No path provided")
    if not path.exists():
        raise InvalidVideoError(path, reason="File not found")
    if path.suffix.lower() not in ALLOWED_VIDEO_EXTENSIONS:
        raise InvalidVideoError(path, reason="Unsupported format")
    return path


def validate_time_range(start: float, end: float, duration: Optional[float] = None) -> None:
    """Ensure 0 <= start < end (<= duration when known)."""

    if start < 0:
        raise InvalidRangeError(f"Start time must be zero or greater, got {start}")
    if end <= start:
        raise InvalidRangeError(f"End time must be greater than start time ({start} >= {end})")
    if duration is not None and end > duration:
        raise InvalidRangeError(f"End time {end} exceeds clip duration {duration}")


def validate_fps(fps: float) -> None:
    if fps <= 0:
        raise InvalidRangeError(f"Frames per second must be greater than zero, got {fps}")


def parse_hex_color(value: str) -> tuple[int, int, int]:
    """Parse '#rrggbb' (leading '#' optional) into an RGB triple."""

    match = _HEX_COLOR.match(value.strip())
    if not match:
        raise ValidationError(f"Color must be #RRGGBB, got {value!r}")
    return tuple(int(part, 16) for part in match.groups())  # type: ignore


def parse_color_tuple(value: str | None) -> Optional[tuple[int, int, int]]:
    """Parse an RGB color string like '0,255,0' or '#00ff00'."""

    if value is None or value.strip() == "":
        return None
    if value.strip().startswith("#") or _HEX_COLOR.match(value.strip()):
        return parse_hex_color(value)
    parts = [p.strip() for p in value.split(",")]
    if len(parts) != 3:
        raise ValidationError("Key color must be R,G,B")
    try:
        numbers = [int(p) for p in parts]
    except ValueError as exc:
        raise ValidationError("Key color must be numeric R,G,B") from exc
    if any(n < 0 or n > 255 for n in numbers):
        raise ValidationError("Key color values must be between 0 and 255")
    return tuple(numbers)  # type: ignore

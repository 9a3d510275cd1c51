"""Frame sources: the seek/capture boundary and a moviepy-backed implementation."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from pathlib import Path
from typing import Protocol

import numpy as np

from . import PixelBuffer
from .errors import InvalidVideoError, ProcessingError
from ..utils import validators

logger = logging.getLogger(__name__)


class FrameSource(Protocol):
    """Anything that can seek to a timestamp and hand back the decoded frame."""

    def seek(self, timestamp: float) -> "Future[None]":
        """Start seeking; the returned future resolves once the frame is ready."""

    def capture_current_frame(self) -> PixelBuffer:
        """Return the frame at the last completed seek, at native resolution."""

    def duration(self) -> float:
        """Clip length in seconds."""


def completed_future() -> "Future[None]":
    future: Future[None] = Future()
    future.set_result(None)
    return future


class MoviePyFrameSource:
    """Decode frames from a video file with moviepy.

    Seeking is synchronous for moviepy, so :meth:`seek` returns an already
    completed future.
    """

    def __init__(self, video_path: Path):
        self.video_path = validators.validate_video_path(Path(video_path))
        _ensure_ffmpeg_available()
        clip_class = _resolve_video_file_clip()
        try:
            self._clip = clip_class(str(self.video_path))
            width, height = self._clip.size
            self._duration = float(getattr(self._clip, "duration", 0.0) or 0.0)
        except Exception as exc:  # pragma: no cover - backend dependent
            raise InvalidVideoError(self.video_path, reason=f"Could not read metadata: {exc}") from exc
        self.size = (int(width), int(height))
        self.fps = float(getattr(self._clip, "fps", 24.0) or 24.0)
        self._position = 0.0
        logger.debug(
            "Opened %s -> %sx%s @ %sfps, %ss",
            self.video_path,
            width,
            height,
            self.fps,
            self._duration,
        )

    def duration(self) -> float:
        return self._duration

    @property
    def position(self) -> float:
        return self._position

    def seek(self, timestamp: float) -> "Future[None]":
        # get_frame past the last decodable frame repeats or fails, so stay just inside the clip
        self._position = min(max(0.0, timestamp), max(self._duration - 0.001, 0.0))
        return completed_future()

    def capture_current_frame(self) -> PixelBuffer:
        try:
            frame_array = self._clip.get_frame(self._position)
        except Exception as exc:
            raise ProcessingError(f"Failed to decode frame at {self._position:.3f}s: {exc}") from exc
        return PixelBuffer.from_array(np.asarray(frame_array))

    def close(self) -> None:
        if self._clip is not None:
            self._clip.close()
            self._clip = None

    def __enter__(self) -> "MoviePyFrameSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _ensure_ffmpeg_available() -> None:
    """Raise a friendly error if ffmpeg is missing."""

    try:
        from moviepy.config import FFMPEG_BINARY  # type: ignore
    except ModuleNotFoundError as exc:  # pragma: no cover
        raise ProcessingError("moviepy is not installed. Run pip install spriteforge.") from exc

    if not FFMPEG_BINARY:
        raise ProcessingError("ffmpeg not found. Install ffmpeg and ensure it is on PATH.")


def _resolve_video_file_clip():
    """Import VideoFileClip from supported moviepy locations."""

    try:
        from moviepy.editor import VideoFileClip  # type: ignore
        return VideoFileClip
    except ModuleNotFoundError:
        try:
            from moviepy.video.io.VideoFileClip import VideoFileClip  # type: ignore
            return VideoFileClip
        except ModuleNotFoundError as exc:  # pragma: no cover
            raise ProcessingError("moviepy is not installed. Run pip install spriteforge.") from exc

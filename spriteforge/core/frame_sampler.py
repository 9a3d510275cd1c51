"""Sample frames from a frame source at a fixed rate over a time window."""

from __future__ import annotations

import logging
import math
import threading
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Iterator, Optional

from . import Frame, SampleResult
from .errors import CaptureTimeoutError
from .frame_source import FrameSource
from ..utils import validators

logger = logging.getLogger(__name__)

MAX_FRAME_CAP = 200
MIN_PROGRESS_SPAN = 0.1
SEEK_TIMEOUT_SECONDS = 10.0
_DRIFT = 1e-9

ProgressCallback = Callable[[int], None]


def sample_times(start: float, end: float, fps: float) -> Iterator[float]:
    """Yield ``start + i/fps`` for every i that stays within ``end``."""

    interval = 1.0 / fps
    index = 0
    while True:
        cursor = start + index * interval
        if cursor > end + _DRIFT:
            return
        yield min(cursor, end)
        index += 1


def expected_frame_count(start: float, end: float, fps: float, cap: int = MAX_FRAME_CAP) -> int:
    """Number of frames :func:`sample` produces for a window, cap included."""

    count = math.floor((end - start) * fps + _DRIFT) + 1
    return min(count, cap)


def _progress_percent(cursor: float, start: float, end: float) -> int:
    span = max(MIN_PROGRESS_SPAN, end - start)
    return min(100, round((cursor - start) / span * 100))


def sample(
    source: FrameSource,
    start: float,
    end: float,
    fps: float,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[threading.Event] = None,
    seek_timeout: float = SEEK_TIMEOUT_SECONDS,
    cap: int = MAX_FRAME_CAP,
) -> SampleResult:
    """Seek through ``[start, end]`` every ``1/fps`` seconds and capture each frame.

    Every captured frame starts out selected. Sampling stops early, keeping
    what was captured, when ``cap`` frames exist or ``cancel`` is set. A seek
    that does not finish within ``seek_timeout`` raises
    :class:`CaptureTimeoutError` carrying the frames captured so far. The
    source is seeked back to ``start`` afterwards in every case.
    """

    validators.validate_fps(fps)
    validators.validate_time_range(start, end, source.duration())

    logger.info("Sampling %.3fs-%.3fs at %s fps", start, end, fps)
    frames: list[Frame] = []
    truncated = False
    cancelled = False
    try:
        for cursor in sample_times(start, end, fps):
            if cancel is not None and cancel.is_set():
                logger.info("Sampling cancelled after %s frames", len(frames))
                cancelled = True
                break
            if len(frames) >= cap:
                logger.warning("Capping frames to %s for memory safety", cap)
                truncated = True
                break

            try:
                source.seek(cursor).result(timeout=seek_timeout)
            except FutureTimeoutError as exc:
                raise CaptureTimeoutError(cursor, seek_timeout, frames) from exc

            frames.append(Frame(timestamp=cursor, pixels=source.capture_current_frame()))
            logger.debug("Captured frame %s at %.3fs", len(frames), cursor)
            if progress is not None:
                progress(_progress_percent(cursor, start, end))
    finally:
        source.seek(start)

    if progress is not None and not cancelled:
        progress(100)
    logger.info("Sampled %s frames", len(frames))
    return SampleResult(frames=tuple(frames), truncated=truncated, cancelled=cancelled)

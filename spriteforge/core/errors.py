"""Domain-specific exceptions for the sprite sheet pipeline."""

from pathlib import Path
from typing import Sequence


class InvalidVideoError(ValueError):
    """Raised when the selected video file is missing or unreadable."""

    def __init__(self, path: Path, reason: str | None = None):
        message = f"Invalid video file: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ValidationError(ValueError):
    """Raised when user-provided settings fail validation."""


class InvalidRangeError(ValidationError):
    """Raised when a sampling window or rate is out of bounds."""


class InvalidLayoutError(ValidationError):
    """Raised when sheet layout settings cannot produce a grid."""


class EmptySelectionError(ValueError):
    """Raised when a sheet is requested with no frames selected."""

    def __init__(self, message: str = "No frames selected"):
        super().__init__(message)


class FrameNotFoundError(KeyError):
    """Raised when a frame id is not part of the session."""


class ProcessingError(RuntimeError):
    """Raised when the pipeline fails unexpectedly."""


class CaptureTimeoutError(ProcessingError):
    """Raised when a seek never reports completion.

    ``frames`` holds everything captured before the stalled seek.
    """

    def __init__(self, timestamp: float, timeout: float, frames: Sequence = ()):
        super().__init__(f"Seek to {timestamp:.3f}s did not complete within {timeout}s")
        self.timestamp = timestamp
        self.frames = tuple(frames)


class PipelineBusyError(ProcessingError):
    """Raised when an operation overlaps an in-flight extract or generate."""


class DimensionMismatchWarning(UserWarning):
    """Selected frames do not share the reference resolution."""

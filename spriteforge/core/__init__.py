"""Core data model for frame sampling, chroma keying and sheet packing."""

__all__ = [
    "PixelBuffer",
    "Frame",
    "ChromaKeySettings",
    "OutputMode",
    "SheetLayoutSettings",
    "CellPlacement",
    "SpriteSheet",
    "SampleResult",
]

import uuid
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

CHANNELS = 4


@dataclass(frozen=True)
class PixelBuffer:
    """Row-major RGBA pixels, four bytes per pixel."""

    width: int
    height: int
    data: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Buffer dimensions must be positive, got {self.width}x{self.height}")
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))
        expected = self.width * self.height * CHANNELS
        if len(self.data) != expected:
            raise ValueError(f"Buffer holds {len(self.data)} bytes, expected {expected}")

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def to_array(self) -> np.ndarray:
        """Return a writable (height, width, 4) uint8 copy of the pixels."""

        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, CHANNELS).copy()

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Build a buffer from an (h, w, 3|4) array; RGB input gets an opaque alpha channel."""

        if array.ndim != 3 or array.shape[2] not in (3, CHANNELS):
            raise ValueError(f"Expected an (h, w, 3|4) array, got shape {array.shape}")
        pixels = np.clip(array, 0, 255).astype(np.uint8)
        if pixels.shape[2] == 3:
            alpha = np.full(pixels.shape[:2] + (1,), 255, dtype=np.uint8)
            pixels = np.concatenate([pixels, alpha], axis=2)
        height, width = pixels.shape[:2]
        return cls(width=width, height=height, data=np.ascontiguousarray(pixels).tobytes())

    @classmethod
    def filled(cls, width: int, height: int, color: tuple[int, int, int, int]) -> "PixelBuffer":
        return cls(width=width, height=height, data=bytes(color) * (width * height))

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        offset = (y * self.width + x) * CHANNELS
        r, g, b, a = self.data[offset : offset + CHANNELS]
        return r, g, b, a

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(width=self.width, height=self.height, data=bytes(bytearray(self.data)))


@dataclass
class Frame:
    """A captured video frame. ``pixels`` is never modified after capture."""

    timestamp: float
    pixels: PixelBuffer
    selected: bool = True
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass(frozen=True)
class ChromaKeySettings:
    """Key colour and tolerances used to make a background transparent."""

    enabled: bool = True
    key_color: tuple[int, int, int] = (0, 255, 0)
    similarity: float = 0.25
    smoothness: float = 0.1
    spill: float = 0.1  # reserved, not read by the keyer


class OutputMode(str, Enum):
    SCALE = "scale"
    FIXED = "fixed"


@dataclass(frozen=True)
class SheetLayoutSettings:
    """Grid layout and cell sizing for a generated sheet."""

    columns: int = 5
    padding: int = 2
    output_mode: OutputMode = OutputMode.SCALE
    scale: float = 0.5
    fixed_width: int = 128
    fixed_height: int = 128


@dataclass(frozen=True)
class CellPlacement:
    """Where one frame landed on the sheet."""

    frame_id: str
    index: int
    timestamp: float
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class SpriteSheet:
    """A packed grid image and the geometry used to build it."""

    width: int
    height: int
    pixels: PixelBuffer
    columns: int
    rows: int
    cell_width: int
    cell_height: int
    padding: int
    placements: tuple[CellPlacement, ...] = ()


@dataclass(frozen=True)
class SampleResult:
    """Frames produced by one sampling run."""

    frames: tuple[Frame, ...]
    truncated: bool = False
    cancelled: bool = False

    def __len__(self) -> int:
        return len(self.frames)

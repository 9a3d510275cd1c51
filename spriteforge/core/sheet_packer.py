"""Sprite sheet composition using Pillow."""

from __future__ import annotations

import logging
import math
import warnings
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence

from PIL import Image

from . import (
    CellPlacement,
    ChromaKeySettings,
    Frame,
    OutputMode,
    SheetLayoutSettings,
    SpriteSheet,
)
from .chroma_key import apply_chroma_key
from .errors import DimensionMismatchWarning, EmptySelectionError, InvalidLayoutError
from ..utils import image_tools

logger = logging.getLogger(__name__)


def validate_layout(layout: SheetLayoutSettings) -> None:
    """Reject layouts that cannot produce a grid."""

    if layout.columns < 1:
        raise InvalidLayoutError(f"Columns must be at least 1, got {layout.columns}")
    if layout.padding < 0:
        raise InvalidLayoutError(f"Padding must be zero or greater, got {layout.padding}")
    if layout.output_mode == OutputMode.FIXED:
        if layout.fixed_width <= 0 or layout.fixed_height <= 0:
            raise InvalidLayoutError(
                f"Fixed cell size must be positive, got {layout.fixed_width}x{layout.fixed_height}"
            )
    elif layout.output_mode == OutputMode.SCALE:
        if not 0 < layout.scale <= 1:
            raise InvalidLayoutError(f"Scale must be in (0, 1], got {layout.scale}")
    else:
        raise InvalidLayoutError(f"Unknown output mode: {layout.output_mode!r}")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def cell_size(original_width: int, original_height: int, layout: SheetLayoutSettings) -> tuple[int, int]:
    """Target cell dimensions for a given source resolution."""

    if layout.output_mode == OutputMode.FIXED:
        return layout.fixed_width, layout.fixed_height
    width = max(1, _round_half_up(original_width * layout.scale))
    height = max(1, _round_half_up(original_height * layout.scale))
    return width, height


def grid_geometry(
    count: int, columns: int, cell_width: int, cell_height: int, padding: int
) -> tuple[int, int, int]:
    """Return (rows, sheet width, sheet height) for ``count`` cells."""

    rows = math.ceil(count / columns)
    width = columns * cell_width + (columns - 1) * padding
    height = rows * cell_height + (rows - 1) * padding
    return rows, width, height


def cell_origin(index: int, columns: int, cell_width: int, cell_height: int, padding: int) -> tuple[int, int]:
    col = index % columns
    row = index // columns
    return col * (cell_width + padding), row * (cell_height + padding)


def select_frames(frames: Iterable[Frame]) -> List[Frame]:
    """Selected frames in their current order."""

    selected = [frame for frame in frames if frame.selected]
    if not selected:
        raise EmptySelectionError("No frames selected for the sprite sheet")
    return selected


def _render_cell(frame: Frame, chroma: ChromaKeySettings, width: int, height: int) -> Image.Image:
    keyed = apply_chroma_key(frame.pixels, chroma)
    return image_tools.resize(keyed, width, height)


def _warn_mismatched(frames: Sequence[Frame], reference: tuple[int, int]) -> None:
    for index, frame in enumerate(frames):
        if frame.pixels.size != reference:
            message = (
                f"Frame {index} is {frame.pixels.width}x{frame.pixels.height}, "
                f"expected {reference[0]}x{reference[1]}; stretching into cell"
            )
            logger.warning(message)
            warnings.warn(message, DimensionMismatchWarning, stacklevel=3)


def pack(
    frames: Iterable[Frame],
    chroma: ChromaKeySettings,
    layout: SheetLayoutSettings,
    max_workers: Optional[int] = None,
) -> SpriteSheet:
    """Pack selected frames, chroma keyed and resized, into a row-major grid.

    Cells beyond the last frame stay fully transparent. Source frames are
    only read; the sheet is always a fresh buffer.
    """

    validate_layout(layout)
    selected = select_frames(frames)

    reference = selected[0].pixels.size
    cell_w, cell_h = cell_size(*reference, layout)
    columns = layout.columns
    pad = layout.padding
    rows, sheet_width, sheet_height = grid_geometry(len(selected), columns, cell_w, cell_h, pad)
    _warn_mismatched(selected, reference)

    logger.info(
        "Packing %s frames into %sx%s grid of %sx%s cells (%sx%s px)",
        len(selected),
        columns,
        rows,
        cell_w,
        cell_h,
        sheet_width,
        sheet_height,
    )

    def render(frame: Frame) -> Image.Image:
        return _render_cell(frame, chroma, cell_w, cell_h)

    if max_workers and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            cells = list(pool.map(render, selected))
    else:
        cells = [render(frame) for frame in selected]

    sheet = Image.new("RGBA", (sheet_width, sheet_height), (0, 0, 0, 0))
    placements: list[CellPlacement] = []
    for index, (frame, cell) in enumerate(zip(selected, cells)):
        x, y = cell_origin(index, columns, cell_w, cell_h, pad)
        sheet.paste(cell, (x, y))
        placements.append(
            CellPlacement(
                frame_id=frame.id,
                index=index,
                timestamp=frame.timestamp,
                x=x,
                y=y,
                width=cell_w,
                height=cell_h,
            )
        )

    return SpriteSheet(
        width=sheet_width,
        height=sheet_height,
        pixels=image_tools.from_image(sheet),
        columns=columns,
        rows=rows,
        cell_width=cell_w,
        cell_height=cell_h,
        padding=pad,
        placements=tuple(placements),
    )

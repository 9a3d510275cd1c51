"""Session orchestration: extract frames, edit the collection, preview and generate."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from . import ChromaKeySettings, Frame, PixelBuffer, SampleResult, SheetLayoutSettings, SpriteSheet
from . import frame_sampler, manifest_writer, sheet_packer
from .chroma_key import apply_chroma_key
from .errors import CaptureTimeoutError, FrameNotFoundError, PipelineBusyError
from .config import PipelineConfig
from .frame_source import FrameSource
from ..utils import file_tools, image_tools

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """Files written for one exported sheet."""

    image_path: Path
    manifest_path: Optional[Path] = None


class SpriteSheetPipeline:
    """Holds the ordered frame collection for one video source.

    Collection edits (select, move, remove) only reorder or flag frames;
    nothing is re-rendered until :meth:`generate` is called.
    """

    def __init__(
        self,
        source: FrameSource,
        max_workers: Optional[int] = None,
        seek_timeout: float = frame_sampler.SEEK_TIMEOUT_SECONDS,
    ):
        self.source = source
        self.max_workers = max_workers
        self.seek_timeout = seek_timeout
        self._frames: list[Frame] = []
        self._busy = threading.Lock()

    @contextmanager
    def _exclusive(self, operation: str) -> Iterator[None]:
        if not self._busy.acquire(blocking=False):
            raise PipelineBusyError(f"Cannot {operation} while another operation is running")
        try:
            yield
        finally:
            self._busy.release()

    @property
    def frames(self) -> tuple[Frame, ...]:
        return tuple(self._frames)

    @property
    def selected_frames(self) -> tuple[Frame, ...]:
        return tuple(frame for frame in self._frames if frame.selected)

    def extract(
        self,
        start: float,
        end: float,
        fps: float,
        progress: Optional[frame_sampler.ProgressCallback] = None,
        cancel: Optional[threading.Event] = None,
    ) -> SampleResult:
        """Replace the collection with freshly sampled frames."""

        with self._exclusive("extract"):
            try:
                result = frame_sampler.sample(
                    self.source,
                    start,
                    end,
                    fps,
                    progress=progress,
                    cancel=cancel,
                    seek_timeout=self.seek_timeout,
                )
            except CaptureTimeoutError as exc:
                self._frames = list(exc.frames)
                logger.error("Extraction aborted, kept %s frames: %s", len(exc.frames), exc)
                raise
            self._frames = list(result.frames)
            return result

    def get_frame(self, frame_id: str) -> Frame:
        for frame in self._frames:
            if frame.id == frame_id:
                return frame
        raise FrameNotFoundError(frame_id)

    def preview_frame(self, index: int, chroma: ChromaKeySettings) -> PixelBuffer:
        """Chroma key one frame at native resolution without storing the result."""

        return apply_chroma_key(self._frames[index].pixels, chroma)

    def sample_color(self, index: int, x: int, y: int) -> tuple[int, int, int]:
        """Read the RGB colour under (x, y) of a frame's original capture."""

        pixels = self._frames[index].pixels
        x = min(max(0, int(x)), pixels.width - 1)
        y = min(max(0, int(y)), pixels.height - 1)
        r, g, b, _ = pixels.pixel(x, y)
        return r, g, b

    def generate(self, layout: SheetLayoutSettings, chroma: ChromaKeySettings) -> SpriteSheet:
        """Pack the selected frames, reprocessing every one from its original capture."""

        with self._exclusive("generate"):
            return sheet_packer.pack(self._frames, chroma, layout, max_workers=self.max_workers)

    def toggle_selection(self, index: int) -> Frame:
        with self._exclusive("edit frames"):
            frame = self._frames[index]
            frame.selected = not frame.selected
            return frame

    def set_selected(self, index: int, selected: bool) -> Frame:
        with self._exclusive("edit frames"):
            frame = self._frames[index]
            frame.selected = selected
            return frame

    def select_all(self, selected: bool = True) -> None:
        with self._exclusive("edit frames"):
            for frame in self._frames:
                frame.selected = selected

    def move_frame(self, source_index: int, target_index: int) -> None:
        """Take the frame at ``source_index`` out and insert it at ``target_index``."""

        with self._exclusive("edit frames"):
            count = len(self._frames)
            if not -count <= source_index < count:
                raise IndexError(f"Frame index {source_index} out of range")
            frame = self._frames.pop(source_index)
            self._frames.insert(target_index, frame)

    def remove_frame(self, frame_id: str) -> Frame:
        with self._exclusive("edit frames"):
            for index, frame in enumerate(self._frames):
                if frame.id == frame_id:
                    return self._frames.pop(index)
            raise FrameNotFoundError(frame_id)

    def export(self, sheet: SpriteSheet, path: Optional[Path] = None, manifest: bool = False) -> ExportResult:
        """Write the sheet as PNG, plus an optional JSON manifest beside it."""

        image_path = file_tools.with_suffix(Path(path or file_tools.default_sheet_filename()), ".png")
        image_tools.save_png(sheet.pixels, image_path)
        logger.info("Wrote spritesheet to %s", image_path)
        manifest_path = manifest_writer.write_manifest(sheet, image_path) if manifest else None
        return ExportResult(image_path=image_path, manifest_path=manifest_path)


def run(source: FrameSource, config: PipelineConfig) -> SpriteSheet:
    """Extract and pack in one go using a loaded :class:`PipelineConfig`."""

    pipeline = SpriteSheetPipeline(source, max_workers=config.max_workers)
    start, end = config.extraction.window(source.duration())
    pipeline.extract(start, end, config.extraction.fps)
    return pipeline.generate(config.layout.to_settings(), config.chroma.to_settings())

from concurrent.futures import Future

import pytest

from spriteforge.core import Frame, PixelBuffer
from spriteforge.core.frame_source import completed_future


class FakeFrameSource:
    """In-memory source whose frame colour encodes the seek position."""

    def __init__(self, duration=10.0, width=4, height=3, stall_after=None):
        self._duration = duration
        self.width = width
        self.height = height
        self.stall_after = stall_after
        self.seeks = []
        self.position = 0.0

    def duration(self):
        return self._duration

    def seek(self, timestamp):
        self.seeks.append(timestamp)
        if self.stall_after is not None and len(self.seeks) > self.stall_after:
            return Future()
        self.position = timestamp
        return completed_future()

    def capture_current_frame(self):
        shade = int(self.position * 10) % 256
        return PixelBuffer.filled(self.width, self.height, (shade, 0, 0, 255))


@pytest.fixture
def fake_source():
    return FakeFrameSource()


def solid_frame(color, width=4, height=4, selected=True, timestamp=0.0):
    return Frame(timestamp=timestamp, pixels=PixelBuffer.filled(width, height, color), selected=selected)


@pytest.fixture
def make_source():
    return FakeFrameSource


@pytest.fixture
def make_frame():
    return solid_frame

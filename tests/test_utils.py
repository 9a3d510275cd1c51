import logging

import numpy as np
import pytest
from PIL import Image

from spriteforge.core import PixelBuffer
from spriteforge.core.errors import InvalidRangeError, ValidationError
from spriteforge.utils import file_tools, image_tools, log, validators


def test_pixel_buffer_rejects_wrong_length():
    with pytest.raises(ValueError):
        PixelBuffer(width=2, height=2, data=bytes(15))


def test_pixel_buffer_array_roundtrip_adds_alpha():
    rgb = np.array([[[1, 2, 3], [4, 5, 6]]], dtype=np.uint8)
    buffer = PixelBuffer.from_array(rgb)
    assert buffer.size == (2, 1)
    assert buffer.pixel(1, 0) == (4, 5, 6, 255)
    array = buffer.to_array()
    array[0, 0, 0] = 99
    assert buffer.pixel(0, 0) == (1, 2, 3, 255)


def test_image_tools_resize_and_save(tmp_path):
    buffer = PixelBuffer.filled(2, 2, (10, 20, 30, 255))
    assert image_tools.resize(buffer, 6, 4).size == (6, 4)
    path = image_tools.save_png(buffer, tmp_path / "nested" / "cell.png")
    assert image_tools.load_image(path) == buffer
    with pytest.raises(FileNotFoundError):
        image_tools.load_image(tmp_path / "missing.png")


def test_from_image_converts_mode():
    image = Image.new("RGB", (3, 1), (7, 8, 9))
    assert image_tools.from_image(image).pixel(2, 0) == (7, 8, 9, 255)


def test_default_sheet_filename():
    assert file_tools.default_sheet_filename(1234) == "spritesheet-1234.png"
    assert file_tools.default_sheet_filename().startswith("spritesheet-")


def test_validate_time_range():
    validators.validate_time_range(0.0, 1.0, 1.0)
    with pytest.raises(InvalidRangeError):
        validators.validate_time_range(1.0, 1.0)
    with pytest.raises(InvalidRangeError):
        validators.validate_time_range(0.0, 2.0, 1.0)


def test_parse_color_tuple():
    assert validators.parse_color_tuple("#00ff00") == (0, 255, 0)
    assert validators.parse_color_tuple("00ff00") == (0, 255, 0)
    assert validators.parse_color_tuple(" 1, 2, 3 ") == (1, 2, 3)
    assert validators.parse_color_tuple("") is None
    with pytest.raises(ValidationError):
        validators.parse_color_tuple("1,2")
    with pytest.raises(ValidationError):
        validators.parse_color_tuple("1,2,256")


def test_configure_logging_sets_package_level():
    log.configure_logging(logging.DEBUG)
    assert logging.getLogger("spriteforge").level == logging.DEBUG
    log.configure_logging()
    assert logging.getLogger("spriteforge").level == logging.INFO

import numpy as np
import pytest

from spriteforge.core import ChromaKeySettings, PixelBuffer
from spriteforge.core.chroma_key import (
    apply_chroma_key,
    format_key_color,
    key_alpha,
    parse_key_color,
    thresholds,
)

GREEN = ChromaKeySettings(enabled=True, key_color=(0, 255, 0), similarity=0.25, smoothness=0.1)


def _row(*pixels):
    return PixelBuffer(width=len(pixels), height=1, data=bytes(c for p in pixels for c in p))


def test_disabled_returns_identical_copy():
    source = _row((0, 255, 0, 255), (10, 20, 30, 40))
    result = apply_chroma_key(source, ChromaKeySettings(enabled=False))
    assert result == source
    assert result is not source
    assert apply_chroma_key(result, ChromaKeySettings(enabled=False)).data == source.data


def test_key_colour_becomes_transparent_and_keeps_rgb():
    result = apply_chroma_key(_row((0, 255, 0, 255)), GREEN)
    assert result.pixel(0, 0) == (0, 255, 0, 0)


def test_grey_far_from_green_stays_opaque():
    threshold, smooth = thresholds(GREEN)
    assert threshold == pytest.approx(110.5)
    assert smooth == pytest.approx(10.0)
    result = apply_chroma_key(_row((128, 128, 128, 255)), GREEN)
    assert result.pixel(0, 0) == (128, 128, 128, 255)


def test_alpha_outside_band_is_left_unchanged():
    result = apply_chroma_key(_row((255, 0, 255, 77)), GREEN)
    assert result.pixel(0, 0) == (255, 0, 255, 77)


def test_band_alpha_matches_linear_ramp():
    # distance 115 sits 4.5 into a 10 wide band above threshold 110.5
    result = apply_chroma_key(_row((0, 140, 0, 255)), GREEN)
    assert result.pixel(0, 0)[3] == int(np.floor(4.5 / 10 * 255))


def test_band_alpha_is_monotonic_in_distance():
    threshold, smooth = thresholds(GREEN)
    distance = np.linspace(threshold, threshold + smooth - 1e-6, 50)
    alpha = key_alpha(distance, np.full(distance.shape, 255, dtype=np.uint8), threshold, smooth)
    assert alpha[0] == 0
    assert np.all(np.diff(alpha.astype(int)) >= 0)
    assert alpha[-1] < 255


def test_zero_smoothness_is_a_hard_cutoff():
    settings = ChromaKeySettings(key_color=(0, 255, 0), similarity=0.25, smoothness=0.0)
    result = apply_chroma_key(_row((0, 255, 0, 255), (0, 140, 0, 255)), settings)
    assert result.pixel(0, 0)[3] == 0
    assert result.pixel(1, 0)[3] == 255


def test_zero_similarity_and_smoothness_keys_nothing():
    settings = ChromaKeySettings(key_color=(0, 255, 0), similarity=0.0, smoothness=0.0)
    result = apply_chroma_key(_row((0, 255, 0, 255)), settings)
    assert result.pixel(0, 0)[3] == 255


def test_spill_does_not_change_output():
    source = _row((0, 250, 10, 255), (0, 140, 0, 255), (90, 90, 90, 255))
    low = apply_chroma_key(source, ChromaKeySettings(spill=0.0))
    high = apply_chroma_key(source, ChromaKeySettings(spill=1.0))
    assert low.data == high.data


def test_apply_is_deterministic_and_leaves_input_untouched():
    rng = np.random.default_rng(7)
    source = PixelBuffer.from_array(rng.integers(0, 256, size=(6, 5, 4), dtype=np.uint8))
    before = source.data
    first = apply_chroma_key(source, GREEN)
    second = apply_chroma_key(source, GREEN)
    assert first.data == second.data
    assert source.data == before


def test_parse_and_format_key_color():
    assert parse_key_color("#00FF00") == (0, 255, 0)
    assert parse_key_color("ff8000") == (255, 128, 0)
    assert parse_key_color("not a colour") == (0, 255, 0)
    assert format_key_color((255, 128, 0)) == "#ff8000"

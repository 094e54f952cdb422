import pytest

from colorbook.engine.pixel import (
    EXACT_WHITE,
    Pixel,
    coerce_pixel,
    is_line_pixel,
    is_near_white_interior,
    luminance,
)


def test_luminance_uses_integer_weights():
    assert luminance(Pixel(0, 0, 0, 255)) == 0
    assert luminance(EXACT_WHITE) == 255
    assert luminance(Pixel(100, 150, 200, 255)) == 140


def test_line_pixel_needs_dark_and_opaque():
    assert is_line_pixel(Pixel(0, 0, 0, 255))
    assert is_line_pixel(Pixel(39, 39, 39, 201))
    assert not is_line_pixel(Pixel(40, 40, 40, 255))
    assert not is_line_pixel(Pixel(0, 0, 0, 200))


def test_near_white_interior_thresholds():
    assert is_near_white_interior(Pixel(236, 236, 236, 255))
    assert not is_near_white_interior(Pixel(235, 235, 235, 255))
    assert not is_near_white_interior(Pixel(250, 250, 250, 200))


def test_pixels_compare_on_all_channels():
    assert Pixel(1, 2, 3, 4) == Pixel(1, 2, 3, 4)
    assert Pixel(1, 2, 3, 4) != Pixel(1, 2, 3, 5)
    assert len({Pixel(1, 2, 3, 4), Pixel(1, 2, 3, 4)}) == 1


def test_coerce_pixel_accepts_rgb_and_rgba():
    assert coerce_pixel((255, 0, 0)) == Pixel(255, 0, 0, 255)
    assert coerce_pixel([1, 2, 3, 4]) == Pixel(1, 2, 3, 4)
    assert coerce_pixel(EXACT_WHITE) is EXACT_WHITE


def test_coerce_pixel_rejects_bad_values():
    with pytest.raises(ValueError):
        coerce_pixel((1, 2))
    with pytest.raises(ValueError):
        coerce_pixel((256, 0, 0))

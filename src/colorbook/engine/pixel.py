from __future__ import annotations

from typing import NamedTuple


# --- Classification thresholds ---
LINE_LUMINANCE_MAX = 40
LINE_ALPHA_MIN = 200
WHITE_LUMINANCE_MIN = 235
INTERIOR_ALPHA_MIN = 200


class Pixel(NamedTuple):
    r: int
    g: int
    b: int
    a: int = 255


EXACT_WHITE = Pixel(255, 255, 255, 255)
TRANSPARENT = Pixel(0, 0, 0, 0)


def luminance(p: Pixel) -> int:
    return (p[0] * 299 + p[1] * 587 + p[2] * 114) // 1000


def is_line_pixel(p: Pixel) -> bool:
    """Dark, mostly opaque pixels are boundaries: never filled, never crossed."""
    return luminance(p) < LINE_LUMINANCE_MAX and p[3] > LINE_ALPHA_MIN


def is_near_white_interior(p: Pixel) -> bool:
    return luminance(p) > WHITE_LUMINANCE_MIN and p[3] > INTERIOR_ALPHA_MIN


def coerce_pixel(value: object) -> Pixel:
    """Accept a Pixel, an (r, g, b) or an (r, g, b, a) sequence."""
    if isinstance(value, Pixel):
        return value
    channels = [int(channel) for channel in value]  # type: ignore[attr-defined]
    if len(channels) == 3:
        channels.append(255)
    if len(channels) != 4 or any(channel < 0 or channel > 255 for channel in channels):
        raise ValueError(f"not an RGBA color: {value!r}")
    return Pixel(*channels)

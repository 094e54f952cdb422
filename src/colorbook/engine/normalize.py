from __future__ import annotations

from typing import Iterable, List, Set

from colorbook.engine.pixel import EXACT_WHITE, Pixel, is_line_pixel, is_near_white_interior


# --- Majority cleanup ---
MAJORITY_WHITE_COUNT = 5
MAJORITY_GUARD_LINE_COUNT = 4


def normalize(pixels: List[Pixel], width: int, height: int) -> int:
    """Clean up freshly loaded line art in place and return how many pixels changed.

    Near-white interior pixels snap to opaque white, then a 3x3 majority
    vote whitens speckles. The vote repeats until a round changes nothing,
    so running this again on its own output is a no-op. Line pixels are
    never touched and border pixels are left out of the vote.
    """
    if width <= 0 or height <= 0 or len(pixels) != width * height:
        return 0

    changed = snap_near_white(pixels)
    if width < 3 or height < 3:
        return changed

    # Each round reads the previous round's result. Later rounds only
    # revisit the neighbours of pixels that just turned white, which is
    # where a new white majority can appear.
    candidates: Iterable[int] = (
        y * width + x for y in range(1, height - 1) for x in range(1, width - 1)
    )
    while True:
        promoted = [idx for idx in candidates if _majority_white(pixels, width, idx)]
        if not promoted:
            break
        for idx in promoted:
            pixels[idx] = EXACT_WHITE
        changed += len(promoted)
        candidates = _interior_neighbours(promoted, width, height)
    return changed


def snap_near_white(pixels: List[Pixel]) -> int:
    changed = 0
    for idx, p in enumerate(pixels):
        if p == EXACT_WHITE or is_line_pixel(p):
            continue
        if is_near_white_interior(p):
            pixels[idx] = EXACT_WHITE
            changed += 1
    return changed


def _majority_white(pixels: List[Pixel], width: int, idx: int) -> bool:
    center = pixels[idx]
    if center == EXACT_WHITE or is_line_pixel(center):
        return False

    white_count = 0
    line_count = 0
    # The window includes the center pixel itself.
    for row in (idx - width, idx, idx + width):
        for n in (pixels[row - 1], pixels[row], pixels[row + 1]):
            if n == EXACT_WHITE:
                white_count += 1
            elif is_line_pixel(n):
                line_count += 1

    # Many line pixels nearby means thin detail; keep it.
    if line_count >= MAJORITY_GUARD_LINE_COUNT:
        return False
    return white_count >= MAJORITY_WHITE_COUNT


def _interior_neighbours(indices: Iterable[int], width: int, height: int) -> List[int]:
    found: Set[int] = set()
    for idx in indices:
        cy, cx = divmod(idx, width)
        for y in range(max(1, cy - 1), min(height - 2, cy + 1) + 1):
            for x in range(max(1, cx - 1), min(width - 2, cx + 1) + 1):
                found.add(y * width + x)
    return sorted(found)

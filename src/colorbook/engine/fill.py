from __future__ import annotations

from collections import deque
from enum import Enum
from typing import Deque, Dict, List, Optional, Tuple

from colorbook.engine.history import Delta, DeltaBatch
from colorbook.engine.pixel import Pixel, is_line_pixel

Point = Tuple[int, int]


class Outcome(Enum):
    LOADED = "loaded"
    FILLED = "filled"
    APPLIED = "applied"
    OUT_OF_BOUNDS = "out_of_bounds"
    NO_ELIGIBLE_SEED = "no_eligible_seed"
    NO_OP_TARGET = "no_op_target"
    EMPTY_HISTORY = "empty_history"
    UNLOADED = "unloaded"


def resolve_seed(
    pixels: List[Pixel],
    width: int,
    height: int,
    start: Point,
    color: Pixel,
) -> Tuple[Optional[Point], Outcome]:
    """Pick the pixel a fill should start from.

    A tap on a line pixel, or on a pixel that already has the fill color,
    falls back to the most common non-line color in the surrounding 3x3
    window. The window is scanned row by row and the seed moves to each cell
    whose color count beats the best so far, so on a tie the color that
    reached the top count first wins.
    """
    x, y = start
    if not (0 <= x < width and 0 <= y < height):
        return None, Outcome.OUT_OF_BOUNDS

    target = pixels[y * width + x]
    if not is_line_pixel(target) and target != color:
        return (x, y), Outcome.FILLED

    counts: Dict[Pixel, int] = {}
    best: Optional[Point] = None
    best_count = 0
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            nx = x + dx
            ny = y + dy
            if not (0 <= nx < width and 0 <= ny < height):
                continue
            p = pixels[ny * width + nx]
            if is_line_pixel(p):
                continue
            count = counts.get(p, 0) + 1
            counts[p] = count
            if count > best_count:
                best_count = count
                best = (nx, ny)

    if best is None:
        return None, Outcome.NO_ELIGIBLE_SEED
    return best, Outcome.FILLED


def flood_fill(
    pixels: List[Pixel],
    width: int,
    height: int,
    seed: Point,
    color: Pixel,
) -> Tuple[DeltaBatch, Outcome]:
    """4-connected exact-match fill from ``seed``, recording each overwrite."""
    sx, sy = seed
    if not (0 <= sx < width and 0 <= sy < height):
        return [], Outcome.OUT_OF_BOUNDS
    target = pixels[sy * width + sx]
    if is_line_pixel(target) or target == color:
        return [], Outcome.NO_OP_TARGET

    deltas: DeltaBatch = []
    queue: Deque[Point] = deque([seed])
    while queue:
        x, y = queue.popleft()
        if x < 0 or y < 0 or x >= width or y >= height:
            continue
        idx = y * width + x
        p = pixels[idx]
        if p != target or is_line_pixel(p):
            continue
        deltas.append(Delta(idx, p))
        pixels[idx] = color
        # Neighbours are validated when popped, so duplicates are harmless.
        queue.append((x + 1, y))
        queue.append((x - 1, y))
        queue.append((x, y + 1))
        queue.append((x, y - 1))
    return deltas, Outcome.FILLED

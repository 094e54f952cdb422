from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field
from itertools import chain
from typing import List, Optional, Tuple

import pygame
from PIL import Image

from colorbook.engine.fill import Outcome, flood_fill, resolve_seed
from colorbook.engine.history import Delta, DeltaBatch
from colorbook.engine.normalize import normalize
from colorbook.engine.pixel import Pixel, coerce_pixel

logger = logging.getLogger(__name__)


@dataclass
class FillResult:
    changed: int
    bitmap: Optional[pygame.Surface]
    deltas: DeltaBatch = field(default_factory=list)
    outcome: Outcome = Outcome.FILLED


@dataclass
class ApplyResult:
    bitmap: Optional[pygame.Surface]
    inverse: DeltaBatch = field(default_factory=list)


class PixelBuffer:
    """Sole owner of a width x height RGBA pixel grid.

    The grid is replaced wholesale by ``load*`` and mutated in place by
    ``fill`` and ``apply``. It is never resized otherwise. Instances are not
    thread-safe; ``ColoringSession`` serializes access.
    """

    def __init__(self) -> None:
        self._pixels: List[Pixel] = []
        self._width = 0
        self._height = 0

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def loaded(self) -> bool:
        return self._width > 0 and self._height > 0

    def size(self) -> Tuple[int, int]:
        return self._width, self._height

    def pixel(self, x: int, y: int) -> Pixel:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(f"pixel ({x}, {y}) outside {self._width}x{self._height} buffer")
        return self._pixels[y * self._width + x]

    # --- Loading ---

    def load(self, surface: pygame.Surface) -> int:
        width, height = surface.get_size()
        return self.load_rgba(width, height, pygame.image.tobytes(surface, "RGBA"))

    def load_image(self, image: Image.Image) -> int:
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        return self.load_rgba(rgba.width, rgba.height, rgba.tobytes())

    def load_rgba(self, width: int, height: int, data: bytes) -> int:
        """Replace the buffer with straight-alpha RGBA bytes and normalize it.

        Returns the number of pixels normalization changed.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"cannot load a {width}x{height} image")
        if len(data) != width * height * 4:
            raise ValueError(f"expected {width * height * 4} bytes of RGBA data, got {len(data)}")

        pixels = [Pixel._make(channels) for channels in struct.iter_unpack("4B", data)]
        normalized = normalize(pixels, width, height)

        self._pixels = pixels
        self._width = width
        self._height = height
        logger.info("Loaded %dx%d picture, normalization changed %d pixels", width, height, normalized)
        return normalized

    # --- Mutation ---

    def fill(self, x: int, y: int, color: object) -> FillResult:
        if not self.loaded:
            return FillResult(0, None, [], Outcome.UNLOADED)
        fill_color = coerce_pixel(color)

        seed, outcome = resolve_seed(self._pixels, self._width, self._height, (x, y), fill_color)
        if seed is None:
            logger.debug("Fill at (%d, %d) skipped: %s", x, y, outcome.value)
            return FillResult(0, None, [], outcome)

        deltas, outcome = flood_fill(self._pixels, self._width, self._height, seed, fill_color)
        if not deltas:
            logger.debug("Fill at (%d, %d) skipped: %s", x, y, outcome.value)
            return FillResult(0, None, [], outcome)

        logger.debug("Filled %d pixels from seed %s", len(deltas), seed)
        return FillResult(len(deltas), self.snapshot(), deltas, Outcome.FILLED)

    def apply(self, batch: DeltaBatch) -> ApplyResult:
        """Write a batch's recorded pixels back and return the batch that reverses it.

        Undo and redo both go through here.
        """
        if not self.loaded or not batch:
            return ApplyResult(None, [])
        count = len(self._pixels)
        inverse: DeltaBatch = []
        for offset, previous in batch:
            if 0 <= offset < count:
                inverse.append(Delta(offset, self._pixels[offset]))
                self._pixels[offset] = previous
        if not inverse:
            return ApplyResult(None, [])
        return ApplyResult(self.snapshot(), inverse)

    # --- Export ---

    def to_bytes(self) -> bytes:
        return bytes(chain.from_iterable(self._pixels))

    def snapshot(self) -> Optional[pygame.Surface]:
        if not self.loaded:
            return None
        return pygame.image.frombytes(self.to_bytes(), (self._width, self._height), "RGBA")

from __future__ import annotations

import logging
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Deque, List, Optional, Tuple, Union

import pygame
from PIL import Image

from colorbook.engine.buffer import PixelBuffer
from colorbook.engine.fill import Outcome
from colorbook.engine.history import REDO_MAX_DEPTH, UNDO_MAX_DEPTH, FillHistory
from colorbook.engine.pixel import Pixel

logger = logging.getLogger(__name__)

PictureSource = Union[pygame.Surface, Image.Image]


@dataclass
class SessionResult:
    generation: int
    kind: str
    outcome: Outcome
    changed: int = 0
    bitmap: Optional[pygame.Surface] = None
    position: Optional[Tuple[int, int]] = None


class ColoringSession:
    """Runs buffer mutations one at a time on a background worker.

    Every request is tagged with the generation current at submit time.
    ``load`` and ``reset`` start a new generation, and ``poll`` drops any
    finished result from an older one.
    """

    def __init__(
        self,
        *,
        undo_limit: int = UNDO_MAX_DEPTH,
        redo_limit: int = REDO_MAX_DEPTH,
        buffer: Optional[PixelBuffer] = None,
    ) -> None:
        self._buffer = buffer or PixelBuffer()
        self._history = FillHistory(undo_limit, redo_limit)
        # One worker: jobs run in submission order, never two at once.
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="colorbook-engine")
        self._lock = threading.Lock()
        self._generation = 0
        self._pending: Deque[Future] = deque()
        self._bitmap: Optional[pygame.Surface] = None

    def __enter__(self) -> ColoringSession:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def bitmap(self) -> Optional[pygame.Surface]:
        return self._bitmap

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    @property
    def history(self) -> FillHistory:
        return self._history

    def size(self) -> Tuple[int, int]:
        return self._buffer.size()

    # --- Requests ---

    def load(self, source: PictureSource) -> Future:
        return self._submit(self._load_job, source, new_generation=True)

    def fill(self, x: int, y: int, color: Pixel) -> Future:
        return self._submit(self._fill_job, x, y, color)

    def undo(self) -> Future:
        return self._submit(self._step_job, "undo")

    def redo(self) -> Future:
        return self._submit(self._step_job, "redo")

    def reset(self) -> None:
        self._submit(self._clear_job, new_generation=True)

    def poll(self) -> List[SessionResult]:
        """Collect finished results in submission order, dropping stale ones."""
        results: List[SessionResult] = []
        with self._lock:
            while self._pending and self._pending[0].done():
                future = self._pending.popleft()
                try:
                    result = future.result()
                except Exception:
                    logger.exception("Engine job failed")
                    continue
                if result is None:
                    continue
                if result.generation != self._generation:
                    logger.debug(
                        "Dropping stale %s result (generation %d, current %d)",
                        result.kind,
                        result.generation,
                        self._generation,
                    )
                    continue
                if result.bitmap is not None:
                    self._bitmap = result.bitmap
                results.append(result)
        return results

    def drain(self, timeout: Optional[float] = None) -> List[SessionResult]:
        """Wait for everything submitted so far, then poll."""
        with self._lock:
            pending = list(self._pending)
        for future in pending:
            future.exception(timeout=timeout)
        return self.poll()

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    # --- Internals ---

    def _submit(self, fn, *args, new_generation: bool = False) -> Future:
        with self._lock:
            if new_generation:
                self._generation += 1
                self._bitmap = None
            future = self._executor.submit(fn, self._generation, *args)
            self._pending.append(future)
        return future

    def _clear_job(self, _generation: int) -> None:
        self._history.clear()

    def _load_job(self, generation: int, source: PictureSource) -> SessionResult:
        self._history.clear()
        if isinstance(source, Image.Image):
            changed = self._buffer.load_image(source)
        else:
            changed = self._buffer.load(source)
        return SessionResult(generation, "load", Outcome.LOADED, changed, self._buffer.snapshot())

    def _fill_job(self, generation: int, x: int, y: int, color: Pixel) -> SessionResult:
        result = self._buffer.fill(x, y, color)
        if result.changed > 0:
            self._history.record_fill(result.deltas)
        return SessionResult(generation, "fill", result.outcome, result.changed, result.bitmap, (x, y))

    def _step_job(self, generation: int, kind: str) -> SessionResult:
        if not self._buffer.loaded:
            return SessionResult(generation, kind, Outcome.UNLOADED)
        step = self._history.undo if kind == "undo" else self._history.redo
        applied = step(self._buffer)
        if applied is None:
            return SessionResult(generation, kind, Outcome.EMPTY_HISTORY)
        return SessionResult(generation, kind, Outcome.APPLIED, len(applied.inverse), applied.bitmap)

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Deque, List, NamedTuple, Optional

from colorbook.engine.pixel import Pixel

if TYPE_CHECKING:
    from colorbook.engine.buffer import ApplyResult, PixelBuffer


# --- Tuning constants ---
UNDO_MAX_DEPTH = 10
REDO_MAX_DEPTH = 5


class Delta(NamedTuple):
    offset: int
    previous: Pixel


DeltaBatch = List[Delta]


class FillHistory:
    """Bounded undo/redo stacks of delta batches.

    Undo and redo are the same step run against opposite stacks: pop a
    batch, write its recorded values back into the buffer, and push the
    values that were overwritten onto the other stack.
    """

    def __init__(self, undo_limit: int = UNDO_MAX_DEPTH, redo_limit: int = REDO_MAX_DEPTH) -> None:
        if undo_limit < 1 or redo_limit < 1:
            raise ValueError("history limits must be at least 1")
        # deque(maxlen) drops from the left when a push overflows.
        self._undo: Deque[DeltaBatch] = deque(maxlen=undo_limit)
        self._redo: Deque[DeltaBatch] = deque(maxlen=redo_limit)

    @property
    def undo_limit(self) -> int:
        return self._undo.maxlen or 0

    @property
    def redo_limit(self) -> int:
        return self._redo.maxlen or 0

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def record_fill(self, batch: DeltaBatch) -> None:
        self._undo.append(batch)
        self._redo.clear()

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()

    def undo(self, buffer: PixelBuffer) -> Optional[ApplyResult]:
        return self._step(buffer, self._undo, self._redo)

    def redo(self, buffer: PixelBuffer) -> Optional[ApplyResult]:
        return self._step(buffer, self._redo, self._undo)

    @staticmethod
    def _step(buffer: PixelBuffer, source: Deque[DeltaBatch], dest: Deque[DeltaBatch]) -> Optional[ApplyResult]:
        if not source:
            return None
        result = buffer.apply(source.pop())
        if result.inverse:
            dest.append(result.inverse)
        return result

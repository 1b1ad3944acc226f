"""
BatchHandle — общий объект результата пакетного расчёта.

Вычисляющая сторона пишет результаты и счётчики, наблюдающая сторона
читает progress / total_collisions и может запросить отмену.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from voxbox.geombase.bounds import Bounds
from voxbox.voxels.box import Box


@dataclass
class VoxelResult:
    """Результат одного вокселя."""

    pos: int
    center: Tuple[float, float, float]
    bounds: List[Bounds] = field(default_factory=list)
    boxes: List[Box] = field(default_factory=list)
    precision: int = 0
    """Уровень разбиения, результат которого возвращён (0 — воксель пуст)."""

    @property
    def count(self) -> int:
        return len(self.bounds)

    @property
    def is_empty(self) -> bool:
        return not self.bounds


class BatchHandle:
    """
    Состояние одного прохода по всем вокселям сетки.

    Каждый воксель публикуется в свой слот results[pos] только после
    полного расчёта, поэтому отмена не требует отката.
    """

    def __init__(self, total: int):
        self._total = total
        self._lock = threading.Lock()
        self._progress = 0
        self._total_collisions = 0
        self._results: List[Optional[VoxelResult]] = [None] * total
        self._cancel_event = threading.Event()
        self._done_event = threading.Event()
        self._error: Optional[BaseException] = None

    @property
    def total(self) -> int:
        return self._total

    @property
    def progress(self) -> int:
        """Количество полностью рассчитанных вокселей."""
        with self._lock:
            return self._progress

    @property
    def total_collisions(self) -> int:
        """Сумма количеств боксов по рассчитанным вокселям."""
        with self._lock:
            return self._total_collisions

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    # ----------------------------------------------------------------
    # Отмена и завершение
    # ----------------------------------------------------------------

    def cancel_token(self) -> threading.Event:
        return self._cancel_event

    def cancel(self) -> None:
        """Запросить отмену: оставшиеся воксели не будут рассчитаны."""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def finished(self) -> bool:
        return self._done_event.is_set()

    @property
    def completed(self) -> bool:
        """Все воксели рассчитаны без отмены и ошибок."""
        return self.finished and self._error is None and self.progress == self._total

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Дождаться окончания прохода. False если истёк timeout."""
        return self._done_event.wait(timeout)

    def mark_finished(self, error: Optional[BaseException] = None) -> None:
        if error is not None:
            self._error = error
        self._done_event.set()

    # ----------------------------------------------------------------
    # Результаты
    # ----------------------------------------------------------------

    def publish(self, result: VoxelResult) -> None:
        """Записать результат вокселя и обновить счётчики."""
        with self._lock:
            self._results[result.pos] = result
            self._progress += 1
            self._total_collisions += result.count

    def result(self, pos: int) -> Optional[VoxelResult]:
        return self._results[pos]

    @property
    def results(self) -> List[Optional[VoxelResult]]:
        """Слоты по линейному индексу (None — не рассчитан)."""
        with self._lock:
            return list(self._results)

    def iter_results(self) -> Iterator[VoxelResult]:
        """Рассчитанные воксели в порядке линейного индекса."""
        for result in self.results:
            if result is not None:
                yield result

    def all_bounds(self) -> List[List[Bounds]]:
        return [r.bounds if r is not None else [] for r in self.results]

    def normalized_boxes(self) -> List[List[Box]]:
        return [r.boxes if r is not None else [] for r in self.results]

    def __repr__(self) -> str:
        state = "done" if self.finished else "running"
        if self.cancelled:
            state = "cancelled"
        return f"BatchHandle({self.progress}/{self._total}, collisions={self.total_collisions}, {state})"

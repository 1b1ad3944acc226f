"""
AABBGenerator — генерация набора AABB для каждого занятого вокселя.

Для вокселя:
1. Если воксель не занят — пустой список.
2. Начинаем с одного бокса на весь воксель.
3. Для точности 2, 4, 8, 16 разбиваем воксель на precision³ ячеек,
   собираем занятые и сливаем соседние боксы (merge_bounds).
4. Если после слияния боксов больше acceptable_aabb — возвращаем
   результат предыдущего (более грубого) уровня.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence, Tuple

import numpy as np

from voxbox import log
from voxbox.errors import GeneratorBusyError, InvalidArgument
from voxbox.geombase.bounds import Bounds
from voxbox.geombase.triangle import MeshGeometry
from voxbox.voxels.batch import BatchHandle, VoxelResult
from voxbox.voxels.box import normalize_bounds
from voxbox.voxels.grid import GridLayout
from voxbox.voxels.intersection import SHRINK_FACTOR, InsideTest, is_occupied
from voxbox.voxels.settings import GeneratorSettings

MAX_PRECISION = 16
VALID_PRECISIONS = (1, 2, 4, 8, 16)


def voxel_occupied(x: float, y: float, z: float, geometry: MeshGeometry,
                   inside_test: InsideTest = InsideTest.SIX_RAYS) -> bool:
    """Занят ли единичный воксель с центром (x, y, z)."""
    probe = Bounds.cube((x, y, z), SHRINK_FACTOR)
    return is_occupied((x, y, z), probe, geometry, inside_test)


def generate_sub_cells(
    x: float,
    y: float,
    z: float,
    precision: int,
    geometry: MeshGeometry,
    inside_test: InsideTest = InsideTest.SIX_RAYS,
) -> List[Bounds]:
    """
    Перебор precision³ подъячеек вокселя с центром (x, y, z).

    Занятость проверяется на чуть сжатой ячейке (SHRINK_FACTOR),
    в результат попадает ячейка полного размера.
    """
    full_size = 1.0 / precision
    half_size = 0.5 / precision
    slight_size = SHRINK_FACTOR / precision
    half = precision // 2

    cells = []
    for i in range(-half, half):
        for j in range(-half, half):
            for k in range(-half, half):
                center = (x + i * full_size + half_size,
                          y + j * full_size + half_size,
                          z + k * full_size + half_size)
                probe = Bounds.cube(center, slight_size)
                if is_occupied(center, probe, geometry, inside_test):
                    cells.append(Bounds.cube(center, full_size))
    return cells


def _first_mergeable(
    index: int,
    lo: int,
    hi: int,
    mins: np.ndarray,
    maxs: np.ndarray,
    volumes: np.ndarray,
    alive: np.ndarray,
) -> int:
    """Первый живой слот в [lo, hi), сливающийся с index без потери объёма; -1 если нет."""
    if lo >= hi:
        return -1
    span = slice(lo, hi)
    size = np.maximum(maxs[span], maxs[index]) - np.minimum(mins[span], mins[index])
    enclosing = size[:, 0] * size[:, 1] * size[:, 2]
    ok = alive[span] & (enclosing == volumes[span] + volumes[index])
    hits = np.flatnonzero(ok)
    return lo + int(hits[0]) if len(hits) else -1


def merge_bounds(bounds: Sequence[Bounds]) -> List[Bounds]:
    """
    Жадное слияние боксов до неподвижной точки.

    Два бокса сливаются в охватывающий, если его объём в точности равен
    сумме их объёмов (боксы вплотную и образуют прямоугольный бокс).
    Берётся первая по порядку строка, у которой есть партнёр, и первый
    партнёр; результат добавляется в конец, исходные удаляются.

    Слоты массивов повторяют порядок списка: удалённые помечаются
    мёртвыми, новые пишутся в конец. Строки до текущей уже проверены
    против всех боксов, поэтому после слияния им достаточно проверить
    только новый бокс.
    """
    n = len(bounds)
    if n < 2:
        return list(bounds)

    capacity = 2 * n
    mins = np.zeros((capacity, 3), dtype=np.float64)
    maxs = np.zeros((capacity, 3), dtype=np.float64)
    mins[:n] = [b.min for b in bounds]
    maxs[:n] = [b.max for b in bounds]
    size = maxs - mins
    volumes = size[:, 0] * size[:, 1] * size[:, 2]
    alive = np.zeros(capacity, dtype=bool)
    alive[:n] = True

    count = n
    row = 0
    while row < count:
        if not alive[row]:
            row += 1
            continue

        partner = _first_mergeable(row, row + 1, count, mins, maxs, volumes, alive)
        if partner < 0:
            row += 1
            continue

        slot = count
        count += 1
        mins[slot] = np.minimum(mins[row], mins[partner])
        maxs[slot] = np.maximum(maxs[row], maxs[partner])
        extent = maxs[slot] - mins[slot]
        volumes[slot] = extent[0] * extent[1] * extent[2]
        alive[row] = False
        alive[partner] = False
        alive[slot] = True

        earlier = _first_mergeable(slot, 0, row, mins, maxs, volumes, alive)
        if earlier >= 0:
            row = earlier

    result = []
    for slot in np.flatnonzero(alive[:count]):
        if slot < n:
            result.append(bounds[slot])
        else:
            result.append(Bounds.from_min_max(mins[slot], maxs[slot]))
    return result


def calculate_sub_block_aabb(
    x: float,
    y: float,
    z: float,
    precision: int,
    geometry: MeshGeometry,
    inside_test: InsideTest = InsideTest.SIX_RAYS,
) -> List[Bounds]:
    """Занятые подъячейки уровня precision после слияния."""
    return merge_bounds(generate_sub_cells(x, y, z, precision, geometry, inside_test))


def calculate_block_aabb(
    x: float,
    y: float,
    z: float,
    geometry: MeshGeometry,
    acceptable_aabb: int,
    inside_test: InsideTest = InsideTest.SIX_RAYS,
) -> Tuple[List[Bounds], int]:
    """
    Адаптивный набор боксов вокселя с центром (x, y, z).

    Returns:
        (боксы, уровень точности результата); ([], 0) для пустого вокселя.
    """
    if not voxel_occupied(x, y, z, geometry, inside_test):
        return [], 0

    previous = [Bounds.cube((x, y, z), 1.0)]
    previous_precision = 1
    precision = 2
    while precision <= MAX_PRECISION:
        current = calculate_sub_block_aabb(x, y, z, precision, geometry, inside_test)
        if len(current) > acceptable_aabb:
            log.debug(
                f"[AABBGenerator] ({x}, {y}, {z}): {len(current)} boxes at precision {precision} "
                f"> {acceptable_aabb}, keeping precision {previous_precision}"
            )
            return previous, previous_precision
        previous = current
        previous_precision = precision
        precision *= 2
    return previous, previous_precision


class AABBGenerator:
    """
    Генератор коллизионных боксов для меша.

    reset() задаёт геометрию и раскладку сетки; после этого доступны
    одиночные запросы (calculate_single, calculate_block) и пакетный
    проход calculate_all / start_calculate_all.
    """

    def __init__(self) -> None:
        self._geometry: Optional[MeshGeometry] = None
        self._layout: Optional[GridLayout] = None
        self._settings = GeneratorSettings()
        self._state_lock = threading.Lock()
        self._active: Optional[BatchHandle] = None
        self._thread: Optional[threading.Thread] = None
        self.collisions = 0
        """Количество боксов последнего одиночного запроса."""

    # ----------------------------------------------------------------
    # Конфигурация
    # ----------------------------------------------------------------

    def reset(self, mesh, settings: Optional[GeneratorSettings] = None) -> bool:
        """
        Задать меш и настройки.

        Args:
            mesh: Mesh (vertices, indices, normals) или готовая MeshGeometry.
            settings: Настройки; None — текущие.

        Returns:
            True если конфигурация обновлена. Пустой меш — no-op (False).

        Raises:
            GeneratorBusyError: Идёт пакетный проход.
            InvalidArgument: Некорректные настройки.
        """
        with self._state_lock:
            if self._active is not None:
                raise GeneratorBusyError("Cannot reset generator while a batch pass is running")

        if settings is None:
            settings = self._settings
        settings.validate()

        if mesh is None:
            log.warn("[AABBGenerator] reset without mesh ignored")
            return False

        if isinstance(mesh, MeshGeometry):
            geometry = mesh
        else:
            geometry = MeshGeometry.from_arrays(mesh.vertices, mesh.indices, getattr(mesh, "normals", None))

        if len(geometry) == 0:
            log.warn("[AABBGenerator] reset with empty mesh ignored")
            return False

        min_corner, max_corner = geometry.bounds()
        layout = GridLayout.from_bounds(min_corner, max_corner, settings)

        with self._state_lock:
            if self._active is not None:
                raise GeneratorBusyError("Cannot reset generator while a batch pass is running")
            self._geometry = geometry
            self._layout = layout
            self._settings = settings
            self.collisions = 0

        log.info(
            f"[AABBGenerator] reset: {len(geometry)} triangles, grid "
            f"{layout.width}x{layout.height}x{layout.length}, order {layout.axis_order.name}"
        )
        return True

    @property
    def geometry(self) -> Optional[MeshGeometry]:
        return self._geometry

    @property
    def layout(self) -> Optional[GridLayout]:
        return self._layout

    @property
    def settings(self) -> GeneratorSettings:
        return self._settings

    @property
    def is_configured(self) -> bool:
        return self._geometry is not None

    @property
    def is_running(self) -> bool:
        with self._state_lock:
            return self._active is not None

    def _require_configured(self) -> Tuple[MeshGeometry, GridLayout, GeneratorSettings]:
        with self._state_lock:
            if self._geometry is None or self._layout is None:
                raise InvalidArgument("Generator has no mesh; call reset() first")
            return self._geometry, self._layout, self._settings

    # ----------------------------------------------------------------
    # Адресация
    # ----------------------------------------------------------------

    def block_pos_to_local_x(self, pos: int) -> int:
        return self._require_configured()[1].pos_to_local(pos)[0]

    def block_pos_to_local_y(self, pos: int) -> int:
        return self._require_configured()[1].pos_to_local(pos)[1]

    def block_pos_to_local_z(self, pos: int) -> int:
        return self._require_configured()[1].pos_to_local(pos)[2]

    def block_pos_to_world(self, pos: int) -> Tuple[float, float, float]:
        return self._require_configured()[1].pos_to_world(pos)

    # ----------------------------------------------------------------
    # Одиночные запросы
    # ----------------------------------------------------------------

    def is_block_occupied(self, x: float, y: float, z: float) -> bool:
        geometry, _, settings = self._require_configured()
        return voxel_occupied(x, y, z, geometry, settings.inside_test)

    def calculate_all_blocks(self) -> List[int]:
        """Линейные индексы всех занятых вокселей сетки."""
        geometry, layout, settings = self._require_configured()
        occupied = []
        for pos in range(layout.voxel_count):
            x, y, z = layout.pos_to_world(pos)
            if voxel_occupied(x, y, z, geometry, settings.inside_test):
                occupied.append(pos)
        return occupied

    def calculate_single(self, x: float, y: float, z: float, precision: int) -> List[Bounds]:
        """
        Боксы одного вокселя при фиксированной точности.

        precision == 1: весь воксель, если он занят. Иначе — занятые
        подъячейки без слияния.
        """
        geometry, _, settings = self._require_configured()
        _check_precision(precision)
        if precision == 1:
            if voxel_occupied(x, y, z, geometry, settings.inside_test):
                return [Bounds.cube((x, y, z), 1.0)]
            return []
        return generate_sub_cells(x, y, z, precision, geometry, settings.inside_test)

    def calculate_sub_block(self, x: float, y: float, z: float, precision: int) -> List[Bounds]:
        """Занятые подъячейки уровня precision после слияния."""
        geometry, _, settings = self._require_configured()
        _check_precision(precision)
        if precision == 1:
            result = self.calculate_single(x, y, z, 1)
        else:
            result = calculate_sub_block_aabb(x, y, z, precision, geometry, settings.inside_test)
        self.collisions = len(result)
        return result

    def calculate_block(self, x: float, y: float, z: float) -> Tuple[List[Bounds], int]:
        """Адаптивный набор боксов вокселя (см. calculate_block_aabb)."""
        geometry, _, settings = self._require_configured()
        result, precision = calculate_block_aabb(
            x, y, z, geometry, settings.acceptable_aabb, settings.inside_test
        )
        self.collisions = len(result)
        return result, precision

    def calculate_voxel(self, pos: int) -> VoxelResult:
        geometry, layout, settings = self._require_configured()
        return _calculate_voxel(pos, geometry, layout, settings)

    # ----------------------------------------------------------------
    # Пакетный проход
    # ----------------------------------------------------------------

    def calculate_all(self, handle: Optional[BatchHandle] = None, workers: Optional[int] = None) -> BatchHandle:
        """
        Рассчитать все воксели сетки (блокирующий вызов).

        Args:
            handle: Готовый BatchHandle (для start_calculate_all); None — создать.
            workers: Количество потоков; None — из настроек.

        Returns:
            BatchHandle с результатами.
        """
        geometry, layout, settings = self._require_configured()
        if workers is None:
            workers = settings.workers
        if not isinstance(workers, int) or workers < 1:
            raise InvalidArgument(f"workers must be a positive int, got {workers!r}")

        if handle is None:
            handle = BatchHandle(layout.voxel_count)
        with self._state_lock:
            if self._active is not None and self._active is not handle:
                raise GeneratorBusyError("Another batch pass is already running")
            self._active = handle

        log.info(f"[AABBGenerator] batch pass over {layout.voxel_count} voxels, workers={workers}")

        error: Optional[BaseException] = None
        try:
            if workers == 1:
                for pos in range(layout.voxel_count):
                    if handle.cancelled:
                        break
                    handle.publish(_calculate_voxel(pos, geometry, layout, settings))
            else:
                self._run_parallel(handle, workers, geometry, layout, settings)
        except Exception as e:
            error = e
            raise
        finally:
            with self._state_lock:
                self._active = None
            handle.mark_finished(error)

        if handle.cancelled:
            log.info(f"[AABBGenerator] batch pass cancelled at {handle.progress}/{handle.total}")
        else:
            log.info(f"[AABBGenerator] batch pass done, total AABBs: {handle.total_collisions}")
        return handle

    def _run_parallel(
        self,
        handle: BatchHandle,
        workers: int,
        geometry: MeshGeometry,
        layout: GridLayout,
        settings: GeneratorSettings,
    ) -> None:
        def work(pos: int) -> None:
            if handle.cancelled:
                return
            handle.publish(_calculate_voxel(pos, geometry, layout, settings))

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="voxbox") as executor:
            futures = [executor.submit(work, pos) for pos in range(layout.voxel_count)]
            try:
                for future in as_completed(futures):
                    future.result()
            except Exception:
                handle.cancel()
                raise

    def start_calculate_all(self, workers: Optional[int] = None) -> BatchHandle:
        """
        Запустить пакетный проход в фоновом потоке.

        Returns:
            BatchHandle для наблюдения за прогрессом и отмены.
        """
        _, layout, settings = self._require_configured()
        if workers is None:
            workers = settings.workers
        if not isinstance(workers, int) or workers < 1:
            raise InvalidArgument(f"workers must be a positive int, got {workers!r}")

        handle = BatchHandle(layout.voxel_count)
        with self._state_lock:
            if self._active is not None:
                raise GeneratorBusyError("Another batch pass is already running")
            self._active = handle

        self._thread = threading.Thread(
            target=self._background_pass,
            args=(handle, workers),
            name="voxbox-batch",
            daemon=True,
        )
        self._thread.start()
        return handle

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Дождаться завершения фонового потока. False если истёк timeout."""
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def _background_pass(self, handle: BatchHandle, workers: Optional[int]) -> None:
        try:
            self.calculate_all(handle, workers)
        except Exception as e:
            log.error(e, "[AABBGenerator] batch pass failed")
            # calculate_all мог упасть до начала прохода
            with self._state_lock:
                if self._active is handle:
                    self._active = None
            if not handle.finished:
                handle.mark_finished(e)


def _check_precision(precision: int) -> None:
    if precision not in VALID_PRECISIONS:
        raise InvalidArgument(f"precision must be one of {VALID_PRECISIONS}, got {precision!r}")


def _calculate_voxel(
    pos: int,
    geometry: MeshGeometry,
    layout: GridLayout,
    settings: GeneratorSettings,
) -> VoxelResult:
    center = layout.pos_to_world(pos)
    bounds, precision = calculate_block_aabb(
        center[0], center[1], center[2], geometry, settings.acceptable_aabb, settings.inside_test
    )
    boxes = [normalize_bounds(b, center) for b in bounds]
    return VoxelResult(pos=pos, center=center, bounds=bounds, boxes=boxes, precision=precision)


__all__ = [
    "AABBGenerator",
    "MAX_PRECISION",
    "VALID_PRECISIONS",
    "calculate_block_aabb",
    "calculate_sub_block_aabb",
    "generate_sub_cells",
    "merge_bounds",
    "voxel_occupied",
]
"""
Тесты пересечения для вокселизации.

Все тесты векторизованы по треугольникам меша: луч или бокс
проверяются сразу против всех треугольников MeshGeometry.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Optional, Tuple

import numpy as np

from voxbox.geombase.bounds import Bounds
from voxbox.geombase.triangle import MeshGeometry, Triangle

# Порог для почти нулевого знаменателя в тесте луч-треугольник
EPSILON = 1e-7

# Коэффициент сжатия бокса при тесте занятости (соседние воксели касаются гранями)
SHRINK_FACTOR = 0.9999

_UNIT_AXES = np.eye(3, dtype=np.float64)

# Порядок как в исходном инструменте: вниз, вверх, влево, вправо, назад, вперёд
RAY_DIRECTIONS = (
    np.array([0.0, -1.0, 0.0]),
    np.array([0.0, 1.0, 0.0]),
    np.array([-1.0, 0.0, 0.0]),
    np.array([1.0, 0.0, 0.0]),
    np.array([0.0, 0.0, -1.0]),
    np.array([0.0, 0.0, 1.0]),
)

_UP = np.array([0.0, 1.0, 0.0])


class RayHit(IntEnum):
    """Результат теста луч-треугольник."""
    MISS = 0            # Нет пересечения (в том числе параллельный луч вне плоскости)
    HIT = 1             # Пересечение впереди начала луча
    IN_PLANE = 2        # Луч параллелен и лежит в плоскости треугольника
    DEGENERATE = -1     # Вырожденный треугольник (нулевая нормаль)


class InsideTest(Enum):
    """Вариант теста «точка внутри меша»."""
    SIX_RAYS = "six_rays"   # Все шесть осевых лучей должны попасть в меш
    PARITY = "parity"       # Один луч вверх, нечётное число уникальных попаданий


# ----------------------------------------------------------------
# Луч - треугольник
# ----------------------------------------------------------------

def ray_triangles_intersect(
    origin,
    direction,
    geometry: MeshGeometry,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Тест луча против всех треугольников (Möller–Trumbore).

    Args:
        origin: Начало луча.
        direction: Направление луча (не обязательно нормированное).
        geometry: Треугольники меша.

    Returns:
        (codes, t): codes — массив RayHit (int8) по треугольникам,
        t — параметр пересечения (nan где нет попадания).
    """
    o = np.asarray(origin, dtype=np.float64)
    d = np.asarray(direction, dtype=np.float64)

    e1 = geometry.edge1
    e2 = geometry.edge2
    n = geometry.plane_normals
    a0 = geometry.vertices[:, 0]

    degenerate = ~np.any(n != 0.0, axis=1)

    h = np.cross(d, e2)
    a = np.einsum("ij,ij->i", e1, h)
    parallel = np.abs(a) < EPSILON
    s = o - a0

    with np.errstate(divide="ignore", invalid="ignore"):
        f = 1.0 / a
        u = f * np.einsum("ij,ij->i", s, h)
        q = np.cross(s, e1)
        v = f * (q @ d)
        t = f * np.einsum("ij,ij->i", e2, q)

        hit = (
            ~degenerate
            & ~parallel
            & (u >= 0.0) & (u <= 1.0)
            & (v >= 0.0) & (u + v <= 1.0)
            & (t > EPSILON)
        )

    in_plane = ~degenerate & parallel & (np.einsum("ij,ij->i", n, s) == 0.0)

    codes = np.full(len(geometry), RayHit.MISS, dtype=np.int8)
    codes[hit] = RayHit.HIT
    codes[in_plane] = RayHit.IN_PLANE
    codes[degenerate] = RayHit.DEGENERATE

    return codes, np.where(hit, t, np.nan)


def ray_triangle_intersect(
    origin,
    direction,
    triangle: Triangle,
) -> Tuple[RayHit, Optional[np.ndarray]]:
    """
    Тест луча против одного треугольника.

    Returns:
        (RayHit, точка пересечения или None).
    """
    codes, t = ray_triangles_intersect(origin, direction, MeshGeometry([triangle]))
    code = RayHit(int(codes[0]))
    if code != RayHit.HIT:
        return code, None
    point = np.asarray(origin, dtype=np.float64) + t[0] * np.asarray(direction, dtype=np.float64)
    return code, point


def ray_hits_mesh(origin, direction, geometry: MeshGeometry) -> bool:
    """True если луч попадает хотя бы в один треугольник."""
    if len(geometry) == 0:
        return False
    codes, _ = ray_triangles_intersect(origin, direction, geometry)
    return bool(np.any(codes == RayHit.HIT))


# ----------------------------------------------------------------
# Точка внутри меша
# ----------------------------------------------------------------

def point_inside_mesh(point, geometry: MeshGeometry) -> bool:
    """
    Точка внутри, если луч в КАЖДОМ из шести осевых направлений
    попадает хотя бы в один треугольник.

    Консервативное приближение теста чётности: у границ меша и на
    тонкой/открытой геометрии может ошибаться.
    """
    for direction in RAY_DIRECTIONS:
        if not ray_hits_mesh(point, direction, geometry):
            return False
    return True


def point_inside_mesh_parity(point, geometry: MeshGeometry) -> bool:
    """
    Альтернативный тест: один луч вверх, считаем уникальные точки попадания.

    Треугольники с нормалью, перпендикулярной лучу, пропускаются.
    Совпадающие точки (луч через общее ребро) считаются один раз.
    """
    if len(geometry) == 0:
        return False

    origin = np.asarray(point, dtype=np.float64)
    codes, t = ray_triangles_intersect(origin, _UP, geometry)
    mask = (codes == RayHit.HIT) & (geometry.normals @ _UP != 0.0)
    if not np.any(mask):
        return False

    hits = origin + t[mask, None] * _UP
    unique = {tuple(p) for p in hits.tolist()}
    return len(unique) % 2 == 1


def is_inside(point, geometry: MeshGeometry, inside_test: InsideTest = InsideTest.SIX_RAYS) -> bool:
    """Выбрать вариант теста «внутри»."""
    if inside_test == InsideTest.PARITY:
        return point_inside_mesh_parity(point, geometry)
    return point_inside_mesh(point, geometry)


# ----------------------------------------------------------------
# Треугольник - AABB
# ----------------------------------------------------------------

def triangles_box_intersect(
    vertices: np.ndarray,
    box_center,
    box_extents,
) -> np.ndarray:
    """
    Тест пересечения треугольников и AABB (axis-aligned bounding box).

    Алгоритм Tomas Akenine-Möller (SAT — Separating Axis Theorem):
    9 осей cross(edge, axis), 3 оси AABB, плоскость треугольника.

    Args:
        vertices: Вершины треугольников, shape (M, 3, 3).
        box_center: Центр AABB.
        box_extents: Половина размера AABB по каждой оси.

    Returns:
        Массив bool (M,) — True где треугольник пересекает бокс.
    """
    center = np.asarray(box_center, dtype=np.float64)
    extents = np.asarray(box_extents, dtype=np.float64)

    # Переносим треугольники так, чтобы центр AABB был в origin
    v = vertices - center
    v0 = v[:, 0]
    v1 = v[:, 1]
    v2 = v[:, 2]

    # Рёбра треугольника
    f0 = v1 - v0
    f1 = v2 - v1
    f2 = v0 - v2

    separated = np.zeros(len(vertices), dtype=bool)

    # --- Тест 1: кросс-произведения рёбер ---

    # 9 осей: cross(axis_j, edge_i), например X × e = (0, -e.z, e.y)
    for edge in (f0, f1, f2):
        for unit in _UNIT_AXES:
            separated |= _separated_on_axis(np.cross(unit, edge), v0, v1, v2, extents)

    # --- Тест 2: оси AABB (X, Y, Z) ---

    separated |= np.any(v.max(axis=1) < -extents, axis=1)
    separated |= np.any(v.min(axis=1) > extents, axis=1)

    # --- Тест 3: плоскость треугольника ---

    normal = np.cross(f1, f0)
    length = np.linalg.norm(normal, axis=1)
    nonzero = length > 0.0
    normal[nonzero] /= length[nonzero, None]
    distance = np.einsum("ij,ij->i", normal, vertices[:, 0])

    r = np.abs(normal) @ extents
    s = normal @ center - distance
    separated |= ~(np.abs(s) <= r)

    return ~separated


def _separated_on_axis(
    axis: np.ndarray,
    v0: np.ndarray,
    v1: np.ndarray,
    v2: np.ndarray,
    extents: np.ndarray,
) -> np.ndarray:
    """Проекции треугольника и AABB на ось не перекрываются."""
    p0 = np.einsum("ij,ij->i", v0, axis)
    p1 = np.einsum("ij,ij->i", v1, axis)
    p2 = np.einsum("ij,ij->i", v2, axis)
    r = np.abs(axis) @ extents
    p_max = np.maximum(np.maximum(p0, p1), p2)
    p_min = np.minimum(np.minimum(p0, p1), p2)
    return np.maximum(-p_max, p_min) > r


def triangle_box_intersect(triangle: Triangle, bounds: Bounds) -> bool:
    """Тест одного треугольника против AABB."""
    result = triangles_box_intersect(triangle.vertices[None], bounds.center, bounds.extents)
    return bool(result[0])


def mesh_box_intersect(geometry: MeshGeometry, bounds: Bounds) -> bool:
    """True если хотя бы один треугольник меша пересекает AABB."""
    if len(geometry) == 0:
        return False
    return bool(np.any(triangles_box_intersect(geometry.vertices, bounds.center, bounds.extents)))


def plane_box_intersect(normal, distance: float, bounds: Bounds) -> bool:
    """
    Тест плоскости n·p = distance против AABB.

    Проекция AABB на нормаль (радиус r) сравнивается с расстоянием
    от центра AABB до плоскости.
    """
    n = np.asarray(normal, dtype=np.float64)
    extents = np.asarray(bounds.extents, dtype=np.float64)
    r = float(np.abs(n) @ extents)
    s = float(n @ np.asarray(bounds.center, dtype=np.float64)) - distance
    return abs(s) <= r


# ----------------------------------------------------------------
# Занятость
# ----------------------------------------------------------------

def is_occupied(
    point,
    bounds: Bounds,
    geometry: MeshGeometry,
    inside_test: InsideTest = InsideTest.SIX_RAYS,
) -> bool:
    """
    Область занята, если её центр внутри меша или какой-либо
    треугольник пересекает её (уже сжатые) границы.
    """
    return is_inside(point, geometry, inside_test) or mesh_box_intersect(geometry, bounds)

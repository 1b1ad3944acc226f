"""Bounds - axis-aligned box stored as center and full size."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

Vec3 = Tuple[float, float, float]


def _vec3(values: Iterable[float]) -> Vec3:
    x, y, z = values
    return float(x), float(y), float(z)


@dataclass(frozen=True)
class Bounds:
    """
    Axis-aligned bounding box.

    Equality is exact component-wise comparison of center and size.
    All boxes produced by the generator have dyadic coordinates
    (voxel centers are half-integers, cells are 1/2^k), so float64
    arithmetic on them is exact and exact comparison is meaningful.
    """

    center: Vec3
    size: Vec3

    def __post_init__(self):
        object.__setattr__(self, "center", _vec3(self.center))
        object.__setattr__(self, "size", _vec3(self.size))

    @staticmethod
    def from_min_max(min_corner: Iterable[float], max_corner: Iterable[float]) -> "Bounds":
        lo = _vec3(min_corner)
        hi = _vec3(max_corner)
        center = tuple((lo[i] + hi[i]) * 0.5 for i in range(3))
        size = tuple(hi[i] - lo[i] for i in range(3))
        return Bounds(center, size)

    @staticmethod
    def cube(center: Iterable[float], size: float) -> "Bounds":
        return Bounds(_vec3(center), (size, size, size))

    @property
    def extents(self) -> Vec3:
        """Half size."""
        return (self.size[0] * 0.5, self.size[1] * 0.5, self.size[2] * 0.5)

    @property
    def min(self) -> Vec3:
        e = self.extents
        return (self.center[0] - e[0], self.center[1] - e[1], self.center[2] - e[2])

    @property
    def max(self) -> Vec3:
        e = self.extents
        return (self.center[0] + e[0], self.center[1] + e[1], self.center[2] + e[2])

    @property
    def volume(self) -> float:
        return self.size[0] * self.size[1] * self.size[2]

    def encapsulate(self, other: "Bounds") -> "Bounds":
        """Smallest box containing both boxes."""
        a_min, a_max = self.min, self.max
        b_min, b_max = other.min, other.max
        return Bounds.from_min_max(
            (min(a_min[i], b_min[i]) for i in range(3)),
            (max(a_max[i], b_max[i]) for i in range(3)),
        )


"""Triangle primitive and immutable triangle soup used by the voxel predicates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

Vec3 = Tuple[float, float, float]


def _as_vec3(p) -> Vec3:
    return float(p[0]), float(p[1]), float(p[2])


def face_normal(a, b, c, vertex_normals: Optional[Sequence] = None) -> np.ndarray:
    """
    Unit normal of triangle (a, b, c).

    When vertex normals are given, the normal is flipped to agree with
    their average, so inconsistent winding still yields an outward normal.
    Degenerate triangles give a zero vector.
    """
    a = np.asarray(a, dtype=np.float64)
    normal = np.cross(np.asarray(b, dtype=np.float64) - a, np.asarray(c, dtype=np.float64) - a)

    if vertex_normals is not None:
        average = np.sum(np.asarray(vertex_normals, dtype=np.float64), axis=0) / 3.0
        if np.dot(normal, average) < 0.0:
            normal = -normal

    length = np.linalg.norm(normal)
    if length > 0.0:
        normal = normal / length
    return normal


@dataclass(frozen=True)
class Triangle:
    """Three points and the resolved face normal (computed from the winding when not given)."""

    a: Vec3
    b: Vec3
    c: Vec3
    normal: Optional[Vec3] = None

    def __post_init__(self):
        object.__setattr__(self, "a", _as_vec3(self.a))
        object.__setattr__(self, "b", _as_vec3(self.b))
        object.__setattr__(self, "c", _as_vec3(self.c))
        # Face normal from the winding order when none is given
        normal = face_normal(self.a, self.b, self.c) if self.normal is None else self.normal
        object.__setattr__(self, "normal", _as_vec3(normal))

    @staticmethod
    def from_points(a, b, c, vertex_normals: Optional[Sequence] = None) -> "Triangle":
        n = face_normal(a, b, c, vertex_normals)
        return Triangle(a, b, c, _as_vec3(n))

    @property
    def vertices(self) -> np.ndarray:
        return np.array([self.a, self.b, self.c], dtype=np.float64)

    def is_degenerate(self) -> bool:
        return self.normal == (0.0, 0.0, 0.0)


class MeshGeometry:
    """
    Immutable triangle list built from a mesh index buffer.

    Besides the Triangle objects keeps stacked arrays so the predicates
    can test a ray or a box against all triangles at once:
        vertices: (M, 3, 3) float64
        edge1, edge2: (M, 3) - b - a, c - a
        plane_normals: (M, 3) - cross(edge1, edge2), not normalized
        normals: (M, 3) - resolved unit face normals
    """

    __slots__ = ("_triangles", "_vertices", "_edge1", "_edge2", "_plane_normals", "_normals")

    def __init__(self, triangles: List[Triangle]):
        self._triangles: Tuple[Triangle, ...] = tuple(triangles)
        if self._triangles:
            verts = np.array([[t.a, t.b, t.c] for t in self._triangles], dtype=np.float64)
            normals = np.array([t.normal for t in self._triangles], dtype=np.float64)
        else:
            verts = np.zeros((0, 3, 3), dtype=np.float64)
            normals = np.zeros((0, 3), dtype=np.float64)

        self._vertices = verts
        self._edge1 = verts[:, 1] - verts[:, 0]
        self._edge2 = verts[:, 2] - verts[:, 0]
        self._plane_normals = np.cross(self._edge1, self._edge2)
        self._normals = normals

        for arr in (self._vertices, self._edge1, self._edge2, self._plane_normals, self._normals):
            arr.setflags(write=False)

    @staticmethod
    def from_arrays(
        vertices: np.ndarray,
        indices: np.ndarray,
        normals: Optional[np.ndarray] = None,
    ) -> "MeshGeometry":
        """
        Build geometry from a vertex array and a flat triangle index buffer.

        One triangle per 3 consecutive indices; a trailing incomplete triple
        is ignored. normals, when given, are per-vertex (same indexing).
        """
        vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        flat = np.asarray(indices, dtype=np.int64).reshape(-1)
        if normals is not None:
            normals = np.asarray(normals, dtype=np.float64).reshape(-1, 3)

        triangles = []
        a = 0
        while a <= len(flat) - 3:
            i0, i1, i2 = flat[a], flat[a + 1], flat[a + 2]
            vn = None
            if normals is not None:
                vn = (normals[i0], normals[i1], normals[i2])
            triangles.append(Triangle.from_points(vertices[i0], vertices[i1], vertices[i2], vn))
            a += 3
        return MeshGeometry(triangles)

    def __len__(self) -> int:
        return len(self._triangles)

    def __iter__(self) -> Iterator[Triangle]:
        return iter(self._triangles)

    def __getitem__(self, index: int) -> Triangle:
        return self._triangles[index]

    @property
    def triangles(self) -> Tuple[Triangle, ...]:
        return self._triangles

    @property
    def vertices(self) -> np.ndarray:
        return self._vertices

    @property
    def edge1(self) -> np.ndarray:
        return self._edge1

    @property
    def edge2(self) -> np.ndarray:
        return self._edge2

    @property
    def plane_normals(self) -> np.ndarray:
        return self._plane_normals

    @property
    def normals(self) -> np.ndarray:
        return self._normals

    def bounds(self) -> Optional[Tuple[np.ndarray, np.ndarray]]:
        """(min_corner, max_corner) over all triangle vertices, None if empty."""
        if not self._triangles:
            return None
        flat = self._vertices.reshape(-1, 3)
        return flat.min(axis=0), flat.max(axis=0)

"""Triangle mesh container used as generator input."""

from typing import Optional, Tuple

import numpy as np

from voxbox.geombase.triangle import MeshGeometry


class Mesh:
    """Indexed triangle mesh: positions, flat index buffer and optional per-vertex normals."""

    def __init__(self, vertices: np.ndarray, indices: np.ndarray,
                 normals: Optional[np.ndarray] = None, name: str = ""):
        self.vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        self.indices = np.asarray(indices, dtype=np.int64).reshape(-1)
        self.normals = None if normals is None else np.asarray(normals, dtype=np.float64).reshape(-1, 3)
        self.name = name
        self._validate_mesh()

    def _validate_mesh(self):
        """Ensure that the index buffer and normals agree with the vertex array."""
        if len(self.indices) and (self.indices.min() < 0 or self.indices.max() >= len(self.vertices)):
            raise ValueError("Mesh indices reference missing vertices.")
        if self.normals is not None and self.normals.shape != self.vertices.shape:
            raise ValueError("Normals must have one entry per vertex.")

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    @property
    def is_empty(self) -> bool:
        return self.triangle_count == 0

    def bounds(self) -> Optional[Tuple[np.ndarray, np.ndarray]]:
        """(min, max) over all vertices, None for a mesh without vertices."""
        if len(self.vertices) == 0:
            return None
        return self.vertices.min(axis=0), self.vertices.max(axis=0)

    def compute_vertex_normals(self) -> np.ndarray:
        """Area-weighted vertex normals from the triangle faces."""
        normals = np.zeros_like(self.vertices)
        tris = self.indices[: self.triangle_count * 3].reshape(-1, 3)
        if len(tris):
            v0 = self.vertices[tris[:, 0]]
            v1 = self.vertices[tris[:, 1]]
            v2 = self.vertices[tris[:, 2]]
            face = np.cross(v1 - v0, v2 - v0)
            for corner in range(3):
                np.add.at(normals, tris[:, corner], face)
        lengths = np.linalg.norm(normals, axis=1, keepdims=True)
        np.divide(normals, lengths, out=normals, where=lengths > 0)
        self.normals = normals
        return normals

    def to_geometry(self) -> MeshGeometry:
        return MeshGeometry.from_arrays(self.vertices, self.indices, self.normals)

    def __repr__(self) -> str:
        return f"Mesh({self.name!r}, vertices={len(self.vertices)}, triangles={self.triangle_count})"


def mesh_from_assimp(assimp_mesh, name: str = "") -> Mesh:
    """Create Mesh from assimp mesh."""
    verts = np.asarray(assimp_mesh.vertices, dtype=np.float64)
    idx = np.asarray(assimp_mesh.faces, dtype=np.int64).reshape(-1)

    normals = getattr(assimp_mesh, "normals", None)
    mesh = Mesh(verts, idx, name=name or getattr(assimp_mesh, "name", ""))

    if normals is not None and len(normals) == len(verts):
        mesh.normals = np.asarray(normals, dtype=np.float64).reshape(-1, 3)
    else:
        mesh.compute_vertex_normals()

    return mesh

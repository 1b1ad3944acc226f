"""Mesh file loaders: OBJ and STL in pure Python, everything else through pyassimp."""

from pathlib import Path

import numpy as np

from voxbox import log
from voxbox.loaders.obj_loader import load_obj_file
from voxbox.loaders.stl_loader import load_stl_file
from voxbox.mesh.mesh import Mesh, mesh_from_assimp


def load_assimp_file(path) -> Mesh:
    """Load any format supported by assimp, merging all meshes of the scene."""
    import pyassimp
    from pyassimp.postprocess import aiProcess_JoinIdenticalVertices, aiProcess_Triangulate

    path = Path(path)
    processing = aiProcess_Triangulate | aiProcess_JoinIdenticalVertices
    with pyassimp.load(str(path), processing=processing) as scene:
        parts = [mesh_from_assimp(m) for m in scene.meshes]

    if not parts:
        log.warn(f"[loaders] {path.name}: scene has no meshes")
        return Mesh(np.zeros((0, 3)), np.zeros(0, dtype=np.int64), name=path.stem)

    vertices = []
    indices = []
    normals = []
    offset = 0
    for part in parts:
        vertices.append(part.vertices)
        indices.append(part.indices + offset)
        normals.append(part.normals)
        offset += len(part.vertices)

    return Mesh(np.concatenate(vertices), np.concatenate(indices), np.concatenate(normals), name=path.stem)


_LOADERS = {
    ".obj": load_obj_file,
    ".stl": load_stl_file,
}


def load_mesh_file(path) -> Mesh:
    """Load a mesh file, choosing the loader by extension."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Mesh file not found: {path}")

    loader = _LOADERS.get(path.suffix.lower(), load_assimp_file)
    mesh = loader(path)
    log.info(f"[loaders] {path.name}: {len(mesh.vertices)} vertices, {mesh.triangle_count} triangles")
    return mesh


__all__ = ["load_mesh_file", "load_obj_file", "load_stl_file", "load_assimp_file"]

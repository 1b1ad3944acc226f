"""Mesh module - Mesh, primitives, assimp conversion."""

from voxbox.mesh.mesh import Mesh, mesh_from_assimp
from voxbox.mesh.primitives import cube_mesh, ramp_mesh

__all__ = ["Mesh", "mesh_from_assimp", "cube_mesh", "ramp_mesh"]

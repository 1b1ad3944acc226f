"""
Collision AABB generation for voxelised meshes.

Provides per-voxel box sets, grid addressing, quantised export and a
cancellable batch pass.
"""

from voxbox.voxels.intersection import (
    EPSILON,
    SHRINK_FACTOR,
    RayHit,
    InsideTest,
    ray_triangle_intersect,
    point_inside_mesh,
    point_inside_mesh_parity,
    is_inside,
    triangle_box_intersect,
    mesh_box_intersect,
    plane_box_intersect,
    is_occupied,
)
from voxbox.voxels.grid import (
    AxisOrder,
    GridLayout,
    relative_x,
    relative_y,
    relative_z,
    encode_position,
)
from voxbox.voxels.box import (
    Box,
    FULL_BOX,
    BOX_RESOLUTION,
    DEFAULT_OUTPUT_FORMAT,
    normalize_bounds,
)
from voxbox.voxels.settings import GeneratorSettings
from voxbox.voxels.batch import BatchHandle, VoxelResult
from voxbox.voxels.generator import (
    AABBGenerator,
    MAX_PRECISION,
    VALID_PRECISIONS,
    calculate_block_aabb,
    generate_sub_cells,
    merge_bounds,
)
from voxbox.voxels.persistence import (
    ResultPersistence,
    RESULT_FILE_EXTENSION,
    export_text,
    format_voxel,
    save_text,
)

__all__ = [
    "EPSILON",
    "SHRINK_FACTOR",
    "RayHit",
    "InsideTest",
    "ray_triangle_intersect",
    "point_inside_mesh",
    "point_inside_mesh_parity",
    "is_inside",
    "triangle_box_intersect",
    "mesh_box_intersect",
    "plane_box_intersect",
    "is_occupied",
    "AxisOrder",
    "GridLayout",
    "relative_x",
    "relative_y",
    "relative_z",
    "encode_position",
    "Box",
    "FULL_BOX",
    "BOX_RESOLUTION",
    "DEFAULT_OUTPUT_FORMAT",
    "normalize_bounds",
    "GeneratorSettings",
    "BatchHandle",
    "VoxelResult",
    "AABBGenerator",
    "MAX_PRECISION",
    "VALID_PRECISIONS",
    "calculate_block_aabb",
    "generate_sub_cells",
    "merge_bounds",
    "ResultPersistence",
    "RESULT_FILE_EXTENSION",
    "export_text",
    "format_voxel",
    "save_text",
]

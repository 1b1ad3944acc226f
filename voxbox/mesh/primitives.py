"""Primitive mesh shapes: axis-aligned Cube and Ramp (wedge)."""

import numpy as np

from .mesh import Mesh


def cube_mesh(min_corner=(0.0, 0.0, 0.0), max_corner=(1.0, 1.0, 1.0)) -> Mesh:
    x0, y0, z0 = (float(v) for v in min_corner)
    x1, y1, z1 = (float(v) for v in max_corner)
    vertices = np.array(
        [
            [x0, y0, z0],
            [x1, y0, z0],
            [x1, y1, z0],
            [x0, y1, z0],
            [x0, y0, z1],
            [x1, y0, z1],
            [x1, y1, z1],
            [x0, y1, z1],
        ],
        dtype=float,
    )
    triangles = np.array(
        [
            [1, 0, 2],
            [2, 0, 3],
            [4, 5, 7],
            [5, 6, 7],
            [0, 1, 4],
            [1, 5, 4],
            [2, 3, 6],
            [3, 7, 6],
            [3, 0, 4],
            [7, 3, 4],
            [1, 2, 5],
            [2, 6, 5],
        ],
        dtype=int,
    )
    return Mesh(vertices, triangles, name="Cube")


def ramp_mesh(min_corner=(0.0, 0.0, 0.0), max_corner=(1.0, 1.0, 1.0)) -> Mesh:
    """
    Wedge with the slope rising along +X: full floor at min y,
    vertical wall at max x, sloped face from (min x, min y) to (max x, max y).
    """
    x0, y0, z0 = (float(v) for v in min_corner)
    x1, y1, z1 = (float(v) for v in max_corner)
    vertices = np.array(
        [
            [x0, y0, z0],
            [x1, y0, z0],
            [x1, y0, z1],
            [x0, y0, z1],
            [x1, y1, z0],
            [x1, y1, z1],
        ],
        dtype=float,
    )
    triangles = np.array(
        [
            # floor
            [0, 1, 2],
            [0, 2, 3],
            # wall
            [1, 4, 5],
            [1, 5, 2],
            # slope
            [0, 3, 5],
            [0, 5, 4],
            # sides
            [0, 4, 1],
            [3, 2, 5],
        ],
        dtype=int,
    )
    return Mesh(vertices, triangles, name="Ramp")

# voxbox/loaders/obj_loader.py
"""Pure Python OBJ loader. No external dependencies."""

from pathlib import Path

import numpy as np

from voxbox.mesh.mesh import Mesh


def load_obj_file(path) -> Mesh:
    """Load OBJ file as a single triangle mesh (all objects and groups merged)."""
    path = Path(path)

    # Raw data from file
    positions = []  # v
    normals_raw = []  # vn
    faces = []  # f

    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            parts = line.split()
            cmd = parts[0]

            if cmd == "v" and len(parts) >= 4:
                positions.append((float(parts[1]), float(parts[2]), float(parts[3])))

            elif cmd == "vn" and len(parts) >= 4:
                normals_raw.append((float(parts[1]), float(parts[2]), float(parts[3])))

            elif cmd == "f" and len(parts) >= 4:
                face_verts = []
                for vert in parts[1:]:
                    # Format: v, v/vt, v/vt/vn, v//vn
                    indices_str = vert.split("/")
                    v_idx = _resolve_index(int(indices_str[0]), len(positions))

                    vn_idx = None
                    if len(indices_str) > 2 and indices_str[2]:
                        vn_idx = _resolve_index(int(indices_str[2]), len(normals_raw))

                    face_verts.append((v_idx, vn_idx))

                # Fan triangulation for convex polygons
                for i in range(1, len(face_verts) - 1):
                    faces.append(face_verts[0])
                    faces.append(face_verts[i])
                    faces.append(face_verts[i + 1])

    if not faces:
        return Mesh(np.zeros((0, 3)), np.zeros(0, dtype=np.int64), name=path.stem)

    # Expand indexed data: one output vertex per face corner
    out_vertices = [positions[v_idx] for v_idx, _ in faces]
    out_normals = [normals_raw[vn_idx] for _, vn_idx in faces if vn_idx is not None]

    normals_np = None
    if len(out_normals) == len(out_vertices):
        normals_np = np.array(out_normals, dtype=np.float64)

    return Mesh(
        np.array(out_vertices, dtype=np.float64),
        np.arange(len(out_vertices), dtype=np.int64),
        normals_np,
        name=path.stem,
    )


def _resolve_index(index: int, count: int) -> int:
    """OBJ indices are 1-based; negative values count back from the last element."""
    if index < 0:
        return count + index
    return index - 1

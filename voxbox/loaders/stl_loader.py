# voxbox/loaders/stl_loader.py
"""Pure Python STL loader (binary and ASCII). No external dependencies."""

from __future__ import annotations

import struct
from pathlib import Path

import numpy as np

from voxbox import log
from voxbox.mesh.mesh import Mesh


def load_stl_file(path) -> Mesh:
    """Load STL file (binary or ASCII)."""
    path = Path(path)

    with open(path, "rb") as f:
        first_bytes = f.read(80)
        f.seek(0)

        # ASCII STL starts with "solid" and typically has no nulls in first line
        is_ascii = (
            first_bytes.strip().lower().startswith(b"solid")
            and b"\x00" not in first_bytes
        )

        if is_ascii:
            try:
                return _load_ascii_stl(f, path.stem)
            except ValueError as e:
                # Some exporters write binary files with a "solid" header
                log.debug(f"[stl_loader] {path.name}: {e}, retrying as binary")
                f.seek(0)
        return _load_binary_stl(f, path.stem)


def _load_binary_stl(f, name: str) -> Mesh:
    """Load binary STL format."""
    f.seek(80)
    header = f.read(4)
    if len(header) < 4:
        raise ValueError("Truncated binary STL header")
    num_triangles = struct.unpack("<I", header)[0]

    vertices = []
    normals = []

    for _ in range(num_triangles):
        # Normal (3 floats) + 3 vertices (9 floats) + attribute (2 bytes)
        data = f.read(50)
        if len(data) < 50:
            raise ValueError("Truncated binary STL triangle data")
        values = struct.unpack("<12fH", data)

        normal = values[0:3]
        vertices.extend([values[3:6], values[6:9], values[9:12]])
        normals.extend([normal] * 3)

    return Mesh(
        np.array(vertices, dtype=np.float64).reshape(-1, 3),
        np.arange(len(vertices), dtype=np.int64),
        np.array(normals, dtype=np.float64).reshape(-1, 3),
        name=name,
    )


def _load_ascii_stl(f, name: str) -> Mesh:
    """Load ASCII STL format."""
    vertices = []
    normals = []
    current_normal = None

    for line in f:
        line = line.decode("utf-8", errors="ignore").strip()
        lower = line.lower()

        if lower.startswith("facet normal"):
            parts = line.split()
            if len(parts) >= 5:
                current_normal = (float(parts[2]), float(parts[3]), float(parts[4]))

        elif lower.startswith("vertex"):
            parts = line.split()
            if len(parts) >= 4:
                vertices.append((float(parts[1]), float(parts[2]), float(parts[3])))
                if current_normal:
                    normals.append(current_normal)

    if not vertices:
        raise ValueError("No vertices found in ASCII STL")

    normals_np = None
    if len(normals) == len(vertices):
        normals_np = np.array(normals, dtype=np.float64)

    return Mesh(
        np.array(vertices, dtype=np.float64),
        np.arange(len(vertices), dtype=np.int64),
        normals_np,
        name=name,
    )

"""
Тесты загрузчиков мешей и класса Mesh.
"""

import struct

import numpy as np
import pytest

from voxbox.loaders import load_mesh_file
from voxbox.loaders.obj_loader import load_obj_file
from voxbox.loaders.stl_loader import load_stl_file
from voxbox.mesh import Mesh, cube_mesh


CUBE_OBJ = """# unit cube
v 0 0 0
v 1 0 0
v 1 1 0
v 0 1 0
v 0 0 1
v 1 0 1
v 1 1 1
v 0 1 1
vn 0 0 -1
f 1//1 4//1 3//1 2//1
f 5 6 7 8
f 1 2 6 5
f 4 8 7 3
f 1 5 8 4
f -7 -6 -2 -3
"""

ASCII_STL = """solid tri
facet normal 0 0 1
  outer loop
    vertex 0 0 0
    vertex 1 0 0
    vertex 0 1 0
  endloop
endfacet
endsolid tri
"""


class TestObjLoader:

    def test_quads_triangulated(self, tmp_path):
        path = tmp_path / "cube.obj"
        path.write_text(CUBE_OBJ, encoding="utf-8")

        mesh = load_obj_file(path)
        assert mesh.name == "cube"
        assert mesh.triangle_count == 12
        assert len(mesh.vertices) == 36
        # нормали заданы не у всех граней
        assert mesh.normals is None

        lo, hi = mesh.bounds()
        assert tuple(lo) == (0.0, 0.0, 0.0)
        assert tuple(hi) == (1.0, 1.0, 1.0)

    def test_negative_indices(self, tmp_path):
        path = tmp_path / "tri.obj"
        path.write_text("v 0 0 0\nv 2 0 0\nv 0 2 0\nf -3 -2 -1\n", encoding="utf-8")
        mesh = load_obj_file(path)
        np.testing.assert_array_equal(mesh.vertices, [[0, 0, 0], [2, 0, 0], [0, 2, 0]])

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.obj"
        path.write_text("# nothing\n", encoding="utf-8")
        assert load_obj_file(path).is_empty


class TestStlLoader:

    def test_ascii(self, tmp_path):
        path = tmp_path / "tri.stl"
        path.write_text(ASCII_STL, encoding="utf-8")

        mesh = load_stl_file(path)
        assert mesh.triangle_count == 1
        np.testing.assert_array_equal(mesh.normals, [[0, 0, 1]] * 3)

    def test_binary(self, tmp_path):
        path = tmp_path / "tri.stl"
        data = b"\x00" * 80 + struct.pack("<I", 1)
        data += struct.pack("<12fH", 0, 0, 1, 0, 0, 0, 1, 0, 0, 0, 1, 0, 0)
        path.write_bytes(data)

        mesh = load_stl_file(path)
        assert mesh.triangle_count == 1
        np.testing.assert_array_equal(mesh.vertices[1], [1, 0, 0])

    def test_truncated_binary(self, tmp_path):
        path = tmp_path / "bad.stl"
        path.write_bytes(b"\x00" * 80 + struct.pack("<I", 2) + b"\x00" * 10)
        with pytest.raises(ValueError):
            load_stl_file(path)


class TestLoadMeshFile:

    def test_dispatch_by_extension(self, tmp_path):
        path = tmp_path / "cube.OBJ"
        path.write_text(CUBE_OBJ, encoding="utf-8")
        assert load_mesh_file(path).triangle_count == 12

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_mesh_file(tmp_path / "missing.obj")


class TestMesh:

    def test_invalid_indices(self):
        with pytest.raises(ValueError):
            Mesh(np.zeros((3, 3)), [0, 1, 5])

    def test_vertex_normals_are_unit(self):
        mesh = cube_mesh()
        normals = mesh.compute_vertex_normals()
        np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0)

    def test_geometry(self):
        geometry = cube_mesh((0, 0, 0), (2, 2, 2)).to_geometry()
        assert len(geometry) == 12
        lo, hi = geometry.bounds()
        assert tuple(hi) == (2.0, 2.0, 2.0)

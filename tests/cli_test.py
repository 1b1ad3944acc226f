"""
Тесты командной строки.
"""

import json

from voxbox.__main__ import build_parser, load_settings, main
from voxbox.voxels.grid import AxisOrder


RAMP_OBJ = """v 0 0 0
v 1 0 0
v 1 0 1
v 0 0 1
v 1 1 0
v 1 1 1
f 1 2 3 4
f 2 5 6 3
f 1 4 6 5
f 1 5 2
f 4 3 6
"""


class TestCli:

    def test_settings_overrides(self):
        args = build_parser().parse_args(
            ["mesh.obj", "--order", "zyx", "--no-invert-z", "--invert-y", "--acceptable", "2", "-j", "3"]
        )
        settings = load_settings(args)
        assert settings.axis_order == AxisOrder.ZYX
        assert settings.invert_z is False
        assert settings.invert_y is True
        assert settings.acceptable_aabb == 2
        assert settings.workers == 3

    def test_text_export(self, tmp_path):
        mesh_path = tmp_path / "ramp.obj"
        mesh_path.write_text(RAMP_OBJ, encoding="utf-8")
        out = tmp_path / "ramp.txt"

        assert main([str(mesh_path), "-o", str(out), "--acceptable", "1"]) == 0
        assert out.read_text(encoding="utf-8") == "{}\n"

    def test_json_export(self, tmp_path):
        mesh_path = tmp_path / "ramp.obj"
        mesh_path.write_text(RAMP_OBJ, encoding="utf-8")

        assert main([str(mesh_path), "--json", "--acceptable", "2"]) == 0
        data = json.loads((tmp_path / "ramp.aabb.json").read_text(encoding="utf-8"))
        assert data["voxels"]["0"] == [[8, 8, 0, 16, 16, 16], [0, 0, 0, 16, 8, 16]]

    def test_invalid_settings(self, tmp_path):
        mesh_path = tmp_path / "ramp.obj"
        mesh_path.write_text(RAMP_OBJ, encoding="utf-8")
        assert main([str(mesh_path), "--acceptable", "50"]) == 1

    def test_missing_mesh(self, tmp_path):
        assert main([str(tmp_path / "none.obj")]) == 1

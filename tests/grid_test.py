"""
Тесты адресации вокселей.
"""

import pytest

from voxbox.errors import InvalidArgument
from voxbox.voxels.grid import AxisOrder, GridLayout, encode_position, relative_x, relative_y, relative_z
from voxbox.voxels.settings import GeneratorSettings


class TestAxisOrder:
    """Порядок обхода осей."""

    @pytest.mark.parametrize("order", list(AxisOrder))
    def test_bijection(self, order):
        """Декодирование и кодирование индекса взаимно обратны."""
        w, h, l = 2, 3, 4
        seen = set()
        for pos in range(w * h * l):
            local = (
                relative_x(pos, order, w, h, l),
                relative_y(pos, order, w, h, l),
                relative_z(pos, order, w, h, l),
            )
            assert 0 <= local[0] < w
            assert 0 <= local[1] < h
            assert 0 <= local[2] < l
            assert encode_position(*local, order, w, h, l) == pos
            seen.add(local)
        assert len(seen) == w * h * l

    def test_fastest_axis(self):
        """Индекс 1 сдвигает самую быструю ось."""
        xyz = GridLayout(2, 3, 4, axis_order=AxisOrder.XYZ)
        zyx = GridLayout(2, 3, 4, axis_order=AxisOrder.ZYX)
        assert xyz.pos_to_local(1) == (1, 0, 0)
        assert zyx.pos_to_local(1) == (0, 0, 1)

    def test_xzy_layout(self):
        grid = GridLayout(2, 3, 4, axis_order=AxisOrder.XZY)
        # x быстрее всех, затем z, затем y
        assert grid.pos_to_local(2) == (0, 0, 1)
        assert grid.pos_to_local(8) == (0, 1, 0)

    def test_axes(self):
        assert AxisOrder.XZY.axes == (0, 2, 1)
        assert AxisOrder.YZX.axes == (1, 2, 0)

    def test_dimensions(self):
        grid = GridLayout(2, 3, 4, axis_order=AxisOrder.XZY)
        assert grid.dimensions == (2, 4, 3)


class TestGridLayout:
    """GridLayout: размеры, origin и мировые координаты."""

    def test_from_bounds(self):
        settings = GeneratorSettings()
        grid = GridLayout.from_bounds((0.2, -1.3, 0.0), (2.5, 1.0, 3.0), settings)

        assert (grid.width, grid.height, grid.length) == (3, 3, 3)
        assert grid.origin == (0.5, -1.5, 2.5)
        assert grid.invert_z

        assert grid.pos_to_world(0) == (0.5, -1.5, 2.5)
        assert grid.local_to_world(0, 0, 1) == (0.5, -1.5, 1.5)

    def test_inverted_x(self):
        settings = GeneratorSettings(invert_x=True, invert_z=False)
        grid = GridLayout.from_bounds((0.0, 0.0, 0.0), (2.0, 1.0, 1.0), settings)
        assert grid.origin == (1.5, 0.5, 0.5)
        assert grid.local_to_world(1, 0, 0) == (0.5, 0.5, 0.5)

    def test_flat_mesh_has_one_layer(self):
        grid = GridLayout.from_bounds((0.0, 0.0, 0.0), (2.0, 0.0, 2.0), GeneratorSettings())
        assert grid.height == 1
        assert grid.voxel_count == 4

    def test_invalid_size(self):
        with pytest.raises(InvalidArgument):
            GridLayout(0, 1, 1)

    def test_position_out_of_range(self):
        grid = GridLayout(2, 2, 2)
        with pytest.raises(InvalidArgument):
            grid.pos_to_local(8)
        with pytest.raises(InvalidArgument):
            grid.pos_to_local(-1)
        with pytest.raises(InvalidArgument):
            grid.local_to_pos(2, 0, 0)

    def test_local_round_trip(self):
        grid = GridLayout(3, 2, 5, axis_order=AxisOrder.ZXY)
        assert grid.local_to_pos(*grid.pos_to_local(17)) == 17

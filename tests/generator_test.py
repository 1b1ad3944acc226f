"""
Тесты генератора AABB: адаптивное уточнение, слияние, одиночные запросы.
"""

import unittest

import numpy as np
import pytest

from voxbox.errors import InvalidArgument
from voxbox.geombase import Bounds
from voxbox.mesh import Mesh, cube_mesh, ramp_mesh
from voxbox.voxels.generator import AABBGenerator, generate_sub_cells, merge_bounds
from voxbox.voxels.settings import GeneratorSettings


def combine(*meshes) -> Mesh:
    vertices = []
    indices = []
    offset = 0
    for mesh in meshes:
        vertices.append(mesh.vertices)
        indices.append(mesh.indices + offset)
        offset += len(mesh.vertices)
    return Mesh(np.concatenate(vertices), np.concatenate(indices))


def cell(x, y, z, size=1.0):
    """Куб с минимальным углом (x, y, z)."""
    return Bounds.from_min_max((x, y, z), (x + size, y + size, z + size))


def contains(outer, inner):
    return all(outer.min[i] <= inner.min[i] and inner.max[i] <= outer.max[i] for i in range(3))


def total_volume(bounds):
    return sum(b.volume for b in bounds)


def naive_merge(bounds):
    """Прямолинейная версия: после каждого слияния поиск начинается сначала."""
    items = list(bounds)
    merged = True
    while merged:
        merged = False
        for i in range(len(items)):
            for j in range(len(items)):
                if i == j:
                    continue
                enclosing = items[i].encapsulate(items[j])
                if enclosing.volume == items[i].volume + items[j].volume:
                    del items[max(i, j)]
                    del items[min(i, j)]
                    items.append(enclosing)
                    merged = True
                    break
            if merged:
                break
    return items


class AABBGeneratorTest(unittest.TestCase):
    """Одиночные запросы AABBGenerator."""

    def make(self, mesh, **settings):
        generator = AABBGenerator()
        self.assertTrue(generator.reset(mesh, GeneratorSettings(**settings)))
        return generator

    def test_requires_reset(self):
        generator = AABBGenerator()
        self.assertFalse(generator.is_configured)
        with self.assertRaises(InvalidArgument):
            generator.calculate_block(0.5, 0.5, 0.5)
        with self.assertRaises(InvalidArgument):
            generator.calculate_all()

    def test_reset_without_mesh(self):
        generator = AABBGenerator()
        self.assertFalse(generator.reset(None))
        self.assertFalse(generator.reset(Mesh(np.zeros((0, 3)), np.zeros(0, dtype=np.int64))))
        self.assertFalse(generator.is_configured)

    def test_reset_invalid_settings(self):
        with self.assertRaises(InvalidArgument):
            AABBGenerator().reset(cube_mesh(), GeneratorSettings(acceptable_aabb=0))

    def test_layout_from_mesh(self):
        generator = self.make(combine(cube_mesh((0, 0, 0), (1, 1, 1)), cube_mesh((2, 0, 0), (3, 1, 1))))
        layout = generator.layout
        self.assertEqual((layout.width, layout.height, layout.length), (3, 1, 1))
        self.assertEqual(generator.block_pos_to_world(1), (1.5, 0.5, 0.5))
        self.assertEqual(generator.block_pos_to_local_x(2), 2)
        self.assertEqual(generator.block_pos_to_local_y(2), 0)
        self.assertEqual(generator.block_pos_to_local_z(2), 0)

    def test_solid_cube(self):
        """Полностью заполненный воксель — один бокс на весь воксель."""
        generator = self.make(cube_mesh())
        bounds, precision = generator.calculate_block(0.5, 0.5, 0.5)
        self.assertEqual(bounds, [Bounds.cube((0.5, 0.5, 0.5), 1.0)])
        self.assertEqual(precision, 16)
        self.assertEqual(generator.collisions, 1)

    def test_empty_voxel(self):
        generator = self.make(combine(cube_mesh((0, 0, 0), (1, 1, 1)), cube_mesh((2, 0, 0), (3, 1, 1))))
        self.assertEqual(generator.calculate_block(1.5, 0.5, 0.5), ([], 0))
        self.assertFalse(generator.is_block_occupied(1.5, 0.5, 0.5))
        self.assertEqual(generator.calculate_all_blocks(), [0, 2])

    def test_ramp_stays_coarse(self):
        """Бюджет 1: уже уровень 2 даёт два бокса, остаётся весь воксель."""
        generator = self.make(ramp_mesh(), acceptable_aabb=1)
        bounds, precision = generator.calculate_block(0.5, 0.5, 0.5)
        self.assertEqual(bounds, [Bounds.cube((0.5, 0.5, 0.5), 1.0)])
        self.assertEqual(precision, 1)

    def test_ramp_refines_once(self):
        """Бюджет 2: уровень 2 проходит, ступенька уровня 4 — нет."""
        generator = self.make(ramp_mesh(), acceptable_aabb=2)
        bounds, precision = generator.calculate_block(0.5, 0.5, 0.5)
        self.assertEqual(precision, 2)
        self.assertEqual(
            set(bounds),
            {
                Bounds.from_min_max((0.0, 0.0, 0.0), (1.0, 0.5, 1.0)),
                Bounds.from_min_max((0.5, 0.5, 0.0), (1.0, 1.0, 1.0)),
            },
        )

    def test_ramp_default_budget(self):
        """Склон на уровне 16 даёт много боксов; результат укладывается в бюджет."""
        generator = self.make(ramp_mesh())
        self.assertGreater(len(generator.calculate_sub_block(0.5, 0.5, 0.5, 16)), 1)

        bounds, precision = generator.calculate_block(0.5, 0.5, 0.5)
        self.assertLessEqual(len(bounds), 4)
        self.assertIn(precision, (2, 4))
        for b in bounds:
            self.assertTrue(all(0.0 <= c <= 1.0 for c in b.min + b.max))

    def test_calculate_single(self):
        generator = self.make(ramp_mesh())
        self.assertEqual(generator.calculate_single(0.5, 0.5, 0.5, 1), [Bounds.cube((0.5, 0.5, 0.5), 1.0)])

        cells = generator.calculate_single(0.5, 0.5, 0.5, 2)
        self.assertEqual(len(cells), 6)
        for c in cells:
            self.assertEqual(c.size, (0.5, 0.5, 0.5))
        # верхняя левая ячейка над склоном пуста
        self.assertNotIn(Bounds.cube((0.25, 0.75, 0.25), 0.5), cells)

    def test_invalid_precision(self):
        generator = self.make(cube_mesh())
        with self.assertRaises(InvalidArgument):
            generator.calculate_single(0.5, 0.5, 0.5, 3)
        with self.assertRaises(InvalidArgument):
            generator.calculate_sub_block(0.5, 0.5, 0.5, 32)

    def test_refinement_shrinks_volume(self):
        """Более мелкое разбиение не увеличивает занятый объём."""
        generator = self.make(ramp_mesh())
        volumes = [total_volume(generator.calculate_sub_block(0.5, 0.5, 0.5, p)) for p in (1, 2, 4)]
        self.assertEqual(volumes, [1.0, 0.75, 0.625])
        self.assertEqual(generator.collisions, len(generator.calculate_sub_block(0.5, 0.5, 0.5, 4)))

    def test_empty_voxel_at_every_precision(self):
        generator = self.make(combine(cube_mesh((0, 0, 0), (1, 1, 1)), cube_mesh((2, 0, 0), (3, 1, 1))))
        for precision in (1, 2, 4, 8, 16):
            self.assertEqual(generator.calculate_single(1.5, 0.5, 0.5, precision), [])
            self.assertEqual(generator.calculate_sub_block(1.5, 0.5, 0.5, precision), [])

    def test_occupancy_refinement_is_monotonic(self):
        """Каждая занятая ячейка уровня p содержит занятую ячейку уровня 2p."""
        generator = self.make(ramp_mesh())
        for precision in (1, 2, 4, 8):
            coarse = generator.calculate_single(0.5, 0.5, 0.5, precision)
            fine = generator.calculate_single(0.5, 0.5, 0.5, precision * 2)
            self.assertTrue(coarse)
            for outer in coarse:
                self.assertTrue(
                    any(contains(outer, inner) for inner in fine),
                    f"no occupied child of {outer} at precision {precision * 2}",
                )

    def test_calculate_voxel(self):
        generator = self.make(ramp_mesh(), acceptable_aabb=1)
        result = generator.calculate_voxel(0)
        self.assertEqual(result.pos, 0)
        self.assertEqual(result.center, (0.5, 0.5, 0.5))
        self.assertEqual(result.count, 1)
        self.assertTrue(result.boxes[0].is_full())


class TestMergeBounds:
    """Слияние боксов."""

    def test_adjacent_pair(self):
        assert merge_bounds([cell(0, 0, 0), cell(1, 0, 0)]) == [Bounds.from_min_max((0, 0, 0), (2, 1, 1))]

    def test_diagonal_pair_unchanged(self):
        boxes = [cell(0, 0, 0), cell(1, 1, 0)]
        assert merge_bounds(boxes) == boxes

    def test_l_shape(self):
        result = merge_bounds([cell(0, 0, 0), cell(1, 0, 0), cell(0, 1, 0)])
        assert result == [cell(0, 1, 0), Bounds.from_min_max((0, 0, 0), (2, 1, 1))]

    def test_overlapping_not_merged(self):
        boxes = [cell(0, 0, 0), cell(0, 0, 0)]
        assert merge_bounds(boxes) == boxes

    def test_small_inputs(self):
        assert merge_bounds([]) == []
        assert merge_bounds([cell(0, 0, 0)]) == [cell(0, 0, 0)]

    def test_full_block(self):
        cells = [cell(x, y, z) for x in range(4) for y in range(4) for z in range(4)]
        assert merge_bounds(cells) == [Bounds.from_min_max((0, 0, 0), (4, 4, 4))]

    def test_idempotent(self):
        cells = [cell(x, y, 0) for x in range(3) for y in range(3) if x + y != 2]
        merged = merge_bounds(cells)
        assert merge_bounds(merged) == merged
        assert total_volume(merged) == total_volume(cells)

    def test_matches_restart_scan_on_staircase(self):
        geometry = ramp_mesh().to_geometry()
        cells = generate_sub_cells(0.5, 0.5, 0.5, 4, geometry)
        assert len(cells) == 40
        assert merge_bounds(cells) == naive_merge(cells)

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_matches_restart_scan_on_random_cells(self, seed):
        rng = np.random.RandomState(seed)
        cells = [cell(x, y, z) for x in range(3) for y in range(3) for z in range(3) if rng.rand() < 0.7]
        assert merge_bounds(cells) == naive_merge(cells)

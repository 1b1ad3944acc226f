"""
Voxbox - генерация коллизионных AABB для вокселизированных мешей.

Основные модули:
- geombase - Bounds, треугольники меша
- voxels - тесты пересечений, сетка, генератор, экспорт
- mesh, loaders - загрузка входных мешей
"""

from .voxels import AABBGenerator, GeneratorSettings, AxisOrder, Box, BatchHandle
from .mesh import Mesh
from .loaders import load_mesh_file

__version__ = '0.1.0'

__all__ = [
    'AABBGenerator',
    'GeneratorSettings',
    'AxisOrder',
    'Box',
    'BatchHandle',
    'Mesh',
    'load_mesh_file',
]

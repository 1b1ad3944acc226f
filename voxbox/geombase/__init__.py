"""
Базовые геометрические классы (Geometric Base).

Содержит:
- Bounds - AABB в виде (center, size) с точным сравнением
- Triangle - треугольник с нормалью грани
- MeshGeometry - неизменяемый набор треугольников меша
"""

from .bounds import Bounds
from .triangle import Triangle, MeshGeometry, face_normal

__all__ = [
    'Bounds',
    'Triangle',
    'MeshGeometry',
    'face_normal',
]

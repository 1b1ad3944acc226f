"""
GridLayout — адресация вокселей: линейный индекс <-> (x, y, z) <-> мировые координаты.
"""

from __future__ import annotations

import math
from enum import IntEnum
from typing import TYPE_CHECKING, Tuple

import numpy as np

from voxbox.errors import InvalidArgument

if TYPE_CHECKING:
    from voxbox.voxels.settings import GeneratorSettings


class AxisOrder(IntEnum):
    """
    Порядок обхода осей.

    Имя перечисляет оси от самой быстрой к самой медленной:
    XZY — x меняется быстрее всех, затем z, затем y.
    """
    XYZ = 0
    XZY = 1
    ZXY = 2
    ZYX = 3
    YZX = 4
    YXZ = 5

    @property
    def axes(self) -> Tuple[int, int, int]:
        """Индексы осей (0=x, 1=y, 2=z) от быстрой к медленной."""
        return tuple("XYZ".index(letter) for letter in self.name)


def relative_x(position: int, order: AxisOrder, width: int, height: int, length: int) -> int:
    if order == AxisOrder.XYZ or order == AxisOrder.XZY:
        return position % width
    if order == AxisOrder.YXZ:
        return position // height % width
    if order == AxisOrder.ZXY:
        return position // length % width
    if order == AxisOrder.YZX or order == AxisOrder.ZYX:
        return position // (height * length)
    raise InvalidArgument(f"Unknown axis order: {order!r}")


def relative_y(position: int, order: AxisOrder, width: int, height: int, length: int) -> int:
    if order == AxisOrder.XYZ:
        return position // width % height
    if order == AxisOrder.XZY or order == AxisOrder.ZXY:
        return position // (width * length)
    if order == AxisOrder.YXZ or order == AxisOrder.YZX:
        return position % height
    if order == AxisOrder.ZYX:
        return position // length % height
    raise InvalidArgument(f"Unknown axis order: {order!r}")


def relative_z(position: int, order: AxisOrder, width: int, height: int, length: int) -> int:
    if order == AxisOrder.XYZ or order == AxisOrder.YXZ:
        return position // (width * height)
    if order == AxisOrder.XZY:
        return position // width % length
    if order == AxisOrder.ZXY or order == AxisOrder.ZYX:
        return position % length
    if order == AxisOrder.YZX:
        return position // height % length
    raise InvalidArgument(f"Unknown axis order: {order!r}")


def encode_position(x: int, y: int, z: int, order: AxisOrder, width: int, height: int, length: int) -> int:
    """Обратное преобразование к relative_x/y/z."""
    local = (x, y, z)
    sizes = (width, height, length)
    fast, middle, slow = AxisOrder(order).axes
    return local[fast] + sizes[fast] * (local[middle] + sizes[middle] * local[slow])


def first_dimension(x, y, z, order: AxisOrder):
    """Значение самой быстрой оси порядка."""
    return (x, y, z)[AxisOrder(order).axes[0]]


def second_dimension(x, y, z, order: AxisOrder):
    """Значение средней оси порядка."""
    return (x, y, z)[AxisOrder(order).axes[1]]


def third_dimension(x, y, z, order: AxisOrder):
    """Значение самой медленной оси порядка."""
    return (x, y, z)[AxisOrder(order).axes[2]]


class GridLayout:
    """
    Плотная сетка width × height × length единичных вокселей.

    Attributes:
        origin: Мировые координаты центра вокселя (0, 0, 0).
        axis_order: Порядок линейной нумерации вокселей.
        invert_x, invert_y, invert_z: Обход оси в отрицательном направлении.
    """

    __slots__ = ("_width", "_height", "_length", "_origin", "_axis_order",
                 "_invert_x", "_invert_y", "_invert_z")

    def __init__(
        self,
        width: int,
        height: int,
        length: int,
        origin: Tuple[float, float, float] = (0.5, 0.5, 0.5),
        axis_order: AxisOrder = AxisOrder.XZY,
        invert_x: bool = False,
        invert_y: bool = False,
        invert_z: bool = False,
    ) -> None:
        if width < 1 or height < 1 or length < 1:
            raise InvalidArgument(f"Grid size must be positive: {width}x{height}x{length}")
        try:
            axis_order = AxisOrder(axis_order)
        except ValueError as e:
            raise InvalidArgument(f"Unknown axis order: {axis_order!r}") from e

        self._width = int(width)
        self._height = int(height)
        self._length = int(length)
        self._origin = tuple(float(c) for c in origin)
        self._axis_order = axis_order
        self._invert_x = bool(invert_x)
        self._invert_y = bool(invert_y)
        self._invert_z = bool(invert_z)

    @staticmethod
    def from_bounds(
        min_corner,
        max_corner,
        settings: "GeneratorSettings",
    ) -> "GridLayout":
        """
        Сетка, покрывающая bounding box меша.

        Размеры — потолок размеров bbox. Origin — центр крайнего вокселя
        со стороны, выбранной флагами инверсии.
        """
        lo = np.asarray(min_corner, dtype=np.float64)
        hi = np.asarray(max_corner, dtype=np.float64)
        size = hi - lo
        inverts = (settings.invert_x, settings.invert_y, settings.invert_z)

        origin = tuple(
            math.ceil(hi[i]) - 0.5 if inverts[i] else math.floor(lo[i]) + 0.5
            for i in range(3)
        )
        # Плоский меш всё равно занимает один слой
        dims = [max(1, math.ceil(size[i])) for i in range(3)]

        return GridLayout(
            dims[0], dims[1], dims[2],
            origin=origin,
            axis_order=settings.axis_order,
            invert_x=settings.invert_x,
            invert_y=settings.invert_y,
            invert_z=settings.invert_z,
        )

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def length(self) -> int:
        return self._length

    @property
    def origin(self) -> Tuple[float, float, float]:
        return self._origin

    @property
    def axis_order(self) -> AxisOrder:
        return self._axis_order

    @property
    def invert_x(self) -> bool:
        return self._invert_x

    @property
    def invert_y(self) -> bool:
        return self._invert_y

    @property
    def invert_z(self) -> bool:
        return self._invert_z

    @property
    def voxel_count(self) -> int:
        return self._width * self._height * self._length

    @property
    def dimensions(self) -> Tuple[int, int, int]:
        """
        Размеры (first, second, third) для раскладки экспорта:
        какая из width/height/length соответствует быстрой, средней и медленной оси.
        """
        w, h, l = self._width, self._height, self._length
        order = self._axis_order
        return first_dimension(w, h, l, order), second_dimension(w, h, l, order), third_dimension(w, h, l, order)

    # ----------------------------------------------------------------
    # Координатные преобразования
    # ----------------------------------------------------------------

    def check_position(self, pos: int) -> None:
        if not 0 <= pos < self.voxel_count:
            raise InvalidArgument(f"Voxel position {pos} out of range [0, {self.voxel_count})")

    def pos_to_local(self, pos: int) -> Tuple[int, int, int]:
        """Линейный индекс -> локальные координаты (x, y, z)."""
        self.check_position(pos)
        args = (self._axis_order, self._width, self._height, self._length)
        return relative_x(pos, *args), relative_y(pos, *args), relative_z(pos, *args)

    def local_to_pos(self, x: int, y: int, z: int) -> int:
        """Локальные координаты -> линейный индекс."""
        if not (0 <= x < self._width and 0 <= y < self._height and 0 <= z < self._length):
            raise InvalidArgument(
                f"Local coordinates ({x}, {y}, {z}) outside grid "
                f"{self._width}x{self._height}x{self._length}"
            )
        return encode_position(x, y, z, self._axis_order, self._width, self._height, self._length)

    def local_to_world(self, x: int, y: int, z: int) -> Tuple[float, float, float]:
        """Локальные координаты -> мировой центр вокселя."""
        x0, y0, z0 = self._origin
        return (
            x0 + (-x if self._invert_x else x),
            y0 + (-y if self._invert_y else y),
            z0 + (-z if self._invert_z else z),
        )

    def pos_to_world(self, pos: int) -> Tuple[float, float, float]:
        """Линейный индекс -> мировой центр вокселя."""
        return self.local_to_world(*self.pos_to_local(pos))

    def __repr__(self) -> str:
        return (
            f"GridLayout({self._width}x{self._height}x{self._length}, origin={self._origin}, "
            f"order={self._axis_order.name}, invert=({self._invert_x}, {self._invert_y}, {self._invert_z}))"
        )

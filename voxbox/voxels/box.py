"""
Box — квантованный AABB внутри вокселя (6 байт, шаг 1/16).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from voxbox.geombase.bounds import Bounds

# Разрешение квантования: 16 делений на единичный воксель
BOX_RESOLUTION = 16

# Формат экспорта по умолчанию (слоты 6-11 — «перевёрнутые» значения 16 - v)
DEFAULT_OUTPUT_FORMAT = "{8}, {11}, {0}, {3}, {1}, {4}"

OUTPUT_FORMAT_HELP = """{0} = x0,
{1} = y0,
{2} = z0,
{3} = x1,
{4} = y1,
{5} = z1,
{6} = Flipped x0,
{7} = Flipped y0,
{8} = Flipped z0,
{9} = Flipped x1,
{10} = Flipped y1,
{11} = Flipped z1"""


def convert_range(
    original_start: float,
    original_end: float,
    new_start: float,
    new_end: float,
    value: float,
) -> float:
    """Линейное отображение value из [original_start, original_end] в [new_start, new_end]."""
    scale = (new_end - new_start) / (original_end - original_start)
    return new_start + (value - original_start) * scale


def quantize_offset(offset: float) -> int:
    """Смещение от центра вокселя [-0.5, 0.5] -> целое [0, 16] (отбрасывание дробной части)."""
    value = convert_range(-0.5, 0.5, 0, BOX_RESOLUTION, offset)
    value = min(max(value, 0.0), float(BOX_RESOLUTION))
    return int(value)


@dataclass(frozen=True)
class Box:
    """
    Нормализованный бокс: координаты углов в долях 1/16 вокселя.

    Сравнение точное; Box(0, 0, 0, 16, 16, 16) — полностью заполненный воксель.
    """

    x0: int
    y0: int
    z0: int
    x1: int
    y1: int
    z1: int

    @property
    def values(self) -> Tuple[int, int, int, int, int, int]:
        return self.x0, self.y0, self.z0, self.x1, self.y1, self.z1

    @property
    def flipped(self) -> Tuple[int, int, int, int, int, int]:
        """Дополнения 16 - v для авторинга от противоположного угла."""
        return tuple(BOX_RESOLUTION - v for v in self.values)

    def is_full(self) -> bool:
        return self == FULL_BOX

    def format(self, template: str = DEFAULT_OUTPUT_FORMAT) -> str:
        """
        Форматировать по шаблону с 12 слотами: {0}-{5} — x0..z1,
        {6}-{11} — их дополнения до 16.
        """
        return "[" + template.format(*self.values, *self.flipped) + "]"

    def to_offsets(self) -> Tuple[float, float, float, float, float, float]:
        """Обратно в смещения от центра вокселя (с точностью до 1/16)."""
        return tuple(v / BOX_RESOLUTION - 0.5 for v in self.values)

    def __str__(self) -> str:
        return "[" + ",".join(str(v) for v in self.values) + "]"


FULL_BOX = Box(0, 0, 0, BOX_RESOLUTION, BOX_RESOLUTION, BOX_RESOLUTION)


def normalize_bounds(bounds: Bounds, center) -> Box:
    """
    Перевести мировой AABB в Box относительно центра вокселя center.

    Преобразование с потерями: каждая координата усекается до 1/16.
    """
    cx, cy, cz = center
    lo = bounds.min
    hi = bounds.max
    return Box(
        quantize_offset(lo[0] - cx),
        quantize_offset(lo[1] - cy),
        quantize_offset(lo[2] - cz),
        quantize_offset(hi[0] - cx),
        quantize_offset(hi[1] - cy),
        quantize_offset(hi[2] - cz),
    )

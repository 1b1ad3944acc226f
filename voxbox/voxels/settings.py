"""
Настройки генератора AABB.

Хранятся как JSON (например generator.json рядом с мешем).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from voxbox import log
from voxbox.errors import InvalidArgument
from voxbox.voxels.box import DEFAULT_OUTPUT_FORMAT
from voxbox.voxels.grid import AxisOrder
from voxbox.voxels.intersection import InsideTest

MIN_ACCEPTABLE_AABB = 1
MAX_ACCEPTABLE_AABB = 10


@dataclass
class GeneratorSettings:
    """Конфигурация генерации: раскладка сетки и бюджет боксов на воксель."""

    invert_x: bool = False
    invert_y: bool = False
    invert_z: bool = True

    axis_order: AxisOrder = AxisOrder.XZY
    """Порядок линейной нумерации вокселей."""

    acceptable_aabb: int = 4
    """Максимум боксов на воксель, при котором ещё можно уточнять сетку."""

    inside_test: InsideTest = InsideTest.SIX_RAYS
    """Вариант теста «точка внутри меша»."""

    workers: int = 1
    """Количество потоков пакетного расчёта."""

    output_format: str = DEFAULT_OUTPUT_FORMAT
    """Шаблон экспорта Box.format."""

    def validate(self) -> None:
        """Проверить значения; InvalidArgument при выходе за допустимые границы."""
        if not isinstance(self.acceptable_aabb, int) or isinstance(self.acceptable_aabb, bool):
            raise InvalidArgument(f"acceptable_aabb must be int, got {self.acceptable_aabb!r}")
        if not MIN_ACCEPTABLE_AABB <= self.acceptable_aabb <= MAX_ACCEPTABLE_AABB:
            raise InvalidArgument(
                f"acceptable_aabb must be in [{MIN_ACCEPTABLE_AABB}, {MAX_ACCEPTABLE_AABB}], "
                f"got {self.acceptable_aabb}"
            )
        if not isinstance(self.workers, int) or self.workers < 1:
            raise InvalidArgument(f"workers must be a positive int, got {self.workers!r}")
        try:
            self.axis_order = AxisOrder(self.axis_order)
        except ValueError as e:
            raise InvalidArgument(f"Unknown axis order: {self.axis_order!r}") from e
        if not isinstance(self.inside_test, InsideTest):
            raise InvalidArgument(f"Unknown inside test: {self.inside_test!r}")

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "invert_x": self.invert_x,
            "invert_y": self.invert_y,
            "invert_z": self.invert_z,
            "axis_order": self.axis_order.name,
            "acceptable_aabb": self.acceptable_aabb,
            "inside_test": self.inside_test.value,
            "workers": self.workers,
            "output_format": self.output_format,
        }

    @staticmethod
    def from_dict(data: dict) -> "GeneratorSettings":
        """Deserialize from dictionary. Unknown enum names fall back to defaults."""
        defaults = GeneratorSettings()

        order_name = data.get("axis_order", defaults.axis_order.name)
        try:
            axis_order = AxisOrder[order_name]
        except KeyError:
            log.warn(f"[GeneratorSettings] unknown axis order {order_name!r}, using {defaults.axis_order.name}")
            axis_order = defaults.axis_order

        inside_name = data.get("inside_test", defaults.inside_test.value)
        try:
            inside_test = InsideTest(inside_name)
        except ValueError:
            log.warn(f"[GeneratorSettings] unknown inside test {inside_name!r}, using {defaults.inside_test.value}")
            inside_test = defaults.inside_test

        acceptable_aabb = _int_field(data, "acceptable_aabb", defaults.acceptable_aabb)
        workers = _int_field(data, "workers", defaults.workers)

        return GeneratorSettings(
            invert_x=bool(data.get("invert_x", defaults.invert_x)),
            invert_y=bool(data.get("invert_y", defaults.invert_y)),
            invert_z=bool(data.get("invert_z", defaults.invert_z)),
            axis_order=axis_order,
            acceptable_aabb=acceptable_aabb,
            inside_test=inside_test,
            workers=workers,
            output_format=data.get("output_format", defaults.output_format),
        )

    @classmethod
    def load(cls, path: Union[str, Path]) -> "GeneratorSettings":
        """Загрузить настройки из JSON. Отсутствующий файл — настройки по умолчанию."""
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def save(self, path: Union[str, Path]) -> None:
        """Сохранить настройки в JSON."""
        path = Path(path)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)


def _int_field(data: dict, key: str, default: int) -> int:
    value = data.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InvalidArgument(f"{key} must be an integer, got {value!r}") from e

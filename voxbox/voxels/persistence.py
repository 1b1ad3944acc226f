"""
Экспорт и сохранение результатов генерации.

Текстовый формат — одна строка на воксель в порядке линейного индекса:
    null            — боксов нет;
    {}              — ровно один полный бокс;
    {[..],[..]}     — боксы по шаблону Box.format.
Строки разделены ",\n".
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Sequence, Union

from voxbox.voxels.batch import BatchHandle
from voxbox.voxels.box import DEFAULT_OUTPUT_FORMAT, FULL_BOX, Box
from voxbox.voxels.grid import AxisOrder, GridLayout


RESULT_FILE_EXTENSION = ".aabb.json"
RESULT_FORMAT_VERSION = "1.0"

BoxLists = Sequence[Sequence[Box]]


def _box_lists(results: Union[BatchHandle, BoxLists]) -> BoxLists:
    if isinstance(results, BatchHandle):
        return results.normalized_boxes()
    return results


def format_voxel(boxes: Sequence[Box], output_format: str = DEFAULT_OUTPUT_FORMAT) -> str:
    """Строка экспорта одного вокселя."""
    if len(boxes) == 0:
        return "null"
    if len(boxes) == 1 and boxes[0] == FULL_BOX:
        return "{}"
    return "{" + ",".join(box.format(output_format) for box in boxes) + "}"


def export_text(results: Union[BatchHandle, BoxLists], output_format: str = DEFAULT_OUTPUT_FORMAT) -> str:
    """
    Текстовый экспорт всех вокселей.

    Args:
        results: BatchHandle или список списков Box по линейному индексу.
        output_format: Шаблон Box.format.
    """
    lines = [format_voxel(boxes, output_format) for boxes in _box_lists(results)]
    if not lines:
        return ""
    return ",\n".join(lines) + "\n"


def save_text(
    path: Union[str, Path],
    results: Union[BatchHandle, BoxLists],
    output_format: str = DEFAULT_OUTPUT_FORMAT,
) -> None:
    """Записать текстовый экспорт в файл."""
    path = Path(path)
    with open(path, "w", encoding="utf-8") as f:
        f.write(export_text(results, output_format))


class ResultPersistence:
    """
    Сохранение и загрузка результатов в JSON (.aabb.json).

    Хранит раскладку сетки и квантованные боксы каждого вокселя.
    """

    @staticmethod
    def save(layout: GridLayout, results: Union[BatchHandle, BoxLists], path: Union[str, Path]) -> None:
        """
        Сохранить результаты в файл.

        Args:
            layout: Сетка, по которой считались результаты.
            results: BatchHandle или списки Box по линейному индексу.
            path: Путь к файлу.
        """
        path = Path(path)
        box_lists = _box_lists(results)

        data = {
            "version": RESULT_FORMAT_VERSION,
            "width": layout.width,
            "height": layout.height,
            "length": layout.length,
            "origin": list(layout.origin),
            "axis_order": layout.axis_order.name,
            "invert": [layout.invert_x, layout.invert_y, layout.invert_z],
            "voxels": {},
        }

        # Пустые воксели не сохраняем
        for pos, boxes in enumerate(box_lists):
            if boxes:
                data["voxels"][str(pos)] = [list(box.values) for box in boxes]

        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    @staticmethod
    def load(path: Union[str, Path]) -> "tuple[GridLayout, List[List[Box]]]":
        """
        Загрузить результаты из файла.

        Returns:
            (сетка, списки Box по линейному индексу).

        Raises:
            ValueError: Если формат файла неверный.
            FileNotFoundError: Если файл не найден.
        """
        path = Path(path)

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        version = data.get("version", "")
        if not version.startswith("1."):
            raise ValueError(f"Unsupported result format version: {version}")

        invert = data.get("invert", [False, False, False])
        layout = GridLayout(
            data["width"],
            data["height"],
            data["length"],
            origin=tuple(data.get("origin", (0.5, 0.5, 0.5))),
            axis_order=AxisOrder[data.get("axis_order", AxisOrder.XZY.name)],
            invert_x=invert[0],
            invert_y=invert[1],
            invert_z=invert[2],
        )

        box_lists: List[List[Box]] = [[] for _ in range(layout.voxel_count)]
        for key, boxes in data.get("voxels", {}).items():
            pos = int(key)
            layout.check_position(pos)
            box_lists[pos] = [Box(*values) for values in boxes]

        return layout, box_lists

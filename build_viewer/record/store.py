# record/store.py
"""
Record-файл: снимок прошлого запуска рядом с проектом.
Формат повторяет фрагменты map-файла, поэтому читается теми же парсерами.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from ..errors import CannotOpen
from ..mapfile.objects import STR_OBJECT_TOTALS, ObjectTableMode, parse_object_table
from ..mapfile.reader import STR_MEMORY_MAP_OF_THE_IMAGE
from ..mapfile.regions import (
    STR_EXECUTE_BASE_ADDR,
    STR_EXECUTION_REGION,
    STR_IMAGE_COMPONENT_SIZE,
    STR_LOAD_REGION,
    STR_REGION_MAX_SIZE,
    STR_REGION_USED_SIZE,
    parse_region_table,
)
from ..model import LoadRegion, ObjectInfo
from ..scan import iter_lines

OBJECT_HEADER = "      Code (inc. data)   RO Data    RW Data    ZI Data      Debug   Object Name"


@dataclass
class Record:
    objects: List[ObjectInfo] = field(default_factory=list)
    load_regions: List[LoadRegion] = field(default_factory=list)
    complete: bool = False   # дочитали и до 'Object Totals', и до 'Image component sizes'


# ---- Запись ----
def format_object_rows(objects: Iterable[ObjectInfo]) -> List[str]:
    # inc.data и debug в снимке не нужны, пишем нули
    return [
        f"{o.code:10d} {0:10d} {o.ro_data:10d} {o.rw_data:10d} {o.zi_data:10d} {0:10d}   {o.name}"
        for o in objects
    ]


def format_region_rows(load_regions: Iterable[LoadRegion]) -> List[str]:
    lines = [STR_MEMORY_MAP_OF_THE_IMAGE, ""]
    for load in load_regions:
        lines += [f"\t{STR_LOAD_REGION} {load.name} ", ""]
        for er in load.regions:
            lines += [
                f"\t\t{STR_EXECUTION_REGION} {er.name} ("
                f"{STR_EXECUTE_BASE_ADDR}0x{er.base:08X}, "
                f"{STR_REGION_USED_SIZE}0x{er.used_size:08X}, "
                f"{STR_REGION_MAX_SIZE}0x{er.size:08X}, END)",
                "",
            ]
    lines.append(STR_IMAGE_COMPONENT_SIZE)
    return lines


def save_record(path: Path, objects: Iterable[ObjectInfo], load_regions: Iterable[LoadRegion],
                include_objects: bool = True, encoding: str = "utf-8") -> Path:
    """Перезаписывает снимок целиком. Для LTO-сборки объектов нет: только заголовок и итог."""
    path = Path(path)
    lines = [OBJECT_HEADER]
    if include_objects:
        lines += format_object_rows(objects)
    lines += [STR_OBJECT_TOTALS, ""]
    lines += format_region_rows(load_regions)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n", encoding=encoding)
    except OSError as e:
        raise CannotOpen(path, str(e)) from e
    return path


# ---- Чтение ----
def load_record(path: Path, encoding: str = "utf-8") -> Optional[Record]:
    """Нет файла -> None (первый запуск, всё будет [NEW])."""
    path = Path(path)
    if not path.is_file():
        return None

    with open(path, "rb") as f:
        lines = iter_lines(f, encoding)
        table = parse_object_table(lines, ObjectTableMode.REPLAY)
        load_regions, complete = parse_region_table(lines)
    return Record(objects=table.objects, load_regions=load_regions,
                  complete=table.complete and complete)

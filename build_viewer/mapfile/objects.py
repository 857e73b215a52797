# mapfile/objects.py
"""
Таблица "Image component sizes":

      Code (inc. data)   RO Data    RW Data    ZI Data      Debug   Object Name
       172         10          0          4          0       1234   main.o

Режимы: USER (объекты проекта до "Object Totals"), LIBRARY (члены
пользовательских библиотек до "Library Totals"), REPLAY (record-файл прошлого запуска).
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable, List, Optional, Sequence

from ..model import ObjectInfo

STR_OBJECT_TOTALS = "Object Totals"
STR_LIBRARY_TOTALS = "Library Totals"
STR_LTO_LLVM = "lto-llvm-"

OBJECT_INFO_COLUMNS = 7   # 6 чисел + имя


class ObjectTableMode(Enum):
    USER = auto()
    LIBRARY = auto()
    REPLAY = auto()


@dataclass
class ObjectTable:
    objects: List[ObjectInfo] = field(default_factory=list)
    lto: bool = False
    complete: bool = False


def parse_object_row(line: str) -> Optional[ObjectInfo]:
    if ".o" not in line:
        return None
    parts = line.split(None, OBJECT_INFO_COLUMNS - 1)
    if len(parts) < OBJECT_INFO_COLUMNS:
        return None
    try:
        code, _inc_data, ro, rw, zi, _debug = (int(p) for p in parts[:6])
    except ValueError:
        return None
    return ObjectInfo(name=parts[6].strip(), code=code, ro_data=ro, rw_data=rw, zi_data=zi)


def _parse_objects(lines: Iterable[str], detect_lto: bool) -> ObjectTable:
    table = ObjectTable()
    for line in lines:
        if detect_lto and STR_LTO_LLVM in line:
            # при LTO линкер видит один объект lto-llvm-*.o, разбивки по файлам нет
            table.lto = True
            table.objects.clear()
            break
        if STR_OBJECT_TOTALS in line:
            table.complete = True
            break
        obj = parse_object_row(line)
        if obj is not None:
            table.objects.append(obj)
    return table


def _parse_library_members(lines: Iterable[str], library_names: Sequence[str]) -> ObjectTable:
    wanted = {name.lower() for name in library_names}
    table = ObjectTable()
    scanning = True
    for line in lines:
        if STR_LIBRARY_TOTALS in line:
            table.complete = True
            break
        if not scanning:
            continue
        obj = parse_object_row(line)
        if obj is None:
            continue
        if obj.name.lower() in wanted:
            table.objects.append(obj)
        else:
            # члены библиотек не разделены, первый чужой объект - конец пользовательских
            scanning = False
    return table


def parse_object_table(lines: Iterable[str], mode: ObjectTableMode = ObjectTableMode.USER,
                       library_names: Sequence[str] = ()) -> ObjectTable:
    if mode is ObjectTableMode.LIBRARY:
        return _parse_library_members(lines, library_names)
    return _parse_objects(lines, detect_lto=mode is ObjectTableMode.USER)

# mapfile/reader.py
from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, List, Optional, Sequence

from ..errors import CannotOpen, NoObjectTable, SectionNotFound
from ..model import LoadRegion, MemoryCatalog, ObjectInfo
from ..scan import iter_lines
from .objects import ObjectTableMode, parse_object_table
from .regions import parse_region_table

STR_MEMORY_MAP_OF_THE_IMAGE = "Memory Map of the image"

_CHUNK = 64 * 1024


@dataclass
class MapFile:
    path: Path
    load_regions: List[LoadRegion] = field(default_factory=list)
    objects: List[ObjectInfo] = field(default_factory=list)
    lto: bool = False


def find_section(fh: BinaryIO, marker: bytes, chunk: int = _CHUNK) -> Optional[int]:
    """
    Ищет маркер с конца файла, построчно, блоками по chunk байт.
    Возвращает смещение начала строки, следующей за найденной, или None.
    Таблица регионов в конце map, а сам map бывает на десятки мегабайт.
    """
    end = fh.seek(0, os.SEEK_END)
    pos = end
    carry = b""   # начало строки, разрезанной границей блока
    while pos > 0:
        step = min(chunk, pos)
        pos -= step
        fh.seek(pos)
        block = fh.read(step) + carry
        lines = block.split(b"\n")
        carry = lines.pop(0) if pos > 0 else b""

        line_stop = pos + len(block)
        for line in reversed(lines):
            if marker in line:
                return min(line_stop + 1, end)
            line_stop -= len(line) + 1
    return None


def parse_map_file(path: Path | str, catalog: Optional[MemoryCatalog] = None,
                   library_names: Sequence[str] = (), encoding: str = "utf-8") -> MapFile:
    path = Path(path)
    if not path.is_file():
        raise CannotOpen(path)

    result = MapFile(path)
    with open(path, "rb") as f:
        start = find_section(f, STR_MEMORY_MAP_OF_THE_IMAGE.encode("ascii"))
        if start is None:
            raise SectionNotFound(path)

        f.seek(start)
        lines = iter_lines(f, encoding)
        result.load_regions, _ = parse_region_table(lines, catalog)

        table = parse_object_table(lines, ObjectTableMode.USER)
        if not table.objects and not table.lto:
            raise NoObjectTable(path)
        result.objects = table.objects
        result.lto = table.lto

        if library_names and not table.lto:
            members = parse_object_table(lines, ObjectTableMode.LIBRARY, library_names)
            result.objects.extend(members.objects)
    return result

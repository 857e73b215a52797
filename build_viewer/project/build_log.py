# project/build_log.py
from __future__ import annotations
from pathlib import Path
from typing import Dict, Optional

from ..scan import iter_lines, quoted

STR_RENAME_MARK = " - object file renamed from "
STR_COMPILING = "compiling "


def object_basename(path: str) -> str:
    return path.replace("\\", "/").rsplit("/", 1)[-1]


def parse_rename_line(line: str) -> Optional[tuple[str, str]]:
    """
    "'..\\src\\b\\util.c' - object file renamed from '.\\Objects\\util.o' to '.\\Objects\\util_1.o'."
    -> ('..\\src\\b\\util.c', 'util_1.o')
    """
    if STR_RENAME_MARK not in line:
        return None
    parts = quoted(line)
    if len(parts) < 2:
        return None
    return parts[0], object_basename(parts[-1])


def parse_build_log(path: Path, encoding: str = "utf-8") -> Optional[Dict[str, str]]:
    """
    Переименования объектных файлов из <output>.build_log.htm: путь исходника -> новое имя .o.
    Keil печатает их до первой строки 'compiling '. Нет файла -> None.
    """
    path = Path(path)
    if not path.is_file():
        return None

    renames: Dict[str, str] = {}
    with open(path, "rb") as f:
        for line in iter_lines(f, encoding):
            found = parse_rename_line(line)
            if found:
                source, new_name = found
                renames[source] = new_name
            elif STR_COMPILING in line:
                break
    return renames

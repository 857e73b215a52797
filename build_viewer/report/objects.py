# report/objects.py
from __future__ import annotations
from typing import List, Optional

from ..config import RunConfig
from ..model import ObjectInfo

STR_FILE = "FILE(s)"
RAM_FLASH_HEADER = "|         RAM (byte)       |       FLASH (byte)       |"
PATH_SUFFIX = "():"
TAG_WIDTH = 10


def delta_tag(current: int, previous: Optional[int], width: int = TAG_WIDTH) -> str:
    """[NEW] / [+n] / [-n] / пробелы той же ширины."""
    if previous is None:
        return "[NEW]".ljust(width)
    diff = current - previous
    if diff == 0:
        return " " * width
    sign = "+" if diff > 0 else "-"
    return f"[{sign}{abs(diff)}]".ljust(width)


def label_width(max_name: int, max_path: int, display_path: bool) -> int:
    width = max(max_name, max_path) if display_path else max_name
    if width + 2 < len(STR_FILE):
        width = len(STR_FILE)
    return width


def object_label(obj: ObjectInfo, display_path: bool) -> str:
    if display_path and obj.path:
        return obj.path
    return obj.name or "UNKNOWN"


def render_object_table(objects: List[ObjectInfo], width: int, config: RunConfig) -> List[str]:
    pad = width + 2 - len(STR_FILE)
    if config.display_path:
        pad += len(PATH_SUFFIX)
    right = pad // 2
    header = " " * (pad - right) + STR_FILE + " " * right + RAM_FLASH_HEADER
    rule = "-" * len(header)

    lines = [rule, header, rule]
    for obj in objects:
        label = object_label(obj, config.display_path)
        space = " " * max(width - len(label) + 1, 1)
        prefix = f"{label}{PATH_SUFFIX}{space}" if config.display_path else f"{label}{space}"

        old = obj.previous
        ram_tag = delta_tag(obj.ram, old.ram if old else None)
        flash_tag = delta_tag(obj.flash, old.flash if old else None)
        lines.append(f"{prefix} |  {obj.ram:10d}  {ram_tag}  |  {obj.flash:10d}  {flash_tag}  |")
    lines.append(rule)
    return lines

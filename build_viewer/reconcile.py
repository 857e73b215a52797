# reconcile.py
"""Связываем текущую сборку с прошлым снимком: только по имени."""
from __future__ import annotations
from typing import TYPE_CHECKING, Dict, List, Optional

from .model import ExecutionRegion, LoadRegion, ObjectInfo, iter_exec_regions

if TYPE_CHECKING:
    from .record.store import Record


def reconcile_objects(current: List[ObjectInfo], previous: List[ObjectInfo]) -> int:
    """Имена объектов сравниваются без учёта регистра. Возвращает число совпавших."""
    index: Dict[str, ObjectInfo] = {}
    for old in previous:
        index.setdefault(old.name.lower(), old)

    matched = 0
    for obj in current:
        obj.previous = index.get(obj.name.lower())
        if obj.previous is not None:
            matched += 1
    return matched


def reconcile_regions(current: List[LoadRegion], previous: List[LoadRegion]) -> int:
    """Execution region ищется по точному имени во всех load region прошлого снимка."""
    index: Dict[str, ExecutionRegion] = {}
    for old in iter_exec_regions(previous):
        index.setdefault(old.name, old)

    matched = 0
    for region in iter_exec_regions(current):
        region.previous = index.get(region.name)
        if region.previous is not None:
            matched += 1
    return matched


def reconcile(objects: List[ObjectInfo], load_regions: List[LoadRegion],
              record: Optional[Record]) -> tuple[int, int]:
    if record is None:
        for obj in objects:
            obj.previous = None
        for region in iter_exec_regions(load_regions):
            region.previous = None
        return 0, 0
    return (reconcile_objects(objects, record.objects),
            reconcile_regions(load_regions, record.load_regions))

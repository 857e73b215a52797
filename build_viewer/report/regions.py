# report/regions.py
"""
Блок регионов с прогресс-барами:

    LR_IROM1
            FLASH 1    [0x08000000 | 0x00020000 (131072)]
                    ER_IROM1  [0x08000000]|■■■■______...| (   6.5 KB / 128.0 KB )   5.1%  [+24]
"""
from __future__ import annotations
from enum import Enum, auto
from typing import Iterator, List, Optional, Tuple

from ..config import BAR_WIDTH, RunConfig
from ..model import (
    UNKNOWN_MEMORY_ID,
    ExecutionRegion,
    LoadRegion,
    MemoryCatalog,
    MemoryKind,
    MemoryRegion,
    iter_exec_regions,
)

INDENT_MEMORY = " " * 8
INDENT_REGION = " " * 16
LABEL_WIDTH = 9
STR_UNKNOWN = "UNKNOWN"
STR_NULL = "NULL"

KB = 1024
MB = 1024 * 1024


class Layout(Enum):
    BY_TYPE = auto()       # SRAM n / FLASH n
    BY_LOCALITY = auto()   # IRAM n / IROM n, затем RAM n / ROM n
    FLAT = auto()          # каталог пуст, только список регионов


def select_layout(has_pack: bool, custom_scatter: bool, catalog_non_empty: bool) -> Layout:
    if not catalog_non_empty:
        return Layout.FLAT
    if has_pack and not custom_scatter:
        return Layout.BY_TYPE
    return Layout.BY_LOCALITY


def human_size(n: int) -> str:
    if n < KB:
        return f"{n:8d}"
    if n < MB:
        return f"{n / KB:5.1f} KB"
    return f"{n / MB:5.2f} MB"


def render_bar(region: ExecutionRegion, symbols: Tuple[str, str, str],
               width: int = BAR_WIDTH) -> str:
    used_sym, zi_sym, free_sym = symbols
    filled = min(int(region.percent) // 2, width)
    if filled == 0 and region.used_size > 0:
        filled = 1
    cells = [used_sym] * filled + [free_sym] * (width - filled)

    if region.size > 0:
        for block in region.zi_blocks:
            start = int((block.start - region.base) * 100 / region.size / 2)
            end = int((block.end - region.base) * 100 / region.size / 2)
            if block.start == region.base:
                start = 1
            # ZI рисуется только поверх занятых клеток
            for i in range(max(start, 0), min(end, filled)):
                cells[i] = zi_sym
            if block.end >= region.end:
                break
    return "".join(cells)


def region_tag(region: ExecutionRegion) -> str:
    if region.previous is None:
        return "[NEW]"
    diff = region.used_size - region.previous.used_size
    if diff == 0:
        return ""
    return f"[{'+' if diff > 0 else '-'}{abs(diff)}]"


def render_region_line(region: ExecutionRegion, name_width: int,
                       symbols: Tuple[str, str, str]) -> str:
    space = " " * (name_width - len(region.name) + 1)
    line = (f"{INDENT_REGION}{region.name}{space} [0x{region.base:08X}]"
            f"|{render_bar(region, symbols)}| "
            f"( {human_size(region.used_size)} / {human_size(region.size)} ) "
            f"{region.percent:5.1f}%  {region_tag(region)}")
    return line.rstrip()


def memory_header(label: str, memory: MemoryRegion, name_width: int) -> str:
    return (f"{INDENT_MEMORY}{label:<{LABEL_WIDTH}}{' ' * max(name_width, 1)} "
            f"[0x{memory.base:08X} | 0x{memory.size:08X} ({memory.size})]")


class RegionRenderer:
    def __init__(self, catalog: MemoryCatalog, layout: Layout, config: RunConfig):
        self.catalog = catalog
        self.layout = layout
        self.config = config

    def groups(self) -> Iterator[Tuple[str, MemoryRegion]]:
        """Подписи и области каталога в порядке вывода."""
        if self.layout is Layout.BY_TYPE:
            for n, memory in enumerate(self.catalog.of_kind(MemoryKind.RAM), 1):
                yield f"SRAM {n}", memory
            for n, memory in enumerate(self.catalog.of_kind(MemoryKind.FLASH), 1):
                yield f"FLASH {n}", memory
        elif self.layout is Layout.BY_LOCALITY:
            for on_chip, prefix in ((True, "I"), (False, "")):
                for kind, word in ((MemoryKind.RAM, "RAM"), (MemoryKind.FLASH, "ROM")):
                    items = [m for m in self.catalog.of_kind(kind) if m.on_chip is on_chip]
                    for n, memory in enumerate(items, 1):
                        yield f"{prefix}{word} {n}", memory

    def render(self, load_regions: List[LoadRegion]) -> List[str]:
        regions = list(iter_exec_regions(load_regions))
        for region in regions:
            region.rendered = False
        name_width = max((len(r.name) for r in regions), default=0)

        lines: List[str] = []
        for load in load_regions:
            lines.append(load.name)
            if self.layout is Layout.FLAT:
                lines += self._region_lines(load.regions, name_width)
                lines.append("")
                continue
            for label, memory in self.groups():
                lines += self._memory_block(load, label, memory, name_width)
            lines += self._unknown_block(load, name_width)
        return lines

    def _region_lines(self, regions: List[ExecutionRegion], name_width: int) -> List[str]:
        out = []
        for region in regions:
            if region.rendered:
                continue
            out.append(render_region_line(region, name_width, self.config.symbols))
            region.rendered = True
        return out

    def _memory_block(self, load: LoadRegion, label: str, memory: MemoryRegion,
                      name_width: int) -> List[str]:
        header = memory_header(label, memory, name_width)
        members = [r for r in load.regions if r.memory_id == memory.id]
        if not members:
            return [header, INDENT_REGION + STR_NULL, ""]
        return [header] + self._region_lines(members, name_width) + [""]

    def _unknown_block(self, load: LoadRegion, name_width: int) -> List[str]:
        members = [r for r in load.regions if r.memory_id == UNKNOWN_MEMORY_ID and not r.rendered]
        if not members:
            return []
        return [INDENT_MEMORY + STR_UNKNOWN] + self._region_lines(members, name_width) + [""]


def render_regions(load_regions: List[LoadRegion], catalog: MemoryCatalog,
                   layout: Layout, config: Optional[RunConfig] = None) -> List[str]:
    return RegionRenderer(catalog, layout, config or RunConfig()).render(load_regions)

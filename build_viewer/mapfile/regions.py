# mapfile/regions.py
"""
Таблица регионов из раздела "Memory Map of the image".

    Load Region LR_IROM1 (Base: 0x08000000, Size: 0x00001a4c, Max: 0x00020000, ABSOLUTE)
      Execution Region RW_IRAM1 (Exec base: 0x20000000, Load base: 0x080019f8, Size: 0x00000660, Max: 0x00005000, ABSOLUTE)
      Exec Addr    Load Addr    Size         Type   Attr      Idx    E Section Name        Object
      0x20000014        -       0x00000040   Zero   RW           22    .bss                main.o

Старый формат armlink пишет "Base:" без колонки Load Addr, поэтому размер
в строках секций стоит на позиции 1, а не 2.
"""
from __future__ import annotations
from typing import Iterable, List, Optional, Tuple

from ..model import ExecutionRegion, LoadRegion, MemoryCatalog, MemoryKind, ZiBlock
from ..scan import hex_field, word_after

STR_LOAD_REGION = "Load Region"
STR_EXECUTION_REGION = "Execution Region"
STR_EXECUTE_BASE_ADDR = "Exec base: "
STR_EXECUTE_BASE = "Base: "
STR_LOAD_BASE = "Load base: "
STR_REGION_USED_SIZE = "Size: "
STR_REGION_MAX_SIZE = "Max: "
STR_LOAD_ADDR = "Load Addr"
STR_IMAGE_COMPONENT_SIZE = "Image component sizes"
STR_ZERO_INIT = " Zero "
STR_PADDING = " PAD"

SIZE_COLUMN_WITH_LOAD = 2
SIZE_COLUMN_PLAIN = 1


def parse_exec_header(line: str) -> Optional[ExecutionRegion]:
    name = word_after(line, STR_EXECUTION_REGION)
    if not name:
        return None
    marker = STR_EXECUTE_BASE_ADDR if STR_EXECUTE_BASE_ADDR in line else STR_EXECUTE_BASE
    base = hex_field(line, marker) or 0
    used = hex_field(line, STR_REGION_USED_SIZE) or 0
    size = hex_field(line, STR_REGION_MAX_SIZE) or 0
    return ExecutionRegion(name=name, base=base, size=size, used_size=used)


def size_column(line: str) -> int:
    return SIZE_COLUMN_WITH_LOAD if (STR_LOAD_BASE in line or STR_LOAD_ADDR in line) else SIZE_COLUMN_PLAIN


def is_column_header(line: str) -> bool:
    return "Addr" in line and "Size" in line and "0x" not in line


class ZiAccumulator:
    """
    Собирает блоки zero-init внутри одного execution region.
    Смежные строки Zero/PAD сливаются в один блок; любая другая строка с адресом
    обрывает текущий блок. Перед новым регионом обязателен reset().
    """

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.active = False
        self.last_end = 0
        self.current: Optional[ZiBlock] = None

    def feed(self, region: ExecutionRegion, line: str, size_col: int) -> None:
        if STR_ZERO_INIT in line:
            self.active = True
        elif STR_PADDING in line:
            if not self.active:
                return
        else:
            self.reset()
            return

        tokens = line.split()
        try:
            addr = int(tokens[0], 16)
            size = int(tokens[size_col], 16)
        except (IndexError, ValueError):
            return

        if self.current is None or addr > self.last_end:
            self.current = ZiBlock(addr, size)
            region.zi_blocks.append(self.current)
        elif self.current is not None:
            self.current.size += size
        self.last_end = addr + size


class RegionTableParser:
    def __init__(self, catalog: Optional[MemoryCatalog] = None):
        self.catalog = catalog
        self.load_regions: List[LoadRegion] = []
        self.complete = False
        self._load: Optional[LoadRegion] = None
        self._exec: Optional[ExecutionRegion] = None
        self._size_col = SIZE_COLUMN_WITH_LOAD
        self._zi = ZiAccumulator()

    def feed(self, line: str) -> bool:
        """False на строке 'Image component sizes' (конец таблицы)."""
        if STR_IMAGE_COMPONENT_SIZE in line:
            self.complete = True
            return False

        if STR_LOAD_REGION in line:
            name = word_after(line, STR_LOAD_REGION)
            if name:
                self._load = LoadRegion(name)
                self.load_regions.append(self._load)
                self._exec = None
                self._zi.reset()
            return True

        if self._load is None:
            return True

        if STR_EXECUTION_REGION in line:
            self._zi.reset()
            region = parse_exec_header(line)
            if region is None:
                return True
            memory = self.catalog.find(region.base) if self.catalog else None
            region.bind(memory)
            self._load.regions.append(region)
            self._exec = region
            self._size_col = size_column(line)
        elif is_column_header(line):
            self._size_col = size_column(line)
        elif (self._exec is not None
              and self._exec.kind is not MemoryKind.FLASH
              and "0x" in line):
            # у Flash-регионов нет ZI
            self._zi.feed(self._exec, line, self._size_col)
        return True


def parse_region_table(lines: Iterable[str],
                       catalog: Optional[MemoryCatalog] = None) -> Tuple[List[LoadRegion], bool]:
    parser = RegionTableParser(catalog)
    for line in lines:
        if not parser.feed(line):
            break
    return parser.load_regions, parser.complete

# model.py
"""
Модель памяти сборки: каталог памяти чипа, load/execution регионы из map-файла
и объектные файлы с их размерами.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional

# id 1 зарезервирован под «неизвестную» память, объявленные области нумеруются с 2
UNKNOWN_MEMORY_ID = 1
FIRST_MEMORY_ID = 2


class MemoryKind(Enum):
    RAM = "RAM"
    FLASH = "FLASH"
    UNKNOWN = "UNKNOWN"


class Provenance(Enum):
    PACKAGE = "package"   # из <Cpu> пакета устройства
    CUSTOM = "custom"     # из <OnChipMemories> проекта


@dataclass(frozen=True)
class MemoryRegion:
    id: int
    name: str
    base: int
    size: int
    kind: MemoryKind = MemoryKind.UNKNOWN
    provenance: Provenance = Provenance.PACKAGE
    on_chip: bool = True

    @property
    def end(self) -> int:
        return self.base + self.size

    def contains(self, address: int) -> bool:
        return self.base <= address < self.end


class MemoryCatalog:
    """Плоский список областей памяти в порядке объявления."""

    def __init__(self, regions: Optional[List[MemoryRegion]] = None):
        self._regions: List[MemoryRegion] = list(regions or [])
        self._next_id = FIRST_MEMORY_ID + len(self._regions)

    def __iter__(self) -> Iterator[MemoryRegion]:
        return iter(self._regions)

    def __len__(self) -> int:
        return len(self._regions)

    def __bool__(self) -> bool:
        return bool(self._regions)

    def add(self, name: str, base: int, size: int, kind: MemoryKind,
            provenance: Provenance = Provenance.PACKAGE, on_chip: bool = True) -> MemoryRegion:
        # все Unknown-области сливаются в одну корзину с id 1
        mem_id = UNKNOWN_MEMORY_ID if kind is MemoryKind.UNKNOWN else self._next_id
        region = MemoryRegion(mem_id, name, base, size, kind, provenance, on_chip)
        self._regions.append(region)
        self._next_id += 1
        return region

    def find(self, address: int) -> Optional[MemoryRegion]:
        for region in self._regions:
            if region.contains(address):
                return region
        return None

    def of_kind(self, kind: MemoryKind) -> List[MemoryRegion]:
        return [r for r in self._regions if r.kind is kind]


@dataclass
class ZiBlock:
    start: int
    size: int

    @property
    def end(self) -> int:
        return self.start + self.size


@dataclass(eq=False)
class ExecutionRegion:
    name: str
    base: int
    size: int
    used_size: int
    memory_id: int = UNKNOWN_MEMORY_ID
    kind: MemoryKind = MemoryKind.UNKNOWN
    on_chip: bool = False
    zi_blocks: List[ZiBlock] = field(default_factory=list)
    previous: Optional["ExecutionRegion"] = None
    rendered: bool = False

    @property
    def end(self) -> int:
        return self.base + self.size

    @property
    def percent(self) -> float:
        """Заполненность в процентах, не больше 100."""
        if self.size == 0:
            return 100.0 if self.used_size else 0.0
        return min(self.used_size * 100 / self.size, 100.0)

    def bind(self, memory: Optional[MemoryRegion]) -> None:
        if memory is None:
            self.memory_id = UNKNOWN_MEMORY_ID
            self.kind = MemoryKind.UNKNOWN
            self.on_chip = False
        else:
            self.memory_id = memory.id
            self.kind = memory.kind
            self.on_chip = memory.on_chip


@dataclass
class LoadRegion:
    name: str
    regions: List[ExecutionRegion] = field(default_factory=list)


def iter_exec_regions(load_regions: List[LoadRegion]) -> Iterator[ExecutionRegion]:
    for load in load_regions:
        yield from load.regions


@dataclass(eq=False)
class ObjectInfo:
    name: str
    code: int = 0
    ro_data: int = 0
    rw_data: int = 0
    zi_data: int = 0
    path: Optional[str] = None
    previous: Optional["ObjectInfo"] = None

    # RW учитывается дважды: живёт в RAM и хранит образ инициализации во Flash
    @property
    def ram(self) -> int:
        return self.rw_data + self.zi_data

    @property
    def flash(self) -> int:
        return self.code + self.ro_data + self.rw_data

# project/memory.py
"""
Каталог памяти чипа из .uvprojx.

Два источника:
* строка <Cpu> пакета устройства: IRAM(0x20000000,0x5000) IROM(0x08000000-0x0801FFFF) ...
* блок <OnChipMemories> (области OCR_RVCT1..10 из диалога Target), когда пакета нет
  или используется свой scatter-файл.
"""
from __future__ import annotations
from enum import Enum, auto
from string import hexdigits
from typing import Optional, Tuple

from ..errors import UnsupportedCpuDescriptor
from ..model import MemoryCatalog, MemoryKind, Provenance
from ..scan import tag_text

LABEL_ON_CHIP_END = "</OnChipMemories>"
LABEL_AREA = "<OCR_RVCT"
LABEL_TYPE = "<Type>"
LABEL_START = "<StartAddress>"
LABEL_SIZE = "<Size>"


def memory_kind(name: str) -> MemoryKind:
    # соглашение Keil, регистр важен
    if "RAM" in name:
        return MemoryKind.RAM
    if "ROM" in name:
        return MemoryKind.FLASH
    return MemoryKind.UNKNOWN


def parse_memory_item(token: str) -> Optional[Tuple[str, int, int]]:
    """
    'IRAM(0x20000000,0x5000)'      -> ('IRAM', 0x20000000, 0x5000)
    'IROM(0x08000000-0x0801FFFF)'  -> ('IROM', 0x08000000, 0x20000)
    Токены без адреса в скобках (CPUTYPE("Cortex-M3"), CLOCK(12000000), ELITTLE) -> None.
    """
    p = token.find("(")
    if p <= 0:
        return None
    name, inner = token[:p], token[p + 1:]
    if not inner[:2].lower() == "0x":
        return None

    i = 2
    while i < len(inner) and inner[i] in hexdigits:
        i += 1
    sep = inner[i:i + 1]
    if sep not in (",", "-"):
        raise UnsupportedCpuDescriptor(detail=token)

    rest = inner[i + 1:]
    close = rest.find(")")
    if close >= 0:
        rest = rest[:close]
    try:
        base = int(inner[:i], 16)
        value = int(rest, 16)
    except ValueError:
        raise UnsupportedCpuDescriptor(detail=token) from None

    size = value - base + 1 if sep == "-" else value
    return name, base, size


def parse_cpu_memory(cpu_text: str, catalog: MemoryCatalog) -> MemoryCatalog:
    for token in cpu_text.split():
        item = parse_memory_item(token)
        if item is None:
            continue
        name, base, size = item
        catalog.add(name, base, size, memory_kind(name),
                    provenance=Provenance.PACKAGE, on_chip=name.startswith("I"))
    return catalog


def area_layout(index: int) -> Optional[Tuple[str, bool]]:
    """Номер области OCR_RVCTn -> (имя, on-chip). Раскладка как в диалоге Target."""
    if 1 <= index <= 3:
        return f"ROM{index}", False
    if 4 <= index <= 5:
        return f"IROM{index - 3}", True
    if 6 <= index <= 8:
        return f"RAM{index - 5}", False
    if 9 <= index <= 10:
        return f"IRAM{index - 8}", True
    return None


def area_kind(type_code: str) -> MemoryKind:
    if type_code == "0":
        return MemoryKind.RAM
    if type_code == "1":
        return MemoryKind.FLASH
    return MemoryKind.UNKNOWN


class OnChip(Enum):
    SEEK_AREA = auto()
    TYPE = auto()
    START = auto()
    SIZE = auto()
    DONE = auto()


class OnChipScanner:
    """Разбор <OnChipMemories>: тройки Type/StartAddress/Size внутри <OCR_RVCTn>."""

    def __init__(self, catalog: MemoryCatalog):
        self.catalog = catalog
        self.state = OnChip.SEEK_AREA
        self._index = 0
        self._kind = MemoryKind.UNKNOWN
        self._start = 0

    def step(self, state: OnChip, line: str) -> OnChip:
        if state is OnChip.SEEK_AREA:
            if LABEL_ON_CHIP_END in line:
                return OnChip.DONE
            pos = line.find(LABEL_AREA)
            if pos >= 0:
                digits = line[pos + len(LABEL_AREA):].split(">", 1)[0]
                if digits.isdigit():
                    self._index = int(digits)
                    return OnChip.TYPE
            return state

        if state is OnChip.TYPE:
            value = tag_text(line, LABEL_TYPE)
            if value is not None:
                self._kind = area_kind(value.strip())
                return OnChip.START
            return state

        if state is OnChip.START:
            value = tag_text(line, LABEL_START)
            if value is not None:
                self._start = int(value.strip(), 16)
                return OnChip.SIZE
            return state

        if state is OnChip.SIZE:
            value = tag_text(line, LABEL_SIZE)
            if value is not None:
                self._add(int(value.strip(), 16))
                return OnChip.SEEK_AREA
            return state

        return state

    def feed(self, line: str) -> bool:
        """True, пока блок не закончился."""
        self.state = self.step(self.state, line)
        return self.state is not OnChip.DONE

    def _add(self, size: int) -> None:
        layout = area_layout(self._index)
        if layout is None or size == 0:
            return
        # уже описано пакетом или предыдущей областью
        if self.catalog.find(self._start) is not None:
            return
        name, on_chip = layout
        self.catalog.add(name, self._start, size, self._kind,
                         provenance=Provenance.CUSTOM, on_chip=on_chip)

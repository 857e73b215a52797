import pytest

from build_viewer.errors import UnsupportedCpuDescriptor
from build_viewer.model import (
    FIRST_MEMORY_ID,
    UNKNOWN_MEMORY_ID,
    MemoryCatalog,
    MemoryKind,
    Provenance,
)
from build_viewer.project.memory import (
    OnChip,
    OnChipScanner,
    area_layout,
    parse_cpu_memory,
    parse_memory_item,
)


def test_run_length_notation():
    assert parse_memory_item("IRAM(0x20000000,0x5000)") == ("IRAM", 0x20000000, 0x5000)


def test_base_end_notation_size_is_inclusive():
    name, base, size = parse_memory_item("IROM(0x08000000-0x0801FFFF)")
    assert name == "IROM"
    assert size == 0x0801FFFF - 0x08000000 + 1


@pytest.mark.parametrize("token", ['CPUTYPE("Cortex-M3")', "CLOCK(12000000)", "ELITTLE"])
def test_non_memory_tokens_ignored(token):
    assert parse_memory_item(token) is None


def test_unknown_separator_raises():
    with pytest.raises(UnsupportedCpuDescriptor):
        parse_memory_item("IRAM(0x20000000:0x5000)")


def test_parse_cpu_memory_ids_and_kinds():
    cpu = 'IRAM(0x20000000,0x5000) IROM(0x08000000,0x10000) XSPI(0x90000000,0x100) IRAM2(0x10000000,0x1000) CPUTYPE("Cortex-M4")'
    catalog = parse_cpu_memory(cpu, MemoryCatalog())
    items = list(catalog)

    assert [m.name for m in items] == ["IRAM", "IROM", "XSPI", "IRAM2"]
    assert items[0].id == FIRST_MEMORY_ID and items[0].kind is MemoryKind.RAM
    assert items[1].id == FIRST_MEMORY_ID + 1 and items[1].kind is MemoryKind.FLASH
    # неизвестная область уходит в общую корзину, счётчик всё равно растёт
    assert items[2].id == UNKNOWN_MEMORY_ID and items[2].kind is MemoryKind.UNKNOWN
    assert items[3].id == FIRST_MEMORY_ID + 3
    assert all(m.provenance is Provenance.PACKAGE for m in items)
    assert items[0].on_chip and not items[2].on_chip


def test_catalog_find_is_half_open():
    catalog = MemoryCatalog()
    ram = catalog.add("IRAM", 0x20000000, 0x1000, MemoryKind.RAM)
    assert catalog.find(0x20000000) is ram
    assert catalog.find(0x20000FFF) is ram
    assert catalog.find(0x20001000) is None


def test_area_layout():
    assert area_layout(1) == ("ROM1", False)
    assert area_layout(4) == ("IROM1", True)
    assert area_layout(5) == ("IROM2", True)
    assert area_layout(8) == ("RAM3", False)
    assert area_layout(10) == ("IRAM2", True)
    assert area_layout(11) is None


def test_on_chip_scanner_transitions():
    scanner = OnChipScanner(MemoryCatalog())
    assert scanner.step(OnChip.SEEK_AREA, "<OCR_RVCT9>") is OnChip.TYPE
    assert scanner.step(OnChip.TYPE, "<Type>0</Type>") is OnChip.START
    assert scanner.step(OnChip.START, "<StartAddress>0x20000000</StartAddress>") is OnChip.SIZE
    assert scanner.step(OnChip.SIZE, "<Size>0x5000</Size>") is OnChip.SEEK_AREA
    assert scanner.step(OnChip.SEEK_AREA, "</OnChipMemories>") is OnChip.DONE


def _areas(*areas):
    lines = ["<OnChipMemories>"]
    for index, type_code, start, size in areas:
        lines += [f"<OCR_RVCT{index}>", f"<Type>{type_code}</Type>",
                  f"<StartAddress>{start}</StartAddress>", f"<Size>{size}</Size>",
                  f"</OCR_RVCT{index}>"]
    lines.append("</OnChipMemories>")
    return lines


def test_on_chip_scanner_builds_custom_catalog():
    catalog = MemoryCatalog()
    scanner = OnChipScanner(catalog)
    lines = _areas((1, 1, "0x0", "0x0"), (4, 1, "0x8000000", "0x10000"),
                   (6, 0, "0x60000000", "0x100000"), (9, 0, "0x20000000", "0x5000"))
    for line in lines:
        if not scanner.feed(line):
            break

    assert [(m.name, m.kind, m.on_chip) for m in catalog] == [
        ("IROM1", MemoryKind.FLASH, True),
        ("RAM1", MemoryKind.RAM, False),
        ("IRAM1", MemoryKind.RAM, True),
    ]
    assert all(m.provenance is Provenance.CUSTOM for m in catalog)


def test_on_chip_scanner_skips_areas_already_in_catalog():
    catalog = MemoryCatalog()
    catalog.add("IRAM", 0x20000000, 0x5000, MemoryKind.RAM)
    scanner = OnChipScanner(catalog)
    for line in _areas((9, 0, "0x20000000", "0x5000"), (10, 0, "0x10000000", "0x1000")):
        scanner.feed(line)
    assert [m.name for m in catalog] == ["IRAM", "IRAM2"]

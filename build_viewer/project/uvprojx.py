# project/uvprojx.py
"""
Разбор .uvprojx / .uvproj за один проход.

Теги идут в фиксированном порядке внутри выбранного target, поэтому автомат
просто ждёт следующую метку: TargetName -> Device -> Vendor -> Cpu ->
OutputDirectory -> OutputName -> ListingPath -> AdsLLst -> v6Lto -> umfTarg ->
Groups. Блок <OnChipMemories> лежит между AdsLLst и umfTarg; его перечитываем
с запомненной позиции только если он нужен (нет пакета или свой scatter).
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import BinaryIO, Callable, Dict, List, Optional

from ..errors import CannotOpen, NoMapConfigured, ViewerError
from ..model import MemoryCatalog
from ..scan import decode, flag_value, tag_text
from .files import FileEntry, FileRole, InventoryScanner
from .memory import OnChipScanner, parse_cpu_memory

LABEL_TARGET_NAME = "<TargetName>"
LABEL_DEVICE = "<Device>"
LABEL_VENDOR = "<Vendor>"
LABEL_CPU = "<Cpu>"
LABEL_OUTPUT_DIRECTORY = "<OutputDirectory>"
LABEL_OUTPUT_NAME = "<OutputName>"
LABEL_LISTING_PATH = "<ListingPath>"
LABEL_IS_CREATE_MAP = "<AdsLLst>"
LABEL_AC6_LTO = "<v6Lto>"
LABEL_END_CADS = "</Cads>"
LABEL_USE_TARGET_LAYOUT = "<umfTarg>"
LABEL_GROUPS = "<Groups>"


class Prj(Enum):
    TARGET = auto()
    DEVICE = auto()
    VENDOR = auto()
    CPU = auto()
    OUTPUT_DIR = auto()
    OUTPUT_NAME = auto()
    LISTING_PATH = auto()
    MAP_FLAG = auto()
    LTO = auto()
    SCATTER = auto()
    GROUPS = auto()
    FILES = auto()
    DONE = auto()


@dataclass
class ProjectInfo:
    path: Path
    target_name: str = ""
    device: str = ""
    vendor: str = ""
    catalog: MemoryCatalog = field(default_factory=MemoryCatalog)
    output_dir: str = ""
    output_name: str = ""
    listing_path: str = ""
    lto: bool = False
    custom_scatter: bool = False
    files: List[FileEntry] = field(default_factory=list)

    @property
    def has_pack(self) -> bool:
        # у legacy/generic устройств без пакета <Vendor> пустой
        return bool(self.vendor.strip())

    @property
    def has_user_lib(self) -> bool:
        return any(e.role is FileRole.LIBRARY for e in self.files)

    @property
    def needs_on_chip_scan(self) -> bool:
        return self.custom_scatter or not self.has_pack


class ProjectParser:
    def __init__(self, path: Path | str, target: Optional[str] = None):
        self.info = ProjectInfo(path=Path(path))
        self.target = target
        self.inventory = InventoryScanner(self.info.files)
        self._handlers: Dict[Prj, Callable[[str], Prj]] = {
            Prj.TARGET: self._on_target,
            Prj.DEVICE: self._on_device,
            Prj.VENDOR: self._on_vendor,
            Prj.CPU: self._on_cpu,
            Prj.OUTPUT_DIR: self._on_output_dir,
            Prj.OUTPUT_NAME: self._on_output_name,
            Prj.LISTING_PATH: self._on_listing_path,
            Prj.MAP_FLAG: self._on_map_flag,
            Prj.LTO: self._on_lto,
            Prj.SCATTER: self._on_scatter,
            Prj.GROUPS: self._on_groups,
            Prj.FILES: self._on_files,
        }

    def step(self, state: Prj, line: str) -> Prj:
        handler = self._handlers.get(state)
        return handler(line) if handler else state

    # ---- состояния ----
    def _on_target(self, line: str) -> Prj:
        name = tag_text(line, LABEL_TARGET_NAME)
        if name is None:
            return Prj.TARGET
        if self.target is not None and name != self.target:
            return Prj.TARGET
        self.info.target_name = name
        return Prj.DEVICE

    def _on_device(self, line: str) -> Prj:
        device = tag_text(line, LABEL_DEVICE)
        if device is None:
            return Prj.DEVICE
        self.info.device = device
        return Prj.VENDOR

    def _on_vendor(self, line: str) -> Prj:
        vendor = tag_text(line, LABEL_VENDOR)
        if vendor is not None:
            self.info.vendor = vendor
            return Prj.CPU
        if LABEL_CPU in line:
            # тега <Vendor> нет совсем
            return self._on_cpu(line)
        return Prj.VENDOR

    def _on_cpu(self, line: str) -> Prj:
        cpu = tag_text(line, LABEL_CPU)
        if cpu is None:
            return Prj.CPU
        if self.info.has_pack:
            parse_cpu_memory(cpu, self.info.catalog)
        return Prj.OUTPUT_DIR

    def _on_output_dir(self, line: str) -> Prj:
        value = tag_text(line, LABEL_OUTPUT_DIRECTORY)
        if value is None:
            return Prj.OUTPUT_DIR
        self.info.output_dir = value
        return Prj.OUTPUT_NAME

    def _on_output_name(self, line: str) -> Prj:
        value = tag_text(line, LABEL_OUTPUT_NAME)
        if value is None:
            return Prj.OUTPUT_NAME
        self.info.output_name = value
        return Prj.LISTING_PATH

    def _on_listing_path(self, line: str) -> Prj:
        value = tag_text(line, LABEL_LISTING_PATH)
        if value is None:
            return Prj.LISTING_PATH
        self.info.listing_path = value
        return Prj.MAP_FLAG

    def _on_map_flag(self, line: str) -> Prj:
        flag = flag_value(line, LABEL_IS_CREATE_MAP)
        if flag is None:
            return Prj.MAP_FLAG
        if flag == "0":
            raise NoMapConfigured(self.info.path)
        return Prj.LTO

    def _on_lto(self, line: str) -> Prj:
        flag = flag_value(line, LABEL_AC6_LTO)
        if flag is not None:
            self.info.lto = flag not in ("0", "")
            return Prj.SCATTER
        if LABEL_END_CADS in line:
            # компилятор AC5: опции LTO нет
            return Prj.SCATTER
        return Prj.LTO

    def _on_scatter(self, line: str) -> Prj:
        flag = flag_value(line, LABEL_USE_TARGET_LAYOUT)
        if flag is None:
            return Prj.SCATTER
        self.info.custom_scatter = flag == "0"
        return Prj.GROUPS

    def _on_groups(self, line: str) -> Prj:
        return Prj.FILES if LABEL_GROUPS in line else Prj.GROUPS

    def _on_files(self, line: str) -> Prj:
        return Prj.FILES if self.inventory.feed(line) else Prj.DONE


def _rescan_on_chip(f: BinaryIO, start: int, stop: int,
                    catalog: MemoryCatalog, encoding: str) -> None:
    f.seek(start)
    scanner = OnChipScanner(catalog)
    while f.tell() < stop:
        raw = f.readline()
        if not raw or not scanner.feed(decode(raw, encoding)):
            break
    f.seek(stop)


def parse_project(path: Path | str, target: Optional[str] = None,
                  encoding: str = "utf-8") -> ProjectInfo:
    path = Path(path)
    if not path.is_file():
        raise CannotOpen(path)

    parser = ProjectParser(path, target)
    state = Prj.TARGET
    mark: Optional[int] = None
    try:
        with open(path, "rb") as f:
            while state is not Prj.DONE:
                raw = f.readline()
                if not raw:
                    break
                prev = state
                state = parser.step(state, decode(raw, encoding))

                if prev is Prj.MAP_FLAG and state is Prj.LTO:
                    mark = f.tell()
                elif (prev is Prj.SCATTER and state is Prj.GROUPS
                      and mark is not None and parser.info.needs_on_chip_scan):
                    _rescan_on_chip(f, mark, f.tell(), parser.info.catalog, encoding)
    except ViewerError as e:
        if e.path is None:
            e.path = path
        raise
    return parser.info

# project/files.py
"""
Список файлов проекта (<Groups>) и разрешение конфликтов имён объектных файлов.

Keil компилирует a/util.c и b/util.c в util.o и util_1.o. Сначала помечаем
дубликаты, затем берём переименования из build log, а оставшимся
дубликатам выдаём имя <stem>_<n>.o по порядку файлов в проекте.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, List, Optional, Tuple

from ..model import ObjectInfo
from ..scan import flag_value, tag_text

OBJECT_EXT = ".o"

LABEL_END_GROUPS = "</Groups>"
LABEL_GROUP_NAME = "<GroupName>"
LABEL_FILE_NAME = "<FileName>"
LABEL_FILE_TYPE = "<FileType>"
LABEL_FILE_PATH = "<FilePath>"
LABEL_END_FILE = "</File>"
LABEL_END_FILES = "</Files>"
LABEL_INCLUDE_IN_BUILD = "<IncludeInBuild>"


class FileRole(Enum):
    USER = auto()      # исходник, компилируется в .o
    OBJECT = auto()    # готовый объектный файл
    LIBRARY = auto()   # пользовательская библиотека


COMPILED_ROLES = (FileRole.USER, FileRole.LIBRARY)


@dataclass
class FileEntry:
    source_name: str
    object_name: str
    path: str
    role: FileRole = FileRole.USER
    renamed: Optional[str] = None
    collision: bool = False

    @property
    def emitted_name(self) -> str:
        """Имя, под которым линкер покажет файл в map."""
        return self.renamed or self.object_name


def object_form(name: str, role: FileRole) -> str:
    if role not in COMPILED_ROLES:
        return name
    stem = name.rsplit(".", 1)[0] if "." in name else name
    return stem + OBJECT_EXT


def add_file(entries: List[FileEntry], name: str, path: str, role: FileRole) -> FileEntry:
    obj = object_form(name, role)
    collision = role in COMPILED_ROLES and any(e.object_name == obj for e in entries)
    entry = FileEntry(source_name=name, object_name=obj, path=path, role=role, collision=collision)
    entries.append(entry)
    return entry


class Inv(Enum):
    SEEK_GROUP = auto()
    FILE_NAME = auto()
    FILE_TYPE = auto()
    FILE_PATH = auto()
    FILE_END = auto()


class InventoryScanner:
    """Вложенный автомат по <Groups>: группа -> файл -> тип -> путь -> конец файла."""

    def __init__(self, entries: Optional[List[FileEntry]] = None):
        self.entries: List[FileEntry] = entries if entries is not None else []
        self.state = Inv.SEEK_GROUP
        self.finished = False
        self._name = ""
        self._path = ""
        self._role = FileRole.USER

    def step(self, state: Inv, line: str) -> Inv:
        if state is Inv.SEEK_GROUP:
            return Inv.FILE_NAME if LABEL_GROUP_NAME in line else state

        if state is Inv.FILE_NAME:
            name = tag_text(line, LABEL_FILE_NAME)
            if name is not None:
                self._name = name
                self._role = FileRole.USER
                return Inv.FILE_TYPE
            included = flag_value(line, LABEL_INCLUDE_IN_BUILD)
            if included is not None:
                # группа исключена из сборки
                return Inv.SEEK_GROUP if included == "0" else state
            if LABEL_END_FILES in line:
                return Inv.SEEK_GROUP
            return state

        if state is Inv.FILE_TYPE:
            code = flag_value(line, LABEL_FILE_TYPE)
            if code is None:
                return state
            if code in ("5", "6"):    # текстовый документ / custom file
                return Inv.FILE_NAME
            if code == "3":
                self._role = FileRole.OBJECT
            elif code == "4":
                self._role = FileRole.LIBRARY
            return Inv.FILE_PATH

        if state is Inv.FILE_PATH:
            path = tag_text(line, LABEL_FILE_PATH)
            if path is not None:
                self._path = path
                return Inv.FILE_END
            return state

        if state is Inv.FILE_END:
            if LABEL_END_FILE in line:
                add_file(self.entries, self._name, self._path, self._role)
                return Inv.FILE_NAME
            included = flag_value(line, LABEL_INCLUDE_IN_BUILD)
            if included is not None:
                if included != "0":
                    add_file(self.entries, self._name, self._path, self._role)
                return Inv.FILE_NAME
            return state

        return state

    def feed(self, line: str) -> bool:
        """False, когда встретился </Groups>."""
        if LABEL_END_GROUPS in line:
            self.state = Inv.SEEK_GROUP
            self.finished = True
            return False
        self.state = self.step(self.state, line)
        return True


# ---- Разрешение имён ----
def apply_renames(entries: List[FileEntry], renames: Dict[str, str]) -> int:
    """Переименования из build log важнее запасной схемы."""
    count = 0
    for entry in entries:
        new_name = renames.get(entry.path)
        if new_name:
            entry.renamed = new_name
            entry.collision = False
            count += 1
    return count


def resolve_collisions(entries: List[FileEntry]) -> List[Tuple[FileEntry, str]]:
    """Оставшимся дубликатам: <stem>_<n>.o, n растёт по порядку в проекте."""
    changed = []
    for i, first in enumerate(entries):
        repeat = 0
        for later in entries[i + 1:]:
            if later.collision and later.object_name == first.object_name:
                repeat += 1
                stem = later.object_name.rsplit(".", 1)[0]
                later.renamed = f"{stem}_{repeat}{OBJECT_EXT}"
                later.collision = False
                changed.append((later, later.renamed))
    return changed


def library_names(entries: List[FileEntry]) -> List[str]:
    return [e.emitted_name for e in entries if e.role is FileRole.LIBRARY]


def bind_paths(objects: List[ObjectInfo], entries: List[FileEntry]) -> None:
    for entry in entries:
        key = entry.emitted_name.lower()
        for obj in objects:
            if obj.name.lower() == key:
                obj.path = entry.path


def name_widths(entries: List[FileEntry]) -> Tuple[int, int]:
    """Максимальные длины имени и пути, для ширины колонки отчёта."""
    max_name = max((len(e.emitted_name) for e in entries), default=0)
    max_path = max((len(e.path) for e in entries), default=0)
    return max_name, max_path

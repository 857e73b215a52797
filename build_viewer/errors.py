# errors.py
"""
Фатальные ошибки разбора. Каждая завершает запуск со своим кодом выхода,
main.py пишет одну строку [ERROR] с путём к проблемному файлу.
"""
from __future__ import annotations
from pathlib import Path


class ViewerError(Exception):
    exit_code = 1
    message = "ошибка разбора"

    def __init__(self, path: Path | str | None = None, detail: str = ""):
        self.path = path
        self.detail = detail
        text = self.message
        if detail:
            text = f"{text}: {detail}"
        super().__init__(text)


class CannotOpen(ViewerError):
    exit_code = 2
    message = "can't open file"


class UnsupportedCpuDescriptor(ViewerError):
    exit_code = 3
    message = "<Cpu> contains unsupported types"


class NoMapConfigured(ViewerError):
    exit_code = 4
    message = "generate map file is not checked (Options for Target -> Listing -> Linker Listing)"


class SectionNotFound(ViewerError):
    exit_code = 5
    message = 'map file does not contain "Memory Map of the image"'


class NoObjectTable(ViewerError):
    exit_code = 6
    message = "map file does not find object's information"


class PathNotAbsolute(ViewerError):
    exit_code = 7
    message = "not a absolute path"


class PathEscapesRoot(ViewerError):
    exit_code = 8
    message = "relative paths go up more levels than absolute paths"


class MissingProjectSetting(ViewerError):
    exit_code = 9
    message = "project setting is empty"

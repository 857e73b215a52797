# report/log.py
from __future__ import annotations
from pathlib import Path
from typing import Optional, TextIO

from rich.console import Console


class ReportLog:
    """
    Поток отчёта: save() пишет только в файл (диагностика),
    print() пишет в файл и в консоль.
    Консоль без разметки rich: '[NEW]' и '[0x20000000]' должны выйти как есть.
    Файл всегда в UTF-8, независимо от кодировки входных файлов Keil.
    """

    def __init__(self, path: Optional[Path], console: Optional[Console] = None):
        self.path = Path(path) if path else None
        self.console = console or Console(markup=False, highlight=False, emoji=False)
        self._fh: Optional[TextIO] = None

    def __enter__(self) -> "ReportLog":
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def open(self) -> None:
        if self.path is not None and self._fh is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = open(self.path, "w", encoding="utf-8")

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def save(self, text: str = "") -> None:
        if self._fh is not None:
            self._fh.write(text + "\n")

    def print(self, text: str = "") -> None:
        self.save(text)
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)

    def print_lines(self, lines) -> None:
        for line in lines:
            self.print(line)

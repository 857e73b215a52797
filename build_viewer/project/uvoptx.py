# project/uvoptx.py
from __future__ import annotations
from enum import Enum, auto
from pathlib import Path
from typing import Optional

from ..scan import flag_value, iter_lines, run_scanner, tag_text

LABEL_TARGET_NAME = "<TargetName>"
LABEL_IS_CURRENT_TARGET = "<IsCurrentTarget>"


class Opt(Enum):
    TARGET = auto()
    CURRENT = auto()
    DONE = auto()


def options_file(project_file: Path) -> Path:
    """x.uvprojx -> x.uvoptx, x.uvproj -> x.uvopt"""
    project_file = Path(project_file)
    suffix = ".uvoptx" if project_file.suffix.lower() == ".uvprojx" else ".uvopt"
    return project_file.with_suffix(suffix)


class CurrentTargetScanner:
    def __init__(self):
        self.name: Optional[str] = None

    def step(self, state: Opt, line: str) -> Opt:
        if state is Opt.TARGET:
            name = tag_text(line, LABEL_TARGET_NAME)
            if name is not None:
                self.name = name
                return Opt.CURRENT
        elif state is Opt.CURRENT:
            flag = flag_value(line, LABEL_IS_CURRENT_TARGET)
            if flag is not None:
                return Opt.TARGET if flag == "0" else Opt.DONE
        return state


def parse_current_target(path: Path, encoding: str = "utf-8") -> Optional[str]:
    """Имя активного target из .uvoptx; None, если файла нет или target не отмечен."""
    path = Path(path)
    if not path.is_file():
        return None
    scanner = CurrentTargetScanner()
    with open(path, "rb") as f:
        state = run_scanner(iter_lines(f, encoding), Opt.TARGET, scanner.step, Opt.DONE)
    return scanner.name if state is Opt.DONE else None

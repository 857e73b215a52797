# stack.py
from __future__ import annotations
from pathlib import Path
from typing import Optional

from .scan import iter_lines

STR_MAX_STACK_USAGE = "Maximum Stack Usage "


def stack_report_file(output_dir: Path, output_name: str) -> Path:
    return Path(output_dir) / f"{output_name}.htm"


def read_stack_usage(path: Path, encoding: str = "utf-8") -> Optional[str]:
    """
    Строка из static call graph:
    '<b>Maximum Stack Usage =  192 bytes + Unknown(Cycles, ...)</b>'
    -> 'Maximum Stack Usage =  192 bytes + Unknown(Cycles, ...)'
    """
    path = Path(path)
    if not path.is_file():
        return None
    with open(path, "rb") as f:
        for line in iter_lines(f, encoding):
            pos = line.find(STR_MAX_STACK_USAGE)
            if pos < 0:
                continue
            text = line[pos:]
            close = text.rfind(")")
            return text[:close + 1] if close >= 0 else text.split("<", 1)[0].rstrip()
    return None

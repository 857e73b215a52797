# scan.py
"""
Построчный разбор полуструктурированного текста Keil.

Каждый парсер описывает свои состояния через Enum и функцию перехода
step(state, line) -> state. Незнакомые строки пропускаются, возврата назад нет.
"""
from __future__ import annotations
from typing import BinaryIO, Callable, Iterable, Iterator, Optional, TypeVar

S = TypeVar("S")

QUOTES = ("'", '"')


def tag_text(line: str, label: str) -> Optional[str]:
    """Текст после метки до следующего '<': '<Device>STM32</Device>' -> 'STM32'."""
    pos = line.find(label)
    if pos < 0:
        return None
    rest = line[pos + len(label):]
    lt = rest.find("<")
    if lt < 0:
        return rest.strip()
    return rest[:lt]


def flag_value(line: str, label: str) -> Optional[str]:
    """Первый символ после метки ('<AdsLLst>1' -> '1')."""
    pos = line.find(label)
    if pos < 0:
        return None
    rest = line[pos + len(label):]
    return rest[:1]


def hex_field(line: str, marker: str) -> Optional[int]:
    """'..., Size: 0x00000660, Max: ...' -> 0x660 (значение до ',' или ')')."""
    pos = line.find(marker)
    if pos < 0:
        return None
    rest = line[pos + len(marker):]
    end = len(rest)
    for stop in (",", ")"):
        i = rest.find(stop)
        if 0 <= i < end:
            end = i
    try:
        return int(rest[:end].strip(), 16)
    except ValueError:
        return None


def word_after(line: str, marker: str) -> Optional[str]:
    """Слово сразу после маркера: 'Load Region LR_IROM1 (' -> 'LR_IROM1'."""
    pos = line.find(marker)
    if pos < 0:
        return None
    parts = line[pos + len(marker):].split()
    return parts[0] if parts else None


def quoted(line: str) -> list[str]:
    """Все подстроки в кавычках (одинарных или двойных) по порядку."""
    out = []
    i = 0
    while i < len(line):
        ch = line[i]
        if ch in QUOTES:
            j = line.find(ch, i + 1)
            if j < 0:
                break
            out.append(line[i + 1:j])
            i = j + 1
        else:
            i += 1
    return out


def decode(raw: bytes, encoding: str) -> str:
    return raw.decode(encoding, errors="replace").rstrip("\r\n")


def iter_lines(fh: BinaryIO, encoding: str = "utf-8") -> Iterator[str]:
    """Строки бинарного файла без перевода строки; позиция fh сдвигается построчно."""
    while True:
        raw = fh.readline()
        if not raw:
            return
        yield decode(raw, encoding)


def run_scanner(lines: Iterable[str], state: S,
                step: Callable[[S, str], S], done: S) -> S:
    """Прогнать строки через функцию перехода до состояния done или конца ввода."""
    for line in lines:
        state = step(state, line)
        if state == done:
            break
    return state

import io
from enum import Enum, auto

from build_viewer.scan import (
    flag_value,
    hex_field,
    iter_lines,
    quoted,
    run_scanner,
    tag_text,
    word_after,
)


def test_tag_text_stops_at_next_tag():
    assert tag_text("    <Device>STM32F103C8</Device>", "<Device>") == "STM32F103C8"
    assert tag_text("<Vendor></Vendor>", "<Vendor>") == ""
    assert tag_text("<Cpu>IRAM(0x1,0x2)</Cpu>", "<Device>") is None


def test_flag_value_first_char():
    assert flag_value("   <AdsLLst>1</AdsLLst>", "<AdsLLst>") == "1"
    assert flag_value("<umfTarg>0</umfTarg>", "<umfTarg>") == "0"
    assert flag_value("<Other>1</Other>", "<AdsLLst>") is None


def test_hex_field_until_comma_or_paren():
    line = "Execution Region RW_IRAM1 (Exec base: 0x20000000, Load base: 0x08000a3c, Size: 0x00000660, Max: 0x00005000, ABSOLUTE)"
    assert hex_field(line, "Exec base: ") == 0x20000000
    assert hex_field(line, "Size: ") == 0x660
    assert hex_field(line, "Max: ") == 0x5000
    assert hex_field("Max: 0x100)", "Max: ") == 0x100
    assert hex_field(line, "Nope: ") is None


def test_word_after():
    assert word_after("  Load Region LR_IROM1 (Base: 0x0", "Load Region") == "LR_IROM1"
    assert word_after("Load Region", "Load Region") is None


def test_quoted_mixed_quotes():
    assert quoted("'a b' - x \"c\" 'd'") == ["a b", "c", "d"]
    assert quoted("no quotes") == []


def test_iter_lines_strips_crlf_and_replaces_bad_bytes():
    fh = io.BytesIO(b"one\r\ntwo\n\xff\xfe\n")
    lines = list(iter_lines(fh, "utf-8"))
    assert lines[:2] == ["one", "two"]
    assert "�" in lines[2]


class Toy(Enum):
    A = auto()
    B = auto()
    DONE = auto()


def _toy_step(state, line):
    if state is Toy.A and line == "go":
        return Toy.B
    if state is Toy.B and line == "stop":
        return Toy.DONE
    return state


def test_run_scanner_stops_at_done_and_leaves_rest():
    lines = iter(["x", "go", "y", "stop", "tail"])
    assert run_scanner(lines, Toy.A, _toy_step, Toy.DONE) is Toy.DONE
    assert list(lines) == ["tail"]


def test_run_scanner_end_of_input_keeps_state():
    assert run_scanner(["go"], Toy.A, _toy_step, Toy.DONE) is Toy.B

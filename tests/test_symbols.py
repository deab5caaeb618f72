import pytest

from shellasm.errors import DuplicateSymbolError
from shellasm.scanner import scan_blocks, split_source
from shellasm.symbols import build_symbol_table


def _table(text: str):
    return build_symbol_table(scan_blocks(split_source(text)))


def test_sections_get_insertion_index_addresses():
    table = _table("section .text:\n  _main\nsection .data:\n  x=1\nsection .bss:\n")
    assert list(table.sections) == [".text", ".data", ".bss"]
    assert [section.address for section in table.sections.values()] == [0, 1, 2]
    assert [line.text for line in table.sections[".data"].body] == ["x=1"]


def test_function_addresses_are_running_instruction_offsets():
    table = _table(
        "_b:\n  mov r0 1\n  mov r1 2\n  ret\n"
        "_a:\n  ret\n"
        "_empty:\n"
        "_c:\n  add r0 r1\n"
    )
    assert list(table.functions) == ["_b", "_a", "_empty", "_c"]
    addresses = {name: fn.address for name, fn in table.functions.items()}
    assert addresses == {"_b": 0, "_a": 3, "_empty": 4, "_c": 4}
    assert table.instruction_count == 5


def test_unrecognized_headers_are_ignored_with_warning(caplog):
    table = _table("; comment\nglobal _main\n_main:\n  ret\n")
    assert list(table.functions) == ["_main"]
    assert [line.text for line in table.ignored] == ["; comment", "global _main"]
    assert "ignoring unrecognized block header" in caplog.text


def test_duplicate_function_is_rejected():
    with pytest.raises(DuplicateSymbolError) as exc:
        _table("_main:\n  ret\n_main:\n  ret\n")
    assert exc.value.line_no == 3


def test_duplicate_section_is_rejected():
    with pytest.raises(DuplicateSymbolError):
        _table("section .data:\n  a=1\nsection .data:\n  b=2\n")


def test_section_and_function_may_share_a_name():
    table = _table("section _x:\n  a\n_x:\n  ret\n")
    assert "_x" in table.sections
    assert "_x" in table.functions

from pathlib import Path

import pytest

from shellasm.compiler import assemble_source, compile_file, compile_source
from shellasm.encoding import decode_program
from shellasm.errors import (
    IOFailure,
    MalformedDataLineError,
    NoEntrypointError,
    UnknownOpcodeError,
    UnresolvedDataReferenceError,
)


EXAMPLE = """
section .text:
  _main
section .data:
  x=5
_main:
  mov r0 $x
  add r0 r1
"""

MULTI = """
section .text:
\t_start
section .data:
\tgreeting=hello
\tcount=3
_helper:
\tmov r0 $greeting
\tadd r0 $count
\tret
_start:
\tcall _helper
\tjmp _start+1
\tmov r2 somewhere
_tail:
\tret
"""


def test_example_program():
    decoded = decode_program(compile_source(EXAMPLE, {"mov": 1, "add": 2}, {"r0": 0, "r1": 1}))
    assert decoded.entrypoint == 0
    assert decoded.instructions == [(1, [0, 5]), (2, [0, 1])]


def test_entrypoint_and_address_consistency(mnemonics, registers):
    program = assemble_source(MULTI, mnemonics, registers)
    assert program.entrypoint == program.functions["_start"].address == 3
    for function in program.functions.values():
        if function.body:
            first = program.instructions[function.address]
            assert first.line_no == function.body[0].line_no

    decoded = decode_program(compile_source(MULTI, mnemonics, registers))
    assert decoded.entrypoint == 3
    assert decoded.instructions == [
        (1, [0, "hello"]),
        (2, [0, 3]),
        (11, []),
        (10, [0]),
        (7, [4]),
        (1, [2, "somewhere"]),
        (11, []),
    ]


def test_compilation_is_deterministic(mnemonics, registers):
    assert compile_source(MULTI, mnemonics, registers) == compile_source(MULTI, mnemonics, registers)


def test_mappings_are_not_mutated(mnemonics, registers):
    before = (dict(mnemonics), dict(registers))
    compile_source(MULTI, mnemonics, registers)
    assert (mnemonics, registers) == before


@pytest.mark.parametrize(
    ("source", "error"),
    [
        ("_main:\n  ret\n", NoEntrypointError),
        ("section .text:\n_main:\n  ret\n", NoEntrypointError),
        ("section .text:\n  _missing\n_main:\n  ret\n", NoEntrypointError),
        ("section .text:\n  _main\n_main:\n  mov r0 $undefined\n", UnresolvedDataReferenceError),
        ("section .text:\n  _main\nsection .data:\n  y=1\n_main:\n  mov r0 $x\n", UnresolvedDataReferenceError),
        ("section .text:\n  _main\n_main:\n  bogus r0\n", UnknownOpcodeError),
        ("section .text:\n  _main\nsection .data:\n  broken\n_main:\n  ret\n", MalformedDataLineError),
    ],
)
def test_failures_raise_named_errors(mnemonics, registers, source, error):
    with pytest.raises(error):
        compile_source(source, mnemonics, registers)


def test_compile_file(tmp_path: Path, mnemonics, registers):
    path = tmp_path / "example.asm"
    path.write_text(EXAMPLE, encoding="utf-8")
    assert compile_file(path, mnemonics, registers) == compile_source(EXAMPLE, mnemonics, registers)


def test_compile_file_unreadable(tmp_path: Path, mnemonics, registers):
    with pytest.raises(IOFailure):
        compile_file(tmp_path / "nope.asm", mnemonics, registers)


def test_oversized_literals_stay_raw_tokens():
    source = (
        "section .text:\n  _main\nsection .data:\n  big=123456789012345678901\n"
        "_main:\n  mov r0 99999999999999999999\n  mov r0 $big\n"
    )
    decoded = decode_program(compile_source(source, {"mov": 1}, {"r0": 0}))
    assert decoded.instructions == [
        (1, [0, "99999999999999999999"]),
        (1, [0, "123456789012345678901"]),
    ]

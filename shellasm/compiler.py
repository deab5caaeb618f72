from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Mapping

from shellasm.assembler import assemble_functions
from shellasm.data_section import DATA_SECTION, parse_data_section
from shellasm.encoding import encode_program
from shellasm.errors import NoEntrypointError
from shellasm.model import Program, SourceLine
from shellasm.scanner import read_source, scan_blocks, split_source
from shellasm.symbols import SymbolTable, build_symbol_table


logger = logging.getLogger(__name__)

TEXT_SECTION = ".text"


def _resolve_entrypoint(table: SymbolTable) -> int:
    text = table.sections.get(TEXT_SECTION)
    if text is None:
        raise NoEntrypointError(f"Missing {TEXT_SECTION} section")
    if not text.body:
        raise NoEntrypointError(f"{TEXT_SECTION} section does not name an entrypoint")
    entry_line = text.body[0]
    function = table.functions.get(entry_line.text)
    if function is None:
        raise NoEntrypointError.at(f"No entrypoint found: {entry_line.text}", entry_line)
    return function.address


def assemble_lines(
    lines: List[SourceLine],
    mnemonics: Mapping[str, int],
    registers: Mapping[str, int],
) -> Program:
    table = build_symbol_table(scan_blocks(lines))
    entrypoint = _resolve_entrypoint(table)
    data = parse_data_section(table.sections.get(DATA_SECTION))
    instructions = assemble_functions(table, mnemonics, registers, data)
    logger.debug("entrypoint %d, %d instructions", entrypoint, len(instructions))
    return Program(
        entrypoint=entrypoint,
        instructions=instructions,
        sections=table.sections,
        functions=table.functions,
        data=data,
    )


def assemble_source(text: str, mnemonics: Mapping[str, int], registers: Mapping[str, int]) -> Program:
    return assemble_lines(split_source(text), mnemonics, registers)


def compile_source(text: str, mnemonics: Mapping[str, int], registers: Mapping[str, int]) -> bytes:
    return encode_program(assemble_source(text, mnemonics, registers))


def compile_file(path: Path | str, mnemonics: Mapping[str, int], registers: Mapping[str, int]) -> bytes:
    program = assemble_lines(read_source(path), mnemonics, registers)
    blob = encode_program(program)
    logger.info("compiled %s: %d instructions, %d bytes", path, len(program.instructions), len(blob))
    return blob

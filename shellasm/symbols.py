from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from shellasm.errors import DuplicateSymbolError
from shellasm.model import Function, RawBlock, Section, SourceLine


logger = logging.getLogger(__name__)

SECTION_KEYWORD = "section"
FUNCTION_PREFIX = "_"


@dataclass
class SymbolTable:
    sections: Dict[str, Section] = field(default_factory=dict)
    functions: Dict[str, Function] = field(default_factory=dict)
    ignored: List[SourceLine] = field(default_factory=list)

    @property
    def instruction_count(self) -> int:
        return sum(function.instruction_count for function in self.functions.values())


def _section_name(header: str) -> str:
    remainder = header[len(SECTION_KEYWORD) + 1 :].strip()
    name = remainder.split(None, 1)[0] if remainder else ""
    return name[:-1] if name.endswith(":") else name


def _function_name(header: str) -> str:
    name = header.strip()
    return name[:-1] if name.endswith(":") else name


def build_symbol_table(blocks: List[RawBlock]) -> SymbolTable:
    table = SymbolTable()
    instruction_offset = 0
    for block in blocks:
        header = block.header
        if header.text.startswith(SECTION_KEYWORD + " "):
            name = _section_name(header.text)
            if name in table.sections:
                raise DuplicateSymbolError.at(f"Duplicate section: {name}", header)
            table.sections[name] = Section(name=name, address=len(table.sections), body=block.body)
        elif header.text.startswith(FUNCTION_PREFIX):
            name = _function_name(header.text)
            if name in table.functions:
                raise DuplicateSymbolError.at(f"Duplicate function: {name}", header)
            table.functions[name] = Function(name=name, address=instruction_offset, body=block.body)
            instruction_offset += len(block.body)
        else:
            logger.warning("line %d: ignoring unrecognized block header %r", header.line_no, header.text)
            table.ignored.append(header)
    logger.debug(
        "symbol table: %d sections, %d functions, %d instructions",
        len(table.sections),
        len(table.functions),
        instruction_offset,
    )
    return table

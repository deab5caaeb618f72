from __future__ import annotations

import logging
import re
from typing import Dict, List, Mapping, Optional

from shellasm.encoding import INT_MAX, INT_MIN
from shellasm.errors import (
    UnknownOpcodeError,
    UnresolvedDataReferenceError,
    UnresolvedFunctionReferenceError,
)
from shellasm.model import Function, Instruction, Operand, OperandKind, SourceLine
from shellasm.symbols import FUNCTION_PREFIX, SymbolTable


logger = logging.getLogger(__name__)

DATA_PREFIX = "$"
OFFSET_SEPARATOR = "+"

DECIMAL_RE = re.compile(r"[+-]?[0-9]+")
HEX_RE = re.compile(r"[+-]?0[xX][0-9A-Fa-f]+")


def parse_integer(token: str) -> Optional[int]:
    if DECIMAL_RE.fullmatch(token):
        value = int(token, 10)
    elif HEX_RE.fullmatch(token):
        value = int(token, 16)
    else:
        return None
    if not INT_MIN <= value <= INT_MAX:
        return None
    return value


class OperandResolver:
    def __init__(
        self,
        registers: Mapping[str, int],
        data: Mapping[str, str],
        functions: Mapping[str, Function],
    ) -> None:
        self.registers = registers
        self.data = data
        self.functions = functions

    def resolve(self, token: str, line: Optional[SourceLine] = None) -> Operand:
        if token in self.registers:
            return Operand(OperandKind.REGISTER, self.registers[token], token)
        if token.startswith(DATA_PREFIX):
            return self._resolve_data(token, line)
        if token.startswith(FUNCTION_PREFIX):
            return self._resolve_function(token, line)
        value = parse_integer(token)
        if value is not None:
            return Operand(OperandKind.INTEGER, value, token)
        return Operand(OperandKind.RAW, token, token)

    def _resolve_data(self, token: str, line: Optional[SourceLine]) -> Operand:
        name = token[len(DATA_PREFIX) :]
        if name not in self.data:
            raise UnresolvedDataReferenceError.at(f"Undefined data value: {token}", line)
        literal = self.data[name]
        value = parse_integer(literal)
        return Operand(OperandKind.DATA, literal if value is None else value, token)

    def _resolve_function(self, token: str, line: Optional[SourceLine]) -> Operand:
        name, sep, offset_text = token.partition(OFFSET_SEPARATOR)
        offset = 0
        if sep:
            parsed = parse_integer(offset_text)
            if parsed is None:
                raise UnresolvedFunctionReferenceError.at(f"Invalid function offset in {token}", line)
            offset = parsed
        function = self.functions.get(name)
        if function is None:
            raise UnresolvedFunctionReferenceError.at(f"Unknown function: {name}", line)
        address = function.address + offset
        if not INT_MIN <= address <= INT_MAX:
            raise UnresolvedFunctionReferenceError.at(f"Function address out of range: {token}", line)
        return Operand(OperandKind.FUNCTION_ADDRESS, address, token)


def assemble_line(line: SourceLine, mnemonics: Mapping[str, int], resolver: OperandResolver) -> Instruction:
    tokens = line.text.split()
    mnemonic = tokens[0]
    if mnemonic not in mnemonics:
        raise UnknownOpcodeError.at(f"Unknown instruction: {mnemonic}", line)
    operands = [resolver.resolve(token, line) for token in tokens[1:]]
    return Instruction(
        line_no=line.line_no,
        text=line.text,
        mnemonic=mnemonic,
        opcode=mnemonics[mnemonic],
        operands=operands,
    )


def assemble_function(
    function: Function, mnemonics: Mapping[str, int], resolver: OperandResolver
) -> List[Instruction]:
    return [assemble_line(line, mnemonics, resolver) for line in function.body]


def assemble_functions(
    table: SymbolTable,
    mnemonics: Mapping[str, int],
    registers: Mapping[str, int],
    data: Dict[str, str],
) -> List[Instruction]:
    resolver = OperandResolver(registers, data, table.functions)
    instructions: List[Instruction] = []
    for function in table.functions.values():
        compiled = assemble_function(function, mnemonics, resolver)
        logger.debug("assembled %s: %d instructions at %d", function.name, len(compiled), function.address)
        instructions.extend(compiled)
    return instructions

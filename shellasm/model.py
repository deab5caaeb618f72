from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List


@dataclass(frozen=True)
class SourceLine:
    line_no: int
    text: str


@dataclass(frozen=True)
class RawBlock:
    header: SourceLine
    body: List[SourceLine]


@dataclass
class Section:
    name: str
    address: int
    body: List[SourceLine]


@dataclass
class Function:
    name: str
    address: int
    body: List[SourceLine]

    @property
    def instruction_count(self) -> int:
        return len(self.body)


class OperandKind(Enum):
    REGISTER = "register"
    DATA = "data"
    FUNCTION_ADDRESS = "function_address"
    INTEGER = "integer"
    RAW = "raw"


@dataclass(frozen=True)
class Operand:
    kind: OperandKind
    value: int | str
    text: str


@dataclass(frozen=True)
class Instruction:
    line_no: int
    text: str
    mnemonic: str
    opcode: int
    operands: List[Operand]

    def encoded(self) -> List[int | str]:
        return [self.opcode, *(op.value for op in self.operands)]


@dataclass
class Program:
    entrypoint: int
    instructions: List[Instruction]
    sections: Dict[str, Section] = field(default_factory=dict)
    functions: Dict[str, Function] = field(default_factory=dict)
    data: Dict[str, str] = field(default_factory=dict)

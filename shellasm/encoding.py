"""
encoding.py — binary wire format for assembled programs.

Blob layout (version 1, multi-byte integers little-endian):
    +0   magic[3]      b"SHC"
    +3   version[1]    u8  (1)
    +4   value         the program sequence

Values:
    INT   0x01  i64                          signed 64-bit
    STR   0x02  u32 length, utf-8 bytes      length counts bytes
    SEQ   0x03  u32 count, value * count     nested values

The program value is SEQ[INT entrypoint, SEQ instr, ...] and every
instruction is SEQ[INT opcode, operand, ...] where each operand is an
INT or a STR.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple, Union

from shellasm.errors import DecodeError, EncodingError
from shellasm.model import Program


MAGIC = b"SHC"
FORMAT_VERSION = 1

TAG_INT = 0x01
TAG_STR = 0x02
TAG_SEQ = 0x03

INT_MIN = -(1 << 63)
INT_MAX = (1 << 63) - 1

_I64 = struct.Struct("<q")
_U32 = struct.Struct("<I")

Value = Union[int, str, Sequence["Value"]]


@dataclass
class DecodedProgram:
    entrypoint: int
    instructions: List[Tuple[int, List[Union[int, str]]]] = field(default_factory=list)


def _encode_into(value: Value, out: bytearray) -> None:
    if isinstance(value, bool):
        raise EncodingError(f"Boolean values are not encodable: {value!r}")
    if isinstance(value, int):
        if not INT_MIN <= value <= INT_MAX:
            raise EncodingError(f"Integer out of 64-bit range: {value}")
        out.append(TAG_INT)
        out += _I64.pack(value)
    elif isinstance(value, str):
        data = value.encode("utf-8")
        out.append(TAG_STR)
        out += _U32.pack(len(data))
        out += data
    elif isinstance(value, (list, tuple)):
        out.append(TAG_SEQ)
        out += _U32.pack(len(value))
        for item in value:
            _encode_into(item, out)
    else:
        raise EncodingError(f"Unsupported value type: {type(value).__name__}")


def encode_value(value: Value) -> bytes:
    out = bytearray()
    _encode_into(value, out)
    return bytes(out)


def encode_program(program: Program) -> bytes:
    payload: List[Value] = [program.entrypoint]
    payload.extend(instr.encoded() for instr in program.instructions)
    out = bytearray(MAGIC)
    out.append(FORMAT_VERSION)
    _encode_into(payload, out)
    return bytes(out)


class _Reader:
    def __init__(self, data: bytes, offset: int = 0) -> None:
        self.data = data
        self.offset = offset

    def take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise DecodeError(f"Truncated blob: need {size} bytes", self.offset)
        chunk = self.data[self.offset : end]
        self.offset = end
        return chunk

    def read_value(self) -> Value:
        start = self.offset
        tag = self.take(1)[0]
        if tag == TAG_INT:
            return _I64.unpack(self.take(_I64.size))[0]
        if tag == TAG_STR:
            length = _U32.unpack(self.take(_U32.size))[0]
            raw = self.take(length)
            try:
                return raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise DecodeError(f"Invalid utf-8 string: {exc}", start) from exc
        if tag == TAG_SEQ:
            count = _U32.unpack(self.take(_U32.size))[0]
            return [self.read_value() for _ in range(count)]
        raise DecodeError(f"Unknown tag 0x{tag:02x}", start)


def decode_value(data: bytes) -> Value:
    reader = _Reader(data)
    value = reader.read_value()
    if reader.offset != len(data):
        raise DecodeError("Trailing bytes after value", reader.offset)
    return value


def decode_program(blob: bytes) -> DecodedProgram:
    if blob[: len(MAGIC)] != MAGIC:
        raise DecodeError("Bad magic", 0)
    if len(blob) <= len(MAGIC):
        raise DecodeError("Missing format version", len(MAGIC))
    version = blob[len(MAGIC)]
    if version != FORMAT_VERSION:
        raise DecodeError(f"Unsupported format version: {version}", len(MAGIC))
    reader = _Reader(blob, len(MAGIC) + 1)
    payload = reader.read_value()
    if reader.offset != len(blob):
        raise DecodeError("Trailing bytes after program", reader.offset)
    if not isinstance(payload, list) or not payload or not isinstance(payload[0], int):
        raise DecodeError("Program must start with an integer entrypoint", len(MAGIC) + 1)
    program = DecodedProgram(entrypoint=payload[0])
    for item in payload[1:]:
        if not isinstance(item, list) or not item or not isinstance(item[0], int):
            raise DecodeError("Instruction must be a sequence starting with an opcode", len(MAGIC) + 1)
        operands = item[1:]
        if any(not isinstance(op, (int, str)) for op in operands):
            raise DecodeError("Operands must be integers or strings", len(MAGIC) + 1)
        program.instructions.append((item[0], operands))
    return program

from __future__ import annotations

from typing import Optional

from shellasm.model import SourceLine


class CompileError(Exception):
    def __init__(self, message: str, line_no: int = 0, text: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.line_no = line_no
        self.text = text

    @classmethod
    def at(cls, message: str, line: Optional[SourceLine]) -> "CompileError":
        if line is None:
            return cls(message)
        return cls(message, line.line_no, line.text)


class IOFailure(CompileError):
    pass


class NoEntrypointError(CompileError):
    pass


class DuplicateSymbolError(CompileError):
    pass


class MalformedDataLineError(CompileError):
    pass


class UnknownOpcodeError(CompileError):
    pass


class UnresolvedDataReferenceError(CompileError):
    pass


class UnresolvedFunctionReferenceError(CompileError):
    pass


class EncodingError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DecodeError(Exception):
    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} (offset {offset})")
        self.message = message
        self.offset = offset


class InstructionSetError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

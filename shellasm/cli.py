"""
Command-line front end for the shellcode assembler.

Usage:
  shellasm compile SOURCE [--isa FILE] [-o OUT] [--base64]
  shellasm dump BLOB [--isa FILE] [--base64]
"""

from __future__ import annotations

import argparse
import base64
import binascii
import logging
import sys
from pathlib import Path
from typing import List, Optional

from shellasm.compiler import compile_file
from shellasm.encoding import decode_program
from shellasm.errors import CompileError, DecodeError, EncodingError, InstructionSetError
from shellasm.isa import InstructionSet, instruction_set_manager


logger = logging.getLogger(__name__)


def _load_isa(path: Optional[str]) -> InstructionSet:
    if path:
        return instruction_set_manager.load_from_path(path)
    return instruction_set_manager.active()


def _format_operand(value: int | str) -> str:
    return repr(value) if isinstance(value, str) else str(value)


def cmd_compile(args: argparse.Namespace) -> int:
    isa = _load_isa(args.isa)
    blob = compile_file(args.source, isa.instructions, isa.registers)
    payload = base64.b64encode(blob) + b"\n" if args.base64 else blob
    if args.output:
        Path(args.output).write_bytes(payload)
        logger.info("wrote %d bytes to %s", len(payload), args.output)
    else:
        sys.stdout.buffer.write(payload)
        sys.stdout.buffer.flush()
    return 0


def cmd_dump(args: argparse.Namespace) -> int:
    isa = _load_isa(args.isa)
    raw = Path(args.blob).read_bytes()
    if args.base64:
        try:
            raw = base64.b64decode(raw.strip(), validate=True)
        except binascii.Error as exc:
            raise DecodeError(f"Invalid base64 input: {exc}", 0) from exc
    program = decode_program(raw)
    print(f"entrypoint: {program.entrypoint}")
    for index, (opcode, operands) in enumerate(program.instructions):
        mnemonic = isa.mnemonic_for(opcode) or f"op{opcode}"
        rendered = " ".join(_format_operand(op) for op in operands)
        print(f"{index:5d}  {mnemonic} {rendered}".rstrip())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shellasm",
        description="Assemble instruction-description files into shellcode blobs.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    compile_parser = sub.add_parser("compile", help="Compile a source file into a blob")
    compile_parser.add_argument("source", help="Source file to assemble")
    compile_parser.add_argument("-i", "--isa", default=None, help="Instruction set JSON file")
    compile_parser.add_argument("-o", "--output", default=None, help="Output file (default: stdout)")
    compile_parser.add_argument("--base64", action="store_true", help="Write base64 text instead of raw bytes")
    compile_parser.set_defaults(func=cmd_compile)

    dump_parser = sub.add_parser("dump", help="Decode a blob and list its instructions")
    dump_parser.add_argument("blob", help="Blob file to decode")
    dump_parser.add_argument("-i", "--isa", default=None, help="Instruction set JSON file")
    dump_parser.add_argument("--base64", action="store_true", help="Input is base64 text")
    dump_parser.set_defaults(func=cmd_dump)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        return args.func(args)
    except CompileError as exc:
        location = f"{args.source}:{exc.line_no}" if exc.line_no else args.source
        print(f"{location}: {exc.message}", file=sys.stderr)
        return 1
    except (DecodeError, EncodingError, InstructionSetError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

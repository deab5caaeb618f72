from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from shellasm.errors import InstructionSetError


logger = logging.getLogger(__name__)

SUPPORTED_SCHEMA_VERSIONS = {1}


@dataclass(frozen=True)
class InstructionSet:
    schema_version: int
    name: str
    description: str
    instructions: Dict[str, int]
    registers: Dict[str, int]

    def mnemonic_for(self, opcode: int) -> Optional[str]:
        for mnemonic, code in self.instructions.items():
            if code == opcode:
                return mnemonic
        return None


def _default_instruction_set_path() -> Path:
    return Path(__file__).resolve().parent / "assets" / "isa" / "default.json"


class InstructionSetManager:
    def __init__(self, default_path: Optional[Path] = None) -> None:
        self.default_path = default_path or _default_instruction_set_path()
        self.active_set: Optional[InstructionSet] = None
        self.load_default()

    def load_default(self) -> InstructionSet:
        return self.load_from_path(self.default_path)

    def load_from_path(self, path: Path | str) -> InstructionSet:
        resolved = Path(path).expanduser().resolve()
        data = self._load_json(resolved)
        isa = self._validate(data, resolved)
        self.active_set = isa
        logger.debug("loaded instruction set %r from %s", isa.name, resolved)
        return isa

    def active(self) -> InstructionSet:
        if not self.active_set:
            raise InstructionSetError("No active instruction set.")
        return self.active_set

    def _load_json(self, path: Path) -> dict:
        if not path.exists():
            raise InstructionSetError(f"Instruction set not found: {path}")
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except json.JSONDecodeError as exc:
            raise InstructionSetError(f"Invalid JSON in {path}: {exc}") from exc
        except OSError as exc:
            raise InstructionSetError(f"Failed to read instruction set: {exc}") from exc

    def _validate(self, data: dict, path: Path) -> InstructionSet:
        if not isinstance(data, dict):
            raise InstructionSetError("Instruction set must be a JSON object.")
        schema_version = data.get("schema_version")
        if not isinstance(schema_version, int) or isinstance(schema_version, bool):
            raise InstructionSetError("schema_version must be an integer.")
        if schema_version not in SUPPORTED_SCHEMA_VERSIONS:
            raise InstructionSetError(f"Unsupported schema_version: {schema_version}")
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise InstructionSetError("name is required and must be a string.")
        description = data.get("description") or ""
        if not isinstance(description, str):
            raise InstructionSetError("description must be a string if provided.")
        instructions = self._validate_table(data.get("instructions"), "instructions", path)
        if not instructions:
            raise InstructionSetError("instructions must be a non-empty object.")
        seen: Dict[int, str] = {}
        for mnemonic, opcode in instructions.items():
            if opcode in seen:
                raise InstructionSetError(
                    f"Duplicate opcode {opcode} for {mnemonic} (already used by {seen[opcode]})"
                )
            seen[opcode] = mnemonic
        registers = self._validate_table(data.get("registers", {}), "registers", path)
        return InstructionSet(
            schema_version=schema_version,
            name=name.strip(),
            description=description.strip(),
            instructions=instructions,
            registers=registers,
        )

    def _validate_table(self, table: object, key: str, path: Path) -> Dict[str, int]:
        if not isinstance(table, dict):
            raise InstructionSetError(f"{key} must be an object in {path}.")
        result: Dict[str, int] = {}
        for name, code in table.items():
            if not name.strip() or name != name.strip() or len(name.split()) != 1:
                raise InstructionSetError(f"{key} entry {name!r} must be a single token.")
            if not isinstance(code, int) or isinstance(code, bool) or code < 0:
                raise InstructionSetError(f"{key}.{name} must be a non-negative integer.")
            result[name] = code
        return result


instruction_set_manager = InstructionSetManager()

from __future__ import annotations

from typing import Dict, Optional

from shellasm.errors import MalformedDataLineError
from shellasm.model import Section


DATA_SECTION = ".data"


def parse_data_section(section: Optional[Section]) -> Dict[str, str]:
    values: Dict[str, str] = {}
    if section is None:
        return values
    for line in section.body:
        if "=" not in line.text:
            raise MalformedDataLineError.at(f"Expected name=value in data section: {line.text}", line)
        name, value = line.text.split("=", 1)
        name = name.strip()
        if not name:
            raise MalformedDataLineError.at(f"Missing name in data section: {line.text}", line)
        values[name] = value.strip()
    return values

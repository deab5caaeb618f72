from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from shellasm.errors import IOFailure
from shellasm.model import RawBlock, SourceLine


logger = logging.getLogger(__name__)


def is_indented(text: str) -> bool:
    return text.startswith("\t") or text.startswith("  ")


def split_source(text: str) -> List[SourceLine]:
    lines: List[SourceLine] = []
    for idx, raw_line in enumerate(text.split("\n"), start=1):
        raw_line = raw_line.rstrip("\r")
        if not raw_line.strip():
            continue
        lines.append(SourceLine(idx, raw_line))
    return lines


def read_source(path: Path | str) -> List[SourceLine]:
    resolved = Path(path)
    try:
        text = resolved.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise IOFailure(f"Failed to read source file {resolved}: {exc}") from exc
    return split_source(text)


def scan_blocks(lines: List[SourceLine]) -> List[RawBlock]:
    blocks: List[RawBlock] = []
    idx = 0
    while idx < len(lines):
        header = lines[idx]
        if is_indented(header.text):
            logger.warning("line %d: indented line outside of any block, skipping", header.line_no)
            idx += 1
            continue
        body: List[SourceLine] = []
        for line in lines[idx + 1 :]:
            if not is_indented(line.text):
                break
            body.append(SourceLine(line.line_no, line.text.strip()))
        blocks.append(RawBlock(header=SourceLine(header.line_no, header.text.rstrip()), body=body))
        idx += 1 + len(body)
    logger.debug("scanned %d blocks from %d lines", len(blocks), len(lines))
    return blocks

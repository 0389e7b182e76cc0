from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple


# kotlinc -script reports "script.kts:3:9: error: ..." (path prefix optional)
ERROR_LOCATION_RE = re.compile(r"(?:script(?:\.kts)?:)?([0-9]+):([0-9]+):")


@dataclass
class ErrorLocation:
    line: int
    column: int
    message: str


def parse_error_location(text: str) -> Optional[ErrorLocation]:
    """Extract a 1-based (line, column) from one line of compiler output."""
    if not text:
        return None
    m = ERROR_LOCATION_RE.search(text)
    if not m:
        return None
    try:
        line = int(m.group(1))
        column = int(m.group(2))
    except ValueError:
        return None
    return ErrorLocation(line=line, column=column, message=text)


def find_error_locations(output: str) -> List[Tuple[int, ErrorLocation]]:
    found: List[Tuple[int, ErrorLocation]] = []
    if not output:
        return found
    for idx, line in enumerate(output.split("\n")):
        loc = parse_error_location(line)
        if loc is not None:
            found.append((idx, loc))
    return found


def offset_for_location(text: str, line: int, column: int) -> Optional[int]:
    """Map a 1-based line/column onto a character offset in ``text``.

    Returns None when the line does not exist. The column is clamped to the
    line, so a stale location still lands somewhere sensible.
    """
    lines = (text or "").split("\n")
    if line <= 0 or line > len(lines):
        return None
    start = sum(len(lines[i]) + 1 for i in range(line - 1))
    col = max(column - 1, 0)
    return start + min(col, len(lines[line - 1]))

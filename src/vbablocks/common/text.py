"""Small text helpers for diagnostics."""

import re
from typing import Sequence

_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def join_commas(values: Sequence[str], separator: str = "and") -> str:
    """Join values as an English list: "a", "a and b", "a, b, and c"."""
    values = list(values)
    if not values:
        return ""
    if len(values) == 1:
        return values[0]
    if len(values) == 2:
        return f"{values[0]} {separator} {values[1]}"
    return f"{', '.join(values[:-1])}, {separator} {values[-1]}"


def sanitize_filename(name: str) -> str:
    """Replace characters that are not allowed in file names."""
    sanitized = _INVALID_FILENAME_CHARS.sub("-", name).strip().rstrip(".")
    return sanitized or "-"

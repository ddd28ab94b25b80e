"""[src] entries: named source components declared by a manifest."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..errors import manifest_ok

EXAMPLE = """Example vba-block.toml:

  [src]
  A = "src/a.bas"
  B = { path = "src/b.cls" }
  C = { path = "src/c.frm", binary = "src/c.frx" }"""


@dataclass(frozen=True)
class Source:
    """One declared source file; path and binary are absolute."""

    name: str
    path: str
    binary: Optional[str] = None
    optional: bool = False


def parse_src(value: Dict[str, Any], dir: str) -> List[Source]:
    """Parse the [src] table; keys are component names."""
    manifest_ok(isinstance(value, dict), f"[src] must be a table.\n\n{EXAMPLE}")

    src = []
    for name, entry in value.items():
        if isinstance(entry, str):
            entry = {"path": entry}
        manifest_ok(
            isinstance(entry, dict) and isinstance(entry.get("path"), str),
            f"src \"{name}\" is missing \"path\".\n\n{EXAMPLE}",
        )

        binary = entry.get("binary")
        manifest_ok(
            binary is None or isinstance(binary, str),
            f"src \"{name}\" has an invalid \"binary\" path.",
        )
        src.append(
            Source(
                name=name,
                path=os.path.normpath(os.path.join(dir, entry["path"])),
                binary=os.path.normpath(os.path.join(dir, binary)) if binary else None,
                optional=bool(entry.get("optional", False)),
            )
        )

    return src

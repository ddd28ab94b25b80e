"""[targets]: named build outputs."""
from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List

from ..common.text import sanitize_filename
from ..constants import Constants
from ..errors import manifest_ok

EXAMPLE = """Example vba-block.toml:

  [targets]
  xlsm = "targets/xlsm"

Example vba-block.toml with a custom name:

  [targets.xlam]
  name = "custom-name"
  path = "targets/xlam\""""


class TargetType(str, Enum):
    """Supported container formats."""

    XLSX = "xlsx"
    XLSM = "xlsm"
    XLAM = "xlam"


@dataclass(frozen=True)
class Target:
    name: str
    type: TargetType
    path: str
    filename: str


def is_supported_target_type(value: Any) -> bool:
    return isinstance(value, str) and value in {t.value for t in TargetType}


def parse_target(value: Any, pkg_name: str, dir: str) -> Target:
    """Parse one target given as a type string or a table with "type"."""
    if isinstance(value, str):
        value = {"type": value}
    manifest_ok(isinstance(value, dict), f"Target must be a string or table.\n\n{EXAMPLE}")

    target_type = value.get("type")
    manifest_ok(isinstance(target_type, str), f"Target is missing \"type\".\n\n{EXAMPLE}")
    manifest_ok(
        is_supported_target_type(target_type),
        f"Unsupported target type \"{target_type}\". "
        "Only \"xlsx\", \"xlsm\", and \"xlam\" are supported currently.",
    )

    name = value.get("name", pkg_name)
    manifest_ok(isinstance(name, str) and name, "Target \"name\" must be a non-empty string.")
    relative_path = value.get("path", Constants.DEFAULT_TARGET_PATH)
    manifest_ok(isinstance(relative_path, str), "Target \"path\" must be a string.")

    return Target(
        name=name,
        type=TargetType(target_type),
        path=os.path.normpath(os.path.join(dir, relative_path)),
        filename=f"{sanitize_filename(name)}.{target_type}",
    )


def parse_targets(value: Dict[str, Any], pkg_name: str, dir: str) -> List[Target]:
    """Parse the [targets] table, keyed by target type."""
    manifest_ok(isinstance(value, dict), f"[targets] must be a table.\n\n{EXAMPLE}")

    targets = []
    for target_type, entry in value.items():
        if isinstance(entry, str):
            entry = {"type": target_type, "path": entry}
        elif isinstance(entry, dict):
            entry = {"type": target_type, **entry}
        targets.append(parse_target(entry, pkg_name, dir))
    return targets

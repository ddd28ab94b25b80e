"""[references]: external type libraries identified by name, guid and version."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..errors import manifest_ok

EXAMPLE = """Example vba-block.toml:

  [references.Scripting]
  version = "1.0"
  guid = "{420B2830-E718-11CF-893D-00A0C9054228}\""""

_VERSION = re.compile(r"^\s*(\d+)\.(\d+)\s*$")


@dataclass(frozen=True)
class Reference:
    """External reference; origin names the dependency that contributed it."""

    name: str
    guid: str
    major: int
    minor: int
    origin: Optional[str] = None

    @property
    def key(self) -> Tuple[str, str, int, int]:
        """Identity used for de-duplication, ignoring origin."""
        return (self.name, self.guid, self.major, self.minor)

    @property
    def version(self) -> str:
        return f"{self.major}.{self.minor}"


def parse_references(value: Dict[str, Any]) -> List[Reference]:
    """Parse the [references] table, keyed by reference name."""
    manifest_ok(isinstance(value, dict), f"[references] must be a table.\n\n{EXAMPLE}")

    references = []
    for name, entry in value.items():
        manifest_ok(isinstance(entry, dict), f"Reference \"{name}\" must be a table.\n\n{EXAMPLE}")

        guid = entry.get("guid")
        manifest_ok(
            isinstance(guid, str) and guid.strip(),
            f"Reference \"{name}\" is missing \"guid\".\n\n{EXAMPLE}",
        )
        version = entry.get("version")
        match = _VERSION.match(version) if isinstance(version, str) else None
        manifest_ok(
            match is not None,
            f"Reference \"{name}\" needs a \"major.minor\" version, found {version!r}.\n\n{EXAMPLE}",
        )

        references.append(
            Reference(name=name, guid=guid.strip(), major=int(match.group(1)), minor=int(match.group(2)))
        )

    return references

"""The merged, validated graph handed to packaging."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from ..constants import Constants
from ..manifest import Reference
from .component import Component


@dataclass(frozen=True)
class BuildGraph:
    """Components sorted by name, references in first-seen order."""

    name: str = Constants.PROJECT_NAME
    components: Tuple[Component, ...] = ()
    references: Tuple[Reference, ...] = ()

    @property
    def from_dependencies(self) -> Dict[str, Dict[str, Any]]:
        """Dependencies that contributed each non-root component and reference.

        Component names are unique in a valid graph. References may share a
        name under different guids, so each reference name maps to a list.
        """
        references: Dict[str, List[str]] = {}
        for reference in self.references:
            if reference.origin is not None:
                references.setdefault(reference.name, []).append(reference.origin)
        return {
            "components": {c.name: c.origin for c in self.components if c.origin is not None},
            "references": references,
        }

"""Resolution inputs and outputs."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..manifest import Dependency, Manifest
from ..versioning import Version


@dataclass(frozen=True)
class Requirement:
    """A dependency declaration together with who declared it.

    generation identifies the assignment of required_by that produced this
    requirement (0 for the root); once that assignment is replaced the
    requirement is stale.
    """

    dependency: Dependency
    required_by: str
    generation: int
    chain: Tuple[str, ...]

    @property
    def name(self) -> str:
        return self.dependency.name

    def satisfied_by(self, candidate) -> bool:
        return self.dependency.satisfied_by(candidate)

    def describe(self) -> str:
        return self.dependency.describe()


@dataclass(frozen=True)
class DependencyNode:
    name: str
    version: Version
    manifest: Manifest
    source: Dependency


@dataclass(frozen=True)
class Solution:
    """Resolved dependency closure of root, in first-discovery order."""

    root: Manifest
    dependencies: Tuple[DependencyNode, ...] = ()

    def __iter__(self) -> Iterator[DependencyNode]:
        return iter(self.dependencies)

    def __len__(self) -> int:
        return len(self.dependencies)

    @property
    def manifests(self) -> List[Manifest]:
        return [node.manifest for node in self.dependencies]

    def get(self, name: str) -> Optional[DependencyNode]:
        for node in self.dependencies:
            if node.name == name:
                return node
        return None

    def to_snapshot(self) -> List[Dict[str, Any]]:
        """JSON-friendly view, stable across runs for identical inputs."""
        return [
            {
                "name": node.name,
                "version": str(node.version),
                "source": ":".join(node.source.source_key),
            }
            for node in self.dependencies
        ]

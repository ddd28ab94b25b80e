"""Package source interface shared by registry, git and path sources."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ..manifest import Dependency, Manifest
from ..versioning import Version


@dataclass(frozen=True)
class Candidate:
    """A (version, manifest) pair and the descriptor it was found through."""

    version: Version
    manifest: Manifest
    source: Dependency

    @property
    def name(self) -> str:
        return self.manifest.name


class PackageSource:
    """Base class for sources; lookup performs I/O but no resolution."""

    async def lookup(self, dependency: Dependency) -> List[Candidate]:
        """Return the candidates that can satisfy dependency.

        Args:
            dependency: The requirement, including its current range.

        Returns:
            Candidates in no particular order.

        Raises:
            SourceUnavailable: If the source could not be reached.
        """
        raise NotImplementedError

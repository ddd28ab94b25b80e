"""Path source: a package read straight from a local directory."""
from __future__ import annotations

import asyncio
import logging
from typing import List

from ..manifest import PathDependency, load_manifest
from .base import Candidate, PackageSource

logger = logging.getLogger(__name__)


class PathSource(PackageSource):
    """Loads the manifest at the dependency's path; always one candidate."""

    async def lookup(self, dependency: PathDependency) -> List[Candidate]:
        logger.debug("Loading path dependency %s from %s", dependency.name, dependency.path)
        manifest = await asyncio.to_thread(load_manifest, dependency.path)
        return [Candidate(version=manifest.version, manifest=manifest, source=dependency)]

"""Build pipeline entry points: load, resolve, assemble."""
from __future__ import annotations

import logging
from typing import Optional

from .build import BuildGraph, load_from_project
from .config import Config
from .project import Project
from .resolve import Solution, resolve
from .sources import SourceSet

logger = logging.getLogger(__name__)


async def resolve_project(project: Project, config: Config, sources: Optional[SourceSet] = None) -> Solution:
    """Resolve project's dependencies against the configured sources."""
    sources = sources or SourceSet.from_config(config)
    logger.info("Resolving dependencies for %s", project.name)
    return await resolve(project.manifest, sources)


async def build_graph(project: Project, config: Config, sources: Optional[SourceSet] = None) -> BuildGraph:
    """Resolve project and assemble its build graph."""
    solution = await resolve_project(project, config, sources)
    logger.info("Loading %s dependencies", len(solution))
    return await load_from_project(project, solution.manifests)

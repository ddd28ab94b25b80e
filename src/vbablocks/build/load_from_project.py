"""Assemble the build graph from a project and its resolved dependencies."""
from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Dict, Iterable, List, Set, Tuple

from ..constants import Constants
from ..errors import BuildInvalid, duplicate_component_line, reference_versions_line
from ..manifest import Manifest, Reference
from ..project import Project
from .build_graph import BuildGraph
from .component import Component, by_component_name

logger = logging.getLogger(__name__)


async def load_from_project(project: Project, dependencies: Iterable[Manifest]) -> BuildGraph:
    """Load every component and reference of project and dependencies.

    Component files are read concurrently. References identical in name,
    guid and version are kept once, first occurrence winning.

    Raises:
        ComponentLoadFailed: For the first (in declaration order) unreadable source.
        BuildInvalid: With every duplicate component and reference version conflict.
    """
    root = project.manifest
    manifests = [root, *dependencies]

    loading = []
    references: List[Reference] = []
    found_references: Set[Tuple[str, str, int, int]] = set()

    for index, manifest in enumerate(manifests):
        origin = None if index == 0 else manifest.name
        for source in manifest.src:
            loading.append(Component.load(source.path, binary_path=source.binary, origin=origin))
        for reference in manifest.references:
            if reference.key in found_references:
                continue
            found_references.add(reference.key)
            references.append(dataclasses.replace(reference, origin=origin))

    results = await asyncio.gather(*loading, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result

    components = sorted(results, key=by_component_name)
    graph = BuildGraph(
        name=Constants.PROJECT_NAME,
        components=tuple(components),
        references=tuple(references),
    )
    logger.debug(
        "Loaded %s components and %s references from %s manifests",
        len(graph.components), len(graph.references), len(manifests),
    )

    validate_graph(project, graph)
    return graph


def validate_graph(project: Project, graph: BuildGraph) -> None:
    """Check uniqueness across the whole graph, reporting every violation."""
    components_by_name: Dict[str, List[str]] = {}
    references_by_name: Dict[str, List[Reference]] = {}
    errors: List[str] = []

    for component in graph.components:
        manifest_name = component.origin or project.manifest.name
        components_by_name.setdefault(component.name, []).append(manifest_name)
    for reference in graph.references:
        references_by_name.setdefault(reference.name, []).append(reference)

    for name, manifest_names in components_by_name.items():
        if len(manifest_names) > 1:
            errors.append(duplicate_component_line(name, manifest_names))
    for name, named_references in references_by_name.items():
        versions = []
        for reference in named_references:
            if reference.version not in versions:
                versions.append(reference.version)
        if len(versions) > 1:
            errors.append(reference_versions_line(name, versions))

    if errors:
        for error in errors:
            logger.debug("Build violation: %s", error)
        raise BuildInvalid(errors)

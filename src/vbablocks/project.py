"""Project discovery: the root manifest a build starts from."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .errors import ManifestNotFound
from .manifest import Manifest, load_manifest, manifest_path


@dataclass(frozen=True)
class Project:
    manifest: Manifest
    dir: str

    @property
    def name(self) -> str:
        return self.manifest.name


def find_project_dir(start: str) -> Optional[str]:
    """Return the nearest directory at or above start holding a manifest."""
    current = os.path.abspath(start)
    while True:
        if os.path.isfile(manifest_path(current)):
            return current
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def load_project(dir: Optional[str] = None) -> Project:
    """Load the project containing dir (defaults to the working directory)."""
    start = dir or os.getcwd()
    project_dir = find_project_dir(start)
    if project_dir is None:
        raise ManifestNotFound(os.path.abspath(start))
    return Project(manifest=load_manifest(project_dir), dir=project_dir)

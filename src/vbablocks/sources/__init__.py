"""Package sources and the provider set the resolver queries."""
from __future__ import annotations

from typing import Dict, List, Optional

from ..config import Config
from ..constants import SourceKinds
from ..errors import SourceUnavailable
from ..manifest import Dependency
from .base import Candidate, PackageSource
from .git import GitSource
from .path import PathSource
from .registry import RegistrySource


class SourceSet:
    """Dispatches lookups to the source responsible for a dependency."""

    def __init__(
        self,
        registries: Optional[Dict[str, PackageSource]] = None,
        git: Optional[PackageSource] = None,
        path: Optional[PackageSource] = None,
    ):
        self.registries = dict(registries or {})
        self.git = git or GitSource()
        self.path = path or PathSource()

    @classmethod
    def from_config(cls, config: Config) -> "SourceSet":
        registries = {
            name: RegistrySource(
                name,
                url,
                config.cache_dir,
                timeout=config.request_timeout,
                retries=config.http_retries,
            )
            for name, url in config.registries.items()
        }
        return cls(registries=registries, git=GitSource(config.cache_dir), path=PathSource())

    def source_for(self, dependency: Dependency) -> PackageSource:
        if dependency.kind == SourceKinds.GIT:
            return self.git
        if dependency.kind == SourceKinds.PATH:
            return self.path
        registry = self.registries.get(dependency.registry)
        if registry is None:
            raise SourceUnavailable(
                dependency.registry,
                f"No registry named \"{dependency.registry}\" is configured (needed for \"{dependency.name}\").",
            )
        return registry

    async def lookup(self, dependency: Dependency) -> List[Candidate]:
        return await self.source_for(dependency).lookup(dependency)


__all__ = [
    "Candidate",
    "GitSource",
    "PackageSource",
    "PathSource",
    "RegistrySource",
    "SourceSet",
]

"""[dependencies]: where each required package comes from.

A dependency is one of three descriptors. Registry dependencies carry a version
range; git and path dependencies always resolve to exactly one candidate, so
their range accepts any version and the candidate must come from the same
place (``source_key``).
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from ..constants import Constants, SourceKinds
from ..errors import ManifestInvalid, manifest_ok
from ..versioning import Range

EXAMPLE = """Example vba-block.toml:

  [dependencies]
  dictionary = "1.4.1"
  with-properties = { version = "1.0.0" }
  from-path = { path = "packages/from-path" }
  from-git-master = { git = "https://github.com/VBA-tools/VBA-Web.git" }
  from-git-branch = { git = "https://github.com/VBA-tools/VBA-Web.git", branch = "beta" }
  from-git-tag = { git = "https://github.com/VBA-tools/VBA-Web.git", tag = "v1.0.0" }
  from-git-rev = { git = "https://github.com/VBA-tools/VBA-Web.git", rev = "a1b2c3d4" }"""


@dataclass(frozen=True)
class RegistryDependency:
    name: str
    range: Range
    registry: str = Constants.DEFAULT_REGISTRY

    @property
    def kind(self) -> SourceKinds:
        return SourceKinds.REGISTRY

    @property
    def source_key(self) -> Tuple[str, ...]:
        return (SourceKinds.REGISTRY.value, self.registry)

    def satisfied_by(self, candidate) -> bool:
        return candidate.source.source_key == self.source_key and self.range.match(candidate.version)

    def describe(self) -> str:
        return f"{self.name}@{self.range}"


@dataclass(frozen=True)
class GitDependency:
    name: str
    url: str
    branch: Optional[str] = None
    tag: Optional[str] = None
    rev: Optional[str] = None
    range: Range = field(default_factory=Range.any, compare=False)

    @property
    def kind(self) -> SourceKinds:
        return SourceKinds.GIT

    @property
    def ref(self) -> Optional[str]:
        """Human-readable pin, e.g. "tag=v1.0.0"; None for the default branch."""
        if self.rev:
            return f"rev={self.rev}"
        if self.tag:
            return f"tag={self.tag}"
        if self.branch:
            return f"branch={self.branch}"
        return None

    @property
    def source_key(self) -> Tuple[str, ...]:
        return (SourceKinds.GIT.value, self.url, self.ref or "")

    def satisfied_by(self, candidate) -> bool:
        return candidate.source.source_key == self.source_key

    def describe(self) -> str:
        ref = f"#{self.ref}" if self.ref else ""
        return f"{self.name} from git {self.url}{ref}"


@dataclass(frozen=True)
class PathDependency:
    name: str
    path: str
    range: Range = field(default_factory=Range.any, compare=False)

    @property
    def kind(self) -> SourceKinds:
        return SourceKinds.PATH

    @property
    def source_key(self) -> Tuple[str, ...]:
        return (SourceKinds.PATH.value, self.path)

    def satisfied_by(self, candidate) -> bool:
        return candidate.source.source_key == self.source_key

    def describe(self) -> str:
        return f"{self.name} from path {self.path}"


Dependency = Union[RegistryDependency, GitDependency, PathDependency]


def _parse_range(name: str, text: Any) -> Range:
    manifest_ok(isinstance(text, str), f"Dependency \"{name}\" has an invalid version.\n\n{EXAMPLE}")
    try:
        return Range.parse(text)
    except ValueError as exc:
        raise ManifestInvalid(f"Dependency \"{name}\" has an invalid version \"{text}\".\n\n{EXAMPLE}") from exc


def parse_dependency(name: str, value: Any, dir: str) -> Dependency:
    """Parse one dependency entry; relative paths are anchored at dir."""
    if isinstance(value, str):
        return RegistryDependency(name=name, range=_parse_range(name, value))

    manifest_ok(isinstance(value, dict), f"Invalid dependency \"{name}\".\n\n{EXAMPLE}")

    if "path" in value:
        manifest_ok(isinstance(value["path"], str), f"Dependency \"{name}\" has an invalid path.")
        return PathDependency(name=name, path=os.path.normpath(os.path.join(dir, value["path"])))

    if "git" in value:
        manifest_ok(isinstance(value["git"], str), f"Dependency \"{name}\" has an invalid git url.")
        pins = [key for key in ("branch", "tag", "rev") if key in value]
        manifest_ok(
            len(pins) <= 1,
            f"Dependency \"{name}\" may only specify one of \"branch\", \"tag\", or \"rev\".",
        )
        for key in pins:
            manifest_ok(isinstance(value[key], str), f"Dependency \"{name}\" has an invalid {key}.")
        return GitDependency(
            name=name,
            url=value["git"],
            branch=value.get("branch"),
            tag=value.get("tag"),
            rev=value.get("rev"),
        )

    manifest_ok("version" in value, f"Dependency \"{name}\" is missing \"version\", \"path\", or \"git\".\n\n{EXAMPLE}")
    registry = value.get("registry", Constants.DEFAULT_REGISTRY)
    manifest_ok(isinstance(registry, str), f"Dependency \"{name}\" has an invalid registry.")
    return RegistryDependency(name=name, range=_parse_range(name, value["version"]), registry=registry)


def parse_dependencies(value: Dict[str, Any], dir: str) -> List[Dependency]:
    """Parse the [dependencies] table in declaration order."""
    manifest_ok(isinstance(value, dict), f"[dependencies] must be a table.\n\n{EXAMPLE}")
    return [parse_dependency(name, entry, dir) for name, entry in value.items()]

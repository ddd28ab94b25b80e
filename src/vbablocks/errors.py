"""Error taxonomy shared by manifest parsing, resolution and graph assembly.

Every error renders a multi-line message naming the packages, components or
references involved so the CLI can print it as-is.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple

from .common.text import join_commas


class ErrorCode(str, Enum):
    """Stable identifiers for user-facing failures."""

    MANIFEST_NOT_FOUND = "manifest-not-found"
    MANIFEST_INVALID = "manifest-invalid"
    UNRESOLVABLE_CONFLICT = "unresolvable-conflict"
    SOURCE_UNAVAILABLE = "source-unavailable"
    BUILD_INVALID = "build-invalid"
    COMPONENT_LOAD_FAILED = "component-load-failed"


class BlocksError(Exception):
    """Base class for all expected failures."""

    code: ErrorCode

    def __init__(self, code: ErrorCode, message: str):
        self.code = code
        super().__init__(message)


class ManifestInvalid(BlocksError):
    """Raised when a manifest is malformed or misses required fields."""

    def __init__(self, message: str):
        super().__init__(ErrorCode.MANIFEST_INVALID, f"Invalid manifest:\n\n{message}")


class ManifestNotFound(ManifestInvalid):
    """Raised when no manifest file exists in the given directory."""

    def __init__(self, dir: str):
        self.dir = dir
        BlocksError.__init__(
            self,
            ErrorCode.MANIFEST_NOT_FOUND,
            f"vba-block.toml not found in \"{dir}\".",
        )


def manifest_ok(condition, message: str) -> None:
    """Raise ManifestInvalid with message unless condition is truthy."""
    if not condition:
        raise ManifestInvalid(message)


@dataclass(frozen=True)
class Conflict:
    """One package name no candidate version can satisfy."""

    name: str
    # (manifest name, requirement description, chain from the root to that manifest)
    requirers: Tuple[Tuple[str, str, Tuple[str, ...]], ...]

    def lines(self) -> List[str]:
        out = [f"Unable to resolve \"{self.name}\", no version satisfies every requirement:"]
        for requirer, description, chain in self.requirers:
            path = "".join(f"{step} > " for step in chain[:-1])
            out.append(f"  - {path}\"{requirer}\" requires {description}")
        return out


class UnresolvableConflict(BlocksError):
    """Raised when resolution finishes with one or more unsatisfiable packages."""

    def __init__(self, conflicts: Sequence[Conflict]):
        self.conflicts = list(conflicts)
        first = self.conflicts[0]
        self.name = first.name
        self.requirers = list(first.requirers)

        sections = ["\n".join(conflict.lines()) for conflict in self.conflicts]
        super().__init__(
            ErrorCode.UNRESOLVABLE_CONFLICT,
            "Failed to resolve dependencies:\n\n" + "\n\n".join(sections),
        )


class SourceUnavailable(BlocksError):
    """Raised by a package source that could not answer a lookup."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(
            ErrorCode.SOURCE_UNAVAILABLE,
            f"Source \"{source}\" is unavailable:\n\n{message}",
        )


class BuildInvalid(BlocksError):
    """Raised with every structural violation found in an assembled graph."""

    def __init__(self, violations: Sequence[str]):
        self.violations = list(violations)
        super().__init__(
            ErrorCode.BUILD_INVALID,
            "Invalid build:\n\n" + "\n".join(self.violations),
        )


class ComponentLoadFailed(BlocksError):
    """Raised when a declared source file cannot be read or parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(
            ErrorCode.COMPONENT_LOAD_FAILED,
            f"Failed to load component \"{path}\":\n\n{reason}",
        )


def duplicate_component_line(name: str, manifest_names: Sequence[str]) -> str:
    """Diagnostic line for a component name contributed by several manifests."""
    names = [f"\"{manifest_name}\"" for manifest_name in manifest_names]
    return f"Source \"{name}\" is present in manifests named {join_commas(names)}"


def reference_versions_line(name: str, versions: Sequence[str]) -> str:
    """Diagnostic line for a reference declared with several versions."""
    return f"Reference \"{name}\" has multiple versions: {join_commas(versions)}"

"""Manifest model and vba-block.toml loading.

Example vba-block.toml::

    [package]
    name = "package-name"
    version = "1.0.0-rc.1"
    authors = ["Tim Hall <tim.hall.engr@gmail.com>"]

    [src]
    A = "src/a.bas"
    B = { path = "src/b.cls" }

    [dependencies]
    dictionary = "1.4.1"
    from-path = { path = "packages/from-path" }

    [references.Scripting]
    version = "1.0"
    guid = "{420B2830-E718-11CF-893D-00A0C9054228}"

    [targets]
    xlsm = "targets/xlsm"
"""
from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from ..constants import Constants
from ..errors import ManifestInvalid, ManifestNotFound, manifest_ok
from ..versioning import Version, parse_version
from .dependency import (
    Dependency,
    GitDependency,
    PathDependency,
    RegistryDependency,
    parse_dependencies,
)
from .reference import Reference, parse_references
from .source import Source, parse_src
from .target import Target, TargetType, parse_targets

logger = logging.getLogger(__name__)

EXAMPLE = """Example vba-block.toml for a package (e.g. library to be shared):

  [package]
  name = "my-package"
  version = "0.0.0"
  authors = ["..."]

Example vba-block.toml for a project (e.g. workbook, document, etc.):

  [project]
  name = "my-project"
  version = "0.0.0"
  authors = ["..."]"""


@dataclass(frozen=True)
class Metadata:
    authors: Tuple[str, ...] = ()
    publish: bool = False
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class Manifest:
    """Parsed package or project declaration; dir anchors its relative paths."""

    name: str
    version: Version
    metadata: Metadata
    is_project: bool
    src: Tuple[Source, ...]
    dependencies: Tuple[Dependency, ...]
    references: Tuple[Reference, ...]
    targets: Tuple[Target, ...]
    dir: str


def parse_manifest(value: Any, dir: str) -> Manifest:
    """Validate the shape of a parsed manifest document and build a Manifest.

    Only shape and required fields are checked; consistency across manifests
    is the resolver's and assembler's concern.

    Raises:
        ManifestInvalid: If required fields are missing or malformed.
    """
    manifest_ok(
        isinstance(value, dict) and (isinstance(value.get("package"), dict) or isinstance(value.get("project"), dict)),
        f"[package] or [project] is required, with name, version, and authors specified. {EXAMPLE}",
    )

    if isinstance(value.get("project"), dict):
        section = value["project"]
        is_project = True
        name = section.get("name")
        raw_version = section.get("version", "0.0.0")
        authors = section.get("authors", [])
        publish = False

        manifest_ok(name, f"[project] name is a required field. {EXAMPLE}")
    else:
        section = value["package"]
        is_project = False
        name = section.get("name")
        raw_version = section.get("version")
        authors = section.get("authors")
        publish = bool(section.get("publish", False))

        manifest_ok(name, f"[package] name is a required field. {EXAMPLE}")
        manifest_ok(raw_version, f"[package] version is a required field. {EXAMPLE}")
        manifest_ok(authors is not None, f"[package] authors is a required field. {EXAMPLE}")

    manifest_ok(isinstance(name, str), f"name must be a string. {EXAMPLE}")
    manifest_ok(
        isinstance(authors, list) and all(isinstance(author, str) for author in authors),
        "authors must be a list of strings.",
    )
    try:
        version = parse_version(raw_version)
    except ValueError as exc:
        raise ManifestInvalid(f"\"{raw_version}\" is not a valid version for \"{name}\".") from exc

    extra = {key: val for key, val in section.items() if key not in ("name", "version", "authors", "publish")}
    dir = os.path.normpath(dir)

    return Manifest(
        name=name,
        version=version,
        metadata=Metadata(authors=tuple(authors), publish=publish, extra=extra),
        is_project=is_project,
        src=tuple(parse_src(value.get("src", {}), dir)),
        dependencies=tuple(parse_dependencies(value.get("dependencies", {}), dir)),
        references=tuple(parse_references(value.get("references", {}))),
        targets=tuple(parse_targets(value.get("targets", {}), name, dir)),
        dir=dir,
    )


def manifest_path(dir: str) -> str:
    return os.path.join(dir, Constants.MANIFEST_FILE)


def load_manifest(dir: str) -> Manifest:
    """Read and parse dir/vba-block.toml.

    Raises:
        ManifestNotFound: If the file does not exist.
        ManifestInvalid: On TOML syntax errors or invalid content.
    """
    file = manifest_path(dir)
    if not os.path.isfile(file):
        raise ManifestNotFound(dir)

    logger.debug("Loading manifest %s", file)
    try:
        with open(file, "rb") as fh:
            parsed = tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ManifestInvalid(f"Syntax Error: {file}\n\n{exc}") from exc
    except OSError as exc:
        raise ManifestInvalid(f"Unable to read {file}: {exc}") from exc

    return parse_manifest(parsed, dir)


__all__ = [
    "Dependency",
    "GitDependency",
    "Manifest",
    "Metadata",
    "PathDependency",
    "Reference",
    "RegistryDependency",
    "Source",
    "Target",
    "TargetType",
    "load_manifest",
    "manifest_path",
    "parse_manifest",
]

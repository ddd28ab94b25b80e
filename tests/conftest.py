"""Shared fixtures: manifest builders and an in-memory registry."""

import asyncio
from typing import Dict, Optional

import pytest

from vbablocks.errors import SourceUnavailable
from vbablocks.manifest import parse_manifest
from vbablocks.sources import Candidate, PackageSource, SourceSet


def package_document(name, version, dependencies=None, src=None, references=None, project=False):
    """Build a parsed vba-block.toml document."""
    section = {"name": name, "version": version, "authors": ["Test <test@example.com>"]}
    document = {"project" if project else "package": section}
    if dependencies:
        document["dependencies"] = dependencies
    if src:
        document["src"] = src
    if references:
        document["references"] = references
    return document


class FakeRegistry(PackageSource):
    """Registry answering from a {name: {version: dependencies}} mapping."""

    def __init__(self, packages: Dict[str, Dict[str, dict]], delays: Optional[Dict[str, float]] = None,
                 unavailable=()):
        self.packages = packages
        self.delays = delays or {}
        self.unavailable = set(unavailable)
        self.calls = []

    async def lookup(self, dependency):
        self.calls.append(dependency.name)
        delay = self.delays.get(dependency.name)
        if delay:
            await asyncio.sleep(delay)
        if dependency.name in self.unavailable:
            raise SourceUnavailable("fake", f"{dependency.name} is unreachable")

        candidates = []
        for version, dependencies in self.packages.get(dependency.name, {}).items():
            manifest = parse_manifest(
                package_document(dependency.name, version, dependencies),
                f"/registry/{dependency.name}-{version}",
            )
            if dependency.range.match(manifest.version):
                candidates.append(Candidate(version=manifest.version, manifest=manifest, source=dependency))
        return candidates


@pytest.fixture
def make_manifest():
    """Factory for manifests anchored at a fake directory."""
    def _make(name="root", version="0.0.0", dependencies=None, dir="/projects/root", project=True, **kwargs):
        return parse_manifest(package_document(name, version, dependencies, project=project, **kwargs), dir)
    return _make


@pytest.fixture
def make_sources():
    """Factory for a SourceSet whose default registry is a FakeRegistry."""
    def _make(packages, **kwargs):
        registry = FakeRegistry(packages, **kwargs)
        return SourceSet(registries={"vba-blocks": registry}), registry
    return _make


@pytest.fixture
def write_package(tmp_path):
    """Write a vba-block.toml (and optional files) under tmp_path/<subdir>."""
    def _write(subdir, toml, files=None):
        directory = tmp_path / subdir
        directory.mkdir(parents=True, exist_ok=True)
        (directory / "vba-block.toml").write_text(toml, encoding="utf-8")
        for relative, content in (files or {}).items():
            target = directory / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")
        return directory
    return _write

"""Registry source: published versions from an HTTP package index.

The index serves one JSON document per package at ``<index_url>/<name>.json``::

    {
      "name": "dictionary",
      "versions": [
        {"version": "1.4.1", "yanked": false, "manifest": {"package": {...}, ...}}
      ]
    }

Each version's manifest is parsed as if it had been extracted to
``<cache_dir>/registry/<registry>/<name>-<version>``.
"""
from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import aiohttp

from ..common.http_client import get_json
from ..common.logging_utils import extra_context, is_debug_enabled, safe_url
from ..constants import Constants
from ..errors import ManifestInvalid, SourceUnavailable
from ..manifest import Manifest, RegistryDependency, parse_manifest
from ..versioning import Version, parse_version
from .base import Candidate, PackageSource

logger = logging.getLogger(__name__)


class RegistrySource(PackageSource):
    """Source backed by a package index; documents are memoized per instance."""

    def __init__(
        self,
        name: str = Constants.DEFAULT_REGISTRY,
        index_url: str = Constants.REGISTRY_URL_DEFAULT,
        cache_dir: str = Constants.CACHE_DIR,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[int] = None,
        retries: Optional[int] = None,
    ):
        """Initialize the registry source.

        Args:
            name: Registry name dependencies refer to via ``registry = "..."``.
            index_url: Base URL of the package index.
            cache_dir: Root under which package directories are anchored.
            session: Optional shared aiohttp session.
            timeout: Request timeout override in seconds.
            retries: Attempt count override.
        """
        self.name = name
        self.index_url = index_url.rstrip("/")
        self.cache_dir = cache_dir
        self._session = session
        self._timeout = timeout
        self._retries = retries
        self._packages: Dict[str, asyncio.Task] = {}

    def package_url(self, package: str) -> str:
        return f"{self.index_url}/{quote(package, safe='')}.json"

    def package_dir(self, package: str, version: str) -> str:
        return os.path.join(self.cache_dir, "registry", self.name, f"{package}-{version}")

    async def lookup(self, dependency: RegistryDependency) -> List[Candidate]:
        """Return every published, non-yanked version matching the dependency's range."""
        published = await self._load(dependency.name)
        return [
            Candidate(version=version, manifest=manifest, source=dependency)
            for version, manifest in published
            if dependency.range.match(version)
        ]

    async def _load(self, package: str) -> List[Tuple[Version, Manifest]]:
        task = self._packages.get(package)
        if task is None:
            task = asyncio.ensure_future(self._fetch_package(package))
            self._packages[package] = task
        return await task

    async def _fetch_package(self, package: str) -> List[Tuple[Version, Manifest]]:
        url = self.package_url(package)
        status, _, data = await get_json(
            url, session=self._session, retries=self._retries, timeout=self._timeout
        )

        if status == 404:
            logger.warning(
                "Package not found in registry",
                extra=extra_context(
                    event="http_response",
                    outcome="not_found",
                    status_code=status,
                    target=safe_url(url),
                    registry=self.name
                )
            )
            return []
        if status == 0 or status >= 500:
            raise SourceUnavailable(
                self.name, f"Failed to fetch \"{package}\" from {safe_url(url)} (status {status})."
            )
        if status != 200 or not isinstance(data, dict):
            raise SourceUnavailable(
                self.name, f"Unexpected response for \"{package}\" from {safe_url(url)} (status {status})."
            )

        return self._parse_package(package, data)

    def _parse_package(self, package: str, data: Dict[str, Any]) -> List[Tuple[Version, Manifest]]:
        published = []
        for entry in data.get("versions") or []:
            if not isinstance(entry, dict) or entry.get("yanked"):
                continue
            raw_version = entry.get("version")
            try:
                version = parse_version(raw_version)
            except ValueError:
                logger.debug("Skipping invalid version %r of %s", raw_version, package)
                continue

            try:
                manifest = parse_manifest(entry.get("manifest"), self.package_dir(package, str(version)))
            except ManifestInvalid:
                logger.error(
                    "Registry %s published an invalid manifest for %s@%s", self.name, package, version
                )
                raise
            if manifest.name != package or manifest.version != version:
                logger.warning(
                    "Skipping %s@%s: manifest declares %s@%s",
                    package, version, manifest.name, manifest.version,
                )
                continue

            published.append((version, manifest))

        if is_debug_enabled(logger):
            logger.debug(
                "Registry package loaded",
                extra=extra_context(
                    event="registry_package",
                    registry=self.name,
                    package=package,
                    candidate_count=len(published)
                )
            )
        return published

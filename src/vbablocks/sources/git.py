"""Git source: a single candidate read from a repository checkout.

Each (url, pin) pair gets its own working copy under ``<cache_dir>/git`` so
different pins of the same repository never share a checkout.
"""
from __future__ import annotations

import asyncio
import hashlib
import logging
import os
from typing import Dict, List, Tuple

from ..common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from ..constants import Constants
from ..errors import SourceUnavailable
from ..manifest import GitDependency, load_manifest
from .base import Candidate, PackageSource

logger = logging.getLogger(__name__)


class GitSource(PackageSource):
    """Source that clones or fetches repositories with the git executable."""

    def __init__(self, cache_dir: str = Constants.CACHE_DIR, executable: str = Constants.GIT_EXECUTABLE):
        self.cache_dir = cache_dir
        self.executable = executable
        self._locks: Dict[Tuple[str, ...], asyncio.Lock] = {}
        self._resolved: Dict[Tuple[str, ...], Candidate] = {}

    def checkout_dir(self, dependency: GitDependency) -> str:
        key = f"{dependency.url}#{dependency.ref or ''}".encode("utf-8")
        return os.path.join(self.cache_dir, "git", hashlib.sha1(key).hexdigest())

    async def lookup(self, dependency: GitDependency) -> List[Candidate]:
        """Return the one candidate at the dependency's branch, tag, or rev."""
        key = dependency.source_key
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            candidate = self._resolved.get(key)
            if candidate is None:
                directory = await self._checkout(dependency)
                manifest = await asyncio.to_thread(load_manifest, directory)
                candidate = Candidate(version=manifest.version, manifest=manifest, source=dependency)
                self._resolved[key] = candidate
        return [candidate]

    async def _checkout(self, dependency: GitDependency) -> str:
        directory = self.checkout_dir(dependency)
        if os.path.isdir(os.path.join(directory, ".git")):
            await self._run_git(["fetch", "--quiet", "--tags", "--force", "origin"], cwd=directory, url=dependency.url)
        else:
            os.makedirs(os.path.dirname(directory), exist_ok=True)
            await self._run_git(["clone", "--quiet", dependency.url, directory], cwd=None, url=dependency.url)

        if dependency.rev:
            target = dependency.rev
        elif dependency.tag:
            target = f"tags/{dependency.tag}"
        elif dependency.branch:
            target = f"origin/{dependency.branch}"
        else:
            target = "origin/HEAD"
        await self._run_git(["checkout", "--quiet", "--force", "--detach", target], cwd=directory, url=dependency.url)
        return directory

    async def _run_git(self, args: List[str], *, cwd, url: str) -> str:
        """Run git with args; raise SourceUnavailable on a non-zero exit."""
        safe_target = safe_url(url)
        with Timer() as t:
            try:
                process = await asyncio.create_subprocess_exec(
                    self.executable,
                    *args,
                    cwd=cwd,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as exc:
                raise SourceUnavailable(safe_target, f"Unable to run {self.executable}: {exc}") from exc
            stdout, stderr = await process.communicate()

        if is_debug_enabled(logger):
            logger.debug(
                "git command finished",
                extra=extra_context(
                    event="git_command",
                    action=args[0],
                    outcome="success" if process.returncode == 0 else "failure",
                    duration_ms=t.duration_ms(),
                    target=safe_target
                )
            )
        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise SourceUnavailable(safe_target, f"git {args[0]} failed: {message}")
        return stdout.decode("utf-8", errors="replace")

"""Dependency resolution engine.

Resolution is constraint satisfaction over a graph that is only discovered as
manifests are fetched, so it runs as a worklist over package names:

1. The frontier starts with the root manifest's requirements.
2. Each requirement's candidates are looked up. Lookups for everything queued
   run concurrently, but results are committed strictly in queue order.
3. An unassigned name gets the highest candidate satisfying every active
   requirement on it, and that candidate's own requirements are enqueued.
4. A requirement the current choice does not satisfy triggers a reassignment
   when another seen candidate satisfies all of them. Requirements contributed
   by the replaced choice are retracted, and packages left without requirers
   are dropped. Otherwise the name is recorded as conflicted.
5. When the frontier drains with a name still conflicted, a package whose
   requirement on it is incompatible moves to its next older candidate. The
   version it leaves is excluded for the rest of the pass and resolution
   continues. Once no requirer has a candidate left, every remaining
   conflict is raised together.

Package names, not manifest instances, are the graph's nodes: a name that is
assigned and consistent is never expanded again, which makes cycles safe.
"""
from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from functools import reduce
from typing import Deque, Dict, Iterable, List, Optional, Set, Tuple

from ..errors import Conflict, UnresolvableConflict
from ..manifest import Dependency, Manifest
from ..sources import Candidate, SourceSet
from ..versioning import Range
from .models import DependencyNode, Requirement, Solution

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Assignment:
    candidate: Candidate
    generation: int


class Resolver:
    """Single-use resolution pass; state is private to one resolve() call."""

    def __init__(self, sources: SourceSet):
        self.sources = sources
        self._root: Optional[Manifest] = None
        self._queue: Deque[Requirement] = deque()
        self._lookups: Dict[Dependency, asyncio.Future] = {}
        self._candidates: Dict[str, List[Candidate]] = {}
        self._requirements: Dict[str, List[Requirement]] = {}
        self._assigned: Dict[str, _Assignment] = {}
        self._order: List[str] = []
        self._conflicted: Set[str] = set()
        self._excluded: Dict[str, Set[Tuple]] = {}
        self._generation = 0

    async def resolve(self, root: Manifest) -> Solution:
        """Resolve root's dependency closure.

        Raises:
            UnresolvableConflict: If any package name cannot be satisfied.
            SourceUnavailable: Propagated from the first failing lookup.
        """
        if self._root is not None:
            raise RuntimeError("Resolver instances are single-use")
        self._root = root

        self._enqueue(root.dependencies, required_by=root.name, generation=0, chain=(root.name,))
        while True:
            while self._queue:
                await self._prefetch()
                requirement = self._queue.popleft()
                if self._is_stale(requirement):
                    logger.debug("Skipping stale requirement %s from %s", requirement.describe(), requirement.required_by)
                    continue
                await self._process(requirement)
            if not self._conflicted or not self._backtrack():
                break

        if self._conflicted:
            conflicts = [self._conflict(name) for name in self._order if name in self._conflicted]
            for conflict in conflicts:
                logger.debug("Unresolvable conflict for %s: %s", conflict.name, conflict.requirers)
            raise UnresolvableConflict(conflicts)

        nodes = tuple(
            DependencyNode(
                name=name,
                version=self._assigned[name].candidate.version,
                manifest=self._assigned[name].candidate.manifest,
                source=self._assigned[name].candidate.source,
            )
            for name in self._order
            if name in self._assigned
        )
        logger.debug("Resolved %s dependencies for %s", len(nodes), root.name)
        return Solution(root=root, dependencies=nodes)

    def _enqueue(self, dependencies: Iterable[Dependency], *, required_by: str, generation: int, chain) -> None:
        for dependency in dependencies:
            if dependency.name == self._root.name:
                logger.debug("Ignoring %s's dependency on the root package %s", required_by, dependency.name)
                continue
            self._queue.append(
                Requirement(dependency=dependency, required_by=required_by, generation=generation, chain=chain)
            )

    def _is_stale(self, requirement: Requirement) -> bool:
        if requirement.generation == 0:
            return False
        assignment = self._assigned.get(requirement.required_by)
        return assignment is None or assignment.generation != requirement.generation

    async def _prefetch(self) -> None:
        """Start lookups for every queued requirement and wait for them.

        Failures surface in queue order so the reported error does not depend
        on which lookup finished first.
        """
        pending = []
        for requirement in self._queue:
            if self._is_stale(requirement) or requirement.dependency in self._lookups:
                continue
            future = asyncio.ensure_future(self.sources.lookup(requirement.dependency))
            self._lookups[requirement.dependency] = future
            pending.append(future)
        if not pending:
            return

        results = await asyncio.gather(*pending, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result

    async def _process(self, requirement: Requirement) -> None:
        name = requirement.name
        candidates = await self._lookups[requirement.dependency]
        self._remember(name, candidates)

        if name not in self._order:
            self._order.append(name)
        self._requirements.setdefault(name, []).append(requirement)
        self._settle(name)

    def _remember(self, name: str, candidates: Iterable[Candidate]) -> None:
        seen = self._candidates.setdefault(name, [])
        known = {_identity(c) for c in seen}
        for candidate in candidates:
            key = _identity(candidate)
            if key not in known:
                known.add(key)
                seen.append(candidate)

    def _select(self, name: str, active: List[Requirement]) -> Optional[Candidate]:
        """Highest seen candidate satisfying every active requirement.

        Equal versions keep first-seen order; excluded versions are skipped.
        """
        excluded = self._excluded.get(name, ())
        satisfying = [
            candidate
            for candidate in self._candidates.get(name, [])
            if _identity(candidate) not in excluded
            and all(requirement.satisfied_by(candidate) for requirement in active)
        ]
        if not satisfying:
            return None
        return max(satisfying, key=lambda candidate: candidate.version)

    def _settle(self, name: str) -> None:
        """Bring the assignment for name in line with its active requirements."""
        active = self._requirements.get(name, [])
        current = self._assigned.get(name)

        if not active:
            self._conflicted.discard(name)
            if current is not None:
                logger.debug("Dropping %s: no remaining requirers", name)
                self._unassign(name)
            return

        if current is not None and all(r.satisfied_by(current.candidate) for r in active):
            self._conflicted.discard(name)
            return

        choice = self._select(name, active)
        if choice is None:
            if name not in self._conflicted:
                combined = reduce(Range.intersect, (r.dependency.range for r in active), Range.any())
                logger.debug("No candidate for %s satisfies %s", name, combined)
            self._conflicted.add(name)
            return
        self._conflicted.discard(name)

        if current is not None:
            logger.debug(
                "Backtracking %s: %s -> %s", name, current.candidate.version, choice.version
            )
            self._unassign(name)
            # Retracting the old choice may already have settled name (cycles)
            self._settle(name)
            return

        self._assign(name, choice)

    def _assign(self, name: str, candidate: Candidate) -> None:
        self._generation += 1
        self._assigned[name] = _Assignment(candidate=candidate, generation=self._generation)
        logger.debug("Assigned %s@%s", name, candidate.version)

        chain = self._requirements[name][0].chain + (name,)
        self._enqueue(
            candidate.manifest.dependencies,
            required_by=name,
            generation=self._generation,
            chain=chain,
        )

    def _unassign(self, name: str) -> None:
        assignment = self._assigned.pop(name)
        self._retract(name, assignment.generation)

    def _retract(self, required_by: str, generation: int) -> None:
        """Remove requirements from one assignment and re-settle what they touched."""
        affected = []
        for dep_name, requirements in list(self._requirements.items()):
            kept = [
                r for r in requirements
                if not (r.required_by == required_by and r.generation == generation)
            ]
            if len(kept) != len(requirements):
                self._requirements[dep_name] = kept
                affected.append(dep_name)

        for dep_name in affected:
            self._settle(dep_name)

    def _backtrack(self) -> bool:
        """Move one requirer of a conflicted name to an older candidate.

        Returns False when no requirer of any conflicted name has a candidate
        left to try.
        """
        for name in self._order:
            if name not in self._conflicted:
                continue
            active = self._requirements.get(name, [])
            # Requirers whose requirement alone blocks a candidate go first
            ordered = sorted(active, key=lambda r: not self._is_culprit(name, r, active))
            for requirement in ordered:
                requirer = requirement.required_by
                if requirement.generation == 0 or requirer not in self._assigned:
                    continue

                current = self._assigned[requirer].candidate
                excluded = self._excluded.setdefault(requirer, set())
                excluded.add(_identity(current))
                alternative = self._select(requirer, self._requirements.get(requirer, []))
                if alternative is None:
                    excluded.discard(_identity(current))
                    continue

                logger.debug(
                    "Backtracking %s: %s -> %s to satisfy %s",
                    requirer, current.version, alternative.version, name,
                )
                self._unassign(requirer)
                self._settle(requirer)
                return True
        return False

    def _is_culprit(self, name: str, requirement: Requirement, active: List[Requirement]) -> bool:
        others = [r for r in active if r is not requirement]
        return not others or self._select(name, others) is not None

    def _conflict(self, name: str) -> Conflict:
        return Conflict(
            name=name,
            requirers=tuple(
                (r.required_by, r.describe(), r.chain) for r in self._requirements.get(name, [])
            ),
        )


def _identity(candidate: Candidate) -> Tuple:
    return (candidate.source.source_key, candidate.version)


async def resolve(root: Manifest, sources: SourceSet) -> Solution:
    """Resolve root against sources; see Resolver."""
    return await Resolver(sources).resolve(root)

"""Version and range models built on semantic_version.

A bare version in a manifest (``"1.4.1"`` or ``"v1.4.1"``) is a caret range,
matching cargo's default. Ranges are conjunctions of npm-style specs, so the
intersection of two ranges is simply both spec lists combined.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import semantic_version
from semantic_version import Version

_LEADING_V = re.compile(r"(^|[\s^~=<>|])v(?=\d)")
_ANY = {"", "*", "x", "latest"}


def parse_version(text: str) -> Version:
    """Parse a version, accepting an optional leading "v".

    Raises:
        ValueError: If text is not a valid semantic version.
    """
    if not isinstance(text, str):
        raise ValueError(f"Invalid version {text!r}")
    return Version(_LEADING_V.sub(r"\1", text.strip()))


def _normalize_spec(text: str) -> str:
    spec = _LEADING_V.sub(r"\1", text.strip())
    if spec and spec[0].isdigit() and not any(op in spec for op in (" ", "|", " - ")):
        return f"^{spec}"
    return spec


@dataclass(frozen=True)
class Range:
    """Conjunction of npm-style version specs.

    An empty spec list matches every version.
    """

    specs: Tuple[str, ...] = ()
    _compiled: Tuple[semantic_version.NpmSpec, ...] = field(
        default=(), init=False, repr=False, compare=False
    )

    def __post_init__(self):
        object.__setattr__(
            self, "_compiled", tuple(semantic_version.NpmSpec(spec) for spec in self.specs)
        )

    @classmethod
    def parse(cls, text: Optional[str]) -> "Range":
        """Parse a manifest range; raises ValueError for invalid specs."""
        if text is None or text.strip().lower() in _ANY:
            return cls.any()
        return cls((_normalize_spec(text),))

    @classmethod
    def any(cls) -> "Range":
        return cls(())

    @classmethod
    def exact(cls, version: Version) -> "Range":
        return cls((f"={version}",))

    @property
    def is_any(self) -> bool:
        return not self.specs

    def match(self, version: Version) -> bool:
        """Return True when version satisfies every spec."""
        return all(spec.match(version) for spec in self._compiled)

    def intersect(self, other: "Range") -> "Range":
        """Range satisfied only by versions satisfying both self and other."""
        combined = list(self.specs)
        for spec in other.specs:
            if spec not in combined:
                combined.append(spec)
        return Range(tuple(combined))

    def filter(self, versions: Iterable[Version]) -> List[Version]:
        return [version for version in versions if self.match(version)]

    def highest(self, versions: Iterable[Version]) -> Optional[Version]:
        matching = self.filter(versions)
        return max(matching) if matching else None

    def __str__(self) -> str:
        return ", ".join(self.specs) if self.specs else "*"


__all__ = ["Range", "Version", "parse_version"]

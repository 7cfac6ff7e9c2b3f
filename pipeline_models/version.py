"""
Semantic version parsing for templates.

Versions are normalised at the boundary into integers so that every
comparison is numeric ("1.10.0" > "1.9.3"), never lexicographic.

Accepted inputs:
    1            -> (1,)          bare major
    "1"          -> (1,)
    "1.3"        -> (1, 3)
    "1.3.7"      -> (1, 3, 7)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from pipeline_models.errors import VersionError

# Fits a signed 32-bit integer column.
MAX_COMPONENT = 2**31 - 1

_COMPONENT_RE = re.compile(r"^\d+$")


@dataclass(frozen=True, order=True)
class SemVer:
    """A fully qualified ``major.minor.patch`` version."""

    major: int
    minor: int
    patch: int

    def __post_init__(self) -> None:
        for component in (self.major, self.minor, self.patch):
            _check_component(component, str(self))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @classmethod
    def parse(cls, value: Any) -> SemVer:
        """Parse a strict three-component version string."""
        parts = parse_version_prefix(value)
        if len(parts) != 3:
            raise VersionError(f"Expected major.minor.patch, got {value!r}")
        return cls(*parts)

    def matches(self, prefix: tuple[int, ...]) -> bool:
        """True when the leading components equal ``prefix``."""
        return (self.major, self.minor, self.patch)[: len(prefix)] == prefix


def _check_component(component: int, raw: Any) -> int:
    if component < 0 or component > MAX_COMPONENT:
        raise VersionError(f"Version component out of range in {raw!r}")
    return component


def parse_version_prefix(value: Any) -> tuple[int, ...]:
    """Parse a bare major, ``major.minor`` or ``major.minor.patch``.

    Raises VersionError for booleans, floats, negative or oversized numbers,
    empty or non-numeric components, and more than three components.
    """
    # bool is an int subclass; True is not a version
    if isinstance(value, bool):
        raise VersionError(f"Invalid version: {value!r}")

    if isinstance(value, int):
        return (_check_component(value, value),)

    if not isinstance(value, str):
        raise VersionError(f"Version must be a string or an integer, got {type(value).__name__}")

    parts = value.strip().split(".")
    if not 1 <= len(parts) <= 3:
        raise VersionError(f"Invalid version: {value!r}")

    components: list[int] = []
    for part in parts:
        if not _COMPONENT_RE.match(part):
            raise VersionError(f"Invalid version: {value!r}")
        components.append(_check_component(int(part), value))
    return tuple(components)


def parse_requested_version(value: Any) -> tuple[int, int]:
    """Normalise a requested template version to ``(major, minor)``.

    A missing minor defaults to 0. A supplied patch is dropped since patch
    numbers are always assigned on create.
    """
    parts = parse_version_prefix(value)
    major = parts[0]
    minor = parts[1] if len(parts) > 1 else 0
    return major, minor

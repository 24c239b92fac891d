"""Semantic versions and half-open version ranges.

Versions follow Semantic Versioning 2.0.0 precedence: ``major.minor.patch``
compared numerically, with a pre-release version ranking below the release it
precedes (``1.0.0-SNAPSHOT < 1.0.0``). Build metadata is accepted when parsing
but does not take part in ordering or equality.

A ``VersionRange`` is the interval ``[min, max)``. The upper bound also
excludes its own snapshot, so ``2.0.0-SNAPSHOT`` is not inside
``[1.0.0, 2.0.0)``.

References
----------
.. [SemVer] Preston-Werner, T. (2013). "Semantic Versioning 2.0.0."
   https://semver.org/
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass

from modresolve.exceptions import VersionParseError

SNAPSHOT = "SNAPSHOT"

_SEMVER_RE = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<pre>[0-9A-Za-z\-]+(?:\.[0-9A-Za-z\-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z\-]+(?:\.[0-9A-Za-z\-]+)*))?$"
)


def _prerelease_key(prerelease: str) -> tuple:
    """Sort key for a pre-release tag (SemVer section 11.4).

    A release (empty tag) outranks every pre-release. Numeric identifiers
    compare numerically and rank below alphanumeric ones; a shorter identifier
    list ranks below a longer one sharing the same prefix.
    """
    if not prerelease:
        return (1,)
    parts = []
    for ident in prerelease.split("."):
        if ident.isdigit():
            parts.append((0, int(ident), ""))
        else:
            parts.append((1, 0, ident))
    return (0, tuple(parts))


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """An immutable semantic version.

    Attributes:
        major: Incremented for breaking changes.
        minor: Incremented for backwards-compatible features.
        patch: Incremented for backwards-compatible fixes.
        prerelease: Dot-separated pre-release tag, empty for a release.
    """

    major: int
    minor: int
    patch: int
    prerelease: str = ""

    def __post_init__(self) -> None:
        if self.major < 0 or self.minor < 0 or self.patch < 0:
            raise VersionParseError(
                f"Illegal version {self.major}.{self.minor}.{self.patch} "
                "- all version parts must be non-negative"
            )

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a ``MAJOR.MINOR.PATCH[-pre][+build]`` string.

        Raises:
            VersionParseError: If *text* is not a semantic version.
        """
        m = _SEMVER_RE.match(text.strip())
        if not m:
            raise VersionParseError(
                f"Invalid version {text!r} - must be of the form MAJOR.minor.patch"
            )
        return cls(
            int(m.group("major")),
            int(m.group("minor")),
            int(m.group("patch")),
            m.group("pre") or "",
        )

    @property
    def is_snapshot(self) -> bool:
        """Whether this is a work-in-progress (pre-release) version."""
        return bool(self.prerelease)

    def core(self) -> Version:
        return Version(self.major, self.minor, self.patch)

    def snapshot(self) -> Version:
        return Version(self.major, self.minor, self.patch, SNAPSHOT)

    def next_major(self) -> Version:
        return Version(self.major + 1, 0, 0)

    def next_minor(self) -> Version:
        return Version(self.major, self.minor + 1, 0)

    def next_patch(self) -> Version:
        return Version(self.major, self.minor, self.patch + 1)

    def _key(self) -> tuple:
        return (self.major, self.minor, self.patch, _prerelease_key(self.prerelease))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        return text

    def __repr__(self) -> str:
        return f"Version({str(self)!r})"


def as_version(value: Version | str) -> Version:
    """Coerce a version string to a ``Version``; pass versions through."""
    if isinstance(value, Version):
        return value
    return Version.parse(value)


# ---------------------------------------------------------------------------
# VersionRange
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VersionRange:
    """The half-open interval ``[min_version, max_version)``.

    An inverted or zero-width range is representable; it contains nothing and
    reports ``is_empty``. Callers decide whether that is an error.
    """

    min_version: Version
    max_version: Version

    @classmethod
    def of(cls, min_version: Version | str, max_version: Version | str) -> VersionRange:
        return cls(as_version(min_version), as_version(max_version))

    @property
    def is_empty(self) -> bool:
        return not self.min_version < self._exclusive_bound()

    def _exclusive_bound(self) -> Version:
        if self.max_version.is_snapshot:
            return self.max_version
        return self.max_version.snapshot()

    def contains(self, version: Version) -> bool:
        return self.min_version <= version < self._exclusive_bound()

    def __contains__(self, version: object) -> bool:
        return isinstance(version, Version) and self.contains(version)

    def intersect(self, other: VersionRange) -> VersionRange:
        """Return the overlap of two ranges (possibly empty)."""
        return VersionRange(
            max(self.min_version, other.min_version),
            min(self.max_version, other.max_version),
        )

    def __str__(self) -> str:
        return f"[{self.min_version},{self.max_version})"

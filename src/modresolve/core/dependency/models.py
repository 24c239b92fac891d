"""Modules and their declared dependency edges.

A ``Module`` is one version of a named unit; its ``DependencyInfo`` entries
are directed edges "this module at this version needs ``id`` in
``[min_version, max_version)``".
"""

from __future__ import annotations

from dataclasses import dataclass, field

from modresolve.core.dependency.versions import Version, VersionRange, as_version

ModuleName = str

DEFAULT_MIN_VERSION = Version(1, 0, 0)


# ---------------------------------------------------------------------------
# DependencyInfo: an edge in the module graph
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DependencyInfo:
    """A dependency on another module, valid over a half-open version range.

    If ``max_version`` is not given the range is a "compatible version" range:
    up to the next minor version when ``min_version`` is a 0.x release,
    otherwise up to the next major version.

    An optional dependency does not need to be present for the declaring
    module to be usable. If it is present it must still fall within the range.

    Attributes:
        id: Name of the required module.
        min_version: Lowest accepted version (inclusive).
        max_version: First unaccepted version (exclusive), or None for the
            compatible-version default.
        optional: Whether the dependency may be left out.
    """

    id: ModuleName
    min_version: Version = DEFAULT_MIN_VERSION
    max_version: Version | None = None
    optional: bool = False

    @classmethod
    def of(
        cls,
        id: ModuleName,
        min_version: Version | str = DEFAULT_MIN_VERSION,
        max_version: Version | str | None = None,
        optional: bool = False,
    ) -> DependencyInfo:
        """Build a dependency, accepting version strings."""
        return cls(
            id=id,
            min_version=as_version(min_version),
            max_version=None if max_version is None else as_version(max_version),
            optional=optional,
        )

    @property
    def effective_max_version(self) -> Version:
        if self.max_version is not None:
            return self.max_version
        if self.min_version.major == 0:
            return self.min_version.core().next_minor()
        return self.min_version.core().next_major()

    @property
    def version_range(self) -> VersionRange:
        return VersionRange(self.min_version, self.effective_max_version)

    def accepts(self, version: Version) -> bool:
        return self.version_range.contains(version)

    def __str__(self) -> str:
        suffix = " (optional)" if self.optional else ""
        return f"{self.id} {self.version_range}{suffix}"


# ---------------------------------------------------------------------------
# Module: a vertex in the module graph
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Module:
    """A specific version of a module together with its dependencies.

    Two modules are equal when their ``id`` and ``version`` match; the
    dependency list does not take part in equality or hashing.
    """

    id: ModuleName
    version: Version
    dependencies: tuple[DependencyInfo, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        # Accept any iterable of dependencies but store an immutable tuple.
        if not isinstance(self.dependencies, tuple):
            object.__setattr__(self, "dependencies", tuple(self.dependencies))

    @classmethod
    def of(
        cls,
        id: ModuleName,
        version: Version | str,
        dependencies: list[DependencyInfo] | tuple[DependencyInfo, ...] = (),
    ) -> Module:
        return cls(id=id, version=as_version(version), dependencies=tuple(dependencies))

    def dependency_info(self, name: ModuleName) -> DependencyInfo | None:
        """Return the declared dependency on *name*, or None."""
        for dep in self.dependencies:
            if dep.id == name:
                return dep
        return None

    def __str__(self) -> str:
        return f"{self.id}@{self.version}"

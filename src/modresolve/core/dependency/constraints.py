"""Per-level version constraints.

While resolving one level of the module graph, every dependency that the
level's active modules declare on the same target is folded into a single
``Constraint``: the intersection of the declared ranges, optional only if every
declarer considers the dependency optional.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from modresolve.core.dependency.models import DependencyInfo, Module, ModuleName
from modresolve.core.dependency.versions import Version, VersionRange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Constraint:
    """The merged requirement on one target module during one search level.

    Attributes:
        min_version: Highest of the declared minimums (inclusive).
        max_version: Lowest of the declared maximums (exclusive).
        optional: True only if every contributing dependency is optional.
    """

    min_version: Version
    max_version: Version
    optional: bool = False

    @classmethod
    def from_dependency(cls, dependency: DependencyInfo) -> Constraint:
        rng = dependency.version_range
        return cls(rng.min_version, rng.max_version, dependency.optional)

    @property
    def version_range(self) -> VersionRange:
        return VersionRange(self.min_version, self.max_version)

    @property
    def is_empty(self) -> bool:
        return self.version_range.is_empty

    def contains(self, version: Version) -> bool:
        return self.version_range.contains(version)

    def merge(self, dependency: DependencyInfo) -> Constraint:
        """Intersect this constraint with another declaration on the same target."""
        merged = self.version_range.intersect(dependency.version_range)
        return Constraint(
            merged.min_version,
            merged.max_version,
            self.optional and dependency.optional,
        )

    def __str__(self) -> str:
        suffix = " (optional)" if self.optional else ""
        return f"{self.version_range}{suffix}"


def constraints_for_level(
    active: Iterable[Module],
    fixed: Mapping[ModuleName, Module],
) -> dict[ModuleName, Constraint] | None:
    """Build the constraint map for one level of the search.

    Targets already in *fixed* are validated instead of constrained. The map
    preserves dependency discovery order: active modules in order, each
    module's dependencies in declaration order.

    Args:
        active: The modules selected at this level.
        fixed: Every module selected so far, including *active*.

    Returns:
        Mapping of target name to merged ``Constraint``, or None if the level
        is infeasible: a declared range is empty, a fixed module falls outside
        a declared range, or two mandatory ranges on the same target do not
        overlap.
    """
    constraints: dict[ModuleName, Constraint] = {}
    for module in active:
        for dep in module.dependencies:
            if dep.version_range.is_empty:
                logger.debug("%s declares an empty range for %s", module, dep)
                return None

            selected = fixed.get(dep.id)
            if selected is not None:
                if not dep.accepts(selected.version):
                    logger.debug(
                        "%s requires %s but %s is already selected",
                        module, dep, selected,
                    )
                    return None
                continue

            existing = constraints.get(dep.id)
            merged = (
                Constraint.from_dependency(dep)
                if existing is None
                else existing.merge(dep)
            )
            if merged.is_empty and not merged.optional:
                logger.debug(
                    "%s requires %s, which does not overlap %s",
                    module, dep, existing,
                )
                return None
            constraints[dep.id] = merged
    return constraints

"""Backtracking dependency resolution for versioned modules.

Given root module names, finds one version of every reachable module such
that every declared dependency range is satisfied, preferring the newest
versions and, among the roots, the order in which they were requested: if
using the newest version of the first root rules out the newest version of
the second, the second is the one downgraded.

Algorithm
---------
1. Populate the candidate pool by walking the registry from the roots.
2. Turn the combination lock over the root versions. For each root
   selection, resolve the graph level by level:

   - merge the dependency ranges declared by the level's modules into one
     constraint per target, validating targets already selected;
   - turn a combination lock over the satisfying versions of each target,
     pruning selections that clash with what is already selected;
   - recurse into the dependencies of the selection. A failure deeper down
     moves the lock on; an exhausted lock fails the level.

3. The first complete assignment wins. When every root combination fails the
   resolution reports ``success=False``.

Selected modules are kept in a ``ChainMap``: each level pushes a frame over
its parent, and a failed branch is discarded without touching the parent.
"""

from __future__ import annotations

import enum
import logging
from collections import ChainMap
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from modresolve.core.dependency.constraints import Constraint, constraints_for_level
from modresolve.core.dependency.graph import ModuleVersionPool, populate_domains
from modresolve.core.dependency.lock import iter_combinations
from modresolve.core.dependency.models import Module, ModuleName
from modresolve.core.dependency.versions import Version, VersionRange, as_version
from modresolve.exceptions import ResolutionError

if TYPE_CHECKING:
    from modresolve.registry.base import ModuleRegistry

logger = logging.getLogger(__name__)

SelectedModules = ChainMap  # ChainMap[ModuleName, Module]


class OptionalResolutionStrategy(enum.Enum):
    """How dependencies that every declarer marks optional are treated."""

    #: Optional dependencies are left out unless something requires them.
    INCLUDE_IF_REQUIRED = "include-if-required"
    #: Optional dependencies are included when a compatible version exists.
    INCLUDE_IF_AVAILABLE = "include-if-available"
    #: Optional dependencies are treated exactly like mandatory ones.
    FORCE_INCLUDE = "force-include"

    @property
    def is_desired(self) -> bool:
        return self is not OptionalResolutionStrategy.INCLUDE_IF_REQUIRED

    @property
    def is_required(self) -> bool:
        return self is OptionalResolutionStrategy.FORCE_INCLUDE


# ---------------------------------------------------------------------------
# ResolutionResult
# ---------------------------------------------------------------------------


@dataclass
class ResolutionResult:
    """Outcome of a resolution.

    A successful result holds exactly one version of every module reachable
    from the roots under the accepted selection.

    Attributes:
        success: True if a compatible set of modules was found.
        modules: The resolved modules. Empty if resolution failed.
        conflicts: Human-readable reasons for a failure. Empty on success.
    """

    success: bool
    modules: frozenset[Module] = field(default_factory=frozenset)
    conflicts: list[str] = field(default_factory=list)

    @property
    def installed(self) -> dict[ModuleName, Version]:
        """Mapping of module name to resolved version."""
        return {m.id: m.version for m in sorted(self.modules, key=lambda m: m.id)}

    def module(self, name: ModuleName) -> Module | None:
        for module in self.modules:
            if module.id == name:
                return module
        return None

    def raise_for_failure(self) -> None:
        """Raise ``ResolutionError`` if the resolution did not succeed."""
        if not self.success:
            reasons = "; ".join(self.conflicts) or "no compatible module set"
            raise ResolutionError(
                f"Dependency resolution failed: {reasons}", self.conflicts
            )


# ---------------------------------------------------------------------------
# Level-by-level backtracking search
# ---------------------------------------------------------------------------


class _LevelSearch:
    """Recursive search over one resolution call's candidate pool."""

    def __init__(
        self, pool: ModuleVersionPool, strategy: OptionalResolutionStrategy
    ) -> None:
        self._pool = pool
        self._strategy = strategy

    def resolve_level(
        self, active: list[Module], fixed: SelectedModules
    ) -> SelectedModules | None:
        """Resolve the dependencies of *active*, given every module in *fixed*.

        Returns:
            The complete selection on success, or None if no selection for
            this level (and everything below it) is compatible with *fixed*.
        """
        constraints = constraints_for_level(active, fixed)
        if constraints is None:
            return None
        if not constraints:
            return fixed

        names: list[ModuleName] = []
        dials: list[list[Module | None]] = []
        for name, constraint in constraints.items():
            dial = self._dial(name, constraint)
            if dial is None:
                logger.debug("Leaving out optional dependency %s", name)
                continue
            if not dial:
                logger.debug("No version of %s satisfies %s", name, constraint)
                return None
            names.append(name)
            dials.append(dial)

        for positions in iter_combinations(dials):
            candidate = {
                name: dial[pos]
                for name, dial, pos in zip(names, dials, positions)
                if dial[pos] is not None
            }
            if not _consistent(candidate, fixed):
                logger.debug("Pruned %s", _describe(candidate))
                continue
            logger.debug("Trying %s", _describe(candidate))
            outcome = self.resolve_level(list(candidate.values()), fixed.new_child(candidate))
            if outcome is not None:
                return outcome
        return None

    def _dial(self, name: ModuleName, constraint: Constraint) -> list[Module | None] | None:
        """Candidate options for *name*, newest first; None to skip it.

        ``None`` inside the list stands for "leave the module out".
        """
        versions: list[Module | None] = [
            m for m in self._pool.get(name, ()) if constraint.contains(m.version)
        ]
        if not constraint.optional or self._strategy.is_required:
            return versions
        if self._strategy.is_desired:
            return versions + [None]
        return None


def _consistent(candidate: Mapping[ModuleName, Module], fixed: Mapping[ModuleName, Module]) -> bool:
    """Check declared ranges between a new selection and what is already fixed.

    Every candidate's dependencies must accept any target selected so far or
    alongside it, and every fixed module's dependencies must accept the
    candidates.
    """
    for module in candidate.values():
        for dep in module.dependencies:
            target = candidate.get(dep.id) or fixed.get(dep.id)
            if target is not None and not dep.accepts(target.version):
                return False
    for module in fixed.values():
        for dep in module.dependencies:
            target = candidate.get(dep.id)
            if target is not None and not dep.accepts(target.version):
                return False
    return True


def _describe(selection: Mapping[ModuleName, Module]) -> str:
    return ", ".join(str(m) for m in selection.values()) or "<nothing>"


# ---------------------------------------------------------------------------
# DependencyResolver: the public driver
# ---------------------------------------------------------------------------


class DependencyResolver:
    """Determines a working set of modules for a set of desired root modules.

    Where multiple versions are compatible the latest are chosen. The roots
    take precedence in the order requested.

    Each call to ``resolve`` builds its own pool and selection state, so one
    resolver may be shared between threads as long as the registry is safe
    to read concurrently.

    Args:
        registry: The registry to resolve modules from.
        optional_strategy: How to treat dependencies that are optional for
            every module declaring them.
    """

    def __init__(
        self,
        registry: ModuleRegistry,
        optional_strategy: OptionalResolutionStrategy = OptionalResolutionStrategy.INCLUDE_IF_REQUIRED,
    ) -> None:
        self._registry = registry
        self._optional_strategy = optional_strategy

    @property
    def optional_strategy(self) -> OptionalResolutionStrategy:
        return self._optional_strategy

    def resolve(self, root_names: ModuleName | Iterable[ModuleName]) -> ResolutionResult:
        """Resolve the given root modules, any version of each.

        Args:
            root_names: A module name or an ordered iterable of names. Earlier
                names keep their newest version in preference to later ones.
        """
        if isinstance(root_names, str):
            root_names = [root_names]
        return self.builder().require_all(root_names).build()

    def builder(self) -> ResolutionBuilder:
        """Return a builder for resolutions with version-restricted roots."""
        return ResolutionBuilder(self)

    def _resolve(self, requirements: Mapping[ModuleName, VersionRange | None]) -> ResolutionResult:
        roots = list(requirements)
        pool = populate_domains(self._registry, roots)

        root_dials: list[list[Module]] = []
        for name in roots:
            wanted = requirements[name]
            versions = [
                m for m in pool.get(name, ()) if wanted is None or wanted.contains(m.version)
            ]
            if not versions:
                logger.info("Root module %s has no usable version", name)
                return self._failure(requirements, pool)
            root_dials.append(versions)

        search = _LevelSearch(pool, self._optional_strategy)
        for positions in iter_combinations(root_dials):
            selected = {name: dial[pos] for name, dial, pos in zip(roots, root_dials, positions)}
            logger.debug("Trying roots %s", _describe(selected))
            outcome = search.resolve_level(list(selected.values()), ChainMap(selected))
            if outcome is not None:
                modules = frozenset(outcome.values())
                logger.info(
                    "Resolved %d modules for %s", len(modules), ", ".join(roots)
                )
                return ResolutionResult(success=True, modules=modules)

        logger.info("No compatible module set for %s", ", ".join(roots))
        return self._failure(requirements, pool)

    def _failure(
        self,
        requirements: Mapping[ModuleName, VersionRange | None],
        pool: ModuleVersionPool,
    ) -> ResolutionResult:
        return ResolutionResult(
            success=False, conflicts=_diagnose_failure(requirements, pool)
        )


def _diagnose_failure(
    requirements: Mapping[ModuleName, VersionRange | None],
    pool: ModuleVersionPool,
) -> list[str]:
    """Generate human-readable descriptions of why resolution failed."""
    msgs: list[str] = []

    for name, wanted in requirements.items():
        versions = pool.get(name, [])
        if not versions:
            msgs.append(f"Module {name!r} is not available in the registry")
        elif wanted is not None and not any(wanted.contains(m.version) for m in versions):
            available = ", ".join(str(m.version) for m in versions)
            msgs.append(
                f"No version of {name!r} satisfies {wanted} (available: {available})"
            )

    # Mandatory dependencies that no known version can satisfy.
    for modules in pool.values():
        for module in modules:
            for dep in module.dependencies:
                if dep.optional:
                    continue
                if not any(dep.accepts(m.version) for m in pool.get(dep.id, [])):
                    msgs.append(
                        f"{module} requires {dep.id} {dep.version_range} "
                        "but no satisfying version exists"
                    )

    if not msgs:
        msgs.append(
            "Resolution failed: no combination of module versions satisfies "
            "every dependency"
        )
    return msgs


# ---------------------------------------------------------------------------
# ResolutionBuilder
# ---------------------------------------------------------------------------


class ResolutionBuilder:
    """Collects root requirements and performs the resolution.

    A later requirement on a name replaces the earlier one but keeps the
    name's original position in the priority order.
    """

    def __init__(self, resolver: DependencyResolver) -> None:
        self._resolver = resolver
        self._requirements: dict[ModuleName, VersionRange | None] = {}

    def require(self, name: ModuleName) -> ResolutionBuilder:
        """Require *name* at any version; later versions are preferred."""
        self._requirements[name] = None
        return self

    def require_version(self, name: ModuleName, version: Version | str) -> ResolutionBuilder:
        """Require exactly *version* of *name*."""
        version = as_version(version)
        self._requirements[name] = VersionRange(version, version.next_patch())
        return self

    def require_version_range(self, name: ModuleName, version_range: VersionRange) -> ResolutionBuilder:
        """Require *name* at a version inside *version_range*."""
        self._requirements[name] = version_range
        return self

    def require_all(self, names: Iterable[ModuleName]) -> ResolutionBuilder:
        for name in names:
            self.require(name)
        return self

    def build(self) -> ResolutionResult:
        """Perform the resolution."""
        return self._resolver._resolve(dict(self._requirements))


def resolve(
    registry: ModuleRegistry,
    root_names: Iterable[ModuleName],
    include_optional: bool = False,
) -> ResolutionResult:
    """Resolve *root_names* against *registry*.

    With ``include_optional`` every optional dependency is treated as
    mandatory; otherwise optional dependencies are left out unless required.
    """
    strategy = (
        OptionalResolutionStrategy.FORCE_INCLUDE
        if include_optional
        else OptionalResolutionStrategy.INCLUDE_IF_REQUIRED
    )
    return DependencyResolver(registry, strategy).resolve(root_names)

"""Property-based tests for resolution invariants.

Verifies the guarantees of DependencyResolver over randomly generated
registries:
- Validity: every resolved module's declared ranges accept the resolved targets
- Reachability: every resolved module is reachable from the roots
- Determinism: same registry and roots -> same resolution
- Completeness: resolution succeeds iff some compatible assignment exists
- Preference: the roots get the newest versions any compatible assignment allows,
  earlier roots first
- Isolation: a failed branch leaves the caller's selection untouched
"""
from __future__ import annotations

import itertools
from collections import ChainMap

from hypothesis import given, settings
from hypothesis import strategies as st

from modresolve.core.dependency import (
    DependencyInfo,
    DependencyResolver,
    Module,
    OptionalResolutionStrategy,
    ResolutionResult,
    Version,
)
from modresolve.core.dependency.graph import populate_domains
from modresolve.core.dependency.resolver import _LevelSearch
from modresolve.registry import TableModuleRegistry


# ---------------------------------------------------------------------------
# Strategies for generating random registries
# ---------------------------------------------------------------------------

NAMES = ["alpha", "beta", "gamma", "delta"]

version_strings = st.sampled_from(["1.0.0", "1.1.0", "2.0.0", "3.0.0"])

bounds = st.lists(
    st.sampled_from(["1.0.0", "1.1.0", "2.0.0", "3.0.0", "4.0.0"]),
    min_size=2,
    max_size=2,
    unique=True,
).map(lambda pair: sorted(pair, key=Version.parse))

strategies = st.sampled_from(list(OptionalResolutionStrategy))


@st.composite
def dependency_infos(draw: st.DrawFn, allow_optional: bool) -> list[DependencyInfo]:
    targets = draw(st.lists(st.sampled_from(NAMES), max_size=2, unique=True))
    deps = []
    for target in targets:
        low, high = draw(bounds)
        optional = draw(st.booleans()) if allow_optional else False
        deps.append(DependencyInfo.of(target, low, high, optional))
    return deps


@st.composite
def registries(draw: st.DrawFn, allow_optional: bool = True) -> TableModuleRegistry:
    """Generate a registry with 0-3 versions of each of four module names."""
    registry = TableModuleRegistry()
    for name in NAMES:
        versions = draw(st.lists(version_strings, max_size=3, unique=True))
        for version in versions:
            deps = draw(dependency_infos(allow_optional))
            registry.add(Module.of(name, version, deps))
    return registry


roots = st.lists(st.sampled_from(NAMES), min_size=1, max_size=2, unique=True)


# ---------------------------------------------------------------------------
# Brute-force oracle
# ---------------------------------------------------------------------------


def _is_closed(module: Module, chosen: dict[str, Module]) -> bool:
    for dep in module.dependencies:
        target = chosen.get(dep.id)
        if target is None:
            if not dep.optional:
                return False
        elif not dep.accepts(target.version):
            return False
    return True


def _compatible_assignments(registry: TableModuleRegistry):
    """Yield every assignment of at most one version per name that is closed."""
    options = [[None, *registry.get_module_versions(name)] for name in NAMES]
    for combo in itertools.product(*options):
        chosen = {m.id: m for m in combo if m is not None}
        if all(_is_closed(m, chosen) for m in chosen.values()):
            yield chosen


def _best_root_versions(
    registry: TableModuleRegistry, root_names: list[str]
) -> tuple[Version, ...] | None:
    best = None
    for chosen in _compatible_assignments(registry):
        if not all(name in chosen for name in root_names):
            continue
        key = tuple(chosen[name].version for name in root_names)
        if best is None or key > best:
            best = key
    return best


def _reached(result: ResolutionResult, root_names: list[str]) -> set[str]:
    by_name = {m.id: m for m in result.modules}
    seen: set[str] = set()
    stack = [name for name in root_names if name in by_name]
    while stack:
        name = stack.pop()
        if name in seen:
            continue
        seen.add(name)
        stack.extend(d.id for d in by_name[name].dependencies if d.id in by_name)
    return seen


# ---------------------------------------------------------------------------
# Validity and reachability
# ---------------------------------------------------------------------------


class TestValidity:
    """A successful resolution satisfies every declared range."""

    @given(registry=registries(), root_names=roots, strategy=strategies)
    @settings(max_examples=100, deadline=None)
    def test_declared_ranges_accept_resolved_targets(
        self,
        registry: TableModuleRegistry,
        root_names: list[str],
        strategy: OptionalResolutionStrategy,
    ) -> None:
        result = DependencyResolver(registry, strategy).resolve(root_names)
        if not result.success:
            return
        chosen = {m.id: m for m in result.modules}
        assert len(chosen) == len(result.modules)
        for name in root_names:
            assert name in chosen
        for module in result.modules:
            assert module in registry
            for dep in module.dependencies:
                target = chosen.get(dep.id)
                if target is None:
                    assert dep.optional and not strategy.is_required, (
                        f"{module} requires {dep} but it was not resolved"
                    )
                else:
                    assert dep.accepts(target.version), (
                        f"{module} requires {dep} but got {target}"
                    )

    @given(registry=registries(), root_names=roots, strategy=strategies)
    @settings(max_examples=100, deadline=None)
    def test_every_module_reachable_from_roots(
        self,
        registry: TableModuleRegistry,
        root_names: list[str],
        strategy: OptionalResolutionStrategy,
    ) -> None:
        result = DependencyResolver(registry, strategy).resolve(root_names)
        if result.success:
            assert _reached(result, root_names) == set(result.installed)

    @given(registry=registries(), root_names=roots)
    @settings(max_examples=50, deadline=None)
    def test_failure_always_explained(
        self, registry: TableModuleRegistry, root_names: list[str]
    ) -> None:
        result = DependencyResolver(registry).resolve(root_names)
        if result.success:
            assert result.conflicts == []
        else:
            assert result.modules == frozenset()
            assert result.conflicts


# ---------------------------------------------------------------------------
# Determinism
# ---------------------------------------------------------------------------


class TestDeterminism:
    """Same registry and roots -> same resolution."""

    @given(registry=registries(), root_names=roots, strategy=strategies)
    @settings(max_examples=50, deadline=None)
    def test_repeatable(
        self,
        registry: TableModuleRegistry,
        root_names: list[str],
        strategy: OptionalResolutionStrategy,
    ) -> None:
        resolver = DependencyResolver(registry, strategy)
        first = resolver.resolve(root_names)
        second = resolver.resolve(root_names)
        assert first.success == second.success
        assert first.modules == second.modules

    @given(registry=registries(allow_optional=False), root_names=roots)
    @settings(max_examples=50, deadline=None)
    def test_resolution_is_a_fixed_point(
        self, registry: TableModuleRegistry, root_names: list[str]
    ) -> None:
        """Pinning every resolved module reproduces the same resolution."""
        resolver = DependencyResolver(registry)
        first = resolver.resolve(root_names)
        if not first.success:
            return
        builder = resolver.builder()
        for name, version in first.installed.items():
            builder.require_version(name, version)
        second = builder.build()
        assert second.success
        assert second.modules == first.modules

    @given(registry=registries(allow_optional=False), root_names=roots)
    @settings(max_examples=50, deadline=None)
    def test_resolved_ids_as_roots_keep_root_versions(
        self, registry: TableModuleRegistry, root_names: list[str]
    ) -> None:
        """Re-resolving with every resolved id as a root, requested roots first."""
        resolver = DependencyResolver(registry)
        first = resolver.resolve(root_names)
        if not first.success:
            return
        again = root_names + [n for n in first.installed if n not in root_names]
        second = resolver.resolve(again)
        assert second.success
        for name in root_names:
            assert second.installed[name] == first.installed[name]


# ---------------------------------------------------------------------------
# Completeness and preference (mandatory dependencies only)
# ---------------------------------------------------------------------------


class TestAgainstBruteForce:
    """Compare against exhaustive search over all assignments."""

    @given(registry=registries(allow_optional=False), root_names=roots)
    @settings(max_examples=100, deadline=None)
    def test_succeeds_iff_compatible_assignment_exists(
        self, registry: TableModuleRegistry, root_names: list[str]
    ) -> None:
        result = DependencyResolver(registry).resolve(root_names)
        expected = _best_root_versions(registry, root_names)
        assert result.success == (expected is not None)

    @given(registry=registries(allow_optional=False), root_names=roots)
    @settings(max_examples=100, deadline=None)
    def test_roots_get_newest_compatible_versions_in_order(
        self, registry: TableModuleRegistry, root_names: list[str]
    ) -> None:
        result = DependencyResolver(registry).resolve(root_names)
        expected = _best_root_versions(registry, root_names)
        if expected is None:
            return
        resolved = tuple(result.installed[name] for name in root_names)
        assert resolved == expected


# ---------------------------------------------------------------------------
# Isolation of failed branches
# ---------------------------------------------------------------------------


class TestBranchIsolation:
    """Resolving a level never modifies the caller's selection."""

    @given(
        registry=registries(),
        root=st.sampled_from(NAMES),
        strategy=strategies,
    )
    @settings(max_examples=50, deadline=None)
    def test_fixed_selection_unchanged(
        self,
        registry: TableModuleRegistry,
        root: str,
        strategy: OptionalResolutionStrategy,
    ) -> None:
        pool = populate_domains(registry, [root])
        search = _LevelSearch(pool, strategy)
        for module in pool[root]:
            fixed = ChainMap({root: module})
            search.resolve_level([module], fixed)
            assert dict(fixed) == {root: module}
            assert len(fixed.maps) == 1

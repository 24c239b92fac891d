"""Module versions, dependency constraints and backtracking resolution.

All public names are re-exported here so callers can write
``from modresolve.core.dependency import X``.

Model
-----
A resolution problem is a registry of modules and a list of root names:

- every **Module** is a ``(name, version, dependencies)`` triple;
- every **DependencyInfo** names a target and a half-open range
  ``[min, max)``, and may be optional;
- a **solution** picks one version per reachable name such that every
  dependency of every picked module accepts the picked target version.

Among solutions the resolver prefers newer versions, roots first and in the
order requested.
"""

from modresolve.core.dependency.constraints import (
    Constraint,
    constraints_for_level,
)
from modresolve.core.dependency.graph import (
    ModuleVersionPool,
    populate_domains,
)
from modresolve.core.dependency.lock import (
    iter_combinations,
    next_combination,
)
from modresolve.core.dependency.models import (
    DependencyInfo,
    Module,
    ModuleName,
)
from modresolve.core.dependency.resolver import (
    DependencyResolver,
    OptionalResolutionStrategy,
    ResolutionBuilder,
    ResolutionResult,
    resolve,
)
from modresolve.core.dependency.versions import (
    Version,
    VersionRange,
)

__all__ = [
    "Constraint",
    "DependencyInfo",
    "DependencyResolver",
    "Module",
    "ModuleName",
    "ModuleVersionPool",
    "OptionalResolutionStrategy",
    "ResolutionBuilder",
    "ResolutionResult",
    "Version",
    "VersionRange",
    "constraints_for_level",
    "iter_combinations",
    "next_combination",
    "populate_domains",
    "resolve",
]

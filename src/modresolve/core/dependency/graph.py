"""Domain population: the candidate versions of every reachable module.

Starting from the root names, a breadth-first walk over dependency edges
collects *all* known versions of every module that any version of a reached
module mentions. No version constraints are applied here, so the pool is a
superset of what the search can pick.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from typing import TYPE_CHECKING

from modresolve.core.dependency.models import Module, ModuleName

if TYPE_CHECKING:
    from modresolve.registry.base import ModuleRegistry

logger = logging.getLogger(__name__)

# Name -> every known version, newest first.
ModuleVersionPool = dict[ModuleName, list[Module]]


def sort_newest_first(modules: Iterable[Module]) -> list[Module]:
    """Return *modules* ordered by version, newest first."""
    return sorted(modules, key=lambda m: m.version, reverse=True)


def populate_domains(
    registry: ModuleRegistry, root_names: Iterable[ModuleName]
) -> ModuleVersionPool:
    """Collect every version of every module reachable from *root_names*.

    Each name is looked up in the registry exactly once. Names that the
    registry does not know map to an empty list.

    Args:
        registry: Source of module versions.
        root_names: Names to start the walk from.

    Returns:
        The version pool, keyed in discovery order.
    """
    pool: ModuleVersionPool = {}
    queue: deque[ModuleName] = deque()
    seen: set[ModuleName] = set()

    for name in root_names:
        if name not in seen:
            seen.add(name)
            queue.append(name)

    while queue:
        name = queue.popleft()
        versions = sort_newest_first(registry.get_module_versions(name))
        pool[name] = versions
        for module in versions:
            for dep in module.dependencies:
                if dep.id not in seen:
                    seen.add(dep.id)
                    queue.append(dep.id)

    logger.debug(
        "Populated %d module domains (%d versions)",
        len(pool), sum(len(v) for v in pool.values()),
    )
    return pool

"""In-memory module registry keyed by name and version."""

from __future__ import annotations

from collections.abc import Collection, Iterable, Iterator

from modresolve.core.dependency.models import Module, ModuleName
from modresolve.core.dependency.versions import Version
from modresolve.registry.base import ModuleRegistry


class TableModuleRegistry(ModuleRegistry):
    """A registry backed by a two-level table: name -> version -> module.

    Behaves like a set of modules: adding a module whose ``(id, version)`` is
    already present leaves the registry unchanged.

    Thread safety: reads may run concurrently; ``add`` and ``remove`` need
    external synchronization.
    """

    def __init__(self, modules: Iterable[Module] = ()) -> None:
        self._table: dict[ModuleName, dict[Version, Module]] = {}
        for module in modules:
            self.add(module)

    def add(self, module: Module) -> bool:
        """Add *module*; return False if that id and version already exist."""
        versions = self._table.setdefault(module.id, {})
        if module.version in versions:
            return False
        versions[module.version] = module
        return True

    def add_all(self, modules: Iterable[Module]) -> bool:
        """Add every module; return True if any was new."""
        changed = False
        for module in modules:
            changed |= self.add(module)
        return changed

    def remove(self, module: Module) -> bool:
        versions = self._table.get(module.id)
        if not versions or versions.pop(module.version, None) is None:
            return False
        if not versions:
            del self._table[module.id]
        return True

    def get_module_versions(self, name: ModuleName) -> Collection[Module]:
        return list(self._table.get(name, {}).values())

    def module_ids(self) -> set[ModuleName]:
        return set(self._table)

    def __contains__(self, module: object) -> bool:
        if not isinstance(module, Module):
            return False
        return module.version in self._table.get(module.id, {})

    def __iter__(self) -> Iterator[Module]:
        for versions in self._table.values():
            yield from versions.values()

    def __len__(self) -> int:
        return sum(len(v) for v in self._table.values())

"""Base class for module registries.

A registry is the resolver's only source of modules. The resolver needs one
primitive from it, ``get_module_versions``; the other lookups are derived
from that primitive and provided for hosts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Collection

from modresolve.core.dependency.models import Module, ModuleName
from modresolve.core.dependency.versions import Version, VersionRange, as_version


class ModuleRegistry(ABC):
    """Abstract read-only view over a collection of module versions.

    Implementations must return the same answer for the same name for the
    duration of a resolution call.
    """

    @abstractmethod
    def get_module_versions(self, name: ModuleName) -> Collection[Module]:
        """Return every known version of *name*, in any order.

        An empty collection means the module does not exist.
        """

    @abstractmethod
    def module_ids(self) -> set[ModuleName]:
        """Return the names of all modules in the registry."""

    def get_module(self, name: ModuleName, version: Version | str) -> Module | None:
        """Return one specific version of a module, or None."""
        wanted = as_version(version)
        for module in self.get_module_versions(name):
            if module.version == wanted:
                return module
        return None

    def get_latest_module_version(
        self,
        name: ModuleName,
        min_version: Version | str | None = None,
        max_version: Version | str | None = None,
    ) -> Module | None:
        """Return the newest version of *name*, optionally within ``[min, max)``.

        Either bound may be omitted.
        """
        # 0.0.0-0 precedes every other version.
        low = as_version(min_version) if min_version is not None else Version(0, 0, 0, "0")
        bounds = None if max_version is None else VersionRange(low, as_version(max_version))

        latest: Module | None = None
        for module in self.get_module_versions(name):
            if bounds is not None and not bounds.contains(module.version):
                continue
            if bounds is None and module.version < low:
                continue
            if latest is None or module.version > latest.version:
                latest = module
        return latest

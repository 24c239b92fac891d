"""Module registries: where the resolver looks modules up.

Public API::

    from modresolve.registry import ModuleRegistry, TableModuleRegistry
    from modresolve.registry.manifest import ManifestModuleRegistry
"""

from __future__ import annotations

from modresolve.registry.base import ModuleRegistry
from modresolve.registry.table import TableModuleRegistry

__all__ = [
    "ModuleRegistry",
    "TableModuleRegistry",
]

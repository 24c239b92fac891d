"""Module manifests: building modules from YAML or JSON metadata files.

A manifest describes one module version::

    id: Core
    version: 0.1.0
    dependencies:
      - id: baseModule
        minVersion: 1.0.0
        maxVersion: 2.0.0
      - id: extras
        minVersion: 0.3.0
        optional: true

JSON manifests use the same keys and are read with ``json.loads``. Keys other
than the ones above (display name, description, permissions, ...) are
ignored.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from modresolve.core.dependency.models import DEFAULT_MIN_VERSION, DependencyInfo, Module
from modresolve.core.dependency.versions import Version
from modresolve.exceptions import ManifestError, RegistryError, VersionParseError
from modresolve.registry.table import TableModuleRegistry

logger = logging.getLogger(__name__)

MANIFEST_NAMES = ("module.yaml", "module.yml", "module.json")


def _require_str(data: Mapping[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if value is None:
        raise ManifestError(f"{where}: missing required key {key!r}")
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ManifestError(f"{where}: {key!r} must be a string, got {type(value).__name__}")
    return str(value)


def _parse_version(text: str, where: str) -> Version:
    try:
        return Version.parse(text)
    except VersionParseError as exc:
        raise ManifestError(f"{where}: {exc}") from exc


def dependency_from_mapping(data: Any, where: str = "dependency") -> DependencyInfo:
    """Build a ``DependencyInfo`` from one entry of a manifest's dependency list."""
    if not isinstance(data, Mapping):
        raise ManifestError(f"{where}: expected a mapping, got {type(data).__name__}")
    dep_id = _require_str(data, "id", where)
    min_version = DEFAULT_MIN_VERSION
    if data.get("minVersion") is not None:
        min_version = _parse_version(str(data["minVersion"]), where)
    max_version = None
    if data.get("maxVersion") is not None:
        max_version = _parse_version(str(data["maxVersion"]), where)
    optional = data.get("optional", False)
    if not isinstance(optional, bool):
        raise ManifestError(f"{where}: 'optional' must be true or false")
    return DependencyInfo(dep_id, min_version, max_version, optional)


def module_from_mapping(data: Any, source: str = "<manifest>") -> Module:
    """Build a ``Module`` from parsed manifest data.

    Raises:
        ManifestError: If required keys are missing or values are invalid.
    """
    if not isinstance(data, Mapping):
        raise ManifestError(f"{source}: expected a mapping at top level")
    module_id = _require_str(data, "id", source)
    version = _parse_version(_require_str(data, "version", source), source)

    raw_deps = data.get("dependencies") or []
    if not isinstance(raw_deps, list):
        raise ManifestError(f"{source}: 'dependencies' must be a list")
    dependencies = tuple(
        dependency_from_mapping(entry, f"{source}: dependency #{i + 1}")
        for i, entry in enumerate(raw_deps)
    )
    return Module(module_id, version, dependencies)


def load_module_file(path: Path | str) -> Module:
    """Read a YAML or JSON manifest file into a ``Module``.

    Files ending in ``.json`` are parsed as JSON, everything else as YAML.

    Raises:
        ManifestError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(f"{path}: cannot read manifest: {exc}") from exc
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ManifestError(f"{path}: invalid manifest syntax: {exc}") from exc
    return module_from_mapping(data, str(path))


class ManifestModuleRegistry(TableModuleRegistry):
    """A ``TableModuleRegistry`` filled from manifest files on disk."""

    @classmethod
    def from_directory(cls, root: Path | str) -> ManifestModuleRegistry:
        """Scan *root* recursively for module manifests.

        Manifests that cannot be loaded are logged and skipped.

        Raises:
            RegistryError: If *root* is not a directory.
        """
        root = Path(root)
        if not root.is_dir():
            raise RegistryError(f"Module directory not found: {root}")

        registry = cls()
        for path in sorted(root.rglob("*")):
            if path.name not in MANIFEST_NAMES or not path.is_file():
                continue
            try:
                module = load_module_file(path)
            except ManifestError:
                logger.warning("Skipping invalid manifest: %s", path, exc_info=True)
                continue
            if not registry.add(module):
                logger.warning("Duplicate module %s in %s ignored", module, path)
        return registry

"""modresolve exception hierarchy.

All public exceptions inherit from ModResolveError, giving callers a single
base class to catch when they want to handle any modresolve-specific failure
without swallowing unrelated errors.

An unsatisfiable set of modules is not an exception: the resolver reports it
through ``ResolutionResult.success``. Only ``ResolutionResult.raise_for_failure``
turns it into a ``ResolutionError``.
"""


class ModResolveError(Exception):
    """Base exception for all modresolve errors."""


class VersionParseError(ModResolveError, ValueError):
    """Raised when a version string is not a valid semantic version.

    Also raised for versions constructed with negative parts.
    """


class ManifestError(ModResolveError):
    """Raised when a module manifest cannot be read or is malformed.

    Covers missing required keys, invalid versions, wrong value types
    and YAML/JSON syntax errors.
    """


class RegistryError(ModResolveError):
    """Raised when a registry cannot be built from its source.

    Covers a module directory that does not exist or is not a directory.
    """


class ResolutionError(ModResolveError):
    """Raised when a caller demands a successful resolution and none exists.

    Carries the diagnostic messages collected by the resolver.
    """

    def __init__(self, message: str, conflicts: list[str] | None = None) -> None:
        super().__init__(message)
        self.conflicts = list(conflicts or [])

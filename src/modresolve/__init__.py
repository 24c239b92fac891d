"""modresolve: version-range dependency resolution for modular applications."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

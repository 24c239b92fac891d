"""Shared fixtures for modresolve tests."""

import pathlib

import pytest


@pytest.fixture
def sample_module_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Create a temporary directory holding a few module manifests."""
    modules = tmp_path / "modules"
    manifests = {
        "app/module.yaml": (
            "id: app\n"
            "version: 1.0.0\n"
            "dependencies:\n"
            "  - id: logging\n"
            "    minVersion: 1.0.0\n"
            "  - id: metrics\n"
            "    minVersion: 0.2.0\n"
            "    optional: true\n"
        ),
        "logging-1.4/module.yaml": "id: logging\nversion: 1.4.0\n",
        "logging-2.0/module.yaml": "id: logging\nversion: 2.0.0\n",
        "metrics/module.json": '{"id": "metrics", "version": "0.2.3"}',
    }
    for rel, text in manifests.items():
        path = modules / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
    return modules

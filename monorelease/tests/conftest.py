"""Shared fixtures and helpers for the test suite."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest


def write_package(root: Path, relative: str, payload: dict[str, Any]) -> Path:
    """Create ``relative/package.json`` under ``root`` and return the package directory."""

    package_dir = root / relative
    package_dir.mkdir(parents=True, exist_ok=True)
    (package_dir / "package.json").write_text(json.dumps(payload), encoding="utf-8")
    return package_dir


@pytest.fixture
def monorepo(tmp_path: Path) -> Path:
    """Return a small monorepo with public, private, and react-native packages."""

    root = tmp_path / "repo"
    root.mkdir()
    (root / "package.json").write_text(
        json.dumps({"name": "monorepo-root", "private": True, "workspaces": ["packages/*"]}),
        encoding="utf-8",
    )
    write_package(root, "packages/virtualized-lists", {"name": "@react-native/virtualized-lists", "version": "0.74.1"})
    write_package(root, "packages/assets", {"name": "@react-native/assets-registry", "version": "0.74.0"})
    write_package(root, "packages/react-native", {"name": "react-native", "version": "0.74.1"})
    write_package(root, "packages/tester", {"name": "@react-native/tester", "version": "0.0.1", "private": True})
    return root

"""Discover the workspace packages declared by the monorepo root."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any, Iterable

import yaml

from monorelease.models.config import EXCLUDED_PACKAGE
from monorelease.models.package import WorkspacePackage

LOGGER = logging.getLogger(__name__)

_PNPM_WORKSPACE_FILE = "pnpm-workspace.yaml"


class WorkspaceError(RuntimeError):
    """Raised when workspace manifests are missing or malformed."""


def get_packages(
    root: Path,
    *,
    include_react_native: bool = False,
    excluded_package: str = EXCLUDED_PACKAGE,
) -> dict[str, WorkspacePackage]:
    """Return the public workspace packages keyed by name, sorted by name.

    Private packages are never returned. The ``excluded_package`` (``react-native``
    by default) is only included when ``include_react_native`` is set.
    """

    patterns = _workspace_patterns(root)
    included = [pattern for pattern in patterns if not pattern.startswith("!")]
    negated = [pattern[1:] for pattern in patterns if pattern.startswith("!")]

    excluded_dirs = {path.resolve() for path in _iter_package_dirs(root, negated)}

    packages: dict[str, WorkspacePackage] = {}
    for package_dir in _iter_package_dirs(root, included):
        if package_dir.resolve() in excluded_dirs:
            continue

        payload = _read_json(package_dir / "package.json")
        if payload.get("private") is True:
            continue

        try:
            package = WorkspacePackage.from_package_json(package_dir, payload)
        except ValueError as exc:
            raise WorkspaceError(str(exc)) from exc

        if package.name == excluded_package and not include_react_native:
            continue

        existing = packages.get(package.name)
        if existing is not None and existing.path.resolve() != package.path.resolve():
            raise WorkspaceError(
                f"Duplicate workspace package '{package.name}' in {existing.path} and {package.path}"
            )
        packages[package.name] = package

    LOGGER.debug("Discovered %d workspace packages under %s", len(packages), root)
    return {name: packages[name] for name in sorted(packages)}


def _workspace_patterns(root: Path) -> list[str]:
    """Return workspace globs from ``package.json`` or ``pnpm-workspace.yaml``."""

    manifest = _read_json(root / "package.json")
    workspaces: Any = manifest.get("workspaces")
    if isinstance(workspaces, dict):
        workspaces = workspaces.get("packages")

    if workspaces is None:
        workspaces = _read_pnpm_workspaces(root / _PNPM_WORKSPACE_FILE)

    if not isinstance(workspaces, list) or not all(isinstance(item, str) for item in workspaces):
        raise WorkspaceError(f"{root / 'package.json'} does not declare a list of workspaces")
    return [item.strip() for item in workspaces if item.strip()]


def _read_pnpm_workspaces(path: Path) -> Any:
    if not path.exists():
        return None
    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise WorkspaceError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(document, dict):
        raise WorkspaceError(f"{path} must contain a mapping")
    return document.get("packages")


def _iter_package_dirs(root: Path, patterns: Iterable[str]) -> Iterable[Path]:
    seen: set[Path] = set()
    for pattern in patterns:
        for candidate in sorted(root.glob(pattern.rstrip("/"))):
            if candidate in seen or not (candidate / "package.json").is_file():
                continue
            seen.add(candidate)
            yield candidate


def _read_json(path: Path) -> dict[str, Any]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise WorkspaceError(f"Missing file: {path}") from exc
    except OSError as exc:
        raise WorkspaceError(f"Cannot read {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise WorkspaceError(f"Invalid UTF-8 in {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise WorkspaceError(f"Invalid JSON in {path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise WorkspaceError(f"{path} must contain a JSON object")
    return payload


@dataclass(slots=True)
class WorkspaceDiscovery:
    """Package source bound to a monorepo root."""

    root: Path
    excluded_package: str = EXCLUDED_PACKAGE

    def get_packages(self, *, include_react_native: bool = False) -> dict[str, WorkspacePackage]:
        return get_packages(
            self.root,
            include_react_native=include_react_native,
            excluded_package=self.excluded_package,
        )

"""Data models describing the workspace packages discovered in the monorepo."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping


class InvalidVersionError(ValueError):
    """Raised when a workspace package does not follow the ``0.x.x`` versioning scheme."""


@dataclass(slots=True, frozen=True)
class WorkspacePackage:
    """A publishable package located inside the monorepo."""

    name: str
    version: str
    path: Path
    package_json: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_package_json(cls, path: Path, payload: Mapping[str, Any]) -> "WorkspacePackage":
        """Build a :class:`WorkspacePackage` from a parsed ``package.json`` document."""

        name = payload.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"{path / 'package.json'} does not declare a package name")

        version = payload.get("version")
        if not isinstance(version, str):
            version = ""

        return cls(name=name.strip(), version=version.strip(), path=path, package_json=dict(payload))


def ensure_prerelease_version(package: WorkspacePackage) -> None:
    """Raise :class:`InvalidVersionError` unless ``package`` is versioned ``0.x.x``."""

    if not package.version.startswith("0."):
        raise InvalidVersionError(
            f"Package version expected to be 0.x.x, but received {package.version}"
        )

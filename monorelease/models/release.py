"""Data structures describing a publish run and its per-package outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


PUBLISH_PACKAGES_TAG = "#publish-packages-to-npm"


def has_publish_tag(commit_message: str) -> bool:
    """Return ``True`` when the commit message authorises a publish run."""

    return PUBLISH_PACKAGES_TAG in commit_message


def get_tags_from_commit_message(commit_message: str) -> list[str]:
    """Extract the dist-tags appended to the publish marker.

    Tags follow the marker separated by ``&``, for example
    ``"Bump packages #publish-packages-to-npm&next&rc"`` yields ``["next", "rc"]``.
    """

    start = commit_message.find(PUBLISH_PACKAGES_TAG)
    if start == -1:
        return []

    segments = commit_message[start:].strip().split("&")[1:]
    return [segment.strip() for segment in segments if segment.strip()]


class PublishStatus(str, Enum):
    """Final state of a package within a single run."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class PublishCommandResult:
    """Exit status and captured output of a single ``npm publish`` invocation."""

    code: int
    stderr: str = ""
    stdout: str = ""

    @property
    def succeeded(self) -> bool:
        return self.code == 0


@dataclass(slots=True, frozen=True)
class PackageOutcome:
    """Outcome recorded for a package after the version diff and publish phases."""

    name: str
    version: str
    status: PublishStatus
    attempts: int = 0
    error: str | None = None

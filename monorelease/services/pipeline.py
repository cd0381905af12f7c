"""Orchestration layer that checks the trigger, diffs versions, and publishes packages."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Protocol, Sequence

from monorelease.models.config import ReleaseConfig
from monorelease.models.package import InvalidVersionError, WorkspacePackage, ensure_prerelease_version
from monorelease.models.release import (
    PackageOutcome,
    PublishCommandResult,
    PublishStatus,
    get_tags_from_commit_message,
    has_publish_tag,
)
from monorelease.services.git import CommitMessageError
from monorelease.services.monorepo import WorkspaceError
from monorelease.services.registry import RegistryLookupError
from monorelease.utils.retry import retry


logger = logging.getLogger(__name__)

MAX_PUBLISH_ATTEMPTS = 2


class SupportsCommitLookup(Protocol):
    """Subset of :class:`GitCommitReader` relied on by the pipeline."""

    def read_latest_message(self) -> str:
        """Return the message of the most recent commit."""


class SupportsPackageDiscovery(Protocol):
    """Protocol describing the workspace package source."""

    def get_packages(self, *, include_react_native: bool = False) -> Mapping[str, WorkspacePackage]:
        """Return workspace packages keyed by name."""


class SupportsVersionLookup(Protocol):
    """Protocol describing the registry client interface."""

    async def get_published_versions(self, name: str) -> set[str]:
        """Return every version of ``name`` already present in the registry."""


class SupportsPackagePublishing(Protocol):
    """Protocol describing the publish command wrapper."""

    def publish_package(
        self,
        path: Path,
        *,
        tags: Sequence[str] = (),
        otp: str | None = None,
    ) -> PublishCommandResult:
        """Publish the package located at ``path``."""


@dataclass(slots=True)
class ReleaseResult:
    """Structured summary of a publish run."""

    triggered: bool = False
    commit_message: str | None = None
    tags: list[str] = field(default_factory=list)
    outcomes: list[PackageOutcome] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> list[PackageOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status is PublishStatus.SKIPPED]

    @property
    def worklist(self) -> list[str]:
        """Names of the packages that required publishing, in publish order."""

        return [outcome.name for outcome in self.outcomes if outcome.status is not PublishStatus.SKIPPED]

    @property
    def published(self) -> list[PackageOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status is PublishStatus.SUCCESS]

    @property
    def failed(self) -> list[PackageOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status is PublishStatus.FAILED]

    @property
    def succeeded(self) -> bool:
        """Return ``True`` when the run finished without fatal errors or failed packages."""

        return not self.errors and not self.failed

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1


@dataclass(slots=True)
class ReleasePipeline:
    """Coordinate the workflow from trigger check through publication."""

    commit_reader: SupportsCommitLookup
    packages: SupportsPackageDiscovery
    registry: SupportsVersionLookup
    publisher: SupportsPackagePublishing
    config: ReleaseConfig

    async def run(self) -> ReleaseResult:
        """Execute a publish run and return its outcome without touching process state."""

        result = ReleaseResult()

        try:
            commit_message = self.commit_reader.read_latest_message()
        except CommitMessageError as exc:
            logger.warning("Commit lookup failed: %s", exc)
            result.errors.append("Failed to read Git commit message, exiting.")
            return result

        result.commit_message = commit_message
        if not has_publish_tag(commit_message):
            logger.info("Current commit does not include #publish-packages-to-npm keyword, skipping.")
            return result

        result.triggered = True
        logger.info("Discovering updated packages")

        try:
            packages = self._discover()
            for package in packages:
                ensure_prerelease_version(package)
            worklist = await self._diff_versions(packages, result)
        except (WorkspaceError, InvalidVersionError, RegistryLookupError) as exc:
            result.errors.append(str(exc))
            return result

        logger.info("Done ✅")
        logger.info("Publishing updated packages to npm")

        result.tags = get_tags_from_commit_message(commit_message)
        for package in worklist:
            result.outcomes.append(self._publish(package, result.tags))

        if not result.failed:
            logger.info("Done ✅")
        return result

    def _discover(self) -> list[WorkspacePackage]:
        """Return discovered packages in a stable order, minus the excluded package."""

        discovered = self.packages.get_packages(include_react_native=self.config.include_react_native)
        return [
            package
            for _, package in sorted(discovered.items())
            if self.config.include_react_native or package.name != self.config.excluded_package
        ]

    async def _diff_versions(
        self,
        packages: Sequence[WorkspacePackage],
        result: ReleaseResult,
    ) -> list[WorkspacePackage]:
        published_versions = await asyncio.gather(
            *(self.registry.get_published_versions(package.name) for package in packages)
        )

        worklist: list[WorkspacePackage] = []
        for package, versions in zip(packages, published_versions):
            if package.version in versions:
                logger.info("- Skipping %s (%s already present on npm)", package.name, package.version)
                result.outcomes.append(
                    PackageOutcome(name=package.name, version=package.version, status=PublishStatus.SKIPPED)
                )
                continue
            worklist.append(package)
        return worklist

    def _publish(self, package: WorkspacePackage, tags: Sequence[str]) -> PackageOutcome:
        logger.info("- Publishing %s (%s)", package.name, package.version)

        def attempt() -> PublishCommandResult:
            outcome = self.publisher.publish_package(package.path, tags=tags, otp=self.config.otp)
            if not outcome.succeeded:
                logger.error(
                    "Failed to publish %s. npm publish exited with code %s:\n%s",
                    package.name,
                    outcome.code,
                    outcome.stderr.rstrip(),
                )
                if outcome.stdout.strip():
                    logger.info("npm publish output for %s:\n%s", package.name, outcome.stdout.rstrip())
            return outcome

        def announce_retry(_attempt: int, _outcome: PublishCommandResult) -> None:
            logger.info("--- Retrying once! ---")

        final, attempts = retry(
            attempt,
            should_retry=lambda outcome: not outcome.succeeded,
            max_attempts=MAX_PUBLISH_ATTEMPTS,
            on_retry=announce_retry,
        )

        if final.succeeded:
            return PackageOutcome(
                name=package.name,
                version=package.version,
                status=PublishStatus.SUCCESS,
                attempts=attempts,
            )
        return PackageOutcome(
            name=package.name,
            version=package.version,
            status=PublishStatus.FAILED,
            attempts=attempts,
            error=final.stderr.strip() or f"npm publish exited with code {final.code}",
        )

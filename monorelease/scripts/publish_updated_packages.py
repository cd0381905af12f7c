"""Publish every updated workspace package (excluding react-native) to npm.

The script is intended to run from a CI workflow after a release commit lands.
It only acts when the latest commit message contains the
``#publish-packages-to-npm`` keyword; dist-tags may follow the keyword separated
by ``&`` (for example ``#publish-packages-to-npm&next``).

Configuration is read from the environment:
- ``NPM_CONFIG_OTP``: one-time password forwarded to ``npm publish``.
- ``MONORELEASE_REPO_ROOT``: monorepo root (defaults to the working directory).
- ``MONORELEASE_REGISTRY_URL`` and ``MONORELEASE_REGISTRY_TIMEOUT``: registry lookups.
- ``MONORELEASE_LOG_LEVEL``: logging verbosity (default ``INFO``).
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any, Sequence

from monorelease.models.config import ReleaseConfig
from monorelease.services.git import GitCommitReader
from monorelease.services.monorepo import WorkspaceDiscovery
from monorelease.services.npm import NpmPublisher
from monorelease.services.pipeline import ReleasePipeline, ReleaseResult, SupportsVersionLookup
from monorelease.services.registry import NpmRegistryClient

LOGGER = logging.getLogger("monorelease.publish")

if not LOGGER.handlers:  # avoid duplicates on re-import
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    LOGGER.addHandler(handler)
    LOGGER.setLevel(logging.INFO)
    LOGGER.propagate = False


def _configure_logging() -> None:
    """Configure root logging based on ``MONORELEASE_LOG_LEVEL``."""
    level_name = os.getenv("MONORELEASE_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="publish-updated-packages",
        description=(
            "Publishes all updated packages (excluding react-native) to npm. "
            "This script is intended to run from a CI workflow."
        ),
    )
    return parser.parse_args(argv)


def _build_pipeline(config: ReleaseConfig, registry: SupportsVersionLookup) -> ReleasePipeline:
    return ReleasePipeline(
        commit_reader=GitCommitReader(repo_path=config.repo_root, git_executable=config.git_executable),
        packages=WorkspaceDiscovery(root=config.repo_root, excluded_package=config.excluded_package),
        registry=registry,
        publisher=NpmPublisher(npm_executable=config.npm_executable, access=config.access),
        config=config,
    )


async def _execute(config: ReleaseConfig) -> ReleaseResult:
    async with NpmRegistryClient(config.registry_url, timeout=config.timeout) as registry:
        pipeline = _build_pipeline(config, registry)
        return await pipeline.run()


def _result_payload(result: ReleaseResult) -> dict[str, Any]:
    return {
        "succeeded": result.succeeded,
        "triggered": result.triggered,
        "tags": list(result.tags),
        "worklist": result.worklist,
        "skipped": [outcome.name for outcome in result.skipped],
        "published": [outcome.name for outcome in result.published],
        "failed": [outcome.name for outcome in result.failed],
        "errors": list(result.errors),
    }


def _report(result: ReleaseResult) -> None:
    for error in result.errors:
        LOGGER.error(error)

    failed = [outcome.name for outcome in result.failed]
    if failed:
        LOGGER.error("Failed to publish: %s", ", ".join(failed))

    LOGGER.info(
        "PUBLISH_COMPLETE triggered=%s published=%d skipped=%d failed=%d",
        result.triggered,
        len(result.published),
        len(result.skipped),
        len(failed),
    )
    print(json.dumps(_result_payload(result), ensure_ascii=False))


def main(argv: Sequence[str] | None = None) -> int:
    _parse_args(argv)
    _configure_logging()

    config = ReleaseConfig.from_env()
    LOGGER.info("PUBLISH_START repo_root=%s registry=%s", config.repo_root, config.registry_url)

    try:
        result = asyncio.run(_execute(config))
    except Exception:
        LOGGER.exception("Publish run encountered an unexpected error")
        return 1

    _report(result)
    return result.exit_code


if __name__ == "__main__":  # pragma: no cover - script entry point
    raise SystemExit(main())

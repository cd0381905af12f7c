"""Publish workspace packages with the npm CLI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import subprocess
from typing import Sequence

from monorelease.models.release import PublishCommandResult

_COMMAND_NOT_FOUND = 127


@dataclass(slots=True)
class NpmPublisher:
    """Run ``npm publish`` inside a package directory and capture the result."""

    npm_executable: str = "npm"
    access: str | None = None

    def build_command(self, *, tags: Sequence[str] = (), otp: str | None = None) -> list[str]:
        command = [self.npm_executable, "publish"]
        for tag in tags:
            command.extend(["--tag", tag])
        if otp:
            command.extend(["--otp", otp])
        if self.access:
            command.extend(["--access", self.access])
        return command

    def publish_package(
        self,
        path: Path,
        *,
        tags: Sequence[str] = (),
        otp: str | None = None,
    ) -> PublishCommandResult:
        """Publish the package at ``path``. Failures are reported through the exit code."""

        command = self.build_command(tags=tags, otp=otp)
        try:
            result = subprocess.run(
                command,
                cwd=path,
                text=True,
                check=False,
                capture_output=True,
            )
        except OSError as exc:
            return PublishCommandResult(code=_COMMAND_NOT_FOUND, stderr=str(exc))

        return PublishCommandResult(
            code=result.returncode,
            stderr=result.stderr or "",
            stdout=result.stdout or "",
        )

"""Read commit metadata from the local Git checkout."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import subprocess


class CommitMessageError(RuntimeError):
    """Raised when the latest commit message cannot be read."""


@dataclass(slots=True)
class GitCommitReader:
    """Return the message of the most recent commit in ``repo_path``."""

    repo_path: Path
    git_executable: str = "git"

    def read_latest_message(self) -> str:
        return self._run_git("log", "-1", "--pretty=%B").stdout

    def _run_git(self, *args: str) -> subprocess.CompletedProcess[str]:
        """Execute a Git command within the repository and raise on error."""

        command = " ".join(args)
        try:
            result = subprocess.run(
                [self.git_executable, *args],
                cwd=self.repo_path,
                text=True,
                check=False,
                capture_output=True,
            )
        except OSError as exc:
            raise CommitMessageError(f"git {command} could not be executed: {exc}") from exc

        if result.returncode != 0:
            raise CommitMessageError(f"git {command} failed: {result.stderr.strip()}")
        return result

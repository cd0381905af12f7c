from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

import pytest

from monorelease.services import npm
from monorelease.services.npm import NpmPublisher


def test_build_command_includes_tags_otp_and_access() -> None:
    publisher = NpmPublisher(access="public")

    command = publisher.build_command(tags=["next", "0.74-stable"], otp="123456")

    assert command == [
        "npm",
        "publish",
        "--tag",
        "next",
        "--tag",
        "0.74-stable",
        "--otp",
        "123456",
        "--access",
        "public",
    ]


def test_build_command_omits_missing_options() -> None:
    assert NpmPublisher().build_command() == ["npm", "publish"]


def test_publish_package_runs_in_package_directory(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls: list[dict[str, Any]] = []

    def fake_run(command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        calls.append({"command": command, **kwargs})
        return subprocess.CompletedProcess(command, 1, stdout="", stderr="npm ERR! code E403\n")

    monkeypatch.setattr(npm.subprocess, "run", fake_run)

    result = NpmPublisher().publish_package(tmp_path, tags=["latest"], otp=None)

    assert result.code == 1
    assert result.stderr == "npm ERR! code E403\n"
    assert not result.succeeded
    assert calls[0]["command"] == ["npm", "publish", "--tag", "latest"]
    assert calls[0]["cwd"] == tmp_path
    assert calls[0]["capture_output"] is True


def test_publish_package_reports_missing_executable(tmp_path: Path) -> None:
    result = NpmPublisher(npm_executable="npm-does-not-exist").publish_package(tmp_path)

    assert result.code == 127
    assert result.stderr

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from monorelease.models.config import DEFAULT_REGISTRY_URL, DEFAULT_TIMEOUT, ReleaseConfig


def test_from_env_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)

    config = ReleaseConfig.from_env({})

    assert config.repo_root.resolve() == tmp_path.resolve()
    assert config.otp is None
    assert config.registry_url == DEFAULT_REGISTRY_URL
    assert config.timeout == DEFAULT_TIMEOUT
    assert config.excluded_package == "react-native"
    assert config.include_react_native is False
    assert config.npm_executable == "npm"
    assert config.git_executable == "git"
    assert config.access is None


def test_from_env_reads_overrides(tmp_path: Path) -> None:
    config = ReleaseConfig.from_env(
        {
            "NPM_CONFIG_OTP": "654321",
            "MONORELEASE_REPO_ROOT": str(tmp_path),
            "MONORELEASE_REGISTRY_URL": "http://localhost:4873",
            "MONORELEASE_REGISTRY_TIMEOUT": "2.5",
            "MONORELEASE_NPM": "/usr/local/bin/npm",
            "MONORELEASE_NPM_ACCESS": "public",
        }
    )

    assert config.otp == "654321"
    assert config.repo_root == tmp_path
    assert config.registry_url == "http://localhost:4873/"
    assert config.timeout == 2.5
    assert config.npm_executable == "/usr/local/bin/npm"
    assert config.access == "public"


@pytest.mark.parametrize("raw", ["soon", "0", "-3"])
def test_from_env_ignores_invalid_timeout(raw: str, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        config = ReleaseConfig.from_env({"MONORELEASE_REGISTRY_TIMEOUT": raw})

    assert config.timeout == DEFAULT_TIMEOUT
    assert "MONORELEASE_REGISTRY_TIMEOUT" in caplog.text


def test_from_env_treats_blank_otp_as_missing() -> None:
    assert ReleaseConfig.from_env({"NPM_CONFIG_OTP": "  "}).otp is None

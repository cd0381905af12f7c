"""Run configuration resolved from the CI environment."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Mapping

LOGGER = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org/"
DEFAULT_TIMEOUT = 10.0
EXCLUDED_PACKAGE = "react-native"

OTP_ENV_VAR = "NPM_CONFIG_OTP"
REPO_ROOT_ENV_VAR = "MONORELEASE_REPO_ROOT"
REGISTRY_URL_ENV_VAR = "MONORELEASE_REGISTRY_URL"
TIMEOUT_ENV_VAR = "MONORELEASE_REGISTRY_TIMEOUT"
NPM_ENV_VAR = "MONORELEASE_NPM"
GIT_ENV_VAR = "MONORELEASE_GIT"
ACCESS_ENV_VAR = "MONORELEASE_NPM_ACCESS"


@dataclass(slots=True, frozen=True)
class ReleaseConfig:
    """Explicit configuration handed to the release pipeline."""

    repo_root: Path
    otp: str | None = None
    registry_url: str = DEFAULT_REGISTRY_URL
    timeout: float = DEFAULT_TIMEOUT
    excluded_package: str = EXCLUDED_PACKAGE
    include_react_native: bool = False
    git_executable: str = "git"
    npm_executable: str = "npm"
    access: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ReleaseConfig":
        """Build the configuration from ``environ`` (defaults to ``os.environ``)."""

        env = os.environ if environ is None else environ

        raw_root = (env.get(REPO_ROOT_ENV_VAR) or "").strip()
        repo_root = Path(raw_root) if raw_root else Path.cwd()

        registry_url = (env.get(REGISTRY_URL_ENV_VAR) or "").strip() or DEFAULT_REGISTRY_URL
        if not registry_url.endswith("/"):
            registry_url = f"{registry_url}/"

        return cls(
            repo_root=repo_root,
            otp=_optional(env.get(OTP_ENV_VAR)),
            registry_url=registry_url,
            timeout=_load_timeout(env, TIMEOUT_ENV_VAR, DEFAULT_TIMEOUT),
            git_executable=_optional(env.get(GIT_ENV_VAR)) or "git",
            npm_executable=_optional(env.get(NPM_ENV_VAR)) or "npm",
            access=_optional(env.get(ACCESS_ENV_VAR)),
        )


def _optional(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _load_timeout(env: Mapping[str, str], variable_name: str, default: float) -> float:
    """Return the timeout specified by the environment, falling back to ``default``."""

    raw_value = env.get(variable_name)
    if not raw_value:
        return default

    try:
        timeout = float(raw_value)
    except ValueError:
        LOGGER.warning("Ignoring invalid timeout value in %s", variable_name)
        return default

    if timeout <= 0:
        LOGGER.warning("Ignoring non-positive timeout value in %s", variable_name)
        return default

    return timeout

"""Client for the npm registry metadata endpoint."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import TracebackType
from urllib.parse import quote

import httpx

from monorelease.models.config import DEFAULT_REGISTRY_URL, DEFAULT_TIMEOUT

LOGGER = logging.getLogger(__name__)


class RegistryLookupError(RuntimeError):
    """Raised when the registry cannot report the published versions of a package."""


class NpmRegistryClient:
    """Fetch the set of versions already published for a package."""

    _DEFAULT_HEADERS: Mapping[str, str] = {
        "User-Agent": "monorelease/0.1",
        "Accept": "application/json",
    }

    def __init__(
        self,
        base_url: str = DEFAULT_REGISTRY_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(headers=dict(self._DEFAULT_HEADERS), timeout=timeout)

    async def __aenter__(self) -> "NpmRegistryClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def package_url(self, name: str) -> str:
        """Return the metadata URL for ``name``; scoped names keep a literal ``@``."""

        return f"{self._base_url}{quote(name, safe='@')}"

    async def get_published_versions(self, name: str) -> set[str]:
        url = self.package_url(name)
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise RegistryLookupError(f"Failed to query registry for '{name}': {exc}") from exc

        if response.status_code != 200:
            raise RegistryLookupError(
                f"Registry returned HTTP {response.status_code} for '{name}' ({url})"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise RegistryLookupError(f"Registry response for '{name}' is not valid JSON: {exc}") from exc

        versions = payload.get("versions") if isinstance(payload, dict) else None
        if not isinstance(versions, dict):
            raise RegistryLookupError(f"Registry response for '{name}' has no 'versions' object")

        LOGGER.debug("Registry reports %d versions for %s", len(versions), name)
        return set(versions)

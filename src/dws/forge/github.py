"""Async GitHub REST client for release metadata and asset downloads.

Built on ``httpx.AsyncClient``. A client instance owns one connection pool
and must be used within a single event loop; the synchronous installers
create one per ``asyncio.run`` step. Tests pass an ``httpx.MockTransport``.
"""

from __future__ import annotations

import hashlib
import logging
import os
from pathlib import Path
from typing import Any

import httpx

from dws import _DEFAULT_USER_AGENT
from dws.exceptions import ForgeError, ReleaseNotFoundError
from dws.forge.models import Release

logger = logging.getLogger(__name__)

API_ROOT: str = "https://api.github.com"

# Timeout for all forge HTTP requests (seconds).
DEFAULT_TIMEOUT: float = 30.0

TOKEN_ENV_VARS: tuple[str, ...] = ("DWS_GITHUB_TOKEN", "GITHUB_TOKEN")
USER_AGENT_ENV_VAR: str = "DWS_GITHUB_USER_AGENT"


def release_endpoint(api_root: str, project: str, tag: str | None = None) -> str:
    """Build the releases URL for ``owner/repo`` (latest, or a given tag)."""
    repo = project.strip().strip("/")
    base = f"{api_root.rstrip('/')}/repos/{repo}/releases"
    if tag:
        return f"{base}/tags/{tag}"
    return f"{base}/latest"


def _body_excerpt(response: httpx.Response) -> str:
    try:
        return response.text.strip()
    except (UnicodeDecodeError, httpx.ResponseNotRead):
        return "<unreadable body>"


class GitHubClient:
    """Minimal GitHub releases client.

    Args:
        token: Bearer token; anonymous requests when None.
        user_agent: ``User-Agent`` header value.
        api_root: Base URL of the REST API.
        transport: Optional ``httpx`` transport, used by tests.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        token: str | None = None,
        user_agent: str = _DEFAULT_USER_AGENT,
        api_root: str = API_ROOT,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.token = token
        self.user_agent = user_agent
        self.api_root = api_root
        self._transport = transport
        self._timeout = timeout

    @classmethod
    def from_env(cls, transport: httpx.AsyncBaseTransport | None = None) -> GitHubClient:
        """Configure token and user agent from the environment."""
        token = next((os.environ[v] for v in TOKEN_ENV_VARS if os.environ.get(v)), None)
        user_agent = os.environ.get(USER_AGENT_ENV_VAR) or _DEFAULT_USER_AGENT
        return cls(token=token, user_agent=user_agent, transport=transport)

    def _client(self, accept: str) -> httpx.AsyncClient:
        headers = {"User-Agent": self.user_agent, "Accept": accept}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        kwargs: dict[str, Any] = {
            "headers": headers,
            "timeout": self._timeout,
            "follow_redirects": True,
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.AsyncClient(**kwargs)

    # -- Releases -----------------------------------------------------------

    async def fetch_release(self, project: str, tag: str | None = None) -> Release:
        """Fetch the latest release of ``project``, or the one tagged ``tag``.

        Raises:
            ReleaseNotFoundError: On HTTP 404.
            ForgeError: On any other non-2xx status, a transport failure,
                or a body that is not JSON.
        """
        url = release_endpoint(self.api_root, project, tag)
        logger.debug("GET %s", url)
        try:
            async with self._client("application/vnd.github+json") as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            raise ForgeError(f"Request to {url} failed: {exc}") from exc

        if response.status_code == 404:
            suffix = f" for tag '{tag}'" if tag else ""
            raise ReleaseNotFoundError(
                f"GitHub release not found for repository '{project}'{suffix}"
            )
        if not response.is_success:
            raise ForgeError(
                f"GitHub API returned {response.status_code} for repository "
                f"'{project}': {_body_excerpt(response)}"
            )
        try:
            return Release.from_dict(response.json())
        except ValueError as exc:
            raise ForgeError(f"GitHub API returned invalid JSON for '{project}'") from exc

    # -- Downloads ----------------------------------------------------------

    async def download_asset(self, url: str, destination: Path) -> str:
        """Stream ``url`` into ``destination`` and return its SHA-256 hex.

        The body is written to ``<destination>.download`` while hashing and
        renamed into place only once complete.

        Raises:
            ForgeError: On a non-2xx status or transport failure.
        """
        partial = destination.with_name(destination.name + ".download")
        destination.parent.mkdir(parents=True, exist_ok=True)
        sha = hashlib.sha256()
        logger.debug("Downloading %s -> %s", url, destination)
        try:
            async with self._client("application/octet-stream") as client:
                async with client.stream("GET", url) as response:
                    if not response.is_success:
                        await response.aread()
                        raise ForgeError(
                            f"GitHub asset download returned {response.status_code}: "
                            f"{_body_excerpt(response)}"
                        )
                    with open(partial, "wb") as fh:
                        async for chunk in response.aiter_bytes():
                            sha.update(chunk)
                            fh.write(chunk)
            os.replace(partial, destination)
        except httpx.HTTPError as exc:
            partial.unlink(missing_ok=True)
            raise ForgeError(f"Download of {url} failed: {exc}") from exc
        except ForgeError:
            partial.unlink(missing_ok=True)
            raise
        except OSError as exc:
            partial.unlink(missing_ok=True)
            raise ForgeError(f"Failed to write {destination}: {exc}") from exc
        return sha.hexdigest()

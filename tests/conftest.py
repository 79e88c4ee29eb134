"""Shared fixtures for dws tests.

Provides temporary XDG workspaces, in-memory release archives and a fake
GitHub API built on ``httpx.MockTransport``. No test touches the network.
"""

from __future__ import annotations

import hashlib
import io
import json
import tarfile
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from dws.forge import GitHubClient
from dws.workspace import WorkspacePaths


# ---------------------------------------------------------------------------
# Archives
# ---------------------------------------------------------------------------


def _build_tar_gz(files: dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(content))
    return buf.getvalue()


@pytest.fixture
def make_tar_gz() -> Callable[[dict[str, bytes]], bytes]:
    """Factory turning ``{member: content}`` into gzipped tar bytes."""
    return _build_tar_gz


def sha256_of(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


@pytest.fixture
def digest() -> Callable[[bytes], str]:
    """Hex SHA-256 of a byte string."""
    return sha256_of


# ---------------------------------------------------------------------------
# Fake GitHub
# ---------------------------------------------------------------------------


class FakeGitHub:
    """Serves release metadata and asset bytes for ``owner/repo`` projects.

    ``releases[(project, tag_or_None)]`` holds the JSON body; ``assets[url]``
    holds download bytes. ``requests`` records every URL requested.
    """

    def __init__(self) -> None:
        self.releases: dict[tuple[str, str | None], dict] = {}
        self.assets: dict[str, bytes] = {}
        self.requests: list[str] = []

    def add_release(
        self,
        project: str,
        tag: str,
        assets: dict[str, bytes],
        pinned: bool = False,
    ) -> None:
        body = {
            "tag_name": tag,
            "assets": [
                {
                    "name": name,
                    "browser_download_url": f"https://downloads.test/{project}/{tag}/{name}",
                    "size": len(data),
                    "state": "uploaded",
                }
                for name, data in assets.items()
            ],
        }
        self.releases[(project, tag if pinned else None)] = body
        self.releases[(project, tag)] = body
        for name, data in assets.items():
            self.assets[f"https://downloads.test/{project}/{tag}/{name}"] = data

    def downloads(self) -> list[str]:
        return [url for url in self.requests if url.startswith("https://downloads.test/")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        if url in self.assets:
            return httpx.Response(200, content=self.assets[url])
        prefix = "https://api.github.com/repos/"
        if url.startswith(prefix):
            rest = url[len(prefix):]
            repo, _, tail = rest.partition("/releases/")
            tag = None if tail == "latest" else tail.removeprefix("tags/")
            body = self.releases.get((repo, tag))
            if body is not None:
                return httpx.Response(200, text=json.dumps(body))
            return httpx.Response(404, text='{"message": "Not Found"}')
        return httpx.Response(404, text="missing")

    def client(self) -> GitHubClient:
        return GitHubClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


# ---------------------------------------------------------------------------
# Workspaces
# ---------------------------------------------------------------------------


@pytest.fixture
def xdg_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Point the XDG variables at fresh directories under ``tmp_path``."""
    env = {
        "XDG_CONFIG_HOME": str(tmp_path / "config"),
        "XDG_STATE_HOME": str(tmp_path / "state"),
        "XDG_CACHE_HOME": str(tmp_path / "cache"),
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    for key in ("DWS_GITHUB_TOKEN", "GITHUB_TOKEN", "DWS_GITHUB_USER_AGENT"):
        monkeypatch.delenv(key, raising=False)
    return env


@pytest.fixture
def workspace_paths(xdg_env: dict[str, str]) -> WorkspacePaths:
    """Layout of an initialized workspace with an empty default profile."""
    paths = WorkspacePaths.from_env(xdg_env)
    paths.profile_dir.mkdir(parents=True)
    return paths


class RecordingReporter:
    """Reporter that keeps every message as ``(level, text)``."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def status(self, label: str, message: str) -> None:
        self.messages.append(("status", f"{label}: {message}"))

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def warn(self, message: str) -> None:
        self.messages.append(("warn", message))

    def success(self, label: str, message: str) -> None:
        self.messages.append(("success", f"{label}: {message}"))

    def texts(self, level: str | None = None) -> list[str]:
        return [text for lvl, text in self.messages if level is None or lvl == level]


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()

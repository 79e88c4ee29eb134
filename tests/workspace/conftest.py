"""Fixtures for orchestrator tests: a profile manifest plus a fake forge."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from dws.workspace import Workspace, WorkspacePaths

RG_ASSET = "ripgrep-14.1.0-x86_64-unknown-linux-musl.tar.gz"
FD_ASSET = "fd-v9.0.0-x86_64-unknown-linux-gnu.tar.gz"


@pytest.fixture
def rg_archive(make_tar_gz) -> bytes:
    return make_tar_gz({"ripgrep-14.1.0/rg": b"rg", "ripgrep-14.1.0/doc/rg.1": b"man"})


@pytest.fixture
def fd_archive(make_tar_gz) -> bytes:
    return make_tar_gz({"fd-v9.0.0/fd": b"fd"})


@pytest.fixture
def write_manifest(workspace_paths: WorkspacePaths) -> Callable[[str], None]:
    def write(text: str) -> None:
        workspace_paths.profile_manifest.write_text(text)
    return write


@pytest.fixture
def tool_manifest(digest, rg_archive: bytes, fd_archive: bytes) -> str:
    """Manifest text declaring ripgrep and fd with correct checksums."""
    return (
        "[tools.ripgrep]\n"
        'installer = "github"\n'
        'project = "BurntSushi/ripgrep"\n'
        'asset_filter = ["x86_64.*tar.gz$"]\n'
        f'checksum = "sha256:{digest(rg_archive)}"\n'
        "[[tools.ripgrep.bin]]\n"
        'source = "rg"\n'
        "[[tools.ripgrep.extras]]\n"
        'source = "rg.1"\n'
        'kind = "man"\n'
        "\n"
        "[tools.fd]\n"
        'installer = "github"\n'
        'project = "sharkdp/fd"\n'
        'asset_filter = ["x86_64.*linux"]\n'
        f'checksum = "sha256:{digest(fd_archive)}"\n'
        "[[tools.fd.bin]]\n"
        'source = "fd"\n'
    )


@pytest.fixture
def forge(fake_github, rg_archive: bytes, fd_archive: bytes):
    fake_github.add_release("BurntSushi/ripgrep", "14.1.0", {RG_ASSET: rg_archive})
    fake_github.add_release("sharkdp/fd", "v9.0.0", {FD_ASSET: fd_archive})
    return fake_github


@pytest.fixture
def make_workspace(workspace_paths: WorkspacePaths, reporter) -> Callable[..., Workspace]:
    def make(client, **kwargs) -> Workspace:
        return Workspace(
            workspace_paths,
            client=client,
            reporter=reporter,
            platform_tags={"linux", "linux-x86_64"},
            host_slug="box",
            **kwargs,
        )
    return make

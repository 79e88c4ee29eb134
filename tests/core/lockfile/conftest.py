"""Fixtures for lockfile tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from dws.core.lockfile import AssetRecord, BinaryLink, ExtraLink, Lockfile
from dws.core.manifest import ExtraKind, InstallerKind


@pytest.fixture
def populated_lockfile(tmp_path: Path) -> Lockfile:
    """A lockfile with one config link and two receipts."""
    cache = tmp_path / "cache" / "tools"
    lock = Lockfile()
    lock.record_config_symlink(tmp_path / "profile" / "config" / "git", tmp_path / "home" / "git")
    lock.record_tool_install(
        "ripgrep",
        "latest",
        "14.1.0",
        InstallerKind.GITHUB,
        [BinaryLink("rg", cache / "ripgrep" / "14.1.0" / "contents" / "rg", tmp_path / "bin" / "rg")],
        [ExtraLink(ExtraKind.MAN, cache / "ripgrep" / "14.1.0" / "contents" / "rg.1",
                   tmp_path / "share" / "man" / "man1" / "rg.1")],
        AssetRecord(
            name="rg.tar.gz",
            url="https://example.test/rg.tar.gz",
            checksum="ab" * 32,
            archive_path=cache / "ripgrep" / "14.1.0" / "rg.tar.gz",
            extract_dir=cache / "ripgrep" / "14.1.0" / "contents",
            pattern_index=1,
            pattern="x86_64",
        ),
    )
    lock.record_tool_install("fd", "v9.0.0", "v9.0.0", InstallerKind.GITHUB, [], [], None)
    return lock

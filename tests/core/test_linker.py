"""Tests for the symlink primitive."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from dws.core import linker


@pytest.fixture
def source(tmp_path: Path) -> Path:
    path = tmp_path / "src" / "tool"
    path.parent.mkdir()
    path.write_text("bin")
    return path


class TestLink:
    def test_creates_symlink_and_parents(self, source: Path, tmp_path: Path) -> None:
        target = tmp_path / "bin" / "nested" / "tool"
        linker.link(source, target)
        assert target.is_symlink()
        assert Path(os.readlink(target)) == source

    @pytest.mark.parametrize("occupant", ["file", "symlink", "broken", "dir"])
    def test_replaces_whatever_occupies_target(
        self, source: Path, tmp_path: Path, occupant: str
    ) -> None:
        target = tmp_path / "tool"
        if occupant == "file":
            target.write_text("user")
        elif occupant == "symlink":
            target.symlink_to(tmp_path)
        elif occupant == "broken":
            target.symlink_to(tmp_path / "gone")
        else:
            target.mkdir()
            (target / "inner").write_text("x")
        linker.link(source, target)
        assert target.is_symlink()
        assert target.read_text() == "bin"

    def test_copy_fallback(
        self, source: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def refuse(*_args, **_kwargs):
            raise OSError("symlinks not permitted")

        monkeypatch.setattr(linker.os, "symlink", refuse)
        target = tmp_path / "tool"
        linker.link(source, target)
        assert not target.is_symlink()
        assert target.read_text() == "bin"


class TestRemoveLink:
    def test_removes_broken_symlink(self, tmp_path: Path) -> None:
        target = tmp_path / "dangling"
        target.symlink_to(tmp_path / "gone")
        assert linker.remove_link(target) is True
        assert not linker.is_symlink(target)

    def test_missing_is_noop(self, tmp_path: Path) -> None:
        assert linker.remove_link(tmp_path / "absent") is False

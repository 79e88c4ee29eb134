"""Tests for merging profile and workspace manifests."""

from __future__ import annotations

from pathlib import Path

from dws.core.manifest import InstallerKind, ToolConfigFile, ToolSpec
from dws.core.resolver import ToolOrigin, ToolSet

PROFILE = Path("/p/dws.toml")
WORKSPACE = Path("/w/config.toml")
TAGS = {"linux", "linux-x86_64"}


def _spec(**kwargs) -> ToolSpec:
    return ToolSpec(installer=InstallerKind.GITHUB, **kwargs)


def _merge(profile: dict, workspace: dict, slug: str = "box") -> ToolSet:
    return ToolSet.from_configs(
        ToolConfigFile(tools=profile), PROFILE,
        ToolConfigFile(tools=workspace), WORKSPACE,
        tags=TAGS, slug=slug,
    )


class TestToolSetMerge:
    def test_applying_override_replaces_profile_entry_wholesale(self) -> None:
        tools = _merge(
            {"rg": _spec(project="a/rg", asset_filter=("linux",), version="v1")},
            {"rg": _spec(project="b/rg")},
        )
        entry = tools.get("rg")
        assert entry.origin is ToolOrigin.WORKSPACE
        assert entry.source == WORKSPACE
        assert entry.definition.project == "b/rg"
        # No per-field merge: the profile's filter and pin are gone.
        assert entry.definition.asset_filter == ()
        assert entry.definition.version is None

    def test_non_applying_override_keeps_profile_entry(self) -> None:
        tools = _merge(
            {"rg": _spec(project="a/rg")},
            {"rg": _spec(project="b/rg", platform=("macos",))},
        )
        assert tools.get("rg").definition.project == "a/rg"
        assert tools.get("rg").origin is ToolOrigin.PROFILE

    def test_host_filter(self) -> None:
        tools = _merge({"work-only": _spec(hosts=("office",)), "any": _spec()}, {}, slug="home")
        assert "work-only" not in tools
        assert "any" in tools

    def test_entries_sorted_by_name(self) -> None:
        tools = _merge({"zoxide": _spec(), "bat": _spec()}, {"fd": _spec()})
        assert list(tools.entries) == ["bat", "fd", "zoxide"]
        assert [d.name for d in tools.definitions()] == ["bat", "fd", "zoxide"]

    def test_load_from_disk_with_missing_override(self, tmp_path: Path) -> None:
        manifest = tmp_path / "dws.toml"
        manifest.write_text('[tools.fd]\ninstaller = "github"\nproject = "sharkdp/fd"\n')
        tools = ToolSet.load(manifest, tmp_path / "absent.toml", tags=TAGS, slug="box")
        assert len(tools) == 1
        assert tools.get("fd").source == manifest

"""Tests for install, update, uninstall, reset, pruning and profile switching."""

from __future__ import annotations

import pytest

from dws.core.lockfile import Lockfile
from dws.core.manifest import ToolConfigFile
from dws.exceptions import WorkspaceBusyError, WorkspaceError
from dws.workspace import WorkspaceLock


def _receipts(paths) -> dict:
    return {r.name: r for r in Lockfile.load(paths.lockfile).tool_receipts()}


class TestInstall:
    """Full install runs against the fake forge."""

    def test_installs_tools_and_records_receipts(
        self, make_workspace, forge, write_manifest, tool_manifest, workspace_paths
    ) -> None:
        write_manifest(tool_manifest)
        make_workspace(forge.client()).install()

        rg = workspace_paths.bin_dir / "rg"
        assert rg.is_symlink()
        assert rg.read_bytes() == b"rg"
        assert (workspace_paths.bin_dir / "fd").is_symlink()

        receipts = _receipts(workspace_paths)
        assert receipts["ripgrep"].resolved_version == "14.1.0"
        assert receipts["ripgrep"].manifest_version == "latest"
        assert receipts["fd"].binaries[0].target == workspace_paths.bin_dir / "fd"

    def test_reports_progress(
        self, make_workspace, forge, write_manifest, tool_manifest, reporter
    ) -> None:
        write_manifest(tool_manifest)
        make_workspace(forge.client()).install()
        successes = reporter.texts("success")
        assert "Installed: fd version v9.0.0 (1/2)" in successes
        assert "Installed: ripgrep version 14.1.0 (2/2)" in successes
        assert successes[-1] == "Finished: installed 2 tool(s): fd (v9.0.0), ripgrep (14.1.0)"

    def test_links_dotfiles(self, make_workspace, forge, workspace_paths, write_manifest) -> None:
        write_manifest("")
        config_dir = workspace_paths.profile_config_dir
        (config_dir / "git").mkdir(parents=True)
        (config_dir / "starship.toml").write_text("")
        make_workspace(forge.client()).install()

        assert (workspace_paths.config_home / "git").is_symlink()
        lock = Lockfile.load(workspace_paths.lockfile)
        assert [e.target.name for e in lock.config_symlinks()] == ["git", "starship.toml"]

    def test_empty_profile_reports_no_tools(
        self, make_workspace, forge, write_manifest, reporter, workspace_paths
    ) -> None:
        write_manifest("")
        make_workspace(forge.client()).install()
        assert "No tools defined for the active profile." in reporter.texts("info")
        assert workspace_paths.lockfile.exists()

    def test_unsupported_installer_is_skipped(
        self, make_workspace, forge, write_manifest, reporter, workspace_paths
    ) -> None:
        write_manifest('[tools.slack]\ninstaller = "flatpak"\n')
        make_workspace(forge.client()).install()
        assert (
            "Skipping tool 'slack' - installer 'flatpak' is not yet supported"
            in reporter.texts("warn")
        )
        assert _receipts(workspace_paths) == {}

    def test_removed_tool_is_unlinked_and_pruned(
        self, make_workspace, forge, write_manifest, tool_manifest, workspace_paths
    ) -> None:
        write_manifest(tool_manifest)
        make_workspace(forge.client()).install()
        write_manifest(tool_manifest.split("[tools.fd]")[0])
        make_workspace(forge.client()).install()

        assert not (workspace_paths.bin_dir / "fd").exists()
        assert not (workspace_paths.cache_tools_dir / "fd").exists()
        assert list(_receipts(workspace_paths)) == ["ripgrep"]

    def test_failure_while_preparing_keeps_previous_lockfile(
        self, make_workspace, fake_github, write_manifest, tool_manifest, workspace_paths
    ) -> None:
        write_manifest(tool_manifest)
        Lockfile().save(workspace_paths.lockfile)
        before = workspace_paths.lockfile.read_text()

        with pytest.raises(WorkspaceError, match="Failed to install tool 'fd'") as excinfo:
            make_workspace(fake_github.client()).install()
        assert "GitHub release not found" in str(excinfo.value.__cause__)
        assert workspace_paths.lockfile.read_text() == before

    def test_finished_tools_stay_recorded_after_failure(
        self, make_workspace, forge, write_manifest, tool_manifest, digest, workspace_paths
    ) -> None:
        rg_checksum = tool_manifest.split("sha256:")[1].split('"')[0]
        write_manifest(tool_manifest.replace(rg_checksum, digest(b"other")))

        with pytest.raises(WorkspaceError, match="Failed to install tool 'ripgrep'"):
            make_workspace(forge.client()).install()
        assert list(_receipts(workspace_paths)) == ["fd"]
        assert not (workspace_paths.bin_dir / "rg").exists()


class TestUpdate:
    """Update skips current tools and reinstalls changed ones."""

    def test_already_current_tools_are_skipped(
        self, make_workspace, forge, write_manifest, tool_manifest, reporter
    ) -> None:
        write_manifest(tool_manifest)
        workspace = make_workspace(forge.client())
        workspace.install()
        workspace.update()
        assert "'ripgrep' is already at version '14.1.0'; skipping." in reporter.texts("info")
        assert reporter.texts("success")[-1] == "Finished: all tools are up to date."

    def test_missing_link_triggers_reinstall(
        self, make_workspace, forge, write_manifest, tool_manifest, reporter, workspace_paths
    ) -> None:
        write_manifest(tool_manifest)
        workspace = make_workspace(forge.client())
        workspace.install()
        (workspace_paths.bin_dir / "rg").unlink()

        workspace.update("ripgrep")
        assert any("required files are missing" in text for text in reporter.texts("warn"))
        assert (workspace_paths.bin_dir / "rg").is_symlink()

    def test_new_release_replaces_receipt(
        self, make_workspace, forge, write_manifest, tool_manifest, workspace_paths, rg_archive
    ) -> None:
        write_manifest(tool_manifest)
        workspace = make_workspace(forge.client())
        workspace.install()

        forge.add_release(
            "BurntSushi/ripgrep",
            "14.2.0",
            {"ripgrep-14.2.0-x86_64-unknown-linux-musl.tar.gz": rg_archive},
        )
        workspace.update("ripgrep")

        receipts = _receipts(workspace_paths)
        assert receipts["ripgrep"].resolved_version == "14.2.0"
        assert receipts["fd"].resolved_version == "v9.0.0"
        assert not (workspace_paths.cache_tools_dir / "ripgrep" / "14.1.0").exists()
        assert (workspace_paths.bin_dir / "rg").resolve().is_relative_to(
            workspace_paths.cache_tools_dir / "ripgrep" / "14.2.0"
        )

    def test_progress_is_labelled_update(
        self, make_workspace, forge, write_manifest, tool_manifest, reporter, rg_archive
    ) -> None:
        write_manifest(tool_manifest)
        workspace = make_workspace(forge.client())
        workspace.install()
        forge.add_release(
            "BurntSushi/ripgrep",
            "14.2.0",
            {"ripgrep-14.2.0-x86_64-unknown-linux-musl.tar.gz": rg_archive},
        )
        workspace.update("ripgrep")

        statuses = reporter.texts("status")
        assert "Install: 2 tools queued" in statuses
        assert statuses[-1] == "Update: 1 tool queued"

    def test_pinned_and_self_updating_tools_are_skipped(
        self, make_workspace, forge, write_manifest, reporter
    ) -> None:
        write_manifest(
            "[tools.ripgrep]\n"
            'installer = "github"\n'
            'project = "BurntSushi/ripgrep"\n'
            'version = "14.1.0"\n'
            "[tools.rustup]\n"
            'installer = "script"\n'
            "self_update = true\n"
        )
        make_workspace(forge.client()).update()
        infos = reporter.texts("info")
        assert "Skipping 'ripgrep' because it is pinned to version '14.1.0'." in infos
        assert "Skipping 'rustup' because it maintains itself (self_update = true)." in infos
        assert infos[-1] == "No tools eligible for update."

    def test_unknown_tool_is_an_error(
        self, make_workspace, forge, write_manifest, tool_manifest
    ) -> None:
        write_manifest(tool_manifest)
        with pytest.raises(WorkspaceError, match="Tool 'bat' is not defined"):
            make_workspace(forge.client()).update("bat")


class TestUninstall:
    def test_removes_links_state_and_cache(
        self, make_workspace, forge, write_manifest, tool_manifest, workspace_paths
    ) -> None:
        write_manifest(tool_manifest)
        (workspace_paths.profile_config_dir / "nvim").mkdir(parents=True)
        workspace = make_workspace(forge.client())
        workspace.install()

        workspace.uninstall()
        assert not (workspace_paths.config_home / "nvim").exists()
        assert not workspace_paths.state_dir.exists()
        assert not workspace_paths.cache_dir.exists()
        assert workspace_paths.profile_config_dir.is_dir()

    def test_user_directory_at_recorded_target_survives(
        self, make_workspace, forge, write_manifest, workspace_paths, reporter
    ) -> None:
        write_manifest("")
        (workspace_paths.profile_config_dir / "nvim").mkdir(parents=True)
        workspace = make_workspace(forge.client())
        workspace.install()

        target = workspace_paths.config_home / "nvim"
        target.unlink()
        target.mkdir()
        (target / "init.lua").write_text("-- mine")

        workspace.uninstall()
        assert (target / "init.lua").read_text() == "-- mine"
        assert any(text.startswith(f"Leaving {target} in place") for text in reporter.texts("warn"))

    def test_without_lockfile_still_clears_cache(
        self, make_workspace, forge, workspace_paths
    ) -> None:
        (workspace_paths.cache_tools_dir / "old" / "1.0").mkdir(parents=True)
        make_workspace(forge.client()).uninstall()
        assert not workspace_paths.cache_dir.exists()

    def test_leaves_user_files_outside_state(
        self, make_workspace, forge, workspace_paths
    ) -> None:
        user_file = workspace_paths.config_home / "unrelated.conf"
        user_file.parent.mkdir(parents=True, exist_ok=True)
        user_file.write_text("keep")
        make_workspace(forge.client()).uninstall()
        assert user_file.read_text() == "keep"


class TestPruning:
    def test_bin_prune_keeps_real_files_and_recorded_links(
        self, make_workspace, forge, write_manifest, tool_manifest, workspace_paths
    ) -> None:
        write_manifest(tool_manifest)
        workspace = make_workspace(forge.client())
        workspace.install()

        bin_dir = workspace_paths.bin_dir
        (bin_dir / "my-script").write_text("#!/bin/sh\n")
        (bin_dir / "stale").symlink_to(workspace_paths.state_dir / "nowhere")

        workspace.prune_unused_bin(workspace.load_lockfile())
        assert (bin_dir / "my-script").is_file()
        assert not (bin_dir / "stale").is_symlink()
        assert (bin_dir / "rg").is_symlink()

    def test_cache_prune_drops_unreferenced_versions(
        self, make_workspace, forge, write_manifest, tool_manifest, workspace_paths
    ) -> None:
        write_manifest(tool_manifest)
        workspace = make_workspace(forge.client())
        workspace.install()

        stale = workspace_paths.cache_tools_dir / "ripgrep" / "13.0.0"
        stale.mkdir()
        orphan = workspace_paths.cache_tools_dir / "bat" / "0.24.0"
        orphan.mkdir(parents=True)

        workspace.prune_unused_cache(workspace.load_lockfile())
        assert not stale.exists()
        assert not orphan.parent.exists()
        assert (workspace_paths.cache_tools_dir / "ripgrep" / "14.1.0").is_dir()


class TestLocking:
    def test_concurrent_run_is_refused(
        self, make_workspace, forge, write_manifest, workspace_paths
    ) -> None:
        write_manifest("")
        other = WorkspaceLock(workspace_paths.run_lock)
        with other.hold():
            with pytest.raises(WorkspaceBusyError):
                make_workspace(forge.client()).install()
        assert not other.held

    def test_lock_released_after_failure(
        self, make_workspace, fake_github, write_manifest, tool_manifest, workspace_paths
    ) -> None:
        write_manifest(tool_manifest)
        workspace = make_workspace(fake_github.client())
        with pytest.raises(WorkspaceError):
            workspace.install()
        assert not workspace.lock.held
        with WorkspaceLock(workspace_paths.run_lock).hold() as lock:
            assert lock.held


class TestReset:
    def test_declined_confirmation_changes_nothing(
        self, make_workspace, forge, write_manifest, tool_manifest, reporter, workspace_paths
    ) -> None:
        write_manifest(tool_manifest)
        workspace = make_workspace(forge.client(), confirm=lambda: False)
        workspace.install()
        before = workspace_paths.lockfile.read_text()

        assert workspace.reset() is False
        assert "Reset cancelled." in reporter.texts("info")
        assert workspace_paths.lockfile.read_text() == before

    def test_non_git_profile_reinstalls(
        self, make_workspace, forge, write_manifest, tool_manifest, reporter, workspace_paths
    ) -> None:
        write_manifest(tool_manifest)
        workspace = make_workspace(forge.client(), confirm=lambda: True)
        workspace.install()
        (workspace_paths.bin_dir / "rg").unlink()

        assert workspace.reset() is True
        assert any("is not a git repository" in text for text in reporter.texts("info"))
        assert (workspace_paths.bin_dir / "rg").is_symlink()
        assert reporter.texts("success")[-1] == "Finished: workspace reset complete."

    def test_missing_profile_is_an_error(self, make_workspace, forge, workspace_paths) -> None:
        workspace_paths.profile_dir.rmdir()
        with pytest.raises(WorkspaceError, match="does not exist"):
            make_workspace(forge.client()).reset(force=True)


class TestProfiles:
    """Creating profiles with init and switching between them."""

    def test_init_creates_template_and_activates_it(
        self, make_workspace, forge, workspace_paths, reporter
    ) -> None:
        workspace = make_workspace(forge.client())
        workspace.init("work")

        root = workspace_paths.profiles_dir / "work"
        assert (root / "dws.toml").is_file()
        assert (root / "config").is_dir()
        assert workspace.paths.active_profile == "work"
        assert ToolConfigFile.load(workspace_paths.workspace_config).active_profile == "work"
        assert "Created: profile at " + str(root) in reporter.texts("status")
        assert reporter.texts("success")[-1] == "Finished: workspace initialized (profile 'work')"
        assert Lockfile.load(workspace_paths.lockfile) is not None

    def test_init_keeps_existing_manifest(
        self, make_workspace, forge, write_manifest, tool_manifest, workspace_paths, reporter
    ) -> None:
        write_manifest(tool_manifest)
        workspace = make_workspace(forge.client())
        workspace.init()

        assert workspace_paths.profile_manifest.read_text() == tool_manifest
        assert (workspace_paths.bin_dir / "rg").is_symlink()
        assert any(text.startswith("Reusing: ") for text in reporter.texts("status"))

    def test_use_switches_profile_and_relinks(
        self, make_workspace, forge, write_manifest, workspace_paths, reporter
    ) -> None:
        write_manifest("")
        (workspace_paths.profile_config_dir / "git").mkdir(parents=True)
        workspace_paths.workspace_config.write_text('theme = "dark"\n')
        workspace = make_workspace(forge.client())
        workspace.install()

        other = workspace_paths.profiles_dir / "work"
        (other / "config" / "nvim").mkdir(parents=True)
        (other / "dws.toml").write_text("")

        assert workspace.use_profile("work") is True
        assert not (workspace_paths.config_home / "git").exists()
        assert (workspace_paths.config_home / "nvim").is_symlink()

        config = ToolConfigFile.load(workspace_paths.workspace_config)
        assert config.active_profile == "work"
        assert config.extras == {"theme": "dark"}
        lock = Lockfile.load(workspace_paths.lockfile)
        assert [e.target.name for e in lock.config_symlinks()] == ["nvim"]
        assert reporter.texts("success")[-1] == "Finished: profile 'work' is active now"

    def test_use_active_profile_is_a_no_op(
        self, make_workspace, forge, workspace_paths, reporter
    ) -> None:
        workspace = make_workspace(forge.client())
        assert workspace.use_profile("default") is False
        assert "Profile 'default' is already active." in reporter.texts("info")
        assert not workspace_paths.workspace_config.exists()

    def test_use_missing_profile_is_an_error(self, make_workspace, forge, workspace_paths) -> None:
        with pytest.raises(WorkspaceError, match="Profile 'ghost' does not exist"):
            make_workspace(forge.client()).use_profile("ghost")
        assert not workspace_paths.workspace_config.exists()

    @pytest.mark.parametrize("name", ["", "..", "a/b"])
    def test_invalid_profile_names(self, make_workspace, forge, name: str) -> None:
        workspace = make_workspace(forge.client())
        with pytest.raises(WorkspaceError, match="Invalid profile name"):
            workspace.use_profile(name)

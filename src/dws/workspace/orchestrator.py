"""Reconciliation orchestrator: install, update, uninstall, reset, prune.

Also creates template profiles (``init``) and switches between profiles
(``use_profile``).

The previous lockfile is the source of truth for what currently exists on
disk. A run builds a fresh (install) or pruned (update) ``Lockfile``,
saves it atomically after every tool that finishes, and saves it once
more after pruning. Tools run strictly one after another.

Public entry points take the run lock; the underscored variants assume
the caller already holds it so ``reset`` can chain them under one lock.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Iterable
from dataclasses import replace
from pathlib import Path

import click

from dws.core import linker
from dws.core.lockfile import Lockfile, ToolReceipt
from dws.core.manifest import ToolConfigFile, ToolDefinition
from dws.core.resolver import ToolSet
from dws.exceptions import DwsError, WorkspaceError
from dws.forge import GitHubClient
from dws.installers import InstallContext, InstallTask, create_installer
from dws.workspace.dotfiles import Dotfiles
from dws.workspace.git import ProfileRepository
from dws.workspace.locking import WorkspaceLock
from dws.workspace.paths import WorkspacePaths
from dws.workspace.profile import write_profile_template
from dws.workspace.reporting import LoggingReporter, Reporter

logger = logging.getLogger(__name__)

RESET_PROMPT = "This will reinstall all tools and dotfiles. Continue?"


def _confirm_reset() -> bool:
    return click.confirm(RESET_PROMPT, default=False)


def _receipt_is_current(receipt: ToolReceipt) -> bool:
    """True when every recorded source exists and every target is a symlink."""
    links = [(b.source, b.target) for b in receipt.binaries]
    links += [(e.source, e.target) for e in receipt.extras]
    return all(
        source.exists() and target.exists() and linker.is_symlink(target)
        for source, target in links
    )


class Workspace:
    """Drives the tool lifecycle for one workspace.

    Args:
        paths: Directory layout.
        client: Forge client; built from the environment when None.
        reporter: Receives user-facing progress messages.
        confirm: Asked before a non-forced reset; ``click.confirm`` by
            default.
        platform_tags: Override of the detected platform tags.
        host_slug: Override of the detected host slug.
    """

    def __init__(
        self,
        paths: WorkspacePaths,
        client: GitHubClient | None = None,
        reporter: Reporter | None = None,
        confirm: Callable[[], bool] | None = None,
        platform_tags: set[str] | None = None,
        host_slug: str | None = None,
    ) -> None:
        self.paths = paths
        self.client = client if client is not None else GitHubClient.from_env()
        self.reporter: Reporter = reporter if reporter is not None else LoggingReporter()
        self.confirm = confirm if confirm is not None else _confirm_reset
        self._platform_tags = platform_tags
        self._host_slug = host_slug
        self.lock = WorkspaceLock(paths.run_lock)

    # -- Queries ------------------------------------------------------------

    def exists(self) -> bool:
        """A workspace is initialized once its active profile directory exists."""
        return self.paths.profile_dir.is_dir()

    def tools(self) -> ToolSet:
        return ToolSet.load(
            self.paths.profile_manifest,
            self.paths.workspace_config,
            tags=self._platform_tags,
            slug=self._host_slug,
        )

    def dotfiles(self) -> Dotfiles:
        return Dotfiles(self.paths.profile_config_dir, self.paths.dotfiles_target)

    def load_lockfile(self) -> Lockfile | None:
        return Lockfile.load(self.paths.lockfile)

    # -- Public operations --------------------------------------------------

    def install(self) -> None:
        """Link dotfiles, install every resolved tool, prune, save.

        Raises:
            WorkspaceBusyError: If another run holds the workspace lock.
            DwsError: If any step fails; tools finished before the failure
                stay recorded in the saved lockfile.
        """
        with self.lock.hold():
            self._install()

    def update(self, name: str | None = None) -> None:
        """Reinstall tools whose latest release differs from the receipt.

        Args:
            name: Restrict the update to one tool.

        Raises:
            WorkspaceError: If ``name`` is not defined.
            DwsError: If a reinstall fails.
        """
        with self.lock.hold():
            self._update(name)

    def uninstall(self) -> None:
        """Remove every recorded link and delete the state and cache dirs."""
        with self.lock.hold():
            self._uninstall()
        self._discard_run_lock()

    def reset(self, force: bool = False) -> bool:
        """Uninstall, reset the profile repository to upstream, reinstall.

        Args:
            force: Skip the clean-worktree check and the confirmation.

        Returns:
            False when the user declined the confirmation.

        Raises:
            WorkspaceError: If the profile is missing, the worktree is dirty
                (without ``force``) or a step fails.
        """
        profile_dir = self.paths.profile_dir
        if not profile_dir.is_dir():
            raise WorkspaceError(
                f"Active profile at {profile_dir} does not exist. Run 'dws init' first."
            )

        repo: ProfileRepository | None = ProfileRepository(profile_dir)
        if not repo.is_repository():
            self.reporter.info(
                f"Skipping git reset: active profile '{self.paths.active_profile}' "
                "is not a git repository."
            )
            repo = None

        if repo is not None and not force:
            repo.ensure_clean()

        if not force and not self.confirm():
            self.reporter.info("Reset cancelled.")
            return False

        with self.lock.hold():
            try:
                self._uninstall()
            except DwsError as exc:
                raise WorkspaceError("Failed to uninstall existing workspace state") from exc
            self.reporter.success("Cleaned", "workspace state removed")

            if repo is not None:
                try:
                    target = repo.reset_to_upstream()
                except DwsError as exc:
                    raise WorkspaceError("Failed to reset profile repository") from exc
                self.reporter.success("Reset", f"profile repository to {target}")

            try:
                self._install()
            except DwsError as exc:
                raise WorkspaceError("Failed to reinstall workspace after reset") from exc

        self.reporter.success("Finished", "workspace reset complete.")
        return True

    def init(self, profile: str | None = None) -> None:
        """Create a template profile if needed, activate it and install.

        Args:
            profile: Profile to create; defaults to the active profile.

        Raises:
            WorkspaceError: If the name is invalid or the template cannot
                be written.
        """
        name = profile or self.paths.active_profile
        _check_profile_name(name)
        with self.lock.hold():
            created = write_profile_template(self.paths.profiles_dir / name)
            verb = "Created" if created else "Reusing"
            self.reporter.status(verb, f"profile at {self.paths.profiles_dir / name}")
            self._set_active_profile(name)
            self._install()
        self.reporter.success("Finished", f"workspace initialized (profile '{name}')")

    def use_profile(self, name: str) -> bool:
        """Switch the active profile and reinstall from it.

        Links recorded for the previous profile are removed before the new
        profile's dotfiles and tools are installed.

        Returns:
            False when ``name`` is already active.

        Raises:
            WorkspaceError: If the profile does not exist.
            DwsError: If the reinstall fails.
        """
        _check_profile_name(name)
        if name == self.paths.active_profile:
            self.reporter.info(f"Profile '{name}' is already active.")
            return False
        if not (self.paths.profiles_dir / name).is_dir():
            raise WorkspaceError(f"Profile '{name}' does not exist")

        with self.lock.hold():
            previous = self.load_lockfile()
            if previous is not None:
                self.remove_tracked_symlinks(previous)
            self._set_active_profile(name)
            self.reporter.status("Switching", f"profile '{name}'")
            self._install()
        self.reporter.success("Finished", f"profile '{name}' is active now")
        return True

    def _set_active_profile(self, name: str) -> None:
        config_path = self.paths.workspace_config
        config = ToolConfigFile.load(config_path)
        config.active_profile = name
        config.save(config_path)
        self.paths = replace(self.paths, active_profile=name)
        logger.debug("Active profile set to %s in %s", name, config_path)

    # -- Install ------------------------------------------------------------

    def _install(self) -> None:
        tools = self.tools()

        previous = self.load_lockfile()
        if previous is not None:
            self.remove_tracked_symlinks(previous)

        lockfile = Lockfile()
        for entry in self.dotfiles().discover_entries():
            entry.install()
            lockfile.record_config_symlink(entry.source, entry.target)

        context = self.prepare_install_context()
        tasks = self._build_tasks(tools.definitions(), context, "install")
        if not tasks:
            self.reporter.info("No tools defined for the active profile.")

        installed = self._execute(tasks, lockfile, "Installed", "install")
        self._finish(lockfile)

        if installed:
            self.reporter.success(
                "Finished",
                f"installed {len(installed)} tool(s): {_summary(installed)}",
            )

    # -- Update -------------------------------------------------------------

    def _update(self, requested: str | None) -> None:
        tools = self.tools()
        if not tools.entries:
            self.reporter.info("No tools defined for the active profile.")
            return

        if requested is not None:
            entry = tools.get(requested)
            if entry is None:
                raise WorkspaceError(
                    f"Tool '{requested}' is not defined for the active profile "
                    "or workspace overrides."
                )
            selected = [entry.definition]
        else:
            selected = tools.definitions()

        candidates: list[ToolDefinition] = []
        for definition in selected:
            if definition.self_update:
                self.reporter.info(
                    f"Skipping '{definition.name}' because it maintains itself "
                    "(self_update = true)."
                )
            elif definition.version is not None:
                self.reporter.info(
                    f"Skipping '{definition.name}' because it is pinned to version "
                    f"'{definition.version}'."
                )
            else:
                candidates.append(definition)

        if not candidates:
            self.reporter.info("No tools eligible for update.")
            return

        context = self.prepare_install_context()
        tasks = self._build_tasks(candidates, context, "update")
        if not tasks:
            self.reporter.warn("No installers available for the selected tools.")
            return

        lockfile = self.load_lockfile() or Lockfile()
        pending = [task for task in tasks if self._needs_update(task, lockfile)]
        if not pending:
            self.reporter.success("Finished", "all tools are up to date.")
            return

        for task in pending:
            for receipt in lockfile.tool_receipts():
                if receipt.name == task.name:
                    self._remove_links(receipt.link_targets())
            lockfile.retain_tool_receipts(lambda r, name=task.name: r.name != name)

        updated = self._execute(pending, lockfile, "Updated", "update")
        self._finish(lockfile)
        self.reporter.success(
            "Finished", f"updated {len(updated)} tool(s): {_summary(updated)}"
        )

    def _needs_update(self, task: InstallTask, lockfile: Lockfile) -> bool:
        receipts = [r for r in lockfile.tool_receipts() if r.name == task.name]
        if not receipts:
            return True
        resolved = task.resolved_version
        if not all(r.resolved_version == resolved for r in receipts):
            return True
        if all(_receipt_is_current(r) for r in receipts):
            self.reporter.info(f"'{task.name}' is already at version '{resolved}'; skipping.")
            return False
        self.reporter.warn(
            f"'{task.name}' is already at version '{resolved}' but required files "
            "are missing; reinstalling."
        )
        return True

    # -- Task execution -----------------------------------------------------

    def prepare_install_context(self) -> InstallContext:
        """Create the cache, bin and share directories tools install into."""
        paths = self.paths
        directories = (
            paths.cache_tools_dir,
            paths.bin_dir,
            paths.share_dir,
            paths.share_dir / "man",
            paths.share_dir / "zsh" / "site-functions",
        )
        for directory in directories:
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise WorkspaceError(f"Failed to create directory {directory}: {exc}") from exc
        return InstallContext(
            cache_tools_dir=paths.cache_tools_dir,
            state_dir=paths.state_dir,
            bin_dir=paths.bin_dir,
            share_dir=paths.share_dir,
        )

    def _build_tasks(
        self,
        definitions: Iterable[ToolDefinition],
        context: InstallContext,
        action: str,
    ) -> list[InstallTask]:
        tasks: list[InstallTask] = []
        for definition in definitions:
            try:
                installer = create_installer(definition, context, self.client)
            except DwsError as exc:
                raise WorkspaceError(f"Failed to {action} tool '{definition.name}'") from exc
            if installer is None:
                self.reporter.warn(
                    f"Skipping tool '{definition.name}' - installer "
                    f"'{definition.installer.value}' is not yet supported"
                )
                continue
            tasks.append(InstallTask(definition=definition, installer=installer))
        return tasks

    def _execute(
        self,
        tasks: list[InstallTask],
        lockfile: Lockfile,
        success_label: str,
        action: str,
    ) -> list[tuple[str, str]]:
        if not tasks:
            return []
        total = len(tasks)
        self.reporter.status(action.capitalize(), f"{total} tool{'' if total == 1 else 's'} queued")

        done: list[tuple[str, str]] = []
        for position, task in enumerate(tasks, start=1):
            logger.debug("%s %s %s (%d/%d)", action, task.name, task.resolved_version, position, total)
            try:
                outcome = task.installer.install()
            except DwsError as exc:
                raise WorkspaceError(f"Failed to {action} tool '{task.name}'") from exc
            lockfile.record_tool_install(
                outcome.name,
                outcome.manifest_version,
                outcome.resolved_version,
                outcome.installer_kind,
                outcome.binaries,
                outcome.extras,
                outcome.asset,
            )
            lockfile.save(self.paths.lockfile)
            self.reporter.success(
                success_label, f"{task.name} version {outcome.resolved_version} ({position}/{total})"
            )
            done.append((task.name, outcome.resolved_version))
        return done

    def _finish(self, lockfile: Lockfile) -> None:
        self.prune_unused_bin(lockfile)
        self.prune_unused_cache(lockfile)
        lockfile.touch()
        lockfile.save(self.paths.lockfile)

    # -- Removal ------------------------------------------------------------

    def _remove_links(self, targets: Iterable[Path]) -> None:
        """Remove recorded targets that are still symlinks.

        Anything else found at a recorded target was put there by the user
        and is left alone with a warning.
        """
        for target in targets:
            if not linker.is_symlink(target):
                if target.exists():
                    self.reporter.warn(
                        f"Leaving {target} in place: it is no longer a symlink managed by dws."
                    )
                continue
            try:
                linker.remove_link(target)
            except DwsError as exc:
                raise WorkspaceError(f"Failed to remove symlink {target}") from exc

    def remove_tracked_symlinks(self, lockfile: Lockfile) -> None:
        """Remove every config, binary and extra link the lockfile lists."""
        self._remove_links(lockfile.all_link_targets())

    def _uninstall(self) -> None:
        lockfile = self.load_lockfile()
        if lockfile is not None:
            self.remove_tracked_symlinks(lockfile)
            self.paths.lockfile.unlink(missing_ok=True)

        state_dir = self.paths.state_dir
        if state_dir.is_dir():
            for child in state_dir.iterdir():
                if child == self.paths.run_lock:
                    continue
                _remove_tree(child)
        if self.paths.cache_dir.exists():
            _remove_tree(self.paths.cache_dir)

    def _discard_run_lock(self) -> None:
        try:
            self.paths.run_lock.unlink(missing_ok=True)
            if self.paths.state_dir.is_dir() and not any(self.paths.state_dir.iterdir()):
                self.paths.state_dir.rmdir()
        except OSError as exc:
            raise WorkspaceError(f"Failed to remove {self.paths.state_dir}: {exc}") from exc

    # -- Pruning ------------------------------------------------------------

    def prune_unused_cache(self, lockfile: Lockfile) -> None:
        """Delete ``<tool>/<version>`` cache dirs no binary link lives in."""
        tools_dir = self.paths.cache_tools_dir
        if not tools_dir.is_dir():
            return

        in_use: set[Path] = set()
        for binary in lockfile.binary_links():
            for parent in binary.source.parents:
                if not parent.is_relative_to(tools_dir):
                    break
                in_use.add(parent)
                if parent == tools_dir:
                    break

        for tool_path in sorted(tools_dir.iterdir()):
            if not tool_path.is_dir():
                continue
            for version_path in sorted(tool_path.iterdir()):
                if version_path.is_dir() and version_path not in in_use:
                    logger.debug("Pruning cached %s", version_path)
                    _remove_tree(version_path)
            if not any(tool_path.iterdir()):
                try:
                    tool_path.rmdir()
                except OSError as exc:
                    raise WorkspaceError(f"Failed to remove {tool_path}: {exc}") from exc

    def prune_unused_bin(self, lockfile: Lockfile) -> None:
        """Remove bin-dir symlinks that no receipt records; keep real files."""
        bin_dir = self.paths.bin_dir
        if not bin_dir.is_dir():
            return
        valid = {binary.target for binary in lockfile.binary_links()}
        for entry in sorted(bin_dir.iterdir()):
            if entry in valid or not linker.is_symlink(entry):
                continue
            logger.debug("Pruning stale link %s", entry)
            self._remove_links([entry])


def _remove_tree(path: Path) -> None:
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink(missing_ok=True)
    except OSError as exc:
        raise WorkspaceError(f"Failed to remove {path}: {exc}") from exc


def _summary(items: list[tuple[str, str]]) -> str:
    return ", ".join(f"{name} ({version})" for name, version in items)


def _check_profile_name(name: str) -> None:
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        raise WorkspaceError(f"Invalid profile name '{name}'")

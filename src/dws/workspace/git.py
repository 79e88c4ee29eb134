"""The git operations ``dws reset`` needs, via the ``git`` CLI."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from dws.exceptions import WorkspaceError

logger = logging.getLogger(__name__)

MAX_DIRTY_PATHS = 5

# Marker files git leaves in .git while an operation is in progress.
_IN_PROGRESS_MARKERS: tuple[tuple[str, str], ...] = (
    ("MERGE_HEAD", "merge"),
    ("rebase-merge", "rebase"),
    ("rebase-apply", "rebase"),
    ("CHERRY_PICK_HEAD", "cherry-pick"),
    ("REVERT_HEAD", "revert"),
    ("BISECT_LOG", "bisect"),
)


class ProfileRepository:
    """A profile directory that may be a git working tree."""

    def __init__(self, root: Path, git: str = "git") -> None:
        self.root = root
        self.git = git

    def _run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        cmd = [self.git, "-C", str(self.root), *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise WorkspaceError(f"Failed to run git: {exc}") from exc
        if check and result.returncode != 0:
            detail = (result.stderr or result.stdout).strip()
            raise WorkspaceError(f"git {' '.join(args)} failed: {detail}")
        return result

    def is_repository(self) -> bool:
        if not (self.root / ".git").exists():
            return False
        result = self._run("rev-parse", "--is-inside-work-tree", check=False)
        return result.returncode == 0 and result.stdout.strip() == "true"

    def _git_dir(self) -> Path:
        raw = self._run("rev-parse", "--git-dir").stdout.strip()
        path = Path(raw)
        return path if path.is_absolute() else self.root / path

    def in_progress_operation(self) -> str | None:
        git_dir = self._git_dir()
        for marker, operation in _IN_PROGRESS_MARKERS:
            if (git_dir / marker).exists():
                return operation
        return None

    def dirty_paths(self) -> list[str]:
        output = self._run("status", "--porcelain", "--untracked-files=all").stdout
        return [line[3:] for line in output.splitlines() if len(line) > 3]

    def ensure_clean(self) -> None:
        """Refuse to continue when the worktree has local changes.

        Raises:
            WorkspaceError: On an in-progress git operation or any staged,
                unstaged or untracked change.
        """
        operation = self.in_progress_operation()
        if operation is not None:
            raise WorkspaceError(
                f"Repository has an in-progress {operation}. "
                "Finish it first or re-run with --force."
            )
        dirty = self.dirty_paths()
        if not dirty:
            return
        shown = dirty[:MAX_DIRTY_PATHS]
        if len(dirty) > MAX_DIRTY_PATHS:
            shown.append("...")
        raise WorkspaceError(
            f"Profile repository has uncommitted changes: {', '.join(shown)}.\n"
            "Re-run with --force to discard local modifications."
        )

    def fetch(self) -> bool:
        """``git fetch origin``; a failure is logged and reported as False."""
        result = self._run("fetch", "origin", check=False)
        if result.returncode != 0:
            logger.warning("Failed to fetch 'origin': %s", result.stderr.strip())
            return False
        return True

    def reset_target(self) -> str:
        branch = self._run("symbolic-ref", "--quiet", "--short", "HEAD", check=False)
        if branch.returncode == 0 and branch.stdout.strip():
            remote_ref = f"refs/remotes/origin/{branch.stdout.strip()}"
            verify = self._run("rev-parse", "--verify", "--quiet", remote_ref, check=False)
            if verify.returncode == 0:
                return remote_ref
        return "HEAD"

    def reset_to_upstream(self) -> str:
        """Fetch, hard-reset to the upstream branch and remove stray files.

        Returns:
            The ref that was reset to.

        Raises:
            WorkspaceError: If the reset or clean fails.
        """
        self.fetch()
        target = self.reset_target()
        self._run("reset", "--hard", target)
        self._run("clean", "-ffdx")
        return target

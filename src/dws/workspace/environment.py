"""Shell snippets that put the workspace bin, man and completion dirs in use."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from dws.exceptions import WorkspaceError
from dws.workspace.paths import WorkspacePaths


class Shell(str, Enum):
    ZSH = "zsh"
    BASH = "bash"
    FISH = "fish"

    @classmethod
    def from_name(cls, name: str) -> Shell | None:
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class EnvironmentExport:
    """A rendered script and whether the shell fell back to the default."""

    shell: Shell
    script: str
    defaulted: bool = False


def format_for_shell(paths: WorkspacePaths, shell: Shell) -> str:
    bin_path = paths.bin_dir
    man_path = paths.share_dir / "man"
    completions = paths.share_dir / "zsh" / "site-functions"
    if shell is Shell.FISH:
        return f"set -gx PATH {bin_path} $PATH\nset -gx MANPATH {man_path} $MANPATH"
    lines = [
        f'export PATH="{bin_path}:$PATH"',
        f'export MANPATH="{man_path}:${{MANPATH:-}}"',
    ]
    if shell is Shell.ZSH:
        lines.append(f"fpath=({completions} ${{fpath[@]}})")
    return "\n".join(lines)


def environment_script(paths: WorkspacePaths, shell_name: str) -> EnvironmentExport:
    """Render the setup script for ``shell_name``; unknown names use zsh.

    Raises:
        WorkspaceError: If the active profile directory does not exist.
    """
    if not paths.profile_dir.is_dir():
        raise WorkspaceError("Workspace not initialized. Run: dws init")
    shell = Shell.from_name(shell_name)
    defaulted = shell is None
    resolved = shell if shell is not None else Shell.ZSH
    return EnvironmentExport(
        shell=resolved, script=format_for_shell(paths, resolved), defaulted=defaulted
    )

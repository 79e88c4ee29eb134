"""``dws install`` (alias ``sync``) and ``dws update``.

Exit Codes:
    0 - All resolved tools installed (or already current).
    1 - A tool failed; the error and its causes are printed.
"""

from __future__ import annotations

import sys

import click

from dws.cli.context import build_workspace, guarded


@click.command("install")
def install_command() -> None:
    """Link dotfiles and install every tool of the active profile.

    Links recorded by the previous run are removed first, then each tool
    is fetched, verified and linked in name order.
    """
    workspace = build_workspace()
    guarded(workspace.install)
    sys.exit(0)


@click.command("update")
@click.argument("tool", required=False)
def update_command(tool: str | None) -> None:
    """Update TOOL (or every unpinned tool) to its latest release.

    Tools pinned to a version or marked ``self_update`` are skipped.
    """
    workspace = build_workspace()
    guarded(lambda: workspace.update(tool))
    sys.exit(0)

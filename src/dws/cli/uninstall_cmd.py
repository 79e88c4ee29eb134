"""``dws uninstall``: remove every recorded link, the state and the cache."""

from __future__ import annotations

import sys

import click

from dws.cli import output
from dws.cli.context import build_workspace, guarded


@click.command("uninstall")
def uninstall_command() -> None:
    """Remove all links recorded in the lockfile and delete dws state.

    The profile repository and its dotfile sources are left untouched.
    """
    workspace = build_workspace()
    guarded(workspace.uninstall)
    output.success("Finished", "workspace state removed.")
    sys.exit(0)

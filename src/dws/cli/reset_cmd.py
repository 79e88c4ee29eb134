"""``dws reset``: wipe state, reset the profile repository, reinstall."""

from __future__ import annotations

import sys

import click

from dws.cli.context import build_workspace, guarded


@click.command("reset")
@click.option(
    "--force", "-f",
    is_flag=True,
    default=False,
    help="Discard local profile changes and skip the confirmation prompt.",
)
def reset_command(force: bool) -> None:
    """Reset the workspace to the upstream profile and reinstall it.

    Without --force the profile repository must be clean and the
    operation must be confirmed.
    """
    workspace = build_workspace()
    guarded(lambda: workspace.reset(force=force))
    sys.exit(0)

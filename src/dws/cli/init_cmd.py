"""``dws init``: create a template profile, activate it and install it."""

from __future__ import annotations

import sys

import click

from dws.cli.context import build_workspace, guarded


@click.command("init")
@click.option(
    "--profile", "-p",
    default=None,
    help="Profile to create (default: the active profile).",
)
def init_command(profile: str | None) -> None:
    """Create a profile template under the profiles directory.

    Existing files are left untouched, so running init on a populated
    profile only activates and installs it.
    """
    workspace = build_workspace()
    guarded(lambda: workspace.init(profile))
    sys.exit(0)

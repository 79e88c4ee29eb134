"""``dws use`` and ``dws list``: switch between and enumerate profiles."""

from __future__ import annotations

import sys

import click

from dws.cli import output
from dws.cli.context import build_workspace, guarded
from dws.workspace import list_profiles


@click.command("use")
@click.argument("profile")
def use_command(profile: str) -> None:
    """Unlink the current profile, activate PROFILE and install it."""
    workspace = build_workspace()
    guarded(lambda: workspace.use_profile(profile))
    sys.exit(0)


@click.command("list")
def list_command() -> None:
    """List the profiles in the workspace; the active one is starred."""
    workspace = build_workspace()
    names = [p.name for p in list_profiles(workspace.paths.profiles_dir)]
    if not names:
        output.info(f"No profiles found in {workspace.paths.profiles_dir}. Run 'dws init' to create one.")
        sys.exit(0)
    output.print_profiles(names, workspace.paths.active_profile)
    sys.exit(0)

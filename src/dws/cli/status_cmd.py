"""``dws status``: read-only health report of the installed workspace."""

from __future__ import annotations

import sys

import click

from dws.cli import output
from dws.cli.context import build_workspace, guarded
from dws.workspace import collect_status


@click.command("status")
def status_command() -> None:
    """Show the active profile, last install and the health of each link."""
    workspace = build_workspace()
    if not workspace.exists():
        output.warn("Workspace not initialized. Run 'dws init' first.")
        sys.exit(0)

    report = guarded(
        lambda: collect_status(
            workspace.paths.active_profile, workspace.load_lockfile(), workspace.tools()
        )
    )
    output.print_workspace_status(report)
    sys.exit(0)

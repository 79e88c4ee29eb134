"""``dws env [SHELL]``: print shell setup for the workspace directories."""

from __future__ import annotations

import sys

import click

from dws.cli.context import guarded, load_paths
from dws.workspace import environment_script


@click.command("env")
@click.argument("shell", required=False, default="zsh")
def env_command(shell: str) -> None:
    """Print PATH/MANPATH setup for SHELL (zsh, bash or fish).

    Typical use: ``eval "$(dws env zsh)"`` in a shell rc file.
    """
    paths = load_paths()
    export = guarded(lambda: environment_script(paths, shell))
    if export.defaulted:
        click.echo(f"Unknown shell '{shell}'; defaulting to {export.shell.value}.", err=True)
    click.echo(export.script)
    sys.exit(0)

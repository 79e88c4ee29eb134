"""dws CLI: provision a developer toolchain from declarative manifests.

Entry point for the ``dws`` command. Registers all subcommands under a
single Click group.

Commands:
    install    - Link dotfiles and install every tool (alias: sync).
    update     - Move unpinned tools to their latest release.
    uninstall  - Remove every recorded link, the state and the cache.
    status     - Report link and tool health.
    check      - Validate all manifests.
    reset      - Reset the profile repository and reinstall.
    env        - Print shell setup for PATH, MANPATH and completions.
    init       - Create a template profile, activate and install it.
    use        - Switch the active profile and reinstall.
    list       - List the profiles in the workspace.

Usage::

    dws install
    dws update ripgrep
    dws check
    eval "$(dws env zsh)"
"""

from __future__ import annotations

import logging

import click
from rich.logging import RichHandler

from dws import __version__
from dws.cli.check_cmd import check_command
from dws.cli.env_cmd import env_command
from dws.cli.init_cmd import init_command
from dws.cli.output import err_console
from dws.cli.profile_cmd import list_command, use_command
from dws.cli.reset_cmd import reset_command
from dws.cli.status_cmd import status_command
from dws.cli.sync import install_command, update_command
from dws.cli.uninstall_cmd import uninstall_command


def _configure_logging(verbose: bool) -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    root.addHandler(RichHandler(console=err_console, show_path=False))
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group()
@click.version_option(version=__version__, prog_name="dws")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """dws: declarative developer workspaces.

    Resolves the tools your profile declares for this machine, installs
    checksum-verified release artifacts and links their binaries, man
    pages and completions into one managed directory.
    """
    _configure_logging(verbose)


# Register all subcommands
cli.add_command(install_command)
cli.add_command(install_command, name="sync")
cli.add_command(update_command)
cli.add_command(uninstall_command)
cli.add_command(status_command)
cli.add_command(check_command)
cli.add_command(reset_command)
cli.add_command(env_command)
cli.add_command(init_command)
cli.add_command(use_command)
cli.add_command(list_command)

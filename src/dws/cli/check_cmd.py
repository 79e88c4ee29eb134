"""``dws check``: validate every manifest in the workspace.

Exit Codes:
    0 - No issues (or nothing to validate).
    1 - One or more manifest issues, or an unparseable manifest.
"""

from __future__ import annotations

import sys

import click

from dws.cli import output
from dws.cli.context import guarded, load_paths
from dws.workspace import validate_workspace


@click.command("check")
def check_command() -> None:
    """Validate the active profile, all other profiles and overrides."""
    paths = load_paths()
    report = guarded(lambda: validate_workspace(paths))

    if report.ok:
        if report.validated == 0:
            output.info("No manifest files found to validate.")
        else:
            output.success(
                "Check", f"Validated {report.validated} manifest(s) without issues."
            )
        sys.exit(0)

    output.print_issues(report.issues)
    output.error(f"Manifest validation failed ({len(report.issues)} issue(s)).")
    sys.exit(1)

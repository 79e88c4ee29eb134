"""Rich output helpers for the dws CLI.

Every line is built as a ``rich.text.Text`` so manifest snippets such as
``[[tools.x.bin]]`` are printed literally instead of parsed as markup.
Consoles soft-wrap so long paths stay on one line in captured output.
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from dws.core.manifest import ManifestIssue
from dws.workspace import LinkCheck, WorkspaceStatus

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)

_LABEL_WIDTH = 12


def _line(label: str, style: str, message: str) -> Text:
    return Text.assemble((label.rjust(_LABEL_WIDTH), style), " ", message)


def status(label: str, message: str) -> None:
    console.print(_line(label, "bold cyan", message))


def info(message: str) -> None:
    console.print(_line("Info", "bold blue", message))


def warn(message: str) -> None:
    err_console.print(_line("Warning", "bold yellow", message))


def success(label: str, message: str) -> None:
    console.print(_line(label, "bold green", message))


def error(message: str) -> None:
    err_console.print(_line("Error", "bold red", message))


def print_error_chain(exc: BaseException) -> None:
    """Print ``exc`` and every ``__cause__`` beneath it, outermost first."""
    current: BaseException | None = exc
    first = True
    while current is not None:
        if first:
            error(str(current))
            first = False
        else:
            err_console.print(Text.assemble(("  caused by: ", "red"), str(current)))
        current = current.__cause__


class CliReporter:
    """``Reporter`` that routes orchestrator progress to the console."""

    def status(self, label: str, message: str) -> None:
        status(label, message)

    def info(self, message: str) -> None:
        info(message)

    def warn(self, message: str) -> None:
        warn(message)

    def success(self, label: str, message: str) -> None:
        success(label, message)


# ---------------------------------------------------------------------------
# Command-specific reports
# ---------------------------------------------------------------------------


def print_issues(issues: list[ManifestIssue]) -> None:
    for issue in issues:
        err_console.print(Text(issue.format(), style="yellow"))


def print_workspace_status(report: WorkspaceStatus) -> None:
    """Render the output of ``dws status``."""
    success("Active", f"profile '{report.active_profile}'")
    if report.installed_at is None:
        info("Lockfile not found. Run 'dws install' to install the workspace state.")
    else:
        status("Last Sync", report.installed_at)
        broken = [c for c in report.config_links if not c.ok]
        if not report.config_links:
            info("No config symlinks recorded in the lockfile.")
        elif not broken:
            success("Config", f"{len(report.config_links)} item(s) healthy")
        else:
            warn(f"Config check found {len(broken)} issue(s)")
            for check in broken:
                warn(f"Config {check.describe()}")

    if not report.tools:
        info("No tools defined for the active profile.")
    else:
        status("Tools", report.summary)
        table = Table(show_header=True, header_style="bold")
        table.add_column("Tool", style="bold")
        table.add_column("Version")
        table.add_column("Source", style="dim")
        table.add_column("State", justify="center")
        for tool in report.tools:
            if not tool.installed:
                state = Text("not installed", style="yellow")
                version = "-"
            elif tool.healthy:
                state = Text("ok", style="bold green")
                version = tool.receipt.resolved_version
            else:
                state = Text(f"{len(tool.issues)} issue(s)", style="bold red")
                version = tool.receipt.resolved_version
            table.add_row(tool.name, version, tool.origin.value, state)
        console.print(table)

        for tool in report.tools:
            if not tool.installed:
                warn(f"Tool '{tool.name}' is defined but not installed. Run 'dws install' to install it.")
            for check in tool.issues:
                warn(f"Tool '{tool.name}' {tool.receipt.resolved_version}: {check.describe()}")

    for receipt in report.orphans:
        targets = ", ".join(str(t) for t in receipt.link_targets()) or "none"
        warn(
            f"Tool '{receipt.name}' {receipt.resolved_version} is recorded in the lockfile "
            f"but not defined in the active profile (targets: {targets})."
        )


def print_profiles(names: list[str], active: str) -> None:
    """Render the output of ``dws list``, marking the active profile."""
    for name in names:
        if name == active:
            console.print(Text.assemble(("* ", "bold green"), (name, "bold")))
        else:
            console.print(Text(f"  {name}"))

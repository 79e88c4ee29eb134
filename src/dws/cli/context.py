"""Shared plumbing for commands: building the workspace, failing cleanly."""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import NoReturn, TypeVar

from dws.cli import output
from dws.exceptions import DwsError
from dws.workspace import Workspace, WorkspacePaths

T = TypeVar("T")


def fail(exc: DwsError) -> NoReturn:
    output.print_error_chain(exc)
    sys.exit(1)


def load_paths() -> WorkspacePaths:
    try:
        return WorkspacePaths.from_env()
    except DwsError as exc:
        fail(exc)


def build_workspace() -> Workspace:
    return Workspace(load_paths(), reporter=output.CliReporter())


def guarded(action: Callable[[], T]) -> T:
    """Run ``action``; on ``DwsError`` print the cause chain and exit 1."""
    try:
        return action()
    except DwsError as exc:
        fail(exc)

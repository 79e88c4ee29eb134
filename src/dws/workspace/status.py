"""Read-only health report of the installed workspace.

``collect_status`` compares the lockfile against the filesystem and the
currently resolved tool set. It takes no run lock and changes nothing.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from dws.core.lockfile import Lockfile, ToolReceipt
from dws.core.resolver import ToolOrigin, ToolSet


class LinkState(str, Enum):
    OK = "ok"
    MISSING_TARGET = "missing_target"
    NOT_SYMLINK = "not_symlink"
    WRONG_TARGET = "wrong_target"
    MISSING_SOURCE = "missing_source"
    IO_ERROR = "io_error"


@dataclass(frozen=True)
class LinkCheck:
    """Health of one recorded link.

    Attributes:
        source: Path the link should point at.
        target: The link itself.
        state: Result of the inspection.
        detail: Actual destination for ``wrong_target``, error text for
            ``io_error``.
    """

    source: Path
    target: Path
    state: LinkState
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.state is LinkState.OK

    def describe(self) -> str:
        if self.state is LinkState.MISSING_TARGET:
            return f"missing symlink at {self.target} (expected -> {self.source})"
        if self.state is LinkState.NOT_SYMLINK:
            return f"{self.target} exists but is not a symlink"
        if self.state is LinkState.WRONG_TARGET:
            return f"{self.target} points to {self.detail} (expected {self.source})"
        if self.state is LinkState.MISSING_SOURCE:
            return f"source missing at {self.source} (symlink at {self.target})"
        if self.state is LinkState.IO_ERROR:
            return f"failed to inspect {self.target} ({self.detail})"
        return f"{self.target} -> {self.source}"


def check_symlink(source: Path, target: Path) -> LinkCheck:
    """Inspect ``target`` and classify it against the expected ``source``."""
    try:
        if not target.is_symlink():
            state = LinkState.NOT_SYMLINK if os.path.lexists(target) else LinkState.MISSING_TARGET
            return LinkCheck(source, target, state)
        actual = Path(os.readlink(target))
    except OSError as exc:
        return LinkCheck(source, target, LinkState.IO_ERROR, str(exc))

    if not actual.is_absolute():
        actual = target.parent / actual
    if actual != source:
        return LinkCheck(source, target, LinkState.WRONG_TARGET, str(actual))
    if not source.exists():
        return LinkCheck(source, target, LinkState.MISSING_SOURCE)
    return LinkCheck(source, target, LinkState.OK)


@dataclass
class ToolStatus:
    name: str
    origin: ToolOrigin
    source: Path
    receipt: ToolReceipt | None = None
    issues: list[LinkCheck] = field(default_factory=list)

    @property
    def installed(self) -> bool:
        return self.receipt is not None

    @property
    def healthy(self) -> bool:
        return self.installed and not self.issues


@dataclass
class WorkspaceStatus:
    active_profile: str
    installed_at: str | None = None
    config_links: list[LinkCheck] = field(default_factory=list)
    tools: list[ToolStatus] = field(default_factory=list)
    orphans: list[ToolReceipt] = field(default_factory=list)

    @property
    def healthy_count(self) -> int:
        return sum(1 for tool in self.tools if tool.healthy)

    @property
    def summary(self) -> str:
        return f"{self.healthy_count}/{len(self.tools)} installed"


def _receipt_checks(receipt: ToolReceipt) -> list[LinkCheck]:
    checks = [check_symlink(b.source, b.target) for b in receipt.binaries]
    checks += [check_symlink(e.source, e.target) for e in receipt.extras]
    return [check for check in checks if not check.ok]


def collect_status(
    active_profile: str, lockfile: Lockfile | None, tools: ToolSet
) -> WorkspaceStatus:
    status = WorkspaceStatus(active_profile=active_profile)
    receipts: dict[str, ToolReceipt] = {}
    if lockfile is not None:
        status.installed_at = lockfile.metadata.installed_at
        status.config_links = [
            check_symlink(entry.source, entry.target) for entry in lockfile.config_symlinks()
        ]
        for receipt in lockfile.tool_receipts():
            receipts[receipt.name] = receipt

    for name, entry in tools.entries.items():
        receipt = receipts.pop(name, None)
        tool = ToolStatus(name=name, origin=entry.origin, source=entry.source, receipt=receipt)
        if receipt is not None:
            tool.issues = _receipt_checks(receipt)
        status.tools.append(tool)

    status.orphans = [receipts[name] for name in sorted(receipts)]
    return status

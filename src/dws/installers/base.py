"""Shared installer types: the context a task runs in and what it returns."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from dws.core.lockfile import AssetRecord, BinaryLink, ExtraLink
from dws.core.manifest import InstallerKind, ToolDefinition


@dataclass(frozen=True)
class InstallContext:
    """Workspace directories an installer writes into.

    Attributes:
        cache_tools_dir: ``<cache>/tools``; one sub-tree per tool/version.
        state_dir: Workspace state root.
        bin_dir: Directory binaries are linked into.
        share_dir: Directory man pages and other extras are linked into.
    """

    cache_tools_dir: Path
    state_dir: Path
    bin_dir: Path
    share_dir: Path


@dataclass
class InstallOutcome:
    """Everything needed to record a ``ToolReceipt`` for a finished install."""

    name: str
    manifest_version: str
    resolved_version: str
    installer_kind: InstallerKind
    binaries: list[BinaryLink] = field(default_factory=list)
    extras: list[ExtraLink] = field(default_factory=list)
    asset: AssetRecord | None = None


class ToolInstaller(Protocol):
    """A prepared installer for one tool.

    ``resolved_version`` is known before ``install`` runs so the
    orchestrator can decide whether an update is needed.
    """

    definition: ToolDefinition

    @property
    def resolved_version(self) -> str: ...

    def install(self) -> InstallOutcome: ...


@dataclass
class InstallTask:
    """A tool paired with the installer that will provision it."""

    definition: ToolDefinition
    installer: ToolInstaller

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def resolved_version(self) -> str:
        return self.installer.resolved_version

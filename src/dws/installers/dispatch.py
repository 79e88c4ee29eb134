"""Closed dispatch from ``InstallerKind`` to installer backends.

Every ``InstallerKind`` member has an entry. Kinds without a backend map
to None and are skipped by the orchestrator with a warning.
"""

from __future__ import annotations

from collections.abc import Callable

from dws.core.manifest import InstallerKind, ToolDefinition
from dws.forge import GitHubClient
from dws.installers.base import InstallContext, ToolInstaller
from dws.installers.github import GitHubInstaller

InstallerFactory = Callable[[ToolDefinition, InstallContext, GitHubClient], ToolInstaller]

INSTALLERS: dict[InstallerKind, InstallerFactory | None] = {
    InstallerKind.GITHUB: GitHubInstaller.prepare,
    InstallerKind.GITLAB: None,
    InstallerKind.SCRIPT: None,
    InstallerKind.DMG: None,
    InstallerKind.FLATPAK: None,
    InstallerKind.CURL: None,
}


def is_supported(kind: InstallerKind) -> bool:
    return INSTALLERS[kind] is not None


def create_installer(
    definition: ToolDefinition, context: InstallContext, client: GitHubClient
) -> ToolInstaller | None:
    """Build the installer for ``definition``, or None if unsupported.

    Raises:
        KeyError: If ``definition.installer`` has no table entry.
        DwsError: If the backend fails while preparing (e.g. fetching
            release metadata).
    """
    factory = INSTALLERS[definition.installer]
    if factory is None:
        return None
    return factory(definition, context, client)

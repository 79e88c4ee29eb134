"""Installer backends and the dispatch table that selects them."""

from dws.installers.base import InstallContext, InstallOutcome, InstallTask, ToolInstaller
from dws.installers.dispatch import INSTALLERS, create_installer, is_supported
from dws.installers.github import GitHubInstaller

__all__ = [
    "INSTALLERS",
    "GitHubInstaller",
    "InstallContext",
    "InstallOutcome",
    "InstallTask",
    "ToolInstaller",
    "create_installer",
    "is_supported",
]

"""Workspace layout, orchestration and the boundaries it drives."""

from dws.workspace.dotfiles import ConfigEntry, Dotfiles
from dws.workspace.environment import EnvironmentExport, Shell, environment_script
from dws.workspace.git import ProfileRepository
from dws.workspace.locking import WorkspaceLock
from dws.workspace.manifests import ValidationReport, validate_workspace
from dws.workspace.orchestrator import Workspace
from dws.workspace.paths import WorkspacePaths
from dws.workspace.profile import Profile, list_profiles, write_profile_template
from dws.workspace.reporting import LoggingReporter, Reporter
from dws.workspace.status import LinkCheck, LinkState, WorkspaceStatus, collect_status

__all__ = [
    "ConfigEntry",
    "Dotfiles",
    "EnvironmentExport",
    "LinkCheck",
    "LinkState",
    "LoggingReporter",
    "Profile",
    "ProfileRepository",
    "Reporter",
    "Shell",
    "ValidationReport",
    "Workspace",
    "WorkspaceLock",
    "WorkspacePaths",
    "WorkspaceStatus",
    "collect_status",
    "environment_script",
    "list_profiles",
    "validate_workspace",
    "write_profile_template",
]

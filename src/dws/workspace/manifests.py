"""Workspace-wide manifest validation used by ``dws check``."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from dws.core.manifest import ManifestIssue, ToolConfigFile, validate_tool_config
from dws.workspace.paths import WorkspacePaths
from dws.workspace.profile import list_profiles


@dataclass
class ValidationReport:
    validated: int = 0
    issues: list[ManifestIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def _validate(self, manifest: Path) -> None:
        config = ToolConfigFile.load(manifest)
        self.issues.extend(validate_tool_config(manifest, config))
        self.validated += 1


def validate_workspace(paths: WorkspacePaths) -> ValidationReport:
    """Validate the active profile, every other profile, then overrides.

    Raises:
        ManifestError: If a manifest exists but cannot be parsed.
    """
    report = ValidationReport()

    active = paths.profile_manifest
    if active.exists():
        report._validate(active)
    else:
        report.issues.append(ManifestIssue(
            source=active,
            tool=None,
            message=f"active profile '{paths.active_profile}' is missing dws.toml",
        ))
    visited = {active}

    for profile in list_profiles(paths.profiles_dir):
        manifest = profile.manifest
        if manifest in visited:
            continue
        visited.add(manifest)
        if not manifest.exists():
            report.issues.append(ManifestIssue(
                source=manifest,
                tool=None,
                message=f"profile '{profile.name}' is missing dws.toml",
            ))
            continue
        report._validate(manifest)

    if paths.workspace_config.exists():
        report._validate(paths.workspace_config)
    return report

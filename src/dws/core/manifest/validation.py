"""Structural validation of manifest tool declarations.

Validation is deliberately separate from parsing: a manifest that parses
can still describe a tool that cannot be installed (no checksum, no
binaries, a regex that does not compile). These rules never raise. They
return ``ManifestIssue`` records so the ``check`` command can report every
problem at once and callers decide what is fatal.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from dws.core.manifest.models import (
    CHECKSUM_REQUIRED_KINDS,
    ExtraKind,
    InstallerKind,
    ToolConfigFile,
    ToolSpec,
)

_CHECKSUM_RE = re.compile(r"^sha256:[0-9a-fA-F]{64}$")


@dataclass(frozen=True)
class ManifestIssue:
    """One validation problem.

    Attributes:
        source: Manifest file the problem was found in.
        tool: Tool name, or None for file-level problems.
        message: Human-readable description.
    """

    source: Path
    tool: str | None
    message: str

    def format(self) -> str:
        if self.tool is None:
            return f"{self.source}: {self.message}"
        return f"{self.source} ({self.tool}): {self.message}"


def is_valid_checksum(value: str) -> bool:
    """Return True for ``sha256:`` followed by exactly 64 hex characters."""
    return bool(_CHECKSUM_RE.match(value.strip()))


def validate_spec(source: Path, name: str, spec: ToolSpec) -> list[ManifestIssue]:
    """Check one tool declaration against the installer rules.

    Args:
        source: Path of the manifest declaring the tool.
        name: Tool name as written under ``[tools]``.
        spec: The parsed declaration.

    Returns:
        Every problem found, in rule order. Empty when the declaration is valid.
    """
    messages: list[str] = []

    if spec.installer in (InstallerKind.GITHUB, InstallerKind.GITLAB):
        if not (spec.project or "").strip():
            messages.append("field `project` is required for release installers")
        if not spec.asset_filter:
            messages.append("at least one `asset_filter` regex must be defined")
    elif spec.installer is InstallerKind.SCRIPT:
        if not (spec.url or "").strip():
            messages.append("field `url` is required for script installers")
        if not (spec.shell or "").strip():
            messages.append("field `shell` is required for script installers")

    if spec.checksum is not None:
        if not spec.checksum.strip():
            messages.append("checksum must not be empty")
        elif not is_valid_checksum(spec.checksum):
            messages.append("checksum must be formatted as `sha256:<64 hex characters>`")
    elif spec.installer in CHECKSUM_REQUIRED_KINDS:
        messages.append("checksum is required for this installer")

    for pattern in spec.asset_filter:
        try:
            re.compile(pattern)
        except re.error as err:
            messages.append(f"invalid asset_filter regex `{pattern}`: {err}")

    if not spec.bin:
        messages.append(f"declare at least one [[tools.{name}.bin]] entry")
    for idx, binary in enumerate(spec.bin):
        if not binary.source.strip():
            messages.append(f"bin entry #{idx} must specify a non-empty `source`")
        if binary.link is not None and not binary.link.strip():
            messages.append(f"bin entry #{idx} has an empty `link` value")

    for idx, extra in enumerate(spec.extras):
        if not extra.source.strip():
            messages.append(f"extras entry #{idx} must specify a non-empty `source`")
        if extra.target is not None and not extra.target.strip():
            messages.append(f"extras entry #{idx} has an empty `target` value")
        if extra.kind is ExtraKind.COMPLETION and not (extra.shell or "").strip():
            messages.append(
                f'extras entry #{idx} (kind="completion") requires a `shell` value'
            )

    return [ManifestIssue(source=source, tool=name, message=m) for m in messages]


def validate_tool_config(source: Path, config: ToolConfigFile) -> list[ManifestIssue]:
    """Validate every tool of a manifest, in name order."""
    issues: list[ManifestIssue] = []
    for name in sorted(config.tools):
        issues.extend(validate_spec(source, name, config.tools[name]))
    return issues

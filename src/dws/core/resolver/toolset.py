"""Merging profile and workspace manifests into one tool set.

The profile manifest (``<profile>/dws.toml``) declares the shared toolchain;
the workspace override (``config.toml``) is machine-local. For each name,
an override entry that applies to this machine replaces the profile entry
wholesale. An override entry that does not apply leaves the profile entry
alone. Specs are not validated here; that is ``dws check``'s job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from dws.core.manifest import ToolConfigFile, ToolDefinition
from dws.core.resolver.platform import host_slug, platform_tags

logger = logging.getLogger(__name__)


class ToolOrigin(str, Enum):
    """Which manifest a resolved tool came from."""

    PROFILE = "profile"
    WORKSPACE = "workspace"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ToolEntry:
    """A resolved tool together with its provenance."""

    definition: ToolDefinition
    source: Path
    origin: ToolOrigin


@dataclass
class ToolSet:
    """Resolved tools for this machine, keyed and iterated by name.

    Attributes:
        entries: Name to ``ToolEntry``, sorted by name.
        platform_tags: Tags the filters were evaluated against.
        host_slug: Host slug the filters were evaluated against.
    """

    entries: dict[str, ToolEntry] = field(default_factory=dict)
    platform_tags: frozenset[str] = frozenset()
    host_slug: str = "local"

    @classmethod
    def load(
        cls,
        profile_manifest: Path,
        workspace_manifest: Path,
        tags: set[str] | None = None,
        slug: str | None = None,
    ) -> ToolSet:
        """Load both manifests from disk and merge them.

        Missing files count as empty manifests.

        Raises:
            ManifestError: If either file exists but cannot be parsed.
        """
        profile = ToolConfigFile.load(profile_manifest)
        workspace = ToolConfigFile.load(workspace_manifest)
        return cls.from_configs(
            profile, profile_manifest, workspace, workspace_manifest, tags=tags, slug=slug
        )

    @classmethod
    def from_configs(
        cls,
        profile: ToolConfigFile,
        profile_source: Path,
        workspace: ToolConfigFile,
        workspace_source: Path,
        tags: set[str] | None = None,
        slug: str | None = None,
    ) -> ToolSet:
        tags = platform_tags() if tags is None else tags
        slug = host_slug() if slug is None else slug

        merged: dict[str, ToolEntry] = {}
        layers = (
            (profile, profile_source, ToolOrigin.PROFILE),
            (workspace, workspace_source, ToolOrigin.WORKSPACE),
        )
        for config, source, origin in layers:
            for name, spec in config.tools.items():
                if not spec.applies_to(tags, slug):
                    logger.debug("Tool %s from %s does not apply to this machine", name, source)
                    continue
                if name in merged:
                    logger.debug("Tool %s overridden by %s", name, source)
                merged[name] = ToolEntry(
                    definition=spec.into_definition(name), source=source, origin=origin
                )

        ordered = {name: merged[name] for name in sorted(merged)}
        return cls(entries=ordered, platform_tags=frozenset(tags), host_slug=slug)

    # -- Accessors ----------------------------------------------------------

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    def get(self, name: str) -> ToolEntry | None:
        return self.entries.get(name)

    def definitions(self) -> list[ToolDefinition]:
        return [entry.definition for entry in self.entries.values()]

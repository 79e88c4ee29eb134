"""GitHub release installer.

Runs the artifact pipeline for one tool: select the asset, download it
into the cache (or reuse a cached copy), verify the SHA-256, extract,
then link binaries and extras. Release metadata is fetched when the
installer is created so the concrete tag is known up front.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from dws.core import linker
from dws.core.artifacts import (
    compute_sha256,
    extract_archive,
    parse_sha256,
    resolve_binary_path,
    resolve_extra_path,
    resolve_extra_target,
    sanitize_component,
)
from dws.core.lockfile import AssetRecord, BinaryLink, ExtraLink
from dws.core.manifest import ToolDefinition
from dws.exceptions import ChecksumError, ExtractionError, ForgeError
from dws.forge import GitHubClient, Release, SelectedAsset, select_asset
from dws.installers.base import InstallContext, InstallOutcome

logger = logging.getLogger(__name__)

CONTENTS_DIRNAME = "contents"


class GitHubInstaller:
    """Installer for ``installer = "github"`` tools."""

    def __init__(
        self,
        definition: ToolDefinition,
        context: InstallContext,
        client: GitHubClient,
        release: Release,
    ) -> None:
        self.definition = definition
        self.context = context
        self.client = client
        self.release = release

    @classmethod
    def prepare(
        cls, definition: ToolDefinition, context: InstallContext, client: GitHubClient
    ) -> GitHubInstaller:
        """Fetch release metadata and return a ready installer.

        Raises:
            ForgeError: If the project is missing or the release cannot be
                fetched.
        """
        project = (definition.project or "").strip()
        if not project:
            raise ForgeError(f"Tool '{definition.name}' does not declare a GitHub project")
        release = asyncio.run(client.fetch_release(project, definition.version))
        logger.debug("Resolved %s to release %s", definition.name, release.tag_name)
        return cls(definition, context, client, release)

    @property
    def resolved_version(self) -> str:
        return self.release.tag_name

    def version_dir(self) -> Path:
        return (
            self.context.cache_tools_dir
            / sanitize_component(self.definition.name)
            / sanitize_component(self.release.tag_name)
        )

    # -- Pipeline -----------------------------------------------------------

    def install(self) -> InstallOutcome:
        """Run the full pipeline and return the outcome to record.

        Raises:
            DwsError: Any pipeline failure (selection, download, checksum,
                extraction, path resolution, linking).
        """
        definition = self.definition
        if not definition.checksum:
            raise ChecksumError(f"Tool '{definition.name}' does not declare a checksum")
        expected = parse_sha256(definition.checksum)

        selected = select_asset(self.release, definition.asset_filter)
        version_dir = self.version_dir()
        archive = version_dir / selected.asset.name
        extract_dir = version_dir / CONTENTS_DIRNAME

        digest = self._fetch_verified(selected, archive, expected)

        try:
            extract_archive(archive, extract_dir)
        except ExtractionError as exc:
            raise ExtractionError(
                f"Failed to extract {archive} for tool '{definition.name}'"
            ) from exc

        binaries = self._link_binaries(extract_dir)
        extras = self._link_extras(extract_dir)

        asset = AssetRecord(
            name=selected.asset.name,
            url=selected.asset.browser_download_url,
            checksum=digest,
            archive_path=archive,
            extract_dir=extract_dir,
            pattern_index=selected.pattern_index,
            pattern=selected.pattern,
        )
        return InstallOutcome(
            name=definition.name,
            manifest_version=definition.manifest_version,
            resolved_version=self.release.tag_name,
            installer_kind=definition.installer,
            binaries=binaries,
            extras=extras,
            asset=asset,
        )

    def _download(self, url: str, archive: Path) -> str:
        return asyncio.run(self.client.download_asset(url, archive))

    def _fetch_verified(self, selected: SelectedAsset, archive: Path, expected: str) -> str:
        url = selected.asset.browser_download_url
        if archive.exists():
            logger.debug("Reusing cached archive %s", archive)
            digest = compute_sha256(archive)
        else:
            digest = self._download(url, archive)

        if digest == expected:
            return digest

        logger.warning(
            "Checksum mismatch for %s (expected %s, got %s); downloading again",
            archive.name, expected, digest,
        )
        archive.unlink(missing_ok=True)
        retry_digest = self._download(url, archive)
        if retry_digest != expected:
            archive.unlink(missing_ok=True)
            raise ChecksumError(
                f"Checksum mismatch for {selected.asset.name}: "
                f"expected {expected}, got {retry_digest} (first attempt {digest})"
            )
        return retry_digest

    def _link_binaries(self, extract_dir: Path) -> list[BinaryLink]:
        links: list[BinaryLink] = []
        for binary in self.definition.bin:
            source = resolve_binary_path(extract_dir, binary.source)
            target = self.context.bin_dir / binary.link_name
            linker.link(source, target)
            links.append(BinaryLink(link=binary.link_name, source=source, target=target))
        return links

    def _link_extras(self, extract_dir: Path) -> list[ExtraLink]:
        links: list[ExtraLink] = []
        for extra in self.definition.extras:
            source = resolve_extra_path(extract_dir, extra)
            target = resolve_extra_target(
                self.definition.name,
                extra,
                source,
                self.context.state_dir,
                self.context.share_dir,
            )
            linker.link(source, target)
            links.append(ExtraLink(kind=extra.kind, source=source, target=target))
        return links

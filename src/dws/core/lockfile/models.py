"""Lockfile data models.

Pure data holders for the ``dws.lock`` schema. Paths are kept as
``pathlib.Path`` in memory and written as strings. Timestamps are RFC 3339
strings in UTC so they survive a TOML round trip unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from dws.core.manifest import ExtraKind, InstallerKind


def utc_now() -> str:
    """Current time as an RFC 3339 string with second precision."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SymlinkEntry:
    """A config (dotfile) symlink: ``target`` points at ``source``."""

    source: Path
    target: Path

    def to_dict(self) -> dict[str, Any]:
        return {"source": str(self.source), "target": str(self.target)}


@dataclass(frozen=True)
class BinaryLink:
    """A binary exposed in the bin directory.

    Attributes:
        link: Name of the link inside the bin directory.
        source: Absolute path of the resolved file in the cache.
        target: Absolute path of the symlink.
    """

    link: str
    source: Path
    target: Path

    def to_dict(self) -> dict[str, Any]:
        return {"link": self.link, "source": str(self.source), "target": str(self.target)}


@dataclass(frozen=True)
class ExtraLink:
    """A man page, completion or other file linked into the share tree."""

    kind: ExtraKind
    source: Path
    target: Path

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "source": str(self.source), "target": str(self.target)}


# ---------------------------------------------------------------------------
# Receipts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AssetRecord:
    """Provenance of the verified archive behind a receipt.

    Attributes:
        name: Release asset file name.
        url: Download URL.
        checksum: Lower-case hex SHA-256 of the archive.
        archive_path: Cached archive location.
        extract_dir: Directory the archive was extracted into.
        pattern_index: Index of the ``asset_filter`` entry that matched.
        pattern: The matching regex itself.
    """

    name: str
    url: str
    checksum: str
    archive_path: Path
    extract_dir: Path
    pattern_index: int
    pattern: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "url": self.url,
            "checksum": self.checksum,
            "archive_path": str(self.archive_path),
            "extract_dir": str(self.extract_dir),
            "pattern_index": self.pattern_index,
            "pattern": self.pattern,
        }


@dataclass
class ToolReceipt:
    """Durable record that one tool at one resolved version is installed.

    ``resolved_version`` is always the concrete release tag, never
    ``latest``; ``manifest_version`` is what the manifest asked for.
    """

    name: str
    manifest_version: str
    resolved_version: str
    installer_kind: InstallerKind
    installed_at: str = field(default_factory=utc_now)
    binaries: list[BinaryLink] = field(default_factory=list)
    extras: list[ExtraLink] = field(default_factory=list)
    asset: AssetRecord | None = None

    def link_targets(self) -> list[Path]:
        return [b.target for b in self.binaries] + [e.target for e in self.extras]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "manifest_version": self.manifest_version,
            "resolved_version": self.resolved_version,
            "installer_kind": self.installer_kind.value,
            "installed_at": self.installed_at,
            "binaries": [b.to_dict() for b in self.binaries],
            "extras": [e.to_dict() for e in self.extras],
        }
        if self.asset is not None:
            data["asset"] = self.asset.to_dict()
        return data


@dataclass
class LockfileMetadata:
    """The ``[metadata]`` table."""

    installed_at: str = field(default_factory=utc_now)

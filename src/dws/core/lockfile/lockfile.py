"""The ``Lockfile`` class: install state accumulated during a run.

A fresh ``Lockfile`` is started by every install or update run and filled
as config entries are linked and tools are installed. Deserialization and
disk I/O live in ``operations`` and are attached in ``__init__``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from typing import Any

from dws.core.lockfile.models import (
    AssetRecord,
    BinaryLink,
    ExtraLink,
    LockfileMetadata,
    SymlinkEntry,
    ToolReceipt,
    utc_now,
)
from dws.core.manifest import InstallerKind


class Lockfile:
    """Record of every symlink and tool receipt produced by a run.

    Example::

        lock = Lockfile()
        lock.record_config_symlink(src, dst)
        lock.record_tool_install("ripgrep", "latest", "14.1.0",
                                 InstallerKind.GITHUB, binaries, [], asset)
        lock.save(paths.lockfile)
    """

    VERSION: int = 2

    def __init__(self) -> None:
        self.version = self.VERSION
        self.metadata = LockfileMetadata()
        self._config_symlinks: list[SymlinkEntry] = []
        self._tool_receipts: list[ToolReceipt] = []

    # -- Recording ----------------------------------------------------------

    def record_config_symlink(self, source: Path, target: Path) -> None:
        self._config_symlinks.append(SymlinkEntry(source=source, target=target))

    def record_tool_install(
        self,
        name: str,
        manifest_version: str,
        resolved_version: str,
        installer_kind: InstallerKind,
        binaries: Iterable[BinaryLink],
        extras: Iterable[ExtraLink],
        asset: AssetRecord | None,
    ) -> ToolReceipt:
        """Append a receipt stamped with the current time and return it."""
        receipt = ToolReceipt(
            name=name,
            manifest_version=manifest_version,
            resolved_version=resolved_version,
            installer_kind=installer_kind,
            installed_at=utc_now(),
            binaries=list(binaries),
            extras=list(extras),
            asset=asset,
        )
        self._tool_receipts.append(receipt)
        return receipt

    def retain_tool_receipts(self, keep: Callable[[ToolReceipt], bool]) -> None:
        """Drop, in place, every receipt for which ``keep`` returns False."""
        self._tool_receipts = [r for r in self._tool_receipts if keep(r)]

    def touch(self) -> None:
        self.metadata.installed_at = utc_now()

    # -- Reading ------------------------------------------------------------

    def config_symlinks(self) -> Iterator[SymlinkEntry]:
        return iter(list(self._config_symlinks))

    def tool_receipts(self) -> Iterator[ToolReceipt]:
        return iter(list(self._tool_receipts))

    def receipt_for(self, name: str) -> ToolReceipt | None:
        """Return the last receipt recorded for ``name``, if any."""
        for receipt in reversed(self._tool_receipts):
            if receipt.name == name:
                return receipt
        return None

    def binary_links(self) -> Iterator[BinaryLink]:
        for receipt in self._tool_receipts:
            yield from receipt.binaries

    def all_link_targets(self) -> list[Path]:
        """Every symlink target this lockfile owns, config entries first."""
        targets = [entry.target for entry in self._config_symlinks]
        for receipt in self._tool_receipts:
            targets.extend(receipt.link_targets())
        return targets

    # -- Serialization ------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "metadata": {"installed_at": self.metadata.installed_at},
            "config_symlinks": [e.to_dict() for e in self._config_symlinks],
            "tool_receipts": [r.to_dict() for r in self._tool_receipts],
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Lockfile):
            return NotImplemented
        return (
            self.version == other.version
            and self.metadata == other.metadata
            and self._config_symlinks == other._config_symlinks
            and self._tool_receipts == other._tool_receipts
        )

    def __repr__(self) -> str:
        return (
            f"Lockfile(version={self.version}, "
            f"config_symlinks={len(self._config_symlinks)}, "
            f"tool_receipts={len(self._tool_receipts)})"
        )

"""Lockfile operations: deserialization and disk I/O.

Attached to ``Lockfile`` in ``__init__`` as ``from_dict``, ``from_toml``,
``load`` and ``save``. Saving writes a sibling temporary file and renames
it over the lockfile, so readers never observe a half-written file.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import tomli
import tomli_w

from dws.core.lockfile.models import (
    AssetRecord,
    BinaryLink,
    ExtraLink,
    LockfileMetadata,
    SymlinkEntry,
    ToolReceipt,
)
from dws.core.manifest import ExtraKind, InstallerKind
from dws.exceptions import LockfileError

logger = logging.getLogger(__name__)


def _from_dict(cls: type, data: dict[str, Any]) -> Any:
    """Deserialize a lockfile from a parsed TOML document.

    Raises:
        LockfileError: If the schema version is not supported or a
            required field is missing or malformed.
    """
    version = data.get("version")
    if version != cls.VERSION:
        raise LockfileError(
            f"Unsupported lockfile version {version!r} (expected {cls.VERSION})"
        )

    lf = cls()
    meta = data.get("metadata", {})
    if "installed_at" in meta:
        lf.metadata = LockfileMetadata(installed_at=str(meta["installed_at"]))

    try:
        for entry in data.get("config_symlinks", []):
            lf._config_symlinks.append(
                SymlinkEntry(source=Path(entry["source"]), target=Path(entry["target"]))
            )
        for entry in data.get("tool_receipts", []):
            lf._tool_receipts.append(_receipt_from_dict(entry))
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise LockfileError(f"Malformed lockfile entry: {exc}") from exc

    return lf


def _receipt_from_dict(entry: dict[str, Any]) -> ToolReceipt:
    asset_data = entry.get("asset")
    asset = None
    if asset_data is not None:
        asset = AssetRecord(
            name=asset_data["name"],
            url=asset_data["url"],
            checksum=asset_data["checksum"],
            archive_path=Path(asset_data["archive_path"]),
            extract_dir=Path(asset_data["extract_dir"]),
            pattern_index=int(asset_data["pattern_index"]),
            pattern=asset_data["pattern"],
        )
    return ToolReceipt(
        name=entry["name"],
        manifest_version=entry["manifest_version"],
        resolved_version=entry["resolved_version"],
        installer_kind=InstallerKind(entry["installer_kind"]),
        installed_at=str(entry.get("installed_at", "")),
        binaries=[
            BinaryLink(link=b["link"], source=Path(b["source"]), target=Path(b["target"]))
            for b in entry.get("binaries", [])
        ],
        extras=[
            ExtraLink(kind=ExtraKind(e["kind"]), source=Path(e["source"]), target=Path(e["target"]))
            for e in entry.get("extras", [])
        ],
        asset=asset,
    )


def _from_toml(cls: type, text: str) -> Any:
    try:
        data = tomli.loads(text)
    except tomli.TOMLDecodeError as exc:
        raise LockfileError(f"Lockfile is not valid TOML: {exc}") from exc
    return cls.from_dict(data)


def _load(cls: type, path: Path) -> Any:
    """Read a lockfile from disk.

    Returns:
        The lockfile, or None when ``path`` does not exist.

    Raises:
        LockfileError: If the file cannot be read or parsed.
    """
    if not path.exists():
        return None
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LockfileError(f"Failed to read lockfile {path}: {exc}") from exc
    try:
        return cls.from_toml(text)
    except LockfileError as exc:
        raise LockfileError(f"Failed to load lockfile {path}") from exc


def _save(self: Any, path: Path) -> None:
    """Atomically write the lockfile to ``path``.

    Raises:
        LockfileError: If the file cannot be written.
    """
    payload = tomli_w.dumps(self.to_dict())
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise LockfileError(f"Failed to write lockfile {path}: {exc}") from exc
    logger.debug("Saved lockfile %s", path)

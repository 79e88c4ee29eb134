"""Unpacking downloaded release assets into the cache.

The archive format is chosen from the file name. Anything that is not a
recognised archive is treated as a single opaque file (typically a bare
binary) and copied into the extraction root.
"""

from __future__ import annotations

import logging
import shutil
import stat
import tarfile
import zipfile
from pathlib import Path, PurePosixPath

from dws.exceptions import ExtractionError

logger = logging.getLogger(__name__)

# Suffix -> tarfile open mode
_TAR_MODES: tuple[tuple[str, str], ...] = (
    (".tar.gz", "r:gz"),
    (".tgz", "r:gz"),
    (".tar.xz", "r:xz"),
    (".txz", "r:xz"),
    (".tar", "r:"),
)


def archive_kind(name: str) -> str:
    """Return ``tar``, ``zip`` or ``file`` for an asset file name."""
    lowered = name.lower()
    if any(lowered.endswith(suffix) for suffix, _ in _TAR_MODES):
        return "tar"
    if lowered.endswith(".zip"):
        return "zip"
    return "file"


def extract_archive(archive: Path, destination: Path) -> None:
    """Extract ``archive`` into ``destination``, replacing earlier contents.

    Raises:
        ExtractionError: If the archive is unreadable or cannot be written
            out.
    """
    try:
        if destination.exists():
            shutil.rmtree(destination)
        destination.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ExtractionError(f"Failed to prepare extraction directory {destination}: {exc}") from exc

    kind = archive_kind(archive.name)
    logger.debug("Extracting %s (%s) into %s", archive, kind, destination)
    try:
        if kind == "tar":
            _extract_tar(archive, destination)
        elif kind == "zip":
            _extract_zip(archive, destination)
        else:
            target = destination / archive.name
            shutil.copy2(archive, target)
            target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except ExtractionError:
        raise
    except (OSError, tarfile.TarError, zipfile.BadZipFile) as exc:
        raise ExtractionError(f"Failed to extract {archive}: {exc}") from exc


def _tar_mode(name: str) -> str:
    lowered = name.lower()
    for suffix, mode in _TAR_MODES:
        if lowered.endswith(suffix):
            return mode
    return "r:*"


def _extract_tar(archive: Path, destination: Path) -> None:
    with tarfile.open(archive, _tar_mode(archive.name)) as tar:
        tar.extractall(destination, filter="data")


def _safe_zip_path(name: str) -> PurePosixPath | None:
    path = PurePosixPath(name.replace("\\", "/"))
    if path.is_absolute() or ".." in path.parts or not path.parts:
        return None
    return path


def _extract_zip(archive: Path, destination: Path) -> None:
    with zipfile.ZipFile(archive) as zf:
        for info in zf.infolist():
            relative = _safe_zip_path(info.filename)
            if relative is None:
                logger.warning("Skipping unsafe zip entry %r in %s", info.filename, archive)
                continue
            out_path = destination.joinpath(*relative.parts)
            if info.is_dir():
                out_path.mkdir(parents=True, exist_ok=True)
                continue
            out_path.parent.mkdir(parents=True, exist_ok=True)
            with zf.open(info) as src, open(out_path, "wb") as dst:
                shutil.copyfileobj(src, dst)
            mode = (info.external_attr >> 16) & 0o777
            if mode:
                out_path.chmod(mode)

"""The single symlink primitive shared by config entries, binaries and extras.

``link`` has no notion of "already correct": whatever occupies the target
(file, symlink, broken symlink, directory) is removed and a fresh symlink
is created. When the platform refuses to create a symlink the source file
is copied instead.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from dws.exceptions import LinkError

logger = logging.getLogger(__name__)


def is_symlink(path: Path) -> bool:
    """True when ``path`` itself is a symlink, dangling or not."""
    try:
        return path.is_symlink()
    except OSError:
        return False


def _occupied(path: Path) -> bool:
    return is_symlink(path) or path.exists()


def remove_link(target: Path) -> bool:
    """Remove whatever occupies ``target``.

    Returns:
        True when something was removed.

    Raises:
        LinkError: If the path exists but cannot be removed.
    """
    if not _occupied(target):
        return False
    try:
        if target.is_dir() and not is_symlink(target):
            shutil.rmtree(target)
        else:
            target.unlink()
    except OSError as exc:
        raise LinkError(f"Failed to remove {target}: {exc}") from exc
    logger.debug("Removed %s", target)
    return True


def link(source: Path, target: Path) -> None:
    """Point ``target`` at ``source``, replacing anything already there.

    Raises:
        LinkError: If the target cannot be cleared or neither a symlink
            nor a copy can be created.
    """
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise LinkError(f"Failed to create directory {target.parent}: {exc}") from exc

    remove_link(target)
    try:
        os.symlink(source, target)
    except OSError as exc:
        logger.debug("Symlink %s -> %s failed (%s); copying instead", target, source, exc)
        try:
            if source.is_dir():
                shutil.copytree(source, target, symlinks=True)
            else:
                shutil.copy2(source, target)
        except OSError as copy_exc:
            raise LinkError(
                f"Failed to link {target} -> {source}: {copy_exc}"
            ) from copy_exc
    logger.debug("Linked %s -> %s", target, source)

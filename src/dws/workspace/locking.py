"""Run-level exclusive lock on the workspace state directory.

Held for the whole of ``install``, ``update``, ``uninstall`` and ``reset``
so that two ``dws`` processes cannot interleave changes to the same
symlinks, cache and lockfile. The lock is an advisory ``flock`` and is
released when the context exits, whether normally or by exception.
POSIX only.
"""

from __future__ import annotations

import fcntl
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO

from dws.exceptions import WorkspaceBusyError, WorkspaceError

logger = logging.getLogger(__name__)


class WorkspaceLock:
    def __init__(self, path: Path) -> None:
        self.path = path
        self._handle: IO[str] | None = None

    @property
    def held(self) -> bool:
        return self._handle is not None

    def acquire(self) -> None:
        """Take the lock without blocking.

        Raises:
            WorkspaceBusyError: If another process holds it.
            WorkspaceError: If the lock file cannot be opened.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            handle = open(self.path, "a")
        except OSError as exc:
            raise WorkspaceError(f"Failed to open lock file {self.path}: {exc}") from exc
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            handle.close()
            raise WorkspaceBusyError(
                f"Another dws run holds the workspace lock at {self.path}"
            ) from None
        except OSError as exc:
            handle.close()
            raise WorkspaceError(f"Failed to lock {self.path}: {exc}") from exc
        self._handle = handle
        logger.debug("Acquired workspace lock %s", self.path)

    def release(self) -> None:
        if self._handle is None:
            return
        try:
            fcntl.flock(self._handle.fileno(), fcntl.LOCK_UN)
        finally:
            self._handle.close()
            self._handle = None
            logger.debug("Released workspace lock %s", self.path)

    @contextmanager
    def hold(self) -> Iterator[WorkspaceLock]:
        self.acquire()
        try:
            yield self
        finally:
            self.release()

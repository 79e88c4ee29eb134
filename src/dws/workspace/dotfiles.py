"""Dotfile discovery: top-level entries of a profile's ``config/`` dir.

Each entry ``config/<name>`` is linked to ``<target_dir>/<name>``. Names
listed (as glob patterns) in ``config/.dwsignore`` are skipped, as are the
ignore file itself and ``.gitkeep``.
"""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass
from pathlib import Path

from dws.core import linker
from dws.exceptions import WorkspaceError

logger = logging.getLogger(__name__)

IGNORE_FILE = ".dwsignore"
_ALWAYS_SKIPPED = frozenset({IGNORE_FILE, ".gitkeep"})


@dataclass(frozen=True)
class ConfigEntry:
    source: Path
    target: Path

    def install(self) -> None:
        linker.link(self.source, self.target)


def _ignore_patterns(config_dir: Path) -> list[str]:
    ignore_file = config_dir / IGNORE_FILE
    if not ignore_file.is_file():
        return []
    try:
        lines = ignore_file.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise WorkspaceError(f"Failed to read {ignore_file}: {exc}") from exc
    patterns = []
    for line in lines:
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            patterns.append(stripped.rstrip("/"))
    return patterns


class Dotfiles:
    """Discovers config entries to link from a profile."""

    def __init__(self, config_dir: Path, target_dir: Path) -> None:
        self.config_dir = config_dir
        self.target_dir = target_dir

    def discover_entries(self) -> list[ConfigEntry]:
        if not self.config_dir.is_dir():
            return []
        patterns = _ignore_patterns(self.config_dir)
        entries: list[ConfigEntry] = []
        for path in sorted(self.config_dir.iterdir(), key=lambda p: p.name):
            name = path.name
            if name in _ALWAYS_SKIPPED:
                continue
            if any(fnmatch.fnmatch(name, pattern) for pattern in patterns):
                logger.debug("Ignoring %s (matched %s)", path, IGNORE_FILE)
                continue
            entries.append(ConfigEntry(source=path, target=self.target_dir / name))
        return entries

"""Locating binaries and extras inside an extracted release.

A declared ``source`` containing a path separator must exist verbatim
under the extraction root. A bare name is searched for in the whole tree
and must match exactly one file, either by exact name or with a ``.exe``
suffix. Zero or several matches are both errors.
"""

from __future__ import annotations

import os
from pathlib import Path

from dws.core.artifacts.sanitize import sanitize_component
from dws.core.manifest import ExtraKind, ToolExtra
from dws.exceptions import PathResolutionError

COMPLETION_DIRS: dict[str, str] = {
    "zsh": "share/zsh/site-functions",
    "bash": "share/bash-completions",
    "fish": "share/fish/vendor_completions.d",
}


def _is_bare_name(source: str) -> bool:
    return "/" not in source and "\\" not in source


def resolve_binary_path(root: Path, source: str) -> Path:
    """Resolve a declared ``source`` to a single file under ``root``.

    Raises:
        PathResolutionError: If the source is absolute, missing, or (for a
            bare name) matches more than one file.
    """
    if Path(source).is_absolute():
        raise PathResolutionError(
            f"Binary source '{source}' must be relative to the extracted archive"
        )

    if not _is_bare_name(source):
        candidate = root / source
        if candidate.exists():
            return candidate
        raise PathResolutionError(f"Binary source '{source}' not found under {root}")

    wanted = {source, f"{source}.exe"}
    matches: list[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root):
        for filename in filenames:
            if filename in wanted:
                matches.append(Path(dirpath) / filename)

    if not matches:
        raise PathResolutionError(
            f"Binary '{source}' not found in extracted contents under {root}"
        )
    if len(matches) > 1:
        listed = ", ".join(str(m) for m in sorted(matches))
        raise PathResolutionError(
            f"Binary '{source}' matched multiple files under {root}: {listed}"
        )
    return matches[0]


def resolve_extra_path(root: Path, extra: ToolExtra) -> Path:
    """Resolve an extra's source with the binary search rules."""
    try:
        return resolve_binary_path(root, extra.source)
    except PathResolutionError as exc:
        raise PathResolutionError(f"Could not resolve {extra.kind.value} extra '{extra.source}'") from exc


def resolve_extra_target(
    tool_name: str,
    extra: ToolExtra,
    resolved_source: Path,
    state_dir: Path,
    share_dir: Path,
) -> Path:
    """Compute where an extra is linked and create the parent directory.

    Args:
        tool_name: Name of the owning tool (used for ``other`` extras).
        extra: The declaration.
        resolved_source: Result of ``resolve_extra_path``.
        state_dir: Workspace state root; completion dirs hang off it.
        share_dir: The ``<state>/share`` directory.

    Raises:
        PathResolutionError: For an unsupported completion shell or a
            target directory that cannot be created.
    """
    if extra.target:
        target = Path(os.path.expanduser(os.path.expandvars(extra.target)))
    elif extra.kind is ExtraKind.MAN:
        section = resolved_source.suffix.lstrip(".") or "1"
        target = share_dir / "man" / f"man{section}" / resolved_source.name
    elif extra.kind is ExtraKind.COMPLETION:
        shell = (extra.shell or "").strip().lower()
        subdir = COMPLETION_DIRS.get(shell)
        if subdir is None:
            raise PathResolutionError(f"Unsupported completion shell '{extra.shell}'")
        target = state_dir / subdir / resolved_source.name
    else:
        source_path = Path(extra.source)
        if source_path.is_absolute():
            target = source_path
        else:
            target = share_dir / "extras" / sanitize_component(tool_name) / source_path

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PathResolutionError(f"Failed to create directory {target.parent}: {exc}") from exc
    return target

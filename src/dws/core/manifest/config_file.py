"""Loading and saving manifest files.

A manifest is a TOML document with an optional ``active_profile`` key and
a ``[tools]`` table. Every other top-level key is kept in
``ToolConfigFile.extras`` and written back unchanged, so settings owned by
other parts of the workspace survive a load/save cycle.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import tomli
import tomli_w

from dws.core.manifest.models import ToolConfigFile, ToolSpec
from dws.exceptions import ManifestError

logger = logging.getLogger(__name__)


def parse_config(data: dict[str, Any], source: str = "<memory>") -> ToolConfigFile:
    """Build a ``ToolConfigFile`` from an already-parsed TOML document.

    Raises:
        ManifestError: If ``tools`` is not a table or a tool entry cannot
            be parsed.
    """
    active_profile = data.get("active_profile")
    if active_profile is not None and not isinstance(active_profile, str):
        raise ManifestError(f"{source}: 'active_profile' must be a string")

    raw_tools = data.get("tools", {})
    if not isinstance(raw_tools, dict):
        raise ManifestError(f"{source}: 'tools' must be a table")

    tools: dict[str, ToolSpec] = {}
    for name, entry in raw_tools.items():
        try:
            tools[name] = ToolSpec.from_dict(name, entry)
        except ManifestError as exc:
            raise ManifestError(f"{source}: {exc}") from exc

    extras = {k: v for k, v in data.items() if k not in ("active_profile", "tools")}
    return ToolConfigFile(active_profile=active_profile, tools=tools, extras=extras)


def load_config(path: Path) -> ToolConfigFile:
    """Read a manifest from disk. A missing file yields an empty config.

    Raises:
        ManifestError: If the file exists but is unreadable or is not
            valid TOML.
    """
    if not path.exists():
        logger.debug("Manifest %s does not exist; using empty config", path)
        return ToolConfigFile()
    try:
        with open(path, "rb") as fh:
            data = tomli.load(fh)
    except tomli.TOMLDecodeError as exc:
        raise ManifestError(f"Failed to parse TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ManifestError(f"Failed to read {path}: {exc}") from exc
    return parse_config(data, source=str(path))


def config_to_dict(config: ToolConfigFile) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if config.active_profile is not None:
        data["active_profile"] = config.active_profile
    for key, value in config.extras.items():
        data[key] = value
    if config.tools:
        data["tools"] = {name: spec.to_dict() for name, spec in config.tools.items()}
    return data


def save_config(config: ToolConfigFile, path: Path) -> None:
    """Atomically write ``config`` to ``path``, creating parent directories.

    Raises:
        ManifestError: If the file cannot be written.
    """
    payload = tomli_w.dumps(config_to_dict(config))
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
        raise ManifestError(f"Failed to write {path}: {exc}") from exc
    logger.debug("Saved manifest %s", path)

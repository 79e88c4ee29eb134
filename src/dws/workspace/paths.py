"""XDG directory layout of a workspace.

::

    $XDG_CONFIG_HOME/dws/            root
        config.toml                  workspace overrides + active_profile
        profiles/<name>/dws.toml     profile manifest
        profiles/<name>/config/      dotfiles linked into $XDG_CONFIG_HOME
    $XDG_STATE_HOME/dws/             state
        bin/  share/  dws.lock  .dws.run.lock
    $XDG_CACHE_HOME/dws/tools/       downloaded and extracted releases
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dws.core.manifest import ToolConfigFile

DEFAULT_PROFILE = "default"
PROFILE_MANIFEST = "dws.toml"
WORKSPACE_CONFIG = "config.toml"
LOCKFILE_NAME = "dws.lock"
RUN_LOCK_NAME = ".dws.run.lock"


def _xdg_dir(environ: Mapping[str, str], var: str, fallback: str) -> Path:
    value = environ.get(var)
    if value:
        return Path(value)
    return Path.home() / fallback


@dataclass(frozen=True)
class WorkspacePaths:
    """Resolved filesystem locations for one workspace."""

    config_home: Path
    root: Path
    state_dir: Path
    cache_dir: Path
    active_profile: str = DEFAULT_PROFILE

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> WorkspacePaths:
        """Compute the layout from the XDG environment.

        The active profile is read from the workspace ``config.toml``.

        Raises:
            ManifestError: If ``config.toml`` exists but cannot be parsed.
        """
        environ = os.environ if environ is None else environ
        config_home = _xdg_dir(environ, "XDG_CONFIG_HOME", ".config")
        state_home = _xdg_dir(environ, "XDG_STATE_HOME", ".local/state")
        cache_home = _xdg_dir(environ, "XDG_CACHE_HOME", ".cache")

        root = config_home / "dws"
        config = ToolConfigFile.load(root / WORKSPACE_CONFIG)
        return cls(
            config_home=config_home,
            root=root,
            state_dir=state_home / "dws",
            cache_dir=cache_home / "dws",
            active_profile=config.active_profile or DEFAULT_PROFILE,
        )

    # -- Configuration ------------------------------------------------------

    @property
    def profiles_dir(self) -> Path:
        return self.root / "profiles"

    @property
    def profile_dir(self) -> Path:
        return self.profiles_dir / self.active_profile

    @property
    def profile_manifest(self) -> Path:
        return self.profile_dir / PROFILE_MANIFEST

    @property
    def profile_config_dir(self) -> Path:
        return self.profile_dir / "config"

    @property
    def workspace_config(self) -> Path:
        return self.root / WORKSPACE_CONFIG

    @property
    def dotfiles_target(self) -> Path:
        return self.config_home

    # -- State --------------------------------------------------------------

    @property
    def bin_dir(self) -> Path:
        return self.state_dir / "bin"

    @property
    def share_dir(self) -> Path:
        return self.state_dir / "share"

    @property
    def lockfile(self) -> Path:
        return self.state_dir / LOCKFILE_NAME

    @property
    def run_lock(self) -> Path:
        return self.state_dir / RUN_LOCK_NAME

    # -- Cache --------------------------------------------------------------

    @property
    def cache_tools_dir(self) -> Path:
        return self.cache_dir / "tools"

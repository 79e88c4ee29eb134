"""Profiles: named directories holding a manifest and dotfiles."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from dws.exceptions import WorkspaceError
from dws.workspace.paths import PROFILE_MANIFEST


@dataclass(frozen=True)
class Profile:
    name: str
    root: Path

    @property
    def manifest(self) -> Path:
        return self.root / PROFILE_MANIFEST

    @property
    def config_dir(self) -> Path:
        return self.root / "config"

    def exists(self) -> bool:
        return self.root.is_dir()


def list_profiles(profiles_dir: Path) -> list[Profile]:
    """Every directory under ``profiles_dir``, sorted by name."""
    if not profiles_dir.is_dir():
        return []
    return [
        Profile(name=entry.name, root=entry)
        for entry in sorted(profiles_dir.iterdir(), key=lambda p: p.name)
        if entry.is_dir()
    ]


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

_TEMPLATE_FILES: tuple[tuple[str, str], ...] = (
    (
        PROFILE_MANIFEST,
        "# Tools installed for this profile.\n"
        "#\n"
        "# [tools.ripgrep]\n"
        '# installer = "github"\n'
        '# project = "BurntSushi/ripgrep"\n'
        '# asset_filter = ["x86_64-unknown-linux-musl.tar.gz$"]\n'
        '# checksum = "sha256:<64 hex characters>"\n'
        "#\n"
        "# [[tools.ripgrep.bin]]\n"
        '# source = "rg"\n',
    ),
    ("config/.dwsignore", "# Names under config/ that are not linked into $XDG_CONFIG_HOME.\n"),
    (".gitignore", ".DS_Store\n"),
)


def write_profile_template(root: Path) -> bool:
    """Create the profile skeleton under ``root``; existing files are kept.

    Returns:
        True when ``root`` did not exist before.

    Raises:
        WorkspaceError: If a directory or file cannot be written.
    """
    created = not root.exists()
    for relative, content in _TEMPLATE_FILES:
        path = root / relative
        if path.exists():
            continue
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise WorkspaceError(f"Failed to write template file {path}: {exc}") from exc
    return created

"""Manifest data models: tool declarations as written in TOML.

A manifest (``dws.toml`` in a profile, ``config.toml`` for workspace
overrides) maps tool names to ``ToolSpec`` declarations. Specs are parsed
once at resolve time and never mutated afterwards, so every model here is
a frozen dataclass holding tuples rather than lists.

``ToolSpec.from_dict`` only enforces what is needed to build the object
(a known installer kind and correctly typed fields). Structural rules such
as "github needs a checksum" live in ``validation`` and are reported as
issues, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

from dws.exceptions import ManifestError


class InstallerKind(str, Enum):
    """Installer backends a manifest may name."""

    GITHUB = "github"
    GITLAB = "gitlab"
    SCRIPT = "script"
    DMG = "dmg"
    FLATPAK = "flatpak"
    CURL = "curl"

    def __str__(self) -> str:
        return self.value


class ExtraKind(str, Enum):
    """Kinds of auxiliary files linked alongside binaries."""

    MAN = "man"
    COMPLETION = "completion"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


# Installers that download something and therefore must pin a digest.
CHECKSUM_REQUIRED_KINDS: frozenset[InstallerKind] = frozenset({
    InstallerKind.GITHUB,
    InstallerKind.GITLAB,
    InstallerKind.SCRIPT,
})


@dataclass(frozen=True)
class ToolBinary:
    """One executable to expose in the workspace ``bin`` directory.

    Attributes:
        source: Bare file name (searched for in the extracted tree) or a
            relative path that must exist verbatim.
        link: Optional name for the symlink; defaults to the final
            component of ``source``.
    """

    source: str
    link: str | None = None

    @property
    def link_name(self) -> str:
        if self.link:
            return self.link
        return self.source.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"source": self.source}
        if self.link is not None:
            data["link"] = self.link
        return data


@dataclass(frozen=True)
class ToolExtra:
    """One auxiliary file (man page, shell completion, anything else).

    Attributes:
        source: Location inside the extracted archive, same rules as
            ``ToolBinary.source``.
        kind: Which share sub-tree the file is linked into.
        shell: Target shell; required when ``kind`` is completion.
        target: Explicit destination path; environment variables are
            expanded at install time.
    """

    source: str
    kind: ExtraKind
    shell: str | None = None
    target: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"source": self.source, "kind": self.kind.value}
        if self.shell is not None:
            data["shell"] = self.shell
        if self.target is not None:
            data["target"] = self.target
        return data


@dataclass(frozen=True)
class ToolSpec:
    """A single ``[tools.<name>]`` table.

    Attributes:
        installer: Backend that provisions the tool.
        project: Forge ``owner/repo`` for release installers.
        version: Release tag to pin; None means latest.
        url: Download URL for script installers.
        shell: Interpreter for script installers.
        bin: Executables to link.
        extras: Man pages, completions and other files to link.
        asset_filter: Ordered regexes used to choose a release asset.
        checksum: ``sha256:<64 hex>`` digest of the release asset.
        app: ``.app`` bundle name for dmg installs.
        team_id: Apple team id for dmg installs.
        self_update: True when the tool updates itself; ``update`` skips it.
        platform: Platform tags this spec applies to (empty = all).
        hosts: Host slugs this spec applies to (empty = all).
    """

    installer: InstallerKind
    project: str | None = None
    version: str | None = None
    url: str | None = None
    shell: str | None = None
    bin: tuple[ToolBinary, ...] = ()
    extras: tuple[ToolExtra, ...] = ()
    asset_filter: tuple[str, ...] = ()
    checksum: str | None = None
    app: str | None = None
    team_id: str | None = None
    self_update: bool = False
    platform: tuple[str, ...] = ()
    hosts: tuple[str, ...] = ()

    # -- Filtering ----------------------------------------------------------

    def applies_to(self, platform_tags: set[str], host_slug: str | None) -> bool:
        """Return True when this spec targets the given machine.

        ``platform`` and ``hosts`` are each satisfied when empty; a non-empty
        ``platform`` needs one tag in common, a non-empty ``hosts`` needs the
        exact slug.
        """
        if self.platform and not any(tag in platform_tags for tag in self.platform):
            return False
        if not self.hosts:
            return True
        if host_slug is None:
            return False
        return host_slug in self.hosts

    def into_definition(self, name: str) -> ToolDefinition:
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        return ToolDefinition(name=name, **values)

    # -- TOML mapping -------------------------------------------------------

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> ToolSpec:
        """Build a spec from a parsed ``[tools.<name>]`` table.

        Raises:
            ManifestError: If ``installer`` is missing or unknown, or a field
                has the wrong TOML type.
        """
        if not isinstance(data, dict):
            raise ManifestError(f"Tool '{name}' must be a table")

        raw_installer = data.get("installer")
        if raw_installer is None:
            raise ManifestError(f"Tool '{name}' is missing required field 'installer'")
        try:
            installer = InstallerKind(str(raw_installer).lower())
        except ValueError:
            raise ManifestError(
                f"Tool '{name}' uses unknown installer '{raw_installer}'"
            ) from None

        filters = data.get("asset_filter", data.get("asset_filters", []))

        return cls(
            installer=installer,
            project=_opt_str(name, data, "project"),
            version=_opt_str(name, data, "version"),
            url=_opt_str(name, data, "url"),
            shell=_opt_str(name, data, "shell"),
            bin=tuple(_parse_binary(name, item) for item in _list(name, data, "bin")),
            extras=tuple(_parse_extra(name, item) for item in _list(name, data, "extras")),
            asset_filter=tuple(_str_items(name, "asset_filter", filters)),
            checksum=_opt_str(name, data, "checksum"),
            app=_opt_str(name, data, "app"),
            team_id=_opt_str(name, data, "team_id"),
            self_update=bool(data.get("self_update", False)),
            platform=tuple(_normalized(name, "platform", data.get("platform", []))),
            hosts=tuple(_normalized(name, "hosts", data.get("hosts", []))),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to a TOML-ready table, omitting unset fields."""
        data: dict[str, Any] = {"installer": self.installer.value}
        for key in ("project", "version", "url", "shell", "checksum", "app", "team_id"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.asset_filter:
            data["asset_filter"] = list(self.asset_filter)
        data["self_update"] = self.self_update
        if self.platform:
            data["platform"] = list(self.platform)
        if self.hosts:
            data["hosts"] = list(self.hosts)
        if self.bin:
            data["bin"] = [b.to_dict() for b in self.bin]
        if self.extras:
            data["extras"] = [e.to_dict() for e in self.extras]
        return data


@dataclass(frozen=True)
class ToolDefinition:
    """A resolved, name-attached ``ToolSpec`` ready for installation."""

    name: str
    installer: InstallerKind
    project: str | None = None
    version: str | None = None
    url: str | None = None
    shell: str | None = None
    bin: tuple[ToolBinary, ...] = ()
    extras: tuple[ToolExtra, ...] = ()
    asset_filter: tuple[str, ...] = ()
    checksum: str | None = None
    app: str | None = None
    team_id: str | None = None
    self_update: bool = False
    platform: tuple[str, ...] = ()
    hosts: tuple[str, ...] = ()

    @property
    def manifest_version(self) -> str:
        """Version as the manifest states it; ``latest`` when unpinned."""
        return self.version if self.version is not None else "latest"


@dataclass
class ToolConfigFile:
    """A whole manifest file.

    Attributes:
        active_profile: Profile selected by the workspace (only meaningful
            in the workspace ``config.toml``).
        tools: Tool declarations keyed by name.
        extras: Every other top-level key, preserved verbatim on save.
    """

    active_profile: str | None = None
    tools: dict[str, ToolSpec] = field(default_factory=dict)
    extras: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def _opt_str(tool: str, data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ManifestError(f"Tool '{tool}': field '{key}' must be a string")
    return value


def _list(tool: str, data: dict[str, Any], key: str) -> list[Any]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ManifestError(f"Tool '{tool}': field '{key}' must be an array")
    return value


def _str_items(tool: str, key: str, value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ManifestError(f"Tool '{tool}': field '{key}' must be an array of strings")
    return list(value)


def _parse_binary(tool: str, item: Any) -> ToolBinary:
    if isinstance(item, str):
        return ToolBinary(source=item)
    if not isinstance(item, dict):
        raise ManifestError(f"Tool '{tool}': bin entries must be tables")
    return ToolBinary(
        source=str(item.get("source", "")),
        link=_opt_str(tool, item, "link"),
    )


def _parse_extra(tool: str, item: Any) -> ToolExtra:
    if not isinstance(item, dict):
        raise ManifestError(f"Tool '{tool}': extras entries must be tables")
    raw_kind = item.get("kind", "")
    try:
        kind = ExtraKind(str(raw_kind).lower())
    except ValueError:
        raise ManifestError(
            f"Tool '{tool}': unknown extras kind '{raw_kind}'"
        ) from None
    return ToolExtra(
        source=str(item.get("source", "")),
        kind=kind,
        shell=_opt_str(tool, item, "shell"),
        target=_opt_str(tool, item, "target"),
    )


def _normalized(tool: str, key: str, value: Any) -> list[str]:
    """Trim and lower-case filter values; blank entries are dropped."""
    items = (item.strip().lower() for item in _str_items(tool, key, value))
    return [item for item in items if item]

"""Release metadata as returned by the forge API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ReleaseAsset:
    """One downloadable file attached to a release.

    Attributes:
        name: Asset file name.
        browser_download_url: Public download URL.
        size: Size in bytes.
        state: Upload state reported by the forge (``uploaded`` once
            complete).
    """

    name: str
    browser_download_url: str
    size: int = 0
    state: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReleaseAsset:
        return cls(
            name=str(data.get("name", "")),
            browser_download_url=str(data.get("browser_download_url", "")),
            size=int(data.get("size") or 0),
            state=data.get("state"),
        )


@dataclass(frozen=True)
class Release:
    """A release: its concrete tag and attached assets."""

    tag_name: str
    assets: tuple[ReleaseAsset, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Release:
        return cls(
            tag_name=str(data.get("tag_name", "")),
            assets=tuple(ReleaseAsset.from_dict(a) for a in data.get("assets", []) or []),
        )


@dataclass(frozen=True)
class SelectedAsset:
    """The asset chosen by ``select_asset`` and the filter that chose it."""

    pattern_index: int
    pattern: str
    asset: ReleaseAsset

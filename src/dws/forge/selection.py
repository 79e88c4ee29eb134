"""Choosing one release asset with ordered ``asset_filter`` regexes.

Filters are tried in declaration order and the first filter that matches
anything decides; later filters are never consulted. Within that filter
candidates are ranked by ``(score, smaller size, smaller name)``. A tie on
the whole key is an error rather than an arbitrary pick.

Score = 100 for a finished upload, plus an extension bonus, plus additive
architecture/platform bonuses found in the (lower-cased) asset name.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from dws.exceptions import AssetSelectionError
from dws.forge.models import Release, ReleaseAsset, SelectedAsset

logger = logging.getLogger(__name__)

_READY_STATES = frozenset({"uploaded", "available"})

# Checked in order; first suffix that matches wins.
_EXTENSION_BONUS: tuple[tuple[str, int], ...] = (
    (".tar.gz", 30),
    (".tar.xz", 30),
    (".tgz", 25),
    (".zip", 20),
    (".tar", 15),
)
_DEFAULT_EXTENSION_BONUS = 5

_ARCH_BONUS: tuple[tuple[tuple[str, ...], int], ...] = (
    (("x86_64", "amd64"), 10),
    (("arm64", "aarch64"), 7),
    (("linux",), 5),
    (("apple", "darwin", "macos"), 5),
)


def state_bonus(asset: ReleaseAsset) -> int:
    return 100 if (asset.state or "").lower() in _READY_STATES else 0


def extension_bonus(name: str) -> int:
    lowered = name.lower()
    for suffix, bonus in _EXTENSION_BONUS:
        if lowered.endswith(suffix):
            return bonus
    return _DEFAULT_EXTENSION_BONUS


def arch_bonus(name: str) -> int:
    lowered = name.lower()
    return sum(
        bonus for needles, bonus in _ARCH_BONUS if any(n in lowered for n in needles)
    )


def score_asset(asset: ReleaseAsset) -> int:
    """Total preference score of an asset (higher is better)."""
    return state_bonus(asset) + extension_bonus(asset.name) + arch_bonus(asset.name)


def _rank_key(asset: ReleaseAsset) -> tuple[int, int, str]:
    # Ascending sort: best score first, then smaller size, then smaller name.
    return (-score_asset(asset), asset.size, asset.name)


def select_asset(release: Release, filters: Sequence[str]) -> SelectedAsset:
    """Pick the release asset described by ``filters``.

    Args:
        release: Release metadata with its assets.
        filters: Regexes in declaration order, matched with ``re.search``
            against asset names.

    Returns:
        The winning asset and the index and text of the deciding filter.

    Raises:
        AssetSelectionError: If ``filters`` or the asset list is empty, a
            filter does not compile, the deciding filter's best candidates
            tie, or no filter matches any asset.
    """
    if not filters:
        raise AssetSelectionError("GitHub installer requires at least one asset_filter pattern")
    if not release.assets:
        raise AssetSelectionError(
            f"GitHub release '{release.tag_name}' does not expose any assets"
        )

    for index, pattern in enumerate(filters):
        try:
            regex = re.compile(pattern)
        except re.error as exc:
            raise AssetSelectionError(f"Invalid asset_filter regex '{pattern}'") from exc

        candidates = [a for a in release.assets if regex.search(a.name)]
        if not candidates:
            continue

        ranked = sorted(candidates, key=_rank_key)
        if len(ranked) > 1 and _rank_key(ranked[0]) == _rank_key(ranked[1]):
            raise AssetSelectionError(
                f"Asset filter '{pattern}' matched multiple assets with equal scoring"
            )
        winner = ranked[0]
        logger.debug(
            "Filter #%d '%s' selected %s (score %d)",
            index, pattern, winner.name, score_asset(winner),
        )
        return SelectedAsset(pattern_index=index, pattern=pattern, asset=winner)

    raise AssetSelectionError(
        "No release asset matched the provided asset_filter patterns: " + ", ".join(filters)
    )

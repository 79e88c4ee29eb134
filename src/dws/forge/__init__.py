"""Forge access: release metadata, asset selection and downloads."""

from dws.forge.github import API_ROOT, GitHubClient, release_endpoint
from dws.forge.models import Release, ReleaseAsset, SelectedAsset
from dws.forge.selection import (
    arch_bonus,
    extension_bonus,
    score_asset,
    select_asset,
    state_bonus,
)

__all__ = [
    "API_ROOT",
    "GitHubClient",
    "Release",
    "ReleaseAsset",
    "SelectedAsset",
    "arch_bonus",
    "extension_bonus",
    "release_endpoint",
    "score_asset",
    "select_asset",
    "state_bonus",
]

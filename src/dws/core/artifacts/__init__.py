"""Artifact pipeline helpers: cache naming, digests, extraction, lookup."""

from dws.core.artifacts.checksum import compute_sha256, parse_sha256
from dws.core.artifacts.extract import archive_kind, extract_archive
from dws.core.artifacts.paths import (
    COMPLETION_DIRS,
    resolve_binary_path,
    resolve_extra_path,
    resolve_extra_target,
)
from dws.core.artifacts.sanitize import sanitize_component

__all__ = [
    "COMPLETION_DIRS",
    "archive_kind",
    "compute_sha256",
    "extract_archive",
    "parse_sha256",
    "resolve_binary_path",
    "resolve_extra_path",
    "resolve_extra_target",
    "sanitize_component",
]

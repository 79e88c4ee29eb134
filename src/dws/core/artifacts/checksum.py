"""SHA-256 digests of cached archives."""

from __future__ import annotations

import hashlib
from pathlib import Path

from dws.exceptions import ChecksumError

_CHUNK_SIZE = 64 * 1024
_PREFIX = "sha256:"


def parse_sha256(declared: str) -> str:
    """Return the lower-case hex digest from a ``sha256:<hex>`` string.

    Raises:
        ChecksumError: If the value is not ``sha256:`` plus 64 hex digits.
    """
    value = declared.strip()
    if not value.startswith(_PREFIX):
        raise ChecksumError(f"Checksum '{declared}' must start with '{_PREFIX}'")
    digest = value[len(_PREFIX):].lower()
    if len(digest) != 64 or any(c not in "0123456789abcdef" for c in digest):
        raise ChecksumError(
            f"Checksum '{declared}' must contain exactly 64 hexadecimal characters"
        )
    return digest


def compute_sha256(path: Path) -> str:
    """Hash a file in chunks and return the hex digest.

    Raises:
        ChecksumError: If the file cannot be read.
    """
    sha = hashlib.sha256()
    try:
        with open(path, "rb") as fh:
            for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
                sha.update(chunk)
    except OSError as exc:
        raise ChecksumError(f"Failed to hash {path}: {exc}") from exc
    return sha.hexdigest()

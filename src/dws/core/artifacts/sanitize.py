"""File-system safe path components for cache directories."""

from __future__ import annotations

import re

_UNSAFE_RUN_RE = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_component(value: str) -> str:
    """Map ``value`` to ``[A-Za-z0-9._-]``.

    Each run of other characters becomes a single ``-``. A result that is
    empty or made only of dashes becomes ``default``.

    >>> sanitize_component("Hello World!")
    'Hello-World-'
    >>> sanitize_component("///")
    'default'
    """
    cleaned = _UNSAFE_RUN_RE.sub("-", value)
    if not cleaned.strip("-"):
        return "default"
    return cleaned

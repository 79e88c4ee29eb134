"""Machine identity used to filter tool declarations.

Two values are computed once per run:

- ``platform_tags()``: ``{os}``, ``{os}-{arch}``, ``linux-<id>`` for every
  ``ID``/``ID_LIKE`` entry of ``/etc/os-release``, and ``darwin`` on macOS.
- ``host_slug()``: the hostname reduced to ``[a-z0-9-]``.
"""

from __future__ import annotations

import os
import platform
import re
import socket
from pathlib import Path

_OS_NAMES = {"darwin": "macos", "linux": "linux", "windows": "windows"}
_ARCH_ALIASES = {"amd64": "x86_64", "x64": "x86_64", "arm64": "aarch64"}
_OS_RELEASE = Path("/etc/os-release")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def current_os() -> str:
    system = platform.system().lower()
    return _OS_NAMES.get(system, system)


def current_arch() -> str:
    machine = platform.machine().lower()
    return _ARCH_ALIASES.get(machine, machine)


def linux_distribution_tags(os_release: Path = _OS_RELEASE) -> set[str]:
    """Return ``linux-<id>`` for each ``ID`` and ``ID_LIKE`` value.

    Values may be quoted and ``ID_LIKE`` may hold several ids separated by
    whitespace or commas. An unreadable file yields no tags.
    """
    try:
        text = os_release.read_text(encoding="utf-8")
    except OSError:
        return set()

    tags: set[str] = set()
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if not sep or key.strip() not in ("ID", "ID_LIKE"):
            continue
        value = value.strip().strip('"').strip("'")
        for ident in re.split(r"[\s,]+", value):
            ident = ident.strip().lower()
            if ident:
                tags.add(f"linux-{ident}")
    return tags


def platform_tags(
    os_name: str | None = None,
    arch: str | None = None,
    os_release: Path = _OS_RELEASE,
) -> set[str]:
    """Compute the platform tags for the current (or given) machine."""
    os_name = os_name or current_os()
    arch = arch or current_arch()

    tags = {os_name, f"{os_name}-{arch}"}
    if os_name == "linux":
        tags |= linux_distribution_tags(os_release)
    if os_name == "macos":
        tags.add("darwin")
    return tags


def slugify_host(name: str) -> str:
    """Lower-case, collapse non-alphanumeric runs to ``-``, trim dashes."""
    return _NON_ALNUM_RE.sub("-", name.lower()).strip("-")


def host_slug(hostname: str | None = None) -> str:
    """Return the slug of this machine's hostname, or ``local``.

    Sources are tried in order: ``socket.gethostname()``, then the
    ``HOSTNAME``, ``COMPUTERNAME`` and ``HOST`` environment variables.
    """
    candidates: list[str | None] = []
    if hostname is not None:
        candidates.append(hostname)
    else:
        try:
            candidates.append(socket.gethostname())
        except OSError:
            pass
        candidates.extend(os.environ.get(var) for var in ("HOSTNAME", "COMPUTERNAME", "HOST"))

    for candidate in candidates:
        if candidate:
            slug = slugify_host(candidate)
            if slug:
                return slug
    return "local"

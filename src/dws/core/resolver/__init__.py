"""Tool resolution: which declared tools apply to this machine."""

from dws.core.resolver.platform import (
    host_slug,
    linux_distribution_tags,
    platform_tags,
    slugify_host,
)
from dws.core.resolver.toolset import ToolEntry, ToolOrigin, ToolSet

__all__ = [
    "ToolEntry",
    "ToolOrigin",
    "ToolSet",
    "host_slug",
    "linux_distribution_tags",
    "platform_tags",
    "slugify_host",
]

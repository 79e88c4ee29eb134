"""Manifest model: tool declarations and the files that hold them.

- ``models``: ``ToolSpec`` and friends, parsed from ``[tools.<name>]``.
- ``config_file``: TOML load/save of whole manifests with passthrough keys.
- ``validation``: non-raising structural checks used by ``dws check``.
"""

from dws.core.manifest.models import (
    CHECKSUM_REQUIRED_KINDS,
    ExtraKind,
    InstallerKind,
    ToolBinary,
    ToolConfigFile,
    ToolDefinition,
    ToolExtra,
    ToolSpec,
)
from dws.core.manifest import config_file as _io
from dws.core.manifest.validation import (
    ManifestIssue,
    is_valid_checksum,
    validate_spec,
    validate_tool_config,
)

ToolConfigFile.load = staticmethod(_io.load_config)
ToolConfigFile.from_dict = staticmethod(_io.parse_config)
ToolConfigFile.to_dict = _io.config_to_dict
ToolConfigFile.save = _io.save_config

__all__ = [
    "CHECKSUM_REQUIRED_KINDS",
    "ExtraKind",
    "InstallerKind",
    "ManifestIssue",
    "ToolBinary",
    "ToolConfigFile",
    "ToolDefinition",
    "ToolExtra",
    "ToolSpec",
    "is_valid_checksum",
    "validate_spec",
    "validate_tool_config",
]

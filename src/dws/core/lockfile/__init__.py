"""Install-state lockfile (``dws.lock``).

- ``models``: link, asset and receipt records.
- ``lockfile``: the ``Lockfile`` accumulator and its serializer.
- ``operations``: ``from_dict``, ``from_toml``, ``load`` and atomic ``save``.
"""

from dws.core.lockfile.models import (
    AssetRecord,
    BinaryLink,
    ExtraLink,
    LockfileMetadata,
    SymlinkEntry,
    ToolReceipt,
    utc_now,
)
from dws.core.lockfile.lockfile import Lockfile
from dws.core.lockfile import operations as _ops

Lockfile.from_dict = classmethod(_ops._from_dict)
Lockfile.from_toml = classmethod(_ops._from_toml)
Lockfile.load = classmethod(_ops._load)
Lockfile.save = _ops._save

__all__ = [
    "AssetRecord",
    "BinaryLink",
    "ExtraLink",
    "Lockfile",
    "LockfileMetadata",
    "SymlinkEntry",
    "ToolReceipt",
    "utc_now",
]

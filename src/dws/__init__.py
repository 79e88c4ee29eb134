"""dws: declarative developer workspaces built from forge release artifacts."""

from __future__ import annotations

__version__ = "0.2.0"
__license__ = "MIT"

# Default User-Agent sent to the forge API unless DWS_GITHUB_USER_AGENT is set.
_PRODUCT_ID = "dws"
_DEFAULT_USER_AGENT = f"{_PRODUCT_ID}/{__version__}"

"""dws exception hierarchy.

All public exceptions inherit from DwsError, giving callers a single base
class to catch when they want to handle any dws-specific failure without
swallowing unrelated errors. Context is attached by re-raising a wrapping
error ``from`` the original, so the ``__cause__`` chain reads from the
outermost operation down to the failing syscall or HTTP response.
"""


class DwsError(Exception):
    """Base exception for all dws errors."""


class ManifestError(DwsError):
    """Raised when a manifest or workspace config file cannot be read.

    Covers unreadable files and TOML syntax or type errors. Structural
    problems inside a well-formed manifest are reported by validation
    as issues rather than raised.
    """


class ForgeError(DwsError):
    """Raised when the forge API or an asset download returns an error.

    The message carries the HTTP status and the response body.
    """


class ReleaseNotFoundError(ForgeError):
    """Raised when the forge answers 404 for a release lookup."""


class AssetSelectionError(DwsError):
    """Raised when no single release asset can be chosen.

    Covers missing filters, releases without assets, invalid filter
    regexes, ambiguous top-ranked candidates, and filters that match
    nothing.
    """


class ChecksumError(DwsError):
    """Raised for malformed declared checksums or integrity mismatches."""


class ExtractionError(DwsError):
    """Raised when a downloaded archive cannot be unpacked."""


class PathResolutionError(DwsError):
    """Raised when a declared binary or extra cannot be located.

    Both a missing file and a bare name matching more than one file in
    the extracted tree are errors.
    """


class LinkError(DwsError):
    """Raised when a symlink (or copy fallback) cannot be created or removed."""


class LockfileError(DwsError):
    """Raised when the lockfile cannot be read, parsed, or written."""


class WorkspaceBusyError(DwsError):
    """Raised when another dws process holds the workspace run lock."""


class WorkspaceError(DwsError):
    """Raised for orchestration failures.

    Wraps lower-level errors with the operation and tool they occurred
    in, and covers workspace-level conditions such as undefined tools or
    a dirty profile repository.
    """

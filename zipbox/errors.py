from __future__ import annotations

"""Typed error taxonomy.

Conditions the editor tolerates (absent or corrupt archive, an
unreadable entry during copy-through, a rename whose source has vanished)
are never raised; they show up only in the commit counters.
"""

__all__ = [
    "ZipBoxError",
    "ConfigError",
    "ArchiveError",
    "CommitError",
    "EntryNotFoundError",
    "EntryExistsError",
    "CLIError",
    "format_error",
]


class ZipBoxError(Exception):
    """Base class for all typed, operator-facing errors in zipbox."""
    pass


class ConfigError(ZipBoxError):
    """Configuration invalid: unknown keys, unparseable compression level, etc."""
    pass


class ArchiveError(ZipBoxError):
    """The archive could not be written or installed."""
    pass


class CommitError(ArchiveError):
    """A commit failed before or while installing the rewritten archive.

    The original archive is untouched unless the commit was writing directly
    to it (absent or corrupt original).
    """
    pass


class EntryNotFoundError(ZipBoxError):
    """No entry with the requested name exists in the archive."""
    pass


class EntryExistsError(ZipBoxError):
    """The entry a command would create is already present."""
    pass


class CLIError(ZipBoxError):
    """Generic CLI failure wrapper for unexpected errors in CLI code paths."""
    pass


def format_error(e: BaseException) -> str:
    """Return a short, uniform operator-facing message like 'ConfigError: detail'."""
    name = e.__class__.__name__
    msg = str(e).strip()
    return f"{name}: {msg}" if msg else name


# Keep star-export order deterministic for tests and tooling
__all__ = sorted(__all__)

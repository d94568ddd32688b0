"""zipbox: transactional editing of zip archives.

Public surface: ``ZipEditor``, ``CommitResult``, ``Entry``,
``normalize_directory_name`` and the ``zipbox.errors`` taxonomy.
This module also resolves ``__version__`` from installed metadata.
"""
from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version

from . import errors as errors  # re-export for star-import; noqa: F401
from .archive import CommitResult, Entry, ZipEditor, normalize_directory_name


def _version_from_metadata() -> str | None:
    try:
        return _pkg_version("zipbox")
    except PackageNotFoundError:
        return None


__version__ = _version_from_metadata() or "0+unknown"

# Star-export surface (deterministic ordering).
__all__ = [
    "CommitResult",
    "Entry",
    "ZipEditor",
    "__version__",
    "errors",
    "normalize_directory_name",
]

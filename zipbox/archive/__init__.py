"""Archive model: entries, edit log, directory views and the commit engine."""
from __future__ import annotations

from .attributes import Attributes, archive_attributes, entry_attributes
from .cursor import EntryCursor
from .edits import ContentSource, EditLog, Mkdir, Put, Rename
from .editor import ZipEditor
from .entry import Entry
from .listing import list_children, lookup
from .names import DELIMITER, PathPrefixMatcher, normalize_directory_name
from .reader import ArchiveReader, read_entries
from .result import CommitResult

__all__ = [
    "DELIMITER",
    "ArchiveReader",
    "Attributes",
    "CommitResult",
    "ContentSource",
    "EditLog",
    "Entry",
    "EntryCursor",
    "Mkdir",
    "PathPrefixMatcher",
    "Put",
    "Rename",
    "ZipEditor",
    "archive_attributes",
    "entry_attributes",
    "list_children",
    "lookup",
    "normalize_directory_name",
    "read_entries",
]

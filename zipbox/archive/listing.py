from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence

from .entry import Entry
from .names import DELIMITER, normalize_directory_name

__all__ = ["list_children", "lookup"]


def _child_pattern(prefix: str) -> "re.Pattern[str]":
    # group(1): the segment right after prefix; group(2): anything past its "/"
    d = re.escape(DELIMITER)
    return re.compile(re.escape(prefix) + "([^" + d + "]+)(?:" + d + "(.*))?", re.DOTALL)


def list_children(entries: Sequence[Entry], prefix: str = "") -> List[Entry]:
    """Emulate a directory listing of *prefix* over a flat entry namespace.

    Returns every entry exactly one path element below the normalized
    *prefix*. Deeper descendants imply a subdirectory; when the archive has no
    explicit marker for it, a synthesized directory entry (timestamp taken
    from the first descendant seen) is emitted once, at the position of that
    descendant. Order otherwise follows *entries*.
    """
    prefix = normalize_directory_name(prefix)
    directories = {e.name for e in entries if e.is_dir}
    pattern = _child_pattern(prefix)

    result: List[Entry] = []
    for entry in entries:
        m = pattern.fullmatch(entry.name)
        if m is None:
            continue
        if not m.group(2):
            result.append(entry)
            continue
        subdir = prefix + m.group(1) + DELIMITER
        if subdir not in directories:
            result.append(Entry.directory(subdir, like=entry))
            directories.add(subdir)
    return result


def lookup(entries: Iterable[Entry], path: str) -> Optional[Entry]:
    """Find *path*, preferring an exact match with or without a trailing "/".

    Failing that, if any entry lives under ``path/`` a directory entry is
    synthesized from the first such entry. The empty path names the archive
    itself and is answered by :func:`zipbox.archive.attributes.archive_attributes`,
    so it returns None here.
    """
    if not path:
        return None
    dir_name = normalize_directory_name(path)
    candidate: Optional[Entry] = None
    for entry in entries:
        if entry.name == path or entry.name == dir_name:
            return entry
        if candidate is None and entry.name.startswith(dir_name):
            candidate = entry
    if candidate is not None:
        return Entry.directory(dir_name, like=candidate)
    return None

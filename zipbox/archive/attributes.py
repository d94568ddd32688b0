from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from .entry import Entry

__all__ = ["Attributes", "entry_attributes", "archive_attributes"]


@dataclass(frozen=True)
class Attributes:
    """File-style attributes for an entry or for the archive root.

    ``size`` is None for directories. Entries are always read-only: nothing
    can be changed in place, only through a commit.
    """

    name: str
    is_dir: bool
    size: Optional[int]
    modified: datetime
    synthesized: bool = False
    read_only: bool = True

    def as_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["modified"] = self.modified.isoformat(timespec="seconds")
        return d


def entry_attributes(entry: Entry) -> Attributes:
    return Attributes(
        name=entry.name,
        is_dir=entry.is_dir,
        size=None if entry.is_dir else entry.size,
        modified=entry.modified,
        synthesized=entry.synthesized,
    )


def archive_attributes(path: str | Path) -> Attributes:
    """Attributes of the archive root: the archive file posing as a directory.

    Falls back to "now" and size 0 when the file cannot be stat'ed.
    """
    try:
        st = os.stat(path)
        size, modified = st.st_size, datetime.fromtimestamp(st.st_mtime)
    except OSError:
        size, modified = 0, datetime.now()
    return Attributes(name="", is_dir=True, size=size, modified=modified.replace(microsecond=0))

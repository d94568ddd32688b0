from __future__ import annotations

import logging
import zipfile
import zlib
from pathlib import Path
from typing import IO, List, Optional, Set

from .entry import Entry

__all__ = ["ArchiveReader", "ENTRY_READ_ERRORS", "read_entries"]

_logger = logging.getLogger(__name__)

# Failures raised while reading one entry body (bad CRC, truncated data, ...).
ENTRY_READ_ERRORS = (OSError, EOFError, zipfile.BadZipFile, zlib.error)


class ArchiveReader:
    """Random-access view of an archive that may not exist yet.

    A missing, unreadable or corrupt archive is not an error: ``open()``
    returns False and the reader behaves as an empty archive.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._zf: Optional[zipfile.ZipFile] = None

    def open(self) -> bool:
        """Open the archive for reading; return True if a real archive was found."""
        if self._zf is not None:
            return True
        try:
            self._zf = zipfile.ZipFile(self.path, "r")
        except (OSError, zipfile.BadZipFile) as e:
            _logger.debug("treating %s as empty: %s", self.path, e)
            self._zf = None
            return False
        return True

    def close(self) -> None:
        if self._zf is not None:
            try:
                self._zf.close()
            finally:
                self._zf = None

    def __enter__(self) -> "ArchiveReader":
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._zf is not None

    def infos(self) -> List[zipfile.ZipInfo]:
        """Raw ``ZipInfo`` records in central-directory order."""
        return list(self._zf.infolist()) if self._zf is not None else []

    def entries(self) -> List[Entry]:
        return [Entry.from_info(i) for i in self.infos()]

    def entry_set(self) -> Set[str]:
        return {i.filename for i in self.infos()}

    def get(self, name: str) -> Optional[Entry]:
        """Return the entry with exactly this name, or None."""
        if self._zf is None:
            return None
        try:
            return Entry.from_info(self._zf.getinfo(name))
        except KeyError:
            return None

    def open_entry_stream(self, entry: Entry | zipfile.ZipInfo | str) -> IO[bytes]:
        """Open a readable stream over one entry's content; the caller closes it."""
        if self._zf is None:
            raise FileNotFoundError(f"archive not open: {self.path}")
        if isinstance(entry, Entry):
            target = entry.info if entry.info is not None else entry.name
        else:
            target = entry
        return self._zf.open(target, "r")


def read_entries(path: str | Path) -> List[Entry]:
    """All entries of the archive at *path*, or [] if it is absent or corrupt."""
    with ArchiveReader(path) as reader:
        return reader.entries()

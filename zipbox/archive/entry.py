from __future__ import annotations

import zipfile
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from .names import DELIMITER, normalize_directory_name

__all__ = ["Entry", "ZIP_EPOCH"]

# Earliest timestamp a zip local header can carry.
ZIP_EPOCH: Tuple[int, int, int, int, int, int] = (1980, 1, 1, 0, 0, 0)


@dataclass(frozen=True)
class Entry:
    """One named object inside an archive snapshot.

    ``info`` is the backing ``ZipInfo`` for entries read from a real archive
    and ``None`` for synthesized directory entries.
    """

    name: str
    size: int = 0
    compressed_size: int = 0
    date_time: Tuple[int, int, int, int, int, int] = ZIP_EPOCH
    compress_type: int = zipfile.ZIP_STORED
    synthesized: bool = False
    info: Optional[zipfile.ZipInfo] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_info(cls, info: zipfile.ZipInfo) -> "Entry":
        return cls(
            name=info.filename,
            size=info.file_size,
            compressed_size=info.compress_size,
            date_time=tuple(info.date_time),  # type: ignore[arg-type]
            compress_type=info.compress_type,
            info=info,
        )

    @classmethod
    def directory(cls, name: str, like: "Entry") -> "Entry":
        """Fabricate a directory entry named *name* carrying *like*'s timestamp."""
        return cls(
            name=normalize_directory_name(name),
            date_time=like.date_time,
            synthesized=True,
        )

    @property
    def is_dir(self) -> bool:
        return self.name.endswith(DELIMITER)

    @property
    def modified(self) -> datetime:
        # Zip timestamps are naive local time with 2-second resolution.
        return datetime(*self.date_time)

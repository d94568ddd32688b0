from __future__ import annotations

import shutil
from dataclasses import dataclass
from typing import IO, Callable, Dict, FrozenSet, List, Set, Union

from .names import PathPrefixMatcher, normalize_directory_name

__all__ = [
    "ContentSource",
    "Put",
    "Mkdir",
    "Rename",
    "Edit",
    "EditLog",
    "write_content",
]

# bytes/str are written as-is (str as UTF-8); a readable binary stream is
# drained and closed; a callable receives the open entry stream and must not
# close it.
ContentSource = Union[bytes, bytearray, str, IO[bytes], Callable[[IO[bytes]], None]]


@dataclass(frozen=True)
class Put:
    path: str
    source: ContentSource


@dataclass(frozen=True)
class Mkdir:
    path: str


@dataclass(frozen=True)
class Rename:
    path: str
    source_path: str


Edit = Union[Put, Mkdir, Rename]


def write_content(source: ContentSource, out: IO[bytes]) -> None:
    """Copy *source* into the open entry stream *out*."""
    if isinstance(source, str):
        out.write(source.encode("utf-8"))
    elif isinstance(source, (bytes, bytearray, memoryview)):
        out.write(source)
    elif hasattr(source, "read"):
        try:
            shutil.copyfileobj(source, out)  # type: ignore[arg-type]
        finally:
            source.close()  # type: ignore[union-attr]
    elif callable(source):
        source(out)
    else:
        raise TypeError(f"unsupported content source: {type(source).__name__}")


class EditLog:
    """Pending structural edits against one archive.

    Edits are keyed by target path (last writer wins) and visited in ascending
    path order. Exact-match deletions and recursive directory prefixes are
    tracked separately; both only ever filter entries of the *original*
    archive, never the entries an edit writes.
    """

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._edits: Dict[str, Edit] = {}
        self._deletes: Set[str] = set()
        self._rmdirs = PathPrefixMatcher()

    def add(self, path: str, source: ContentSource) -> None:
        """Write *source* at *path*, overwriting any existing entry."""
        self._deletes.add(path)
        self._edits[path] = Put(path, source)

    def mkdir(self, path: str) -> None:
        """Create a directory marker; an existing marker is overwritten."""
        path = normalize_directory_name(path)
        self._deletes.add(path)
        self._edits[path] = Mkdir(path)

    def delete(self, path: str) -> None:
        """Remove exactly *path*; a trailing "/" removes only the marker."""
        self._deletes.add(path)

    def rmdir(self, path: str) -> None:
        """Remove the directory *path* and everything beneath it."""
        self._rmdirs.add(path)

    def rename(self, source_path: str, path: str) -> None:
        self._deletes.add(source_path)
        self._edits[path] = Rename(path, source_path)

    def edits(self) -> List[Edit]:
        return [self._edits[k] for k in sorted(self._edits)]

    def is_deleted(self, name: str) -> bool:
        return name in self._deletes or self._rmdirs.matches(name)

    @property
    def deletes(self) -> FrozenSet[str]:
        return frozenset(self._deletes)

    @property
    def rmdir_prefixes(self) -> tuple[str, ...]:
        return self._rmdirs.prefixes

    @property
    def pending(self) -> bool:
        return bool(self._edits or self._deletes or len(self._rmdirs))

    def __len__(self) -> int:
        return len(self._edits)

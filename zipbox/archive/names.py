from __future__ import annotations

from typing import List

__all__ = ["DELIMITER", "normalize_directory_name", "PathPrefixMatcher"]

# Zip entry names always use "/" regardless of platform.
DELIMITER = "/"


def normalize_directory_name(path: str | None) -> str:
    """Return *path* with a trailing "/" unless it already has one or is empty.

    >>> normalize_directory_name("abc")
    'abc/'
    >>> normalize_directory_name("")
    ''
    """
    if not path:
        return ""
    return path if path.endswith(DELIMITER) else path + DELIMITER


class PathPrefixMatcher:
    """A growing set of directory prefixes, like ``str.startswith`` over many.

    Prefixes are normalized on the way in, so ``add("foo")`` matches
    ``foo/`` and ``foo/bar.txt`` but not ``foobar.txt``.
    """

    def __init__(self) -> None:
        self._prefixes: List[str] = []

    def add(self, prefix: str) -> None:
        self._prefixes.append(normalize_directory_name(prefix))

    def matches(self, path: str) -> bool:
        return any(path.startswith(p) for p in self._prefixes)

    @property
    def prefixes(self) -> tuple[str, ...]:
        return tuple(self._prefixes)

    def __len__(self) -> int:
        return len(self._prefixes)

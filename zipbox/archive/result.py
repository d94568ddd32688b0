from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict

__all__ = ["CommitResult"]


@dataclass
class CommitResult:
    """Counters for one commit.

    An overwrite or a rename counts once in ``deleted`` (if the old entry
    existed) and once in ``added``.
    """

    kept: int = 0
    added: int = 0
    deleted: int = 0

    def keep(self) -> None:
        self.kept += 1

    def add(self) -> None:
        self.added += 1

    def delete(self) -> None:
        self.deleted += 1

    @property
    def changes(self) -> int:
        return self.added + self.deleted

    def as_dict(self) -> Dict[str, int]:
        d = asdict(self)
        d["changes"] = self.changes
        return d

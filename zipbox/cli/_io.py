from __future__ import annotations

import json
import sys
from typing import Any, Iterable, Mapping, Sequence

# Verbosity gates
QUIET = False


def set_verbosity(quiet: bool = False) -> None:
    global QUIET
    QUIET = bool(quiet)


def eprint_once(msg: str) -> None:
    if not QUIET:
        print(msg, file=sys.stderr)


def print_json(obj: Any) -> None:
    """Dump *obj* using compact, stable separators (no color)."""
    sys.stdout.write(json.dumps(obj, separators=(",", ":"), sort_keys=True) + "\n")


def _stringify(x: Any) -> str:
    return "" if x is None else str(x)


def print_table(
    rows: Iterable[Mapping[str, Any]],
    headers: Sequence[str] | None = None,
) -> None:
    """
    Plain ASCII table (no color) from a list of dicts; columns follow *headers*.
    """
    it = list(rows)
    if not it:
        return
    if headers is None:
        headers = list(it[0].keys())
    matrix = [[_stringify(r.get(h, "")) for h in headers] for r in it]

    widths = [max(len(h), *(len(r[i]) for r in matrix)) for i, h in enumerate(headers)]

    def fmt(row):
        return "  ".join(s.ljust(w) for s, w in zip(row, widths)).rstrip()

    print(fmt(list(map(str, headers))))
    print("  ".join("-" * w for w in widths))
    for r in matrix:
        print(fmt(r))

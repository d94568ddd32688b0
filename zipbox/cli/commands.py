from __future__ import annotations

"""Subcommands mirroring a file-transfer host's verbs (DIR, GET, PUT, ...).

Each handler takes the parsed namespace and the resolved config, runs one
editor operation and translates the commit counters into success or a typed
error, which ``main`` maps onto an exit code.
"""

import argparse
import posixpath
import shutil
import sys
from pathlib import Path
from typing import IO, Iterable, List, Set

from ..archive import ArchiveReader, Entry, ZipEditor, archive_attributes, entry_attributes
from ..errors import ArchiveError, EntryExistsError, EntryNotFoundError
from ..io.config import ZipBoxConfig
from ._exit import OK
from ._io import print_json, print_table


def _not_found(path: str) -> EntryNotFoundError:
    return EntryNotFoundError(f"'{path}' does not exist or is not accessible")


def _is_root(path: str | None) -> bool:
    return not path or path == "."


def _require_archive(cfg: ZipBoxConfig) -> Path:
    path = Path(cfg.archive or "")
    if not path.is_file():
        raise _not_found(str(path))
    return path


def _emit_entries(entries: Iterable[Entry], as_json: bool) -> None:
    attrs = [entry_attributes(e) for e in entries]
    if as_json:
        print_json([a.as_dict() for a in attrs])
        return
    print_table(
        [
            {
                "type": "dir" if a.is_dir else "file",
                "size": a.size,
                "modified": a.modified.isoformat(sep=" "),
                "name": a.name,
            }
            for a in attrs
        ],
        headers=["type", "size", "modified", "name"],
    )


def unique_name(path: str, names: Set[str]) -> str:
    """Return *path*, or ``stem.N.ext`` for the first N not already in *names*."""
    stem, ext = posixpath.splitext(path)
    candidate = path
    i = 0
    while candidate in names:
        i += 1
        candidate = f"{stem}.{i}{ext}"
    return candidate


# ---- handlers ----------------------------------------------------------------


def cmd_ls(ns: argparse.Namespace, cfg: ZipBoxConfig) -> int:
    path = "" if _is_root(ns.path) else ns.path
    _emit_entries(ZipEditor.from_config(cfg).list(path), ns.json)
    return OK


def cmd_entries(ns: argparse.Namespace, cfg: ZipBoxConfig) -> int:
    _emit_entries(ZipEditor.from_config(cfg).entries(), ns.json)
    return OK


def cmd_stat(ns: argparse.Namespace, cfg: ZipBoxConfig) -> int:
    archive = _require_archive(cfg)
    if _is_root(ns.path):
        attrs = archive_attributes(archive)
    else:
        entry = ZipEditor.from_config(cfg).lookup(ns.path)
        if entry is None:
            raise _not_found(ns.path)
        attrs = entry_attributes(entry)
    d = attrs.as_dict()
    if ns.json:
        print_json(d)
    else:
        print_table([{"key": k, "value": v} for k, v in d.items()], headers=["key", "value"])
    return OK


def cmd_get(ns: argparse.Namespace, cfg: ZipBoxConfig) -> int:
    with ArchiveReader(cfg.archive or "") as reader:
        entry = reader.get(ns.path)
        if entry is None or entry.is_dir:
            raise _not_found(ns.path)
        with reader.open_entry_stream(entry) as src:
            if ns.dest and ns.dest != "-":
                with open(ns.dest, "wb") as dst:
                    shutil.copyfileobj(src, dst)
            else:
                shutil.copyfileobj(src, sys.stdout.buffer)
                sys.stdout.buffer.flush()
    return OK


def _file_source(src: str):
    def _write(out: IO[bytes]) -> None:
        if src == "-":
            shutil.copyfileobj(sys.stdin.buffer, out)
            return
        with open(src, "rb") as f:
            shutil.copyfileobj(f, out)

    return _write


def cmd_put(ns: argparse.Namespace, cfg: ZipBoxConfig) -> int:
    if ns.src != "-" and not Path(ns.src).is_file():
        raise _not_found(ns.src)
    editor = ZipEditor.from_config(cfg)
    dest = ns.dest
    if ns.unique:
        dest = unique_name(dest, editor.entry_set())
    editor.add(dest, _file_source(ns.src))
    result = editor.commit()
    if result.added != 1:
        raise ArchiveError(f"'{dest}' not created.")
    if dest != ns.dest:
        print(dest)
    return OK


def cmd_rm(ns: argparse.Namespace, cfg: ZipBoxConfig) -> int:
    _require_archive(cfg)
    editor = ZipEditor.from_config(cfg)
    editor.delete(ns.path)
    if editor.commit().deleted == 0:
        raise _not_found(ns.path)
    return OK


def cmd_mv(ns: argparse.Namespace, cfg: ZipBoxConfig) -> int:
    _require_archive(cfg)
    editor = ZipEditor.from_config(cfg)
    editor.rename(ns.source, ns.dest)
    result = editor.commit()
    if result.deleted == 0:
        raise _not_found(ns.source)
    if result.added == 0:
        raise ArchiveError("Rename failed.")
    return OK


def cmd_mkdir(ns: argparse.Namespace, cfg: ZipBoxConfig) -> int:
    if _is_root(ns.path):
        return OK
    editor = ZipEditor.from_config(cfg)
    editor.mkdir(ns.path)
    result = editor.commit()
    if result.deleted > 0:
        raise EntryExistsError(f"'{ns.path}' already exists.")
    if result.added == 0:
        raise ArchiveError(f"'{ns.path}' not created.")
    return OK


def cmd_rmdir(ns: argparse.Namespace, cfg: ZipBoxConfig) -> int:
    if _is_root(ns.path):
        raise _not_found(ns.path or "")
    _require_archive(cfg)
    editor = ZipEditor.from_config(cfg)
    editor.rmdir(ns.path)
    if editor.commit().deleted == 0:
        raise _not_found(ns.path)
    return OK


# ---- registration ------------------------------------------------------------


def register(subparsers) -> List[str]:
    names: List[str] = []

    def _add(name: str, func, help_text: str) -> argparse.ArgumentParser:
        sp = subparsers.add_parser(name, help=help_text, description=help_text)
        sp.set_defaults(func=func)
        names.append(name)
        return sp

    sp = _add("ls", cmd_ls, "List the immediate children of a directory path.")
    sp.add_argument("path", nargs="?", default="")
    sp.add_argument("--json", action="store_true")

    sp = _add("entries", cmd_entries, "List every entry in archive order.")
    sp.add_argument("--json", action="store_true")

    sp = _add("stat", cmd_stat, "Show attributes of an entry, or of the archive itself.")
    sp.add_argument("path", nargs="?", default="")
    sp.add_argument("--json", action="store_true")

    sp = _add("get", cmd_get, "Copy an entry's content to a file or stdout.")
    sp.add_argument("path")
    sp.add_argument("dest", nargs="?", default=None)

    sp = _add("put", cmd_put, "Store a file (or stdin with '-') as an entry.")
    sp.add_argument("src")
    sp.add_argument("dest")
    sp.add_argument("--unique", action="store_true", help="pick name.N.ext if DEST exists")

    sp = _add("rm", cmd_rm, "Delete one entry.")
    sp.add_argument("path")

    sp = _add("mv", cmd_mv, "Rename an entry.")
    sp.add_argument("source")
    sp.add_argument("dest")

    sp = _add("mkdir", cmd_mkdir, "Create a directory marker.")
    sp.add_argument("path")

    sp = _add("rmdir", cmd_rmdir, "Delete a directory and everything under it.")
    sp.add_argument("path")

    return names

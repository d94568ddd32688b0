from __future__ import annotations

"""Transactional zip editing.

A ``ZipEditor`` queues structural edits against one archive path and applies
them in a single streaming pass on ``commit()``: original entries and pending
edits are merged in ascending name order into a new archive, which then
replaces the original. Untouched entries keep their name, timestamp,
attributes and content.

Two install modes exist:

* ``replace``: a real archive was read. Output goes to a fresh sibling file
  that is atomically renamed over the original, so readers never observe a
  partial archive and a crash leaves the original intact.
* ``direct``: the archive was absent or unreadable. Output is written straight
  to the archive path. This path is NOT crash-safe.
"""

import logging
import os
import shutil
import struct
import tempfile
import time
import zipfile
from pathlib import Path
from typing import IO, List, Optional, Set, Tuple

from ..errors import CommitError, ConfigError
from ..io.atomic import atomic_replace, copy_mode_best_effort, discard, unique_sibling_path
from ..io.config import DEFAULT_COMPRESSION, ZipBoxConfig, parse_compression_level
from ..io.log import COMMIT_LOG, append_jsonl
from ..io.paths import temp_root
from .cursor import EntryCursor
from .edits import ContentSource, Edit, EditLog, Mkdir, Put, Rename, write_content
from .entry import ZIP_EPOCH, Entry
from .listing import list_children, lookup
from .reader import ENTRY_READ_ERRORS, ArchiveReader
from .result import CommitResult

__all__ = ["ZipEditor", "MODE_REPLACE", "MODE_DIRECT", "MODE_NOOP"]

_logger = logging.getLogger(__name__)

MODE_REPLACE = "replace"
MODE_DIRECT = "direct"
MODE_NOOP = "noop"

_COPY_BUFSIZE = 64 * 1024
# Entry bodies up to this size are staged in memory, larger ones on disk.
_SPOOL_MAX = 8 * 1024 * 1024
_ZIP64_EXTRA_ID = 0x0001
# Extra failures zipfile raises when opening an entry (encrypted, unknown method).
_ENTRY_OPEN_ERRORS = ENTRY_READ_ERRORS + (RuntimeError, NotImplementedError)
_DIR_ATTR = (0o40775 << 16) | 0x10
_FILE_ATTR = 0o644 << 16


def _now() -> Tuple[int, int, int, int, int, int]:
    stamp = tuple(time.localtime(time.time())[:6])
    return max(stamp, ZIP_EPOCH)  # type: ignore[return-value]


def _set_level(zinfo: zipfile.ZipInfo, level: Optional[int]) -> None:
    # 3.13 made the per-entry level public as ``compress_level``.
    if hasattr(zinfo, "compress_level"):
        zinfo.compress_level = level
    else:
        zinfo._compresslevel = level  # type: ignore[attr-defined]


def _new_info(name: str, date_time, level: Optional[int]) -> zipfile.ZipInfo:
    zinfo = zipfile.ZipInfo(name, date_time=tuple(date_time))
    if zinfo.is_dir():
        zinfo.compress_type = zipfile.ZIP_STORED
        zinfo.external_attr = _DIR_ATTR
        zinfo.CRC = 0
    else:
        zinfo.compress_type = zipfile.ZIP_DEFLATED
        zinfo.external_attr = _FILE_ATTR
        _set_level(zinfo, level)
    return zinfo


def _is_empty_dir(info: zipfile.ZipInfo) -> bool:
    return info.is_dir() and info.file_size == 0


def _strip_zip64_extra(extra: bytes) -> bytes:
    """Drop zip64 (0x0001) records; zipfile writes its own when a body needs one."""
    kept = []
    i = 0
    while i + 4 <= len(extra):
        tag, size = struct.unpack("<HH", extra[i:i + 4])
        end = i + 4 + size
        if tag != _ZIP64_EXTRA_ID:
            kept.append(extra[i:end])
        i = end
    kept.append(extra[i:])
    return b"".join(kept)


def _clone_info(info: zipfile.ZipInfo, level: Optional[int]) -> zipfile.ZipInfo:
    zinfo = zipfile.ZipInfo(info.filename, date_time=tuple(info.date_time))
    zinfo.comment = info.comment
    zinfo.extra = _strip_zip64_extra(info.extra)
    zinfo.create_system = info.create_system
    zinfo.external_attr = info.external_attr
    if _is_empty_dir(info):
        zinfo.compress_type = zipfile.ZIP_STORED
        zinfo.file_size = zinfo.compress_size = zinfo.CRC = 0
    else:
        zinfo.compress_type = info.compress_type
        # lets zipfile pick zip64 headers up front for large bodies
        zinfo.file_size = info.file_size
    _set_level(zinfo, level)
    return zinfo


def _copy_body(src: IO[bytes], dst: IO[bytes]) -> Optional[BaseException]:
    """Stream *src* into *dst*; return the read error, if any.

    Write errors propagate: they concern the output, not the entry.
    """
    while True:
        try:
            chunk = src.read(_COPY_BUFSIZE)
        except ENTRY_READ_ERRORS as e:
            return e
        if not chunk:
            return None
        dst.write(chunk)


def _stage_body(src: IO[bytes]) -> Tuple[Optional[IO[bytes]], Optional[BaseException]]:
    """Read *src* to the end into a spool file.

    Returns the spool rewound to its start, or ``(None, error)`` when reading
    failed part way.
    """
    spool = tempfile.SpooledTemporaryFile(max_size=_SPOOL_MAX, dir=temp_root())
    try:
        err = _copy_body(src, spool)
    except BaseException:
        spool.close()
        raise
    if err is not None:
        spool.close()
        return None, err
    spool.seek(0)
    return spool, None


def _transfer(
    reader: ArchiveReader,
    source: Entry | zipfile.ZipInfo,
    zout: zipfile.ZipFile,
    zinfo: zipfile.ZipInfo,
) -> Optional[BaseException]:
    """Copy the body of *source* into *zout* as *zinfo*; return the read error, if any.

    The output entry is only opened once the whole body has been read, so an
    entry that fails to open or fails mid-read leaves nothing in *zout*.
    """
    try:
        src = reader.open_entry_stream(source)
    except _ENTRY_OPEN_ERRORS as e:
        return e
    with src:
        spool, err = _stage_body(src)
    if spool is None:
        return err
    with spool, zout.open(zinfo, "w") as dst:
        shutil.copyfileobj(spool, dst, _COPY_BUFSIZE)
    return None


class ZipEditor:
    """Queue edits against the archive at *path* and apply them with ``commit()``.

    The archive need not exist; it is created by the first commit that
    changes anything. Builder methods only record intent; nothing touches
    the file until ``commit()``, after which the pending edits are cleared.
    """

    def __init__(self, path: str | Path, compression_level: int | str | None = DEFAULT_COMPRESSION, *, audit: bool = False) -> None:
        self.path = Path(path)
        self.compression_level = parse_compression_level(compression_level)
        self.audit = audit
        self.log = EditLog()

    @classmethod
    def from_config(cls, cfg: ZipBoxConfig, path: str | Path | None = None) -> "ZipEditor":
        target = path or cfg.archive
        if not target:
            raise ConfigError("no archive configured")
        return cls(target, cfg.compression_level, audit=cfg.audit)

    # ---- builder -----------------------------------------------------------

    def add(self, path: str, source: ContentSource) -> None:
        self.log.add(path, source)

    def mkdir(self, path: str) -> None:
        self.log.mkdir(path)

    def delete(self, path: str) -> None:
        self.log.delete(path)

    def rmdir(self, path: str) -> None:
        self.log.rmdir(path)

    def rename(self, source_path: str, path: str) -> None:
        self.log.rename(source_path, path)

    # ---- read side -----------------------------------------------------------

    def entries(self) -> List[Entry]:
        with ArchiveReader(self.path) as reader:
            return reader.entries()

    def entry_set(self) -> Set[str]:
        with ArchiveReader(self.path) as reader:
            return reader.entry_set()

    def list(self, prefix: str = "") -> List[Entry]:
        return list_children(self.entries(), prefix)

    def lookup(self, path: str) -> Optional[Entry]:
        return lookup(self.entries(), path)

    # ---- commit --------------------------------------------------------------

    @property
    def _level(self) -> Optional[int]:
        return None if self.compression_level == DEFAULT_COMPRESSION else self.compression_level

    def _open_output(self, staged: bool) -> Tuple[Path, IO[bytes]]:
        if not staged:
            return self.path, open(self.path, "wb")
        while True:
            target = unique_sibling_path(self.path)
            try:
                return target, open(target, "xb")
            except FileExistsError:
                continue

    def commit(self) -> CommitResult:
        """Apply every pending edit in one pass and return the counters.

        Raises CommitError if the output cannot be opened, written or
        installed; the pending edits are then left in place.
        """
        result = CommitResult()
        reader = ArchiveReader(self.path)
        staged = reader.open()
        try:
            target, out = self._open_output(staged)
        except OSError as e:
            reader.close()
            raise CommitError(f"cannot create output for {self.path}: {e}") from e

        try:
            with out:
                self._merge(reader, out, result)
                out.flush()
                try:
                    os.fsync(out.fileno())
                except OSError:
                    pass
        except OSError as e:
            discard(target)
            raise CommitError(f"failed writing {target}: {e}") from e
        except BaseException:
            discard(target)
            raise
        finally:
            reader.close()

        if result.changes == 0:
            mode = MODE_NOOP
            discard(target)
        elif staged:
            mode = MODE_REPLACE
            copy_mode_best_effort(self.path, target)
            try:
                atomic_replace(target, self.path)
            except OSError as e:
                discard(target)
                raise CommitError(f"cannot replace {self.path}: {e}") from e
        else:
            mode = MODE_DIRECT
            _logger.debug("wrote %s directly; original was absent or unreadable", self.path)

        self.log.reset()
        _logger.debug(
            "commit %s: mode=%s kept=%d added=%d deleted=%d",
            self.path, mode, result.kept, result.added, result.deleted,
        )
        append_jsonl(
            COMMIT_LOG,
            {"archive": str(self.path), "mode": mode, **result.as_dict()},
            feature_guard=self.audit,
        )
        return result

    def _ordered(self, infos: List[zipfile.ZipInfo]) -> List[zipfile.ZipInfo]:
        names = [i.filename for i in infos]
        if all(a <= b for a, b in zip(names, names[1:])):
            return infos
        _logger.warning("%s: entries are not in name order; merging a sorted copy", self.path)
        return sorted(infos, key=lambda i: i.filename)

    def _merge(self, reader: ArchiveReader, out: IO[bytes], result: CommitResult) -> None:
        cursor = EntryCursor(self._ordered(reader.infos()))
        written: Set[str] = set()
        with zipfile.ZipFile(out, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=self._level) as zout:
            for edit in self.log.edits():
                while not cursor.done and cursor.value.filename < edit.path:
                    self._copy_through(reader, zout, cursor.value, written, result)
                    cursor.step()
                if self._apply(reader, zout, edit, result):
                    written.add(edit.path)
            while not cursor.done:
                self._copy_through(reader, zout, cursor.value, written, result)
                cursor.step()

    def _copy_through(
        self,
        reader: ArchiveReader,
        zout: zipfile.ZipFile,
        info: zipfile.ZipInfo,
        written: Set[str],
        result: CommitResult,
    ) -> None:
        name = info.filename
        # An original entry sharing a name with a freshly written one was overwritten.
        if self.log.is_deleted(name) or name in written:
            result.delete()
            return
        copy = _clone_info(info, self._level)
        if _is_empty_dir(info):
            zout.mkdir(copy)
            result.keep()
            return
        err = _transfer(reader, info, zout, copy)
        if err is not None:
            _logger.warning("dropping unreadable entry %r: %s", name, err)
            return
        result.keep()

    def _apply(self, reader: ArchiveReader, zout: zipfile.ZipFile, edit: Edit, result: CommitResult) -> bool:
        """Write one edit; return True if an entry was written."""
        if isinstance(edit, Mkdir):
            zout.mkdir(_new_info(edit.path, _now(), None))
            result.add()
            return True

        if isinstance(edit, Put):
            zinfo = _new_info(edit.path, _now(), self._level)
            with zout.open(zinfo, "w") as dst:
                write_content(edit.source, dst)
            result.add()
            return True

        if isinstance(edit, Rename):
            source = reader.get(edit.source_path)
            if source is None:
                _logger.debug("rename source %r is gone; skipping", edit.source_path)
                return False
            zinfo = _new_info(edit.path, source.date_time, self._level)
            if zinfo.is_dir() and source.size == 0:
                zout.mkdir(zinfo)
                result.add()
                return True
            zinfo.file_size = source.size
            err = _transfer(reader, source, zout, zinfo)
            if err is not None:
                _logger.warning("rename source %r unreadable; rename dropped: %s", edit.source_path, err)
                return False
            result.add()
            return True

        raise TypeError(f"unknown edit: {edit!r}")

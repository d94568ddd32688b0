from __future__ import annotations

import errno
import os
import random
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

__all__ = [
    "unique_sibling_path",
    "atomic_replace",
    "copy_mode_best_effort",
    "discard",
]


def _fsync_best_effort(path: Path) -> None:
    """Best-effort directory fsync for durability.

    On Windows, fsync on directories may fail; ignore in that case.
    """
    try:
        fd = os.open(str(path), os.O_RDONLY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
    except OSError:
        pass


def unique_sibling_path(base: Path | str, now: Optional[datetime] = None) -> Path:
    """Return a not-yet-existing path next to *base*.

    The name is ``<base>-<yyyyMMddHHmmss.SSS>``, with ``-1``, ``-2``, ...
    appended while a file of that name exists. The check is advisory; open
    the result with mode "xb" to claim it.
    """
    base = Path(base)
    now = now or datetime.now()
    stamp = now.strftime("%Y%m%d%H%M%S") + ".%03d" % (now.microsecond // 1000)
    candidate = Path(f"{base}-{stamp}")
    i = 1
    while candidate.exists():
        candidate = Path(f"{base}-{stamp}-{i}")
        i += 1
    return candidate


def copy_mode_best_effort(src: Path | str, dst: Path | str) -> None:
    """Copy permission bits from *src* onto *dst*, ignoring failures."""
    try:
        os.chmod(dst, os.stat(src).st_mode & 0o7777)
    except OSError:
        pass


def discard(path: Path | str) -> None:
    """Remove *path* if it exists."""
    try:
        Path(path).unlink()
    except FileNotFoundError:
        pass


def atomic_replace(tmp_path: Path, final_path: Path, *, retries: int = 80, backoff_ms: int = 10) -> None:
    """Cross-platform atomic replace resilient to Windows sharing violations.

    Retries on common Windows/Posix sharing/permission errors with exponential
    backoff and small jitter; cleans up the temp file on failure. On success,
    best-effort fsync is performed on the target and parent directory.
    """
    tmp_path = Path(tmp_path)
    final_path = Path(final_path)
    last_err: Optional[BaseException] = None
    delay = backoff_ms / 1000.0

    for _ in range(retries):
        try:
            os.replace(str(tmp_path), str(final_path))  # atomic on POSIX & Windows
            try:
                with open(final_path, "rb", buffering=0) as f:
                    os.fsync(f.fileno())
            except OSError:
                pass
            _fsync_best_effort(final_path.parent)
            return
        except PermissionError as e:
            # Windows sharing violations surface as PermissionError; retry.
            last_err = e
        except OSError as e:
            if e.errno not in {errno.EACCES, errno.EPERM, errno.EBUSY}:
                last_err = e
                break
            last_err = e

        # Exponential backoff with jitter; cap ~250ms between attempts
        time.sleep(delay + (random.uniform(0, delay * 0.25)))
        delay = min(delay * 1.5, 0.25)

    # Replace never succeeded; attempt cleanup then re-raise the last error
    try:
        discard(tmp_path)
    finally:
        if last_err:
            raise last_err

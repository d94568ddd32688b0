import json
import os
from typing import Optional

from . import paths

COMMIT_LOG = "commit.jsonl"


def append_jsonl(filename: str, record: dict, *, feature_guard: Optional[bool] = None) -> None:
    """Append one JSON record to *filename* under the logs directory.

    Callers pass ``feature_guard=False`` to suppress the write when the
    corresponding feature is disabled.
    """
    if feature_guard is False:
        return
    base = paths.logs_dir()
    path = os.path.join(base, os.path.basename(filename))
    # Binary append avoids platform newline translation; always a single LF.
    line = (json.dumps(record, ensure_ascii=False, sort_keys=True) + "\n").encode("utf-8")
    with open(path, "ab") as f:
        f.write(line)

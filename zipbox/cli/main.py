# zipbox/cli/main.py
from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import List

from ..errors import (
    ArchiveError,
    CLIError,
    ConfigError,
    EntryExistsError,
    EntryNotFoundError,
    format_error,
)
from ..io.config import load_config, parse_compression_level
from . import commands
from ._config import discover_config_path
from ._exit import INTERNAL, IO_ERR, OK, USER_ERR
from ._io import eprint_once, set_verbosity


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zipbox",
        description="Browse and edit zip archives; every change is one atomic commit.",
        allow_abbrev=False,
    )
    try:
        from zipbox import __version__ as _VER  # lazy import to avoid side effects
    except Exception:
        _VER = "unknown"
    parser.add_argument("--version", action="version", version=f"zipbox {_VER}")
    parser.add_argument("--debug", action="store_true", help="log engine activity to stderr")
    parser.add_argument("-q", "--quiet", action="store_true", help="suppress error messages")
    parser.add_argument("-c", "--config", dest="config", help="YAML config file or directory")
    parser.add_argument("-f", "--archive", dest="archive", help="zip archive to operate on")
    parser.add_argument("--level", dest="level", help="compression level 0-9 or 'default'")
    subparsers = parser.add_subparsers(dest="command")
    commands.register(subparsers)
    return parser


def _configure_logging(debug: bool) -> None:
    if not debug:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("[zipbox] %(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger("zipbox")
    if not root.handlers:
        root.addHandler(handler)
    root.setLevel(logging.DEBUG)


def main(argv: List[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    ns = parser.parse_args(argv)
    if not getattr(ns, "func", None):
        parser.print_help(sys.stderr)
        return USER_ERR

    set_verbosity(ns.quiet)
    _configure_logging(ns.debug)

    try:
        selected, source = discover_config_path(ns.config, Path.cwd(), os.environ)
        if source == "explicit-missing":
            raise ConfigError(f"config not found: {selected}")
        if ns.debug and selected is not None:
            eprint_once(f"[zipbox] config: {selected} ({source})")
        cfg = load_config(selected)
        if ns.archive:
            cfg = replace(cfg, archive=ns.archive)
        if ns.level is not None:
            cfg = replace(cfg, compression_level=parse_compression_level(ns.level))
        if not cfg.archive:
            raise ConfigError("no archive given; use -f/--archive or set 'archive' in the config")
        return int(ns.func(ns, cfg) or OK)
    except (ConfigError, EntryExistsError) as e:
        eprint_once(format_error(e))
        return USER_ERR
    except (EntryNotFoundError, ArchiveError, OSError) as e:
        eprint_once(format_error(e))
        return IO_ERR
    except Exception as e:  # noqa: BLE001
        eprint_once(format_error(CLIError(f"{ns.command}: {format_error(e)}")))
        return INTERNAL


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..errors import ConfigError

__all__ = [
    "DEFAULT",
    "DEFAULT_COMPRESSION",
    "ZipBoxConfig",
    "load_config",
    "parse_compression_level",
]

# Keyword accepted in place of a number for the compression level.
DEFAULT = "default"
# zlib's "use the default level" sentinel.
DEFAULT_COMPRESSION = -1

_KNOWN_KEYS = {"archive", "compression_level", "audit"}


@dataclass(frozen=True)
class ZipBoxConfig:
    archive: Optional[str] = None
    compression_level: int = DEFAULT_COMPRESSION
    audit: bool = False


# ---- small helpers --------------------------------------------------------

def _parse_bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


def parse_compression_level(value: Any) -> int:
    """Turn a configured compression level into an int in -1..9.

    None, "" and "default" (any case) mean ``DEFAULT_COMPRESSION``.
    Raises ConfigError on anything unparseable or out of range.
    """
    if value is None:
        return DEFAULT_COMPRESSION
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ConfigError(f"compression_level: expected an integer, got {value!r}")
    if isinstance(value, str):
        s = value.strip()
        if not s or s.lower() == DEFAULT:
            return DEFAULT_COMPRESSION
        try:
            level = int(s)
        except ValueError as e:
            raise ConfigError(f"compression_level: not an integer: {value!r}") from e
    else:
        level = value
    if level != DEFAULT_COMPRESSION and not 0 <= level <= 9:
        raise ConfigError(f"compression_level: must be 0-9 or {DEFAULT!r}, got {level}")
    return level


def _apply_env_overrides(cfg: ZipBoxConfig, env: Dict[str, str]) -> ZipBoxConfig:
    """
    Merge env overrides into the loaded config (no effect if env vars absent).
    Supported:
      - ZIPBOX_ARCHIVE=<path>
      - ZIPBOX_COMPRESSION_LEVEL=default|0..9
      - ZIPBOX_AUDIT=true|false
    """
    if env.get("ZIPBOX_ARCHIVE"):
        cfg = replace(cfg, archive=env["ZIPBOX_ARCHIVE"])
    if "ZIPBOX_COMPRESSION_LEVEL" in env:
        cfg = replace(cfg, compression_level=parse_compression_level(env["ZIPBOX_COMPRESSION_LEVEL"]))
    if "ZIPBOX_AUDIT" in env:
        cfg = replace(cfg, audit=_parse_bool(env["ZIPBOX_AUDIT"]))
    return cfg


# ---- loader ---------------------------------------------------------------

def load_config(path: str | Path | None = None, env: Optional[Dict[str, str]] = None) -> ZipBoxConfig:
    """
    Load a YAML config if given; otherwise return defaults.
    Behavior:
      * Recognized keys: archive, compression_level, audit. Unknown keys are rejected.
      * A missing file yields defaults.
      * Env overrides (ZIPBOX_*) are applied last.
    """
    env = dict(os.environ if env is None else env)
    cfg = ZipBoxConfig()
    if path:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            data = None
        except yaml.YAMLError as e:
            raise ConfigError(f"{path}: invalid YAML: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: top level must be a mapping")
        unknown = sorted(set(data) - _KNOWN_KEYS)
        if unknown:
            raise ConfigError(f"{path}: unknown keys: {', '.join(map(str, unknown))}")

        archive = data.get("archive")
        cfg = ZipBoxConfig(
            archive=str(archive) if archive else None,
            compression_level=parse_compression_level(data.get("compression_level")),
            audit=_parse_bool(data.get("audit", False)),
        )
    return _apply_env_overrides(cfg, env)

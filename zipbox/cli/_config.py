from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional, Tuple

# Relative default searched under the current working directory
DEFAULT_REL = Path("configs") / "config.yaml"
# XDG subpath under $XDG_CONFIG_HOME (or ~/.config if unset)
XDG_SUBPATH = Path("zipbox") / "config.yaml"


def _coerce_candidate(p: Path) -> Optional[Path]:
    """Return a concrete config file path if the candidate exists.

    Accepts a file path *or* a directory; directories are resolved to
    "config.yaml" inside that directory.
    """
    if p.is_dir():
        p = p / "config.yaml"
    if p.is_file():
        return p.resolve()
    return None


def discover_config_path(
    explicit: Optional[str],
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Tuple[Optional[Path], str]:
    """Deterministic config discovery.

    Order (only when `explicit`/`--config` is not provided):
      1) $ZIPBOX_CONFIG (file or dir -> config.yaml)
      2) CWD: ./configs/config.yaml
      3) XDG: ${XDG_CONFIG_HOME:-$HOME/.config}/zipbox/config.yaml

    Returns a tuple: (selected_path or None, source_tag).
    Source tags: 'explicit', 'explicit-missing', 'env:ZIPBOX_CONFIG',
    'cwd:configs/config.yaml', 'xdg', 'none'.
    """
    cwd = cwd or Path.cwd()
    env = dict(env or {})

    if explicit:
        expanded = Path(os.path.expandvars(explicit)).expanduser()
        sel = _coerce_candidate(expanded)
        if sel is not None:
            return sel, "explicit"
        return expanded, "explicit-missing"

    cenv = env.get("ZIPBOX_CONFIG")
    if cenv:
        sel = _coerce_candidate(Path(os.path.expandvars(cenv)).expanduser())
        if sel is not None:
            return sel, "env:ZIPBOX_CONFIG"

    sel = _coerce_candidate(cwd / DEFAULT_REL)
    if sel is not None:
        return sel, "cwd:configs/config.yaml"

    xdg = env.get("XDG_CONFIG_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    sel = _coerce_candidate(base / XDG_SUBPATH)
    if sel is not None:
        return sel, "xdg"

    return None, "none"

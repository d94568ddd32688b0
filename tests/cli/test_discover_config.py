from __future__ import annotations

from pathlib import Path
from typing import Dict

from zipbox.cli._config import discover_config_path


def _touch(p: Path) -> Path:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text("# yaml\n", encoding="utf-8")
    return p


def test_explicit_wins_even_if_others_exist(tmp_path):
    cwd_cfg = _touch(tmp_path / "configs" / "config.yaml")
    xdg = tmp_path / "xdg"
    _touch(xdg / "zipbox" / "config.yaml")

    other_env: Dict[str, str] = {"XDG_CONFIG_HOME": str(xdg)}
    p, src = discover_config_path(str(cwd_cfg), tmp_path, other_env)
    assert p == cwd_cfg.resolve()
    assert src == "explicit"


def test_explicit_missing_is_reported(tmp_path):
    missing = tmp_path / "nope.yaml"
    p, src = discover_config_path(str(missing), tmp_path, {})
    assert Path(p) == missing
    assert src == "explicit-missing"


def test_env_config_points_to_dir(tmp_path):
    d = tmp_path / "dir"
    cfg = _touch(d / "config.yaml")
    p, src = discover_config_path(None, tmp_path, {"ZIPBOX_CONFIG": str(d)})
    assert p == cfg.resolve()
    assert src == "env:ZIPBOX_CONFIG"


def test_cwd_beats_xdg(tmp_path):
    cfg = _touch(tmp_path / "configs" / "config.yaml")
    xdg = tmp_path / "xdg"
    _touch(xdg / "zipbox" / "config.yaml")
    p, src = discover_config_path(None, tmp_path, {"XDG_CONFIG_HOME": str(xdg)})
    assert p == cfg.resolve()
    assert src == "cwd:configs/config.yaml"


def test_xdg_fallback_and_none(tmp_path):
    xdg = tmp_path / "xdg"
    assert discover_config_path(None, tmp_path, {"XDG_CONFIG_HOME": str(xdg)}) == (None, "none")
    cfg = _touch(xdg / "zipbox" / "config.yaml")
    assert discover_config_path(None, tmp_path, {"XDG_CONFIG_HOME": str(xdg)}) == (cfg.resolve(), "xdg")

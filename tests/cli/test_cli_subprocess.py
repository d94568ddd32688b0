import json
import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def run_cli(args, cwd, env_overrides=None):
    env = dict(os.environ)
    env["PYTHONPATH"] = str(ROOT) + os.pathsep + env.get("PYTHONPATH", "")
    if env_overrides:
        env.update(env_overrides)
    env.setdefault("PYTHONUTF8", "1")
    p = subprocess.run(
        [sys.executable, "-m", "zipbox", *args],
        cwd=cwd,
        env=env,
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    return p.returncode, p.stdout, p.stderr


def test_version_flag(tmp_path):
    code, out, err = run_cli(["--version"], tmp_path)
    assert code == 0
    assert out.startswith("zipbox ")


def test_put_from_stdin_then_list(tmp_path):
    box = tmp_path / "box.zip"
    env = dict(os.environ)
    env["PYTHONPATH"] = str(ROOT) + os.pathsep + env.get("PYTHONPATH", "")
    p = subprocess.run(
        [sys.executable, "-m", "zipbox", "-f", str(box), "put", "-", "notes/today.txt"],
        cwd=tmp_path,
        env=env,
        input=b"piped in",
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    assert p.returncode == 0, p.stderr

    code, out, err = run_cli(["-f", str(box), "ls", "--json"], tmp_path)
    assert code == 0, err
    assert [r["name"] for r in json.loads(out)] == ["notes/"]

    code, out, err = run_cli(["-f", str(box), "get", "notes/today.txt"], tmp_path)
    assert code == 0
    assert out == "piped in"


def test_env_archive_and_debug_logging(tmp_path):
    box = tmp_path / "env.zip"
    code, out, err = run_cli(["--debug", "mkdir", "d"], tmp_path, {"ZIPBOX_ARCHIVE": str(box)})
    assert code == 0, err
    assert "[zipbox] DEBUG" in err
    assert box.is_file()


def test_exit_code_for_missing_entry(tmp_path):
    box = tmp_path / "e.zip"
    code, _, _ = run_cli(["-f", str(box), "mkdir", "x"], tmp_path)
    assert code == 0
    code, out, err = run_cli(["-f", str(box), "rm", "missing"], tmp_path)
    assert code == 3
    assert err.startswith("EntryNotFoundError")

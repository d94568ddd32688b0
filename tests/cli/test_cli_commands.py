import json
import zipfile
from pathlib import Path

import pytest

from zipbox.cli._exit import IO_ERR, OK, USER_ERR
from zipbox.cli.commands import unique_name
from zipbox.cli.main import main


@pytest.fixture
def box(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, make_new_zip) -> Path:
    monkeypatch.chdir(tmp_path)
    return make_new_zip()


def run(box: Path, *args: str) -> int:
    return main(["-f", str(box), *args])


def _names(box: Path):
    with zipfile.ZipFile(box) as zf:
        return zf.namelist()


def test_unique_name():
    assert unique_name("a.txt", set()) == "a.txt"
    assert unique_name("a.txt", {"a.txt"}) == "a.1.txt"
    assert unique_name("d/a.txt", {"d/a.txt", "d/a.1.txt"}) == "d/a.2.txt"
    assert unique_name("README", {"README"}) == "README.1"


def test_ls_root_json(box, capsys):
    assert run(box, "ls", "--json") == OK
    rows = json.loads(capsys.readouterr().out)
    assert [r["name"] for r in rows] == ["bar/", "foo/", "test1.txt"]
    assert rows[2]["size"] == len("hello, world!\n")
    assert rows[0]["is_dir"] is True


def test_ls_subdir_table(box, capsys):
    assert run(box, "ls", "foo") == OK
    out = capsys.readouterr().out.splitlines()
    assert out[0].split() == ["type", "size", "modified", "name"]
    assert out[-1].endswith("foo/test2.txt")


def test_entries_in_archive_order(box, capsys):
    assert run(box, "entries", "--json") == OK
    rows = json.loads(capsys.readouterr().out)
    assert [r["name"] for r in rows] == ["bar/", "foo/", "foo/test2.txt", "test1.txt"]


def test_stat_root_and_entry(box, capsys):
    assert run(box, "stat", "--json") == OK
    root = json.loads(capsys.readouterr().out)
    assert root["is_dir"] is True
    assert root["size"] == box.stat().st_size

    assert run(box, "stat", "foo", "--json") == OK
    foo = json.loads(capsys.readouterr().out)
    assert foo["name"] == "foo/"
    assert foo["size"] is None


def test_stat_missing(box, capsys):
    assert run(box, "stat", "nope.txt") == IO_ERR
    assert "EntryNotFoundError" in capsys.readouterr().err


def test_get_to_file(box, tmp_path):
    dest = tmp_path / "out.txt"
    assert run(box, "get", "foo/test2.txt", str(dest)) == OK
    assert dest.read_text(encoding="utf-8") == "hello, world!\n"
    assert run(box, "get", "foo", str(dest)) == IO_ERR


def test_put_and_unique(box, tmp_path, capsys):
    src = tmp_path / "local.txt"
    src.write_bytes(b"local")
    assert run(box, "put", str(src), "foo/test2.txt", "--unique") == OK
    assert capsys.readouterr().out.strip() == "foo/test2.1.txt"
    assert run(box, "put", str(src), "test1.txt") == OK
    with zipfile.ZipFile(box) as zf:
        assert zf.read("foo/test2.1.txt") == b"local"
        assert zf.read("test1.txt") == b"local"
        assert zf.namelist().count("test1.txt") == 1


def test_put_missing_source(box, tmp_path):
    assert run(box, "put", str(tmp_path / "absent"), "x.txt") == IO_ERR
    assert "x.txt" not in _names(box)


def test_rm(box):
    assert run(box, "rm", "test1.txt") == OK
    assert "test1.txt" not in _names(box)
    assert run(box, "rm", "test1.txt") == IO_ERR


def test_mv(box):
    assert run(box, "mv", "test1.txt", "bar/moved.txt") == OK
    assert _names(box) == ["bar/", "bar/moved.txt", "foo/", "foo/test2.txt"]
    assert run(box, "mv", "test1.txt", "again.txt") == IO_ERR


def test_mkdir(box, capsys):
    assert run(box, "mkdir", "baz") == OK
    assert "baz/" in _names(box)
    assert run(box, "mkdir", "bar") == USER_ERR
    assert "EntryExistsError" in capsys.readouterr().err


def test_rmdir(box):
    assert run(box, "rmdir", "foo") == OK
    assert _names(box) == ["bar/", "test1.txt"]
    assert run(box, "rmdir", "foo") == IO_ERR
    assert run(box, "rmdir", ".") == IO_ERR


def test_missing_archive_for_destructive_verbs(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["-f", str(tmp_path / "none.zip"), "rm", "a"]) == IO_ERR
    assert not (tmp_path / "none.zip").exists()


def test_no_archive_configured(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["ls"]) == USER_ERR
    assert "ConfigError" in capsys.readouterr().err


def test_archive_from_config_file(tmp_path, monkeypatch, make_new_zip, capsys):
    monkeypatch.chdir(tmp_path)
    box = make_new_zip()
    cfg = tmp_path / "box.yaml"
    cfg.write_text(f"archive: {box.as_posix()}\ncompression_level: 9\n", encoding="utf-8")
    assert main(["-c", str(cfg), "ls", "--json"]) == OK
    assert len(json.loads(capsys.readouterr().out)) == 3


def test_explicit_missing_config(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["-c", str(tmp_path / "nope.yaml"), "-f", "x.zip", "ls"]) == USER_ERR
    assert "config not found" in capsys.readouterr().err


def test_bad_level(box, capsys):
    assert main(["-f", str(box), "--level", "42", "ls"]) == USER_ERR


def test_quiet_suppresses_errors(box, capsys):
    assert main(["-q", "-f", str(box), "rm", "nope"]) == IO_ERR
    assert capsys.readouterr().err == ""
    # reset module-level verbosity for later tests
    assert main(["-f", str(box), "ls"]) == OK


def test_no_command_prints_help(capsys):
    assert main([]) == USER_ERR
    assert "usage:" in capsys.readouterr().err

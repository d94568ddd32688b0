# tests/conftest.py
from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from zipbox.archive import ZipEditor

HELLO = "hello, world!\n"


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Keep logs, config discovery and env overrides inside the test's tmp dir."""
    for var in ("ZIPBOX_ARCHIVE", "ZIPBOX_COMPRESSION_LEVEL", "ZIPBOX_AUDIT", "ZIPBOX_CONFIG"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("ZIPBOX_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    yield


@pytest.fixture
def hello() -> str:
    return HELLO


@pytest.fixture
def zip_path(tmp_path: Path) -> Path:
    return tmp_path / "test.zip"


@pytest.fixture
def make_new_zip(zip_path: Path):
    """Build the reference archive: bar/, foo/, foo/test2.txt, test1.txt."""

    def _make() -> Path:
        zip = ZipEditor(zip_path)
        zip.add("test1.txt", HELLO)
        zip.mkdir("foo")
        zip.mkdir("bar/")
        zip.add("foo/test2.txt", HELLO)
        result = zip.commit()
        assert (result.kept, result.added, result.deleted) == (0, 4, 0)
        return zip_path

    return _make


@pytest.fixture
def raw_zip(tmp_path: Path):
    """Write an archive with zipfile directly, entries in the given order."""

    def _write(names_and_data, name: str = "raw.zip") -> Path:
        p = tmp_path / name
        with zipfile.ZipFile(p, "w", zipfile.ZIP_DEFLATED) as zf:
            for n, data in names_and_data:
                zf.writestr(n, data)
        return p

    return _write

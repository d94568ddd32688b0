from datetime import datetime

from zipbox.archive import CommitResult, Entry, archive_attributes, entry_attributes


def test_file_entry_attributes():
    e = Entry("docs/a.txt", size=12, date_time=(2021, 6, 1, 12, 30, 4))
    a = entry_attributes(e)
    assert (a.name, a.is_dir, a.size, a.read_only) == ("docs/a.txt", False, 12, True)
    assert a.as_dict()["modified"] == "2021-06-01T12:30:04"


def test_synthesized_directory_attributes():
    like = Entry("docs/a.txt", size=12, date_time=(2021, 6, 1, 12, 30, 4))
    a = entry_attributes(Entry.directory("docs", like=like))
    assert a.name == "docs/"
    assert a.is_dir and a.synthesized
    assert a.size is None
    assert a.modified == datetime(2021, 6, 1, 12, 30, 4)


def test_archive_root_attributes(tmp_path):
    p = tmp_path / "a.zip"
    p.write_bytes(b"12345")
    a = archive_attributes(p)
    assert a.is_dir and a.name == ""
    assert a.size == 5


def test_archive_root_attributes_when_missing(tmp_path):
    a = archive_attributes(tmp_path / "missing.zip")
    assert a.is_dir
    assert a.size == 0
    assert a.modified.microsecond == 0


def test_commit_result_counters():
    r = CommitResult()
    r.keep()
    r.add()
    r.delete()
    r.delete()
    assert r.changes == 3
    assert r.as_dict() == {"kept": 1, "added": 1, "deleted": 2, "changes": 3}

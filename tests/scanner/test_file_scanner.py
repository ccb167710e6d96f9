"""目录扫描器测试：遍历顺序、父子关联、进度回调与失败策略。"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from organize_folder.packages.scanner.core.exceptions import ScanAbortedError
from organize_folder.packages.scanner.services import file_scanner as file_scanner_module
from organize_folder.packages.scanner.services.entry_store import EntryStore
from organize_folder.packages.scanner.services.file_scanner import FileScanner


def _build_tree(root: Path) -> None:
    (root / "A").mkdir()
    (root / "b.txt").write_bytes(b"0123456789")


def _paths(entries) -> list[str]:
    return [e.path for e in entries]


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[tuple[int, int]] = []

    def __call__(self, folder_count: int, file_count: int) -> None:
        self.calls.append((folder_count, file_count))


def test_scan_root_with_empty_dir_and_file(tmp_path: Path, store: EntryStore):
    _build_tree(tmp_path)

    summary = FileScanner(store).scan(str(tmp_path))

    assert store.count() == 3
    root = store.find_by_path(str(tmp_path))
    assert root is not None
    assert root.parent_id is None
    assert root.type == "directory"
    assert root.size is None
    assert summary.root_id == root.id
    assert (summary.folder_count, summary.file_count) == (2, 1)

    folder = store.find_by_path(str(tmp_path / "A"))
    text = store.find_by_path(str(tmp_path / "b.txt"))
    assert folder.parent_id == root.id
    assert text.parent_id == root.id
    assert text.type == "file"
    assert text.size == 10
    assert text.created_at.endswith("Z")
    assert text.modified_at.endswith("Z")

    assert [c.name for c in store.children_of(root.id)] == ["A", "b.txt"]


def test_files_only_folder_is_ordered_by_name(tmp_path: Path, store: EntryStore):
    (tmp_path / "z.txt").write_text("z")
    (tmp_path / "a.txt").write_text("a")

    FileScanner(store).scan(str(tmp_path))

    root = store.find_by_path(str(tmp_path))
    assert [c.name for c in store.children_of(root.id)] == ["a.txt", "z.txt"]


def test_subdirectories_are_inserted_before_file_siblings(tmp_path: Path, store: EntryStore):
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / "z_dir").mkdir()
    (tmp_path / "z_dir" / "inner.txt").write_text("inner")
    (tmp_path / "m_dir").mkdir()

    FileScanner(store).scan(str(tmp_path))

    # 自增 id 即插入顺序
    inserted = sorted(store.full_hierarchy(), key=lambda e: e.id)
    assert _paths(inserted) == [
        str(tmp_path),
        str(tmp_path / "m_dir"),
        str(tmp_path / "z_dir"),
        str(tmp_path / "z_dir" / "inner.txt"),
        str(tmp_path / "a.txt"),
    ]


def test_every_parent_is_an_existing_directory(tmp_path: Path, store: EntryStore):
    (tmp_path / "x" / "y" / "z").mkdir(parents=True)
    (tmp_path / "x" / "y" / "z" / "deep.txt").write_text("deep")
    (tmp_path / "x" / "one.txt").write_text("1")
    (tmp_path / "two.txt").write_text("2")

    FileScanner(store).scan(str(tmp_path))

    entries = store.full_hierarchy()
    by_id = {e.id: e for e in entries}
    paths = _paths(entries)
    assert len(paths) == len(set(paths))
    roots = [e for e in entries if e.parent_id is None]
    assert len(roots) == 1
    for entry in entries:
        if entry.parent_id is None:
            continue
        parent = by_id[entry.parent_id]
        assert parent.type == "directory"
        assert os.path.dirname(entry.path) == parent.path


def test_progress_is_reported_once_per_insert_and_never_decreases(tmp_path: Path, store: EntryStore):
    (tmp_path / "d1").mkdir()
    (tmp_path / "d1" / "f1").write_text("1")
    (tmp_path / "d2").mkdir()
    (tmp_path / "f2").write_text("2")
    (tmp_path / "f3").write_text("3")
    recorder = _Recorder()

    FileScanner(store).scan(str(tmp_path), recorder)

    assert len(recorder.calls) == store.count() == 6
    assert recorder.calls[0] == (1, 0)
    assert recorder.calls[-1] == (3, 3)
    for previous, current in zip(recorder.calls, recorder.calls[1:]):
        assert current[0] >= previous[0]
        assert current[1] >= previous[1]
        assert sum(current) == sum(previous) + 1


def test_unreadable_directory_keeps_its_entry(tmp_path: Path, store: EntryStore):
    locked = tmp_path / "locked"
    locked.mkdir()
    (tmp_path / "after.txt").write_text("after")
    original_mode = locked.stat().st_mode
    locked.chmod(0)
    try:
        FileScanner(store).scan(str(tmp_path))
    finally:
        locked.chmod(original_mode)

    entry = store.find_by_path(str(locked))
    assert entry is not None
    assert entry.type == "directory"
    assert store.find_by_path(str(tmp_path / "after.txt")) is not None


def test_listing_failure_is_logged_and_skipped(tmp_path: Path, store: EntryStore, monkeypatch):
    locked = tmp_path / "locked"
    locked.mkdir()
    (locked / "hidden.txt").write_text("hidden")
    (tmp_path / "visible").mkdir()
    (tmp_path / "visible" / "v.txt").write_text("v")
    (tmp_path / "after.txt").write_text("after")

    real_scandir = os.scandir

    def fake_scandir(path):
        if os.fspath(path) == str(locked):
            raise PermissionError(13, "Permission denied", str(locked))
        return real_scandir(path)

    monkeypatch.setattr(file_scanner_module.os, "scandir", fake_scandir)

    summary = FileScanner(store).scan(str(tmp_path))

    assert store.find_by_path(str(locked)) is not None
    assert store.find_by_path(str(locked / "hidden.txt")) is None
    assert store.find_by_path(str(tmp_path / "visible" / "v.txt")) is not None
    assert store.find_by_path(str(tmp_path / "after.txt")) is not None
    assert (summary.folder_count, summary.file_count) == (3, 2)


def test_missing_root_aborts_the_scan(tmp_path: Path, store: EntryStore):
    missing = tmp_path / "does-not-exist"

    with pytest.raises(ScanAbortedError) as exc_info:
        FileScanner(store).scan(str(missing))

    assert exc_info.value.path == str(missing)
    assert isinstance(exc_info.value.reason, FileNotFoundError)
    assert store.count() == 0


def test_stat_failure_on_intermediate_node_aborts_and_keeps_partial_data(
    tmp_path: Path, store: EntryStore, monkeypatch
):
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "inside.txt").write_text("x")
    broken = tmp_path / "b"
    broken.mkdir()
    (tmp_path / "c.txt").write_text("c")

    real_stat = os.stat

    def fake_stat(path, *args, **kwargs):
        if os.fspath(path) == str(broken):
            raise PermissionError(13, "Permission denied", str(broken))
        return real_stat(path, *args, **kwargs)

    monkeypatch.setattr(file_scanner_module.os, "stat", fake_stat)
    recorder = _Recorder()

    with pytest.raises(ScanAbortedError) as exc_info:
        FileScanner(store).scan(str(tmp_path), recorder)

    assert exc_info.value.path == str(broken)
    # 失败前写入的数据保留，不做回滚
    assert sorted(_paths(store.full_hierarchy())) == sorted(
        [str(tmp_path), str(tmp_path / "a"), str(tmp_path / "a" / "inside.txt")]
    )
    assert store.find_by_path(str(tmp_path / "c.txt")) is None
    assert recorder.calls[-1] == (2, 1)


def test_symlinks_are_not_followed(tmp_path: Path, store: EntryStore):
    target = tmp_path / "real"
    target.mkdir()
    (target / "f.txt").write_text("f")
    try:
        os.symlink(target, tmp_path / "link")
    except (OSError, NotImplementedError):
        pytest.skip("symlinks are not supported on this platform")

    FileScanner(store).scan(str(tmp_path))

    assert store.find_by_path(str(tmp_path / "link")) is None
    assert store.find_by_path(str(tmp_path / "link" / "f.txt")) is None
    assert store.count() == 3


def test_single_file_root(tmp_path: Path, store: EntryStore):
    only = tmp_path / "only.bin"
    only.write_bytes(b"abc")

    summary = FileScanner(store).scan(str(only))

    root = store.find_by_path(str(only))
    assert root.parent_id is None
    assert root.type == "file"
    assert root.size == 3
    assert (summary.folder_count, summary.file_count) == (0, 1)


def test_trailing_separator_is_normalized(tmp_path: Path, store: EntryStore):
    _build_tree(tmp_path)

    FileScanner(store).scan(str(tmp_path) + os.sep)

    assert store.find_by_path(str(tmp_path)) is not None
    assert store.children_of(None)[0].name == tmp_path.name


def test_second_scan_replaces_previous_entries(tmp_path: Path, store: EntryStore):
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    (first / "old.txt").write_text("old")
    (second / "new.txt").write_text("new")
    scanner = FileScanner(store)

    scanner.scan(str(first))
    scanner.scan(str(second))

    paths = _paths(store.full_hierarchy())
    assert paths == [str(second), str(second / "new.txt")]
    assert scanner.folder_count == 1
    assert scanner.file_count == 1

"""Tests for the filesystem history backend."""

from pathlib import Path

import pytest

from food_analyzer.adapters.file_history_backend import FileHistoryBackend
from food_analyzer.services.history import HistoryStore
from tests.conftest import make_entry


def test_write_and_read_newest_first(tmp_path: Path) -> None:
    backend = FileHistoryBackend(tmp_path / "history")

    backend.write("first", b"one")
    backend.write("second", b"two")

    assert backend.read_all() == [("second", b"two"), ("first", b"one")]


def test_read_missing_directory_is_empty(tmp_path: Path) -> None:
    assert FileHistoryBackend(tmp_path / "missing").read_all() == []


def test_unrelated_files_are_ignored(tmp_path: Path) -> None:
    directory = tmp_path / "history"
    backend = FileHistoryBackend(directory)
    backend.write("first", b"one")
    (directory / "notes.txt").write_text("hello")

    assert backend.read_all() == [("first", b"one")]


def test_clear_removes_every_blob(tmp_path: Path) -> None:
    directory = tmp_path / "history"
    backend = FileHistoryBackend(directory)
    backend.write("first", b"one")
    backend.write("second", b"two")

    backend.clear()

    assert directory.is_dir()
    assert list(directory.iterdir()) == []
    assert backend.read_all() == []
    assert [path.name for path in tmp_path.iterdir()] == ["history"]


def test_write_failure_leaves_no_partial_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    directory = tmp_path / "history"
    backend = FileHistoryBackend(directory)

    def failing_replace(src: str, dst: Path) -> None:
        raise OSError("read-only file system")

    monkeypatch.setattr(
        "food_analyzer.adapters.file_history_backend.os.replace", failing_replace
    )

    with pytest.raises(OSError):
        backend.write("first", b"one")

    assert list(directory.iterdir()) == []


def test_store_survives_restart_with_corrupt_file(tmp_path: Path) -> None:
    directory = tmp_path / "history"
    store = HistoryStore(backend=FileHistoryBackend(directory))
    kept = make_entry("apple")
    corrupted = make_entry("pear")
    store.insert(kept)
    store.insert(corrupted)
    target = next(directory.glob(f"*-{corrupted.id}.entry"))
    target.write_bytes(target.read_bytes()[:-3])

    report = HistoryStore(backend=FileHistoryBackend(directory)).load_all()

    assert report.entries == (kept,)
    assert report.dropped_count == 1
    assert target.exists()

"""Tests for scanning, listing, and bulk operations on a trash store."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import pytest

from trashbin import entry as entry_module
from trashbin.errors import AlreadyInTrashError, EntryNotValidError, TrashIOError
from trashbin.layout import TrashLayout
from trashbin.store import EmptyResult, TrashStore
from trashbin.trashinfo import TrashInfo, write_trash_info


def _store(tmp_path: Path) -> TrashStore:
    return TrashStore(TrashLayout.at(tmp_path / "Trash"))


def _plant(store: TrashStore, name: str, original: str, deleted: datetime) -> None:
    """Place a complete entry directly on disk with a chosen deletion date."""
    store.layout.ensure()
    store.layout.file_path(name).write_text(name, encoding="utf-8")
    write_trash_info(store.layout.info_path(name), TrashInfo.for_path(original, deleted))


def test_put_creates_missing_directories(tmp_path: Path) -> None:
    store = _store(tmp_path)
    source = tmp_path / "a.txt"
    source.write_text("a", encoding="utf-8")

    entry = store.put(source)

    assert store.layout.files_dir.is_dir()
    assert [item.name for item in store.entries()] == [entry.name]


def test_put_without_create_missing_fails(tmp_path: Path) -> None:
    store = TrashStore(TrashLayout.at(tmp_path / "Trash"), create_missing=False)
    source = tmp_path / "a.txt"
    source.write_text("a", encoding="utf-8")

    with pytest.raises(TrashIOError):
        store.put(source)

    assert source.exists()


def test_put_same_name_twice_gets_suffix(tmp_path: Path) -> None:
    store = _store(tmp_path)
    for folder in ("one", "two"):
        (tmp_path / folder).mkdir()
        (tmp_path / folder / "A.txt").write_text(folder, encoding="utf-8")

    first = store.put(tmp_path / "one" / "A.txt")
    second = store.put(tmp_path / "two" / "A.txt")

    assert (first.name, second.name) == ("A.txt", "A.txt_1")


def test_put_skips_names_held_by_stray_sidecars(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.layout.ensure()
    store.layout.info_path("x").write_text("leftover", encoding="utf-8")
    (tmp_path / "x").write_text("x", encoding="utf-8")

    entry = store.put(tmp_path / "x")

    assert entry.name == "x_1"


def test_put_retries_when_a_name_is_taken_concurrently(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    store = _store(tmp_path)
    store.layout.ensure()
    (tmp_path / "race").write_text("x", encoding="utf-8")
    real_names = store.entry_names

    def stale_snapshot() -> set[str]:
        # Another process claims "race" after the snapshot was taken.
        names = real_names()
        store.layout.info_path("race").write_text("claimed", encoding="utf-8")
        return names

    monkeypatch.setattr(store, "entry_names", stale_snapshot)

    entry = store.put(tmp_path / "race")

    assert entry.name == "race_1"
    assert entry.is_valid()


def test_put_all_continues_past_failures(tmp_path: Path) -> None:
    store = _store(tmp_path)
    good = tmp_path / "good"
    good.write_text("x", encoding="utf-8")

    result = store.put_all([tmp_path / "missing", good])

    assert result.succeeded == ["good"]
    assert [failure.target for failure in result.failures] == [str(tmp_path / "missing")]
    assert result.failures[0].error == "TrashIOError"
    assert not result.ok


def test_put_all_assigns_distinct_names(tmp_path: Path) -> None:
    store = _store(tmp_path)
    sources = []
    for folder in ("a", "b", "c"):
        (tmp_path / folder).mkdir()
        path = tmp_path / folder / "same"
        path.write_text(folder, encoding="utf-8")
        sources.append(path)

    result = store.put_all(sources)

    assert result.succeeded == ["same", "same_1", "same_2"]


def test_put_rejects_trash_contents(tmp_path: Path) -> None:
    store = _store(tmp_path)
    _plant(store, "inside", "/x/inside", datetime(2024, 1, 1))

    with pytest.raises(AlreadyInTrashError):
        store.put(store.layout.file_path("inside"))


def test_list_with_metadata_is_sorted_by_deletion_date(tmp_path: Path) -> None:
    store = _store(tmp_path)
    _plant(store, "a", "/data/a", datetime(2024, 5, 1))
    _plant(store, "b", "/data/b", datetime(2023, 1, 1))
    _plant(store, "c", "/data/c", datetime(2024, 1, 1))

    listing = store.list_with_metadata()

    assert [entry.name for entry, _ in listing] == ["b", "c", "a"]


def test_listing_is_stable_for_equal_dates(tmp_path: Path) -> None:
    store = _store(tmp_path)
    when = datetime(2024, 1, 1, 12, 0, 0)
    for name in ("m", "k", "z"):
        _plant(store, name, f"/data/{name}", when)

    listing = store.list_with_metadata()

    assert [entry.name for entry, _ in listing] == ["k", "m", "z"]


def test_scan_skips_and_logs_invalid_entries(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    store = _store(tmp_path)
    _plant(store, "ok", "/data/ok", datetime(2024, 1, 1))
    store.layout.file_path("orphan").write_text("x", encoding="utf-8")
    store.layout.file_path("broken").write_text("x", encoding="utf-8")
    store.layout.info_path("broken").write_text("garbage", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="trashbin"):
        names = [entry.name for entry in store.entries()]
        listed = [entry.name for entry, _ in store.list_with_metadata()]

    assert names == ["broken", "ok"]
    assert listed == ["ok"]
    assert "orphan" in caplog.text
    assert "broken" in caplog.text


def test_entries_on_missing_root_is_empty(tmp_path: Path) -> None:
    assert list(_store(tmp_path / "nowhere").entries()) == []


def test_get_restore_and_remove_by_name(tmp_path: Path) -> None:
    store = _store(tmp_path)
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.write_text("1", encoding="utf-8")
    second.write_text("2", encoding="utf-8")
    store.put_all([first, second])

    assert store.restore("first") == first.resolve()
    store.remove("second")

    assert first.read_text(encoding="utf-8") == "1"
    assert list(store.entries()) == []
    with pytest.raises(EntryNotValidError):
        store.get("second")


def test_restore_entries_reports_each_failure(tmp_path: Path) -> None:
    store = _store(tmp_path)
    kept = tmp_path / "kept"
    kept.write_text("old", encoding="utf-8")
    other = tmp_path / "other"
    other.write_text("x", encoding="utf-8")
    store.put_all([kept, other])
    kept.write_text("replacement", encoding="utf-8")

    result = store.restore_entries(store.entries())

    assert result.succeeded == ["other"]
    assert [failure.target for failure in result.failures] == ["kept"]
    assert store.get("kept").is_valid()


def test_strays_lists_unpaired_files(tmp_path: Path) -> None:
    store = _store(tmp_path)
    _plant(store, "pair", "/data/pair", datetime(2024, 1, 1))
    store.layout.file_path("lonely").write_text("x", encoding="utf-8")
    store.layout.info_path("ghost").write_text("x", encoding="utf-8")
    (store.layout.info_dir / "notes.txt").write_text("x", encoding="utf-8")

    strays = store.strays()

    assert set(strays) == {
        store.layout.file_path("lonely"),
        store.layout.info_path("ghost"),
        store.layout.info_dir / "notes.txt",
    }


@pytest.mark.parametrize("keep_strays", [True, False])
def test_empty(tmp_path: Path, keep_strays: bool) -> None:
    store = _store(tmp_path)
    _plant(store, "one", "/data/one", datetime(2024, 1, 1))
    _plant(store, "two", "/data/two", datetime(2024, 1, 2))
    store.layout.file_path("stray").write_text("x", encoding="utf-8")
    store.layout.info_path("ghost").write_text("x", encoding="utf-8")

    result = store.empty(keep_strays=keep_strays)

    assert isinstance(result, EmptyResult)
    assert sorted(result.succeeded) == ["one", "two"]
    assert list(store.entries()) == []
    remaining = sorted(p.name for p in store.layout.root.rglob("*") if p.is_file())
    if keep_strays:
        assert remaining == ["ghost.trashinfo", "stray"]
        assert result.strays_removed == []
    else:
        assert remaining == []
        assert len(result.strays_removed) == 2
    assert result.ok


def test_failed_move_leaves_a_sidecar_that_scans_skip_and_empty_cleans(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    store = _store(tmp_path)
    _plant(store, "kept", "/data/kept", datetime(2024, 1, 1))
    source = tmp_path / "stuck"
    source.write_text("x", encoding="utf-8")

    def failing_move(src: Path, dst: Path) -> None:
        raise TrashIOError("move to", dst, "Device or resource busy")

    monkeypatch.setattr("trashbin.entry.move_path", failing_move)

    with pytest.raises(TrashIOError):
        store.put(source)

    assert source.exists()
    assert store.layout.info_path("stuck").exists()
    assert not store.layout.file_path("stuck").exists()

    with caplog.at_level(logging.WARNING, logger="trashbin"):
        names = [entry.name for entry in store.entries()]

    assert names == ["kept"]
    assert "stuck.trashinfo" in caplog.text

    result = store.empty(keep_strays=False)

    assert result.succeeded == ["kept"]
    assert result.strays_removed == [str(store.layout.info_path("stuck"))]
    assert list(store.layout.info_dir.iterdir()) == []


def test_empty_continues_past_a_failed_removal(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    store = _store(tmp_path)
    for name in ("a", "b", "c"):
        _plant(store, name, f"/data/{name}", datetime(2024, 1, 1))
    real_remove = entry_module.remove_path

    def flaky_remove(path: Path) -> None:
        if path.name == "b":
            raise TrashIOError("remove", path, "Permission denied")
        real_remove(path)

    monkeypatch.setattr("trashbin.entry.remove_path", flaky_remove)

    result = store.empty(keep_strays=False)

    assert result.succeeded == ["a", "c"]
    assert [failure.target for failure in result.failures] == ["b"]
    assert result.failures[0].error == "TrashIOError"
    assert [entry.name for entry in store.entries()] == ["b"]
    assert store.get("b").is_valid()

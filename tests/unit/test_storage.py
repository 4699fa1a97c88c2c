"""Unit tests for the dist directory storage."""

import pytest

from heirbox.core.exceptions import InvalidPathError, StorageError
from heirbox.core.storage import INDEX_NAME, DistStorage


@pytest.fixture
def storage(tmp_path):
    return DistStorage(tmp_path / "dist", content_root=tmp_path / "content")


def test_clean_creates_missing_dir(storage):
    assert not storage.root.exists()
    storage.clean()
    assert storage.root.is_dir()


def test_clean_removes_previous_output(storage):
    storage.root.mkdir()
    (storage.root / "old").write_bytes(b"x")
    (storage.root / "nested").mkdir()
    (storage.root / "nested" / "deep").write_bytes(b"y")

    storage.clean()

    assert list(storage.root.iterdir()) == []


def test_clean_refuses_content_inside_dist(tmp_path):
    storage = DistStorage(tmp_path, content_root=tmp_path / "content")
    with pytest.raises(InvalidPathError):
        storage.clean()


def test_clean_refuses_same_directory(tmp_path):
    storage = DistStorage(tmp_path / "same", content_root=tmp_path / "same")
    with pytest.raises(InvalidPathError):
        storage.clean()


def test_clean_failure_is_storage_error(tmp_path):
    blocker = tmp_path / "dist"
    blocker.write_bytes(b"a file where the dist dir should be")
    storage = DistStorage(blocker)
    with pytest.raises(StorageError, match="Cannot clean"):
        storage.clean()


def test_allocate_name_is_hex_and_unique(storage):
    storage.clean()
    names = {storage.allocate_name() for _ in range(200)}
    assert len(names) == 200
    for name in names:
        assert len(name) == 24
        int(name, 16)
        assert name != INDEX_NAME


def test_allocate_name_retries_on_collision(storage, monkeypatch):
    storage.clean()
    values = iter([b"\x00" * 12, b"\x00" * 12, b"\x01" * 12])
    monkeypatch.setattr("heirbox.core.storage.os.urandom", lambda n: next(values))

    first = storage.allocate_name()
    second = storage.allocate_name()
    assert first == "00" * 12
    assert second == "01" * 12


def test_allocate_name_skips_existing_files(storage, monkeypatch):
    storage.clean()
    (storage.root / ("00" * 12)).write_bytes(b"leftover")
    values = iter([b"\x00" * 12, b"\x02" * 12])
    monkeypatch.setattr("heirbox.core.storage.os.urandom", lambda n: next(values))

    assert storage.allocate_name() == "02" * 12


def test_open_blob_and_index(storage):
    storage.clean()
    with storage.open_blob("abc") as f:
        f.write(b"blob")
    with storage.open_index() as f:
        f.write(b"index")
    assert storage.blob_path("abc").read_bytes() == b"blob"
    assert (storage.root / "_index").read_bytes() == b"index"


def test_open_blob_missing_dir(tmp_path):
    storage = DistStorage(tmp_path / "never-created")
    with pytest.raises(StorageError):
        storage.open_blob("abc")

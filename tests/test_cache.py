import json
import os

import pytest

from rasterizer.cache import CacheStore, file_mtime_ms


def test_unknown_path_is_modified(tmp_path):
    f = tmp_path / "a.svg"
    f.write_text("x")
    cache = CacheStore.load(tmp_path / "cache", "abc")
    assert cache.is_modified(f) is True


def test_query_records_mtime(tmp_path):
    f = tmp_path / "a.svg"
    f.write_text("x")
    cache = CacheStore.load(tmp_path / "cache", "abc")
    cache.is_modified(f)
    assert cache.files[str(f)] == file_mtime_ms(f)
    assert cache.is_modified(f) is False


def test_changed_mtime_is_modified(tmp_path):
    f = tmp_path / "a.svg"
    f.write_text("x")
    cache = CacheStore.load(tmp_path / "cache", "abc")
    cache.is_modified(f)
    stat = f.stat()
    os.utime(f, ns=(stat.st_atime_ns, stat.st_mtime_ns + 5_000_000_000))
    assert cache.is_modified(f) is True


def test_save_and_reload(tmp_path):
    f = tmp_path / "a.svg"
    f.write_text("x")
    cache = CacheStore.load(tmp_path / "cache", "abc")
    cache.is_modified(f)
    saved = cache.save()

    assert saved == tmp_path / "cache" / "abc.json"
    data = json.loads(saved.read_text())
    assert data == {"files": {str(f): file_mtime_ms(f)}}

    reloaded = CacheStore.load(tmp_path / "cache", "abc")
    assert reloaded.is_modified(f) is False


def test_other_fingerprint_starts_fresh(tmp_path):
    f = tmp_path / "a.svg"
    f.write_text("x")
    cache = CacheStore.load(tmp_path / "cache", "abc")
    cache.is_modified(f)
    cache.save()

    other = CacheStore.load(tmp_path / "cache", "def")
    assert other.files == {}
    assert other.is_modified(f) is True


def test_get_and_update_returns_previous(tmp_path):
    cache = CacheStore(tmp_path, "abc")
    assert cache.get_and_update("/x", 1) is None
    assert cache.get_and_update("/x", 2) == 1
    assert cache.files["/x"] == 2


def test_missing_file_raises(tmp_path):
    cache = CacheStore(tmp_path, "abc")
    with pytest.raises(FileNotFoundError):
        cache.is_modified(tmp_path / "missing.svg")

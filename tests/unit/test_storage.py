"""Tests for mediaforge.core.storage.DurableStorage."""

import json

import pytest

from mediaforge.core.exceptions import StorageQuotaExceeded
from mediaforge.core.storage import DurableStorage


class TestDurableStorage:
    """File-backed key/value storage with a capacity."""

    def test_set_and_get(self, temp_dir):
        storage = DurableStorage(temp_dir / "s.json", quota_bytes=1000)

        storage.set_item("gallery", "[]")

        assert storage.get_item("gallery") == "[]"
        assert storage.get_item("missing") is None

    def test_persisted_to_file(self, temp_dir):
        path = temp_dir / "nested" / "s.json"
        DurableStorage(path, quota_bytes=1000).set_item("api_key", "abc")

        assert json.loads(path.read_text()) == {"api_key": "abc"}
        assert DurableStorage(path, quota_bytes=1000).get_item("api_key") == "abc"

    def test_remove(self, temp_dir):
        storage = DurableStorage(temp_dir / "s.json", quota_bytes=1000)
        storage.set_item("api_key", "abc")

        storage.remove_item("api_key")
        storage.remove_item("api_key")

        assert storage.get_item("api_key") is None

    def test_used_bytes_counts_keys_and_values(self, temp_dir):
        storage = DurableStorage(temp_dir / "s.json", quota_bytes=1000)
        storage.set_item("ab", "cde")

        assert storage.used_bytes() == 5

    def test_quota_exceeded_keeps_previous_value(self, temp_dir):
        storage = DurableStorage(temp_dir / "s.json", quota_bytes=20)
        storage.set_item("gallery", "small")

        with pytest.raises(StorageQuotaExceeded):
            storage.set_item("gallery", "x" * 50)

        assert storage.get_item("gallery") == "small"

    def test_quota_is_shared_across_keys(self, temp_dir):
        storage = DurableStorage(temp_dir / "s.json", quota_bytes=20)
        storage.set_item("api_key", "0123456789")

        with pytest.raises(StorageQuotaExceeded):
            storage.set_item("gallery", "[1,2]")

    def test_overwrite_counts_only_new_value(self, temp_dir):
        storage = DurableStorage(temp_dir / "s.json", quota_bytes=20)
        storage.set_item("gallery", "x" * 10)

        storage.set_item("gallery", "y" * 13)

        assert storage.get_item("gallery") == "y" * 13

    def test_unreadable_file_starts_empty(self, temp_dir):
        path = temp_dir / "s.json"
        path.write_text("not json at all")

        assert DurableStorage(path, quota_bytes=1000).get_item("gallery") is None

    def test_non_string_values_ignored(self, temp_dir):
        path = temp_dir / "s.json"
        path.write_text(json.dumps({"gallery": [1, 2], "api_key": "abc"}))

        storage = DurableStorage(path, quota_bytes=1000)

        assert storage.get_item("gallery") is None
        assert storage.get_item("api_key") == "abc"

    def test_flush_replaces_file_without_leftovers(self, temp_dir):
        storage = DurableStorage(temp_dir / "s.json", quota_bytes=1000)
        storage.set_item("gallery", "[]")
        storage.set_item("api_key", "abc")

        assert sorted(p.name for p in temp_dir.iterdir()) == ["s.json"]

    def test_failed_write_keeps_previous_file(self, temp_dir, monkeypatch):
        path = temp_dir / "s.json"
        storage = DurableStorage(path, quota_bytes=1000)
        storage.set_item("api_key", "abc")

        def interrupted_dump(obj, handle):
            handle.write('{"api_key": "x')
            raise OSError("disk full")

        monkeypatch.setattr(json, "dump", interrupted_dump)
        with pytest.raises(OSError):
            storage.set_item("gallery", "[]")
        monkeypatch.undo()

        assert json.loads(path.read_text()) == {"api_key": "abc"}
        assert DurableStorage(path, quota_bytes=1000).get_item("api_key") == "abc"

    def test_fits_alone(self, temp_dir):
        storage = DurableStorage(temp_dir / "s.json", quota_bytes=20)
        storage.set_item("gallery", "x" * 10)

        assert storage.fits_alone("api_key", "y" * 13)
        assert not storage.fits_alone("api_key", "y" * 14)

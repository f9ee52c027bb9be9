"""Tests for mediaforge.core.gallery_store — persistence, eviction, and listing."""

from __future__ import annotations

import json

import pytest

from mediaforge.core.gallery_store import (
    GalleryStore,
    filter_gallery_items,
    paginate_gallery_items,
)
from mediaforge.core.models import MediaItem
from mediaforge.core.storage import GALLERY_KEY, DurableStorage


def _item(index: int, media_type: str = "image", size: int = 0) -> MediaItem:
    return MediaItem(
        id=f"item-{index}",
        type=media_type,
        url="x" * size if size else f"data:image/png;base64,{index}",
        prompt=f"prompt {index}",
        timestamp=1_700_000_000_000 + index,
    )


def _persisted_ids(storage: DurableStorage) -> list[str]:
    return [entry["id"] for entry in json.loads(storage.get_item(GALLERY_KEY))]


class TestPrependAndPersist:
    """Newest-first ordering and full-snapshot persistence."""

    def test_prepend_puts_item_first(self, storage):
        gallery = GalleryStore(storage)
        gallery.prepend(_item(1))
        gallery.prepend(_item(2))

        assert [item.id for item in gallery.snapshot()] == ["item-2", "item-1"]
        assert _persisted_ids(storage) == ["item-2", "item-1"]

    def test_snapshot_is_a_copy(self, storage):
        gallery = GalleryStore(storage)
        gallery.prepend(_item(1))

        gallery.snapshot().clear()

        assert len(gallery) == 1

    def test_get(self, storage):
        gallery = GalleryStore(storage)
        gallery.prepend(_item(1))

        assert gallery.get("item-1").prompt == "prompt 1"
        assert gallery.get("missing") is None

    def test_clear_persists_empty_list(self, storage):
        gallery = GalleryStore(storage)
        gallery.prepend(_item(1))

        gallery.clear()

        assert len(gallery) == 0
        assert json.loads(storage.get_item(GALLERY_KEY)) == []


class TestLoad:
    """Restoring the persisted snapshot."""

    def test_round_trip_through_new_instance(self, storage):
        gallery = GalleryStore(storage)
        for index in range(3):
            gallery.prepend(_item(index))

        reloaded = GalleryStore(DurableStorage(storage.path, storage.quota_bytes))
        items = reloaded.load()

        assert [item.id for item in items] == ["item-2", "item-1", "item-0"]
        assert items[0] == gallery.snapshot()[0]

    def test_missing_snapshot(self, storage):
        assert GalleryStore(storage).load() == []

    def test_unparsable_snapshot(self, storage):
        storage.set_item(GALLERY_KEY, "{not json")

        assert GalleryStore(storage).load() == []

    def test_non_list_snapshot(self, storage):
        storage.set_item(GALLERY_KEY, json.dumps({"id": "x"}))

        assert GalleryStore(storage).load() == []

    def test_malformed_records_skipped(self, storage):
        good = _item(1).model_dump(mode="json")
        storage.set_item(GALLERY_KEY, json.dumps([{"id": "broken"}, good, 42]))

        items = GalleryStore(storage).load()

        assert [item.id for item in items] == ["item-1"]


class TestQuotaEviction:
    """Two oldest records are dropped per failed write."""

    @pytest.fixture
    def small_storage(self, temp_dir):
        return DurableStorage(temp_dir / "small.json", quota_bytes=4000)

    def _fill(self, gallery, count, size=300):
        for index in range(count):
            gallery.prepend(_item(index, size=size))

    def test_evicts_two_oldest(self, small_storage):
        gallery = GalleryStore(small_storage)
        self._fill(gallery, 9)
        assert len(gallery) == 9

        gallery.prepend(_item(99, size=300))

        ids = [item.id for item in gallery.snapshot()]
        assert len(ids) == 8
        assert ids[0] == "item-99"
        assert "item-0" not in ids and "item-1" not in ids
        assert _persisted_ids(small_storage) == ids

    def test_evicts_repeatedly_until_fit(self, small_storage):
        gallery = GalleryStore(small_storage)
        self._fill(gallery, 9)

        gallery.prepend(_item(99, size=1800))

        ids = [item.id for item in gallery.snapshot()]
        assert ids[0] == "item-99"
        assert len(ids) % 2 == 0
        assert len(ids) <= 6
        assert _persisted_ids(small_storage) == ids

    def test_single_oversized_item_not_persisted(self, small_storage):
        gallery = GalleryStore(small_storage)

        gallery.prepend(_item(1, size=5000))

        assert len(gallery) == 1
        assert small_storage.get_item(GALLERY_KEY) is None

    def test_eviction_down_to_one_then_dropped(self, small_storage):
        gallery = GalleryStore(small_storage)
        self._fill(gallery, 2)

        gallery.prepend(_item(99, size=5000))

        assert [item.id for item in gallery.snapshot()] == ["item-99"]
        assert _persisted_ids(small_storage) == ["item-1", "item-0"]


class TestEvictOldest:
    """Freeing storage on behalf of another key."""

    def test_evicts_two_and_persists(self, storage):
        gallery = GalleryStore(storage)
        for index in range(3):
            gallery.prepend(_item(index))

        assert gallery.evict_oldest() == 2

        assert [item.id for item in gallery.snapshot()] == ["item-2"]
        assert _persisted_ids(storage) == ["item-2"]

    def test_last_item(self, storage):
        gallery = GalleryStore(storage)
        gallery.prepend(_item(1))

        assert gallery.evict_oldest() == 1
        assert len(gallery) == 0
        assert _persisted_ids(storage) == []

    def test_empty(self, storage):
        assert GalleryStore(storage).evict_oldest() == 0


class TestFilterAndPaginate:
    """Listing helpers used by the API."""

    def test_filter_by_type(self):
        items = [_item(1, "image"), _item(2, "video"), _item(3, "text")]

        assert [i.id for i in filter_gallery_items(items, media_type="video")] == ["item-2"]
        assert filter_gallery_items(items) == items

    def test_paginate(self):
        items = [_item(i) for i in range(5)]

        result = paginate_gallery_items(items, page=2, per_page=2)

        assert result["total"] == 5
        assert result["pages"] == 3
        assert result["page"] == 2
        assert [i.id for i in result["items"]] == ["item-2", "item-3"]

    def test_paginate_clamps_page(self):
        items = [_item(i) for i in range(3)]

        assert paginate_gallery_items(items, page=10, per_page=2)["page"] == 2
        assert paginate_gallery_items(items, page=0, per_page=2)["page"] == 1

    def test_paginate_empty(self):
        result = paginate_gallery_items([], page=1, per_page=20)

        assert result == {"total": 0, "page": 1, "per_page": 20, "pages": 1, "items": []}

"""Gallery persistence for generated media.

The gallery is intentionally simple:

- records live in memory as an ordered list, newest first
- after every mutation the whole list is serialized to the ``gallery`` key
  of durable storage
- list order is reverse-chronological and is both display and storage order

Storage pressure
----------------
Durable storage has a fixed capacity and gallery records can be large
(images are stored inline as data URIs).  When a write fails with
:class:`StorageQuotaExceeded`, the two oldest records are evicted.  Eviction
is itself a mutation, so the shrunken list is written again; the gallery
therefore loses two records per failed write until the snapshot fits.  Once
a single record (or none) is left and the write still fails, the write is
dropped: the in-memory gallery is kept and a warning is logged.

Loading is forgiving: an unreadable
snapshot yields an empty gallery and malformed records are skipped.
"""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from .exceptions import StorageQuotaExceeded
from .models import MediaItem
from .storage import GALLERY_KEY, DurableStorage

logger = logging.getLogger(__name__)

EVICTION_BATCH = 2


class GalleryStore:
    """Ordered, persisted log of :class:`MediaItem` records.

    ``clear()`` must only be called after the user confirmed it; the store
    does not ask.
    """

    def __init__(self, storage: DurableStorage) -> None:
        self._storage = storage
        self._items: list[MediaItem] = []

    def load(self) -> list[MediaItem]:
        """Restore the persisted snapshot, replacing the in-memory list."""
        raw = self._storage.get_item(GALLERY_KEY)
        entries: list = []
        if raw:
            try:
                entries = json.loads(raw)
            except json.JSONDecodeError as e:
                logger.error(f"Error loading gallery: {e}")
                entries = []

        if not isinstance(entries, list):
            entries = []

        items: list[MediaItem] = []
        for entry in entries:
            try:
                items.append(MediaItem.model_validate(entry))
            except ValidationError:
                logger.warning("Skipping malformed gallery record")

        self._items = items
        logger.info(f"Loaded {len(items)} gallery items")
        return self.snapshot()

    def snapshot(self) -> list[MediaItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: str) -> MediaItem | None:
        return next((item for item in self._items if item.id == item_id), None)

    def prepend(self, item: MediaItem) -> None:
        self._items.insert(0, item)
        self._sync()

    def clear(self) -> None:
        self._items = []
        self._sync()

    def evict_oldest(self) -> int:
        """Drop the two oldest records to free storage for another key.

        Returns:
            Number of records evicted (0 when the gallery is empty).
        """
        evicted = self._drop_oldest()
        if evicted:
            self._sync()
        return evicted

    def _drop_oldest(self) -> int:
        evicted = self._items[-EVICTION_BATCH:]
        self._items = self._items[: len(self._items) - len(evicted)]
        if evicted:
            logger.warning(
                f"Storage quota exceeded, evicted {len(evicted)} oldest items "
                f"({len(self._items)} remain)"
            )
        return len(evicted)

    def _sync(self) -> None:
        while True:
            payload = json.dumps([item.model_dump(mode="json") for item in self._items])
            try:
                self._storage.set_item(GALLERY_KEY, payload)
                return
            except StorageQuotaExceeded as e:
                if len(self._items) <= 1:
                    logger.warning(f"Gallery snapshot not persisted, nothing left to evict: {e}")
                    return
                self._drop_oldest()


def filter_gallery_items(
    items: list[MediaItem],
    *,
    media_type: str | None = None,
) -> list[MediaItem]:
    """Keep only items of ``media_type`` (all items when it is ``None``)."""
    if not media_type:
        return items
    return [item for item in items if item.type == media_type]


def paginate_gallery_items(items: list[MediaItem], page: int, per_page: int) -> dict:
    """Paginate gallery items and clamp the requested page to valid bounds.

    Args:
        items: Filtered gallery items.
        page: Requested one-based page number.
        per_page: Requested items per page.

    Returns:
        Dictionary containing ``total``, ``page``, ``per_page``, ``pages``, and
        ``items`` for the resolved page.
    """
    total = len(items)
    pages = (total + per_page - 1) // per_page if total > 0 else 1
    resolved_page = min(max(page, 1), pages)

    start = (resolved_page - 1) * per_page
    end = start + per_page

    return {
        "total": total,
        "page": resolved_page,
        "per_page": per_page,
        "pages": pages,
        "items": items[start:end],
    }

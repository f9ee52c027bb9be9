"""Durable key/value storage with a fixed capacity.

The store behaves like browser local storage: string values under string
keys, persisted to a single ``storage.json`` file in the data directory, and
a total capacity shared by all keys.  A write that would push the combined
size of all keys and values past the capacity raises
:class:`~mediaforge.core.exceptions.StorageQuotaExceeded` and leaves the
previous contents untouched.

Keys used by the application:

- ``gallery`` — JSON list of gallery records, newest first
- ``api_key`` — raw API secret pasted by the user
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from .exceptions import StorageQuotaExceeded

logger = logging.getLogger(__name__)

GALLERY_KEY = "gallery"
API_KEY_KEY = "api_key"


def _entry_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class DurableStorage:
    """File-backed string storage with a capacity limit.

    Args:
        path: Location of the backing JSON file.
        quota_bytes: Combined capacity of all keys and values.
    """

    def __init__(self, path: Path, quota_bytes: int) -> None:
        self.path = Path(path)
        self.quota_bytes = quota_bytes
        self._items: dict[str, str] = self._load()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as handle:
                raw = json.load(handle)
        except Exception:
            logger.warning(f"Ignoring unreadable storage file: {self.path}")
            return {}
        if not isinstance(raw, dict):
            return {}
        return {k: v for k, v in raw.items() if isinstance(k, str) and isinstance(v, str)}

    def _flush(self) -> None:
        # Written beside the target and swapped in, so a crash mid-write
        # leaves the previous file intact.
        self.path.parent.mkdir(parents=True, exist_ok=True)
        staging = self.path.with_name(f"{self.path.name}.tmp")
        with open(staging, "w", encoding="utf-8") as handle:
            json.dump(self._items, handle)
        staging.replace(self.path)

    def used_bytes(self) -> int:
        return sum(_entry_size(k, v) for k, v in self._items.items())

    def fits_alone(self, key: str, value: str) -> bool:
        """Whether ``value`` under ``key`` fits the capacity with every other key empty."""
        return _entry_size(key, value) <= self.quota_bytes

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``.

        Raises:
            StorageQuotaExceeded: If the write would exceed the capacity.
        """
        current = self._items.get(key)
        projected = self.used_bytes() + _entry_size(key, value)
        if current is not None:
            projected -= _entry_size(key, current)

        if projected > self.quota_bytes:
            raise StorageQuotaExceeded(
                f"Writing '{key}' needs {projected} bytes, capacity is {self.quota_bytes}"
            )

        self._items[key] = value
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._flush()

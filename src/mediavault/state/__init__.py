"""In-memory address store mapping content identifiers to stored files."""

from __future__ import annotations

import logging
import os
import threading

from mediavault.ingestion.models import MediaKind

from .base import RecordStore
from .models import MediaRecord

LOGGER = logging.getLogger(__name__)


class AddressStore:
    """Thread-safe identifier → record mapping where the first registration wins.

    Every read and write takes the same lock, so the check-then-insert in
    :meth:`register` is atomic. Entries are never replaced or removed; the
    store lives as long as the object that owns it.
    """

    def __init__(self) -> None:
        self._records: dict[str, MediaRecord] = {}
        self._lock = threading.Lock()

    def register(
        self, identifier: str, path: str | os.PathLike, kind: MediaKind
    ) -> bool:
        """Record ``path`` under ``identifier`` unless the identifier is already taken.

        Args:
            identifier: Content identifier of the file.
            path: Location of the file at registration time.
            kind: Sniffed media kind.

        Returns:
            bool: ``True`` if inserted, ``False`` if an entry already existed.
        """
        key = identifier.lower()
        record = MediaRecord(identifier=key, stored_path=os.fspath(path), media_kind=kind)
        with self._lock:
            if key in self._records:
                LOGGER.debug("Identifier %s already registered; keeping first entry", key)
                return False
            self._records[key] = record
        LOGGER.debug("Registered %s -> %s", key, record.stored_path)
        return True

    def lookup(self, identifier: str) -> MediaRecord | None:
        """Return a copy of the record stored under ``identifier``, if any."""
        if not isinstance(identifier, str):
            return None
        with self._lock:
            record = self._records.get(identifier.lower())
        return record.model_copy() if record is not None else None

    def __contains__(self, identifier: object) -> bool:
        if not isinstance(identifier, str):
            return False
        with self._lock:
            return identifier.lower() in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


__all__ = ["AddressStore", "MediaRecord", "RecordStore"]

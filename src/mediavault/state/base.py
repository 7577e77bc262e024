"""Store interface consumed by the vault service."""

from __future__ import annotations

from typing import Protocol

from mediavault.ingestion.models import MediaKind

from .models import MediaRecord


class RecordStore(Protocol):
    """Identifier-keyed store with first-registration-wins semantics."""

    def register(self, identifier: str, path: str, kind: MediaKind) -> bool: ...

    def lookup(self, identifier: str) -> MediaRecord | None: ...


__all__ = ["RecordStore"]

"""Records kept by the address store."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from mediavault.ingestion.models import MediaKind


class MediaRecord(BaseModel):
    """Metadata captured when a file is first registered under its identifier.

    Attributes:
        identifier: Canonical content identifier.
        stored_path: Filesystem location at registration time.
        media_kind: Kind sniffed from the file's bytes.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str
    stored_path: str
    media_kind: MediaKind


__all__ = ["MediaRecord"]

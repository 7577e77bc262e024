"""Media classification types."""

from __future__ import annotations

from enum import Enum


class MediaKind(str, Enum):
    """Media family derived from a file's byte signature, never from its name."""

    IMAGE = "image"
    VIDEO = "video"

    def __str__(self) -> str:
        return self.value


__all__ = ["MediaKind"]

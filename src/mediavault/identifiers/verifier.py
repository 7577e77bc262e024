"""Re-verification of stored files against their identifiers."""

from __future__ import annotations

import logging
import os

from .codec import IdentifierCodec

LOGGER = logging.getLogger(__name__)


class ContentVerifier:
    """Detect tampering, corruption, or replacement of a previously registered file."""

    def __init__(self, codec: IdentifierCodec | None = None) -> None:
        self._codec = codec or IdentifierCodec()

    def verify(self, identifier: str, path: str | os.PathLike) -> bool:
        """Return whether the bytes at ``path`` still hash to ``identifier``.

        Args:
            identifier: Identifier recorded at registration time.
            path: Location of the stored file.

        Returns:
            bool: ``True`` when the recomputed identifier matches.

        Raises:
            OSError: If the file is missing or unreadable.
        """
        current = self._codec.derive_identifier_from_path(path)
        if not isinstance(identifier, str):
            return False
        matches = current == identifier.lower()
        if not matches:
            LOGGER.info("Content at %s no longer matches identifier %s", path, identifier)
        return matches


__all__ = ["ContentVerifier"]

"""Content-derived identifiers.

An identifier is a version 5 UUID computed over a file's bytes, keyed by
:data:`CONTENT_NAMESPACE`. The namespace is the nil UUID, so any UUIDv5
implementation reproduces the same identifier from the same bytes, and two
files with identical content always share one identifier whatever their names.
"""

from __future__ import annotations

import hashlib
import os
import re
import uuid
from typing import Any, BinaryIO

CONTENT_NAMESPACE = uuid.UUID("00000000-0000-0000-0000-000000000000")

CHUNK_SIZE = 64 * 1024

_IDENTIFIER_PATTERN = re.compile(
    r"[0-9a-f]{8}-(?:[0-9a-f]{4}-){3}[0-9a-f]{12}", re.IGNORECASE | re.ASCII
)

BytesLike = bytes | bytearray | memoryview


class IdentifierCodec:
    """Derive identifiers from content and check the lexical shape of candidates."""

    def __init__(self, namespace: uuid.UUID = CONTENT_NAMESPACE) -> None:
        self._namespace = namespace

    @property
    def namespace(self) -> uuid.UUID:
        """Return the namespace UUID keying the hash."""
        return self._namespace

    def derive_identifier(self, data: BytesLike) -> str:
        """Return the canonical identifier for ``data``."""
        digest = self._new_digest()
        digest.update(data)
        return self._finish(digest)

    def derive_identifier_from_path(self, path: str | os.PathLike) -> str:
        """Return the identifier of the file at ``path``, streaming its content.

        Raises:
            OSError: If the file cannot be opened or read.
        """
        with open(path, "rb") as handle:
            return self.derive_identifier_from_stream(handle)

    def derive_identifier_from_stream(self, stream: BinaryIO) -> str:
        """Return the identifier of everything ``stream`` yields from its current position."""
        digest = self._new_digest()
        for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
            digest.update(chunk)
        return self._finish(digest)

    @staticmethod
    def is_well_formed(candidate: Any) -> bool:
        """Return whether ``candidate`` is an 8-4-4-4-12 hexadecimal identifier."""
        if not isinstance(candidate, str):
            return False
        return _IDENTIFIER_PATTERN.fullmatch(candidate) is not None

    def canonicalize(self, candidate: str) -> str:
        """Return the lowercase form of a well-formed identifier.

        Raises:
            ValueError: If ``candidate`` is not well formed.
        """
        if not self.is_well_formed(candidate):
            raise ValueError(f"Malformed identifier: {candidate!r}")
        return candidate.lower()

    def _new_digest(self) -> "hashlib._Hash":
        digest = hashlib.sha1(usedforsecurity=False)
        digest.update(self._namespace.bytes)
        return digest

    @staticmethod
    def _finish(digest: "hashlib._Hash") -> str:
        return str(uuid.UUID(bytes=digest.digest()[:16], version=5))


_DEFAULT_CODEC = IdentifierCodec()


def derive_identifier(data: BytesLike) -> str:
    """Return the identifier for ``data`` using :data:`CONTENT_NAMESPACE`."""
    return _DEFAULT_CODEC.derive_identifier(data)


def is_well_formed(candidate: Any) -> bool:
    """Return whether ``candidate`` has the lexical shape of an identifier."""
    return IdentifierCodec.is_well_formed(candidate)


__all__ = [
    "CHUNK_SIZE",
    "CONTENT_NAMESPACE",
    "IdentifierCodec",
    "derive_identifier",
    "is_well_formed",
]

"""Signature-based media type detection."""

from __future__ import annotations

import logging
import os
from pathlib import PurePath
from typing import Mapping

import filetype
from filetype.types import IMAGE as IMAGE_MATCHERS
from filetype.types import VIDEO as VIDEO_MATCHERS
from filetype.types import Type

from mediavault.config.models import DEFAULT_EXTENSION_ALIASES

from .models import MediaKind

LOGGER = logging.getLogger(__name__)

# filetype never inspects more than this many leading bytes.
SIGNATURE_BYTES = 8192

BytesLike = bytes | bytearray | memoryview
StrPath = str | os.PathLike


class TypeSniffer:
    """Classify content as image or video from its magic bytes.

    The signature table is the one shipped with ``filetype``; a match only
    counts as media when it belongs to that library's image or video families.
    Extension checks normalise aliases (``jpeg`` → ``jpg`` and so on) through
    an explicit table so the policy is visible and testable.
    """

    def __init__(self, extension_aliases: Mapping[str, str] | None = None) -> None:
        """Initialize the sniffer.

        Args:
            extension_aliases: Alternate extension → canonical extension table.
                Defaults to :data:`DEFAULT_EXTENSION_ALIASES`.
        """
        table = DEFAULT_EXTENSION_ALIASES if extension_aliases is None else extension_aliases
        self._aliases = {_bare(alias): _bare(canonical) for alias, canonical in table.items()}

    @property
    def extension_aliases(self) -> dict[str, str]:
        """Return a copy of the normalised alias table."""
        return dict(self._aliases)

    def sniff(self, data: BytesLike) -> Type | None:
        """Return the matched ``filetype`` signature for ``data``, if any."""
        if not data:
            return None
        return filetype.guess(bytes(data[:SIGNATURE_BYTES]))

    def classify(self, data: BytesLike) -> MediaKind | None:
        """Return the media kind for ``data`` or ``None`` when it is neither image nor video."""
        return self.kind_of(self.sniff(data))

    @staticmethod
    def kind_of(detected: Type | None) -> MediaKind | None:
        """Map a ``filetype`` match onto a media kind."""
        if detected is None:
            return None
        if detected in IMAGE_MATCHERS:
            return MediaKind.IMAGE
        if detected in VIDEO_MATCHERS:
            return MediaKind.VIDEO
        return None

    def extension_matches(self, path: StrPath, detected: Type | str) -> bool:
        """Return whether the extension of ``path`` agrees with the sniffed type.

        Args:
            path: Filename or path whose suffix is checked.
            detected: Sniffed ``filetype`` match, or its canonical extension.

        Returns:
            bool: ``True`` when both extensions normalise to the same value.
        """
        suffix = PurePath(os.fspath(path)).suffix
        if not suffix:
            return False
        expected = detected.extension if isinstance(detected, Type) else detected
        return self.canonical_extension(suffix) == self.canonical_extension(expected)

    def canonical_extension(self, extension: str) -> str:
        """Return the lowercase canonical form of ``extension`` without its dot."""
        bare = _bare(extension)
        return self._aliases.get(bare, bare)

    def validate_file(
        self, path: StrPath, enforce_extension_match: bool = True
    ) -> MediaKind | None:
        """Classify the file at ``path`` as image or video.

        Unknown signatures, non-media signatures, and extension mismatches all
        return ``None``; the reason is only logged.

        Args:
            path: File to inspect.
            enforce_extension_match: Require the filename extension to agree
                with the sniffed type.

        Returns:
            MediaKind | None: The detected kind, or ``None`` when rejected.

        Raises:
            OSError: If the file is missing, unreadable, or not a regular file.
        """
        with open(path, "rb") as handle:
            header = handle.read(SIGNATURE_BYTES)
        return self.check_header(path, header, enforce_extension_match)

    def check_header(
        self, path: StrPath, header: BytesLike, enforce_extension_match: bool = True
    ) -> MediaKind | None:
        """Apply the checks of :meth:`validate_file` to an already-read ``header``.

        ``path`` only supplies the filename extension; nothing is read from it.
        """
        detected = self.sniff(header)
        if detected is None:
            LOGGER.debug("%s: no known signature", path)
            return None

        kind = self.kind_of(detected)
        if kind is None:
            LOGGER.debug("%s: %s is neither image nor video", path, detected.mime)
            return None

        if enforce_extension_match and not self.extension_matches(path, detected):
            LOGGER.debug(
                "%s: extension does not match sniffed type %s", path, detected.extension
            )
            return None

        return kind


def _bare(extension: str) -> str:
    return extension.strip().lower().lstrip(".")


__all__ = ["SIGNATURE_BYTES", "TypeSniffer"]

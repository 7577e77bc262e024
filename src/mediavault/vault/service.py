"""Vault service wiring sniffing, identifiers, and the address store together."""

from __future__ import annotations

import logging
import os
from typing import Iterable

from mediavault.config import MediaVaultConfig
from mediavault.identifiers import ContentVerifier, IdentifierCodec
from mediavault.ingestion import SIGNATURE_BYTES, TypeSniffer
from mediavault.state import AddressStore, RecordStore
from mediavault.urls import validate_url

from .models import UploadResult, UploadStatus, VerifyResult, VerifyStatus

LOGGER = logging.getLogger(__name__)


class MediaVault:
    """Composition root for the upload, verify, and retrieval flows.

    Build one instance per process and hand it to every caller; it owns the
    store, so a second instance starts with an empty store.
    """

    def __init__(
        self,
        config: MediaVaultConfig | None = None,
        *,
        store: RecordStore | None = None,
        sniffer: TypeSniffer | None = None,
        codec: IdentifierCodec | None = None,
        verifier: ContentVerifier | None = None,
    ) -> None:
        """Initialize the vault.

        Args:
            config: Effective configuration; defaults are used when omitted.
            store: Store receiving registrations.
            sniffer: Type sniffer; built from ``config.upload.extension_aliases`` when omitted.
            codec: Identifier codec.
            verifier: Content verifier; shares ``codec`` when omitted.
        """
        self._config = config or MediaVaultConfig()
        self._store = store if store is not None else AddressStore()
        self._sniffer = sniffer or TypeSniffer(self._config.upload.extension_aliases)
        self._codec = codec or IdentifierCodec()
        self._verifier = verifier or ContentVerifier(self._codec)

    @property
    def config(self) -> MediaVaultConfig:
        return self._config

    @property
    def store(self) -> RecordStore:
        return self._store

    def upload(
        self,
        path: str | os.PathLike,
        *,
        enforce_extension: bool | None = None,
    ) -> UploadResult:
        """Validate the file at ``path`` and register it under its content identifier.

        Args:
            path: Candidate upload.
            enforce_extension: Override ``upload.enforce_extension`` for this call.

        Returns:
            UploadResult: ``STORED`` for a first registration, ``DUPLICATE`` when the
            same content is already registered, ``REJECTED`` when the file is not an
            acceptable image or video.

        Raises:
            OSError: If the file cannot be read.
        """
        options = self._config.upload
        enforce = options.enforce_extension if enforce_extension is None else enforce_extension
        display = os.fspath(path)

        # The sniffed header and the hashed bytes come from the same open file.
        with open(path, "rb") as handle:
            header = handle.read(SIGNATURE_BYTES)
            kind = self._sniffer.check_header(path, header, enforce)
            if kind is None:
                LOGGER.info("Rejected %s: not a valid image or video", display)
                return UploadResult(path=display, status=UploadStatus.REJECTED)

            if options.max_file_size_mb > 0:
                size = os.fstat(handle.fileno()).st_size
                if size > options.max_file_size_mb * 1024 * 1024:
                    LOGGER.info(
                        "Rejected %s: %d bytes exceeds %d MB limit",
                        display,
                        size,
                        options.max_file_size_mb,
                    )
                    return UploadResult(path=display, status=UploadStatus.REJECTED)

            handle.seek(0)
            identifier = self._codec.derive_identifier_from_stream(handle)

        if self._store.register(identifier, display, kind):
            LOGGER.info("Stored %s as %s (%s)", display, identifier, kind)
            status = UploadStatus.STORED
        else:
            LOGGER.info("Duplicate content %s already registered as %s", display, identifier)
            status = UploadStatus.DUPLICATE
        return UploadResult(path=display, status=status, identifier=identifier, kind=kind)

    def verify(self, identifier: str) -> VerifyResult:
        """Check that ``identifier`` is registered and its file is unchanged.

        Args:
            identifier: Identifier presented by the caller.

        Returns:
            VerifyResult: Outcome with the stored record when one exists.
        """
        if not self._codec.is_well_formed(identifier):
            return VerifyResult(identifier=str(identifier), status=VerifyStatus.MALFORMED)

        record = self._store.lookup(identifier)
        if record is None:
            return VerifyResult(identifier=identifier, status=VerifyStatus.NOT_FOUND)

        try:
            unchanged = self._verifier.verify(identifier, record.stored_path)
        except OSError as exc:
            LOGGER.warning("Stored file for %s is unreadable: %s", identifier, exc)
            return VerifyResult(identifier=identifier, status=VerifyStatus.MISSING, record=record)

        status = VerifyStatus.VERIFIED if unchanged else VerifyStatus.MODIFIED
        return VerifyResult(identifier=identifier, status=status, record=record)

    def resolve_url(self, identifier: str) -> str | None:
        """Return the retrieval URL of a registered file without re-verifying it."""
        record = self._store.lookup(identifier)
        if record is None:
            return None
        prefix = self._config.urls.public_prefix.rstrip("/")
        return f"{prefix}/{record.media_kind.value}s/{record.stored_path}"

    def check_url(self, url: str, whitelist: Iterable[str] | None = None) -> bool:
        """Validate ``url`` against ``whitelist`` or the configured ``urls.tld_whitelist``."""
        if whitelist is None:
            whitelist = self._config.urls.tld_whitelist
        return validate_url(url, whitelist)


__all__ = ["MediaVault"]

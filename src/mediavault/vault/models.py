"""Result types returned by the vault service."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from mediavault.ingestion.models import MediaKind
from mediavault.state.models import MediaRecord


class UploadStatus(str, Enum):
    """Outcome of an upload attempt."""

    STORED = "stored"
    DUPLICATE = "duplicate"
    REJECTED = "rejected"


class VerifyStatus(str, Enum):
    """Outcome of re-verifying a registered identifier."""

    VERIFIED = "verified"
    MALFORMED = "malformed"
    NOT_FOUND = "not_found"
    MODIFIED = "modified"
    MISSING = "missing"


@dataclass(frozen=True, slots=True)
class UploadResult:
    """Outcome metadata for a single upload.

    Attributes:
        path: Path that was submitted.
        status: Whether the file was stored, already known, or rejected.
        identifier: Content identifier; ``None`` when the file was rejected.
        kind: Sniffed media kind; ``None`` when the file was rejected.
    """

    path: str
    status: UploadStatus
    identifier: str | None = None
    kind: MediaKind | None = None

    @property
    def json_payload(self) -> dict[str, str | None]:
        return {
            "path": self.path,
            "status": self.status.value,
            "identifier": self.identifier,
            "kind": self.kind.value if self.kind else None,
        }


@dataclass(frozen=True, slots=True)
class VerifyResult:
    """Outcome metadata for a verification request.

    Attributes:
        identifier: Identifier as submitted.
        status: Verification outcome.
        record: Stored record, present whenever the identifier is registered.
    """

    identifier: str
    status: VerifyStatus
    record: MediaRecord | None = None

    @property
    def verified(self) -> bool:
        return self.status is VerifyStatus.VERIFIED

    @property
    def json_payload(self) -> dict[str, str | None]:
        return {
            "identifier": self.identifier,
            "status": self.status.value,
            "path": self.record.stored_path if self.record else None,
            "kind": self.record.media_kind.value if self.record else None,
        }


__all__ = ["UploadResult", "UploadStatus", "VerifyResult", "VerifyStatus"]

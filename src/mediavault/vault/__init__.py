"""Upload, verification, and retrieval flows."""

from .models import UploadResult, UploadStatus, VerifyResult, VerifyStatus
from .service import MediaVault

__all__ = ["MediaVault", "UploadResult", "UploadStatus", "VerifyResult", "VerifyStatus"]

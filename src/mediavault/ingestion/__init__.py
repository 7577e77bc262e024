"""Content sniffing for candidate uploads."""

from .detectors import SIGNATURE_BYTES, TypeSniffer
from .models import MediaKind

__all__ = ["MediaKind", "SIGNATURE_BYTES", "TypeSniffer"]

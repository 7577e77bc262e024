"""Content identifiers and content verification."""

from .codec import CONTENT_NAMESPACE, IdentifierCodec, derive_identifier, is_well_formed
from .verifier import ContentVerifier

__all__ = [
    "CONTENT_NAMESPACE",
    "ContentVerifier",
    "IdentifierCodec",
    "derive_identifier",
    "is_well_formed",
]

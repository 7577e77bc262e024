"""URL format validation."""

from .validator import UrlFormatValidator, is_valid_tld, matches_url_shape, validate_url

__all__ = ["UrlFormatValidator", "is_valid_tld", "matches_url_shape", "validate_url"]

"""Lexical URL validation with optional top-level-domain whitelisting."""

from __future__ import annotations

import re
import string
from typing import Any, Iterable

_SCHEME_PATTERN = re.compile(r"[a-z0-9]+", re.IGNORECASE | re.ASCII)
_HOST_PATTERN = re.compile(r"[-.a-z0-9]+", re.IGNORECASE | re.ASCII)
_TLD_PATTERN = re.compile(r"\.[a-z.]+[a-z]", re.IGNORECASE | re.ASCII)
_TLD_CHARS = string.ascii_letters + "."
_MIN_HOST_LENGTH = 3
_MIN_TLD_LENGTH = 2


def is_valid_tld(entry: Any) -> bool:
    """Return whether ``entry`` is a leading-dot top-level-domain token such as ``.ch``."""
    return isinstance(entry, str) and _TLD_PATTERN.fullmatch(entry) is not None


def matches_url_shape(candidate: str) -> bool:
    """Return whether ``candidate`` has the ``[scheme://]host.tld`` shape.

    Accepts exactly what a case-insensitive ASCII full match of
    ``([a-z0-9]+://)?[-.a-z0-9]{3,}\\.[a-z.]+[a-z]`` accepts, in time linear in
    the length of ``candidate``.
    """
    scheme, separator, rest = candidate.partition("://")
    if not separator:
        rest = candidate
    elif _SCHEME_PATTERN.fullmatch(scheme) is None:
        return False

    if _HOST_PATTERN.fullmatch(rest) is None or rest[-1] not in string.ascii_letters:
        return False

    # The TLD period lies in the trailing run of letters and periods, with the
    # minimum host length before it and the minimum TLD length after it.
    tld_run_start = len(rest.rstrip(_TLD_CHARS))
    earliest = max(tld_run_start, _MIN_HOST_LENGTH)
    return rest.find(".", earliest, len(rest) - _MIN_TLD_LENGTH) != -1


def validate_url(candidate: Any, whitelist: Iterable[str] | None = None) -> bool:
    """Return whether ``candidate`` looks like a URL, optionally restricted to a whitelist.

    The candidate is an optional ``scheme://`` prefix, a host segment of at
    least three letters, digits, hyphens or periods, a period, and a
    top-level-domain segment ending in a letter.

    When ``whitelist`` is given, every entry must itself be a valid
    leading-dot token; a single malformed entry rejects every candidate. The
    candidate must then end with one of the entries. An empty whitelist
    admits nothing.

    Args:
        candidate: String to check.
        whitelist: Allowed top-level-domain suffixes, e.g. ``{".ch", ".org"}``.

    Returns:
        bool: ``True`` when the candidate passes every check.
    """
    if not isinstance(candidate, str):
        return False

    if whitelist is not None:
        entries = list(whitelist)
        if not all(is_valid_tld(entry) for entry in entries):
            return False
        lowered = candidate.lower()
        if not any(lowered.endswith(entry.lower()) for entry in entries):
            return False

    return matches_url_shape(candidate)


class UrlFormatValidator:
    """Validator bound to a fixed whitelist, for callers that check many URLs."""

    def __init__(self, whitelist: Iterable[str] | None = None) -> None:
        self._whitelist = None if whitelist is None else tuple(whitelist)

    @property
    def whitelist(self) -> tuple[str, ...] | None:
        return self._whitelist

    def __call__(self, candidate: Any) -> bool:
        return validate_url(candidate, self._whitelist)


__all__ = ["UrlFormatValidator", "is_valid_tld", "matches_url_shape", "validate_url"]

# src/cache/fingerprint.py - v3
"""Content fingerprinting for the exact-match cache tier.

The fingerprint is a SHA-256 digest of normalized text. Normalization is
lowercasing, collapsing every whitespace run (including newlines) to a single
space, and trimming. Changing either step invalidates every existing cache
entry, so both are fixed here and nowhere else.
"""

from __future__ import annotations

import hashlib
import re

FINGERPRINT_LENGTH = 64

_WHITESPACE_RE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Lowercase, collapse whitespace runs to one space, strip both ends."""
    return _WHITESPACE_RE.sub(" ", text.lower()).strip()


def fingerprint(text: str) -> str:
    """Return the 64-char lowercase hex SHA-256 of ``normalize(text)``."""
    return hashlib.sha256(normalize(text).encode("utf-8")).hexdigest()


def exact_cache_key(content_hash: str, variant: str, prefix: str = "feedback") -> str:
    """Build the namespaced exact-store key, e.g. ``feedback:medium:<hash>``."""
    return f"{prefix}:{variant}:{content_hash}"

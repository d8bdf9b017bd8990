"""Locale-aware string ordering used by every sort comparison.

Strings are compared on three levels, the way a user-facing collator does:
base letters first (accents and case ignored), then accents, then case.
Two strings compare equal only when their NFC forms are identical, so the
ordering is total and deterministic regardless of the process locale.
"""

from __future__ import annotations

import functools
import unicodedata

CollationKey = tuple[str, str, str]


def _strip_marks(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


@functools.lru_cache(maxsize=4096)
def collation_key(text: str) -> CollationKey:
    """Return the (primary, secondary, tertiary) sort key for ``text``."""
    composed = unicodedata.normalize("NFC", text)
    return (_strip_marks(composed).casefold(), composed.casefold(), composed)


def compare(a: str, b: str) -> int:
    """Compare two strings: -1 if ``a`` sorts first, 1 if ``b`` does, 0 if equal."""
    key_a = collation_key(a)
    key_b = collation_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


__all__ = [
    "CollationKey",
    "collation_key",
    "compare",
]

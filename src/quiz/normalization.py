"""Text canonicalisation used before comparing quiz answers."""

from __future__ import annotations

import re
import unicodedata


_APOSTROPHE_RE = re.compile(r"[‘’]")
_DASH_RE = re.compile(r"[-–—]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize(text: object) -> str:
    """Lowercase, strip diacritics, unify apostrophes and dashes, collapse whitespace.

    Non-string input yields an empty string so that malformed answers simply
    fail to match instead of raising.
    """
    if not isinstance(text, str):
        return ""

    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    stripped = _APOSTROPHE_RE.sub("'", stripped)
    stripped = _DASH_RE.sub(" ", stripped)
    return _WHITESPACE_RE.sub(" ", stripped).strip()

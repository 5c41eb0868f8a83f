"""Text normalization helpers shared by the dedup and filter stages."""

import re
import unicodedata
from typing import Any

# Whitespace and the separators data-entry uses inside specimen codes
_CODE_NOISE = re.compile(r"[\s\-_./]+")


def normalize_text(value: Any) -> str:
    """Lowercase and trim a value for case-insensitive comparison.

    Non-string values (coordinates stored as numbers, for example) are
    converted with ``str``. ``None`` becomes an empty string.
    """
    if value is None:
        return ""
    return str(value).strip().lower()


def normalize_code(code: Any) -> str:
    """Normalize a human-entered specimen code for grouping.

    Applies the following transformations:
    - Unicode NFKC normalization (full-width digits, etc.)
    - Removes whitespace and separator punctuation (``- _ . /``)
    - Converts to lowercase

    ``"I-0001"``, ``"i 0001"`` and ``" I_0001 "`` all become ``"i0001"``.
    An empty string means the record carries no usable code.
    """
    if code is None:
        return ""
    text = unicodedata.normalize("NFKC", str(code))
    return _CODE_NOISE.sub("", text).lower()


def is_blank(value: Any) -> bool:
    """True for ``None``, empty strings and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return not value
    return False

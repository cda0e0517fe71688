"""Text and number normalization helpers."""
from __future__ import annotations

import re
import unicodedata
from typing import Any, Optional, Tuple

_WHITESPACE = re.compile(r"\s+")


def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def normalize_key(text: Optional[str]) -> str:
    """Lower-case, accent-free and whitespace-free form used to compare descriptions."""
    if not text:
        return ""
    return _WHITESPACE.sub("", strip_accents(text.lower()))


def normalize_name(text: Optional[str]) -> str:
    """Trimmed, lower-case, accent-free name; inner spaces are kept."""
    if not text:
        return ""
    return strip_accents(text.strip().lower())


def collation_key(text: Optional[str]) -> Tuple[str, str]:
    """Sort key for display names.

    Accents are ignored on the first pass and only break ties, so "Élodie"
    sorts between "Eliane" and "Emma" instead of after "Zoé".
    """
    value = (text or "").strip()
    return strip_accents(value).casefold(), value.casefold()


def coerce_amount(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return None
    text = text.replace(" ", "").replace(",", ".")
    try:
        return float(text)
    except ValueError:
        return None


def coerce_int(value: Any) -> Optional[int]:
    if value in (None, "") or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def contains(haystack: Optional[str], needle: str) -> bool:
    """Case-insensitive substring search used by the list filters."""
    if not needle:
        return True
    return needle.lower() in (haystack or "").lower()

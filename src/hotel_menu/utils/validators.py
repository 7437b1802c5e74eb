"""
Input validation helpers shared by the import engine and the menu services.
"""

import re
from typing import Optional

from .constants import VEG_FALSE_TOKENS, VEG_TRUE_TOKENS

_DIGITS = re.compile(r"[0-9]+")


def parse_non_negative_int(value: Optional[str]) -> Optional[int]:
    """
    Parse a trimmed string of ASCII digits into an int.

    Args:
        value: Raw field text

    Returns:
        The integer, or None when the text is blank, signed, fractional or
        otherwise not a plain non-negative integer
    """
    if value is None:
        return None
    text = str(value).strip()
    if not _DIGITS.fullmatch(text):
        return None
    return int(text)


def is_non_negative_int(value) -> bool:
    """True for real ints (not bools) that are >= 0."""
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def parse_is_veg(value: Optional[str], fallback: bool = True) -> bool:
    """
    Parse a loosely written vegetarian flag.

    Matching is case-insensitive after trimming. ``veg``, ``yes``, ``y``,
    ``1`` and friends are True; ``non-veg``, ``no``, ``n``, ``0`` and friends
    are False. Blank or unrecognized text returns ``fallback``.

    Args:
        value: Raw field text (None allowed)
        fallback: Result for blank or unrecognized input

    Returns:
        Parsed flag
    """
    if not value:
        return fallback
    normalized = value.strip().lower()
    if normalized in VEG_TRUE_TOKENS:
        return True
    if normalized in VEG_FALSE_TOKENS:
        return False
    return fallback


def natural_key(name: str) -> str:
    """Case-insensitive matching key for a catalog name."""
    return (name or "").strip().lower()

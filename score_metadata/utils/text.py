"""Whitespace normalization shared by every string-producing stage."""

import re
from typing import Optional

_WHITESPACE_RUN = re.compile(r"\s+")


def normalized(value: Optional[str]) -> Optional[str]:
    """
    Collapse whitespace runs to one space and trim.

    Blank means absent: returns None for None, empty, or
    whitespace-only input, never an empty string.
    """
    if value is None:
        return None
    cleaned = _WHITESPACE_RUN.sub(" ", str(value)).strip()
    return cleaned or None

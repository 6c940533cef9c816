"""Keyword normalization for similarity comparison."""

import re
from typing import Optional

# Word separators editors type between the parts of a keyword:
# whitespace, hyphen, underscore and the middle-dot family.
_SEPARATOR_RE = re.compile(r"[\s\-_·•‧∙・ㆍ]+")

# Everything outside Hangul syllables, a-z and 0-9.
_DISALLOWED_RE = re.compile(r"[^가-힣a-z0-9]+")


def normalize(text: Optional[str]) -> str:
    """
    Return the canonical comparison form of a keyword.

    "돼지 꿈", "돼지-꿈" and "돼지꿈" all normalize to "돼지꿈".

    Args:
        text: Raw keyword as typed by an editor (None is treated as "")

    Returns:
        Lower-cased keyword reduced to Hangul syllables, ASCII letters and digits
    """
    if not text:
        return ""
    lowered = text.lower()
    without_separators = _SEPARATOR_RE.sub("", lowered)
    return _DISALLOWED_RE.sub("", without_separators)

"""URL slug suggestions for new entries."""

import re
from collections.abc import Collection

_WHITESPACE_RE = re.compile(r"\s+")


def suggest_slug(keyword: str) -> str:
    """
    Slug the editor proposes while a keyword is typed.

    Whitespace runs become a single hyphen and the result is lower-cased;
    Korean is kept as-is.

    >>> suggest_slug("돼지 꿈 해몽")
    '돼지-꿈-해몽'
    """
    return _WHITESPACE_RE.sub("-", (keyword or "").strip()).lower()


def unique_slug(slug: str, taken: Collection[str]) -> str:
    """Return ``slug``, or ``slug-2``, ``slug-3``... if it is already taken."""
    if slug not in taken:
        return slug
    suffix = 2
    while f"{slug}-{suffix}" in taken:
        suffix += 1
    return f"{slug}-{suffix}"

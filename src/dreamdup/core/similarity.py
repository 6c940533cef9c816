"""Normalized string similarity built on edit distance."""

from typing import Optional

from dreamdup.core.distance import edit_distance
from dreamdup.core.normalize import normalize


def similarity(a: Optional[str], b: Optional[str]) -> float:
    """
    Similarity of two keywords in [0.0, 1.0], where 1.0 means identical
    after normalization.

    Args:
        a: First keyword
        b: Second keyword

    Returns:
        ``1 - edit_distance / max(len)`` over the normalized forms
    """
    na = normalize(a)
    nb = normalize(b)

    # Equality first so that two empty keywords count as identical.
    if na == nb:
        return 1.0
    if not na or not nb:
        return 0.0

    return 1.0 - edit_distance(na, nb) / max(len(na), len(nb))

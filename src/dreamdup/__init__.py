"""
dreamdup - duplicate dream keyword detection for the MUUN admin panel.

Example usage:
    >>> from dreamdup import find_similar, similarity
    >>> similarity("돼지꿈", "돼지 꿈")
    1.0
    >>> corpus = [{"id": 1, "keyword": "뱀꿈", "slug": "snake"}]
    >>> [(r.id, r.similarity) for r in find_similar("뱀 꿈", corpus)]
    [(1, 100)]
"""

from dreamdup.core.checker import DuplicateChecker
from dreamdup.core.detector import DUPLICATE_THRESHOLD, SimilarityDetector, find_similar
from dreamdup.core.distance import edit_distance
from dreamdup.core.normalize import normalize
from dreamdup.core.similarity import similarity
from dreamdup.core.slug import suggest_slug, unique_slug
from dreamdup.schemas.keyword import KeywordRecord, SimilarityResult
from dreamdup.schemas.report import DuplicateCheckReport

__version__ = "0.1.0"

__all__ = [
    "DUPLICATE_THRESHOLD",
    "DuplicateCheckReport",
    "DuplicateChecker",
    "KeywordRecord",
    "SimilarityDetector",
    "SimilarityResult",
    "edit_distance",
    "find_similar",
    "normalize",
    "similarity",
    "suggest_slug",
    "unique_slug",
]

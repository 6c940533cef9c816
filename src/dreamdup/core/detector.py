"""Duplicate-candidate scan over a keyword corpus."""

from collections.abc import Iterable, Mapping
from typing import Any, Callable, Optional, Union

from dreamdup.core.scorers import FunctionScorer, LevenshteinScorer, ScorerBase
from dreamdup.schemas.keyword import KeywordRecord, RecordId, SimilarityResult

DUPLICATE_THRESHOLD = 0.90

ScorerLike = Union[ScorerBase, Callable[[str, str], float]]
CorpusItem = Union[KeywordRecord, Mapping[str, Any]]


def _as_scorer(scorer: Optional[ScorerLike]) -> ScorerBase:
    if scorer is None:
        return LevenshteinScorer()
    if hasattr(scorer, "score"):
        if hasattr(scorer, "prepare"):
            return scorer
        # score-only objects get a no-op prepare
        return FunctionScorer(scorer.score, name=getattr(scorer, "name", type(scorer).__name__))
    if callable(scorer):
        return FunctionScorer(scorer)
    raise TypeError(f"Expected a scorer or a callable, got {type(scorer).__name__}")


def _as_record(item: CorpusItem) -> KeywordRecord:
    if isinstance(item, KeywordRecord):
        return item
    return KeywordRecord.model_validate(dict(item))


class SimilarityDetector:
    """Flags corpus records whose keyword is too similar to a candidate."""

    def __init__(self, scorer: Optional[ScorerLike] = None, threshold: float = DUPLICATE_THRESHOLD):
        """
        Initialize detector.

        Args:
            scorer: Similarity strategy; a scorer object or a plain
                ``(a, b) -> float`` callable (default: LevenshteinScorer)
            threshold: Minimum score (0.0-1.0) for a record to be reported

        Raises:
            ValueError: If threshold is outside [0.0, 1.0]
        """
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be between 0.0 and 1.0, got {threshold}")
        self.scorer = _as_scorer(scorer)
        self.threshold = threshold

    @property
    def scorer_name(self) -> str:
        return getattr(self.scorer, "name", type(self.scorer).__name__)

    def find_similar(
        self,
        query: Optional[str],
        corpus: Iterable[CorpusItem],
        exclude_id: Optional[RecordId] = None,
    ) -> list[SimilarityResult]:
        """
        Records whose similarity to ``query`` meets the threshold.

        Args:
            query: Candidate keyword
            corpus: Existing records (KeywordRecord or id/keyword/slug mappings)
            exclude_id: Record to ignore, used when editing an existing entry;
                compared by string form so "5" and 5 name the same record

        Returns:
            Matches sorted by descending similarity; ties keep corpus order
        """
        query = query or ""
        records = [
            record
            for record in (_as_record(item) for item in corpus)
            if exclude_id is None or str(record.id) != str(exclude_id)
        ]
        if not records:
            return []

        self.scorer.prepare([query] + [record.keyword for record in records])

        results: list[SimilarityResult] = []
        for record in records:
            score = self.scorer.score(query, record.keyword)
            if score >= self.threshold:
                results.append(SimilarityResult.from_record(record, score))

        # sorted() is stable, so equal percentages stay in corpus order
        return sorted(results, key=lambda result: result.similarity, reverse=True)


def find_similar(
    query: Optional[str],
    corpus: Iterable[CorpusItem],
    exclude_id: Optional[RecordId] = None,
    scorer: Optional[ScorerLike] = None,
    threshold: float = DUPLICATE_THRESHOLD,
) -> list[SimilarityResult]:
    """
    Records in ``corpus`` that look like duplicates of ``query``.

    Shortcut for ``SimilarityDetector(scorer, threshold).find_similar(...)``.
    """
    return SimilarityDetector(scorer=scorer, threshold=threshold).find_similar(
        query, corpus, exclude_id=exclude_id
    )

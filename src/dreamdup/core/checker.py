"""Duplicate check run before saving a dream entry."""

import time
from collections.abc import Iterable
from typing import Optional

from dreamdup.core.detector import SimilarityDetector
from dreamdup.core.errors import ScorerUnavailableError, StoreError
from dreamdup.core.logging import StructuredLogger, get_logger
from dreamdup.core.normalize import normalize
from dreamdup.core.store import KeywordStore
from dreamdup.schemas.keyword import KeywordRecord, RecordId
from dreamdup.schemas.report import DuplicateCheckReport


class DuplicateChecker:
    """
    Fetches the corpus from a store and scans it for near-duplicates.

    A failing store or scoring backend never blocks the save: the report
    comes back with ``skipped=True`` and the reason, and the caller goes
    ahead with the save.
    """

    def __init__(
        self,
        store: KeywordStore,
        detector: Optional[SimilarityDetector] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Initialize checker.

        Args:
            store: Source of existing keyword records
            detector: Detector to run (default: levenshtein at 90%)
            logger: Logger for check outcomes
        """
        self.store = store
        self.detector = detector or SimilarityDetector()
        self.logger = logger or get_logger("dreamdup.checker")

    def _skipped(self, query: str, reason: str, corpus_size: int = 0) -> DuplicateCheckReport:
        return DuplicateCheckReport(
            query=query,
            normalized_query=normalize(query),
            checked=False,
            skipped=True,
            reason=reason,
            corpus_size=corpus_size,
            threshold=self.detector.threshold,
            scorer=self.detector.scorer_name,
        )

    def check(self, query: Optional[str], exclude_id: Optional[RecordId] = None) -> DuplicateCheckReport:
        """
        Check a candidate keyword against every stored record.

        Args:
            query: Keyword from the editor form
            exclude_id: Id of the entry being edited, if any

        Returns:
            Report with ranked matches, or a skipped report
        """
        query = query or ""
        start = time.time()

        if not normalize(query):
            report = self._skipped(query, "empty keyword")
            self.logger.log_duplicate_check(query, 0, 0, skipped=True, reason=report.reason)
            return report

        try:
            corpus = self.store.fetch_keywords()
        except StoreError as e:
            report = self._skipped(query, f"corpus fetch failed: {e}")
            self.logger.log_duplicate_check(query, 0, 0, skipped=True, reason=report.reason)
            return report

        return self._scan(query, corpus, exclude_id, start)

    def check_many(self, queries: Iterable[Optional[str]]) -> list[DuplicateCheckReport]:
        """
        Check several candidate keywords against one fetch of the corpus.

        Args:
            queries: Keywords to check

        Returns:
            One report per query, in input order
        """
        queries = [query or "" for query in queries]
        if not any(normalize(query) for query in queries):
            return [self.check(query) for query in queries]

        start = time.time()
        try:
            corpus = self.store.fetch_keywords()
        except StoreError as e:
            fetch_error: Optional[StoreError] = e
            corpus = []
        else:
            fetch_error = None

        reports = []
        for query in queries:
            if not normalize(query):
                report = self._skipped(query, "empty keyword")
            elif fetch_error is not None:
                report = self._skipped(query, f"corpus fetch failed: {fetch_error}")
            else:
                reports.append(self._scan(query, corpus, None, start))
                continue
            self.logger.log_duplicate_check(query, 0, 0, skipped=True, reason=report.reason)
            reports.append(report)
        return reports

    def _scan(
        self,
        query: str,
        corpus: list[KeywordRecord],
        exclude_id: Optional[RecordId],
        start: float,
    ) -> DuplicateCheckReport:
        try:
            matches = self.detector.find_similar(query, corpus, exclude_id=exclude_id)
        except ScorerUnavailableError as e:
            report = self._skipped(query, f"scorer unavailable: {e}", corpus_size=len(corpus))
            self.logger.log_duplicate_check(
                query, len(corpus), 0, skipped=True, reason=report.reason
            )
            return report

        duration_ms = (time.time() - start) * 1000
        self.logger.log_duplicate_check(
            query,
            len(corpus),
            len(matches),
            duration_ms=duration_ms,
            scorer=self.detector.scorer_name,
        )

        return DuplicateCheckReport(
            query=query,
            normalized_query=normalize(query),
            checked=True,
            skipped=False,
            corpus_size=len(corpus),
            threshold=self.detector.threshold,
            scorer=self.detector.scorer_name,
            matches=matches,
        )

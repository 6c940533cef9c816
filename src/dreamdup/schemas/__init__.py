"""Pydantic models shared across dreamdup."""

from dreamdup.schemas.keyword import KeywordRecord, SimilarityResult
from dreamdup.schemas.report import DuplicateCheckReport

__all__ = ["DuplicateCheckReport", "KeywordRecord", "SimilarityResult"]

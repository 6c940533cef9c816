"""Schema for the outcome of a duplicate check on the save path."""

from typing import Optional

from pydantic import BaseModel, Field

from dreamdup.schemas.keyword import SimilarityResult


class DuplicateCheckReport(BaseModel):
    """Result of checking one candidate keyword against the content store."""

    query: str
    normalized_query: str = ""
    checked: bool = Field(
        default=False,
        description="True when the corpus was fetched and scanned",
    )
    skipped: bool = Field(
        default=False,
        description="True when the check was skipped and the save should proceed",
    )
    reason: Optional[str] = Field(default=None, description="Why the check was skipped")
    corpus_size: int = 0
    threshold: float = 0.9
    scorer: str = "levenshtein"
    matches: list[SimilarityResult] = Field(default_factory=list)

    @property
    def has_duplicates(self) -> bool:
        """Whether any existing entry met the threshold."""
        return bool(self.matches)

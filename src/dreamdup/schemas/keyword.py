"""Schemas for keyword records and similarity results."""

from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

RecordId = Union[int, str]


class KeywordRecord(BaseModel):
    """An existing content entry as seen by the duplicate detector."""

    model_config = ConfigDict(frozen=True)

    id: RecordId = Field(description="Opaque identifier assigned by the content store")
    keyword: str = Field(
        default="",
        description="Display keyword (free-form text, any script)",
    )
    slug: str = Field(default="", description="URL-safe identifier of the entry")

    @field_validator("keyword", "slug", mode="before")
    @classmethod
    def coerce_missing_text(cls, v) -> str:
        """Treat missing keyword/slug columns as empty strings."""
        if v is None:
            return ""
        if not isinstance(v, str):
            return str(v)
        return v


class SimilarityResult(BaseModel):
    """A corpus record judged duplicate-like, with its similarity percentage."""

    id: RecordId
    keyword: str
    slug: str
    similarity: int = Field(ge=0, le=100, description="Similarity as an integer percentage")

    @classmethod
    def from_record(cls, record: KeywordRecord, score: float) -> "SimilarityResult":
        """Build a result from a record and its raw score in [0.0, 1.0]."""
        return cls(
            id=record.id,
            keyword=record.keyword,
            slug=record.slug,
            similarity=round(score * 100),
        )

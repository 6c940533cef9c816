"""Factory for creating similarity scorers with auto-detection."""

import os
from typing import Optional

from dreamdup.core.cache import EmbeddingCache
from dreamdup.core.config import Config
from dreamdup.core.scorers import EmbeddingScorer, LevenshteinScorer, ScorerBase


def check_embedding_available(api_key: Optional[str] = None) -> bool:
    """
    Check if the embedding scorer can be used (has an API key).

    Args:
        api_key: Explicit key to check before falling back to OPENAI_API_KEY

    Returns:
        True if a key is available, False otherwise
    """
    return bool(api_key or os.getenv("OPENAI_API_KEY"))


def create_scorer(name: str = "levenshtein", config: Optional[Config] = None) -> ScorerBase:
    """
    Create a similarity scorer by name.

    Args:
        name: "levenshtein", "embedding", or "auto" (embedding when an
            OpenAI key is available, otherwise levenshtein)
        config: Configuration supplying API key, model and cache directory

    Returns:
        Scorer instance

    Raises:
        ValueError: If the scorer name is unknown
        ScorerUnavailableError: If "embedding" is requested without an API key
    """
    config = config or Config()
    name = (name or "levenshtein").lower()

    if name == "auto":
        name = "embedding" if check_embedding_available(config.openai_api_key) else "levenshtein"

    if name == "levenshtein":
        return LevenshteinScorer()

    if name == "embedding":
        cache_dir = config.get_cache_dir()
        return EmbeddingScorer(
            api_key=config.openai_api_key,
            model=config.embedding_model,
            cache=EmbeddingCache(cache_dir) if cache_dir else None,
            timeout=float(config.request_timeout) * 3,
        )

    raise ValueError(
        f"Unknown scorer: {name}. Supported scorers: levenshtein, embedding, auto"
    )

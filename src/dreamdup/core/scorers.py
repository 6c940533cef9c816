"""Similarity scoring strategies used by the duplicate detector."""

import math
import os
import threading
from typing import Callable, Optional, Protocol, Sequence

from openai import (
    APIConnectionError,
    InternalServerError,
    OpenAI,
    OpenAIError,
    RateLimitError,
)

from dreamdup.core.cache import EmbeddingCache
from dreamdup.core.errors import ScorerUnavailableError
from dreamdup.core.logging import get_logger
from dreamdup.core.normalize import normalize
from dreamdup.core.retry import retry_with_exponential_backoff
from dreamdup.core.similarity import similarity

logger = get_logger("dreamdup.scorers")

DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"

# APITimeoutError is a subclass of APIConnectionError
TRANSIENT_API_ERRORS = (APIConnectionError, RateLimitError, InternalServerError)


class ScorerBase(Protocol):
    """
    Protocol/interface for similarity scorers.

    All scorer implementations must implement these members.
    """

    name: str

    def prepare(self, texts: Sequence[str]) -> None:
        """
        Warm up the scorer for a batch of keywords before scoring pairs.

        Args:
            texts: Every keyword that is about to be scored
        """
        ...

    def score(self, a: str, b: str) -> float:
        """
        Similarity of two keywords.

        Args:
            a: First keyword
            b: Second keyword

        Returns:
            Score in [0.0, 1.0], 1.0 meaning duplicate

        Raises:
            ScorerUnavailableError: If the backend cannot produce a score
        """
        ...


class LevenshteinScorer:
    """Local edit-distance similarity over normalized keywords."""

    name = "levenshtein"

    def prepare(self, texts: Sequence[str]) -> None:
        pass

    def score(self, a: str, b: str) -> float:
        return similarity(a, b)


class FunctionScorer:
    """Adapts a plain ``(a, b) -> float`` callable to the scorer interface."""

    def __init__(self, func: Callable[[str, str], float], name: Optional[str] = None):
        self.func = func
        self.name = name or getattr(func, "__name__", "custom")

    def prepare(self, texts: Sequence[str]) -> None:
        pass

    def score(self, a: str, b: str) -> float:
        return float(self.func(a, b))


def is_transient_api_error(error: Exception) -> bool:
    """True for OpenAI errors worth retrying: network, timeout, 429, 5xx."""
    return isinstance(error, TRANSIENT_API_ERRORS)


def cosine_similarity(va: Sequence[float], vb: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors, clamped to [0.0, 1.0].

    Zero vectors have no direction and score 0.0.
    """
    if len(va) != len(vb):
        raise ValueError(f"Vector dimensions differ: {len(va)} != {len(vb)}")
    dot = sum(x * y for x, y in zip(va, vb))
    norm_a = math.sqrt(sum(x * x for x in va))
    norm_b = math.sqrt(sum(y * y for y in vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return max(0.0, min(1.0, dot / (norm_a * norm_b)))


class EmbeddingScorer:
    """Cosine similarity of OpenAI embeddings of the two keywords."""

    name = "embedding"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_EMBEDDING_MODEL,
        client: Optional[OpenAI] = None,
        cache: Optional[EmbeddingCache] = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        """
        Initialize embedding scorer.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            model: Embedding model name
            client: Preconfigured OpenAI client (skips api_key handling)
            cache: Optional on-disk vector cache
            timeout: Request timeout in seconds
            max_retries: Retry attempts per embedding request
            retry_delay: Initial backoff delay in seconds

        Raises:
            ScorerUnavailableError: If no client and no API key is available
        """
        if client is None:
            api_key = (api_key or os.getenv("OPENAI_API_KEY") or "").strip().strip('"').strip("'")
            if not api_key:
                raise ScorerUnavailableError(
                    "OPENAI_API_KEY is required for the embedding scorer. "
                    "Set it or use the levenshtein scorer."
                )
            # Retries are handled by retry_with_exponential_backoff
            client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

        self.client = client
        self.model = model
        self.cache = cache
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._vectors: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def _request_embeddings(self, texts: list[str]) -> list[list[float]]:
        response = self.client.embeddings.create(model=self.model, input=texts)
        items = sorted(response.data, key=lambda item: item.index)
        return [list(item.embedding) for item in items]

    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        """
        Embedding vectors for ``texts``, fetching only the ones not cached.

        Args:
            texts: Keywords to embed

        Returns:
            One vector per input text, in input order

        Raises:
            ScorerUnavailableError: If the API keeps failing
        """
        keys = [text.strip() for text in texts]

        with self._lock:
            missing = [key for key in dict.fromkeys(keys) if key not in self._vectors]

        if self.cache is not None and missing:
            still_missing = []
            for key in missing:
                vector = self.cache.get(self.model, key)
                if vector is None:
                    still_missing.append(key)
                else:
                    with self._lock:
                        self._vectors[key] = vector
            missing = still_missing

        if missing:
            request = retry_with_exponential_backoff(
                max_retries=self.max_retries,
                initial_delay=self.retry_delay,
                retryable_exceptions=(OpenAIError,),
                retry_if=is_transient_api_error,
                logger_instance=logger,
            )(self._request_embeddings)
            try:
                vectors = request(missing)
            except OpenAIError as e:
                raise ScorerUnavailableError(f"Embedding request failed: {e}") from e
            if len(vectors) != len(missing):
                raise ScorerUnavailableError(
                    f"Embedding API returned {len(vectors)} vectors for {len(missing)} inputs"
                )

            logger.debug(
                f"Embedded {len(missing)} keyword(s) with {self.model}",
                context={"model": self.model, "count": len(missing)},
            )
            with self._lock:
                for key, vector in zip(missing, vectors):
                    self._vectors[key] = vector
            if self.cache is not None:
                for key, vector in zip(missing, vectors):
                    self.cache.set(self.model, key, vector)

        with self._lock:
            return [self._vectors[key] for key in keys]

    def prepare(self, texts: Sequence[str]) -> None:
        """Embed every non-empty keyword in one batched request."""
        candidates = [text for text in texts if normalize(text)]
        if candidates:
            self.embed(candidates)

    def score(self, a: str, b: str) -> float:
        na = normalize(a)
        nb = normalize(b)
        if na == nb:
            return 1.0
        if not na or not nb:
            return 0.0

        va, vb = self.embed([a, b])
        return cosine_similarity(va, vb)

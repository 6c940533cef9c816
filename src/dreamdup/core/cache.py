"""On-disk cache for keyword embedding vectors."""

import hashlib
import json
from pathlib import Path
from typing import Optional


class EmbeddingCache:
    """Cache manager for embedding vectors, one JSON file per (model, text)."""

    def __init__(self, cache_dir: Path):
        """Initialize cache with directory."""
        self.cache_dir = cache_dir
        cache_dir.mkdir(parents=True, exist_ok=True)

    def _hash_key(self, key: str) -> str:
        return hashlib.sha256(key.encode("utf-8")).hexdigest()

    def _get_cache_path(self, model: str, text: str) -> Path:
        key_hash = self._hash_key(f"{model}|{text}")
        return self.cache_dir / f"{key_hash}.json"

    def get(self, model: str, text: str) -> Optional[list[float]]:
        """
        Get a cached vector.

        Args:
            model: Embedding model name
            text: Embedded text

        Returns:
            Cached vector or None if not found or unreadable
        """
        cache_path = self._get_cache_path(model, text)
        if not cache_path.exists():
            return None

        try:
            data = json.loads(cache_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        vector = data.get("vector")
        if not isinstance(vector, list):
            return None
        return vector

    def set(self, model: str, text: str, vector: list[float]) -> None:
        """
        Store a vector in the cache.

        Write errors are ignored; the cache is an optimization only.

        Args:
            model: Embedding model name
            text: Embedded text
            vector: Embedding vector
        """
        cache_path = self._get_cache_path(model, text)
        cache_data = {"model": model, "text": text, "vector": vector}
        try:
            cache_path.write_text(json.dumps(cache_data, ensure_ascii=False), encoding="utf-8")
        except OSError:
            pass

    def clear(self) -> int:
        """
        Clear all cache entries.

        Returns:
            Number of entries deleted
        """
        deleted = 0
        for cache_file in self.cache_dir.glob("*.json"):
            try:
                cache_file.unlink()
                deleted += 1
            except OSError:
                pass
        return deleted

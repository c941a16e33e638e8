"""Disk-based caching of downloaded API description documents.

Uses :mod:`diskcache` to persist parsed OpenAPI documents on the
filesystem with a configurable time-to-live (TTL). Only remote sources are
cached; local files and stdin are always read fresh by
:func:`~snipgen.index.loader.load_document`.

Cache keys are SHA-256 hashes of the source URL so that arbitrarily long
URLs map to fixed-size keys.

See Also:
    :class:`~snipgen.models.CacheConfig` -- the Pydantic model that
    controls ``enabled`` and ``ttl_seconds``.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any, Optional

import diskcache

from snipgen.models import CacheConfig


class DocumentCache:
    """Disk-backed cache for parsed API description documents.

    Stores the parsed dictionary (not the raw text), so a hit skips both
    the download and the YAML parse, which dominates start-up time for the
    Graph descriptions.

    Args:
        cache_dir: Root directory for the cache. A ``documents/``
            subdirectory is created inside it.
        config: Cache configuration (``enabled`` flag and ``ttl_seconds``).

    Example::

        from snipgen.cache import DocumentCache
        from snipgen.models import CacheConfig

        cache = DocumentCache("/tmp/snipgen-cache", CacheConfig(ttl_seconds=3600))
        cache.set("https://example.com/openapi.yaml", {"openapi": "3.0.1", "paths": {}})
        hit = cache.get("https://example.com/openapi.yaml")
    """

    def __init__(self, cache_dir: str | Path, config: CacheConfig) -> None:
        self._config = config
        self._cache: Optional[diskcache.Cache] = None
        self._cache_dir = Path(cache_dir)
        if config.enabled:
            self._cache = diskcache.Cache(str(self._cache_dir / "documents"))

    def get(self, source: str) -> Optional[dict[str, Any]]:
        """Look up a cached document.

        Returns:
            The parsed document on a hit, or ``None`` on a miss or when
            caching is disabled.
        """
        if self._cache is None:
            return None
        return self._cache.get(self._make_key(source))

    def set(self, source: str, document: dict[str, Any]) -> None:
        """Store a parsed document, expiring after the configured TTL."""
        if self._cache is None:
            return
        self._cache.set(self._make_key(source), document, expire=self._config.ttl_seconds)

    def invalidate(self, source: str) -> None:
        """Remove the entry for *source*, if any."""
        if self._cache is None:
            return
        self._cache.delete(self._make_key(source))

    def clear(self) -> None:
        """Remove all entries from the cache."""
        if self._cache is not None:
            self._cache.clear()

    def stats(self) -> dict[str, Any]:
        """Return cache statistics.

        Returns:
            A ``dict`` with ``enabled`` (bool), and when enabled:
            ``size`` (number of entries), ``directory`` (str path), and
            ``ttl_seconds`` (int).
        """
        if self._cache is None:
            return {"enabled": False}
        return {
            "enabled": True,
            "size": len(self._cache),
            "directory": str(self._cache_dir / "documents"),
            "ttl_seconds": self._config.ttl_seconds,
        }

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        if self._cache is not None:
            self._cache.close()

    @staticmethod
    def _make_key(source: str) -> str:
        return hashlib.sha256(source.strip().encode()).hexdigest()

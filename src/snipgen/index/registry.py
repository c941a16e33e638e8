"""Map API version segments to path indexes.

The URL's first path segment (``v1.0``, ``beta``) selects which API
description a request is resolved against. :class:`IndexRegistry` holds
one :class:`~snipgen.index.lazy.Lazy` cell per configured version plus an
optional *override* index that, when present, answers for every version
segment, configured ones included.
"""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional

from snipgen.exceptions import UnsupportedApiVersionError
from snipgen.index.base import PathIndex
from snipgen.index.lazy import Lazy
from snipgen.index.loader import load_document
from snipgen.index.openapi import OpenApiPathIndex
from snipgen.models import GlobalConfig

logger = logging.getLogger(__name__)

IndexFactory = Callable[[], PathIndex]


class IndexRegistry:
    """Version-keyed collection of lazily built path indexes.

    Args:
        factories: API version -> zero-argument callable building its index.
        override: Optional callable building an index used for *every*
            version, including ones absent from *factories*.

    Example::

        registry = IndexRegistry.from_indexes({"v1.0": index})
        registry.get("V1.0")   # versions match case-insensitively
        registry.get("beta")   # raises UnsupportedApiVersionError
    """

    def __init__(
        self,
        factories: Mapping[str, IndexFactory],
        override: Optional[IndexFactory] = None,
    ) -> None:
        self._cells: dict[str, Lazy[PathIndex]] = {
            version.lower(): Lazy(factory) for version, factory in factories.items()
        }
        self._override: Optional[Lazy[PathIndex]] = Lazy(override) if override else None

    @classmethod
    def from_indexes(
        cls,
        indexes: Mapping[str, PathIndex],
        override: Optional[PathIndex] = None,
    ) -> IndexRegistry:
        """Build a registry around indexes that already exist."""
        registry = cls({})
        registry._cells = {v.lower(): Lazy.of(i) for v, i in indexes.items()}
        registry._override = Lazy.of(override) if override is not None else None
        return registry

    @classmethod
    def from_config(cls, config: GlobalConfig, cache=None) -> IndexRegistry:
        """Build a registry from the configured index sources.

        Nothing is downloaded here; each document is fetched and indexed
        the first time its version is requested.

        Args:
            config: The effective configuration.
            cache: Optional :class:`~snipgen.cache.DocumentCache` for URL
                sources.
        """

        def factory_for(source: str) -> IndexFactory:
            def build() -> PathIndex:
                logger.info("Building path index from %s", source)
                return OpenApiPathIndex(load_document(source, cache=cache))

            return build

        factories = {v: factory_for(s) for v, s in config.index_sources.items()}
        override = factory_for(config.override_index) if config.override_index else None
        return cls(factories, override=override)

    @property
    def versions(self) -> list[str]:
        """The explicitly configured version segments, sorted."""
        return sorted(self._cells)

    @property
    def has_override(self) -> bool:
        return self._override is not None

    def supports(self, version: str) -> bool:
        """Return True if *version* can be served, by its own index or the override."""
        return self._override is not None or version.lower() in self._cells

    def get(self, version: str) -> PathIndex:
        """Return the index for *version*, loading it on first use.

        Raises:
            UnsupportedApiVersionError: If *version* is not configured and no
                override index was supplied.
            IndexLoadError: If the document cannot be loaded. The failure is
                not cached.
        """
        cell = self._override if self._override is not None else self._cells.get(version.lower())
        if cell is None:
            supported = ", ".join(self.versions) or "none"
            raise UnsupportedApiVersionError(
                f"API version '{version}' is not supported (configured: {supported}). "
                "Supply an override index to use other versions.",
                version=version,
            )
        return cell.get()

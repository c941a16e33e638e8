"""Disk-based document caching for snipgen.

This package provides :class:`DocumentCache`, which stores parsed API
description documents downloaded by :func:`~snipgen.index.loader.load_document`
using :mod:`diskcache`, keyed by source URL with a configurable TTL.
"""

from snipgen.cache.cache import DocumentCache

__all__ = ["DocumentCache"]

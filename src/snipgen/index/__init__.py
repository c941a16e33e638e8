"""The path index: URL templates to operations, type names to members.

* :mod:`~snipgen.index.base` -- the :class:`PathIndex` protocol and URL tree.
* :mod:`~snipgen.index.openapi` -- :class:`OpenApiPathIndex`, built from an
  OpenAPI 3.x document.
* :mod:`~snipgen.index.loader` -- document loading (URL, file, stdin).
* :mod:`~snipgen.index.registry` -- version segment to lazily built index.
"""

from snipgen.index.base import IndexMatch, PathIndex, PathNode, split_segments
from snipgen.index.lazy import Lazy
from snipgen.index.loader import load_document, validate_openapi_version
from snipgen.index.openapi import OpenApiPathIndex
from snipgen.index.registry import IndexRegistry

__all__ = [
    "IndexMatch",
    "IndexRegistry",
    "Lazy",
    "OpenApiPathIndex",
    "PathIndex",
    "PathNode",
    "load_document",
    "split_segments",
    "validate_openapi_version",
]

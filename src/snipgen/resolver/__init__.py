"""Request resolution: recorded HTTP request to :class:`~snipgen.models.ResolvedRequest`."""

from snipgen.resolver.query import canonical_name, parse_query, split_top_level
from snipgen.resolver.request import DISAMBIGUATION, FRAMING_HEADERS, RequestResolver, split_call
from snipgen.resolver.rewrites import REWRITES, PathRewrite, rewrite_path

__all__ = [
    "DISAMBIGUATION",
    "FRAMING_HEADERS",
    "REWRITES",
    "PathRewrite",
    "RequestResolver",
    "canonical_name",
    "parse_query",
    "rewrite_path",
    "split_call",
    "split_top_level",
]

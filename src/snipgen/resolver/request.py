"""Resolve a recorded HTTP request against a path index.

:class:`RequestResolver` turns an :class:`~snipgen.models.HttpRequest` into
an immutable :class:`~snipgen.models.ResolvedRequest`:

1. The first path segment selects the API version (and so the index) via
   :class:`~snipgen.index.registry.IndexRegistry`.
2. Legacy path shapes are canonicalised by
   :func:`~snipgen.resolver.rewrites.rewrite_path`.
3. The remaining segments are walked down the index's URL tree. Each URL
   token is matched against the current node's children in this order:

   * the exact template segment,
   * a case-insensitive match,
   * a namespace-qualified child whose last component matches
     (``sendMail`` finds ``microsoft.graph.sendMail``),
   * a ``name(args)`` template whose name matches, preferring the template
     with the same argument names (overloaded functions),
   * a type cast (``microsoft.graph.user``) the index knows as a type,
     which is folded into the previous segment,
   * a ``{parameter}`` child.

4. Query string and headers are parsed; transport-framing headers are
   dropped.

A method with no declared operation at the matched template raises
:class:`~snipgen.exceptions.UnresolvedPathError`.
"""

from __future__ import annotations

import logging
import re
from typing import Optional
from urllib.parse import unquote, urlsplit

from snipgen.exceptions import UnresolvedPathError
from snipgen.index.base import PathIndex, PathNode, split_segments
from snipgen.index.registry import IndexRegistry
from snipgen.models import (
    ActionSegment,
    BoundParameter,
    FunctionSegment,
    HttpRequest,
    IndexedCollectionSegment,
    LiteralSegment,
    OperationType,
    PathParameterSegment,
    PathSegment,
    ReferenceSegment,
    ResolvedRequest,
    SchemaKind,
)
from snipgen.resolver.query import parse_query
from snipgen.resolver.rewrites import REWRITES, PathRewrite, rewrite_path

logger = logging.getLogger(__name__)

FRAMING_HEADERS = frozenset(
    {
        "host",
        "content-length",
        "content-type",
        "transfer-encoding",
        "connection",
        "keep-alive",
        "upgrade",
        "te",
        "trailer",
    }
)
"""Lower-cased header names that describe the transport, not the call."""

DISAMBIGUATION: dict[str, str] = {
    "directory": "directoryObject",
}
"""URL tokens whose generated accessor is renamed to avoid a supertype clash."""

_SPECIAL_SEGMENTS = {"$value": "content", "$count": "count"}

_ARG_RE = re.compile(r"(\w+)\s*=\s*('(?:[^']|'')*'|[^,]*)")


class RequestResolver:
    """Match recorded requests against the configured path indexes.

    Args:
        registry: Version segment to path index mapping.
        rewrites: Legacy path rewrite table, applied before matching.

    Example::

        resolver = RequestResolver(IndexRegistry.from_indexes({"v1.0": index}))
        resolved = resolver.resolve(
            HttpRequest(method="get", url="https://graph.microsoft.com/v1.0/me/messages")
        )
        resolved.template_path  # '/me/messages'
    """

    def __init__(
        self,
        registry: IndexRegistry,
        rewrites: tuple[PathRewrite, ...] = REWRITES,
    ) -> None:
        self._registry = registry
        self._rewrites = rewrites

    def resolve(self, request: HttpRequest) -> ResolvedRequest:
        """Resolve *request* into a :class:`~snipgen.models.ResolvedRequest`.

        Raises:
            UnsupportedApiVersionError: If the version segment has no index.
            UnresolvedPathError: If a segment or the method has no match.
            IndexLoadError: If the version's index cannot be loaded.
        """
        parts = urlsplit(request.url.strip())
        tokens = split_segments(unquote(parts.path))
        if not tokens:
            raise UnresolvedPathError(
                f"Request URL has no API version segment: {request.url}", path=parts.path
            )

        version = tokens[0]
        index = self._registry.get(version)
        resource_path = rewrite_path("/" + "/".join(tokens[1:]), self._rewrites)
        node, segments = self._walk(index, resource_path)
        if not segments:
            raise UnresolvedPathError(
                f"Request URL addresses no resource: {request.url}", path=resource_path
            )

        match = index.resolve(node.path)
        operation = match.operation_for(request.method) if match is not None else None
        if operation is None:
            raise UnresolvedPathError(
                f"No {request.method.value.upper()} operation declared for {node.path}",
                path=resource_path,
            )
        logger.debug(
            "Resolved %s %s to template %s", request.method.value.upper(), resource_path, node.path
        )

        return ResolvedRequest(
            method=request.method,
            api_version=version,
            path=resource_path,
            template_path=node.path,
            segments=tuple(segments),
            operation=operation,
            request_schema=operation.request_schema,
            response_schema=operation.response_schema,
            query_options=parse_query(parts.query, operation),
            headers=tuple(
                h for h in request.headers if h.name.lower() not in FRAMING_HEADERS
            ),
            content_type=request.content_type,
            body=request.body,
            index=index,
        )

    # ------------------------------------------------------------------ #
    # Path walking
    # ------------------------------------------------------------------ #

    def _walk(self, index: PathIndex, path: str) -> tuple[PathNode, list[PathSegment]]:
        node = index.root
        segments: list[PathSegment] = []
        for token in split_segments(path):
            child = _match_child(node, token)
            if child is None:
                cast = _type_cast(index, token)
                if cast is not None and segments:
                    segments[-1] = segments[-1].model_copy(update={"type_cast": cast})
                    continue
                child = _parameter_child(node)
            if child is None:
                raise UnresolvedPathError(
                    f"No path segment matches '{token}' under {node.path}",
                    path=path,
                    segment=token,
                )

            segment = _classify(child, token, segments)
            if segment is None:
                if segments:
                    segments[-1] = segments[-1].model_copy(update={"type_cast": child.segment})
                else:
                    segments.append(LiteralSegment(name=child.segment.rsplit(".", 1)[-1]))
            else:
                segments.append(segment)
            node = child
        return node, segments


# ---------------------------------------------------------------------- #
# Matching helpers
# ---------------------------------------------------------------------- #


def _short_name(name: str) -> str:
    return name.rsplit(".", 1)[-1]


def split_call(text: str) -> tuple[str, dict[str, str]]:
    """Split ``name(a='x',b=1)`` into ``("name", {"a": "'x'", "b": "1"})``.

    Argument values keep their quotes; a segment without parentheses has
    no arguments.
    """
    if "(" not in text or not text.endswith(")"):
        return text, {}
    name, _, inner = text.partition("(")
    inner = inner[:-1]
    return name, {m.group(1): m.group(2).strip() for m in _ARG_RE.finditer(inner)}


def _match_child(node: PathNode, token: str) -> Optional[PathNode]:
    children = node.children
    if token in children:
        return children[token]

    lowered = token.lower()
    for segment, child in children.items():
        if segment.lower() == lowered:
            return child

    if "(" in token:
        return _match_call(node, token)

    for segment, child in children.items():
        if "." in segment and not child.has_arguments and _short_name(segment).lower() == lowered:
            return child
    return None


def _match_call(node: PathNode, token: str) -> Optional[PathNode]:
    name, args = split_call(token)
    wanted = {arg.lower() for arg in args}
    candidates: list[tuple[PathNode, set[str]]] = []
    for segment, child in node.children.items():
        if not child.has_arguments:
            continue
        template_name, template_args = split_call(segment)
        if _short_name(template_name).lower() != _short_name(name).lower():
            continue
        candidates.append((child, {arg.lower() for arg in template_args}))
    if not candidates:
        return None

    def score(candidate: tuple[PathNode, set[str]]) -> tuple[bool, int, int]:
        declared = candidate[1]
        return declared == wanted, len(declared & wanted), -len(declared ^ wanted)

    return max(candidates, key=score)[0]


def _parameter_child(node: PathNode) -> Optional[PathNode]:
    for child in node.children.values():
        if child.is_parameter:
            return child
    return None


def _type_cast(index: PathIndex, token: str) -> Optional[str]:
    if "." not in token or "(" in token:
        return None
    descriptor = index.describe_type(token)
    return descriptor.name if descriptor is not None else None


def _operation_type(node: PathNode) -> OperationType:
    types = {op.operation_type for op in node.operations.values()}
    if OperationType.ACTION in types:
        return OperationType.ACTION
    if OperationType.FUNCTION in types:
        return OperationType.FUNCTION
    return OperationType.OPERATION


def _classify(
    child: PathNode, token: str, previous: list[PathSegment]
) -> Optional[PathSegment]:
    """Turn a matched tree node into a path segment.

    Returns ``None`` for a namespace-qualified type cast, which the caller
    folds into the previous segment.
    """
    segment = child.segment
    if segment == "$ref":
        return ReferenceSegment()
    if segment in _SPECIAL_SEGMENTS:
        return LiteralSegment(name=_SPECIAL_SEGMENTS[segment], raw=segment)

    if child.is_parameter:
        name = child.parameter_name or ""
        last = previous[-1] if previous else None
        if isinstance(last, LiteralSegment):
            return IndexedCollectionSegment(collection_name=last.name, key_param_name=name)
        return PathParameterSegment(name=name)

    operation_type = _operation_type(child)
    if child.has_arguments:
        template_name, template_args = split_call(segment)
        _, args = split_call(token)
        if "." not in template_name and operation_type == OperationType.OPERATION:
            key_name = next(iter(template_args), "id")
            value = _unquote_arg(_lookup(args, key_name) or "")
            return IndexedCollectionSegment(
                collection_name=template_name,
                key_param_name=key_name,
                alternate_key=True,
                key_value=value or None,
            )
        bound = _bind_arguments(child, template_args, args)
        if operation_type == OperationType.ACTION:
            return ActionSegment(name=_short_name(template_name), bound_params=bound)
        return FunctionSegment(name=_short_name(template_name), bound_params=bound)

    if "." in segment:
        if operation_type == OperationType.ACTION:
            return ActionSegment(name=_short_name(segment))
        if operation_type == OperationType.FUNCTION:
            return FunctionSegment(name=_short_name(segment))
        return None

    remapped = DISAMBIGUATION.get(segment)
    if remapped is not None:
        return LiteralSegment(name=remapped, raw=segment)
    return LiteralSegment(name=segment)


def _lookup(args: dict[str, str], name: str) -> Optional[str]:
    for key, value in args.items():
        if key.lower() == name.lower():
            return value
    return None


def _unquote_arg(raw: str) -> str:
    raw = raw.strip()
    if len(raw) >= 2 and raw.startswith("'") and raw.endswith("'"):
        return raw[1:-1].replace("''", "'")
    return raw


def _bind_arguments(
    node: PathNode, template_args: dict[str, str], args: dict[str, str]
) -> tuple[BoundParameter, ...]:
    """Bind URL arguments to the template's parameters, in template order."""
    declared = {
        param.name.lower(): param
        for op in node.operations.values()
        for param in op.parameters
    }
    remaining = {key.lower(): key for key in args}
    bound: list[BoundParameter] = []
    for name in template_args:
        raw = _lookup(args, name)
        remaining.pop(name.lower(), None)
        param = declared.get(name.lower())
        declared_kind = param.shape.kind if param is not None else SchemaKind.UNKNOWN
        if raw is None or not raw.strip():
            bound.append(
                BoundParameter(
                    name=name,
                    value="{" + name + "}",
                    kind=declared_kind if declared_kind != SchemaKind.UNKNOWN else SchemaKind.STRING,
                    placeholder=True,
                )
            )
            continue
        value = _unquote_arg(raw)
        quoted = raw.strip().startswith("'")
        if declared_kind != SchemaKind.UNKNOWN:
            kind = declared_kind
        elif quoted:
            kind = SchemaKind.STRING
        else:
            kind = _literal_kind(value)
        bound.append(
            BoundParameter(
                name=name,
                value=value,
                kind=kind,
                placeholder=value.startswith("{") and value.endswith("}"),
            )
        )
    for key in remaining.values():
        logger.warning("Dropping argument '%s' not declared by %s", key, node.segment)
    return tuple(bound)


def _literal_kind(value: str) -> SchemaKind:
    if value.lower() in ("true", "false"):
        return SchemaKind.BOOLEAN
    if value.lstrip("-").isdigit():
        return SchemaKind.INTEGER
    return SchemaKind.STRING

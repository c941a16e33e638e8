"""Parse a URL query string into typed :class:`~snipgen.models.QueryOption` values.

Names are canonicalised the way the SDKs name their query parameter
properties: URL-decoded, the ``$`` prefix removed and the first character
lower-cased (``$OrderBy`` -> ``orderBy``, ``$select`` -> ``select``).

Values are typed in this order:

1. ``select``, ``expand`` and ``orderby`` are always string arrays. They
   are split on commas that are *not* inside parentheses, so
   ``members($select=id,displayName)`` stays one element.
2. ``top`` and ``skip`` are integers, ``count`` is a boolean.
3. A query parameter declared by the matched operation uses its schema type.
4. Anything else: ``true``/``false`` become booleans, digit strings
   integers, everything else stays a string.
"""

from __future__ import annotations

import logging
from typing import Optional, Union
from urllib.parse import unquote_plus

from snipgen.models import OperationDescriptor, QueryOption, SchemaKind, SchemaShape

logger = logging.getLogger(__name__)

_ARRAY_OPTIONS = frozenset({"select", "expand", "orderby"})
_INTEGER_OPTIONS = frozenset({"top", "skip"})
_BOOLEAN_OPTIONS = frozenset({"count"})

QueryValue = Union[bool, int, float, str, tuple[str, ...]]


def canonical_name(raw_name: str) -> str:
    """Return the canonical option name for a raw query key."""
    name = unquote_plus(raw_name).strip().lstrip("$")
    return name[:1].lower() + name[1:]


def split_top_level(value: str) -> tuple[str, ...]:
    """Split *value* on commas outside parentheses and quotes, dropping empty items.

    >>> split_top_level("members($select=id,displayName),owners")
    ('members($select=id,displayName)', 'owners')
    """
    items: list[str] = []
    current: list[str] = []
    depth = 0
    quoted = False
    for char in value:
        if char == "'":
            quoted = not quoted
        elif not quoted:
            if char == "(":
                depth += 1
            elif char == ")" and depth > 0:
                depth -= 1
            elif char == "," and depth == 0:
                items.append("".join(current).strip())
                current = []
                continue
        current.append(char)
    items.append("".join(current).strip())
    return tuple(item for item in items if item and not item.startswith("("))


def parse_query(
    query: str, operation: Optional[OperationDescriptor] = None
) -> tuple[QueryOption, ...]:
    """Parse a raw query string (without the leading ``?``).

    Options keep their source order. A repeated name keeps its last value,
    at the position of its first occurrence.

    Args:
        query: The raw, still URL-encoded query string.
        operation: The matched operation, whose declared query parameters
            drive value typing.
    """
    options: dict[str, QueryOption] = {}
    for pair in query.split("&"):
        if not pair:
            continue
        raw_name, _, raw_value = pair.partition("=")
        decoded_name = unquote_plus(raw_name).strip()
        if not decoded_name:
            continue
        name = canonical_name(raw_name)
        value = unquote_plus(raw_value)
        system = decoded_name.startswith("$")
        declared = operation.query_parameter(name) if operation is not None else None
        kind, typed = _type_value(name.lower() if system else None, value, declared.shape if declared else None)
        options[name] = QueryOption(
            name=name, raw_name=decoded_name, system=system, kind=kind, value=typed
        )
        logger.debug("Query option %s=%r (%s)", name, typed, kind.value)
    return tuple(options.values())


def _type_value(
    system_name: Optional[str], value: str, shape: Optional[SchemaShape]
) -> tuple[SchemaKind, QueryValue]:
    if system_name in _ARRAY_OPTIONS:
        return SchemaKind.ARRAY, split_top_level(value)
    if system_name in _INTEGER_OPTIONS and _is_int(value):
        return SchemaKind.INTEGER, int(value)
    if system_name in _BOOLEAN_OPTIONS and value.lower() in ("true", "false"):
        return SchemaKind.BOOLEAN, value.lower() == "true"

    if shape is not None and shape.kind != SchemaKind.UNKNOWN:
        if shape.kind == SchemaKind.ARRAY:
            return SchemaKind.ARRAY, split_top_level(value)
        if shape.kind == SchemaKind.INTEGER and _is_int(value):
            return SchemaKind.INTEGER, int(value)
        if shape.kind == SchemaKind.NUMBER:
            try:
                return SchemaKind.NUMBER, float(value)
            except ValueError:
                pass
        if shape.kind == SchemaKind.BOOLEAN and value.lower() in ("true", "false"):
            return SchemaKind.BOOLEAN, value.lower() == "true"
        if shape.kind in (SchemaKind.STRING, SchemaKind.ENUM):
            return SchemaKind.STRING, value

    if value.lower() in ("true", "false"):
        return SchemaKind.BOOLEAN, value.lower() == "true"
    if _is_int(value):
        return SchemaKind.INTEGER, int(value)
    return SchemaKind.STRING, value


def _is_int(value: str) -> bool:
    return value.isdigit() or (value.startswith("-") and value[1:].isdigit())

"""The path index contract consumed by the resolver and the body graph builder.

A path index is a hierarchical lookup from URL templates to declared
operations and schemas. The core pipeline only depends on the
:class:`PathIndex` protocol defined here; :mod:`snipgen.index.openapi`
provides the concrete implementation built from an OpenAPI document.

The URL tree is made of :class:`PathNode` objects keyed by the raw template
segment (``messages``, ``{message-id}``, ``microsoft.graph.sendMail``,
``getSchedule(startDateTime='{startDateTime}')``).
"""

from __future__ import annotations

from typing import Iterator, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from snipgen.models import HTTPMethod, OperationDescriptor, TypeDescriptor


class PathNode:
    """One segment of the URL tree.

    Args:
        segment: The raw template segment this node represents. The root
            node uses an empty string.
        path: The template path from the root to this node, with a leading
            slash (``/me/messages``).
    """

    __slots__ = ("segment", "path", "children", "operations")

    def __init__(self, segment: str, path: str) -> None:
        self.segment = segment
        self.path = path
        self.children: dict[str, PathNode] = {}
        self.operations: dict[HTTPMethod, OperationDescriptor] = {}

    def __repr__(self) -> str:
        return f"PathNode({self.path!r})"

    @property
    def is_parameter(self) -> bool:
        """True for a bare ``{name}`` placeholder segment."""
        return (
            self.segment.startswith("{")
            and self.segment.endswith("}")
            and "(" not in self.segment
        )

    @property
    def parameter_name(self) -> Optional[str]:
        """The placeholder name of a parameter segment, without braces."""
        if not self.is_parameter:
            return None
        return self.segment[1:-1]

    @property
    def has_arguments(self) -> bool:
        """True for a ``name(arg=...)`` or ``name()`` segment."""
        return "(" in self.segment and self.segment.endswith(")")

    def get_or_add(self, segment: str) -> PathNode:
        """Return the child for *segment*, creating it if necessary."""
        child = self.children.get(segment)
        if child is None:
            prefix = "" if self.path == "/" else self.path
            child = PathNode(segment, f"{prefix}/{segment}")
            self.children[segment] = child
        return child

    def walk(self) -> Iterator[PathNode]:
        """Yield this node and every descendant, depth-first."""
        yield self
        for child in self.children.values():
            yield from child.walk()


class IndexMatch(BaseModel):
    """The result of looking a template path up in a :class:`PathIndex`."""

    model_config = ConfigDict(frozen=True)

    path: str
    segments: tuple[str, ...]
    operations: dict[HTTPMethod, OperationDescriptor]
    children: tuple[str, ...] = ()

    def operation_for(self, method: HTTPMethod) -> Optional[OperationDescriptor]:
        """Return the operation declared for *method*, or ``None``."""
        return self.operations.get(method)


@runtime_checkable
class PathIndex(Protocol):
    """Lookup service from URL templates to operations and from type names to members."""

    @property
    def root(self) -> PathNode:
        """The root of the URL tree (the node above the first path segment)."""
        ...

    def resolve(self, path: str) -> Optional[IndexMatch]:
        """Look up a template path such as ``/me/messages/{message-id}``."""
        ...

    def describe_type(
        self, name: str, near_namespace: Optional[str] = None
    ) -> Optional[TypeDescriptor]:
        """Describe a named type, preferring *near_namespace* when the name is ambiguous."""
        ...


def split_segments(path: str) -> list[str]:
    """Split a path into non-empty segments, keeping parenthesised arguments whole.

    A slash inside ``(...)`` or inside a quoted argument value does not
    start a new segment, so function calls with path-like arguments survive.

    ``"/me/messages"``                       -> ``["me", "messages"]``
    ``"/drives/x/root:/a/b"``                -> ``["drives", "x", "root:", "a", "b"]``
    ``"/fn(path='a/b')/x"``                  -> ``["fn(path='a/b')", "x"]``
    ``"/"``                                  -> ``[]``
    """
    segments: list[str] = []
    current: list[str] = []
    depth = 0
    quoted = False
    for char in path:
        if char == "'" and depth > 0:
            quoted = not quoted
        elif not quoted:
            if char == "(":
                depth += 1
            elif char == ")" and depth > 0:
                depth -= 1
            elif char == "/" and depth == 0:
                if current:
                    segments.append("".join(current))
                current = []
                continue
        current.append(char)
    if current:
        segments.append("".join(current))
    return segments

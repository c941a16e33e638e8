"""The property graph: a language-neutral IR of a request body.

:data:`PropertyNode` is a closed, discriminated union. Every consumer
dispatches on it with ``match`` and ends with
:func:`typing.assert_never`, so adding a variant fails type checking in
every renderer until it is handled.

Containers keep source JSON order. Empty arrays and objects are kept.
Every :class:`ObjectNode` has a :class:`TypeRef`, synthesized when the
schema gives the object no name.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

ADDITIONAL_DATA = "additionalData"
"""Name of the implicit map holding binds and members unknown to the schema."""

ODATA_ID = "@odata.id"
"""Name of the child holding an ``@odata.id`` reference value."""


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)


class TypeRef(_Node):
    """A reference to a model type.

    ``name`` is fully qualified for schema types
    (``microsoft.graph.message``) and a bare class name for synthesized ones
    (``SendMailPostRequestBody``). ``action`` names the bound action that
    declares a synthesized body when it is not the URL's last segment
    (a scalar payload posted to ``assignLicenses`` uses ``assignLicense``'s body).
    """

    name: str
    namespace: str = ""
    synthesized: bool = False
    action: Optional[str] = None

    @property
    def short_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    @classmethod
    def of(cls, name: str) -> TypeRef:
        """Build a reference to a schema type from its qualified name."""
        namespace = name.rsplit(".", 1)[0] if "." in name else ""
        return cls(name=name, namespace=namespace)


class ItemType(_Node):
    """The declared element type of an array, used for typed empty collections."""

    kind: Literal[
        "string", "number", "boolean", "guid", "datetime", "binary", "enum", "object", "map"
    ]
    type_ref: Optional[TypeRef] = None
    width: Literal[32, 64] = 32
    numeric: Literal["int", "float"] = "int"


class StringNode(_Node):
    kind: Literal["string"] = "string"
    value: str


class NumberNode(_Node):
    kind: Literal["number"] = "number"
    value: Union[int, float]
    width: Literal[32, 64] = 32
    numeric: Literal["int", "float"] = "int"


class BooleanNode(_Node):
    kind: Literal["boolean"] = "boolean"
    value: bool


class GuidNode(_Node):
    kind: Literal["guid"] = "guid"
    value: str


class DateTimeNode(_Node):
    """A temporal literal kept as its source text.

    ``temporal`` is the schema format: ``date-time``, ``date``, ``time`` or
    ``duration``.
    """

    kind: Literal["datetime"] = "datetime"
    value: str
    temporal: str = "date-time"


class BinaryNode(_Node):
    """Binary content: base64 text from a JSON member, or a raw request stream."""

    kind: Literal["binary"] = "binary"
    value: Optional[str] = None
    data: Optional[bytes] = None


class EnumNode(_Node):
    """Selected enum members, in declaration order; several only for flag enums."""

    kind: Literal["enum"] = "enum"
    type_ref: TypeRef
    members: tuple[str, ...]
    flags: bool = False


class NullNode(_Node):
    kind: Literal["null"] = "null"


class PropertyEntry(_Node):
    """A named child of an object or map. ``name`` is the JSON member name."""

    name: str
    node: PropertyNode


class ObjectNode(_Node):
    """Construction of a model type.

    ``derived`` is True when an ``@odata.type`` annotation replaced the
    statically declared type.
    """

    kind: Literal["object"] = "object"
    declared_type: TypeRef
    children: tuple[PropertyEntry, ...] = ()
    derived: bool = False

    def child(self, name: str) -> Optional[PropertyNode]:
        """Return the child node called *name*, or ``None``."""
        for entry in self.children:
            if entry.name == name:
                return entry.node
        return None


class ArrayNode(_Node):
    kind: Literal["array"] = "array"
    item_type: Optional[ItemType] = None
    children: tuple[PropertyNode, ...] = ()


class MapNode(_Node):
    """Free-form string-keyed data with heterogeneous values."""

    kind: Literal["map"] = "map"
    children: tuple[PropertyEntry, ...] = ()


PropertyNode = Annotated[
    Union[
        StringNode,
        NumberNode,
        BooleanNode,
        GuidNode,
        DateTimeNode,
        BinaryNode,
        EnumNode,
        NullNode,
        ObjectNode,
        ArrayNode,
        MapNode,
    ],
    Field(discriminator="kind"),
]


class BodyGraph(_Node):
    """A built request body: the root node plus the top-level body class name."""

    root: PropertyNode
    type_name: Optional[str] = None


def walk(node: PropertyNode):
    """Yield *node* and every descendant, depth-first in source order."""
    yield node
    if isinstance(node, (ObjectNode, MapNode)):
        for entry in node.children:
            yield from walk(entry.node)
    elif isinstance(node, ArrayNode):
        for child in node.children:
            yield from walk(child)


PropertyEntry.model_rebuild()
ObjectNode.model_rebuild()
ArrayNode.model_rebuild()
MapNode.model_rebuild()
BodyGraph.model_rebuild()

"""The language-neutral property graph built from a request body."""

from snipgen.ir.builder import BodyGraphBuilder
from snipgen.ir.nodes import (
    ADDITIONAL_DATA,
    ODATA_ID,
    ArrayNode,
    BinaryNode,
    BodyGraph,
    BooleanNode,
    DateTimeNode,
    EnumNode,
    GuidNode,
    ItemType,
    MapNode,
    NullNode,
    NumberNode,
    ObjectNode,
    PropertyEntry,
    PropertyNode,
    StringNode,
    TypeRef,
    walk,
)

__all__ = [
    "ADDITIONAL_DATA",
    "ODATA_ID",
    "ArrayNode",
    "BinaryNode",
    "BodyGraph",
    "BodyGraphBuilder",
    "BooleanNode",
    "DateTimeNode",
    "EnumNode",
    "GuidNode",
    "ItemType",
    "MapNode",
    "NullNode",
    "NumberNode",
    "ObjectNode",
    "PropertyEntry",
    "PropertyNode",
    "StringNode",
    "TypeRef",
    "walk",
]

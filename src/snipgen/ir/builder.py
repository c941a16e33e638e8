"""Build the property graph for a resolved request's body.

:class:`BodyGraphBuilder` walks the JSON body alongside the request schema
and produces a :data:`~snipgen.ir.nodes.PropertyNode` tree.

Body classification:

* blank body -> no graph;
* binary media types (``application/octet-stream``, ``image/*`` ...) -> a
  single :class:`~snipgen.ir.nodes.BinaryNode` holding the raw bytes;
* declared JSON that does not parse ->
  :class:`~snipgen.exceptions.MalformedBodyError`;
* no content type but parseable JSON -> treated as JSON;
* anything else -> binary.

Value typing follows the schema: ``int64`` -> 64-bit integer, ``double``
and ``float64`` -> 64-bit float, ``float``/``float32`` -> 32-bit float,
guid/uuid -> :class:`GuidNode`, date/time/duration ->
:class:`DateTimeNode`, base64url/byte/binary -> :class:`BinaryNode`,
enums -> :class:`EnumNode`. Members the schema does not declare, and every
``@odata.bind`` member, are collected into an ``additionalData`` map that
is always the object's last child.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from snipgen.exceptions import MalformedBodyError, SchemaMismatchError
from snipgen.index.base import PathIndex
from snipgen.ir.annotations import MemberRole, split_annotations
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
)
from snipgen.models import (
    ActionSegment,
    FunctionSegment,
    IndexedCollectionSegment,
    LiteralSegment,
    PathParameterSegment,
    ReferenceSegment,
    ResolvedRequest,
    SchemaKind,
    SchemaShape,
)
from snipgen.naming import pascal, singularize

logger = logging.getLogger(__name__)

REQUEST_BODY_SUFFIX = "RequestBody"

BINARY_MEDIA_PREFIXES = ("application/octet-stream", "image/", "audio/", "video/")

_ENUM_TOKEN_RE = re.compile(r"[\s,|]+")
_TEMPORAL_FORMATS = ("date-time", "date", "time", "duration")
_INT32_RANGE = range(-(2**31), 2**31)
_PRIMITIVE_KINDS = (SchemaKind.STRING, SchemaKind.INTEGER, SchemaKind.NUMBER, SchemaKind.BOOLEAN)


class BodyGraphBuilder:
    """Schema-driven JSON walker producing the property graph.

    Args:
        index: The path index the request was resolved against, used to
            describe named and derived types.

    Example::

        graph = BodyGraphBuilder(resolved.index).build(resolved)
        graph.type_name   # 'Message'
        graph.root.kind   # 'object'
    """

    def __init__(self, index: Optional[PathIndex]) -> None:
        self._index = index

    def build(self, resolved: ResolvedRequest) -> Optional[BodyGraph]:
        """Build the graph, or return ``None`` when the request has no body.

        Raises:
            MalformedBodyError: If a JSON content type is declared and the
                body does not parse.
            SchemaMismatchError: If a JSON value cannot take its declared type.
        """
        if not resolved.has_body or resolved.body is None:
            return None

        media_type = (resolved.content_type or "").split(";", 1)[0].strip().lower()
        if media_type.startswith(BINARY_MEDIA_PREFIXES):
            return BodyGraph(root=BinaryNode(data=resolved.body))

        declared_json = "json" in media_type
        try:
            payload = json.loads(resolved.body.decode("utf-8-sig"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            if declared_json:
                raise MalformedBodyError(f"Request body is not valid JSON: {exc}") from exc
            return BodyGraph(root=BinaryNode(data=resolved.body))
        if media_type and not declared_json:
            return BodyGraph(root=BinaryNode(data=resolved.body))

        return self._build_payload(resolved, payload)

    # ------------------------------------------------------------------ #
    # Root
    # ------------------------------------------------------------------ #

    def _build_payload(self, resolved: ResolvedRequest, payload: Any) -> BodyGraph:
        shape = resolved.request_schema
        if isinstance(payload, dict):
            root = self._root_object(resolved, payload, shape)
            return BodyGraph(root=root, type_name=pascal(root.declared_type.short_name))

        node = self._value(payload, shape, namespace=None, hint=_last_name(resolved))
        type_name = None
        if isinstance(node, ArrayNode) and node.item_type and node.item_type.type_ref:
            type_name = pascal(node.item_type.type_ref.short_name)
        return BodyGraph(root=node, type_name=type_name)

    def _root_object(
        self, resolved: ResolvedRequest, payload: dict[str, Any], shape: Optional[SchemaShape]
    ) -> ObjectNode:
        if shape is not None and shape.kind == SchemaKind.OBJECT and shape.type_name:
            return self._object(payload, self._type_ref(shape.type_name), known=True)

        if shape is not None and shape.kind not in (SchemaKind.OBJECT, SchemaKind.UNKNOWN):
            raise SchemaMismatchError(
                f"Request body is a JSON object but {resolved.template_path} "
                f"expects {shape.kind.value}"
            )

        properties = dict(shape.properties) if shape is not None else {}
        name = shape.title if shape is not None and shape.title else None
        owner: Optional[str] = None
        last = resolved.segments[-1] if resolved.segments else None

        if name is None and isinstance(last, ActionSegment):
            mismatched = _scalar_mismatches(payload, properties)
            if mismatched and _is_plural(last.name):
                wrapper = self._find_wrapper_action(resolved, last.name, payload)
                if wrapper is not None:
                    wrapper_name, wrapper_shape = wrapper
                    logger.debug(
                        "Scalar payload for %s matches wrapper action %s", last.name, wrapper_name
                    )
                    properties = dict(wrapper_shape.properties)
                    name = _synthesized_name(wrapper_name, resolved)
                    owner = wrapper_name
                else:
                    for key in mismatched:
                        properties[key] = SchemaShape()

        type_ref = TypeRef(
            name=pascal(name) if name else _synthesized_name(_last_name(resolved), resolved),
            synthesized=True,
            action=owner,
        )
        return self._object(
            payload, type_ref, known=shape is not None, properties=properties
        )

    def _find_wrapper_action(
        self, resolved: ResolvedRequest, action: str, payload: dict[str, Any]
    ) -> Optional[tuple[str, SchemaShape]]:
        """Find a sibling action whose body declares every payload member as a scalar."""
        index = resolved.index
        if index is None:
            return None
        parent = resolved.template_path.rsplit("/", 1)[0] or "/"
        match = index.resolve(parent)
        if match is None:
            return None
        prefix = "" if parent == "/" else parent
        for segment in match.children:
            short = segment.split("(", 1)[0].rsplit(".", 1)[-1]
            if short == action or "." not in segment:
                continue
            sibling = index.resolve(f"{prefix}/{segment}")
            operation = sibling.operation_for(resolved.method) if sibling is not None else None
            schema = operation.request_schema if operation is not None else None
            if schema is None or not schema.properties:
                continue
            if all(
                key in schema.properties
                and schema.properties[key].kind in _PRIMITIVE_KINDS
                for key in payload
            ):
                return short, schema
        return None

    # ------------------------------------------------------------------ #
    # Objects
    # ------------------------------------------------------------------ #

    def _object(
        self,
        value: dict[str, Any],
        declared: TypeRef,
        known: bool,
        properties: Optional[dict[str, SchemaShape]] = None,
    ) -> ObjectNode:
        annotated = split_annotations(value)
        type_ref = declared
        derived = False
        if properties is None:
            properties = self._properties_of(declared)

        if annotated.type_override:
            descriptor = (
                self._index.describe_type(annotated.type_override, near_namespace=declared.namespace or None)
                if self._index is not None
                else None
            )
            if descriptor is None or descriptor.kind == SchemaKind.ENUM:
                logger.warning(
                    "Unknown derived type '%s'; keeping %s",
                    annotated.type_override,
                    declared.name,
                )
            else:
                derived = descriptor.name != declared.name
                type_ref = TypeRef.of(descriptor.name)
                properties = dict(descriptor.properties)
                known = True

        children: list[PropertyEntry] = []
        extra: list[PropertyEntry] = []
        namespace = type_ref.namespace or None
        for member in annotated.members:
            if member.role == MemberRole.ODATA_ID:
                children.append(PropertyEntry(name=ODATA_ID, node=StringNode(value=str(member.value))))
                continue
            if member.role == MemberRole.BIND:
                extra.append(PropertyEntry(name=member.name, node=self._untyped(member.value, namespace)))
                continue

            prop_name, prop_shape = _lookup_property(properties, member.name)
            if prop_shape is None:
                entry = PropertyEntry(name=member.name, node=self._untyped(member.value, namespace))
                (extra if known else children).append(entry)
                continue
            children.append(
                PropertyEntry(
                    name=prop_name,
                    node=self._value(member.value, prop_shape, namespace, hint=prop_name),
                )
            )

        if extra:
            children.append(PropertyEntry(name=ADDITIONAL_DATA, node=MapNode(children=tuple(extra))))
        return ObjectNode(declared_type=type_ref, children=tuple(children), derived=derived)

    def _properties_of(self, type_ref: TypeRef) -> dict[str, SchemaShape]:
        if type_ref.synthesized or self._index is None:
            return {}
        descriptor = self._index.describe_type(type_ref.name)
        return dict(descriptor.properties) if descriptor is not None else {}

    def _type_ref(self, name: str) -> TypeRef:
        descriptor = self._index.describe_type(name) if self._index is not None else None
        return TypeRef.of(descriptor.name if descriptor is not None else name)

    # ------------------------------------------------------------------ #
    # Values
    # ------------------------------------------------------------------ #

    def _value(
        self,
        value: Any,
        shape: Optional[SchemaShape],
        namespace: Optional[str],
        hint: str,
    ) -> PropertyNode:
        kind = shape.kind if shape is not None else SchemaKind.UNKNOWN
        named_object = shape is not None and kind == SchemaKind.OBJECT and shape.type_name

        if value is None:
            return NullNode()

        if isinstance(value, dict):
            if kind == SchemaKind.ARRAY:
                raise SchemaMismatchError(f"'{hint}' expects a collection but got an object")
            if named_object:
                return self._object(value, self._type_ref(shape.type_name), known=True)
            if shape is not None and shape.properties:
                type_ref = TypeRef(name=pascal(shape.title or hint), synthesized=True)
                return self._object(value, type_ref, known=True, properties=dict(shape.properties))
            return self._untyped(value, namespace)

        if isinstance(value, list):
            if named_object:
                raise SchemaMismatchError(
                    f"'{hint}' expects a {shape.type_name} object but got a collection"
                )
            item_shape = shape.items if shape is not None and kind == SchemaKind.ARRAY else None
            element_hint = singularize(hint)
            children = tuple(self._value(v, item_shape, namespace, element_hint) for v in value)
            return ArrayNode(item_type=_item_type(item_shape, children), children=children)

        if named_object:
            raise SchemaMismatchError(
                f"'{hint}' expects a {shape.type_name} object but got {type(value).__name__}"
            )
        if kind == SchemaKind.ARRAY:
            raise SchemaMismatchError(
                f"'{hint}' expects a collection but got {type(value).__name__}"
            )

        if isinstance(value, bool):
            return BooleanNode(value=value)
        if isinstance(value, (int, float)):
            return _number(value, shape)
        if isinstance(value, str):
            return self._string(value, shape, hint)
        return StringNode(value=str(value))

    def _string(self, value: str, shape: Optional[SchemaShape], hint: str) -> PropertyNode:
        if shape is None:
            return StringNode(value=value)
        if shape.kind == SchemaKind.ENUM:
            return self._enum(value, shape, hint)
        if shape.has_format("uuid", "guid"):
            return GuidNode(value=value)
        for temporal in _TEMPORAL_FORMATS:
            if shape.has_format(temporal):
                return DateTimeNode(value=value, temporal=temporal)
        if shape.has_format("base64url", "byte", "binary"):
            return BinaryNode(value=value)
        return StringNode(value=value)

    def _enum(self, value: str, shape: SchemaShape, hint: str) -> EnumNode:
        members = shape.enum_members
        flags = shape.flags
        if shape.type_name and self._index is not None and not members:
            descriptor = self._index.describe_type(shape.type_name)
            if descriptor is not None:
                members, flags = descriptor.enum_members, descriptor.flags

        lookup = {member.lower(): member for member in members}
        matched = [lookup[t.lower()] for t in _ENUM_TOKEN_RE.split(value) if t and t.lower() in lookup]
        if flags:
            selected = tuple(member for member in members if member in matched)
        else:
            selected = tuple(matched[:1])
        if not selected:
            if members:
                logger.warning("'%s' is not a member of %s; using %s", value, shape.type_name or hint, members[0])
            selected = (members[0],) if members else (value,)

        type_ref = (
            TypeRef.of(shape.type_name)
            if shape.type_name
            else TypeRef(name=pascal(hint), synthesized=True)
        )
        return EnumNode(type_ref=type_ref, members=selected, flags=flags)

    def _untyped(self, value: Any, namespace: Optional[str]) -> PropertyNode:
        """Type a value from its JSON alone (binds, open types, unknown members)."""
        if value is None:
            return NullNode()
        if isinstance(value, dict):
            override = value.get("@odata.type")
            if isinstance(override, str) and self._index is not None:
                descriptor = self._index.describe_type(override.lstrip("#"), near_namespace=namespace)
                if descriptor is not None and descriptor.kind != SchemaKind.ENUM:
                    return self._object(value, TypeRef.of(descriptor.name), known=True)
            return MapNode(
                children=tuple(
                    PropertyEntry(name=k, node=self._untyped(v, namespace)) for k, v in value.items()
                )
            )
        if isinstance(value, list):
            children = tuple(self._untyped(v, namespace) for v in value)
            return ArrayNode(item_type=_item_type(None, children), children=children)
        if isinstance(value, bool):
            return BooleanNode(value=value)
        if isinstance(value, (int, float)):
            return _number(value, None)
        return StringNode(value=str(value))


# ---------------------------------------------------------------------- #
# Helpers
# ---------------------------------------------------------------------- #


def _number(value: int | float, shape: Optional[SchemaShape]) -> NumberNode:
    if shape is not None:
        if shape.has_format("int64"):
            return NumberNode(value=value, width=64, numeric="int" if isinstance(value, int) else "float")
        if shape.has_format("double", "float64", "decimal"):
            return NumberNode(value=value, width=64, numeric="float")
        if shape.has_format("float", "float32"):
            return NumberNode(value=value, width=32, numeric="float")
        if shape.kind == SchemaKind.NUMBER and not shape.has_format("int32", "int16", "int8", "uint8"):
            return NumberNode(value=value, width=64, numeric="float")
    if isinstance(value, float):
        return NumberNode(value=value, width=64, numeric="float")
    return NumberNode(value=value, width=32 if value in _INT32_RANGE else 64, numeric="int")


def _item_type(shape: Optional[SchemaShape], children: tuple[PropertyNode, ...]) -> Optional[ItemType]:
    if shape is not None and shape.kind != SchemaKind.UNKNOWN:
        if shape.kind == SchemaKind.OBJECT:
            if shape.type_name:
                return ItemType(kind="object", type_ref=TypeRef.of(shape.type_name))
            return ItemType(kind="map")
        if shape.kind == SchemaKind.ENUM:
            ref = TypeRef.of(shape.type_name) if shape.type_name else None
            return ItemType(kind="enum", type_ref=ref) if ref else ItemType(kind="string")
        if shape.kind == SchemaKind.STRING:
            if shape.has_format("uuid", "guid"):
                return ItemType(kind="guid")
            if any(shape.has_format(f) for f in _TEMPORAL_FORMATS):
                return ItemType(kind="datetime")
            if shape.has_format("base64url", "byte", "binary"):
                return ItemType(kind="binary")
            return ItemType(kind="string")
        if shape.kind in (SchemaKind.INTEGER, SchemaKind.NUMBER):
            sample = _number(0, shape)
            return ItemType(kind="number", width=sample.width, numeric=sample.numeric)
        if shape.kind == SchemaKind.BOOLEAN:
            return ItemType(kind="boolean")
        if shape.kind == SchemaKind.ARRAY:
            return None

    first = next((c for c in children if not isinstance(c, NullNode)), None)
    match first:
        case None:
            return None
        case StringNode():
            return ItemType(kind="string")
        case NumberNode(width=width, numeric=numeric):
            return ItemType(kind="number", width=width, numeric=numeric)
        case BooleanNode():
            return ItemType(kind="boolean")
        case ObjectNode(declared_type=declared):
            return ItemType(kind="object", type_ref=declared)
        case MapNode():
            return ItemType(kind="map")
        case _:
            return None


def _lookup_property(
    properties: dict[str, SchemaShape], name: str
) -> tuple[str, Optional[SchemaShape]]:
    if name in properties:
        return name, properties[name]
    lowered = name.lower()
    for key, shape in properties.items():
        if key.lower() == lowered:
            return key, shape
    return name, None


def _scalar_mismatches(payload: dict[str, Any], properties: dict[str, SchemaShape]) -> list[str]:
    """Payload members holding a scalar where the schema expects a container."""
    mismatched = []
    for key, value in payload.items():
        if isinstance(value, (dict, list)) or value is None or key.startswith("@"):
            continue
        declared = properties.get(key)
        if declared is None or declared.kind in (SchemaKind.ARRAY, SchemaKind.OBJECT):
            mismatched.append(key)
    return mismatched


def _is_plural(name: str) -> bool:
    return singularize(name) != name


def _last_name(resolved: ResolvedRequest) -> str:
    """Name of the last addressable segment, singular when the path ends in a key."""
    ends_with_key = False
    for index, segment in enumerate(reversed(resolved.segments)):
        match segment:
            case IndexedCollectionSegment(alternate_key=False):
                ends_with_key = ends_with_key or index == 0
            case IndexedCollectionSegment(collection_name=name):
                return singularize(name)
            case PathParameterSegment() | ReferenceSegment():
                continue
            case LiteralSegment(name=name):
                return singularize(name) if ends_with_key else name
            case ActionSegment(name=name) | FunctionSegment(name=name):
                return name
    return "request"


def _synthesized_name(base: str, resolved: ResolvedRequest) -> str:
    """``sendActivityNotification`` + POST -> ``SendActivityNotificationPostRequestBody``."""
    return pascal(base) + pascal(resolved.method.value) + REQUEST_BODY_SUFFIX

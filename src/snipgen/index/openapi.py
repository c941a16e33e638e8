"""Build a :class:`~snipgen.index.base.PathIndex` from an OpenAPI 3.x document.

:class:`OpenApiPathIndex` walks the ``paths`` object once to build the URL
tree, then answers type questions lazily from ``components/schemas``:

* ``_build_tree`` -- one :class:`~snipgen.index.base.PathNode` per template
  segment, with an :class:`~snipgen.models.OperationDescriptor` per method.
* ``_extract_operation`` -- merges path-level and operation-level
  parameters (operation wins on the same ``name`` + ``in``), and reads the
  request/response schemas and the ``x-ms-docs-operation-type`` extension.
* :meth:`OpenApiPathIndex.shape_of` -- classifies any schema into a
  :class:`~snipgen.models.SchemaShape`, remembering which component a
  ``$ref`` pointed at.
* :meth:`OpenApiPathIndex.describe_type` -- builds (and memoises) a
  :class:`~snipgen.models.TypeDescriptor` with inherited members merged in.

The index never mutates after construction apart from its memo tables, so
one instance can serve concurrent snippet requests.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from snipgen.exceptions import IndexLoadError
from snipgen.index.base import IndexMatch, PathNode, split_segments
from snipgen.index.loader import validate_openapi_version
from snipgen.index.refs import deref, resolve_pointer, schema_id
from snipgen.models import (
    HTTPMethod,
    OperationDescriptor,
    OperationType,
    ParameterDescriptor,
    ParameterLocation,
    SchemaKind,
    SchemaShape,
    TypeDescriptor,
)

logger = logging.getLogger(__name__)

_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)

_PRIMITIVE_KINDS = {
    "string": SchemaKind.STRING,
    "integer": SchemaKind.INTEGER,
    "number": SchemaKind.NUMBER,
    "boolean": SchemaKind.BOOLEAN,
}

# Composition members are inspected in this order when deciding what a
# union such as ``anyOf: [number, string, ReferenceNumeric]`` means.
_KIND_PRIORITY = (
    SchemaKind.OBJECT,
    SchemaKind.ARRAY,
    SchemaKind.NUMBER,
    SchemaKind.INTEGER,
    SchemaKind.BOOLEAN,
    SchemaKind.ENUM,
    SchemaKind.STRING,
)

_BINARY_MEDIA_PREFIXES = ("application/octet-stream", "image/", "audio/", "video/")


class OpenApiPathIndex:
    """Path index backed by a parsed OpenAPI document.

    Args:
        document: The raw OpenAPI dictionary, as returned by
            :func:`~snipgen.index.loader.load_document`.
        validate: Check the ``openapi`` version field first.

    Raises:
        IndexLoadError: If the document is not OpenAPI 3.x or has no
            ``paths`` object.

    Example::

        index = OpenApiPathIndex(load_document("openapi.yaml"))
        match = index.resolve("/me/messages")
        message = index.describe_type("microsoft.graph.message")
    """

    def __init__(self, document: dict[str, Any], validate: bool = True) -> None:
        if validate:
            validate_openapi_version(document)
        paths = document.get("paths")
        if not isinstance(paths, dict):
            raise IndexLoadError("Document has no 'paths' object")

        self._document = document
        self._schemas: dict[str, Any] = (
            document.get("components", {}).get("schemas", {}) or {}
        )
        self._schema_ids_lower = {name.lower(): name for name in self._schemas}
        self._types: dict[str, Optional[TypeDescriptor]] = {}
        self._types_lock = threading.Lock()
        self._root = PathNode("", "/")
        self._build_tree(paths)
        logger.debug(
            "Built path index with %d schemas", len(self._schemas)
        )

    # ------------------------------------------------------------------ #
    # PathIndex protocol
    # ------------------------------------------------------------------ #

    @property
    def root(self) -> PathNode:
        """The node above the first path segment."""
        return self._root

    def resolve(self, path: str) -> Optional[IndexMatch]:
        """Look up a template path, segment by exact segment.

        Args:
            path: A template path such as ``/me/messages/{message-id}``.

        Returns:
            The :class:`~snipgen.index.base.IndexMatch`, or ``None`` if the
            template is not in the document.
        """
        node = self._root
        segments = split_segments(path)
        for segment in segments:
            child = node.children.get(segment)
            if child is None:
                return None
            node = child
        return IndexMatch(
            path=node.path,
            segments=tuple(segments),
            operations=dict(node.operations),
            children=tuple(node.children),
        )

    def describe_type(
        self, name: str, near_namespace: Optional[str] = None
    ) -> Optional[TypeDescriptor]:
        """Describe the component schema called *name*.

        *name* may carry a leading ``#`` (as in ``@odata.type`` values) and
        may be fully qualified (``microsoft.graph.callRecords.session``) or
        just the short name. Short names that exist in several namespaces are
        disambiguated by *near_namespace*: an exact namespace match wins,
        then the candidate sharing the longest namespace prefix.

        Returns:
            The descriptor, or ``None`` for an unknown name.
        """
        type_id = self._find_schema_id(name.lstrip("#"), near_namespace)
        if type_id is None:
            return None
        with self._types_lock:
            if type_id in self._types:
                return self._types[type_id]
        descriptor = self._build_type(type_id, seen=frozenset())
        with self._types_lock:
            self._types[type_id] = descriptor
        return descriptor

    # ------------------------------------------------------------------ #
    # Schema classification
    # ------------------------------------------------------------------ #

    def shape_of(self, schema: Any, seen: frozenset[str] = frozenset()) -> SchemaShape:
        """Classify *schema* into a :class:`~snipgen.models.SchemaShape`.

        ``$ref`` to an object component yields an ``OBJECT`` shape carrying
        the component's name; ``$ref`` to an enum component yields an
        ``ENUM`` shape with its members. Compositions are folded: a
        referenced object among the members wins (``anyOf: [X, null]`` is a
        nullable ``X``), otherwise formats are unioned over the members.

        Args:
            schema: Any schema object from the document.
            seen: References already being classified on this stack.
        """
        if not isinstance(schema, dict):
            return SchemaShape()

        if "$ref" in schema:
            ref = schema["$ref"]
            type_id = schema_id(ref)
            if ref in seen:
                return SchemaShape(kind=SchemaKind.OBJECT, type_name=type_id)
            target = resolve_pointer(ref, self._document)
            if not isinstance(target, dict):
                return SchemaShape()
            if _is_enum(target):
                members, flags = _enum_info(target)
                return SchemaShape(
                    kind=SchemaKind.ENUM,
                    type_name=type_id,
                    enum_members=members,
                    flags=flags,
                )
            if type_id is not None and _is_object_like(target):
                return SchemaShape(
                    kind=SchemaKind.OBJECT,
                    type_name=type_id,
                    title=_title_of(target),
                    nullable=bool(target.get("nullable")),
                )
            return self.shape_of(target, seen | {ref})

        members = [m for key in ("anyOf", "oneOf", "allOf") for m in schema.get(key, [])]
        if members:
            return self._fold_composition(schema, members, seen)

        formats = (schema["format"],) if isinstance(schema.get("format"), str) else ()
        nullable = bool(schema.get("nullable"))
        schema_type = _primary_type(schema)

        if "enum" in schema and schema_type in (None, "string"):
            members_, flags = _enum_info(schema)
            return SchemaShape(
                kind=SchemaKind.ENUM, enum_members=members_, flags=flags, nullable=nullable
            )
        if schema_type == "array":
            return SchemaShape(
                kind=SchemaKind.ARRAY,
                items=self.shape_of(schema.get("items", {}), seen),
                nullable=nullable,
            )
        if schema_type == "object" or "properties" in schema:
            properties = {
                name: self.shape_of(prop, seen)
                for name, prop in (schema.get("properties") or {}).items()
            }
            return SchemaShape(
                kind=SchemaKind.OBJECT,
                title=_title_of(schema),
                properties=properties,
                nullable=nullable,
            )
        if schema_type in _PRIMITIVE_KINDS:
            return SchemaShape(
                kind=_PRIMITIVE_KINDS[schema_type], formats=formats, nullable=nullable
            )
        return SchemaShape(formats=formats, nullable=nullable)

    def _fold_composition(
        self, schema: dict[str, Any], members: list[Any], seen: frozenset[str]
    ) -> SchemaShape:
        shapes = [self.shape_of(m, seen) for m in members if not _is_null_placeholder(m)]
        formats: list[str] = []
        if isinstance(schema.get("format"), str):
            formats.append(schema["format"])
        for shape in shapes:
            formats.extend(f for f in shape.formats if f not in formats)
        nullable = bool(schema.get("nullable")) or any(
            isinstance(m, dict) and m.get("nullable") for m in members
        )

        named = next((s for s in shapes if s.type_name and s.kind == SchemaKind.OBJECT), None)
        if named is not None:
            return named.model_copy(update={"nullable": nullable})

        inline_objects = [s for s in shapes if s.kind == SchemaKind.OBJECT]
        if inline_objects and len(inline_objects) == len(shapes):
            merged: dict[str, SchemaShape] = {}
            for shape in inline_objects:
                merged.update(shape.properties)
            return SchemaShape(
                kind=SchemaKind.OBJECT,
                title=_title_of(schema) or next((s.title for s in inline_objects if s.title), None),
                properties=merged,
                nullable=nullable,
            )

        for kind in _KIND_PRIORITY:
            chosen = next((s for s in shapes if s.kind == kind), None)
            if chosen is not None:
                return chosen.model_copy(update={"formats": tuple(formats), "nullable": nullable})
        return SchemaShape(formats=tuple(formats), nullable=nullable)

    # ------------------------------------------------------------------ #
    # Type descriptors
    # ------------------------------------------------------------------ #

    def _find_schema_id(self, name: str, near_namespace: Optional[str]) -> Optional[str]:
        if name in self._schemas:
            return name
        exact = self._schema_ids_lower.get(name.lower())
        if exact is not None:
            return exact

        short = name.rsplit(".", 1)[-1].lower()
        candidates = sorted(
            type_id for type_id in self._schemas if type_id.rsplit(".", 1)[-1].lower() == short
        )
        if not candidates:
            return None
        if near_namespace:
            for type_id in candidates:
                if _namespace_of(type_id).lower() == near_namespace.lower():
                    return type_id
            candidates.sort(
                key=lambda t: -_common_prefix_len(_namespace_of(t).lower(), near_namespace.lower())
            )
        return candidates[0]

    def _build_type(self, type_id: str, seen: frozenset[str]) -> Optional[TypeDescriptor]:
        schema = self._schemas.get(type_id)
        if not isinstance(schema, dict):
            return None

        namespace = _namespace_of(type_id)
        if _is_enum(schema):
            members, flags = _enum_info(schema)
            return TypeDescriptor(
                name=type_id,
                namespace=namespace,
                title=_title_of(schema),
                kind=SchemaKind.ENUM,
                enum_members=members,
                flags=flags,
            )

        properties: dict[str, SchemaShape] = {}
        base_type: Optional[str] = None
        title = _title_of(schema)
        seen = seen | {type_id}

        for member in schema.get("allOf", []):
            if not isinstance(member, dict):
                continue
            if "$ref" in member:
                ref_id = schema_id(member["$ref"])
                if ref_id is None or ref_id in seen:
                    continue
                base_type = base_type or ref_id
                base = self._build_type(ref_id, seen)
                if base is not None:
                    properties.update(base.properties)
            else:
                title = title or _title_of(member)
                for name, prop in (member.get("properties") or {}).items():
                    properties[name] = self.shape_of(prop)

        for name, prop in (schema.get("properties") or {}).items():
            properties[name] = self.shape_of(prop)

        return TypeDescriptor(
            name=type_id,
            namespace=namespace,
            base_type=base_type,
            title=title,
            properties=properties,
        )

    # ------------------------------------------------------------------ #
    # URL tree
    # ------------------------------------------------------------------ #

    def _build_tree(self, paths: dict[str, Any]) -> None:
        for template, path_item in paths.items():
            if not isinstance(path_item, dict):
                continue
            path_item = deref(path_item, self._document)
            node = self._root
            for segment in split_segments(template):
                node = node.get_or_add(segment)

            path_params = path_item.get("parameters", [])
            for method, operation in path_item.items():
                if method not in _HTTP_METHODS or not isinstance(operation, dict):
                    continue
                node.operations[HTTPMethod(method)] = self._extract_operation(
                    HTTPMethod(method), node, operation, path_params
                )

    def _extract_operation(
        self,
        method: HTTPMethod,
        node: PathNode,
        operation: dict[str, Any],
        path_params: list[Any],
    ) -> OperationDescriptor:
        return OperationDescriptor(
            method=method,
            operation_id=operation.get("operationId"),
            operation_type=_operation_type(operation, node, method),
            parameters=tuple(self._merge_parameters(path_params, operation.get("parameters", []))),
            request_schema=self._request_schema(operation.get("requestBody")),
            response_schema=self._response_schema(operation.get("responses") or {}),
        )

    def _merge_parameters(
        self, path_params: list[Any], op_params: list[Any]
    ) -> list[ParameterDescriptor]:
        merged: dict[tuple[str, str], ParameterDescriptor] = {}
        for raw in list(path_params) + list(op_params):
            param = deref(raw, self._document)
            if not isinstance(param, dict) or "name" not in param:
                continue
            try:
                location = ParameterLocation(param.get("in", "query"))
            except ValueError:
                continue
            merged[(param["name"], location.value)] = ParameterDescriptor(
                name=param["name"],
                location=location,
                shape=self.shape_of(param.get("schema", {})),
                required=bool(param.get("required")),
            )
        return list(merged.values())

    def _request_schema(self, body: Any) -> Optional[SchemaShape]:
        body = deref(body, self._document)
        if not isinstance(body, dict):
            return None
        return self._content_schema(body.get("content") or {})

    def _response_schema(self, responses: dict[str, Any]) -> Optional[SchemaShape]:
        for code in sorted(responses):
            if not (code.startswith("2") or code.upper() == "2XX"):
                continue
            response = deref(responses[code], self._document)
            if isinstance(response, dict) and response.get("content"):
                return self._content_schema(response["content"])
        return None

    def _content_schema(self, content: dict[str, Any]) -> Optional[SchemaShape]:
        if not content:
            return None
        for media_type, media in content.items():
            if "json" in media_type and isinstance(media, dict):
                return self.shape_of(media.get("schema", {}))
        for media_type in content:
            if media_type.startswith(_BINARY_MEDIA_PREFIXES):
                return SchemaShape(kind=SchemaKind.STRING, formats=("binary",))
        first = next(iter(content.values()))
        return self.shape_of(first.get("schema", {})) if isinstance(first, dict) else None


# ---------------------------------------------------------------------- #
# Helpers
# ---------------------------------------------------------------------- #


def _primary_type(schema: dict[str, Any]) -> Optional[str]:
    """Return the schema ``type``, taking the first non-null entry of a 3.1 type list."""
    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        return next((t for t in schema_type if t != "null"), None)
    return schema_type


def _is_enum(schema: dict[str, Any]) -> bool:
    return "enum" in schema and _primary_type(schema) in (None, "string")


def _is_null_placeholder(member: Any) -> bool:
    """True for the ``{type: object, nullable: true}`` member Graph pairs with nullable refs."""
    return (
        isinstance(member, dict)
        and bool(member.get("nullable"))
        and set(member) <= {"type", "nullable"}
        and member.get("type", "object") == "object"
    )


def _is_object_like(schema: dict[str, Any]) -> bool:
    return (
        _primary_type(schema) == "object"
        or "properties" in schema
        or "allOf" in schema
    )


def _enum_info(schema: dict[str, Any]) -> tuple[tuple[str, ...], bool]:
    members = tuple(str(v) for v in schema.get("enum", []) if v is not None)
    flags_ext = schema.get("x-ms-enum-flags") or {}
    return members, bool(isinstance(flags_ext, dict) and flags_ext.get("isFlags"))


def _title_of(schema: dict[str, Any]) -> Optional[str]:
    title = schema.get("title")
    return title if isinstance(title, str) and title else None


def _namespace_of(type_id: str) -> str:
    return type_id.rsplit(".", 1)[0] if "." in type_id else ""


def _common_prefix_len(a: str, b: str) -> int:
    count = 0
    for left, right in zip(a.split("."), b.split(".")):
        if left != right:
            break
        count += 1
    return count


def _operation_type(
    operation: dict[str, Any], node: PathNode, method: HTTPMethod
) -> OperationType:
    declared = operation.get("x-ms-docs-operation-type")
    if isinstance(declared, str):
        try:
            return OperationType(declared.lower())
        except ValueError:
            pass
    segment = node.segment.split("(", 1)[0]
    if "." in segment and not node.is_parameter:
        return OperationType.ACTION if method == HTTPMethod.POST else OperationType.FUNCTION
    if node.has_arguments:
        return OperationType.FUNCTION
    return OperationType.OPERATION

"""Canonical Pydantic models shared across all snipgen modules.

This is the single source of truth for data shapes that cross module
boundaries. The property-graph IR lives separately in :mod:`snipgen.ir.nodes`
because only the builder, the renderer and the import resolver touch it.
The models fall into four groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`CacheConfig`, :class:`OutputConfig` and :class:`GlobalConfig`.

**Request models** -- the recorded HTTP request as it arrives:
    :class:`HTTPMethod`, :class:`Header` and :class:`HttpRequest`.

**Index descriptors** -- produced by a :class:`~snipgen.index.base.PathIndex`
and consumed by the resolver and the body graph builder:
    :class:`SchemaKind`, :class:`SchemaShape`, :class:`TypeDescriptor`,
    :class:`ParameterLocation`, :class:`ParameterDescriptor`,
    :class:`OperationType` and :class:`OperationDescriptor`.

**Resolution output** -- the immutable result of
:class:`~snipgen.resolver.RequestResolver`:
    :class:`QueryOption`, :class:`BoundParameter`, the path segment variants
    (:class:`LiteralSegment`, :class:`PathParameterSegment`,
    :class:`IndexedCollectionSegment`, :class:`ActionSegment`,
    :class:`FunctionSegment`, :class:`ReferenceSegment`) and
    :class:`ResolvedRequest`.

Everything produced by resolution is frozen; the renderer and the
import resolver read the same instances.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration ---


DEFAULT_INDEX_SOURCES: dict[str, str] = {
    "v1.0": "https://raw.githubusercontent.com/microsoftgraph/msgraph-metadata/"
    "master/openapi/v1.0/openapi.yaml",
    "beta": "https://raw.githubusercontent.com/microsoftgraph/msgraph-metadata/"
    "master/openapi/beta/openapi.yaml",
}
"""API version segment -> OpenAPI document used to build its path index."""


class CacheConfig(BaseModel):
    """Downloaded index document cache settings stored in :class:`GlobalConfig`."""

    enabled: bool = Field(default=True, description="Cache downloaded documents")
    ttl_seconds: int = Field(default=86400, description="Cache TTL in seconds")


class OutputConfig(BaseModel):
    """Output preferences stored in :class:`GlobalConfig`."""

    format: str = Field(default="auto", description="auto, rich, plain or json")


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/snipgen/config.json``.

    Loaded and saved by :func:`~snipgen.config.load_global_config` and
    :func:`~snipgen.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~snipgen.config.resolve_config`
    for the full precedence chain.

    ``override_index`` names a document that is used for *every* version
    segment. Supplying it is how callers opt out of
    :class:`~snipgen.exceptions.UnsupportedApiVersionError` for custom or
    pre-release API versions.
    """

    index_sources: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_INDEX_SOURCES)
    )
    override_index: Optional[str] = None
    default_language: str = "c#"
    output: OutputConfig = Field(default_factory=OutputConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)


# --- HTTP request ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods a recorded request can use."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"


class Header(BaseModel):
    """A single request header, kept verbatim."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str


class HttpRequest(BaseModel):
    """A recorded HTTP request, before any resolution against the path index.

    ``url`` may be absolute (``https://graph.microsoft.com/v1.0/me``) or
    start at the version segment (``/v1.0/me``). Headers keep their original
    order and spelling.

    Example::

        HttpRequest(
            method=HTTPMethod.POST,
            url="https://graph.microsoft.com/v1.0/me/sendMail",
            headers=[Header(name="Content-Type", value="application/json")],
            body=b'{"message": {"subject": "hi"}}',
        )
    """

    method: HTTPMethod
    url: str
    headers: list[Header] = Field(default_factory=list)
    body: Optional[bytes] = None

    @property
    def content_type(self) -> Optional[str]:
        """The ``Content-Type`` header value, or ``None`` when absent."""
        for header in self.headers:
            if header.name.lower() == "content-type":
                return header.value
        return None


# --- Index descriptors ---


class SchemaKind(str, enum.Enum):
    """Coarse classification of a schema as seen by the body graph builder."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    ENUM = "enum"
    UNKNOWN = "unknown"


class SchemaShape(BaseModel):
    """The shape of a property, parameter, request body or response.

    Object and enum shapes that refer to a named component carry its fully
    qualified ``type_name`` (``microsoft.graph.message``); the members of
    that type are obtained through
    :meth:`~snipgen.index.base.PathIndex.describe_type`. Inline objects
    (such as an action's synthesized request body) list their members in
    ``properties`` instead.

    ``formats`` is the union of every ``format`` found on the schema and its
    ``anyOf``/``oneOf``/``allOf`` members, which is how a Graph-style
    ``anyOf: [number/double, string, ReferenceNumeric]`` is recognised as a
    double.
    """

    model_config = ConfigDict(frozen=True)

    kind: SchemaKind = SchemaKind.UNKNOWN
    type_name: Optional[str] = None
    title: Optional[str] = None
    formats: tuple[str, ...] = ()
    items: Optional[SchemaShape] = None
    properties: dict[str, SchemaShape] = Field(default_factory=dict)
    enum_members: tuple[str, ...] = ()
    flags: bool = False
    nullable: bool = False

    @property
    def is_free_form(self) -> bool:
        """True for an object schema with neither a named type nor declared members."""
        return (
            self.kind in (SchemaKind.OBJECT, SchemaKind.UNKNOWN)
            and self.type_name is None
            and not self.properties
        )

    def has_format(self, *names: str) -> bool:
        """Return True if any of *names* appears in :attr:`formats` (case-insensitive)."""
        wanted = {n.lower() for n in names}
        return any(f.lower() in wanted for f in self.formats)


class TypeDescriptor(BaseModel):
    """A named schema component with its inheritance and namespace information.

    ``properties`` already contains inherited members, base type first, so
    consumers never have to walk ``base_type`` themselves.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    namespace: str
    base_type: Optional[str] = None
    title: Optional[str] = None
    kind: SchemaKind = SchemaKind.OBJECT
    properties: dict[str, SchemaShape] = Field(default_factory=dict)
    enum_members: tuple[str, ...] = ()
    flags: bool = False

    @property
    def short_name(self) -> str:
        """The last dotted component of :attr:`name` (``message`` for ``microsoft.graph.message``)."""
        return self.name.rsplit(".", 1)[-1]


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class ParameterDescriptor(BaseModel):
    """A declared operation parameter."""

    model_config = ConfigDict(frozen=True)

    name: str
    location: ParameterLocation
    shape: SchemaShape = Field(default_factory=SchemaShape)
    required: bool = False


class OperationType(str, enum.Enum):
    """Whether an operation is plain CRUD or a bound action/function."""

    OPERATION = "operation"
    ACTION = "action"
    FUNCTION = "function"


class OperationDescriptor(BaseModel):
    """A declared operation on one path template for one HTTP method."""

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod
    operation_id: Optional[str] = None
    operation_type: OperationType = OperationType.OPERATION
    parameters: tuple[ParameterDescriptor, ...] = ()
    request_schema: Optional[SchemaShape] = None
    response_schema: Optional[SchemaShape] = None

    @property
    def has_request_body(self) -> bool:
        """True if the operation declares a request body."""
        return self.request_schema is not None

    def query_parameter(self, name: str) -> Optional[ParameterDescriptor]:
        """Find a declared query parameter, ignoring a ``$`` prefix and case."""
        wanted = name.lstrip("$").lower()
        for param in self.parameters:
            if param.location == ParameterLocation.QUERY and param.name.lstrip("$").lower() == wanted:
                return param
        return None


# --- Resolution output ---


class QueryOption(BaseModel):
    """One parsed query string option.

    ``name`` is canonical: the ``$`` prefix removed, the first character
    lower-cased and the whole token URL-decoded. ``system`` is True for
    ``$``-prefixed OData options. Array values are tuples of strings in
    source order.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    raw_name: str
    system: bool = False
    kind: SchemaKind = SchemaKind.STRING
    value: Union[bool, int, float, str, tuple[str, ...]]


class BoundParameter(BaseModel):
    """A named argument of a function segment or an alternate-key segment.

    ``placeholder`` is True when the URL carried a ``{name}`` template token
    (or no value at all) rather than a concrete value.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    kind: SchemaKind = SchemaKind.STRING
    placeholder: bool = False


class _Segment(BaseModel):
    """Common base of every path segment variant.

    ``type_cast`` records an OData type-cast segment that was collapsed into
    this one (``microsoft.graph.group`` after ``members``).
    """

    model_config = ConfigDict(frozen=True)

    type_cast: Optional[str] = None


class LiteralSegment(_Segment):
    """A navigation property or entity set (``me``, ``messages``).

    ``raw`` keeps the URL token when the accessor was remapped through the
    disambiguation table (``directory`` -> ``directoryObject``).
    """

    kind: Literal["literal"] = "literal"
    name: str
    raw: Optional[str] = None


class PathParameterSegment(_Segment):
    """A template parameter that does not key a collection (``{size}``)."""

    kind: Literal["path_parameter"] = "path_parameter"
    name: str


class IndexedCollectionSegment(_Segment):
    """Keyed access into the preceding collection (``messages/{message-id}``).

    Alternate-key addressing (``users(userPrincipalName='x')``) sets
    ``alternate_key`` and carries the key's value in ``key_value``.
    """

    kind: Literal["indexed_collection"] = "indexed_collection"
    collection_name: str
    key_param_name: str
    alternate_key: bool = False
    key_value: Optional[str] = None


class ActionSegment(_Segment):
    """A bound action such as ``sendMail``, namespace prefix removed."""

    kind: Literal["action"] = "action"
    name: str
    bound_params: tuple[BoundParameter, ...] = ()


class FunctionSegment(_Segment):
    """A bound function; ``bound_params`` follow the declared parameter order."""

    kind: Literal["function"] = "function"
    name: str
    bound_params: tuple[BoundParameter, ...] = ()


class ReferenceSegment(_Segment):
    """The ``$ref`` segment addressing a relationship rather than an entity."""

    kind: Literal["reference"] = "reference"


PathSegment = Annotated[
    Union[
        LiteralSegment,
        PathParameterSegment,
        IndexedCollectionSegment,
        ActionSegment,
        FunctionSegment,
        ReferenceSegment,
    ],
    Field(discriminator="kind"),
]


class ResolvedRequest(BaseModel):
    """A request matched against the path index. Immutable after construction.

    ``index`` is the :class:`~snipgen.index.base.PathIndex` the request was
    resolved against; the body graph builder uses it to describe nested
    types. It is excluded from serialisation.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    method: HTTPMethod
    api_version: str
    path: str
    template_path: str
    segments: tuple[PathSegment, ...]
    operation: Optional[OperationDescriptor] = None
    request_schema: Optional[SchemaShape] = None
    response_schema: Optional[SchemaShape] = None
    query_options: tuple[QueryOption, ...] = ()
    headers: tuple[Header, ...] = ()
    content_type: Optional[str] = None
    body: Optional[bytes] = None
    index: Any = Field(default=None, exclude=True, repr=False)

    def query(self, name: str) -> Optional[QueryOption]:
        """Return the query option with canonical *name*, or ``None``."""
        for option in self.query_options:
            if option.name == name:
                return option
        return None

    @property
    def has_body(self) -> bool:
        """True when a non-blank body was recorded."""
        return bool(self.body and self.body.strip())

    @property
    def requires_configuration(self) -> bool:
        """True when the call needs a query/header configuration block."""
        return bool(self.query_options or self.headers)


SchemaShape.model_rebuild()

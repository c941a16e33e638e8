"""The per-language rendering contract.

A :class:`LanguageProfile` is everything the generic
:class:`~snipgen.render.engine.SnippetRenderer` needs to know about one
target. The engine owns the walk (path segments, the property graph,
variable allocation, call assembly); a profile only answers small,
local questions:

* **Naming** -- :meth:`~LanguageProfile.case_segment`,
  :meth:`~LanguageProfile.case_property`,
  :meth:`~LanguageProfile.case_variable`,
  :meth:`~LanguageProfile.type_name`, the reserved word table and
  :meth:`~LanguageProfile.escape_reserved`.
* **Leaf literals** -- one formatter per leaf node kind.
* **Templates** -- path accessors, query/header configuration and the
  final call statement.
* **Imports** -- module paths for models, request bodies and request
  builders, consumed by :class:`~snipgen.imports.ImportResolver`.

A concrete profile derives from one of three bases, which fix how the
request body is written:

* :class:`InitializerProfile` -- one nested expression (C# object
  initializers, Python constructor keywords, TypeScript object literals).
* :class:`SetterProfile` -- a variable per object, assigned through
  setters (Java, Go, PHP).
* :class:`CommandProfile` -- a command line whose body is passed as an
  option (the Graph CLI).

Profiles are stateless and shared between threads; everything that varies
per snippet is passed in.

Subclassing example::

    class RubyProfile(InitializerProfile):
        language_id = "ruby"

        def case_segment(self, name: str) -> str:
            return snake(name)
        ...
"""

from __future__ import annotations

import base64
import json
from abc import ABC, abstractmethod
from typing import ClassVar, Literal, Optional, Sequence

from snipgen.ir.nodes import (
    ArrayNode,
    BinaryNode,
    BodyGraph,
    DateTimeNode,
    EnumNode,
    ItemType,
    NumberNode,
    ObjectNode,
    PropertyNode,
    TypeRef,
    walk,
)
from snipgen.models import (
    ActionSegment,
    BoundParameter,
    FunctionSegment,
    HTTPMethod,
    IndexedCollectionSegment,
    LiteralSegment,
    PathParameterSegment,
    PathSegment,
    QueryOption,
    ReferenceSegment,
    ResolvedRequest,
    SchemaKind,
)
from snipgen.naming import alternate_key_accessor, camel, pascal, singularize

BodyStyle = Literal["initializer", "setter", "command"]

ME_SEGMENT = "me"
"""The signed-in user alias; SDKs place its builders under ``users/item``."""

ROOT_NAMESPACE = "microsoft.graph"
"""Schema namespace that maps onto the SDK's root model package."""


class LanguageProfile(ABC):
    """Base class of every target language.

    Class attributes describe the language; methods render fragments.
    Methods without a default are abstract because there is no sensible
    cross-language answer for them.
    """

    language_id: ClassVar[str]
    aliases: ClassVar[tuple[str, ...]] = ()
    display_name: ClassVar[str] = ""
    syntax_lexer: ClassVar[str] = "text"
    """Pygments lexer name used when the CLI highlights a snippet."""

    reserved_words: ClassVar[frozenset[str]] = frozenset()
    reserved_locals: ClassVar[frozenset[str]] = frozenset()
    """Names the call and configuration statements use; body variables avoid them."""
    body_style: ClassVar[BodyStyle]
    is_async: ClassVar[bool] = True
    emits_imports: ClassVar[bool] = True
    indent_unit: ClassVar[str] = "\t"
    statement_end: ClassVar[str] = ";"
    client_var: ClassVar[str] = "graphClient"
    body_var: ClassVar[str] = "requestBody"
    flags_joiner: ClassVar[str] = " | "
    comment_prefix: ClassVar[str] = "//"

    # ------------------------------------------------------------------ #
    # Naming
    # ------------------------------------------------------------------ #

    @abstractmethod
    def case_segment(self, name: str) -> str:
        """Casing of a path accessor (``messages`` -> ``Messages``)."""

    @abstractmethod
    def case_property(self, name: str) -> str:
        """Casing of a model property (``displayName`` -> ``DisplayName``)."""

    def case_variable(self, name: str) -> str:
        return camel(name)

    def escape_reserved(self, name: str) -> str:
        """Make *name* safe to use as an identifier."""
        if name in self.reserved_words:
            return f"{name}_"
        return name

    def variable(self, name: str) -> str:
        """How a local variable is referenced (PHP prefixes ``$``)."""
        return name

    def type_name(self, type_ref: TypeRef) -> str:
        """Class name of a model type."""
        return pascal(type_ref.short_name)

    def pad(self, depth: int) -> str:
        return self.indent_unit * depth

    # ------------------------------------------------------------------ #
    # Leaf literals
    # ------------------------------------------------------------------ #

    def string_literal(self, value: str) -> str:
        return json.dumps(value, ensure_ascii=False)

    def number_literal(self, node: NumberNode) -> str:
        return plain_number(node)

    def boolean_literal(self, value: bool) -> str:
        return "true" if value else "false"

    def null_literal(self) -> str:
        return "null"

    def guid_literal(self, value: str) -> str:
        return self.string_literal(value)

    @abstractmethod
    def datetime_literal(self, node: DateTimeNode) -> str:
        ...

    @abstractmethod
    def binary_literal(self, node: BinaryNode) -> str:
        ...

    def enum_member(self, type_ref: TypeRef, member: str) -> str:
        return f"{self.type_name(type_ref)}.{pascal(member)}"

    def enum_literal(self, node: EnumNode) -> str:
        """Single member, or flag members joined with the language's OR operator."""
        return self.flags_joiner.join(self.enum_member(node.type_ref, m) for m in node.members)

    # ------------------------------------------------------------------ #
    # Path templates
    # ------------------------------------------------------------------ #

    member_access: ClassVar[str] = "."
    accessor_parens: ClassVar[bool] = False
    """True where builders are reached through methods (``.messages()``)."""

    def accessor(self, name: str) -> str:
        """Navigate to a child builder (``.Messages``, ``.messages()``)."""
        suffix = "()" if self.accessor_parens else ""
        return f"{self.member_access}{self.escape_reserved(self.case_segment(name))}{suffix}"

    def call(self, name: str, args: Sequence[str]) -> str:
        """A builder method taking arguments (``.byMessageId("x")``)."""
        joined = ", ".join(args)
        return f"{self.member_access}{self.escape_reserved(self.case_segment(name))}({joined})"

    @abstractmethod
    def indexer(self, key_param: str) -> str:
        """Keyed access into the preceding collection."""

    def placeholder_key(self, key_param: str) -> str:
        return self.string_literal("{" + key_param + "}")

    def alternate_key(self, collection: str, key_name: str, key_value: Optional[str]) -> str:
        value = key_value if key_value is not None else "{" + key_name + "}"
        return self.call(alternate_key_accessor(collection, key_name), [self.string_literal(value)])

    def invocation(self, name: str, params: Sequence[BoundParameter]) -> str:
        """Bound action or function; parameters are already in declared order."""
        if not params:
            return self.accessor(name)
        method = name + "".join("With" + pascal(p.name) for p in params)
        return self.call(method, [self.parameter_literal(p) for p in params])

    def parameter_literal(self, param: BoundParameter) -> str:
        if param.placeholder:
            return self.string_literal(param.value)
        if param.kind == SchemaKind.INTEGER and param.value.lstrip("-").isdigit():
            return param.value
        if param.kind == SchemaKind.BOOLEAN and param.value.lower() in ("true", "false"):
            return self.boolean_literal(param.value.lower() == "true")
        return self.string_literal(param.value)

    def reference(self) -> str:
        return self.accessor("ref")

    def type_cast(self, type_name: str) -> str:
        return self.accessor("graph" + pascal(type_name.rsplit(".", 1)[-1]))

    # ------------------------------------------------------------------ #
    # Request configuration and the call
    # ------------------------------------------------------------------ #

    @abstractmethod
    def verb(self, method: HTTPMethod) -> str:
        ...

    def query_property(self, option: QueryOption) -> str:
        return self.case_property(option.name)

    def query_value(self, option: QueryOption) -> str:
        value = option.value
        if isinstance(value, tuple):
            return self.string_array(value)
        if isinstance(value, bool):
            return self.boolean_literal(value)
        if isinstance(value, (int, float)):
            return str(value)
        return self.string_literal(value)

    def string_array(self, values: Sequence[str]) -> str:
        return "[" + ",".join(self.string_literal(v) for v in values) + "]"

    @abstractmethod
    def configuration(self, resolved: ResolvedRequest) -> tuple[list[str], Optional[str]]:
        """Statements declared before the call, and the configuration argument.

        Only called when the request has query options or headers.
        """

    def call_arguments(self, body: Optional[str], config: Optional[str]) -> list[str]:
        return [arg for arg in (body, config) if arg]

    @abstractmethod
    def call_statement(
        self, chain: str, verb: str, args: Sequence[str], resolved: ResolvedRequest
    ) -> str:
        """The statement issuing the request, assigning the result when one is declared."""

    def prologue(self) -> list[str]:
        return [f"{self.comment_prefix} Code snippets are only available for the latest version. "
                f"See the client library documentation for creating {self.client_var}."]

    # ------------------------------------------------------------------ #
    # Imports
    # ------------------------------------------------------------------ #

    def root_imports(self, resolved: ResolvedRequest) -> list[str]:
        return []

    def configuration_imports(self, resolved: ResolvedRequest) -> list[str]:
        return []

    def model_import(self, type_ref: TypeRef, resolved: ResolvedRequest) -> Optional[str]:
        """Import statement for a model, enum or synthesized request body type."""
        return None

    def referenced_types(self, graph: BodyGraph) -> list[TypeRef]:
        """Model types the rendered body names, in first-use order."""
        refs: list[TypeRef] = []
        for node in walk(graph.root):
            match node:
                case ObjectNode(declared_type=type_ref) | EnumNode(type_ref=type_ref):
                    refs.append(type_ref)
                case ArrayNode(item_type=ItemType(type_ref=TypeRef() as type_ref)):
                    refs.append(type_ref)
        return refs

    def literal_imports(self, node: PropertyNode) -> list[str]:
        """Imports a leaf literal's rendering depends on (temporal, guid, base64)."""
        return []

    def format_imports(self, imports: Sequence[str]) -> list[str]:
        """Final layout of the ordered, de-duplicated import list."""
        return list(imports)


class SdkProfile(LanguageProfile):
    """A language whose snippets build the request body as SDK model objects."""

    @abstractmethod
    def declare_stream(self, var: str, node: BinaryNode) -> list[str]:
        """Declare a request stream holding a raw binary body."""


class InitializerProfile(SdkProfile):
    """Bodies are one nested expression (object initializers, constructor keywords)."""

    body_style = "initializer"
    member_separator: ClassVar[str] = ","

    @abstractmethod
    def object_open(self, type_ref: TypeRef, derived: bool) -> list[str]:
        """Opening lines of an object expression; the first continues the current line."""

    @abstractmethod
    def object_close(self, type_ref: TypeRef, derived: bool) -> str:
        ...

    @abstractmethod
    def field_prefix(self, json_name: str) -> str:
        ...

    @abstractmethod
    def array_open(self, item_type: Optional[ItemType]) -> list[str]:
        ...

    @abstractmethod
    def array_close(self, item_type: Optional[ItemType]) -> str:
        ...

    def empty_array(self, item_type: Optional[ItemType]) -> str:
        return "[]"

    @abstractmethod
    def map_open(self) -> list[str]:
        ...

    @abstractmethod
    def map_close(self) -> str:
        ...

    @abstractmethod
    def map_entry_prefix(self, key: str) -> str:
        ...

    @abstractmethod
    def root_prefix(self, var: str, root: PropertyNode) -> str:
        """Start of the statement declaring the body variable."""


class SetterProfile(SdkProfile):
    """Every object, collection and map is a local variable filled through setters."""

    body_style = "setter"

    def root_variable(self, root: PropertyNode, type_name: Optional[str]) -> str:
        return self.body_var

    @abstractmethod
    def declare_object(self, var: str, type_ref: TypeRef, resolved: ResolvedRequest) -> list[str]:
        ...

    @abstractmethod
    def assign(self, owner: str, json_name: str, value: str) -> list[str]:
        ...

    def setter_value(
        self, names: VariableNames, json_name: str, node: PropertyNode, expr: str
    ) -> tuple[list[str], str]:
        """Statements needed before passing a leaf to a setter, and the argument."""
        return [], expr

    @abstractmethod
    def declare_collection(
        self, var: str, item_type: Optional[ItemType], elements: Sequence[str]
    ) -> list[str]:
        ...

    @abstractmethod
    def declare_map(self, var: str, entries: Sequence[tuple[str, str]]) -> list[str]:
        ...

    def collection_var(self, json_name: str) -> str:
        return camel(json_name)


class CommandProfile(LanguageProfile):
    """A command line tool: the snippet is one command and the body is one of its options."""

    body_style = "command"
    emits_imports = False
    is_async = False
    statement_end = ""

    @abstractmethod
    def body_argument(self, body: BodyGraph, resolved: ResolvedRequest) -> Optional[str]:
        """The option carrying the request body, or ``None`` when it has no content."""

    def prologue(self) -> list[str]:
        return []


# ---------------------------------------------------------------------- #
# Shared helpers
# ---------------------------------------------------------------------- #


def base64_text(node: BinaryNode) -> str:
    """Base64 text of a binary node, encoding raw request bytes when needed."""
    if node.value is not None:
        return node.value
    return base64.b64encode(node.data or b"").decode("ascii")


def plain_number(node: NumberNode) -> str:
    """Number text without a type suffix; float values always carry a fraction or exponent."""
    value = node.value
    if node.numeric == "float":
        return repr(float(value))
    return str(int(value))


def package_parts(segments: Sequence[PathSegment]) -> list[str]:
    """Request builder package names for *segments*, in camelCase.

    ``me`` expands to ``users/item``, keyed access becomes ``item``, type
    casts become ``graph<Type>``.

    >>> from snipgen.models import LiteralSegment, IndexedCollectionSegment
    >>> package_parts([LiteralSegment(name="me"), LiteralSegment(name="messages")])
    ['users', 'item', 'messages']
    """
    parts: list[str] = []
    for segment in segments:
        match segment:
            case LiteralSegment(name=name):
                parts.extend(["users", "item"] if name == ME_SEGMENT else [camel(name)])
            case IndexedCollectionSegment(alternate_key=True, collection_name=name, key_param_name=key):
                parts.append(camel(name) + "With" + pascal(key))
            case IndexedCollectionSegment() | PathParameterSegment():
                parts.append("item")
            case ActionSegment(name=name) | FunctionSegment(name=name):
                parts.append(camel(name))
            case ReferenceSegment():
                parts.append("ref")
        if segment.type_cast:
            parts.append("graph" + pascal(segment.type_cast.rsplit(".", 1)[-1]))
    return parts


def owner_segments(type_ref: TypeRef, segments: Sequence[PathSegment]) -> tuple[PathSegment, ...]:
    """The path whose request builder package declares the synthesized *type_ref*.

    A body borrowed from a sibling action lives in that action's package, so
    the last segment is renamed to it.

    >>> from snipgen.models import ActionSegment, LiteralSegment
    >>> path = (LiteralSegment(name="me"), ActionSegment(name="assignLicenses"))
    >>> ref = TypeRef(name="AssignLicensePostRequestBody", synthesized=True, action="assignLicense")
    >>> package_parts(owner_segments(ref, path))
    ['users', 'item', 'assignLicense']
    """
    if type_ref.action is None or not segments:
        return tuple(segments)
    return (*segments[:-1], segments[-1].model_copy(update={"name": type_ref.action}))


def builder_name(segments: Sequence[PathSegment]) -> str:
    """Class name of the request builder the last segment addresses.

    >>> from snipgen.models import LiteralSegment, IndexedCollectionSegment
    >>> builder_name([LiteralSegment(name="me"), LiteralSegment(name="messages")])
    'MessagesRequestBuilder'
    >>> builder_name([LiteralSegment(name="messages"),
    ...               IndexedCollectionSegment(collection_name="messages", key_param_name="message-id")])
    'MessageItemRequestBuilder'
    """
    if not segments:
        return "RequestBuilder"
    last = segments[-1]
    if last.type_cast:
        base = "Graph" + pascal(last.type_cast.rsplit(".", 1)[-1])
    else:
        match last:
            case LiteralSegment(name=name):
                base = "UserItem" if name == ME_SEGMENT else pascal(name)
            case IndexedCollectionSegment(alternate_key=True, collection_name=name, key_param_name=key):
                base = pascal(name) + "With" + pascal(key)
            case IndexedCollectionSegment(collection_name=name):
                base = pascal(singularize(name)) + "Item"
            case PathParameterSegment(name=name):
                base = pascal(name)
            case ActionSegment(name=name) | FunctionSegment(name=name):
                base = pascal(name)
            case ReferenceSegment():
                base = "Ref"
    return base + "RequestBuilder"


def model_namespace_parts(type_ref: TypeRef) -> list[str]:
    """Sub-namespace of a model below the root namespace.

    >>> model_namespace_parts(TypeRef.of("microsoft.graph.callRecords.session"))
    ['callRecords']
    >>> model_namespace_parts(TypeRef.of("microsoft.graph.message"))
    []
    """
    namespace = type_ref.namespace
    if not namespace or namespace == ROOT_NAMESPACE:
        return []
    if namespace.startswith(ROOT_NAMESPACE + "."):
        namespace = namespace[len(ROOT_NAMESPACE) + 1:]
    return [part for part in namespace.split(".") if part]


def response_type(resolved: ResolvedRequest) -> Optional[TypeRef]:
    """The named response model, when the operation declares one."""
    schema = resolved.response_schema
    if schema is None:
        return None
    if schema.type_name and schema.kind in (SchemaKind.OBJECT, SchemaKind.ENUM):
        return TypeRef.of(schema.type_name)
    return None


class VariableNames:
    """Allocates unique local variable names within one snippet.

    Hints are cased with the profile's variable casing and escaped if
    reserved; a clash appends a counter (``recipient``, ``recipient1``).
    """

    def __init__(self, profile: LanguageProfile) -> None:
        self._profile = profile
        self._taken: set[str] = set(profile.reserved_locals)

    def allocate(self, hint: str) -> str:
        base = self._profile.escape_reserved(self._profile.case_variable(hint) or "value")
        name = base
        counter = 1
        while name in self._taken:
            name = f"{base}{counter}"
            counter += 1
        self._taken.add(name)
        return name

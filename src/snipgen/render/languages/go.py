"""Go snippets in the style of the Go SDK.

Go has no object initializers for generated models, so bodies use setters.
Scalar setters take pointers: every scalar is first bound to a local
variable and passed by address::

    requestBody := graphmodels.NewMessage()
    subject := "Meet for lunch?"
    requestBody.SetSubject(&subject)

Request builders live in per-resource packages (``graphusers``) and are
named after their position below the package root
(``ItemMessagesRequestBuilder`` for ``/users/{id}/messages``).
"""

from __future__ import annotations

from typing import Optional, Sequence

from snipgen.ir.nodes import (
    BinaryNode,
    DateTimeNode,
    GuidNode,
    ItemType,
    NullNode,
    NumberNode,
    PropertyNode,
    TypeRef,
)
from snipgen.models import (
    ActionSegment,
    FunctionSegment,
    HTTPMethod,
    IndexedCollectionSegment,
    LiteralSegment,
    PathParameterSegment,
    PathSegment,
    QueryOption,
    ReferenceSegment,
    ResolvedRequest,
)
from snipgen.naming import pascal
from snipgen.render.profile import (
    ME_SEGMENT,
    SetterProfile,
    VariableNames,
    base64_text,
    model_namespace_parts,
    owner_segments,
    plain_number,
)

_KEYWORDS = frozenset(
    """
    break case chan const continue default defer else fallthrough for func go goto
    if import interface map package range return select struct switch type var
    """.split()
)

_MODULE = "github.com/microsoftgraph/msgraph-sdk-go"

_ITEM_TYPES = {
    "string": "string",
    "boolean": "bool",
    "guid": "uuid.UUID",
    "datetime": "time.Time",
    "binary": "[]byte",
    "map": "interface{}",
}


def nested_builder_parts(segments: Sequence[PathSegment]) -> tuple[str, list[str]]:
    """The package of the first segment and the builder name parts below it.

    >>> nested_builder_parts([LiteralSegment(name="me"), LiteralSegment(name="messages")])
    ('users', ['Item', 'Messages'])
    """
    if not segments:
        return "", []
    first, rest = segments[0], segments[1:]
    parts: list[str] = []
    if isinstance(first, LiteralSegment) and first.name == ME_SEGMENT:
        package = "users"
        parts.append("Item")
    elif isinstance(first, IndexedCollectionSegment):
        package = first.collection_name.lower()
        parts.append(pascal(first.collection_name) + "With" + pascal(first.key_param_name))
    elif isinstance(first, (LiteralSegment, ActionSegment, FunctionSegment, PathParameterSegment)):
        package = first.name.lower()
    else:
        package = "ref"
    for segment in rest:
        match segment:
            case LiteralSegment(name=name):
                parts.append(pascal(name))
            case IndexedCollectionSegment(alternate_key=True, collection_name=name, key_param_name=key):
                parts.append(pascal(name) + "With" + pascal(key))
            case IndexedCollectionSegment() | PathParameterSegment():
                parts.append("Item")
            case ActionSegment(name=name) | FunctionSegment(name=name):
                parts.append(pascal(name))
            case ReferenceSegment():
                parts.append("Ref")
        if segment.type_cast:
            parts.append("Graph" + pascal(segment.type_cast.rsplit(".", 1)[-1]))
    if not parts:
        parts.append(pascal(package))
    return package, parts


class GoProfile(SetterProfile):
    language_id = "go"
    display_name = "Go"
    syntax_lexer = "go"
    reserved_words = _KEYWORDS
    reserved_locals = frozenset(
        {"graphClient", "result", "err", "headers", "requestParameters", "configuration"}
    )
    is_async = False
    accessor_parens = True
    statement_end = ""
    flags_joiner = " | "

    def case_segment(self, name: str) -> str:
        return pascal(name)

    def case_property(self, name: str) -> str:
        return pascal(name)

    def model_package(self, type_ref: TypeRef) -> str:
        return "graphmodels" + "".join(p.lower() for p in model_namespace_parts(type_ref))

    # --- literals ---

    def number_literal(self, node: NumberNode) -> str:
        prefix = "float" if node.numeric == "float" else "int"
        return f"{prefix}{node.width}({plain_number(node)})"

    def null_literal(self) -> str:
        return "nil"

    def guid_literal(self, value: str) -> str:
        return f"uuid.MustParse({self.string_literal(value)})"

    def datetime_literal(self, node: DateTimeNode) -> str:
        return self.string_literal(node.value)

    def binary_literal(self, node: BinaryNode) -> str:
        return f"[]byte({self.string_literal(base64_text(node))})"

    def enum_member(self, type_ref: TypeRef, member: str) -> str:
        return f"{self.model_package(type_ref)}.{member.upper()}_{type_ref.short_name.upper()}"

    def indexer(self, key_param: str) -> str:
        return self.call("By" + pascal(key_param), [self.string_literal(key_param)])

    # --- body ---

    def item_type(self, item_type: Optional[ItemType]) -> str:
        if item_type is None:
            return "interface{}"
        if item_type.type_ref is not None:
            if item_type.kind == "enum":
                return f"{self.model_package(item_type.type_ref)}.{self.type_name(item_type.type_ref)}"
            return f"{self.model_package(item_type.type_ref)}.{self.type_name(item_type.type_ref)}able"
        if item_type.kind == "number":
            prefix = "float" if item_type.numeric == "float" else "int"
            return f"{prefix}{item_type.width}"
        return _ITEM_TYPES.get(item_type.kind, "interface{}")

    def declare_object(self, var: str, type_ref: TypeRef, resolved: ResolvedRequest) -> list[str]:
        name = self.type_name(type_ref)
        if type_ref.synthesized:
            package, parts = nested_builder_parts(owner_segments(type_ref, resolved.segments))
            return [f"{var} := graph{package}.New{''.join(parts[:-1])}{name}()"]
        return [f"{var} := {self.model_package(type_ref)}.New{name}()"]

    def assign(self, owner: str, json_name: str, value: str) -> list[str]:
        return [f"{owner}.Set{pascal(json_name)}({value})"]

    def setter_value(
        self, names: VariableNames, json_name: str, node: PropertyNode, expr: str
    ) -> tuple[list[str], str]:
        if isinstance(node, (NullNode, BinaryNode)):
            return [], expr
        var = names.allocate(json_name)
        if isinstance(node, DateTimeNode) and node.temporal == "date-time":
            return [f"{var} , err := time.Parse(time.RFC3339 , {expr})"], f"&{var}"
        return [f"{var} := {expr}"], f"&{var}"

    def declare_collection(
        self, var: str, item_type: Optional[ItemType], elements: Sequence[str]
    ) -> list[str]:
        lines = [f"{var} := []{self.item_type(item_type)} {{"]
        lines.extend(f"{self.indent_unit}{element}," for element in elements)
        lines.append("}")
        return lines

    def declare_map(self, var: str, entries: Sequence[tuple[str, str]]) -> list[str]:
        lines = [f"{var} := map[string]interface{{}}{{"]
        lines.extend(
            f"{self.indent_unit}{self.string_literal(key)} : {value}," for key, value in entries
        )
        lines.append("}")
        return lines

    def declare_stream(self, var: str, node: BinaryNode) -> list[str]:
        data = self.string_literal(base64_text(node))
        return [f"{var}, err := base64.StdEncoding.DecodeString({data})"]

    # --- call ---

    def verb(self, method: HTTPMethod) -> str:
        return pascal(method.value)

    def string_array(self, values: Sequence[str]) -> str:
        return "[] string {" + ",".join(self.string_literal(v) for v in values) + "}"

    def query_value(self, option: QueryOption) -> str:
        value = super().query_value(option)
        if isinstance(option.value, bool) or not isinstance(option.value, (int, float)):
            return value
        return f"int32({value})" if isinstance(option.value, int) else f"float64({value})"

    def configuration(self, resolved: ResolvedRequest) -> tuple[list[str], Optional[str]]:
        package, parts = nested_builder_parts(resolved.segments)
        alias = "graph" + package
        builder = "".join(parts) + "RequestBuilder" + pascal(resolved.method.value)
        lines: list[str] = []
        fields: list[str] = []

        if resolved.headers:
            lines.append("headers := abstractions.NewRequestHeaders()")
            for header in resolved.headers:
                lines.append(
                    f"headers.Add({self.string_literal(header.name)}, "
                    f"{self.string_literal(header.value)})"
                )
            lines.append("")
            fields.append("Headers: headers,")

        if resolved.query_options:
            params: list[str] = []
            for option in resolved.query_options:
                value = self.query_value(option)
                name = self.query_property(option)
                if isinstance(option.value, tuple):
                    params.append(f"{name}: {value},")
                    continue
                var = "request" + name
                lines.append(f"{var} := {value}")
                params.append(f"{name}: &{var},")
            if lines and lines[-1]:
                lines.append("")
            lines.append(f"requestParameters := &{alias}.{builder}QueryParameters{{")
            lines.extend(self.indent_unit + param for param in params)
            lines.append("}")
            fields.append("QueryParameters: requestParameters,")

        lines.append(f"configuration := &{alias}.{builder}RequestConfiguration{{")
        lines.extend(self.indent_unit + field for field in fields)
        lines.append("}")
        return lines, "configuration"

    def call_arguments(self, body: Optional[str], config: Optional[str]) -> list[str]:
        args = ["context.Background()"]
        if body:
            args.append(body)
        args.append(config or "nil")
        return args

    def call_statement(
        self, chain: str, verb: str, args: Sequence[str], resolved: ResolvedRequest
    ) -> str:
        assign = "result, err := " if resolved.response_schema is not None else ""
        return f"{assign}{self.client_var}{chain}.{verb}({', '.join(args)})"

    # --- imports ---

    def root_imports(self, resolved: ResolvedRequest) -> list[str]:
        return ['"context"', f'msgraphsdk "{_MODULE}"']

    def configuration_imports(self, resolved: ResolvedRequest) -> list[str]:
        package, _ = nested_builder_parts(resolved.segments)
        imports = [f'graph{package} "{_MODULE}/{package}"']
        if resolved.headers:
            imports.append('abstractions "github.com/microsoft/kiota-abstractions-go"')
        return imports

    def model_import(self, type_ref: TypeRef, resolved: ResolvedRequest) -> Optional[str]:
        if type_ref.synthesized:
            package, _ = nested_builder_parts(owner_segments(type_ref, resolved.segments))
            return f'graph{package} "{_MODULE}/{package}"'
        path = "/".join(["models", *(p.lower() for p in model_namespace_parts(type_ref))])
        return f'{self.model_package(type_ref)} "{_MODULE}/{path}"'

    def literal_imports(self, node: PropertyNode) -> list[str]:
        if isinstance(node, DateTimeNode) and node.temporal == "date-time":
            return ['"time"']
        if isinstance(node, GuidNode):
            return ['"github.com/google/uuid"']
        if isinstance(node, BinaryNode) and node.data is not None:
            return ['"encoding/base64"']
        return []

    def format_imports(self, imports: Sequence[str]) -> list[str]:
        if not imports:
            return []
        return ["import (", *(self.indent_unit + line for line in imports), ")"]

"""Python snippets in the style of the asynchronous Python SDK.

Bodies are nested constructor calls with keyword arguments; query options
become a ``...QueryParameters`` object wrapped in a ``RequestConfiguration``.
Python keywords used as property names get a trailing underscore
(``from_``), which is how the SDK's generated models spell them.
"""

from __future__ import annotations

import keyword
from typing import Optional, Sequence

from snipgen.ir.nodes import (
    BinaryNode,
    DateTimeNode,
    GuidNode,
    ItemType,
    PropertyNode,
    TypeRef,
)
from snipgen.models import HTTPMethod, QueryOption, ResolvedRequest
from snipgen.naming import pascal, snake
from snipgen.render.profile import (
    InitializerProfile,
    base64_text,
    builder_name,
    model_namespace_parts,
    owner_segments,
    package_parts,
)

_TEMPORAL = {
    "date-time": ("datetime", "datetime.fromisoformat({})"),
    "date": ("date", "date.fromisoformat({})"),
    "time": ("time", "time.fromisoformat({})"),
}

_PACKAGE = "msgraph.generated"


class PythonProfile(InitializerProfile):
    language_id = "python"
    aliases = ("py",)
    display_name = "Python"
    syntax_lexer = "python"
    reserved_words = frozenset(keyword.kwlist)
    reserved_locals = frozenset(
        {"graph_client", "result", "query_params", "request_configuration"}
    )
    statement_end = ""
    client_var = "graph_client"
    comment_prefix = "#"

    def case_segment(self, name: str) -> str:
        return snake(name)

    def case_property(self, name: str) -> str:
        return self.escape_reserved(snake(name))

    def case_variable(self, name: str) -> str:
        return snake(name)

    def boolean_literal(self, value: bool) -> str:
        return "True" if value else "False"

    def null_literal(self) -> str:
        return "None"

    def guid_literal(self, value: str) -> str:
        return f"UUID({self.string_literal(value)})"

    def datetime_literal(self, node: DateTimeNode) -> str:
        entry = _TEMPORAL.get(node.temporal)
        if entry is None:
            return self.string_literal(node.value)
        return entry[1].format(self.string_literal(node.value))

    def binary_literal(self, node: BinaryNode) -> str:
        return f"base64.urlsafe_b64decode({self.string_literal(base64_text(node))})"

    def indexer(self, key_param: str) -> str:
        return self.call("by_" + snake(key_param), [self.string_literal(key_param)])

    # --- body ---

    def object_open(self, type_ref: TypeRef, derived: bool) -> list[str]:
        return [f"{self.type_name(type_ref)}("]

    def object_close(self, type_ref: TypeRef, derived: bool) -> str:
        return ")"

    def field_prefix(self, json_name: str) -> str:
        return f"{self.case_property(json_name)} = "

    def array_open(self, item_type: Optional[ItemType]) -> list[str]:
        return ["["]

    def array_close(self, item_type: Optional[ItemType]) -> str:
        return "]"

    def map_open(self) -> list[str]:
        return ["{"]

    def map_close(self) -> str:
        return "}"

    def map_entry_prefix(self, key: str) -> str:
        return f"{self.string_literal(key)} : "

    def root_prefix(self, var: str, root: PropertyNode) -> str:
        return f"{var} = "

    def declare_stream(self, var: str, node: BinaryNode) -> list[str]:
        return [f"{var} = base64.b64decode({self.string_literal(base64_text(node))})"]

    # --- call ---

    def verb(self, method: HTTPMethod) -> str:
        return method.value

    def query_property(self, option: QueryOption) -> str:
        return self.escape_reserved(snake(option.name))

    def configuration(self, resolved: ResolvedRequest) -> tuple[list[str], Optional[str]]:
        lines: list[str] = []
        config_args: list[str] = []
        if resolved.query_options:
            builder = builder_name(resolved.segments)
            query_class = f"{builder}.{builder}{pascal(resolved.method.value)}QueryParameters"
            lines.append(f"query_params = {query_class}(")
            for option in resolved.query_options:
                lines.append(
                    f"{self.indent_unit}{self.query_property(option)} = {self.query_value(option)},"
                )
            lines.append(")")
            lines.append("")
            config_args.append("query_parameters = query_params")

        if config_args:
            lines.append("request_configuration = RequestConfiguration(")
            lines.extend(f"{self.indent_unit}{arg}," for arg in config_args)
            lines.append(")")
        else:
            lines.append("request_configuration = RequestConfiguration()")
        for header in resolved.headers:
            lines.append(
                f"request_configuration.headers.add("
                f"{self.string_literal(header.name)}, {self.string_literal(header.value)})"
            )
        return lines, "request_configuration = request_configuration"

    def call_statement(
        self, chain: str, verb: str, args: Sequence[str], resolved: ResolvedRequest
    ) -> str:
        assign = "result = " if resolved.response_schema is not None else ""
        return f"{assign}await {self.client_var}{chain}.{verb}({', '.join(args)})"

    # --- imports ---

    def root_imports(self, resolved: ResolvedRequest) -> list[str]:
        return ["from msgraph import GraphServiceClient"]

    def configuration_imports(self, resolved: ResolvedRequest) -> list[str]:
        imports: list[str] = []
        if resolved.query_options:
            builder = builder_name(resolved.segments)
            module = ".".join([_PACKAGE, *(snake(p) for p in package_parts(resolved.segments))])
            imports.append(f"from {module}.{snake(builder)} import {builder}")
        imports.append("from kiota_abstractions.base_request_configuration import RequestConfiguration")
        return imports

    def model_import(self, type_ref: TypeRef, resolved: ResolvedRequest) -> Optional[str]:
        name = self.type_name(type_ref)
        if type_ref.synthesized:
            parts = [snake(p) for p in package_parts(owner_segments(type_ref, resolved.segments))]
        else:
            parts = ["models", *(snake(p) for p in model_namespace_parts(type_ref))]
        module = ".".join([_PACKAGE, *parts, snake(name)])
        return f"from {module} import {name}"

    def literal_imports(self, node: PropertyNode) -> list[str]:
        if isinstance(node, DateTimeNode) and node.temporal in _TEMPORAL:
            name = _TEMPORAL[node.temporal][0]
            return [f"from datetime import {name}"]
        if isinstance(node, GuidNode):
            return ["from uuid import UUID"]
        if isinstance(node, BinaryNode):
            return ["import base64"]
        return []

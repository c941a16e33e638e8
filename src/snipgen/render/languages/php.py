"""PHP snippets in the style of the PHP SDK.

Objects are built with setters on ``$``-prefixed variables, collections
and free-form data are array literals, and enums are constructed from
their wire value (``new BodyType('text')``). Calls return promises, so the
call statement ends with ``->wait()``.
"""

from __future__ import annotations

from typing import Optional, Sequence

from snipgen.ir.nodes import BinaryNode, DateTimeNode, EnumNode, ItemType, PropertyNode, TypeRef
from snipgen.models import HTTPMethod, ResolvedRequest
from snipgen.naming import camel, key_accessor, pascal
from snipgen.render.profile import (
    SetterProfile,
    base64_text,
    builder_name,
    model_namespace_parts,
    owner_segments,
    package_parts,
)

_TEMPORAL = {
    "date-time": "new \\DateTime({})",
    "date": "new Date({})",
    "time": "new Time({})",
    "duration": "new \\DateInterval({})",
}

_ROOT = "Microsoft\\Graph"
_GENERATED = _ROOT + "\\Generated"


class PhpProfile(SetterProfile):
    language_id = "php"
    display_name = "PHP"
    syntax_lexer = "php"
    reserved_locals = frozenset(
        {"graphServiceClient", "result", "requestConfiguration", "headers", "queryParameters"}
    )
    is_async = False
    member_access = "->"
    accessor_parens = True
    client_var = "graphServiceClient"

    def case_segment(self, name: str) -> str:
        return camel(name)

    def case_property(self, name: str) -> str:
        return camel(name)

    def variable(self, name: str) -> str:
        return f"${name}"

    def string_literal(self, value: str) -> str:
        escaped = value.replace("\\", "\\\\").replace("'", "\\'")
        return f"'{escaped}'"

    def datetime_literal(self, node: DateTimeNode) -> str:
        template = _TEMPORAL.get(node.temporal, _TEMPORAL["date-time"])
        return template.format(self.string_literal(node.value))

    def binary_literal(self, node: BinaryNode) -> str:
        data = self.string_literal(base64_text(node))
        return f"\\GuzzleHttp\\Psr7\\Utils::streamFor(base64_decode({data}))"

    def enum_literal(self, node: EnumNode) -> str:
        value = self.string_literal(",".join(node.members))
        return f"new {self.type_name(node.type_ref)}({value})"

    def indexer(self, key_param: str) -> str:
        return self.call(key_accessor(key_param), [self.placeholder_key(key_param)])

    # --- body ---

    def declare_object(self, var: str, type_ref: TypeRef, resolved: ResolvedRequest) -> list[str]:
        return [f"{self.variable(var)} = new {self.type_name(type_ref)}();"]

    def assign(self, owner: str, json_name: str, value: str) -> list[str]:
        return [f"{self.variable(owner)}->set{pascal(json_name)}({value});"]

    def collection_var(self, json_name: str) -> str:
        return camel(json_name) + "Array"

    def declare_collection(
        self, var: str, item_type: Optional[ItemType], elements: Sequence[str]
    ) -> list[str]:
        if not elements:
            return [f"{self.variable(var)} = [];"]
        lines = [f"{self.variable(var)} = ["]
        lines.extend(f"{self.indent_unit}{element}," for element in elements)
        lines.append("];")
        return lines

    def declare_map(self, var: str, entries: Sequence[tuple[str, str]]) -> list[str]:
        lines = [f"{self.variable(var)} = ["]
        lines.extend(
            f"{self.indent_unit}{self.string_literal(key)} => {value}," for key, value in entries
        )
        lines.append("];")
        return lines

    def declare_stream(self, var: str, node: BinaryNode) -> list[str]:
        return [f"{self.variable(var)} = {self.binary_literal(node)};"]

    # --- call ---

    def verb(self, method: HTTPMethod) -> str:
        return method.value

    def _configuration_class(self, resolved: ResolvedRequest) -> str:
        return builder_name(resolved.segments) + pascal(resolved.method.value) + "RequestConfiguration"

    def configuration(self, resolved: ResolvedRequest) -> tuple[list[str], Optional[str]]:
        config_class = self._configuration_class(resolved)
        lines = [f"$requestConfiguration = new {config_class}();"]
        if resolved.headers:
            lines.append("$headers = [")
            lines.extend(
                f"{self.indent_unit}{self.string_literal(h.name)} => {self.string_literal(h.value)},"
                for h in resolved.headers
            )
            lines.append("];")
            lines.append("$requestConfiguration->headers = $headers;")
        if resolved.query_options:
            lines.append("")
            lines.append(f"$queryParameters = {config_class}::createQueryParameters();")
            for option in resolved.query_options:
                lines.append(
                    f"$queryParameters->{self.query_property(option)} = {self.query_value(option)};"
                )
            lines.append("$requestConfiguration->queryParameters = $queryParameters;")
        return lines, "$requestConfiguration"

    def call_statement(
        self, chain: str, verb: str, args: Sequence[str], resolved: ResolvedRequest
    ) -> str:
        assign = "$result = " if resolved.response_schema is not None else ""
        call = f"{self.variable(self.client_var)}{chain}->{verb}({', '.join(args)})->wait();"
        return assign + call

    # --- imports ---

    def root_imports(self, resolved: ResolvedRequest) -> list[str]:
        return [f"use {_ROOT}\\GraphServiceClient;"]

    def configuration_imports(self, resolved: ResolvedRequest) -> list[str]:
        parts = [pascal(p) for p in package_parts(resolved.segments)]
        path = "\\".join([_GENERATED, *parts, self._configuration_class(resolved)])
        return [f"use {path};"]

    def model_import(self, type_ref: TypeRef, resolved: ResolvedRequest) -> Optional[str]:
        if type_ref.synthesized:
            segments = owner_segments(type_ref, resolved.segments)
            parts = [pascal(p) for p in package_parts(segments)]
        else:
            parts = ["Models", *(pascal(p) for p in model_namespace_parts(type_ref))]
        return "use " + "\\".join([_GENERATED, *parts, self.type_name(type_ref)]) + ";"

    def literal_imports(self, node: PropertyNode) -> list[str]:
        if isinstance(node, DateTimeNode) and node.temporal in ("date", "time"):
            name = "Date" if node.temporal == "date" else "Time"
            return [f"use Microsoft\\Kiota\\Abstractions\\Types\\{name};"]
        return []

"""C# snippets in the style of the .NET SDK.

Bodies are object initializers; query options and headers go in a
request-configuration lambda::

    var result = await graphClient.Me.Messages.GetAsync((requestConfiguration) =>
    {
        requestConfiguration.QueryParameters.Select = new string []{ "subject","body" };
    });
"""

from __future__ import annotations

from typing import Optional, Sequence

from snipgen.ir.nodes import BinaryNode, DateTimeNode, ItemType, NumberNode, PropertyNode, TypeRef
from snipgen.models import HTTPMethod, ResolvedRequest
from snipgen.naming import pascal
from snipgen.render.profile import (
    InitializerProfile,
    base64_text,
    model_namespace_parts,
    owner_segments,
    package_parts,
    plain_number,
)

_KEYWORDS = frozenset(
    """
    abstract as base bool break byte case catch char checked class const continue
    decimal default delegate do double else enum event explicit extern false finally
    fixed float for foreach goto if implicit in int interface internal is lock long
    namespace new null object operator out override params private protected public
    readonly ref return sbyte sealed short sizeof stackalloc static string struct
    switch this throw true try typeof uint ulong unchecked unsafe ushort using virtual
    void volatile while
    """.split()
)

_TEMPORAL = {
    "date-time": "DateTimeOffset.Parse({})",
    "date": "new Date(DateTime.Parse({}))",
    "time": "new Time(DateTime.Parse({}))",
    "duration": "TimeSpan.Parse({})",
}

_ITEM_TYPES = {
    "string": "string",
    "boolean": "bool?",
    "guid": "Guid?",
    "datetime": "DateTimeOffset?",
    "binary": "byte[]",
    "map": "object",
}


class CSharpProfile(InitializerProfile):
    language_id = "c#"
    aliases = ("csharp", "cs")
    display_name = "C#"
    syntax_lexer = "csharp"
    reserved_words = _KEYWORDS
    reserved_locals = frozenset({"graphClient", "result", "requestConfiguration"})

    def case_segment(self, name: str) -> str:
        return pascal(name)

    def case_property(self, name: str) -> str:
        return pascal(name)

    def escape_reserved(self, name: str) -> str:
        return f"@{name}" if name in self.reserved_words else name

    # --- literals ---

    def number_literal(self, node: NumberNode) -> str:
        text = plain_number(node)
        if node.numeric == "float":
            return text + ("f" if node.width == 32 else "d")
        return text + ("L" if node.width == 64 else "")

    def guid_literal(self, value: str) -> str:
        return f"Guid.Parse({self.string_literal(value)})"

    def datetime_literal(self, node: DateTimeNode) -> str:
        template = _TEMPORAL.get(node.temporal, _TEMPORAL["date-time"])
        return template.format(self.string_literal(node.value))

    def binary_literal(self, node: BinaryNode) -> str:
        return f"Convert.FromBase64String({self.string_literal(base64_text(node))})"

    # --- path ---

    def indexer(self, key_param: str) -> str:
        return f"[{self.placeholder_key(key_param)}]"

    # --- body ---

    def item_type(self, item_type: Optional[ItemType]) -> str:
        if item_type is None:
            return "object"
        if item_type.type_ref is not None:
            suffix = "?" if item_type.kind == "enum" else ""
            return self.type_name(item_type.type_ref) + suffix
        if item_type.kind == "number":
            if item_type.numeric == "float":
                return "float?" if item_type.width == 32 else "double?"
            return "long?" if item_type.width == 64 else "int?"
        return _ITEM_TYPES.get(item_type.kind, "object")

    def object_open(self, type_ref: TypeRef, derived: bool) -> list[str]:
        return [f"new {self.type_name(type_ref)}", "{"]

    def object_close(self, type_ref: TypeRef, derived: bool) -> str:
        return "}"

    def field_prefix(self, json_name: str) -> str:
        return f"{self.case_property(json_name)} = "

    def array_open(self, item_type: Optional[ItemType]) -> list[str]:
        return [f"new List<{self.item_type(item_type)}>", "{"]

    def array_close(self, item_type: Optional[ItemType]) -> str:
        return "}"

    def empty_array(self, item_type: Optional[ItemType]) -> str:
        return f"new List<{self.item_type(item_type)}>()"

    def map_open(self) -> list[str]:
        return ["new Dictionary<string, object>", "{"]

    def map_close(self) -> str:
        return "}"

    def map_entry_prefix(self, key: str) -> str:
        return f"[{self.string_literal(key)}] = "

    def root_prefix(self, var: str, root: PropertyNode) -> str:
        return f"var {var} = "

    def declare_stream(self, var: str, node: BinaryNode) -> list[str]:
        data = self.string_literal(base64_text(node))
        return [f"using var {var} = new MemoryStream(Convert.FromBase64String({data}));"]

    # --- call ---

    def verb(self, method: HTTPMethod) -> str:
        return pascal(method.value) + "Async"

    def string_array(self, values: Sequence[str]) -> str:
        return "new string []{ " + ",".join(self.string_literal(v) for v in values) + " }"

    def configuration(self, resolved: ResolvedRequest) -> tuple[list[str], Optional[str]]:
        lines = ["(requestConfiguration) =>", "{"]
        for option in resolved.query_options:
            lines.append(
                f"{self.indent_unit}requestConfiguration.QueryParameters."
                f"{self.query_property(option)} = {self.query_value(option)};"
            )
        for header in resolved.headers:
            lines.append(
                f"{self.indent_unit}requestConfiguration.Headers.Add("
                f"{self.string_literal(header.name)}, {self.string_literal(header.value)});"
            )
        lines.append("}")
        return [], "\n".join(lines)

    def call_statement(
        self, chain: str, verb: str, args: Sequence[str], resolved: ResolvedRequest
    ) -> str:
        assign = "var result = " if resolved.response_schema is not None else ""
        return f"{assign}await {self.client_var}{chain}.{verb}({', '.join(args)});"

    # --- imports ---

    def model_import(self, type_ref: TypeRef, resolved: ResolvedRequest) -> Optional[str]:
        if type_ref.synthesized:
            segments = owner_segments(type_ref, resolved.segments)
            parts = [pascal(part) for part in package_parts(segments)]
            return "using Microsoft.Graph." + ".".join(parts) + ";"
        parts = ["Models", *(pascal(part) for part in model_namespace_parts(type_ref))]
        return "using Microsoft.Graph." + ".".join(parts) + ";"

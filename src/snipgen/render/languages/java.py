"""Java snippets in the style of the Java SDK.

Every object is a local variable populated through setters; collections are
``LinkedList`` instances and free-form data a ``HashMap``. Flag enums are
rendered as ``EnumSet.of(...)``. Java snippets carry no import list.
"""

from __future__ import annotations

from typing import Optional, Sequence

from snipgen.ir.nodes import (
    BinaryNode,
    DateTimeNode,
    EnumNode,
    ItemType,
    NumberNode,
    ObjectNode,
    PropertyNode,
    TypeRef,
)
from snipgen.models import HTTPMethod, ResolvedRequest
from snipgen.naming import camel, key_accessor, pascal
from snipgen.render.profile import SetterProfile, base64_text, plain_number, response_type

_KEYWORDS = frozenset(
    """
    abstract assert boolean break byte case catch char class const continue default
    do double else enum extends final finally float for goto if implements import
    instanceof int interface long native new package private protected public return
    short static strictfp super switch synchronized this throw throws transient try
    void volatile while true false null var
    """.split()
)

_TEMPORAL = {
    "date-time": "OffsetDateTime.parse({})",
    "date": "LocalDate.parse({})",
    "time": "LocalTime.parse({})",
    "duration": "PeriodAndDuration.ofDuration(Duration.parse({}))",
}

_ITEM_TYPES = {
    "string": "String",
    "boolean": "Boolean",
    "guid": "UUID",
    "datetime": "OffsetDateTime",
    "binary": "byte[]",
    "map": "Object",
}


class JavaProfile(SetterProfile):
    language_id = "java"
    display_name = "Java"
    syntax_lexer = "java"
    reserved_words = _KEYWORDS
    reserved_locals = frozenset({"graphClient", "result", "requestConfiguration"})
    is_async = False
    emits_imports = False
    accessor_parens = True

    def case_segment(self, name: str) -> str:
        return camel(name)

    def case_property(self, name: str) -> str:
        return camel(name)

    # --- literals ---

    def number_literal(self, node: NumberNode) -> str:
        text = plain_number(node)
        if node.numeric == "float":
            return text + ("f" if node.width == 32 else "d")
        return text + ("L" if node.width == 64 else "")

    def guid_literal(self, value: str) -> str:
        return f"UUID.fromString({self.string_literal(value)})"

    def datetime_literal(self, node: DateTimeNode) -> str:
        template = _TEMPORAL.get(node.temporal, _TEMPORAL["date-time"])
        return template.format(self.string_literal(node.value))

    def binary_literal(self, node: BinaryNode) -> str:
        return f"Base64.getDecoder().decode({self.string_literal(base64_text(node))})"

    def enum_literal(self, node: EnumNode) -> str:
        members = ", ".join(self.enum_member(node.type_ref, m) for m in node.members)
        if node.flags:
            return f"EnumSet.of({members})"
        return members

    def indexer(self, key_param: str) -> str:
        return self.call(key_accessor(key_param), [self.placeholder_key(key_param)])

    # --- body ---

    def item_type(self, item_type: Optional[ItemType]) -> str:
        if item_type is None:
            return "Object"
        if item_type.type_ref is not None:
            return self.type_name(item_type.type_ref)
        if item_type.kind == "number":
            if item_type.numeric == "float":
                return "Float" if item_type.width == 32 else "Double"
            return "Long" if item_type.width == 64 else "Integer"
        return _ITEM_TYPES.get(item_type.kind, "Object")

    def root_variable(self, root: PropertyNode, type_name: Optional[str]) -> str:
        if isinstance(root, ObjectNode):
            return camel(root.declared_type.short_name)
        return self.body_var

    def declare_object(self, var: str, type_ref: TypeRef, resolved: ResolvedRequest) -> list[str]:
        name = self.type_name(type_ref)
        return [f"{name} {var} = new {name}();"]

    def assign(self, owner: str, json_name: str, value: str) -> list[str]:
        return [f"{owner}.set{pascal(json_name)}({value});"]

    def declare_collection(
        self, var: str, item_type: Optional[ItemType], elements: Sequence[str]
    ) -> list[str]:
        element_type = self.item_type(item_type)
        lines = [f"LinkedList<{element_type}> {var} = new LinkedList<{element_type}>();"]
        lines.extend(f"{var}.add({element});" for element in elements)
        return lines

    def declare_map(self, var: str, entries: Sequence[tuple[str, str]]) -> list[str]:
        lines = [f"HashMap<String, Object> {var} = new HashMap<>();"]
        lines.extend(f"{var}.put({self.string_literal(key)}, {value});" for key, value in entries)
        return lines

    def declare_stream(self, var: str, node: BinaryNode) -> list[str]:
        data = self.string_literal(base64_text(node))
        return [f"InputStream {var} = new ByteArrayInputStream(Base64.getDecoder().decode({data}));"]

    # --- call ---

    def verb(self, method: HTTPMethod) -> str:
        return method.value

    def string_array(self, values: Sequence[str]) -> str:
        return "new String []{" + ", ".join(self.string_literal(v) for v in values) + "}"

    def configuration(self, resolved: ResolvedRequest) -> tuple[list[str], Optional[str]]:
        lines = ["requestConfiguration -> {"]
        for option in resolved.query_options:
            lines.append(
                f"{self.indent_unit}requestConfiguration.queryParameters."
                f"{self.query_property(option)} = {self.query_value(option)};"
            )
        for header in resolved.headers:
            lines.append(
                f"{self.indent_unit}requestConfiguration.headers.add("
                f"{self.string_literal(header.name)}, {self.string_literal(header.value)});"
            )
        lines.append("}")
        return [], "\n".join(lines)

    def call_statement(
        self, chain: str, verb: str, args: Sequence[str], resolved: ResolvedRequest
    ) -> str:
        assign = ""
        if resolved.response_schema is not None:
            type_ref = response_type(resolved)
            declared = self.type_name(type_ref) if type_ref is not None else "var"
            assign = f"{declared} result = "
        return f"{assign}{self.client_var}{chain}.{verb}({', '.join(args)});"

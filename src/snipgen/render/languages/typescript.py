"""TypeScript snippets in the style of the TypeScript SDK.

Models are interfaces, so bodies are plain object literals typed at the
declaration. An object whose type was replaced by an ``@odata.type``
annotation is asserted with ``as``. Enum values are their wire strings; a flag
enum is an array of them. JavaScript requests render the same way.
"""

from __future__ import annotations

import json
from typing import Optional, Sequence

from snipgen.ir.nodes import (
    BinaryNode,
    BodyGraph,
    DateTimeNode,
    EnumNode,
    ItemType,
    ObjectNode,
    PropertyNode,
    TypeRef,
    walk,
)
from snipgen.models import HTTPMethod, ResolvedRequest
from snipgen.naming import camel, key_accessor
from snipgen.render.profile import (
    InitializerProfile,
    base64_text,
    model_namespace_parts,
    owner_segments,
    package_parts,
)

_PACKAGE = "@microsoft/msgraph-sdk"


class TypeScriptProfile(InitializerProfile):
    language_id = "typescript"
    aliases = ("javascript", "ts", "js")
    display_name = "TypeScript"
    syntax_lexer = "typescript"
    reserved_locals = frozenset({"graphServiceClient", "result", "configuration"})
    client_var = "graphServiceClient"

    def case_segment(self, name: str) -> str:
        return camel(name)

    def case_property(self, name: str) -> str:
        return camel(name)

    def datetime_literal(self, node: DateTimeNode) -> str:
        if node.temporal == "date-time":
            return f"new Date({self.string_literal(node.value)})"
        return self.string_literal(node.value)

    def binary_literal(self, node: BinaryNode) -> str:
        return self.string_literal(base64_text(node))

    def enum_literal(self, node: EnumNode) -> str:
        if node.flags:
            return "[" + ", ".join(self.string_literal(m) for m in node.members) + "]"
        return self.string_literal(",".join(node.members))

    def indexer(self, key_param: str) -> str:
        return self.call(key_accessor(key_param), [self.placeholder_key(key_param)])

    # --- body ---

    def object_open(self, type_ref: TypeRef, derived: bool) -> list[str]:
        return ["{"]

    def object_close(self, type_ref: TypeRef, derived: bool) -> str:
        return f"}} as {self.type_name(type_ref)}" if derived else "}"

    def field_prefix(self, json_name: str) -> str:
        return f"{self.case_property(json_name)} : "

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
        if isinstance(root, ObjectNode) and not root.derived:
            return f"const {var} : {self.type_name(root.declared_type)} = "
        return f"const {var} = "

    def declare_stream(self, var: str, node: BinaryNode) -> list[str]:
        data = self.string_literal(base64_text(node))
        return [f"const {var} = Buffer.from({data}, \"base64\");"]

    # --- call ---

    def verb(self, method: HTTPMethod) -> str:
        return method.value

    def configuration(self, resolved: ResolvedRequest) -> tuple[list[str], Optional[str]]:
        unit = self.indent_unit
        sections: list[list[str]] = []
        if resolved.query_options:
            entries = [
                f"{unit * 2}{self.query_property(option)}: {self.query_value(option)}"
                for option in resolved.query_options
            ]
            sections.append([f"{unit}queryParameters: {{", ",\n".join(entries), f"{unit}}}"])
        if resolved.headers:
            entries = [
                f"{unit * 2}{self.string_literal(h.name)} : {self.string_literal(h.value)}"
                for h in resolved.headers
            ]
            sections.append([f"{unit}headers: {{", ",\n".join(entries), f"{unit}}}"])
        body = ",\n".join("\n".join(section) for section in sections)
        return [], "{\n" + body + "\n}"

    def call_statement(
        self, chain: str, verb: str, args: Sequence[str], resolved: ResolvedRequest
    ) -> str:
        assign = "const result = " if resolved.response_schema is not None else ""
        return f"{assign}await {self.client_var}{chain}.{verb}({', '.join(args)});"

    # --- imports ---

    def referenced_types(self, graph: BodyGraph) -> list[TypeRef]:
        refs: list[TypeRef] = []
        root = graph.root
        if isinstance(root, ObjectNode) and not root.derived:
            refs.append(root.declared_type)
        for node in walk(root):
            if isinstance(node, ObjectNode) and node.derived:
                refs.append(node.declared_type)
        return refs

    def model_import(self, type_ref: TypeRef, resolved: ResolvedRequest) -> Optional[str]:
        if type_ref.synthesized:
            parts = package_parts(owner_segments(type_ref, resolved.segments))
            module = (f"{_PACKAGE}-{parts[0]}/" + "/".join(parts)) if parts else _PACKAGE
        else:
            module = "/".join([_PACKAGE, "models", *model_namespace_parts(type_ref)])
        return f"import {{ {self.type_name(type_ref)} }} from {json.dumps(module)};"

    def format_imports(self, imports: Sequence[str]) -> list[str]:
        """Merge single-name imports from the same module into one statement."""
        grouped: dict[str, list[str]] = {}
        for line in imports:
            name, _, module = line.removeprefix("import { ").partition(" } from ")
            grouped.setdefault(module, [])
            if name not in grouped[module]:
                grouped[module].append(name)
        return [
            f"import {{ {', '.join(sorted(names))} }} from {module}"
            for module, names in grouped.items()
        ]

"""Graph CLI (``mgc``) commands.

A request becomes one command line. Every path segment is a sub-command
in kebab case; keyed access adds no sub-command and becomes a
``--<key>`` option instead. The last word is the operation: ``list`` for
a GET returning a collection, ``create`` for a POST to a navigation
collection, otherwise the HTTP method.

Options follow in a fixed order: path keys and bound parameters, query
options, headers, then the body. A query option or header whose name
clashes with an earlier option is suffixed with ``-query`` or
``-header``. JSON and text bodies are passed with ``--body``, binary
bodies with ``--file``::

    mgc users messages list --user-id {user-id} --select subject
"""

from __future__ import annotations

import shlex
from typing import Optional, Sequence

from snipgen.ir.nodes import BinaryNode, BodyGraph, DateTimeNode
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
    ResolvedRequest,
    SchemaKind,
)
from snipgen.naming import alternate_key_accessor, words
from snipgen.render.profile import CommandProfile

_FILE_PLACEHOLDER = "<file path>"
_EMPTY_BODIES = frozenset({"", "undefined"})


def option_name(name: str) -> str:
    """``licenseDetails-id`` -> ``license-details-id``, ``$count`` -> ``count``."""
    return "-".join(w.lower() for w in words(name))


def returns_collection(resolved: ResolvedRequest) -> bool:
    """True when the operation answers with a page of entities."""
    schema = resolved.response_schema
    if schema is None:
        return False
    if schema.kind == SchemaKind.ARRAY:
        return True
    return bool(schema.type_name and schema.type_name.endswith("CollectionResponse"))


class GraphCliProfile(CommandProfile):
    language_id = "cli"
    aliases = ("graph-cli", "mgc")
    display_name = "Graph CLI"
    syntax_lexer = "bash"
    member_access = " "
    client_var = "mgc"
    comment_prefix = "#"

    def case_segment(self, name: str) -> str:
        return option_name(name)

    def case_property(self, name: str) -> str:
        return option_name(name)

    # --- literals ---

    def string_literal(self, value: str) -> str:
        return shlex.quote(value)

    def null_literal(self) -> str:
        return ""

    def datetime_literal(self, node: DateTimeNode) -> str:
        return self.string_literal(node.value)

    def binary_literal(self, node: BinaryNode) -> str:
        return _FILE_PLACEHOLDER

    def body_literal(self, text: str) -> str:
        """Single-quote *text*, continuing each line break with a backslash."""
        escaped = text.replace("'", "'\\''").replace("\n", "\\\n")
        return f"'{escaped}'"

    # --- path ---

    def indexer(self, key_param: str) -> str:
        return ""

    def alternate_key(self, collection: str, key_name: str, key_value: Optional[str]) -> str:
        return self.accessor(alternate_key_accessor(collection, key_name))

    def invocation(self, name: str, params: Sequence[BoundParameter]) -> str:
        return self.accessor(name)

    def path_options(self, segments: Sequence[PathSegment]) -> dict[str, str]:
        """``--<key>`` options for keyed segments and bound parameters, in path order.

        A key repeated further down the path keeps its first position and
        takes the later value.
        """
        options: dict[str, str] = {}
        for segment in segments:
            match segment:
                case IndexedCollectionSegment(alternate_key=True, key_param_name=key, key_value=value):
                    options[option_name(key)] = (
                        self.string_literal(value) if value is not None else "{" + key + "}"
                    )
                case IndexedCollectionSegment(key_param_name=key) | PathParameterSegment(name=key):
                    options[option_name(key)] = "{" + key + "}"
                case ActionSegment(bound_params=params) | FunctionSegment(bound_params=params):
                    for param in params:
                        options[option_name(param.name)] = (
                            param.value if param.placeholder else self.string_literal(param.value)
                        )
        return options

    # --- body ---

    def body_argument(self, body: BodyGraph, resolved: ResolvedRequest) -> Optional[str]:
        if isinstance(body.root, BinaryNode) and body.root.data is not None:
            return f"--file {_FILE_PLACEHOLDER}"
        text = (resolved.body or b"").decode("utf-8", errors="replace")
        text = text.replace("\r\n", "\n").strip()
        if text in _EMPTY_BODIES:
            return None
        return "--body " + self.body_literal(text)

    # --- call ---

    def verb(self, method: HTTPMethod) -> str:
        return method.value

    def query_value(self, option: QueryOption) -> str:
        value = option.value
        if isinstance(value, tuple):
            return self.string_literal(",".join(value))
        if isinstance(value, bool):
            return self.boolean_literal(value)
        return self.string_literal(str(value))

    def configuration(self, resolved: ResolvedRequest) -> tuple[list[str], Optional[str]]:
        taken = set(self.path_options(resolved.segments))
        options: list[str] = []
        for option in resolved.query_options:
            name = self.query_property(option)
            if name in taken:
                name += "-query"
            taken.add(name)
            options.append(f"--{name} {self.query_value(option)}")
        for header in resolved.headers:
            name = option_name(header.name)
            if name in taken:
                name += "-header"
            taken.add(name)
            options.append(f"--{name} {self.string_literal(header.value)}")
        return [], " ".join(options) or None

    def call_arguments(self, body: Optional[str], config: Optional[str]) -> list[str]:
        return [arg for arg in (config, body) if arg]

    def command_verb(self, verb: str, resolved: ResolvedRequest) -> str:
        last = resolved.segments[-1] if resolved.segments else None
        if resolved.method == HTTPMethod.GET and returns_collection(resolved):
            return "list"
        if resolved.method == HTTPMethod.POST and isinstance(last, LiteralSegment):
            return "create"
        return verb

    def call_statement(
        self, chain: str, verb: str, args: Sequence[str], resolved: ResolvedRequest
    ) -> str:
        parts = [self.client_var + chain, self.command_verb(verb, resolved)]
        options = self.path_options(resolved.segments)
        parts.extend(f"--{name} {value}" for name, value in options.items())
        parts.extend(args)
        return " ".join(parts)

"""The generic snippet renderer.

One tree walk serves every language. :class:`SnippetRenderer` assembles a
snippet in blocks separated by blank lines:

1. the profile's prologue comment, followed by the import list,
2. the request body (if any),
3. the request configuration statements (if the profile declares them
   outside the call),
4. the call statement: client variable, the path accessor chain, the verb
   and its arguments.

Bodies render in the style fixed by the profile's base class
(:attr:`~snipgen.render.profile.LanguageProfile.body_style`):

``initializer``
    The body is a single nested expression (C# object initializers, Python
    constructor keywords, TypeScript object literals). Nested lines are
    indented one unit per level.

``setter``
    Every object, collection and map is its own local variable, declared
    before it is used, and properties are assigned through setters (Java,
    Go, PHP). Variable names are unique within a snippet.

``command``
    The snippet is a single command line and the body is passed as one of
    its options (Graph CLI).

Children are always emitted in source JSON order, and the implicit
``additionalData`` map comes last because the body graph builder appends it
last.
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional, Sequence, assert_never

from snipgen.ir.nodes import (
    ArrayNode,
    BinaryNode,
    BodyGraph,
    BooleanNode,
    DateTimeNode,
    EnumNode,
    GuidNode,
    MapNode,
    NullNode,
    NumberNode,
    ObjectNode,
    PropertyEntry,
    PropertyNode,
    StringNode,
)
from snipgen.models import (
    ActionSegment,
    FunctionSegment,
    HTTPMethod,
    IndexedCollectionSegment,
    LiteralSegment,
    PathParameterSegment,
    PathSegment,
    ReferenceSegment,
    ResolvedRequest,
)
from snipgen.render.profile import CommandProfile, LanguageProfile, SetterProfile, VariableNames

logger = logging.getLogger(__name__)

_BODY_METHODS = frozenset({HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH})

_CONTAINERS = (ObjectNode, ArrayNode, MapNode)


class _Scope(NamedTuple):
    names: VariableNames
    resolved: ResolvedRequest


class SnippetRenderer:
    """Render resolved requests for one target language.

    Args:
        profile: The language's conventions and templates.

    Example::

        renderer = SnippetRenderer(CSharpProfile())
        text = renderer.render(resolved, BodyGraphBuilder(resolved.index).build(resolved))
    """

    def __init__(self, profile: LanguageProfile) -> None:
        self._profile = profile

    @property
    def profile(self) -> LanguageProfile:
        return self._profile

    def render(
        self,
        resolved: ResolvedRequest,
        body: Optional[BodyGraph],
        imports: Sequence[str] = (),
    ) -> str:
        """Render the snippet text for *resolved* with its built *body*.

        *imports* are placed, already formatted, right after the prologue.
        """
        profile = self._profile
        names = VariableNames(profile)
        blocks: list[list[str]] = [profile.prologue(), list(imports)]

        body_arg: Optional[str] = None
        if body is not None:
            body_lines, body_arg = self.render_body(body, _Scope(names, resolved))
            blocks.append(body_lines)
        elif (
            resolved.operation is not None
            and resolved.operation.has_request_body
            and resolved.method in _BODY_METHODS
        ):
            body_arg = profile.null_literal()

        config_arg: Optional[str] = None
        if resolved.requires_configuration:
            config_lines, config_arg = profile.configuration(resolved)
            if config_lines:
                blocks.append(config_lines)

        chain = self.chain(resolved.segments)
        args = profile.call_arguments(body_arg, config_arg)
        blocks.append([profile.call_statement(chain, profile.verb(resolved.method), args, resolved)])

        lines: list[str] = []
        for block in blocks:
            if not block:
                continue
            if lines:
                lines.append("")
            lines.extend(block)
        logger.debug("Rendered %d lines of %s", len(lines), profile.language_id)
        return "\n".join(lines) + "\n"

    # ------------------------------------------------------------------ #
    # Path
    # ------------------------------------------------------------------ #

    def chain(self, segments: tuple[PathSegment, ...]) -> str:
        """The accessor chain following the client variable."""
        profile = self._profile
        tokens: list[str] = []
        for segment in segments:
            match segment:
                case LiteralSegment(name=name):
                    tokens.append(profile.accessor(name))
                case IndexedCollectionSegment(alternate_key=True):
                    tokens.append(
                        profile.alternate_key(
                            segment.collection_name, segment.key_param_name, segment.key_value
                        )
                    )
                case IndexedCollectionSegment(key_param_name=key):
                    tokens.append(profile.indexer(key))
                case PathParameterSegment(name=name):
                    tokens.append(profile.indexer(name))
                case ActionSegment(name=name, bound_params=params):
                    tokens.append(profile.invocation(name, params))
                case FunctionSegment(name=name, bound_params=params):
                    tokens.append(profile.invocation(name, params))
                case ReferenceSegment():
                    tokens.append(profile.reference())
                case _:
                    assert_never(segment)
            if segment.type_cast:
                tokens.append(profile.type_cast(segment.type_cast))
        return "".join(tokens)

    # ------------------------------------------------------------------ #
    # Body
    # ------------------------------------------------------------------ #

    def render_body(self, body: BodyGraph, scope: _Scope) -> tuple[list[str], Optional[str]]:
        """Declare the request body; returns the statements and the call argument."""
        profile = self._profile
        names = scope.names
        root = body.root
        if isinstance(profile, CommandProfile):
            return [], profile.body_argument(body, scope.resolved)

        if isinstance(root, BinaryNode) and root.data is not None:
            var = names.allocate(profile.body_var)
            return profile.declare_stream(var, root), profile.variable(var)

        if isinstance(profile, SetterProfile):
            var = names.allocate(profile.root_variable(root, body.type_name))
            if not isinstance(root, _CONTAINERS):
                return [], self.literal(root)
            return self._declare(root, var, scope)

        var = names.allocate(profile.body_var)
        value = self._expression(root, 0)
        lines = [profile.root_prefix(var, root) + value[0], *value[1:]]
        lines[-1] += profile.statement_end
        return lines, profile.variable(var)

    def literal(self, node: PropertyNode) -> str:
        """Render a leaf node as a literal expression."""
        profile = self._profile
        match node:
            case StringNode(value=value):
                return profile.string_literal(value)
            case NumberNode():
                return profile.number_literal(node)
            case BooleanNode(value=value):
                return profile.boolean_literal(value)
            case GuidNode(value=value):
                return profile.guid_literal(value)
            case DateTimeNode():
                return profile.datetime_literal(node)
            case BinaryNode():
                return profile.binary_literal(node)
            case EnumNode():
                return profile.enum_literal(node)
            case NullNode():
                return profile.null_literal()
            case ObjectNode() | ArrayNode() | MapNode():
                raise TypeError(f"{node.kind} is not a leaf node")
            case _:
                assert_never(node)

    # --- initializer style ---

    def _expression(self, node: PropertyNode, depth: int) -> list[str]:
        """Lines of an expression; the first continues the current line."""
        profile = self._profile
        pad = profile.pad(depth)
        match node:
            case ObjectNode(declared_type=type_ref, derived=derived):
                head, *rest = profile.object_open(type_ref, derived)
                lines = [head, *(pad + line for line in rest)]
                for entry in node.children:
                    lines.extend(self._member(profile.field_prefix(entry.name), entry.node, depth + 1))
                lines.append(pad + profile.object_close(type_ref, derived))
                return lines
            case ArrayNode(item_type=item_type):
                if not node.children:
                    return [profile.empty_array(item_type)]
                head, *rest = profile.array_open(item_type)
                lines = [head, *(pad + line for line in rest)]
                for child in node.children:
                    lines.extend(self._member("", child, depth + 1))
                lines.append(pad + profile.array_close(item_type))
                return lines
            case MapNode():
                head, *rest = profile.map_open()
                lines = [head, *(pad + line for line in rest)]
                for entry in node.children:
                    lines.extend(
                        self._member(profile.map_entry_prefix(entry.name), entry.node, depth + 1)
                    )
                lines.append(pad + profile.map_close())
                return lines
            case _:
                return [self.literal(node)]

    def _member(self, prefix: str, node: PropertyNode, depth: int) -> list[str]:
        head, *rest = self._expression(node, depth)
        lines = [self._profile.pad(depth) + prefix + head, *rest]
        lines[-1] += self._profile.member_separator
        return lines

    # --- setter style ---

    def _declare(
        self, node: PropertyNode, var: str, scope: _Scope
    ) -> tuple[list[str], str]:
        """Declare *node* as variable *var*; returns the statements and its reference."""
        profile = self._profile
        lines: list[str] = []
        match node:
            case ObjectNode(declared_type=type_ref):
                lines.extend(profile.declare_object(var, type_ref, scope.resolved))
                for entry in node.children:
                    before, arg = self._setter_argument(entry, scope)
                    lines.extend(before)
                    lines.extend(profile.assign(var, entry.name, arg))
            case ArrayNode(item_type=item_type):
                elements: list[str] = []
                for child in node.children:
                    before, expr = self._element(child, scope)
                    lines.extend(before)
                    elements.append(expr)
                lines.extend(profile.declare_collection(var, item_type, elements))
            case MapNode():
                entries: list[tuple[str, str]] = []
                for entry in node.children:
                    before, expr = self._element(entry.node, scope, hint=entry.name)
                    lines.extend(before)
                    entries.append((entry.name, expr))
                lines.extend(profile.declare_map(var, entries))
            case _:
                return [], self.literal(node)
        return lines, profile.variable(var)

    def _setter_argument(
        self, entry: PropertyEntry, scope: _Scope
    ) -> tuple[list[str], str]:
        node = entry.node
        if isinstance(node, _CONTAINERS):
            hint = entry.name if not isinstance(node, ArrayNode) else self._profile.collection_var(entry.name)
            return self._declare(node, scope.names.allocate(hint), scope)
        return self._profile.setter_value(scope.names, entry.name, node, self.literal(node))

    def _element(
        self, node: PropertyNode, scope: _Scope, hint: Optional[str] = None
    ) -> tuple[list[str], str]:
        if not isinstance(node, _CONTAINERS):
            return [], self.literal(node)
        if hint is None:
            match node:
                case ObjectNode(declared_type=type_ref):
                    hint = type_ref.short_name
                case ArrayNode():
                    hint = "values"
                case _:
                    hint = "item"
        return self._declare(node, scope.names.allocate(hint), scope)

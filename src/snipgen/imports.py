"""Import list derivation.

:class:`ImportResolver` derives a snippet's imports from the same
structures the renderer walks, through the same
:class:`~snipgen.render.profile.LanguageProfile` naming methods, so the
import list and the rendered code cannot disagree about a type's name or
package:

* **root** -- the client import (:meth:`LanguageProfile.root_imports`),
* **request configuration** -- request builder and configuration classes,
  only when the request carries query options or headers,
* **models** -- every model, enum and synthesized request body type the
  body graph names, plus whatever a leaf literal's rendering depends on
  (temporal types, GUIDs, base64).

Each group is sorted; an import already emitted by an earlier group is not
repeated.

:func:`scan_rendered` is a separate fallback. It recovers type
names from rendered text (``new Message``, ``Message(``) and is only used to
add model imports the IR walk did not produce, for types the path index can
describe.
"""

from __future__ import annotations

import logging
import re
from typing import NamedTuple, Optional, Sequence

from snipgen.ir.nodes import BodyGraph, TypeRef, walk
from snipgen.models import ResolvedRequest
from snipgen.render.profile import LanguageProfile

logger = logging.getLogger(__name__)

_CONSTRUCTOR_RE = re.compile(r"(?:\bnew\s+|[=,(\[]\s*)([A-Z][A-Za-z0-9]*)\s*[({.]")
_BUILDER_RE = re.compile(r"\b([A-Z][A-Za-z0-9]*RequestBuilder)\b")

_NON_MODEL_SUFFIXES = ("RequestConfiguration", "QueryParameters", "RequestBuilder")
_REQUEST_BODY_SUFFIX = "RequestBody"

# Constructor-like tokens that belong to language runtimes, not the model package.
_RUNTIME_NAMES = frozenset(
    {
        "Base64",
        "Buffer",
        "Convert",
        "Date",
        "DateTime",
        "DateTimeOffset",
        "Duration",
        "EnumSet",
        "Guid",
        "HashMap",
        "LinkedList",
        "LocalDate",
        "LocalTime",
        "MemoryStream",
        "OffsetDateTime",
        "PeriodAndDuration",
        "RequestConfiguration",
        "Time",
        "TimeSpan",
        "UUID",
    }
)


class ScanResult(NamedTuple):
    """Names recovered from rendered snippet text."""

    type_names: tuple[str, ...]
    builders: tuple[str, ...]


def scan_rendered(text: str) -> ScanResult:
    """Recover constructor/type tokens and request builder names from *text*.

    >>> scan_rendered('var requestBody = new Message\\n{\\n\\tBody = new ItemBody\\n\\t{\\n')
    ScanResult(type_names=('Message', 'ItemBody'), builders=())
    """
    type_names: list[str] = []
    for match in _CONSTRUCTOR_RE.finditer(text):
        name = match.group(1)
        if name in _RUNTIME_NAMES or name.endswith(_NON_MODEL_SUFFIXES):
            continue
        if name not in type_names:
            type_names.append(name)
    builders: list[str] = []
    for match in _BUILDER_RE.finditer(text):
        if match.group(1) not in builders:
            builders.append(match.group(1))
    return ScanResult(tuple(type_names), tuple(builders))


class ImportResolver:
    """Derive the ordered import list for one language.

    Args:
        profile: The language whose naming and import layout to use.

    Example::

        resolver = ImportResolver(get_profile("python"))
        resolver.resolve(resolved, body)
        # ['from msgraph import GraphServiceClient',
        #  'from msgraph.generated.models.message import Message']
    """

    def __init__(self, profile: LanguageProfile) -> None:
        self._profile = profile

    def resolve(
        self,
        resolved: ResolvedRequest,
        body: Optional[BodyGraph],
        rendered: Optional[str] = None,
    ) -> list[str]:
        """Return the formatted import lines for a snippet.

        Args:
            resolved: The resolved request the snippet renders.
            body: The built body graph, if the request has a body.
            rendered: The rendered snippet text; enables the text-scan
                fallback for types the body graph walk did not yield.
        """
        profile = self._profile
        if not profile.emits_imports:
            return []

        root = profile.root_imports(resolved)
        configuration = (
            profile.configuration_imports(resolved) if resolved.requires_configuration else []
        )
        models: list[str] = []
        if body is not None:
            for type_ref in profile.referenced_types(body):
                line = profile.model_import(type_ref, resolved)
                if line is not None:
                    models.append(line)
            for node in walk(body.root):
                models.extend(profile.literal_imports(node))
        if rendered is not None:
            models.extend(self._fallback(rendered, resolved, body))

        ordered = _ordered_groups(root, configuration, models)
        logger.debug("Derived %d imports for %s", len(ordered), profile.language_id)
        return profile.format_imports(ordered)

    def _fallback(
        self, rendered: str, resolved: ResolvedRequest, body: Optional[BodyGraph]
    ) -> list[str]:
        known = set()
        if body is not None:
            known = {ref.short_name.lower() for ref in self._profile.referenced_types(body)}
        index = resolved.index
        lines: list[str] = []
        for name in scan_rendered(rendered).type_names:
            if name.lower() in known:
                continue
            if name.endswith(_REQUEST_BODY_SUFFIX):
                type_ref = TypeRef(name=name, synthesized=True)
            else:
                descriptor = index.describe_type(name) if index is not None else None
                if descriptor is None:
                    continue
                type_ref = TypeRef.of(descriptor.name)
            line = self._profile.model_import(type_ref, resolved)
            if line is not None:
                logger.debug("Import for %s recovered from rendered text", name)
                lines.append(line)
        return lines


def _ordered_groups(*groups: Sequence[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for group in groups:
        for line in sorted(set(group)):
            if line not in seen:
                seen.add(line)
                ordered.append(line)
    return ordered

"""Public entry points: resolved request in, snippet text out.

:func:`generate_snippet` runs the back half of the pipeline for an already
resolved request::

    BodyGraphBuilder -> SnippetRenderer -> ImportResolver

:class:`SnippetGenerator` is the convenience facade over the whole pipeline,
starting from a recorded :class:`~snipgen.models.HttpRequest`.

Generation is all-or-nothing: any failure raises, and no partial snippet is
ever returned.
"""

from __future__ import annotations

import logging
from typing import Optional

from snipgen.cache.cache import DocumentCache
from snipgen.imports import ImportResolver
from snipgen.index.registry import IndexRegistry
from snipgen.ir.builder import BodyGraphBuilder
from snipgen.models import GlobalConfig, HttpRequest, ResolvedRequest
from snipgen.render.engine import SnippetRenderer
from snipgen.render.languages import PROFILES, get_profile
from snipgen.resolver.request import RequestResolver

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES: tuple[str, ...] = tuple(profile.language_id for profile in PROFILES)
"""Primary ids of the registered target languages."""


def supported_languages() -> tuple[str, ...]:
    """Return :data:`SUPPORTED_LANGUAGES`."""
    return SUPPORTED_LANGUAGES


def generate_snippet(resolved: ResolvedRequest, language_id: str) -> str:
    """Render *resolved* as a snippet in *language_id*.

    Args:
        resolved: A request resolved by
            :class:`~snipgen.resolver.request.RequestResolver`.
        language_id: A supported language id or alias, any case.

    Returns:
        The complete snippet text: prologue, imports, body, configuration and
        the call statement.

    Raises:
        UnsupportedLanguageError: If *language_id* is not registered.
        MalformedBodyError: If a declared JSON body does not parse.
        SchemaMismatchError: If the body's shape contradicts its schema.
    """
    profile = get_profile(language_id)
    body = BodyGraphBuilder(resolved.index).build(resolved)
    renderer = SnippetRenderer(profile)
    draft = renderer.render(resolved, body)
    imports = ImportResolver(profile).resolve(resolved, body, rendered=draft)
    logger.debug(
        "Generated %s snippet for %s %s",
        profile.language_id,
        resolved.method.value.upper(),
        resolved.template_path,
    )
    return renderer.render(resolved, body, imports)


class SnippetGenerator:
    """Resolve recorded requests and render them, in one call.

    Args:
        registry: API version to path index mapping.

    Example::

        generator = SnippetGenerator.from_config(load_global_config())
        request = parse_http_request(open("send-mail-httpSnippet").read())
        print(generator.generate(request, "python"))
    """

    def __init__(self, registry: IndexRegistry) -> None:
        self._registry = registry
        self._resolver = RequestResolver(registry)

    @classmethod
    def from_config(
        cls, config: GlobalConfig, cache: Optional[DocumentCache] = None
    ) -> SnippetGenerator:
        """Build a generator whose indexes load lazily from *config*'s sources."""
        return cls(IndexRegistry.from_config(config, cache=cache))

    @property
    def registry(self) -> IndexRegistry:
        return self._registry

    def resolve(self, request: HttpRequest) -> ResolvedRequest:
        """Resolve *request* without rendering it."""
        return self._resolver.resolve(request)

    def generate(self, request: HttpRequest, language_id: str) -> str:
        """Resolve *request* and render it in *language_id*.

        The language is validated before the request is resolved, so an
        unknown language never triggers an index load.
        """
        get_profile(language_id)
        return generate_snippet(self.resolve(request), language_id)

    def generate_many(self, request: HttpRequest, language_ids: list[str]) -> dict[str, str]:
        """Render one request in several languages, resolving it once."""
        for language_id in language_ids:
            get_profile(language_id)
        resolved = self.resolve(request)
        return {language_id: generate_snippet(resolved, language_id) for language_id in language_ids}

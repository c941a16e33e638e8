"""snipgen -- Generate SDK code snippets from recorded Microsoft Graph HTTP requests.

A recorded request (``POST /v1.0/me/sendMail`` plus headers and a JSON
body) is resolved against an OpenAPI description of the API, its body is
lowered into a typed property graph, and the graph is rendered as an
idiomatic call through one of the Graph SDKs: C#, Java, Python, Go,
TypeScript or PHP.

Typical workflow::

    snipgen generate send-mail-httpSnippet --language python
    snipgen batch ./requests --languages c#,go

Library use::

    from snipgen import SnippetGenerator
    from snipgen.config import load_global_config
    from snipgen.http import parse_http_request

    generator = SnippetGenerator.from_config(load_global_config())
    print(generator.generate(parse_http_request(text), "c#"))

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration with precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    generator: :func:`generate_snippet` and :class:`SnippetGenerator`.
    index: OpenAPI-backed path index.
    resolver: HTTP request to resolved request.
    ir: Body property graph.
    render: Language profiles and the generic renderer.
    imports: Import list derivation.
"""

__version__ = "0.3.0"

from snipgen.generator import SUPPORTED_LANGUAGES, SnippetGenerator, generate_snippet  # noqa: E402

__all__ = [
    "SUPPORTED_LANGUAGES",
    "SnippetGenerator",
    "__version__",
    "generate_snippet",
]

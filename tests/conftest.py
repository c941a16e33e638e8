"""Shared test fixtures for snipgen.

Provides reusable fixtures for loading the Graph-like OpenAPI fixture,
building the path index and the pipeline around it, creating isolated
config environments, managing output state, and running CLI commands.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from snipgen.generator import SnippetGenerator, generate_snippet
from snipgen.http import parse_http_request
from snipgen.index.openapi import OpenApiPathIndex
from snipgen.index.registry import IndexRegistry
from snipgen.models import ResolvedRequest
from snipgen.output import OutputFormat, OutputManager, reset_output, set_output
from snipgen.resolver.request import RequestResolver


FIXTURES_DIR = Path(__file__).parent / "fixtures"
GRAPH_FIXTURE = FIXTURES_DIR / "graph_openapi.json"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Path index fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def graph_document() -> dict[str, Any]:
    """Load the raw Graph-like OpenAPI fixture."""
    with open(GRAPH_FIXTURE, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def graph_index(graph_document: dict[str, Any]) -> OpenApiPathIndex:
    """Path index built from the Graph-like fixture."""
    return OpenApiPathIndex(graph_document)


@pytest.fixture
def registry(graph_index: OpenApiPathIndex) -> IndexRegistry:
    """Registry serving the fixture index for ``v1.0`` only."""
    return IndexRegistry.from_indexes({"v1.0": graph_index})


@pytest.fixture
def resolver(registry: IndexRegistry) -> RequestResolver:
    return RequestResolver(registry)


@pytest.fixture
def generator(registry: IndexRegistry) -> SnippetGenerator:
    return SnippetGenerator(registry)


@pytest.fixture
def resolve(resolver: RequestResolver) -> Callable[..., ResolvedRequest]:
    """Resolve a request given as method, origin-form target and optional JSON body.

    Example::

        resolved = resolve("POST", "/v1.0/me/sendMail", {"message": {}})
    """

    def _resolve(
        method: str,
        target: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> ResolvedRequest:
        return resolver.resolve(parse_http_request(http_text(method, target, body, headers)))

    return _resolve


@pytest.fixture
def render(resolve: Callable[..., ResolvedRequest]) -> Callable[..., str]:
    """Resolve a request and render it in one language.

    Example::

        text = render("python", "GET", "/v1.0/me/messages")
    """

    def _render(
        language: str,
        method: str,
        target: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> str:
        return generate_snippet(resolve(method, target, body, headers), language)

    return _render


def http_text(
    method: str,
    target: str,
    body: Any = None,
    headers: dict[str, str] | None = None,
) -> str:
    """Build raw HTTP request text; dict and list bodies are JSON-encoded."""
    lines = [f"{method} {target} HTTP/1.1", "Host: graph.microsoft.com"]
    all_headers = dict(headers or {})
    if body is not None and not isinstance(body, (str, bytes)):
        all_headers.setdefault("Content-Type", "application/json")
        body = json.dumps(body)
    lines.extend(f"{name}: {value}" for name, value in all_headers.items())
    text = "\n".join(lines) + "\n\n"
    if body is not None:
        text += body.decode("utf-8") if isinstance(body, bytes) else body
    return text


@pytest.fixture
def request_text() -> Callable[..., str]:
    """The :func:`http_text` builder, for tests that write request files."""
    return http_text


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config. Clears all SNIPGEN_* environment variables and changes
    the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    config_dir = tmp_path / "config"
    cache_dir = tmp_path / "cache"
    data_dir = tmp_path / "data"

    monkeypatch.setattr("snipgen.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))
    monkeypatch.setenv("XDG_CACHE_HOME", str(cache_dir))
    monkeypatch.setenv("XDG_DATA_HOME", str(data_dir))

    for var in ["SNIPGEN_LANGUAGE", "SNIPGEN_INDEX"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Set up a quiet output manager for tests that don't care about output.

    Installs a PLAIN-format, quiet OutputManager as the global output
    and resets it after the test completes.
    """
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Set up JSON output for tests that check JSON-formatted output.

    Installs a JSON-format OutputManager as the global output
    and resets it after the test completes.
    """
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()

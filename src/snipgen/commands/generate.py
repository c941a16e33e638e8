"""Generate commands -- render recorded requests as SDK snippets.

Provides three commands registered directly on the root app:

* ``snipgen generate`` -- one request, read from a file or stdin, printed
  to stdout (or ``-o``) in one language.
* ``snipgen batch`` -- every ``*-httpSnippet`` file in a directory, each
  rendered into ``<name>---<language>`` files written beside it.
* ``snipgen languages`` -- the supported languages and their aliases.

``generate`` and ``batch`` resolve the effective configuration through
:func:`~snipgen.config.resolve_config`, so ``--language`` beats
``SNIPGEN_LANGUAGE`` beats ``./snipgen.json`` beats the global default.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import click
import typer

from snipgen.exceptions import (
    InvalidUsageError,
    SnipgenError,
    UnsupportedApiVersionError,
    UnsupportedLanguageError,
)
from snipgen.output import debug, error, info, print_snippet, progress, success, suggest, warning

logger = logging.getLogger(__name__)

SNIPPET_SUFFIX = "-httpSnippet"
OUTPUT_SEPARATOR = "---"


def read_request_text(path: Optional[str]) -> str:
    """Read raw HTTP request text from *path*, or stdin when *path* is ``None`` or ``-``.

    Raises:
        InvalidUsageError: If the file cannot be read.
    """
    if path is None or path == "-":
        return click.get_text_stream("stdin").read()
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise InvalidUsageError(f"Cannot read request file {path}: {exc}") from exc


def read_snippet_file(path: Path) -> str:
    """Read one batch request file as UTF-8.

    Raises:
        InvalidUsageError: If the file cannot be read or is not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidUsageError(f"Cannot read request file {path.name}: {exc}") from exc


def fail(exc: SnipgenError) -> typer.Exit:
    """Report *exc* on stderr and return the ``typer.Exit`` carrying its exit code."""
    error(str(exc))
    if isinstance(exc, UnsupportedLanguageError):
        suggest("Run 'snipgen languages' to list the supported languages.")
    elif isinstance(exc, UnsupportedApiVersionError):
        suggest("Pass --index, or run 'snipgen config set-source <version> <source>'.")
    return typer.Exit(code=exc.exit_code)


@contextmanager
def open_generator(ctx: typer.Context, language: Optional[str] = None) -> Iterator[tuple]:
    """Yield ``(generator, language_id)`` for the effective configuration.

    The document cache is opened for the duration of the block and closed
    afterwards.
    """
    from snipgen.cache import DocumentCache
    from snipgen.config import get_cache_dir, resolve_config
    from snipgen.generator import SnippetGenerator

    index = ctx.obj.get("index") if ctx.obj else None
    config, language_id = resolve_config(cli_language=language, cli_index=index)
    cache = DocumentCache(get_cache_dir(), config.cache)
    try:
        debug(f"Index sources: {config.index_sources}")
        if config.override_index:
            debug(f"Override index: {config.override_index}")
        yield SnippetGenerator.from_config(config, cache=cache), language_id
    finally:
        cache.close()


def generate_command(
    ctx: typer.Context,
    request_file: Optional[str] = typer.Argument(
        None, help="HTTP request file. Reads stdin when omitted or '-'."
    ),
    language: Optional[str] = typer.Option(
        None, "--language", "-l", help="Target language (see 'snipgen languages')."
    ),
) -> None:
    """Generate a snippet for one recorded HTTP request.

    Example::

        snipgen generate send-mail-httpSnippet --language python
        cat request.http | snipgen generate -l go
    """
    from snipgen.http import parse_http_request
    from snipgen.render.languages import get_profile

    try:
        request = parse_http_request(read_request_text(request_file))
        with open_generator(ctx, language) as (generator, language_id):
            profile = get_profile(language_id)
            snippet = generator.generate(request, profile.language_id)
    except SnipgenError as exc:
        raise fail(exc) from None
    print_snippet(snippet, profile.syntax_lexer, profile.language_id)


def batch_command(
    ctx: typer.Context,
    directory: Path = typer.Argument(
        ..., exists=True, file_okay=False, dir_okay=True, help="Directory of request files."
    ),
    languages: Optional[str] = typer.Option(
        None,
        "--languages",
        "-l",
        help="Comma-separated target languages. Defaults to the configured language.",
    ),
) -> None:
    """Generate snippets for every ``*-httpSnippet`` file in a directory.

    Each ``<name>-httpSnippet`` produces ``<name>---<language>`` beside it.
    A request that fails is reported and skipped; the command exits with
    the first failure's exit code once all files have been tried.

    Example::

        snipgen batch ./requests --languages c#,python,go
    """
    from snipgen.http import parse_http_request
    from snipgen.render.languages import get_profile

    files = sorted(directory.glob(f"*{SNIPPET_SUFFIX}"))
    if not files:
        warning(f"No *{SNIPPET_SUFFIX} files in {directory}")
        return

    first_failure: Optional[int] = None
    written = 0
    try:
        with open_generator(ctx) as (generator, default_language):
            requested = [x.strip() for x in languages.split(",")] if languages else [default_language]
            language_ids = [get_profile(x).language_id for x in requested if x]
            for path in files:
                name = path.name[: -len(SNIPPET_SUFFIX)]
                progress(f"Generating {name}")
                try:
                    request = parse_http_request(read_snippet_file(path))
                    snippets = generator.generate_many(request, language_ids)
                except SnipgenError as exc:
                    error(f"{path.name}: {exc}")
                    if first_failure is None:
                        first_failure = exc.exit_code
                    continue
                for language_id, snippet in snippets.items():
                    target = path.with_name(f"{name}{OUTPUT_SEPARATOR}{language_id}")
                    target.write_text(snippet, encoding="utf-8")
                    logger.debug("Wrote %s", target)
                    written += 1
    except SnipgenError as exc:
        raise fail(exc) from None

    success(f"Wrote {written} snippet(s) from {len(files)} request(s)")
    if first_failure is not None:
        info(f"{len(files)} request(s) processed with errors")
        raise typer.Exit(code=first_failure)


def languages_command() -> None:
    """List the supported target languages.

    Example::

        snipgen languages
        snipgen --json languages
    """
    from snipgen.output import print_table
    from snipgen.render.languages import PROFILES

    rows = [
        [profile.language_id, ", ".join(profile.aliases) or "-", profile.display_name]
        for profile in PROFILES
    ]
    print_table(["Language", "Aliases", "Name"], rows, title="Supported languages")

"""Cache commands -- inspect and clear the document cache.

Downloaded API description documents are kept in a
:class:`~snipgen.cache.DocumentCache` under the XDG cache directory.
Clearing it forces the next generation to download the documents again.
"""

from __future__ import annotations

import typer

from snipgen.output import error, format_response, success


cache_app = typer.Typer(no_args_is_help=True)


def _open_cache():  # noqa: ANN202
    from snipgen.cache import DocumentCache
    from snipgen.config import get_cache_dir, load_global_config
    from snipgen.exceptions import ConfigError

    try:
        config = load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    return DocumentCache(get_cache_dir(), config.cache)


@cache_app.command("stats")
def cache_stats() -> None:
    """Show cache statistics.

    Example::

        snipgen cache stats
    """
    cache = _open_cache()
    try:
        format_response(cache.stats())
    finally:
        cache.close()


@cache_app.command("clear")
def cache_clear() -> None:
    """Remove every cached document.

    Example::

        snipgen cache clear
    """
    cache = _open_cache()
    try:
        cache.clear()
    finally:
        cache.close()
    success("Document cache cleared.")

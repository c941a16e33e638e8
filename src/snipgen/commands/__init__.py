"""Built-in CLI sub-commands for snipgen.

This package groups the Typer command modules that form the CLI's
command tree:

* :mod:`~snipgen.commands.generate` -- ``generate``, ``batch`` and
  ``languages``.
* :mod:`~snipgen.commands.inspect` -- show how a request resolves.
* :mod:`~snipgen.commands.config` -- view and modify global settings.
* :mod:`~snipgen.commands.cache` -- document cache statistics and clearing.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``config`` and ``cache``) or plain callback
functions registered directly on the root app.
"""

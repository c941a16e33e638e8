"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~snipgen.exceptions.SnipgenError` subclass.
Batch scripts that drive ``snipgen`` over a directory of recorded requests
can inspect the exit code to tell a bad request apart from a bad index
without parsing stderr.

Example::

    $ snipgen generate request.http --language c#
    $ echo $?
    3   # EXIT_UNRESOLVED_PATH -- the URL did not match the path index
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an unreadable request."""

EXIT_UNRESOLVED_PATH = 3
"""The request URL did not match any operation in the path index."""

EXIT_UNSUPPORTED_VERSION = 4
"""The request targets an API version with no configured path index."""

EXIT_UNSUPPORTED_LANGUAGE = 5
"""The requested target language is not registered."""

EXIT_MALFORMED_BODY = 6
"""The request declared a JSON body that could not be parsed."""

EXIT_SCHEMA_MISMATCH = 7
"""The request body shape is incompatible with the declared schema."""

EXIT_INDEX_LOAD_ERROR = 8
"""The API description document could not be loaded or validated."""

"""Exception hierarchy for snipgen.

All exceptions inherit from :class:`SnipgenError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`snipgen.exit_codes`.
The top-level error handler in :func:`snipgen.app.main` catches
``SnipgenError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Library callers of :func:`snipgen.generate_snippet` see the same types;
none of them is retried internally.

Subclass hierarchy::

    SnipgenError (exit 1)
    +-- InvalidUsageError           (exit 2)
    +-- UnresolvedPathError         (exit 3)
    +-- UnsupportedApiVersionError  (exit 4)
    +-- UnsupportedLanguageError    (exit 5)
    +-- MalformedBodyError          (exit 6)
    +-- SchemaMismatchError         (exit 7)
    +-- IndexLoadError              (exit 8)
    +-- ConfigError                 (exit 1)
"""

from snipgen.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INDEX_LOAD_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_MALFORMED_BODY,
    EXIT_SCHEMA_MISMATCH,
    EXIT_UNRESOLVED_PATH,
    EXIT_UNSUPPORTED_LANGUAGE,
    EXIT_UNSUPPORTED_VERSION,
)


class SnipgenError(Exception):
    """Base exception for all snipgen errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`snipgen.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SnipgenError):
    """Raised for invalid CLI arguments or an unparsable HTTP request description."""

    exit_code = EXIT_INVALID_USAGE


class UnresolvedPathError(SnipgenError):
    """Raised when no path index operation matches the request URL and method.

    Args:
        message: Human-readable error description.
        path: The request path that failed to resolve.
        segment: The first path segment that had no match, if known.
    """

    exit_code = EXIT_UNRESOLVED_PATH

    def __init__(self, message: str, path: str = "", segment: str | None = None):
        super().__init__(message)
        self.path = path
        self.segment = segment


class UnsupportedApiVersionError(SnipgenError):
    """Raised when the URL's version segment has no configured index and no override was supplied."""

    exit_code = EXIT_UNSUPPORTED_VERSION

    def __init__(self, message: str, version: str = ""):
        super().__init__(message)
        self.version = version


class UnsupportedLanguageError(SnipgenError):
    """Raised for a target language identifier that is not registered."""

    exit_code = EXIT_UNSUPPORTED_LANGUAGE

    def __init__(self, message: str, language: str = ""):
        super().__init__(message)
        self.language = language


class MalformedBodyError(SnipgenError):
    """Raised when a request declares a JSON content type but the body does not parse."""

    exit_code = EXIT_MALFORMED_BODY


class SchemaMismatchError(SnipgenError):
    """Raised when a JSON value's shape cannot be reconciled with its declared schema type.

    For example a string where the schema declares an entity object, or an
    object where it declares a collection.
    """

    exit_code = EXIT_SCHEMA_MISMATCH


class IndexLoadError(SnipgenError):
    """Raised when an API description document cannot be loaded, parsed, or validated."""

    exit_code = EXIT_INDEX_LOAD_ERROR


class ConfigError(SnipgenError):
    """Raised for configuration problems (invalid JSON, unknown keys, bad index sources)."""

    exit_code = EXIT_GENERIC_FAILURE

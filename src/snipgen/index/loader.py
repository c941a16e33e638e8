"""Load API description documents from a URL, local file, or stdin.

This module handles all I/O for fetching raw OpenAPI documents and converting
them into Python dictionaries. It supports both JSON and YAML formats with
automatic format detection, and validates that the document declares a
supported OpenAPI version (3.x).

The two public functions are:

* :func:`load_document` -- Load and parse a document from any supported
  source, optionally through a :class:`~snipgen.cache.DocumentCache`.
* :func:`validate_openapi_version` -- Check and return the ``openapi`` version
  string, rejecting Swagger 2.x and unsupported versions.

After loading, the raw dict is handed to
:class:`~snipgen.index.openapi.OpenApiPathIndex`.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

import httpx
import yaml

from snipgen.exceptions import IndexLoadError

if TYPE_CHECKING:
    from snipgen.cache import DocumentCache

logger = logging.getLogger(__name__)


def load_document(source: str, cache: Optional[DocumentCache] = None) -> dict[str, Any]:
    """Load an OpenAPI document from URL, file path, or stdin ('-').

    Supports JSON and YAML formats. Auto-detects format from content/extension.
    Remote documents are looked up in *cache* first and stored there after a
    successful download; the Graph descriptions are tens of megabytes, so
    re-downloading them for every invocation is not an option.

    Args:
        source: A URL (http/https), file path, or '-' for stdin.
        cache: Optional document cache used for URL sources.

    Returns:
        The parsed document as a dictionary.

    Raises:
        IndexLoadError: If the source cannot be loaded or parsed.
    """
    if source == "-":
        return _load_from_stdin()
    if source.startswith(("http://", "https://")):
        if cache is not None:
            cached = cache.get(source)
            if cached is not None:
                logger.debug("Document cache hit for %s", source)
                return cached
        document = _load_from_url(source)
        if cache is not None:
            cache.set(source, document)
        return document
    return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    """Read a document from stdin.

    Raises:
        IndexLoadError: If stdin is empty or content cannot be parsed.
    """
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise IndexLoadError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise IndexLoadError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document from URL. Supports JSON and YAML responses.

    Raises:
        IndexLoadError: If the URL cannot be fetched or content cannot be parsed.
    """
    logger.info("Downloading API description from %s", url)
    try:
        response = httpx.get(url, timeout=120.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise IndexLoadError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise IndexLoadError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    elif url.endswith((".yaml", ".yml")):
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a document from a local file.

    Supports .json, .yaml, and .yml extensions. Falls back to content-based
    detection if the extension is not recognized.

    Raises:
        IndexLoadError: If the file cannot be read or content cannot be parsed.
    """
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise IndexLoadError(f"Index document not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise IndexLoadError(f"Failed to read index document {path}: {exc}") from exc

    if not content.strip():
        raise IndexLoadError(f"Index document is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and much
    faster on large documents.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').

    Returns:
        The parsed dictionary.

    Raises:
        IndexLoadError: If the content cannot be parsed as either format.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise IndexLoadError(f"Invalid JSON: {exc}") from exc
        else:
            if not isinstance(result, dict):
                raise IndexLoadError(
                    f"Document must be a JSON/YAML object (got {type(result).__name__})"
                )
            return result

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        yaml_error = exc
    else:
        if not isinstance(result, dict):
            raise IndexLoadError(
                "Document must be a JSON/YAML object (got "
                f"{type(result).__name__ if result is not None else 'empty document'})"
            )
        return result

    msg = "Failed to parse document as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise IndexLoadError(msg)


def validate_openapi_version(document: dict[str, Any]) -> str:
    """Validate and return the OpenAPI version string.

    Supports OpenAPI 3.x. Raises for Swagger 2.x and missing version fields.

    Args:
        document: The parsed document dictionary.

    Returns:
        The OpenAPI version string (e.g., '3.0.4').

    Raises:
        IndexLoadError: If the version is missing, unsupported, or indicates Swagger 2.x.
    """
    if "swagger" in document:
        raise IndexLoadError(
            f"Swagger {document['swagger']} is not supported. "
            "Only OpenAPI 3.x documents can back a path index."
        )

    openapi_version = document.get("openapi")
    if openapi_version is None:
        raise IndexLoadError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(openapi_version)
    if version_str.startswith("3."):
        return version_str

    raise IndexLoadError(
        f"Unsupported OpenAPI version: {version_str}. Only OpenAPI 3.x is supported."
    )

"""Resolve ``$ref`` JSON Reference pointers inside an API description document.

Unlike a one-shot deep copy, the path index resolves references lazily: the
Graph description has thousands of mutually recursive schemas, and the index
needs to know *which* component a property points at (its fully qualified
type name), not just the inlined target.

Only **internal** references (those starting with ``#/``) are supported.
External file or URL references raise
:class:`~snipgen.exceptions.IndexLoadError`.
"""

from __future__ import annotations

from typing import Any, Optional

from snipgen.exceptions import IndexLoadError

SCHEMA_PREFIX = "#/components/schemas/"


def resolve_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Resolve a single ``$ref`` string against the root document.

    Parses JSON Pointer references like ``#/components/schemas/Pet`` and
    navigates the root dict to locate the referenced value. Handles
    RFC 6901 JSON Pointer escaping (``~0`` for ``~``, ``~1`` for ``/``).

    Args:
        ref: The ``$ref`` string (e.g., ``"#/components/schemas/Pet"``).
        root: The root document dictionary to resolve against.

    Returns:
        The value found at the referenced path.

    Raises:
        IndexLoadError: If the reference is external (does not start with
            ``#/``), or if any segment in the pointer path does not exist
            in the document.
    """
    if not ref.startswith("#/"):
        raise IndexLoadError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise IndexLoadError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise IndexLoadError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise IndexLoadError(
                f"Cannot resolve $ref '{ref}': "
                f"cannot navigate into {type(current).__name__}"
            )

    return current


def schema_id(ref: str) -> Optional[str]:
    """Return the component schema name a ``$ref`` points at, or ``None``.

    Example::

        >>> schema_id("#/components/schemas/microsoft.graph.message")
        'microsoft.graph.message'
        >>> schema_id("#/components/responses/error") is None
        True
    """
    if ref.startswith(SCHEMA_PREFIX):
        return ref[len(SCHEMA_PREFIX):].replace("~1", "/").replace("~0", "~")
    return None


def deref(obj: Any, root: dict[str, Any], limit: int = 16) -> Any:
    """Follow a chain of ``$ref`` objects until a non-reference value is reached.

    Used for parameters, request bodies and responses, which the Graph
    description routinely declares once under ``components`` and references
    from every operation.

    Args:
        obj: A value that may be a ``{"$ref": ...}`` dict.
        root: The root document.
        limit: Maximum number of hops, guarding against reference cycles.

    Raises:
        IndexLoadError: If the chain is longer than *limit*.
    """
    hops = 0
    while isinstance(obj, dict) and "$ref" in obj:
        if hops >= limit:
            raise IndexLoadError(f"Reference chain too long at {obj['$ref']}")
        obj = resolve_pointer(obj["$ref"], root)
        hops += 1
    return obj

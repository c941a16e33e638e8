"""Inspect command -- show how a recorded request resolves.

``snipgen inspect`` runs only the front half of the pipeline (parse and
resolve) and prints what the resolver decided: the API version, the
matched URL template, each classified path segment, the operation, and
the parsed query options and headers. Useful when a snippet comes out
with an unexpected accessor chain.
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from snipgen.exceptions import SnipgenError
from snipgen.models import ResolvedRequest, SchemaShape
from snipgen.output import format_response, get_output


def _shape_label(shape: Optional[SchemaShape]) -> str:
    if shape is None:
        return "-"
    if shape.type_name:
        return shape.type_name
    if shape.title:
        return f"{shape.title} (inline)"
    return shape.kind.value


def describe_resolution(resolved: ResolvedRequest) -> dict[str, Any]:
    """Summarise *resolved* as a JSON-serialisable mapping."""
    operation = resolved.operation
    return {
        "method": resolved.method.value.upper(),
        "api_version": resolved.api_version,
        "path": resolved.path,
        "template_path": resolved.template_path,
        "operation_id": (operation.operation_id if operation else None) or "-",
        "operation_type": operation.operation_type.value if operation else "-",
        "segments": [
            segment.model_dump(mode="json", exclude_defaults=True) | {"kind": segment.kind}
            for segment in resolved.segments
        ],
        "request_schema": _shape_label(resolved.request_schema),
        "response_schema": _shape_label(resolved.response_schema),
        "query_options": {option.raw_name: option.value for option in resolved.query_options},
        "headers": {header.name: header.value for header in resolved.headers},
    }


def _segment_label(segment: dict[str, Any]) -> str:
    details = ", ".join(f"{k}={v}" for k, v in segment.items() if k != "kind")
    return f"{segment['kind']}({details})" if details else segment["kind"]


def inspect_command(
    ctx: typer.Context,
    request_file: Optional[str] = typer.Argument(
        None, help="HTTP request file. Reads stdin when omitted or '-'."
    ),
) -> None:
    """Show how a request resolves against the path index.

    Example::

        snipgen inspect send-mail-httpSnippet
        snipgen --json inspect send-mail-httpSnippet
    """
    from snipgen.commands.generate import fail, open_generator, read_request_text
    from snipgen.http import parse_http_request
    from snipgen.output import OutputFormat

    try:
        request = parse_http_request(read_request_text(request_file))
        with open_generator(ctx) as (generator, _):
            resolved = generator.resolve(request)
    except SnipgenError as exc:
        raise fail(exc) from None

    summary = describe_resolution(resolved)
    output = get_output()
    if output.format == OutputFormat.JSON:
        format_response(summary)
        return

    rows = [
        ["Method", summary["method"]],
        ["API version", summary["api_version"]],
        ["Template", summary["template_path"]],
        ["Operation", f"{summary['operation_id']} ({summary['operation_type']})"],
        ["Request body", summary["request_schema"]],
        ["Response", summary["response_schema"]],
    ]
    for position, segment in enumerate(summary["segments"], start=1):
        rows.append([f"Segment {position}", _segment_label(segment)])
    for name, value in summary["query_options"].items():
        rows.append([f"Query {name}", str(value)])
    for name, value in summary["headers"].items():
        rows.append([f"Header {name}", value])
    output.print_table(["Field", "Value"], rows, title=f"{summary['method']} {summary['path']}")

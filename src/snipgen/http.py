"""Parse raw HTTP request text into an :class:`~snipgen.models.HttpRequest`.

Recorded requests are plain HTTP/1.1 messages::

    POST /v1.0/me/sendMail HTTP/1.1
    Host: graph.microsoft.com
    Content-type: application/json

    {"message": {"subject": "Meet for lunch?"}}

The request target may be absolute (``https://graph.microsoft.com/v1.0/me``)
or origin-form (``/v1.0/me``); origin-form targets are joined with the
``Host`` header, or with ``graph.microsoft.com`` when there is none. The
protocol version is optional. Everything after the first blank line is the
body, kept byte-for-byte.
"""

from __future__ import annotations

import logging

from snipgen.exceptions import InvalidUsageError
from snipgen.models import Header, HTTPMethod, HttpRequest

logger = logging.getLogger(__name__)

DEFAULT_HOST = "graph.microsoft.com"


def parse_http_request(text: str) -> HttpRequest:
    """Parse *text* into an :class:`HttpRequest`.

    Raises:
        InvalidUsageError: If the request line or a header line is malformed,
            or the method is not a known HTTP method.
    """
    normalised = text.replace("\r\n", "\n").lstrip("\ufeff \t\n")
    head, separator, body = normalised.partition("\n\n")
    lines = head.split("\n")
    if not lines[0].strip():
        raise InvalidUsageError("HTTP request text is empty")

    parts = lines[0].split()
    if len(parts) not in (2, 3):
        raise InvalidUsageError(f"Malformed request line: {lines[0]!r}")
    try:
        method = HTTPMethod(parts[0].lower())
    except ValueError as exc:
        raise InvalidUsageError(f"Unsupported HTTP method: {parts[0]}") from exc

    headers: list[Header] = []
    for line in lines[1:]:
        if not line.strip():
            continue
        name, colon, value = line.partition(":")
        if not colon or not name.strip():
            raise InvalidUsageError(f"Malformed header line: {line!r}")
        headers.append(Header(name=name.strip(), value=value.strip()))

    target = parts[1]
    if not target.lower().startswith(("http://", "https://")):
        host = next((h.value for h in headers if h.name.lower() == "host"), DEFAULT_HOST)
        target = f"https://{host}/{target.lstrip('/')}"

    payload = body.strip("\n") if separator else ""
    logger.debug("Parsed %s %s with %d headers", method.value.upper(), target, len(headers))
    return HttpRequest(
        method=method,
        url=target,
        headers=headers,
        body=payload.encode("utf-8") if payload.strip() else None,
    )

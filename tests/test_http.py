"""Tests for raw HTTP request text parsing."""

from __future__ import annotations

import pytest

from snipgen.exceptions import InvalidUsageError
from snipgen.http import parse_http_request
from snipgen.models import HTTPMethod


class TestRequestLine:
    def test_origin_form_joined_with_host(self) -> None:
        request = parse_http_request("GET /v1.0/me HTTP/1.1\nHost: graph.microsoft.com\n")
        assert request.method == HTTPMethod.GET
        assert request.url == "https://graph.microsoft.com/v1.0/me"

    def test_default_host(self) -> None:
        request = parse_http_request("GET /v1.0/me")
        assert request.url == "https://graph.microsoft.com/v1.0/me"

    def test_custom_host(self) -> None:
        request = parse_http_request("GET /beta/me HTTP/1.1\nHost: canary.graph.microsoft.com")
        assert request.url == "https://canary.graph.microsoft.com/beta/me"

    def test_absolute_target(self) -> None:
        request = parse_http_request("patch https://graph.microsoft.com/v1.0/me")
        assert request.method == HTTPMethod.PATCH
        assert request.url == "https://graph.microsoft.com/v1.0/me"

    def test_crlf_and_bom(self) -> None:
        text = "\ufeffPOST /v1.0/me/sendMail HTTP/1.1\r\nContent-Type: application/json\r\n\r\n{}"
        request = parse_http_request(text)
        assert request.method == HTTPMethod.POST
        assert request.content_type == "application/json"
        assert request.body == b"{}"


class TestHeadersAndBody:
    def test_headers_keep_order_and_spelling(self) -> None:
        request = parse_http_request(
            "GET /v1.0/groups\nConsistencyLevel: eventual\nPrefer: outlook.body-content-type=\"text\"\n"
        )
        assert [(h.name, h.value) for h in request.headers] == [
            ("ConsistencyLevel", "eventual"),
            ("Prefer", 'outlook.body-content-type="text"'),
        ]

    def test_header_value_with_colon(self) -> None:
        request = parse_http_request("GET /v1.0/me\nIf-Match: W/\"a:b\"")
        assert request.headers[0].value == 'W/"a:b"'

    def test_body_kept_verbatim(self) -> None:
        body = '{\n  "subject": "hi"\n}'
        request = parse_http_request(f"POST /v1.0/me/messages\n\n{body}\n")
        assert request.body == body.encode("utf-8")

    def test_blank_body_is_none(self) -> None:
        request = parse_http_request("GET /v1.0/me\n\n   \n")
        assert request.body is None

    def test_no_content_type(self) -> None:
        assert parse_http_request("GET /v1.0/me").content_type is None


class TestErrors:
    def test_empty_text(self) -> None:
        with pytest.raises(InvalidUsageError, match="empty"):
            parse_http_request("  \n\n")

    def test_malformed_request_line(self) -> None:
        with pytest.raises(InvalidUsageError, match="Malformed request line"):
            parse_http_request("GET")

    def test_unknown_method(self) -> None:
        with pytest.raises(InvalidUsageError, match="Unsupported HTTP method") as exc_info:
            parse_http_request("FETCH /v1.0/me")
        assert exc_info.value.exit_code == 2

    def test_malformed_header(self) -> None:
        with pytest.raises(InvalidUsageError, match="Malformed header"):
            parse_http_request("GET /v1.0/me\nnot a header")

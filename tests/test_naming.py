"""Tests for identifier casing helpers."""

from __future__ import annotations

import pytest

from snipgen.naming import (
    alternate_key_accessor,
    camel,
    first_lower,
    first_upper,
    key_accessor,
    pascal,
    singularize,
    snake,
    words,
)


class TestWords:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("userPrincipalName", ["user", "Principal", "Name"]),
            ("@odata.id", ["odata", "id"]),
            ("message-id", ["message", "id"]),
            ("HTMLContent", ["HTML", "Content"]),
            ("", []),
        ],
    )
    def test_words(self, name: str, expected: list[str]) -> None:
        assert words(name) == expected


class TestCasing:
    def test_pascal(self) -> None:
        assert pascal("message-id") == "MessageId"
        assert pascal("displayName") == "DisplayName"

    def test_camel(self) -> None:
        assert camel("@odata.id") == "odataId"
        assert camel("SendMail") == "sendMail"

    def test_snake(self) -> None:
        assert snake("displayName") == "display_name"
        assert snake("@odata.id") == "odata_id"
        assert snake("3dModel") == "_3d_model"
        assert snake("@@") == "value"

    def test_first_letter_helpers(self) -> None:
        assert first_upper("me") == "Me"
        assert first_lower("Me") == "me"


class TestSingularize:
    @pytest.mark.parametrize(
        ("plural", "singular"),
        [
            ("messages", "message"),
            ("policies", "policy"),
            ("address", "address"),
            ("me", "me"),
            ("s", "s"),
        ],
    )
    def test_singularize(self, plural: str, singular: str) -> None:
        assert singularize(plural) == singular


class TestAccessors:
    def test_key_accessor(self) -> None:
        assert key_accessor("message-id") == "byMessageId"

    def test_alternate_key_accessor(self) -> None:
        assert alternate_key_accessor("users", "userPrincipalName") == "usersWithUserPrincipalName"

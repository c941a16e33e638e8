"""Tests for BodyGraphBuilder: body classification, schema typing and OData members."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

import pytest

from snipgen.exceptions import MalformedBodyError, SchemaMismatchError
from snipgen.ir import (
    ADDITIONAL_DATA,
    ODATA_ID,
    ArrayNode,
    BinaryNode,
    BodyGraph,
    BodyGraphBuilder,
    BooleanNode,
    DateTimeNode,
    EnumNode,
    GuidNode,
    ItemType,
    MapNode,
    NullNode,
    NumberNode,
    ObjectNode,
    StringNode,
    TypeRef,
    walk,
)
from snipgen.models import ResolvedRequest, SchemaKind, SchemaShape

Resolve = Callable[..., ResolvedRequest]


def build(resolved: ResolvedRequest) -> BodyGraph:
    graph = BodyGraphBuilder(resolved.index).build(resolved)
    assert graph is not None
    return graph


def with_schema(resolved: ResolvedRequest, shape: SchemaShape, body: Any) -> ResolvedRequest:
    """Swap in a hand-written request schema and JSON body."""
    return resolved.model_copy(
        update={"request_schema": shape, "body": json.dumps(body).encode("utf-8")}
    )


# ------------------------------------------------------------------ #
# Body classification
# ------------------------------------------------------------------ #


class TestClassification:
    def test_no_body(self, resolve: Resolve) -> None:
        resolved = resolve("GET", "/v1.0/me/messages")
        assert BodyGraphBuilder(resolved.index).build(resolved) is None

    def test_octet_stream(self, resolve: Resolve) -> None:
        resolved = resolve(
            "PUT",
            "/v1.0/drives/d1/items/i1/content",
            "binary data",
            headers={"Content-Type": "application/octet-stream"},
        )
        assert build(resolved).root == BinaryNode(data=b"binary data")

    def test_non_json_content_type(self, resolve: Resolve) -> None:
        resolved = resolve(
            "PUT",
            "/v1.0/drives/d1/items/i1/content",
            '{"looks": "like json"}',
            headers={"Content-Type": "text/plain"},
        )
        assert isinstance(build(resolved).root, BinaryNode)

    def test_undeclared_json_is_parsed(self, resolve: Resolve) -> None:
        resolved = resolve("PATCH", "/v1.0/me/messages/m1", '{"subject": "hi"}')
        assert resolved.content_type is None
        assert isinstance(build(resolved).root, ObjectNode)

    def test_declared_json_must_parse(self, resolve: Resolve) -> None:
        resolved = resolve(
            "POST",
            "/v1.0/me/messages",
            "{not json",
            headers={"Content-Type": "application/json; charset=utf-8"},
        )
        with pytest.raises(MalformedBodyError) as exc_info:
            build(resolved)
        assert exc_info.value.exit_code == 6


# ------------------------------------------------------------------ #
# Root naming
# ------------------------------------------------------------------ #


class TestRootType:
    def test_named_schema(self, resolve: Resolve) -> None:
        graph = build(resolve("POST", "/v1.0/me/messages", {"subject": "Hi"}))
        assert graph.type_name == "Message"
        assert isinstance(graph.root, ObjectNode)
        assert graph.root.declared_type == TypeRef.of("microsoft.graph.message")
        assert not graph.root.derived
        assert graph.root.child("subject") == StringNode(value="Hi")

    def test_action_body_is_synthesized(self, resolve: Resolve) -> None:
        graph = build(
            resolve("POST", "/v1.0/me/sendMail", {"message": {"subject": "x"}, "saveToSentItems": False})
        )
        assert graph.type_name == "SendMailPostRequestBody"
        root = graph.root
        assert isinstance(root, ObjectNode)
        assert root.declared_type == TypeRef(name="SendMailPostRequestBody", synthesized=True)
        message = root.child("message")
        assert isinstance(message, ObjectNode)
        assert message.declared_type.name == "microsoft.graph.message"
        assert root.child("saveToSentItems") == BooleanNode(value=False)

    def test_wrapper_action_fallback(self, resolve: Resolve) -> None:
        graph = build(
            resolve(
                "POST",
                "/v1.0/users/u1/assignLicenses",
                {"skuId": "45715bb8-13f9-4bf6-927f-ef96c102d394", "disabled": True},
            )
        )
        assert graph.type_name == "AssignLicensePostRequestBody"
        assert graph.root.declared_type.action == "assignLicense"
        assert graph.root.child("skuId") == GuidNode(value="45715bb8-13f9-4bf6-927f-ef96c102d394")
        assert graph.root.child("disabled") == BooleanNode(value=True)

    def test_reference_body(self, resolve: Resolve) -> None:
        graph = build(
            resolve(
                "POST",
                "/v1.0/groups/g1/acceptedSenders/$ref",
                {"@odata.id": "https://graph.microsoft.com/v1.0/users/u1"},
            )
        )
        assert graph.type_name == "ReferenceCreate"
        assert graph.root.child(ODATA_ID) == StringNode(
            value="https://graph.microsoft.com/v1.0/users/u1"
        )

    def test_object_body_for_scalar_schema(self, resolve: Resolve) -> None:
        resolved = with_schema(
            resolve("POST", "/v1.0/me/sendMail", {"message": {}}),
            SchemaShape(kind=SchemaKind.STRING),
            {"a": 1},
        )
        with pytest.raises(SchemaMismatchError):
            build(resolved)

    def test_array_root(self, resolve: Resolve) -> None:
        resolved = with_schema(
            resolve("POST", "/v1.0/me/sendMail", {"message": {}}),
            SchemaShape(
                kind=SchemaKind.ARRAY,
                items=SchemaShape(kind=SchemaKind.OBJECT, type_name="microsoft.graph.recipient"),
            ),
            [{"emailAddress": {"address": "a@contoso.com"}}],
        )
        graph = build(resolved)
        assert isinstance(graph.root, ArrayNode)
        assert graph.type_name == "Recipient"


# ------------------------------------------------------------------ #
# Derived types and OData members
# ------------------------------------------------------------------ #


class TestODataMembers:
    def test_odata_type_selects_derived_type(self, resolve: Resolve) -> None:
        body = {
            "subject": "Report",
            "attachments": [
                {
                    "@odata.type": "#microsoft.graph.fileAttachment",
                    "name": "report.txt",
                    "contentBytes": "SGVsbG8=",
                }
            ],
        }
        graph = build(resolve("POST", "/v1.0/me/messages", body))
        attachments = graph.root.child("attachments")
        assert isinstance(attachments, ArrayNode)
        (attachment,) = attachments.children
        assert isinstance(attachment, ObjectNode)
        assert attachment.derived
        assert attachment.declared_type == TypeRef.of("microsoft.graph.fileAttachment")
        assert attachment.child("name") == StringNode(value="report.txt")
        assert attachment.child("contentBytes") == BinaryNode(value="SGVsbG8=")

    def test_unknown_derived_type_keeps_declared(
        self, resolve: Resolve, caplog: pytest.LogCaptureFixture
    ) -> None:
        body = {"attachments": [{"@odata.type": "#microsoft.graph.nothing", "name": "a"}]}
        with caplog.at_level(logging.WARNING, logger="snipgen.ir.builder"):
            graph = build(resolve("POST", "/v1.0/me/messages", body))
        (attachment,) = graph.root.child("attachments").children
        assert not attachment.derived
        assert attachment.declared_type.name == "microsoft.graph.attachment"
        assert "Unknown derived type" in caplog.text

    def test_unknown_members_and_binds_go_to_additional_data(self, resolve: Resolve) -> None:
        body = {
            "subject": "x",
            "customThing": 1,
            "manager@odata.bind": "https://graph.microsoft.com/v1.0/users/u1",
        }
        graph = build(resolve("PATCH", "/v1.0/me/messages/m1", body))
        names = [entry.name for entry in graph.root.children]
        assert names == ["subject", ADDITIONAL_DATA]
        extra = graph.root.child(ADDITIONAL_DATA)
        assert isinstance(extra, MapNode)
        assert [e.name for e in extra.children] == ["customThing", "manager@odata.bind"]

    def test_member_names_match_case_insensitively(self, resolve: Resolve) -> None:
        graph = build(resolve("PATCH", "/v1.0/me/messages/m1", {"Subject": "x"}))
        assert graph.root.child("subject") == StringNode(value="x")

    def test_source_order_kept(self, resolve: Resolve) -> None:
        body = {"isRead": True, "subject": "x", "categories": ["a"]}
        graph = build(resolve("PATCH", "/v1.0/me/messages/m1", body))
        assert [e.name for e in graph.root.children] == ["isRead", "subject", "categories"]


# ------------------------------------------------------------------ #
# Enums
# ------------------------------------------------------------------ #


class TestEnums:
    def test_flag_enum_keeps_every_member_in_declaration_order(self, resolve: Resolve) -> None:
        graph = build(
            resolve(
                "POST",
                "/v1.0/communications/calls/c1/updateRecordingStatus",
                {"status": "failed | recording , notRecording"},
            )
        )
        status = graph.root.child("status")
        assert status == EnumNode(
            type_ref=TypeRef.of("microsoft.graph.recordingStatus"),
            members=("notRecording", "recording", "failed"),
            flags=True,
        )

    def test_single_valued_enum_keeps_first_match(self, resolve: Resolve) -> None:
        graph = build(resolve("PATCH", "/v1.0/me/messages/m1", {"importance": "High, low"}))
        importance = graph.root.child("importance")
        assert isinstance(importance, EnumNode)
        assert importance.members == ("high",)
        assert not importance.flags

    def test_unknown_member_falls_back(
        self, resolve: Resolve, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="snipgen.ir.builder"):
            graph = build(resolve("PATCH", "/v1.0/me/messages/m1", {"importance": "urgent"}))
        assert graph.root.child("importance").members == ("low",)
        assert "urgent" in caplog.text

    def test_nested_enum(self, resolve: Resolve) -> None:
        body = {"body": {"contentType": "html", "content": "<p>hi</p>"}}
        graph = build(resolve("PATCH", "/v1.0/me/messages/m1", body))
        content_type = graph.root.child("body").child("contentType")
        assert content_type.type_ref == TypeRef.of("microsoft.graph.bodyType")
        assert content_type.members == ("html",)


# ------------------------------------------------------------------ #
# Scalars
# ------------------------------------------------------------------ #


class TestScalars:
    def test_int64_member(self, resolve: Resolve) -> None:
        graph = build(
            resolve(
                "POST",
                "/v1.0/teams/t1/sendActivityNotification",
                {"activityType": "taskCreated", "chainId": 10},
            )
        )
        assert graph.type_name == "SendActivityNotificationPostRequestBody"
        assert graph.root.child("chainId") == NumberNode(value=10, width=64)

    @pytest.mark.parametrize(
        ("schema", "value", "expected"),
        [
            ({"kind": "integer", "formats": ("int32",)}, 5, NumberNode(value=5)),
            ({"kind": "integer", "formats": ("int64",)}, 5, NumberNode(value=5, width=64)),
            ({"kind": "number", "formats": ("double",)}, 1, NumberNode(value=1, width=64, numeric="float")),
            ({"kind": "number", "formats": ("float",)}, 1.5, NumberNode(value=1.5, width=32, numeric="float")),
            ({"kind": "number"}, 2, NumberNode(value=2, width=64, numeric="float")),
            ({"kind": "integer"}, 2**40, NumberNode(value=2**40, width=64)),
            ({"kind": "string", "formats": ("date-time",)}, "2024-01-01T00:00:00Z",
             DateTimeNode(value="2024-01-01T00:00:00Z")),
            ({"kind": "string", "formats": ("date",)}, "2024-01-01",
             DateTimeNode(value="2024-01-01", temporal="date")),
            ({"kind": "string", "formats": ("duration",)}, "PT1H",
             DateTimeNode(value="PT1H", temporal="duration")),
            ({"kind": "string", "formats": ("uuid",)}, "00000000-0000-0000-0000-000000000000",
             GuidNode(value="00000000-0000-0000-0000-000000000000")),
            ({"kind": "string", "formats": ("base64url",)}, "AAEC", BinaryNode(value="AAEC")),
            ({"kind": "boolean"}, True, BooleanNode(value=True)),
            ({"kind": "string"}, None, NullNode()),
        ],
    )
    def test_typed_values(
        self, resolve: Resolve, schema: dict[str, Any], value: Any, expected: Any
    ) -> None:
        shape = SchemaShape(
            kind=SchemaKind.OBJECT,
            properties={"v": SchemaShape(**schema)},
        )
        resolved = with_schema(resolve("POST", "/v1.0/me/sendMail", {"message": {}}), shape, {"v": value})
        assert build(resolved).root.child("v") == expected

    def test_undeclared_members_are_typed_from_json(self, resolve: Resolve) -> None:
        shape = SchemaShape(kind=SchemaKind.OBJECT)
        resolved = with_schema(
            resolve("POST", "/v1.0/me/sendMail", {"message": {}}),
            shape,
            {"n": 1.5, "big": 2**33, "s": "x", "m": {"k": [1, 2]}},
        )
        root = build(resolved).root
        assert [e.name for e in root.children] == [ADDITIONAL_DATA]
        extra = {e.name: e.node for e in root.child(ADDITIONAL_DATA).children}
        assert extra["n"] == NumberNode(value=1.5, width=64, numeric="float")
        assert extra["big"] == NumberNode(value=2**33, width=64)
        assert extra["s"] == StringNode(value="x")
        nested = extra["m"]
        assert isinstance(nested, MapNode)
        assert nested.children[0].node.item_type == ItemType(kind="number")


# ------------------------------------------------------------------ #
# Collections and mismatches
# ------------------------------------------------------------------ #


class TestCollections:
    def test_empty_object_array_is_typed(self, resolve: Resolve) -> None:
        graph = build(resolve("PATCH", "/v1.0/me/messages/m1", {"toRecipients": []}))
        assert graph.root.child("toRecipients") == ArrayNode(
            item_type=ItemType(kind="object", type_ref=TypeRef.of("microsoft.graph.recipient")),
        )

    def test_empty_string_array_is_typed(self, resolve: Resolve) -> None:
        graph = build(resolve("PATCH", "/v1.0/me/messages/m1", {"categories": []}))
        assert graph.root.child("categories") == ArrayNode(item_type=ItemType(kind="string"))

    def test_empty_object_is_kept(self, resolve: Resolve) -> None:
        graph = build(resolve("PATCH", "/v1.0/me/messages/m1", {"body": {}}))
        body = graph.root.child("body")
        assert isinstance(body, ObjectNode)
        assert body.children == ()
        assert body.declared_type.name == "microsoft.graph.itemBody"

    def test_object_where_array_expected(self, resolve: Resolve) -> None:
        with pytest.raises(SchemaMismatchError, match="toRecipients") as exc_info:
            build(resolve("PATCH", "/v1.0/me/messages/m1", {"toRecipients": {"emailAddress": {}}}))
        assert exc_info.value.exit_code == 7

    def test_array_where_object_expected(self, resolve: Resolve) -> None:
        with pytest.raises(SchemaMismatchError, match="body"):
            build(resolve("PATCH", "/v1.0/me/messages/m1", {"body": [1]}))

    def test_scalar_where_array_expected(self, resolve: Resolve) -> None:
        with pytest.raises(SchemaMismatchError, match="collection"):
            build(resolve("PATCH", "/v1.0/me/messages/m1", {"categories": "a"}))

    def test_walk_visits_every_node(self, resolve: Resolve) -> None:
        body = {"toRecipients": [{"emailAddress": {"address": "a@contoso.com"}}]}
        graph = build(resolve("PATCH", "/v1.0/me/messages/m1", body))
        kinds = [node.kind for node in walk(graph.root)]
        assert kinds == ["object", "array", "object", "object", "string"]

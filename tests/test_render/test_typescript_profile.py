"""TypeScript snippets rendered end to end against the Graph fixture."""

from __future__ import annotations

from typing import Callable

import pytest

from snipgen.ir import DateTimeNode, EnumNode, TypeRef
from snipgen.render.languages import TypeScriptProfile

Render = Callable[..., str]


@pytest.fixture
def typescript(render: Render) -> Callable[..., str]:
    def _render(*args, **kwargs) -> str:
        return render("typescript", *args, **kwargs)

    return _render


class TestCalls:
    def test_list_has_no_imports(self, typescript) -> None:
        assert typescript("GET", "/v1.0/me/messages") == (
            "// Code snippets are only available for the latest version. "
            "See the client library documentation for creating graphServiceClient.\n"
            "\n"
            "const result = await graphServiceClient.me.messages.get();\n"
        )

    def test_keyed_access(self, typescript) -> None:
        text = typescript("DELETE", "/v1.0/me/messages/m1")
        assert text.rstrip().endswith(
            'await graphServiceClient.me.messages.byMessageId("{message-id}").delete();'
        )

    def test_javascript_alias_renders_the_same(self, render: Render) -> None:
        assert render("javascript", "GET", "/v1.0/me/messages") == render(
            "typescript", "GET", "/v1.0/me/messages"
        )

    def test_stream_body(self, typescript) -> None:
        text = typescript(
            "PUT",
            "/v1.0/me/drive/root:/notes.txt:/content",
            "binary data",
            headers={"Content-Type": "application/octet-stream"},
        )
        assert 'const requestBody = Buffer.from("YmluYXJ5IGRhdGE=", "base64");' in text


class TestBodies:
    def test_object_literal(self, typescript) -> None:
        text = typescript("PATCH", "/v1.0/me/messages/m1", {"subject": "Hi", "importance": "high"})
        assert text.endswith(
            'import { Message } from "@microsoft/msgraph-sdk/models";\n'
            "\n"
            "const requestBody : Message = {\n"
            '\tsubject : "Hi",\n'
            '\timportance : "high",\n'
            "};\n"
            "\n"
            'await graphServiceClient.me.messages.byMessageId("{message-id}").patch(requestBody);\n'
        )

    def test_derived_type_is_asserted(self, typescript) -> None:
        body = {
            "attachments": [
                {"@odata.type": "#microsoft.graph.fileAttachment", "name": "a.txt", "contentBytes": "SGk="}
            ]
        }
        text = typescript("POST", "/v1.0/me/messages", body)
        assert 'import { FileAttachment, Message } from "@microsoft/msgraph-sdk/models";' in text
        lines = text.splitlines()
        start = lines.index("const requestBody : Message = {")
        assert lines[start:start + 9] == [
            "const requestBody : Message = {",
            "\tattachments : [",
            "\t\t{",
            '\t\t\tname : "a.txt",',
            '\t\t\tcontentBytes : "SGk=",',
            "\t\t} as FileAttachment,",
            "\t],",
            "};",
            "",
        ]
        assert "const result = await graphServiceClient.me.messages.post(requestBody);" in text

    def test_synthesized_body_import(self, typescript) -> None:
        text = typescript(
            "POST",
            "/v1.0/teams/t1/sendActivityNotification",
            {"activityType": "taskCreated", "chainId": 10},
        )
        assert (
            "import { SendActivityNotificationPostRequestBody } from "
            '"@microsoft/msgraph-sdk-teams/teams/item/sendActivityNotification";'
        ) in text
        assert "const requestBody : SendActivityNotificationPostRequestBody = {" in text
        assert "\tchainId : 10," in text

    def test_flag_enum_is_array_of_wire_values(self, typescript) -> None:
        text = typescript(
            "POST",
            "/v1.0/communications/calls/c1/updateRecordingStatus",
            {"status": "notRecording | recording , failed"},
        )
        assert '\tstatus : ["notRecording", "recording", "failed"],' in text

    def test_empty_array(self, typescript) -> None:
        text = typescript("PATCH", "/v1.0/me/messages/m1", {"toRecipients": []})
        assert "\ttoRecipients : []," in text

    def test_dates(self, typescript) -> None:
        text = typescript("PATCH", "/v1.0/me/messages/m1", {"receivedDateTime": "2024-01-01T00:00:00Z"})
        assert '\treceivedDateTime : new Date("2024-01-01T00:00:00Z"),' in text

    def test_additional_data(self, typescript) -> None:
        text = typescript(
            "PATCH",
            "/v1.0/me/messages/m1",
            {"subject": "x", "manager@odata.bind": "https://graph.microsoft.com/v1.0/users/u1"},
        )
        assert "\tadditionalData : {" in text
        assert '\t\t"manager@odata.bind" : "https://graph.microsoft.com/v1.0/users/u1",' in text


class TestConfiguration:
    def test_query_parameters(self, typescript) -> None:
        text = typescript("GET", "/v1.0/groups?$expand=members($select=id,displayName)")
        assert text.endswith(
            "const result = await graphServiceClient.groups.get({\n"
            "\tqueryParameters: {\n"
            '\t\texpand: ["members($select=id,displayName)"]\n'
            "\t}\n"
            "});\n"
        )

    def test_query_and_headers(self, typescript) -> None:
        text = typescript(
            "GET",
            "/v1.0/groups?$expand=members($select=id,displayName)",
            headers={"ConsistencyLevel": "eventual"},
        )
        assert (
            "\t},\n"
            "\theaders: {\n"
            '\t\t"ConsistencyLevel" : "eventual"\n'
            "\t}\n"
            "});\n"
        ) in text


class TestLiterals:
    def test_single_enum(self) -> None:
        node = EnumNode(type_ref=TypeRef.of("microsoft.graph.importance"), members=("low",))
        assert TypeScriptProfile().enum_literal(node) == '"low"'

    def test_date_only_stays_text(self) -> None:
        node = DateTimeNode(value="2024-01-01", temporal="date")
        assert TypeScriptProfile().datetime_literal(node) == '"2024-01-01"'

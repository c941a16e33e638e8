"""Python snippets rendered end to end against the Graph fixture."""

from __future__ import annotations

from typing import Callable

import pytest

from snipgen.ir import DateTimeNode
from snipgen.render.languages import PythonProfile

Render = Callable[..., str]


@pytest.fixture
def python(render: Render) -> Callable[..., str]:
    def _render(*args, **kwargs) -> str:
        return render("python", *args, **kwargs)

    return _render


class TestCalls:
    def test_list(self, python) -> None:
        assert python("GET", "/v1.0/me/messages") == (
            "# Code snippets are only available for the latest version. "
            "See the client library documentation for creating graph_client.\n"
            "\n"
            "from msgraph import GraphServiceClient\n"
            "\n"
            "result = await graph_client.me.messages.get()\n"
        )

    def test_keyed_access(self, python) -> None:
        text = python("GET", "/v1.0/me/messages/AAMkAGI2")
        assert 'result = await graph_client.me.messages.by_message_id("message-id").get()' in text

    def test_alternate_key(self, python) -> None:
        text = python("GET", "/v1.0/users(userPrincipalName='adele@contoso.com')")
        assert 'graph_client.users_with_user_principal_name("adele@contoso.com").get()' in text

    def test_type_cast(self, python) -> None:
        text = python("GET", "/v1.0/groups/g1/members/microsoft.graph.user")
        assert 'graph_client.groups.by_group_id("group-id").members.graph_user.get()' in text

    def test_stream_body(self, python) -> None:
        text = python(
            "PUT",
            "/v1.0/me/drive/root:/notes.txt:/content",
            "binary data",
            headers={"Content-Type": "application/octet-stream"},
        )
        assert "import base64" in text
        assert 'request_body = base64.b64decode("YmluYXJ5IGRhdGE=")' in text
        assert (
            'result = await graph_client.drives.by_drive_id("drive-id")'
            '.items.by_drive_item_id("driveItem-id").content.put(request_body)'
        ) in text


class TestBodies:
    def test_message_body(self, python) -> None:
        text = python("PATCH", "/v1.0/me/messages/m1", {"subject": "Hi", "importance": "high"})
        assert text.endswith(
            "from msgraph import GraphServiceClient\n"
            "from msgraph.generated.models.importance import Importance\n"
            "from msgraph.generated.models.message import Message\n"
            "\n"
            "request_body = Message(\n"
            '\tsubject = "Hi",\n'
            "\timportance = Importance.High,\n"
            ")\n"
            "\n"
            'await graph_client.me.messages.by_message_id("message-id").patch(request_body)\n'
        )

    def test_synthesized_body_import(self, python) -> None:
        text = python(
            "POST",
            "/v1.0/teams/t1/sendActivityNotification",
            {"activityType": "taskCreated", "chainId": 10},
        )
        assert (
            "from msgraph.generated.teams.item.send_activity_notification"
            ".send_activity_notification_post_request_body"
            " import SendActivityNotificationPostRequestBody"
        ) in text
        assert "request_body = SendActivityNotificationPostRequestBody(" in text
        assert "\tchain_id = 10," in text

    def test_flag_enum(self, python) -> None:
        text = python(
            "POST",
            "/v1.0/communications/calls/c1/updateRecordingStatus",
            {"status": "notRecording | recording , failed"},
        )
        assert (
            "\tstatus = RecordingStatus.NotRecording | RecordingStatus.Recording | RecordingStatus.Failed,"
        ) in text
        assert "from msgraph.generated.models.recording_status import RecordingStatus" in text

    def test_empty_array(self, python) -> None:
        text = python("PATCH", "/v1.0/me/messages/m1", {"toRecipients": []})
        assert "\tto_recipients = []," in text

    def test_nested_objects(self, python) -> None:
        text = python(
            "POST",
            "/v1.0/me/sendMail",
            {"message": {"toRecipients": [{"emailAddress": {"address": "a@contoso.com"}}]}},
        )
        lines = text.splitlines()
        start = lines.index("request_body = SendMailPostRequestBody(")
        assert lines[start:start + 12] == [
            "request_body = SendMailPostRequestBody(",
            "\tmessage = Message(",
            "\t\tto_recipients = [",
            "\t\t\tRecipient(",
            "\t\t\t\temail_address = EmailAddress(",
            '\t\t\t\t\taddress = "a@contoso.com",',
            "\t\t\t\t),",
            "\t\t\t),",
            "\t\t],",
            "\t),",
            ")",
            "",
        ]
        assert "from msgraph.generated.models.email_address import EmailAddress" in text
        assert "from msgraph.generated.models.recipient import Recipient" in text

    def test_additional_data(self, python) -> None:
        text = python(
            "PATCH",
            "/v1.0/me/messages/m1",
            {"subject": "x", "manager@odata.bind": "https://graph.microsoft.com/v1.0/users/u1"},
        )
        assert "\tadditional_data = {" in text
        assert '\t\t"manager@odata.bind" : "https://graph.microsoft.com/v1.0/users/u1",' in text

    def test_literal_imports(self, python) -> None:
        text = python(
            "PATCH",
            "/v1.0/me/messages/m1",
            {
                "receivedDateTime": "2024-01-01T00:00:00Z",
                "isRead": True,
                "conversationIndex": "AAE=",
            },
        )
        assert '\treceived_date_time = datetime.fromisoformat("2024-01-01T00:00:00Z"),' in text
        assert "\tis_read = True," in text
        assert '\tconversation_index = base64.urlsafe_b64decode("AAE="),' in text
        assert "from datetime import datetime" in text
        assert "import base64" in text

    def test_guid(self, python) -> None:
        text = python(
            "POST",
            "/v1.0/users/u1/assignLicense",
            {"skuId": "45715bb8-13f9-4bf6-927f-ef96c102d394"},
        )
        assert '\tsku_id = UUID("45715bb8-13f9-4bf6-927f-ef96c102d394"),' in text
        assert "from uuid import UUID" in text


class TestConfiguration:
    def test_query_parameters(self, python) -> None:
        text = python("GET", "/v1.0/groups?$expand=members($select=id,displayName)")
        assert text.endswith(
            "query_params = GroupsRequestBuilder.GroupsRequestBuilderGetQueryParameters(\n"
            '\texpand = ["members($select=id,displayName)"],\n'
            ")\n"
            "\n"
            "request_configuration = RequestConfiguration(\n"
            "\tquery_parameters = query_params,\n"
            ")\n"
            "\n"
            "result = await graph_client.groups.get(request_configuration = request_configuration)\n"
        )
        assert "from kiota_abstractions.base_request_configuration import RequestConfiguration" in text
        assert "from msgraph.generated.groups.groups_request_builder import GroupsRequestBuilder" in text

    def test_headers_only(self, python) -> None:
        text = python("GET", "/v1.0/groups", headers={"ConsistencyLevel": "eventual"})
        assert "request_configuration = RequestConfiguration()\n" in text
        assert 'request_configuration.headers.add("ConsistencyLevel", "eventual")' in text
        assert "GroupsRequestBuilder" not in text


class TestLiterals:
    def test_duration_stays_text(self) -> None:
        node = DateTimeNode(value="PT1H", temporal="duration")
        assert PythonProfile().datetime_literal(node) == '"PT1H"'

    def test_reserved_property(self) -> None:
        assert PythonProfile().case_property("from") == "from_"
        assert PythonProfile().case_property("displayName") == "display_name"

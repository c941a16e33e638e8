"""Graph CLI commands rendered end to end against the Graph fixture."""

from __future__ import annotations

from typing import Callable

import pytest

from snipgen.models import (
    BoundParameter,
    FunctionSegment,
    Header,
    HTTPMethod,
    IndexedCollectionSegment,
    LiteralSegment,
    PathParameterSegment,
    QueryOption,
    ResolvedRequest,
    SchemaKind,
)
from snipgen.render import SnippetRenderer
from snipgen.render.languages import GraphCliProfile
from snipgen.render.languages.graphcli import option_name

Render = Callable[..., str]


@pytest.fixture
def cli(render: Render) -> Callable[..., str]:
    def _render(*args, **kwargs) -> str:
        return render("cli", *args, **kwargs)

    return _render


class TestCommands:
    def test_list(self, cli) -> None:
        assert cli("GET", "/v1.0/me/messages") == "mgc me messages list\n"

    def test_keyed_get(self, cli) -> None:
        assert cli("GET", "/v1.0/me/messages/AAMkAGI2") == (
            "mgc me messages get --message-id {message-id}\n"
        )

    def test_delete(self, cli) -> None:
        assert cli("DELETE", "/v1.0/me/messages/m1") == (
            "mgc me messages delete --message-id {message-id}\n"
        )

    def test_nested_keys_in_path_order(self, cli) -> None:
        text = cli("GET", "/v1.0/groups/g1/members/microsoft.graph.user")
        assert text == "mgc groups members graph-user list --group-id {group-id}\n"

    def test_count(self, cli) -> None:
        assert cli("GET", "/v1.0/me/messages/$count") == "mgc me messages count get\n"

    def test_alternate_key(self, cli) -> None:
        text = cli("GET", "/v1.0/users(userPrincipalName='adele@contoso.com')")
        assert text == (
            "mgc users-with-user-principal-name get --user-principal-name adele@contoso.com\n"
        )

    def test_post_to_collection_creates(self, cli) -> None:
        assert cli("POST", "/v1.0/me/messages") == "mgc me messages create\n"

    def test_action_keeps_method(self, cli) -> None:
        text = cli("POST", "/v1.0/me/sendMail", {"saveToSentItems": False})
        assert text == "mgc me send-mail post --body '{\"saveToSentItems\": false}'\n"

    def test_reference(self, cli) -> None:
        text = cli(
            "POST",
            "/v1.0/groups/g1/acceptedSenders/$ref",
            {"@odata.id": "https://graph.microsoft.com/v1.0/users/u1"},
        )
        assert text.startswith("mgc groups accepted-senders ref post --group-id {group-id} --body '")


class TestOptions:
    def test_query_options(self, cli) -> None:
        text = cli("GET", "/v1.0/me/messages?$top=5&$count=true&$filter=isRead%20eq%20false")
        assert text == "mgc me messages list --top 5 --count true --filter 'isRead eq false'\n"

    def test_expand_is_quoted(self, cli) -> None:
        text = cli("GET", "/v1.0/groups?$expand=members($select=id,displayName)")
        assert text == "mgc groups list --expand 'members($select=id,displayName)'\n"

    def test_header(self, cli) -> None:
        text = cli("GET", "/v1.0/groups", headers={"ConsistencyLevel": "eventual"})
        assert text == "mgc groups list --consistency-level eventual\n"

    def test_clashing_names_are_suffixed(self) -> None:
        resolved = ResolvedRequest(
            method=HTTPMethod.GET,
            api_version="v1.0",
            path="/tests/1/results",
            template_path="/tests/{id}/results",
            segments=(
                LiteralSegment(name="tests"),
                PathParameterSegment(name="id"),
                LiteralSegment(name="results"),
            ),
            query_options=(QueryOption(name="id", raw_name="id", value="10"),),
            headers=(Header(name="id", value="test-header"),),
        )
        text = SnippetRenderer(GraphCliProfile()).render(resolved, None)
        assert text == "mgc tests results get --id {id} --id-query 10 --id-header test-header\n"

    def test_bound_parameters(self) -> None:
        segments = (
            LiteralSegment(name="reports"),
            FunctionSegment(
                name="getGroupArchivedPrintJobs",
                bound_params=(
                    BoundParameter(name="groupId", value="{groupId}", placeholder=True),
                    BoundParameter(name="top", value="5", kind=SchemaKind.INTEGER),
                ),
            ),
        )
        profile = GraphCliProfile()
        assert SnippetRenderer(profile).chain(segments) == " reports get-group-archived-print-jobs"
        assert profile.path_options(segments) == {"group-id": "{groupId}", "top": "5"}

    def test_repeated_key_keeps_first_position(self) -> None:
        segments = (
            IndexedCollectionSegment(collection_name="users", key_param_name="user-id"),
            PathParameterSegment(name="id"),
            IndexedCollectionSegment(collection_name="users", key_param_name="user-id"),
        )
        assert list(GraphCliProfile().path_options(segments)) == ["user-id", "id"]


class TestBodies:
    def test_patch_body(self, cli) -> None:
        text = cli("PATCH", "/v1.0/me/messages/m1", {"subject": "Hi"})
        assert text == (
            "mgc me messages patch --message-id {message-id} --body '{\"subject\": \"Hi\"}'\n"
        )

    def test_binary_body_is_a_file(self, cli) -> None:
        text = cli(
            "PUT",
            "/v1.0/me/drive/root:/notes.txt:/content",
            "binary data",
            headers={"Content-Type": "application/octet-stream"},
        )
        assert text == (
            "mgc drives items content put --drive-id {drive-id} "
            "--drive-item-id {driveItem-id} --file <file path>\n"
        )

    def test_multiline_body_continues_lines(self) -> None:
        body = GraphCliProfile().body_literal('{\n  "name": "test"\n}')
        assert body == "'{\\\n  \"name\": \"test\"\\\n}'"

    def test_single_quotes_escaped(self) -> None:
        assert GraphCliProfile().body_literal("it's") == "'it'\\''s'"


class TestNaming:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("users", "users"),
            ("licenseDetails", "license-details"),
            ("licenseDetails-id", "license-details-id"),
            ("singleValueLegacyExtendedProperty_id", "single-value-legacy-extended-property-id"),
            ("graphOrgContact", "graph-org-contact"),
        ],
    )
    def test_option_name(self, name: str, expected: str) -> None:
        assert option_name(name) == expected

    def test_no_imports_or_prologue(self, cli) -> None:
        assert not cli("GET", "/v1.0/groups").startswith("#")

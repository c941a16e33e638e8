"""Tests for splitting OData control members out of JSON objects."""

from __future__ import annotations

from snipgen.ir.annotations import Member, MemberRole, split_annotations


class TestSplitAnnotations:
    def test_plain_object(self) -> None:
        annotated = split_annotations({"a": 1, "b": "x"})
        assert annotated.type_override is None
        assert annotated.members == (
            Member("a", 1, MemberRole.MEMBER),
            Member("b", "x", MemberRole.MEMBER),
        )

    def test_type_override_strips_hash(self) -> None:
        annotated = split_annotations({"@odata.type": "#microsoft.graph.fileAttachment", "name": "a"})
        assert annotated.type_override == "microsoft.graph.fileAttachment"
        assert [m.name for m in annotated.members] == ["name"]

    def test_blank_type_override_ignored(self) -> None:
        annotated = split_annotations({"@odata.type": "#", "name": "a"})
        assert annotated.type_override is None

    def test_non_string_type_override_ignored(self) -> None:
        assert split_annotations({"@odata.type": 5}).type_override is None

    def test_roles_keep_order(self) -> None:
        annotated = split_annotations(
            {
                "members@odata.bind": ["https://graph.microsoft.com/v1.0/users/u1"],
                "@odata.id": "https://graph.microsoft.com/v1.0/users/u2",
                "displayName": "Team",
            }
        )
        assert [(m.name, m.role) for m in annotated.members] == [
            ("members@odata.bind", MemberRole.BIND),
            ("@odata.id", MemberRole.ODATA_ID),
            ("displayName", MemberRole.MEMBER),
        ]

"""Pre-pass separating OData control members from ordinary JSON members.

``@odata.type``, ``@odata.id`` and ``<name>@odata.bind`` ride along inside
plain JSON objects. :func:`split_annotations` pulls them out once, so the
schema-driven walk in :mod:`snipgen.ir.builder` only ever sees members
tagged with a :class:`MemberRole`.
"""

from __future__ import annotations

import enum
from typing import Any, NamedTuple, Optional

ODATA_TYPE = "@odata.type"
ODATA_ID = "@odata.id"
BIND_SUFFIX = "@odata.bind"


class MemberRole(str, enum.Enum):
    MEMBER = "member"
    ODATA_ID = "odata_id"
    BIND = "bind"


class Member(NamedTuple):
    name: str
    value: Any
    role: MemberRole


class AnnotatedObject(NamedTuple):
    """A JSON object with its derived-type override lifted out.

    ``type_override`` has the leading ``#`` removed.
    """

    type_override: Optional[str]
    members: tuple[Member, ...]


def split_annotations(value: dict[str, Any]) -> AnnotatedObject:
    """Classify the members of a JSON object, keeping their order.

    >>> split_annotations({"@odata.type": "#microsoft.graph.user", "id": "1"})
    AnnotatedObject(type_override='microsoft.graph.user', members=(Member(name='id', value='1', role=<MemberRole.MEMBER: 'member'>),))
    """
    override: Optional[str] = None
    members: list[Member] = []
    for name, member_value in value.items():
        if name == ODATA_TYPE:
            if isinstance(member_value, str) and member_value.strip("# "):
                override = member_value.strip().lstrip("#")
            continue
        if name == ODATA_ID:
            members.append(Member(name, member_value, MemberRole.ODATA_ID))
        elif name.endswith(BIND_SUFFIX):
            members.append(Member(name, member_value, MemberRole.BIND))
        else:
            members.append(Member(name, member_value, MemberRole.MEMBER))
    return AnnotatedObject(override, tuple(members))

"""Canonicalise legacy URL shapes before they are matched against the index.

Some request shapes predate the current API description and have no path
template of their own; they are rewritten to the template the SDKs expose
instead. The table is small and explicit: each entry is a
compiled pattern, its replacement and a one-line reason, and the first
matching entry wins.

Rewrites operate on the path *after* the version segment::

    >>> rewrite_path("/me/drive/root:/Documents/report.docx:/content")
    '/drives/{drive-id}/items/{driveItem-id}/content'
"""

from __future__ import annotations

import logging
import re
from typing import NamedTuple

logger = logging.getLogger(__name__)


class PathRewrite(NamedTuple):
    pattern: re.Pattern[str]
    replacement: str
    reason: str


_OWNER = r"(?:me|users/[^/]+)"

REWRITES: tuple[PathRewrite, ...] = (
    PathRewrite(
        re.compile(rf"^/{_OWNER}/drive/root:/[^:]*:(?=/|$)", re.IGNORECASE),
        "/drives/{drive-id}/items/{driveItem-id}",
        "path-addressed drive item",
    ),
    PathRewrite(
        re.compile(rf"^/{_OWNER}/drive/root(?=/|$)", re.IGNORECASE),
        "/drives/{drive-id}/items/root",
        "drive root alias",
    ),
    PathRewrite(
        re.compile(rf"^/{_OWNER}/drive/items(?=/|$)", re.IGNORECASE),
        "/drives/{drive-id}/items",
        "drive items through the owner",
    ),
)


def rewrite_path(path: str, table: tuple[PathRewrite, ...] = REWRITES) -> str:
    """Apply the first matching rewrite in *table* to *path*.

    Returns:
        The rewritten path, or *path* unchanged when nothing matches.
    """
    for rewrite in table:
        new_path, count = rewrite.pattern.subn(rewrite.replacement, path, count=1)
        if count:
            logger.debug("Rewrote %s -> %s (%s)", path, new_path, rewrite.reason)
            return new_path
    return path

"""Tests for legacy path rewrites."""

from __future__ import annotations

import re

import pytest

from snipgen.resolver.rewrites import PathRewrite, rewrite_path


class TestRewritePath:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            (
                "/me/drive/root:/Documents/report.docx:/content",
                "/drives/{drive-id}/items/{driveItem-id}/content",
            ),
            (
                "/users/u1/drive/root:/a.txt:",
                "/drives/{drive-id}/items/{driveItem-id}",
            ),
            ("/me/drive/root", "/drives/{drive-id}/items/root"),
            ("/me/drive/root/children", "/drives/{drive-id}/items/root/children"),
            ("/users/u1/drive/items/i1/content", "/drives/{drive-id}/items/i1/content"),
            ("/ME/Drive/Root", "/drives/{drive-id}/items/root"),
        ],
    )
    def test_rewrites(self, path: str, expected: str) -> None:
        assert rewrite_path(path) == expected

    @pytest.mark.parametrize(
        "path",
        ["/me/messages", "/me/drive", "/me/driveRoot", "/groups/g1/drive/root"],
    )
    def test_unmatched_paths_unchanged(self, path: str) -> None:
        assert rewrite_path(path) == path

    def test_first_match_wins(self) -> None:
        table = (
            PathRewrite(re.compile(r"^/a"), "/first", "one"),
            PathRewrite(re.compile(r"^/a"), "/second", "two"),
        )
        assert rewrite_path("/a/b", table) == "/first/b"

    def test_empty_table(self) -> None:
        assert rewrite_path("/me/drive/root", ()) == "/me/drive/root"

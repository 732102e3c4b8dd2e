# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for PathResolver and decode_url_path."""

import os

import pytest

from genro_index.exceptions import MalformedRequest, TraversalAttempt
from genro_index.resolver import PathResolver, decode_url_path


@pytest.fixture
def resolver(tmp_path):
    return PathResolver(tmp_path)


class TestDecodeUrlPath:
    """Strict percent-decoding."""

    def test_plain(self):
        assert decode_url_path("/a/b") == "/a/b"

    def test_utf8_escapes(self):
        assert decode_url_path("/caf%C3%A9/x%20y") == "/café/x y"

    @pytest.mark.parametrize("path", ["/%", "/%zz", "/a%4", "/%E0%A4%A"])
    def test_bad_escape(self, path):
        with pytest.raises(MalformedRequest) as exc_info:
            decode_url_path(path)
        assert exc_info.value.status_code == 400

    def test_invalid_utf8(self):
        with pytest.raises(MalformedRequest):
            decode_url_path("/%FF%FE")


class TestPathResolver:
    """Resolution against the root."""

    def test_root(self, resolver, tmp_path):
        resolved = resolver.resolve("/")
        assert resolved.path == str(tmp_path)
        assert resolved.directory == "/"
        assert resolved.has_parent is False

    def test_subdirectory(self, resolver, tmp_path):
        resolved = resolver.resolve("/sub%20dir/")
        assert resolved.path == os.path.join(str(tmp_path), "sub dir")
        assert resolved.directory == "/sub dir/"
        assert resolved.has_parent is True

    def test_already_decoded(self, resolver, tmp_path):
        resolved = resolver.resolve("/100%", decoded=True)
        assert resolved.path == os.path.join(str(tmp_path), "100%")

    def test_dotdot_inside_root(self, resolver, tmp_path):
        """``..`` that stays inside the root is fine."""
        resolved = resolver.resolve("/a/../b")
        assert resolved.path == os.path.join(str(tmp_path), "b")

    def test_dotdot_back_to_root(self, resolver, tmp_path):
        resolved = resolver.resolve("/a/..")
        assert resolved.path == str(tmp_path)
        assert resolved.has_parent is False

    @pytest.mark.parametrize(
        "url_path",
        ["/../", "/..", "/a/../../etc/passwd", "/%2e%2e/%2e%2e/etc", "/..%2Fsecret"],
    )
    def test_traversal(self, resolver, url_path):
        with pytest.raises(TraversalAttempt) as exc_info:
            resolver.resolve(url_path)
        assert exc_info.value.status_code == 403

    def test_sibling_with_common_prefix(self, tmp_path):
        """/srv/www must not accept /srv/www-private."""
        resolver = PathResolver(tmp_path / "www")
        with pytest.raises(TraversalAttempt):
            resolver.resolve("/../www-private")

    def test_null_byte(self, resolver):
        with pytest.raises(MalformedRequest):
            resolver.resolve("/a%00b")

    def test_malformed(self, resolver):
        with pytest.raises(MalformedRequest):
            resolver.resolve("/%zz")

    def test_relative_root_is_made_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        resolver = PathResolver("public")
        assert resolver.root == os.path.join(os.getcwd(), "public")
        assert resolver.root_path.endswith(os.sep)

    def test_empty_root(self):
        with pytest.raises(TypeError):
            PathResolver("")

    def test_filesystem_root(self):
        resolver = PathResolver("/")
        assert resolver.resolve("/").has_parent is False
        assert resolver.resolve("/../..").path == "/"
        assert resolver.resolve("/etc").has_parent is True

# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Shared fixtures: ASGI send capture, scopes, in-memory filesystem."""

from __future__ import annotations

import asyncio
import errno
import os
import posixpath
import stat
from types import SimpleNamespace
from typing import Any
from urllib.parse import unquote

import pytest

from genro_index.icons import IconCatalog


class MockSend:
    """Capture ASGI send messages for testing."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    @property
    def start_message(self) -> dict[str, Any]:
        """Get the http.response.start message."""
        return self.messages[0]

    @property
    def status(self) -> int:
        return self.start_message["status"]

    @property
    def headers(self) -> dict[bytes, bytes]:
        return dict(self.start_message["headers"])

    @property
    def body(self) -> bytes:
        return b"".join(
            m.get("body", b"") for m in self.messages if m["type"] == "http.response.body"
        )

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")


async def mock_receive() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


def make_scope(
    raw_path: str = "/",
    method: str = "GET",
    accept: str | None = None,
    root_path: str = "",
    headers: list[tuple[bytes, bytes]] | None = None,
) -> dict[str, Any]:
    """HTTP scope for ``raw_path`` (percent-encoded, as sent on the wire)."""
    raw_headers = list(headers or [])
    if accept is not None:
        raw_headers.append((b"accept", accept.encode("latin-1")))
    return {
        "type": "http",
        "method": method,
        "path": unquote(raw_path),
        "raw_path": raw_path.encode("latin-1"),
        "root_path": root_path,
        "query_string": b"",
        "headers": raw_headers,
    }


class FakeFilesystem:
    """
    In-memory ``Filesystem``.

    Directories and files are registered by absolute POSIX path. Stat and
    listdir failures are injected per path; every call is recorded, and the
    number of stats in flight is tracked.
    """

    def __init__(self, root: str = "/srv") -> None:
        self.nodes: dict[str, SimpleNamespace] = {}
        self.contents: dict[str, str] = {}
        self.stat_errors: dict[str, OSError] = {}
        self.listdir_errors: dict[str, OSError] = {}
        self.delays: dict[str, float] = {}
        self.calls: list[tuple[str, str]] = []
        self.active = 0
        self.max_active = 0
        self.add_dir(root)

    def add_dir(self, path: str, mtime: float = 1_700_000_000.0) -> None:
        self.nodes[path] = SimpleNamespace(st_size=4096, st_mtime=mtime, st_mode=stat.S_IFDIR | 0o755)

    def add_file(self, path: str, size: int = 0, mtime: float = 1_700_000_000.0, text: str = "") -> None:
        self.nodes[path] = SimpleNamespace(st_size=size, st_mtime=mtime, st_mode=stat.S_IFREG | 0o644)
        self.contents[path] = text

    def fail_stat(self, path: str, code: int) -> None:
        self.stat_errors[path] = OSError(code, os.strerror(code), path)

    def fail_listdir(self, path: str, code: int) -> None:
        self.listdir_errors[path] = OSError(code, os.strerror(code), path)

    async def stat(self, path: str) -> Any:
        self.calls.append(("stat", path))
        path = posixpath.normpath(path)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(path, 0))
        finally:
            self.active -= 1
        if path in self.stat_errors:
            raise self.stat_errors[path]
        if path not in self.nodes:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
        return self.nodes[path]

    async def listdir(self, path: str) -> list[str]:
        self.calls.append(("listdir", path))
        if path in self.listdir_errors:
            raise self.listdir_errors[path]
        children = [
            posixpath.basename(node) for node in self.nodes
            if node != path and posixpath.dirname(node) == path
        ]
        children.extend(
            posixpath.basename(node) for node in self.stat_errors
            if posixpath.dirname(node) == path and node not in self.nodes
        )
        return children

    async def read_text(self, path: str, encoding: str = "utf-8") -> str:
        self.calls.append(("read_text", path))
        if path not in self.contents:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
        return self.contents[path]


@pytest.fixture
def send() -> MockSend:
    """Create a mock send callable."""
    return MockSend()


@pytest.fixture
def receive() -> Any:
    return mock_receive


@pytest.fixture
def fake_fs() -> FakeFilesystem:
    """Fake filesystem rooted at /srv."""
    return FakeFilesystem("/srv")


@pytest.fixture
def tree(tmp_path: Any) -> Any:
    """
    A small directory tree::

        tmp_path/
            a/
                nested.json
            b.txt          (5 bytes)
            .env
            sub dir/
                x y.txt
    """
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "nested.json").write_text("{}")
    (tmp_path / "b.txt").write_text("hello")
    (tmp_path / ".env").write_text("SECRET=1")
    (tmp_path / "sub dir").mkdir()
    (tmp_path / "sub dir" / "x y.txt").write_text("xy")
    return tmp_path


@pytest.fixture(autouse=True)
def _clear_icon_cache() -> Any:
    IconCatalog.clear_cache()
    yield
    IconCatalog.clear_cache()


@pytest.fixture
def scope_for() -> Any:
    """Factory fixture: ``scope_for("/raw%20path", accept=...)``."""
    return make_scope


@pytest.fixture
def send_factory() -> Any:
    """Factory fixture for extra ``MockSend`` instances."""
    return MockSend

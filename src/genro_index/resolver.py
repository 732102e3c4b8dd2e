# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Request path resolution with traversal safety.

``PathResolver`` maps a URL path onto the served root::

    root = "/srv/www"
    "/docs/%C3%A8"   ->  /srv/www/docs/è           (has_parent=True)
    "/"              ->  /srv/www                   (has_parent=False)
    "/../etc"        ->  TraversalAttempt (403)
    "/%E0%A4%A"      ->  MalformedRequest (400)

The containment check runs on the *normalized* path only: ``..`` segments and
encoded separators are already collapsed when the prefix is compared, so
they cannot smuggle the path out of the root. No filesystem access happens
here.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote

from .exceptions import MalformedRequest, TraversalAttempt

__all__ = ["PathResolver", "ResolvedPath", "decode_url_path"]

logger = logging.getLogger("genro_index.resolver")

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


@dataclass(frozen=True)
class ResolvedPath:
    """Outcome of a successful resolution.

    Attributes:
        directory: URL-decoded request path, as the client sees it.
        path: Absolute, normalized filesystem path inside the root.
        has_parent: False only when ``path`` is the root itself.
    """

    directory: str
    path: str
    has_parent: bool


def decode_url_path(url_path: str) -> str:
    """
    Percent-decode a URL path, strictly.

    Raises:
        MalformedRequest: a ``%`` not followed by two hex digits, or escapes
            that do not form valid UTF-8.
    """
    if _BAD_ESCAPE.search(url_path):
        raise MalformedRequest()
    try:
        return unquote(url_path, errors="strict")
    except UnicodeDecodeError as e:
        raise MalformedRequest() from e


class PathResolver:
    """Resolve request paths against a fixed root directory."""

    __slots__ = ("root", "root_path")

    def __init__(self, root: str | Path) -> None:
        if not root:
            raise TypeError("PathResolver() root path required")
        self.root = os.path.abspath(os.fspath(root))
        # Always ends with the separator: "/srv/www/" (or "/" for the fs root).
        self.root_path = os.path.join(self.root, "")

    def resolve(self, url_path: str, decoded: bool = False) -> ResolvedPath:
        """
        Resolve ``url_path`` to a filesystem path inside the root.

        Args:
            url_path: Request path, percent-encoded unless ``decoded``.
            decoded: True if the caller already percent-decoded the path.

        Raises:
            MalformedRequest: undecodable path or embedded null byte.
            TraversalAttempt: the normalized path is outside the root.
        """
        directory = url_path if decoded else decode_url_path(url_path)
        path = os.path.normpath(self.root_path + directory.lstrip("/"))

        if "\0" in path:
            raise MalformedRequest()

        if not (path + os.sep).startswith(self.root_path):
            logger.debug('malicious path "%s"', path)
            raise TraversalAttempt()

        has_parent = os.path.join(os.path.abspath(path), "") != self.root_path
        return ResolvedPath(directory=directory, path=path, has_parent=has_parent)

    def __repr__(self) -> str:
        return f"PathResolver(root={self.root!r})"

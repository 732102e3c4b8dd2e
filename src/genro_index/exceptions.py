# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Exception classes for the directory index pipeline.

Request-fatal conditions are raised as ``HTTPException`` subclasses. The
index middleware lets them propagate; ``ErrorMiddleware`` (or any outer
handler) turns them into a response with ``status_code``.

Taxonomy
--------
=====================  ======  ==========================================
Exception              Status  Raised when
=====================  ======  ==========================================
MalformedRequest       400     bad percent-encoding, embedded null byte
TraversalAttempt       403     resolved path escapes the configured root
NotAcceptable          406     no representation matches the Accept header
NameTooLong            414     filesystem reports ENAMETOOLONG
FilesystemFailure      500     unexpected stat/readdir errors
=====================  ======  ==========================================

``NotApplicable`` is not an HTTP error. It signals that the request path
does not exist or is not a directory, so the middleware hands the request to
the next application instead of answering it.

Per-entry stat failures of a recoverable class never become exceptions: the
lister absorbs them into a placeholder ``EntryStat`` (see ``listing.py``).

Example:
    >>> raise HTTPException(405, detail="Method Not Allowed", headers={"Allow": "GET"})
    >>> raise TraversalAttempt()
"""

from __future__ import annotations

import errno as errno_module

__all__ = [
    "HTTPException",
    "HTTPBadRequest",
    "HTTPForbidden",
    "MalformedRequest",
    "TraversalAttempt",
    "NotAcceptable",
    "NameTooLong",
    "FilesystemFailure",
    "NotApplicable",
    "errno_name",
]


class HTTPException(Exception):
    """
    HTTP exception with status code and detail.

    Attributes:
        status_code: HTTP status code (expected 4xx or 5xx, not validated)
        detail: Error detail message
        headers: Response headers as list of tuples (supports duplicate names)
    """

    def __init__(
        self,
        status_code: int,
        detail: str = "",
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
    ) -> None:
        """
        Initialize HTTP exception.

        Args:
            status_code: HTTP status code (4xx, 5xx expected)
            detail: Error detail message (default: "")
            headers: Response headers as dict or list of tuples (default: None).
                     Dict is converted to list internally to support duplicate names.
        """
        self.status_code = status_code
        self.detail = detail
        if headers is None:
            self.headers: list[tuple[str, str]] | None = None
        elif isinstance(headers, dict):
            self.headers = list(headers.items())
        else:
            self.headers = list(headers)
        super().__init__(detail)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, detail={self.detail!r})"


class HTTPBadRequest(HTTPException):
    """HTTP 400 Bad Request exception."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(400, detail=detail)


class HTTPForbidden(HTTPException):
    """HTTP 403 Forbidden exception."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(403, detail=detail)


class MalformedRequest(HTTPBadRequest):
    """Request path cannot be decoded or contains a null byte."""


class TraversalAttempt(HTTPForbidden):
    """Normalized request path falls outside the served root."""


class NotAcceptable(HTTPException):
    """HTTP 406: none of text/html, text/plain, application/json is acceptable."""

    def __init__(self, detail: str = "Not Acceptable") -> None:
        super().__init__(406, detail=detail)


class NameTooLong(HTTPException):
    """HTTP 414: the resolved path exceeds the filesystem name limits."""

    def __init__(self, detail: str = "URI Too Long") -> None:
        super().__init__(414, detail=detail)


class FilesystemFailure(HTTPException):
    """
    HTTP 500 caused by an unexpected filesystem error.

    The originating ``OSError`` is chained as ``__cause__`` by the raiser;
    ``code`` keeps its symbolic errno name (e.g. ``"EIO"``) when known.
    """

    def __init__(self, detail: str = "Internal Server Error", code: str | None = None) -> None:
        super().__init__(500, detail=detail)
        self.code = code

    @classmethod
    def from_os_error(cls, error: OSError) -> FilesystemFailure:
        """Build a failure carrying the errno name of ``error``."""
        return cls(code=errno_name(error))


class NotApplicable(Exception):
    """The path is missing or not a directory: defer to the next app."""


def errno_name(error: OSError) -> str | None:
    """Return the symbolic name of ``error.errno`` (``"EACCES"``), or None."""
    if error.errno is None:
        return None
    return errno_module.errorcode.get(error.errno)

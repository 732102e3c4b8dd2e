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

"""
HTTP response sent by the directory index.

Response is built complete (status, headers, body) and sent with a single
``await response(scope, receive, send)``::

    response = Response(body, media_type="text/html")
    await response(scope, receive, send)

Every response carries:

- ``Content-Type`` with an explicit ``charset=utf-8`` (for any media type)
- ``Content-Length`` equal to the encoded body length
- ``X-Content-Type-Options: nosniff`` when it has a media type

For ``HEAD`` requests (``scope["method"] == "HEAD"``) the headers are those of
the full response, body is sent empty.
"""

from __future__ import annotations

from collections.abc import Mapping

from .types import Receive, Scope, Send

__all__ = ["Response", "empty_response"]

HeadersInput = Mapping[str, str] | list[tuple[str, str]] | None


def _normalize_headers(headers: HeadersInput) -> list[tuple[str, str]]:
    """Normalize headers input to list of tuples."""
    if headers is None:
        return []
    if isinstance(headers, list):
        return list(headers)
    return list(headers.items())


class Response:
    """
    Complete HTTP response usable as an ASGI application.

    Attributes:
        body: Encoded response body as bytes.
        status_code: HTTP status code.
        media_type: Media type without parameters, or None for no body type.

    Example:
        >>> response = Response("a.txt\\n", media_type="text/plain")
        >>> await response(scope, receive, send)
    """

    __slots__ = ("body", "status_code", "media_type", "_headers")

    charset: str = "utf-8"

    def __init__(
        self,
        content: bytes | str | None = None,
        status_code: int = 200,
        headers: HeadersInput = None,
        media_type: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.media_type = media_type
        self.body = self._encode_content(content)
        self._headers = _normalize_headers(headers)

        header_names = {name.lower() for name, _ in self._headers}
        if media_type is not None:
            if "x-content-type-options" not in header_names:
                self._headers.append(("x-content-type-options", "nosniff"))
            if "content-type" not in header_names:
                self._headers.append(("content-type", f"{media_type}; charset={self.charset}"))
        if "content-length" not in header_names:
            self._headers.append(("content-length", str(len(self.body))))

    def _encode_content(self, content: bytes | str | None) -> bytes:
        if content is None:
            return b""
        if isinstance(content, bytes):
            return content
        return content.encode(self.charset)

    @property
    def headers(self) -> list[tuple[str, str]]:
        """Response headers as (name, value) pairs."""
        return list(self._headers)

    def _build_headers(self) -> list[tuple[bytes, bytes]]:
        return [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in self._headers
        ]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Send ``http.response.start`` then one ``http.response.body``."""
        include_body = scope.get("method", "GET") != "HEAD"
        await send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self._build_headers(),
            }
        )
        await send(
            {
                "type": "http.response.body",
                "body": self.body if include_body else b"",
            }
        )

    def __repr__(self) -> str:
        return f"Response(status_code={self.status_code}, media_type={self.media_type!r})"


def empty_response(status_code: int, headers: HeadersInput = None) -> Response:
    """Body-less response (``Content-Length: 0``)."""
    return Response(None, status_code=status_code, headers=headers)

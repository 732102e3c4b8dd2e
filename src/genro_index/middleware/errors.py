# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Error handling middleware.

Turns exceptions escaping the inner app into responses. It is how the
directory index reports request-fatal errors: the index raises, this
middleware answers.

Exception handling:
    - HTTPException: status code, plain-text detail, extra headers
    - Exception: 500 Internal Server Error

5xx errors are logged with traceback on the ``genro_index`` logger.

Config:
    debug (bool): If True, include traceback in 500 responses. Default: False.

Note:
    Enabled by default (middleware_default=True) and outermost
    (middleware_order=100). If the response has already started, the
    exception is re-raised to the server.
"""

from __future__ import annotations

import logging
import traceback
from typing import TYPE_CHECKING, Any, MutableMapping

from . import BaseMiddleware
from ..exceptions import HTTPException
from ..response import Response

if TYPE_CHECKING:
    from ..types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger("genro_index")


class ErrorMiddleware(BaseMiddleware):
    """Error handling middleware for HTTP requests.

    Attributes:
        debug: If True, include stack traces in 500 error responses.

    Class Attributes:
        middleware_name: "errors" - identifier for config.
        middleware_order: 100 - runs early to catch all errors.
        middleware_default: True - enabled by default.
    """

    middleware_name = "errors"
    middleware_order = 100
    middleware_default = True

    __slots__ = ("debug",)

    def __init__(self, app: ASGIApp, debug: bool = False, **kwargs: Any) -> None:
        super().__init__(app, **kwargs)
        self.debug = debug

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_tracking(message: MutableMapping[str, Any]) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_tracking)
        except HTTPException as e:
            if response_started:
                raise
            if e.status_code >= 500:
                logger.exception("%s %s failed: %r", scope.get("method"), scope.get("path"), e)
            await self._error_response(e)(scope, receive, send)
        except Exception:
            if response_started:
                raise
            logger.exception("Unhandled error on %s %s", scope.get("method"), scope.get("path"))
            await self._server_error_response()(scope, receive, send)

    def _error_response(self, exc: HTTPException) -> Response:
        """Plain-text response for an HTTPException."""
        return Response(
            exc.detail or "",
            status_code=exc.status_code,
            headers=list(exc.headers or []),
            media_type="text/plain",
        )

    def _server_error_response(self) -> Response:
        """500 response, with traceback if ``debug``."""
        if self.debug:
            body = f"Internal Server Error\n\n{traceback.format_exc()}"
        else:
            body = "Internal Server Error"
        return Response(body, status_code=500, media_type="text/plain")


if __name__ == "__main__":
    pass

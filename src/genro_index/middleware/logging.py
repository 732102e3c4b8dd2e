# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Logging Middleware - access log for the directory index.

One line when a request arrives and one when its response is complete. If
``DirectoryIndexMiddleware`` answered the request, it leaves an
``IndexOutcome`` in ``scope["index"]``, and the response line adds the
negotiated media type and the number of listed entries. Requests the index
handed to the next app are marked ``deferred``.

Log format:
    Request:  "<- GET /docs/ from 192.168.1.1"
    Listing:  "-> GET /docs/ 200 text/html, 12 entries (3.1ms)"
    Deferred: "-> GET /docs/a.txt 200 deferred (0.4ms)"
    Other:    "-> GET /docs/ 405 (0.1ms)"
    Error:    "-> GET /docs/ ERROR: Not Acceptable (3.1ms)"

Config:
    logger_name (str): Logger name. Default: "genro_index.access".
    level (str): Log level (DEBUG, INFO, WARNING, ERROR). Default: "INFO".
    include_headers (bool): Include request headers in DEBUG log. Default: False.

Example::

    middleware_chain({"logging": {"level": "DEBUG", "include_headers": True}}, app)
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, MutableMapping

from . import BaseMiddleware

if TYPE_CHECKING:
    from ..types import ASGIApp, Receive, Scope, Send


def describe_outcome(scope: Scope) -> str:
    """Index part of the response line, empty if the index never saw the request."""
    outcome = scope.get("index")
    if outcome is None:
        return ""
    if outcome.deferred:
        return " deferred"
    noun = "entry" if outcome.entries == 1 else "entries"
    return f" {outcome.media_type}, {outcome.entries} {noun}"


class LoggingMiddleware(BaseMiddleware):
    """Access logging middleware for directory index requests.

    Attributes:
        logger: Logger for access lines.
        level: Numeric level of the request and response lines.
        include_headers: Log request headers at DEBUG.

    Class Attributes:
        middleware_name: "logging" - identifier for config.
        middleware_order: 200 - outside the index, so listings are timed whole.
        middleware_default: False - disabled by default.
    """

    middleware_name = "logging"
    middleware_order = 200
    middleware_default = False

    __slots__ = ("logger", "level", "include_headers")

    def __init__(
        self,
        app: ASGIApp,
        logger_name: str = "genro_index.access",
        level: str = "INFO",
        include_headers: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(app, **kwargs)
        self.logger = logging.getLogger(logger_name)
        self.level = getattr(logging, level.upper(), logging.INFO)
        self.include_headers = include_headers

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        request_line = f"{scope.get('method', '?')} {scope.get('path', '/')}"
        client = scope.get("client")
        self.logger.log(
            self.level, "<- %s from %s", request_line, client[0] if client else "unknown"
        )
        if self.include_headers:
            headers = {
                name.decode("latin-1"): value.decode("latin-1")
                for name, value in scope.get("headers", [])
            }
            self.logger.debug("   Headers: %s", headers)

        status_code = 0

        async def send_with_status(message: MutableMapping[str, Any]) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            await send(message)

        try:
            await self.app(scope, receive, send_with_status)
        except Exception as e:
            elapsed = (time.perf_counter() - start_time) * 1000
            self.logger.error("-> %s ERROR: %s (%.1fms)", request_line, e, elapsed)
            raise

        elapsed = (time.perf_counter() - start_time) * 1000
        self.logger.log(
            self.level,
            "-> %s %s%s (%.1fms)",
            request_line,
            status_code,
            describe_outcome(scope),
            elapsed,
        )


if __name__ == "__main__":
    pass

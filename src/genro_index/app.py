# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Ready-made application: a directory index in front of a 404 app.

Example::

    from genro_index.app import create_app

    app = create_app("./public", icons=True, view="details")
    # uvicorn module:app
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .middleware import middleware_chain
from .response import Response
from .types import ASGIApp, Receive, Scope, Send

__all__ = ["create_app", "not_found"]


async def not_found(scope: Scope, receive: Receive, send: Send) -> None:
    """Innermost app: whatever the index declines is a 404."""
    if scope["type"] != "http":
        return
    await Response("Not Found", status_code=404, media_type="text/plain")(scope, receive, send)


def create_app(
    directory: str | Path,
    *,
    app: ASGIApp | None = None,
    debug: bool = False,
    access_log: bool = False,
    **index_options: Any,
) -> ASGIApp:
    """
    Wrap ``app`` (default: ``not_found``) with errors, logging and index.

    Args:
        directory: Directory to list.
        app: App receiving requests the index defers (missing paths, files).
        debug: Tracebacks in 500 responses.
        access_log: Enable the access log middleware.
        **index_options: Forwarded to ``DirectoryIndexMiddleware``.
    """
    return middleware_chain(
        {
            "errors": {"debug": debug},
            "logging": access_log,
            "index": {"directory": directory, **index_options},
        },
        app or not_found,
    )

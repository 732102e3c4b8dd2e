# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Directory Index Middleware - serves directory listings.

One pass per request::

    method ── OPTIONS ──────────────────────────────► 200, Allow
          ├── not GET/HEAD ─────────────────────────► 405, Allow
          ▼
    resolve path ── undecodable / null byte ───────► raise MalformedRequest (400)
          │      └─ outside root ──────────────────► raise TraversalAttempt (403)
          ▼
    stat + list ── missing / not a directory ──────► next app
          │     ├─ ENAMETOOLONG ───────────────────► raise NameTooLong (414)
          │     └─ other filesystem error ─────────► raise FilesystemFailure (500)
          ▼
    negotiate ── nothing acceptable ───────────────► raise NotAcceptable (406)
          ▼
    render ──────────────────────────────────────── 200 + body

Raised errors are meant for ``ErrorMiddleware`` (enabled by default in
``middleware_chain``), which answers them with the mapped status.

After a listing or a deferral the middleware stores an ``IndexOutcome`` in
``scope["index"]``; ``LoggingMiddleware`` adds it to the access line.

Config options:
    directory: Directory to list. Required.
    hidden: Show dot-files. Default: False
    filter: ``filter(name, index, names, directory) -> bool``. Default: None
    sort: Comparator over two entries. Default: case-insensitive name order
    icons: Show file icons. Default: False
    view: "tiles" or "details". Default: "tiles"
    stylesheet: CSS path or inline CSS. Default: bundled style.css
    template: Page template path, inline string or render callable.
        Default: bundled directory.html
    templates: Token template overrides {"html": {...}, "plain": {...}}
    concurrency: Maximum simultaneous stats per listing. Default: 10
    filesystem: ``Filesystem`` implementation. Default: LocalFilesystem
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping

from . import BaseMiddleware
from ..datastructures import headers_from_scope
from ..exceptions import NotApplicable
from ..filesystem import LocalFilesystem
from ..icons import IconCatalog
from ..listing import EntryLister
from ..negotiation import ContentNegotiator
from ..options import RenderOptions
from ..renderers import RENDERERS
from ..resolver import PathResolver, decode_url_path
from ..response import Response, empty_response

if TYPE_CHECKING:
    from ..filesystem import Filesystem
    from ..renderers import BaseRenderer
    from ..types import ASGIApp, FilterFunc, Receive, RenderCallable, Scope, Send, SortFunc

logger = logging.getLogger("genro_index.index")

ALLOW = "GET, HEAD, OPTIONS"


@dataclass(frozen=True)
class IndexOutcome:
    """What the index did with a request, left in ``scope["index"]``."""

    deferred: bool = False
    media_type: str = ""
    entries: int = 0


class DirectoryIndexMiddleware(BaseMiddleware):
    """Directory listing middleware - lists directories, defers everything else.

    Attributes:
        options: Immutable ``RenderOptions`` snapshot.
        filesystem: Filesystem capability used for every disk access.
        resolver: Maps request paths into ``options.root``.
        lister: Builds the sorted listing.
        negotiator: Picks html, plain text or json.
        renderers: One renderer per supported media type.

    Class Attributes:
        middleware_name: "index" - identifier for config.
        middleware_order: 800 - innermost, right before the wrapped app.
        middleware_default: False - needs a directory, so enabled explicitly.
    """

    middleware_name = "index"
    middleware_order = 800
    middleware_default = False

    __slots__ = ("options", "filesystem", "resolver", "lister", "negotiator", "renderers")

    def __init__(
        self,
        app: ASGIApp,
        directory: str | Path,
        filter: FilterFunc | None = None,
        hidden: bool = False,
        icons: bool = False,
        stylesheet: str | Path | None = None,
        template: str | Path | RenderCallable | None = None,
        templates: Mapping[str, Mapping[str, str]] | None = None,
        sort: SortFunc | None = None,
        view: str | None = None,
        concurrency: int = 10,
        filesystem: Filesystem | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(app, **kwargs)
        self.options = RenderOptions.build(
            directory,
            hidden=hidden,
            filter=filter,
            sort=sort,
            icons=icons,
            view=view,
            stylesheet=stylesheet,
            template=template,
            templates=templates,
            concurrency=concurrency,
        )
        self.filesystem = filesystem if filesystem is not None else LocalFilesystem()
        self.resolver = PathResolver(self.options.root)
        self.lister = EntryLister(
            self.filesystem,
            hidden=self.options.hidden,
            filter=self.options.filter,
            sort=self.options.sort,
            concurrency=self.options.concurrency,
        )
        self.negotiator = ContentNegotiator(tuple(RENDERERS))
        catalog = IconCatalog()
        self.renderers: dict[str, BaseRenderer] = {
            media_type: renderer_cls(self.options, self.filesystem, catalog)
            for media_type, renderer_cls in RENDERERS.items()
        }
        logger.debug("directory index configured: %s", self.options.as_dict())

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI interface - list directories or pass through."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "GET")
        if method not in ("GET", "HEAD"):
            status = 200 if method == "OPTIONS" else 405
            await empty_response(status, {"Allow": ALLOW})(scope, receive, send)
            return

        directory, relative = self._request_paths(scope)
        resolved = self.resolver.resolve(relative, decoded=True)

        try:
            listing = await self.lister.list(resolved, directory)
        except NotApplicable:
            scope["index"] = IndexOutcome(deferred=True)
            await self.app(scope, receive, send)
            return

        accept = headers_from_scope(scope).getlist("accept")
        media_type = self.negotiator.select(accept)

        body = await self.renderers[media_type].render(listing)
        scope["index"] = IndexOutcome(media_type=media_type, entries=len(listing.entries))
        await Response(body, media_type=media_type)(scope, receive, send)

    def _request_paths(self, scope: Scope) -> tuple[str, str]:
        """
        Decoded (display directory, path relative to the mount) for ``scope``.

        ``raw_path`` is preferred because ``path`` arrives already decoded by
        the server, which hides malformed escapes. The display directory
        includes ``root_path`` so links work behind a mount prefix.
        """
        raw_path = scope.get("raw_path")
        if raw_path:
            path = decode_url_path(raw_path.decode("latin-1"))
        else:
            path = scope.get("path") or "/"

        root_path = scope.get("root_path") or ""
        if root_path and (path == root_path or path.startswith(root_path + "/")):
            path = path[len(root_path):] or "/"
        return root_path + path, path

    def __repr__(self) -> str:
        return f"DirectoryIndexMiddleware(directory={self.options.root!r})"


if __name__ == "__main__":
    pass

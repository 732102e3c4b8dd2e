# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Listing renderers, one per negotiated media type.

The set is closed: ``RENDERERS`` maps each supported media type to its
renderer class and the middleware instantiates all three up front. Every
renderer answers the same call::

    body = await renderer.render(listing)   # str or bytes

HTML
    Stylesheet (plus icon rules), breadcrumb and escaped file list, poured
    into the page template through the render adapter.
Plain text
    One name per line. No escaping, icons or view handling.
JSON
    Array of ``{"name", "type", "size", "lastModified"}`` objects.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

import orjson

from .templates import create_render, escape_html, load_stylesheet, render_template

if TYPE_CHECKING:
    from .filesystem import Filesystem
    from .icons import IconCatalog
    from .listing import DirectoryListing
    from .options import RenderOptions

__all__ = ["RENDERERS", "BaseRenderer", "HtmlRenderer", "JsonRenderer", "PlainRenderer"]


class BaseRenderer(ABC):
    """Common state of the listing renderers."""

    media_type: ClassVar[str]

    __slots__ = ("options", "filesystem", "icons")

    def __init__(self, options: RenderOptions, filesystem: Filesystem, icons: IconCatalog) -> None:
        self.options = options
        self.filesystem = filesystem
        self.icons = icons

    @abstractmethod
    async def render(self, listing: DirectoryListing) -> str | bytes: ...


class HtmlRenderer(BaseRenderer):
    """Render ``text/html`` through the configured page template."""

    media_type = "text/html"

    __slots__ = ("_render",)

    def __init__(self, options: RenderOptions, filesystem: Filesystem, icons: IconCatalog) -> None:
        super().__init__(options, filesystem, icons)
        self._render = create_render(options.template, filesystem)

    async def render(self, listing: DirectoryListing) -> str:
        style = await load_stylesheet(self.options.stylesheet, self.filesystem)
        if self.options.icons:
            style += await self.icons.style(listing.entries)

        locals: dict[str, Any] = {
            "directory": listing.directory,
            "display_icons": self.options.icons,
            "escape": escape_html,
            "file_list": list(listing.entries),
            "has_parent": listing.has_parent,
            "icons": self.icons,
            "is_html": True,
            "path": listing.path,
            "self_entry": listing.self_entry,
            "style": style,
            "templates": self.options.templates["html"],
            "view_name": self.options.view,
        }
        return await self._render(locals)


class PlainRenderer(BaseRenderer):
    """Render ``text/plain``: names only, icon- and view-agnostic."""

    media_type = "text/plain"

    async def render(self, listing: DirectoryListing) -> str:
        templates = self.options.templates["plain"]
        locals: dict[str, Any] = {
            "directory": listing.directory,
            "display_icons": False,
            "file_list": list(listing.entries),
            "is_html": False,
            "path": listing.path,
            "templates": templates,
            "view_name": "tiles",
        }
        return render_template(templates["page"], locals)


class JsonRenderer(BaseRenderer):
    """Render ``application/json`` with orjson."""

    media_type = "application/json"

    async def render(self, listing: DirectoryListing) -> bytes:
        return orjson.dumps([entry.as_dict() for entry in listing.entries])


RENDERERS: dict[str, type[BaseRenderer]] = {
    HtmlRenderer.media_type: HtmlRenderer,
    PlainRenderer.media_type: PlainRenderer,
    JsonRenderer.media_type: JsonRenderer,
}

# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Token templates for the HTML and plain-text listings.

Templates are plain strings with ``{token}`` placeholders, substituted in a
single pass (a value inserted for one token is never re-scanned for others).

Page level (``directory.html`` or an inline/page template)::

    {directory}     requested directory, escaped
    {files}         the rendered list fragment
    {linked-path}   breadcrumb of anchors (plain: the bare directory)
    {style}         stylesheet plus generated icon rules

List level (``templates[...]["list"]``)::

    {header}  the header template in "details" view, empty in "tiles"
    {items}   the rendered items
    {view}    the view name

Item level (``templates[...]["item"]``)::

    {path}  {classes}  {file.name}  {file.size}  {file.lastModified}

A page template can also be code: ``create_render`` wraps every accepted
form (inline string, file path, sync or async callable) into one
``async render(locals) -> str``.
"""

from __future__ import annotations

import html
import math
import posixpath
import re
from collections.abc import Awaitable, Callable, Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from smartasync import smartasync

if TYPE_CHECKING:
    from .filesystem import Filesystem
    from .icons import IconCatalog
    from .listing import DirectoryEntry
    from .types import RenderCallable

__all__ = [
    "DEFAULT_STYLESHEET",
    "DEFAULT_TEMPLATE",
    "DEFAULT_TEMPLATES",
    "Render",
    "create_file_list",
    "create_render",
    "encode_segment",
    "entry_href",
    "escape_html",
    "format_date",
    "html_path",
    "is_inline",
    "load_stylesheet",
    "merge_templates",
    "pretty_bytes",
    "render_template",
]

PUBLIC_DIR = Path(__file__).parent / "public"
DEFAULT_TEMPLATE = PUBLIC_DIR / "directory.html"
DEFAULT_STYLESHEET = PUBLIC_DIR / "style.css"

DEFAULT_TEMPLATES: dict[str, dict[str, str]] = {
    "plain": {
        "page": "{files}",
        "list": "{header}{items}",
        "header": "",
        "item": "{file.name}\n",
    },
    "html": {
        "list": '<ul id="files" class="view-{view}">{header}{items}</ul>',
        "header": (
            '<li class="header">'
            '<span class="name">Name</span>'
            '<span class="size">Size</span>'
            '<span class="date">Modified</span>'
            "</li>\n"
        ),
        "item": (
            '<li><a href="{path}" class="{classes}" title="{file.name}">'
            '<span class="name">{file.name}</span>'
            '<span class="size">{file.size}</span>'
            '<span class="date">{file.lastModified}</span>'
            "</a></li>\n"
        ),
    },
}

BYTE_UNITS = ("B", "kB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB")

Render = Callable[[Mapping[str, Any]], Awaitable[str]]

_PAGE_TOKENS = re.compile(r"\{(style|files|directory|linked-path)\}")
_LIST_TOKENS = re.compile(r"\{(view|header|items)\}")
_ITEM_TOKENS = re.compile(r"\{(path|classes|file\.name|file\.size|file\.lastModified)\}")


def _identity(value: str) -> str:
    return value


def escape_html(value: str) -> str:
    """Escape ``& < > " '`` for text and attribute positions."""
    return html.escape(value, quote=True)


def encode_segment(segment: str) -> str:
    """
    Percent-encode one path segment (JavaScript ``encodeURIComponent`` set).

    Surrogate escapes from undecodable file names go back to their raw bytes,
    so ``bad\\udcff.txt`` becomes ``bad%FF.txt``.
    """
    return quote(segment, safe="!'()*~", errors="surrogateescape")


def pretty_bytes(size: int) -> str:
    """
    Human-readable byte count with decimal units.

    Examples:
        >>> pretty_bytes(10)
        '10 B'
        >>> pretty_bytes(1337)
        '1.34 kB'
    """
    if size < 1:
        return f"{size} B"
    exponent = min(int(math.log10(size) // 3), len(BYTE_UNITS) - 1)
    number = float(f"{size / 1000 ** exponent:.3g}")
    return f"{number:g} {BYTE_UNITS[exponent]}"


def format_date(entry: DirectoryEntry) -> str:
    """Locale date and time of ``entry`` in local time; empty for ``..``."""
    if entry.is_parent:
        return ""
    return entry.last_modified.astimezone().strftime("%x %X")


def html_path(directory: str) -> str:
    """
    Breadcrumb for ``directory``: one anchor per non-empty segment.

    Each ``href`` is the cumulative percent-encoded prefix, so ``/a b/c``
    links to ``/a%20b`` and ``/a%20b/c``.
    """
    parts = directory.split("/")
    crumbs = [""] * len(parts)
    for i, part in enumerate(parts):
        if part:
            parts[i] = encode_segment(part)
            href = escape_html("/".join(parts[: i + 1]))
            crumbs[i] = f'<a href="{href}">{escape_html(part)}</a>'
    return " / ".join(crumbs)


def entry_href(directory: str, name: str) -> str:
    """Encoded, normalized URL of ``name`` inside ``directory``."""
    segments = [encode_segment(part) for part in directory.split("/") if part]
    segments.append(encode_segment(name))
    return posixpath.normpath("/" + "/".join(segments))


def merge_templates(overrides: Mapping[str, Mapping[str, str]] | None) -> dict[str, dict[str, str]]:
    """Defaults updated key by key with ``overrides`` (``{"html": {...}}``)."""
    merged = {kind: dict(tokens) for kind, tokens in DEFAULT_TEMPLATES.items()}
    for kind, tokens in (overrides or {}).items():
        if kind not in merged:
            raise ValueError(f"Unknown template set '{kind}' (expected 'html' or 'plain')")
        merged[kind].update(tokens)
    return merged


def create_file_list(
    files: Iterable[DirectoryEntry],
    directory: str,
    *,
    templates: Mapping[str, str],
    view_name: str,
    escape: Callable[[str], str] = _identity,
    icons: IconCatalog | None = None,
) -> str:
    """
    Render the list fragment for ``files``.

    Args:
        files: Sorted entries.
        directory: Requested directory, used to build each entry's href.
        templates: One template set (``list``, ``header``, ``item``).
        view_name: ``tiles`` or ``details``.
        escape: Applied to every interpolated item value.
        icons: Catalog used to add icon classes; None disables icons.
    """
    items = []
    for entry in files:
        classes = icons.classes(entry) if icons is not None else []
        size = pretty_bytes(entry.size) if entry.size and not entry.is_directory else ""
        values = {
            "path": escape(entry_href(directory, entry.name)),
            "classes": escape(" ".join(classes)),
            "file.name": escape(entry.display_name),
            "file.size": escape(size),
            "file.lastModified": escape(format_date(entry)),
        }
        items.append(_ITEM_TOKENS.sub(lambda m: values[m.group(1)], templates["item"]))

    list_values = {
        "view": view_name,
        "header": templates["header"] if view_name == "details" else "",
        "items": "".join(items),
    }
    return _LIST_TOKENS.sub(lambda m: list_values[m.group(1)], templates["list"])


def render_template(source: str, locals: Mapping[str, Any]) -> str:
    """Substitute the page tokens of ``source`` from ``locals``."""
    is_html = locals.get("is_html", False)
    escape = locals.get("escape") or (escape_html if is_html else _identity)
    directory = locals["directory"]
    values = {
        "style": locals.get("style", ""),
        "files": create_file_list(
            locals["file_list"],
            directory,
            templates=locals["templates"],
            view_name=locals.get("view_name", "tiles"),
            escape=escape,
            icons=locals.get("icons") if locals.get("display_icons") else None,
        ),
        "directory": escape(directory),
        "linked-path": html_path(directory) if is_html else directory,
    }
    return _PAGE_TOKENS.sub(lambda m: values[m.group(1)], source)


def is_inline(source: str | Path) -> bool:
    """True if ``source`` is literal content rather than a file path."""
    return isinstance(source, str) and ("{" in source or not source)


async def load_stylesheet(stylesheet: str | Path, filesystem: Filesystem) -> str:
    """Inline CSS as-is, otherwise the content of the stylesheet file."""
    if is_inline(stylesheet):
        return str(stylesheet)
    return await filesystem.read_text(str(stylesheet))


def create_render(template: str | Path | RenderCallable, filesystem: Filesystem) -> Render:
    """
    Adapt any template form to ``async render(locals) -> str``.

    - callable: called with ``locals``; sync and async callables both work.
    - inline string: rendered with ``render_template``.
    - path: read through ``filesystem`` on every call, then rendered.
    """
    if callable(template):
        callback = template

        async def render_callback(locals: Mapping[str, Any]) -> str:
            result: str = await smartasync(callback)(locals)
            return result

        return render_callback

    if is_inline(template):
        source = str(template)

        async def render_inline(locals: Mapping[str, Any]) -> str:
            return render_template(source, locals)

        return render_inline

    template_path = str(template)

    async def render_file(locals: Mapping[str, Any]) -> str:
        source = await filesystem.read_text(template_path)
        return render_template(source, locals)

    return render_file

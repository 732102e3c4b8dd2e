# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
File icons for the HTML listing.

Resolution order for a file name (``IconCatalog.classify``):

1. exact extension        ``.py``          -> ``icon-py``
2. full MIME type         ``application/pdf`` -> ``icon-application-pdf``
3. MIME suffix            ``+json``, ``+xml``, ``+zip`` -> ``icon-json``
4. MIME top-level type    ``image``, ``font``, ``text``, ``video`` -> ``icon-image``
5. default                ``icon-default``

Directories always get ``icon-directory`` with the folder asset.

Asset bytes are read from ``public/icons`` the first time an asset is needed
and kept, base64-encoded, for the life of the process. The asset set is fixed,
so the cache is never invalidated. Reads run off the event loop through
``smartasync``. Two requests populating the same name at once simply store
identical values.
"""

from __future__ import annotations

import base64
import mimetypes
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from smartasync import smartasync

from .listing import guess_media_type

if TYPE_CHECKING:
    from .listing import DirectoryEntry

__all__ = ["ICON_MAP", "ICONS_DIR", "IconCatalog", "IconDescriptor"]

ICONS_DIR = Path(__file__).parent / "public" / "icons"

ICON_MAP: dict[str, str] = {
    # base icons
    "default": "page_white.svg",
    "folder": "folder.svg",
    # generic mime type icons
    "font": "font.svg",
    "image": "image.svg",
    "text": "page_white_text.svg",
    "video": "film.svg",
    # generic mime suffix icons
    "+json": "page_white_code.svg",
    "+xml": "page_white_code.svg",
    "+zip": "box.svg",
    # specific mime type icons
    "application/javascript": "page_white_code_red.svg",
    "application/json": "page_white_code.svg",
    "application/msword": "page_white_word.svg",
    "application/pdf": "page_white_acrobat.svg",
    "application/postscript": "page_white_vector.svg",
    "application/rtf": "page_white_word.svg",
    "application/vnd.ms-excel": "page_white_excel.svg",
    "application/vnd.ms-powerpoint": "page_white_powerpoint.svg",
    "application/vnd.oasis.opendocument.presentation": "page_white_powerpoint.svg",
    "application/vnd.oasis.opendocument.spreadsheet": "page_white_excel.svg",
    "application/vnd.oasis.opendocument.text": "page_white_word.svg",
    "application/x-7z-compressed": "box.svg",
    "application/x-sh": "application_xp_terminal.svg",
    "application/x-msaccess": "page_white_database.svg",
    "application/x-shockwave-flash": "page_white_flash.svg",
    "application/x-sql": "page_white_database.svg",
    "application/x-tar": "box.svg",
    "application/x-xz": "box.svg",
    "application/xml": "page_white_code.svg",
    "application/zip": "box.svg",
    "image/svg+xml": "page_white_vector.svg",
    "text/css": "page_white_code.svg",
    "text/html": "page_white_code.svg",
    "text/less": "page_white_code.svg",
    # other, extension-specific icons
    ".accdb": "page_white_database.svg",
    ".apk": "box.svg",
    ".app": "application_xp.svg",
    ".as": "page_white_actionscript.svg",
    ".asp": "page_white_code.svg",
    ".aspx": "page_white_code.svg",
    ".bat": "application_xp_terminal.svg",
    ".bz2": "box.svg",
    ".c": "page_white_c.svg",
    ".cab": "box.svg",
    ".cfm": "page_white_coldfusion.svg",
    ".clj": "page_white_code.svg",
    ".cc": "page_white_cplusplus.svg",
    ".cgi": "application_xp_terminal.svg",
    ".cpp": "page_white_cplusplus.svg",
    ".cs": "page_white_csharp.svg",
    ".db": "page_white_database.svg",
    ".dbf": "page_white_database.svg",
    ".deb": "box.svg",
    ".dll": "page_white_gear.svg",
    ".dmg": "drive.svg",
    ".docx": "page_white_word.svg",
    ".erb": "page_white_ruby.svg",
    ".exe": "application_xp.svg",
    ".fnt": "font.svg",
    ".gam": "controller.svg",
    ".gz": "box.svg",
    ".h": "page_white_h.svg",
    ".ini": "page_white_gear.svg",
    ".iso": "cd.svg",
    ".jar": "box.svg",
    ".java": "page_white_cup.svg",
    ".jsp": "page_white_cup.svg",
    ".lua": "page_white_code.svg",
    ".lz": "box.svg",
    ".lzma": "box.svg",
    ".m": "page_white_code.svg",
    ".map": "map.svg",
    ".msi": "box.svg",
    ".mv4": "film.svg",
    ".pdb": "page_white_database.svg",
    ".php": "page_white_php.svg",
    ".pl": "page_white_code.svg",
    ".pkg": "box.svg",
    ".pptx": "page_white_powerpoint.svg",
    ".psd": "page_white_picture.svg",
    ".py": "page_white_code.svg",
    ".rar": "box.svg",
    ".rb": "page_white_ruby.svg",
    ".rm": "film.svg",
    ".rom": "controller.svg",
    ".rpm": "box.svg",
    ".sass": "page_white_code.svg",
    ".sav": "controller.svg",
    ".scss": "page_white_code.svg",
    ".srt": "page_white_text.svg",
    ".tbz2": "box.svg",
    ".tgz": "box.svg",
    ".tlz": "box.svg",
    ".vb": "page_white_code.svg",
    ".vbs": "page_white_code.svg",
    ".xcf": "page_white_picture.svg",
    ".xlsx": "page_white_excel.svg",
    ".yaws": "page_white_code.svg",
}


@dataclass(frozen=True)
class IconDescriptor:
    """CSS class and asset file for one icon."""

    class_name: str
    asset_name: str


DEFAULT_ICON = IconDescriptor("icon-default", ICON_MAP["default"])
FOLDER_ICON = IconDescriptor("icon-directory", ICON_MAP["folder"])


class IconCatalog:
    """
    Map file names to icons and render the icon stylesheet.

    The asset cache is class-level: every catalog (and every middleware
    instance) shares it.
    """

    _cache: dict[str, str] = {}

    __slots__ = ("icons_dir",)

    def __init__(self, icons_dir: str | Path = ICONS_DIR) -> None:
        self.icons_dir = Path(icons_dir)

    def classify(self, filename: str, is_directory: bool = False) -> IconDescriptor:
        """Return the icon for ``filename``."""
        if is_directory:
            return FOLDER_ICON

        ext = os.path.splitext(filename)[1].lower()
        if ext and ext in ICON_MAP:
            return IconDescriptor(f"icon-{ext[1:]}", ICON_MAP[ext])

        media_type = guess_media_type(filename)
        if media_type is None:
            return DEFAULT_ICON

        if media_type in ICON_MAP:
            return IconDescriptor(f"icon-{media_type.replace('/', '-')}", ICON_MAP[media_type])

        _, plus, suffix = media_type.partition("+")
        if plus and f"+{suffix}" in ICON_MAP:
            return IconDescriptor(f"icon-{suffix}", ICON_MAP[f"+{suffix}"])

        main_type = media_type.split("/", 1)[0]
        if main_type in ICON_MAP:
            return IconDescriptor(f"icon-{main_type}", ICON_MAP[main_type])

        return DEFAULT_ICON

    def classes(self, entry: DirectoryEntry) -> list[str]:
        """CSS classes for an entry's anchor in the HTML list."""
        if entry.is_directory:
            return ["icon", FOLDER_ICON.class_name]
        classes = ["icon"]
        ext = os.path.splitext(entry.display_name)[1].lower()
        if ext:
            classes.append(f"icon-{ext[1:]}")
        icon = self.classify(entry.display_name)
        if icon.class_name not in classes:
            classes.append(icon.class_name)
        return classes

    @smartasync
    def _read_asset(self, asset_name: str) -> bytes:
        return (self.icons_dir / asset_name).read_bytes()

    async def load(self, asset_name: str) -> str:
        """Base64 content of ``asset_name``, read once per process."""
        cached = self._cache.get(asset_name)
        if cached is None:
            data = await self._read_asset(asset_name)
            cached = base64.b64encode(data).decode("ascii")
            self._cache[asset_name] = cached
        return cached

    async def style(self, entries: Iterable[DirectoryEntry]) -> str:
        """
        CSS rules giving each icon class present in ``entries`` its image.

        Selectors sharing an asset are grouped into one rule; rules appear in
        order of first use.
        """
        selectors: dict[str, list[str]] = {}
        for entry in entries:
            icon = self.classify(entry.display_name, entry.is_directory)
            selector = f"#files .{icon.class_name} .name"
            group = selectors.setdefault(icon.asset_name, [])
            if selector not in group:
                group.append(selector)

        rules = []
        for asset_name, group in selectors.items():
            media_type = mimetypes.guess_type(asset_name)[0] or "image/png"
            rules.append(
                ",\n".join(group)
                + " {\n  background-image: url(data:"
                + f"{media_type};base64,{await self.load(asset_name)});\n}}\n"
            )
        return "".join(rules)

    @classmethod
    def clear_cache(cls) -> None:
        """Forget loaded assets (tests only; assets never change at runtime)."""
        cls._cache.clear()

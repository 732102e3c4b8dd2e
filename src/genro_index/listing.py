# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Directory reading, per-entry stat fan-out and ordering.

Pipeline (``EntryLister.list``)::

    stat(dir) ──► listdir(dir) ──► drop hidden ──► user filter ──► prepend ".."
                                                                      │
    sort ◄── build DirectoryEntry ◄── stat each child (≤ concurrency) ◄┘

Stat fan-out
============
Children are stat'ed concurrently, at most ``concurrency`` at a time
(``asyncio.Semaphore``). Results are collected by position, so the entry
order depends on the name list and the comparator only, never on which stat
finished first.

A child whose stat fails with an entry-level errno (``ENTRY_ERRORS``) gets a
placeholder ``EntryStat``: size 0, mtime at the epoch, not a directory, and
the errno name in ``error``. Any other failure aborts the whole listing with
``FilesystemFailure``; sibling lookups already running are allowed to finish.

Ordering
========
``..`` first, then directories, then files. Within each group the configured
comparator decides (default: case-insensitive, locale-aware name order).
"""

from __future__ import annotations

import asyncio
import errno
import locale
import logging
import mimetypes
import os
import stat as stat_module
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import cmp_to_key
from typing import TYPE_CHECKING, Any

from .exceptions import (
    FilesystemFailure,
    NameTooLong,
    NotApplicable,
    errno_name,
)

if TYPE_CHECKING:
    from .filesystem import Filesystem
    from .resolver import ResolvedPath
    from .types import FilterFunc, SortFunc

__all__ = [
    "DIRECTORY_TYPE",
    "DEFAULT_MEDIA_TYPE",
    "ENTRY_ERRORS",
    "DirectoryEntry",
    "DirectoryListing",
    "EntryError",
    "EntryLister",
    "EntryStat",
    "default_compare",
    "guess_media_type",
    "make_sort_key",
]

logger = logging.getLogger("genro_index.listing")

DIRECTORY_TYPE = "inode/directory"
DEFAULT_MEDIA_TYPE = "application/octet-stream"
PARENT_NAME = ".."

# errno names that concern one entry rather than the whole operation
ENTRY_ERRORS = frozenset(
    {"EACCES", "EBUSY", "EEXIST", "ENOENT", "ENXIO", "EPERM", "EROFS", "ELOOP", "ENOSPC"}
)

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)

mimetypes.add_type("application/javascript", ".js")
mimetypes.add_type("text/css", ".css")
mimetypes.add_type("image/svg+xml", ".svg")
mimetypes.add_type("application/json", ".json")
mimetypes.add_type("text/markdown", ".md")
mimetypes.add_type("application/gzip", ".gz")
mimetypes.add_type("application/x-bzip2", ".bz2")
mimetypes.add_type("application/x-xz", ".xz")
mimetypes.add_type("application/x-7z-compressed", ".7z")
mimetypes.add_type("application/x-sql", ".sql")
mimetypes.add_type("text/less", ".less")
mimetypes.add_type("font/woff", ".woff")
mimetypes.add_type("font/woff2", ".woff2")
mimetypes.add_type("font/ttf", ".ttf")
mimetypes.add_type("font/otf", ".otf")


def guess_media_type(name: str) -> str | None:
    """
    MIME type for the extension of ``name``, or None if unknown.

    Only the last extension counts (``a.tar.gz`` is ``application/gzip``),
    and dot-files without another dot have no extension.
    """
    ext = os.path.splitext(name)[1].lower()
    if not ext:
        return None
    return mimetypes.types_map.get(ext)


@dataclass(frozen=True)
class EntryError:
    """Recoverable stat failure attached to one entry."""

    code: str
    message: str


@dataclass(frozen=True)
class EntryStat:
    """The subset of stat information a listing needs."""

    size: int
    mtime: float
    is_directory: bool
    error: EntryError | None = None

    @classmethod
    def from_stat(cls, st: Any) -> EntryStat:
        return cls(
            size=st.st_size,
            mtime=st.st_mtime,
            is_directory=stat_module.S_ISDIR(st.st_mode),
        )

    @classmethod
    def placeholder(cls, code: str, message: str) -> EntryStat:
        """Zeroed stat standing in for an entry that could not be stat'ed."""
        return cls(size=0, mtime=0.0, is_directory=False, error=EntryError(code, message))


@dataclass(frozen=True)
class DirectoryEntry:
    """
    One row of a listing.

    Attributes:
        name: Child name (``..`` for the parent entry). Names that are not valid
            UTF-8 keep their surrogate escapes, so they can be stat'ed and
            linked; see ``display_name``.
        type: ``inode/directory`` or the MIME type guessed from the extension.
        size: Size in bytes (0 for placeholders).
        last_modified: Modification time, timezone-aware UTC.
        is_directory: True for directories.
        error: Set when the entry's stat failed recoverably.
    """

    name: str
    type: str
    size: int
    last_modified: datetime
    is_directory: bool
    error: EntryError | None = None

    @property
    def is_parent(self) -> bool:
        return self.name == PARENT_NAME

    @property
    def display_name(self) -> str:
        """``name`` with undecodable bytes shown as U+FFFD."""
        return self.name.encode("utf-8", "surrogateescape").decode("utf-8", "replace")

    @classmethod
    def build(cls, name: str, entry_stat: EntryStat) -> DirectoryEntry:
        """Classify ``name`` and combine it with its stat."""
        if entry_stat.is_directory:
            media_type = DIRECTORY_TYPE
        else:
            media_type = guess_media_type(name) or DEFAULT_MEDIA_TYPE
        return cls(
            name=name,
            type=media_type,
            size=entry_stat.size,
            last_modified=datetime.fromtimestamp(entry_stat.mtime, tz=timezone.utc),
            is_directory=entry_stat.is_directory,
            error=entry_stat.error,
        )

    def as_dict(self) -> dict[str, Any]:
        """JSON-ready mapping (``lastModified`` as ISO-8601)."""
        data: dict[str, Any] = {
            "name": self.display_name,
            "type": self.type,
            "size": self.size,
            "lastModified": self.last_modified.isoformat(),
        }
        if self.error is not None:
            data["error"] = self.error.code
        return data


@dataclass(frozen=True)
class DirectoryListing:
    """
    Everything the renderers need for one response.

    Attributes:
        directory: URL-decoded requested directory (with mount prefix).
        path: Absolute filesystem path of the directory.
        entries: Sorted entries, ``..`` first when ``has_parent``.
        has_parent: Whether a parent entry was synthesized.
        self_entry: The directory itself (name = ``directory``).
    """

    directory: str
    path: str
    entries: tuple[DirectoryEntry, ...]
    has_parent: bool
    self_entry: DirectoryEntry = field(compare=False)


def default_compare(a: DirectoryEntry, b: DirectoryEntry) -> int:
    """Case-insensitive, locale-aware name comparison."""
    return locale.strcoll(a.display_name.casefold(), b.display_name.casefold())


def make_sort_key(compare: SortFunc | None = None) -> Callable[[DirectoryEntry], Any]:
    """
    Build a ``sorted`` key enforcing ``..`` first and directories first.

    ``compare`` only orders entries within the same group.
    """
    compare = compare or default_compare

    def _file_sort(a: DirectoryEntry, b: DirectoryEntry) -> int:
        if a.is_parent or b.is_parent:
            if a.name == b.name:
                return 0
            return -1 if a.is_parent else 1
        return int(b.is_directory) - int(a.is_directory) or compare(a, b)

    return cmp_to_key(_file_sort)


class EntryLister:
    """
    Produce a ``DirectoryListing`` for a resolved directory path.

    Attributes:
        filesystem: The ``Filesystem`` capability.
        hidden: Include dot-files.
        filter: Optional ``FilterFunc``.
        concurrency: Maximum simultaneous child stats.
    """

    __slots__ = ("filesystem", "hidden", "filter", "concurrency", "_sort_key")

    def __init__(
        self,
        filesystem: Filesystem,
        hidden: bool = False,
        filter: FilterFunc | None = None,
        sort: SortFunc | None = None,
        concurrency: int = 10,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.filesystem = filesystem
        self.hidden = hidden
        self.filter = filter
        self.concurrency = concurrency
        self._sort_key = make_sort_key(sort)

    async def list(self, resolved: ResolvedPath, directory: str | None = None) -> DirectoryListing:
        """
        Build the listing for ``resolved``.

        Args:
            resolved: Output of ``PathResolver.resolve``.
            directory: Requested directory shown to the user; defaults to
                ``resolved.directory``.

        Raises:
            NotApplicable: the path does not exist or is not a directory.
            NameTooLong: ENAMETOOLONG while stat'ing the directory.
            FilesystemFailure: any other stat/readdir failure.
        """
        directory = resolved.directory if directory is None else directory
        dir_stat = await self.stat_directory(resolved.path)
        names = await self.read_names(resolved.path, resolved.has_parent)
        stats = await self.stat_entries(resolved.path, names)

        entries = [DirectoryEntry.build(name, st) for name, st in zip(names, stats)]
        entries.sort(key=self._sort_key)

        self_entry = DirectoryEntry(
            name=directory,
            type=DIRECTORY_TYPE,
            size=dir_stat.size,
            last_modified=datetime.fromtimestamp(dir_stat.mtime, tz=timezone.utc),
            is_directory=True,
        )
        return DirectoryListing(
            directory=directory,
            path=resolved.path,
            entries=tuple(entries),
            has_parent=resolved.has_parent,
            self_entry=self_entry,
        )

    async def stat_directory(self, path: str) -> EntryStat:
        """Stat the listed directory itself."""
        logger.debug('stat "%s"', path)
        try:
            st = await self.filesystem.stat(path)
        except FileNotFoundError as e:
            raise NotApplicable(path) from e
        except OSError as e:
            if e.errno == errno.ENAMETOOLONG:
                raise NameTooLong() from e
            raise FilesystemFailure.from_os_error(e) from e

        entry_stat = EntryStat.from_stat(st)
        if not entry_stat.is_directory:
            raise NotApplicable(path)
        return entry_stat

    async def read_names(self, path: str, has_parent: bool) -> list[str]:
        """Read, filter and complete the child name list."""
        logger.debug('readdir "%s"', path)
        try:
            names = list(await self.filesystem.listdir(path))
        except OSError as e:
            raise FilesystemFailure.from_os_error(e) from e

        if not self.hidden:
            names = [name for name in names if not name.startswith(".")]
        if self.filter is not None:
            candidates = names
            names = [
                name
                for index, name in enumerate(candidates)
                if self.filter(name, index, candidates, path)
            ]
        if has_parent:
            names.insert(0, PARENT_NAME)
        return names

    async def stat_entries(self, path: str, names: Sequence[str]) -> list[EntryStat]:
        """
        Stat every name under ``path`` with bounded concurrency.

        Returns one ``EntryStat`` per name, in the order of ``names``.
        """
        semaphore = asyncio.Semaphore(self.concurrency)
        results = await asyncio.gather(
            *(self._stat_entry(semaphore, path, name) for name in names),
            return_exceptions=True,
        )
        stats: list[EntryStat] = []
        for result in results:
            if isinstance(result, BaseException):
                raise result
            stats.append(result)
        return stats

    async def _stat_entry(self, semaphore: asyncio.Semaphore, path: str, name: str) -> EntryStat:
        async with semaphore:
            try:
                st = await self.filesystem.stat(os.path.join(path, name))
            except OSError as e:
                code = errno_name(e)
                if code not in ENTRY_ERRORS:
                    raise FilesystemFailure.from_os_error(e) from e
                logger.debug('degraded stat "%s": %s', name, code)
                return EntryStat.placeholder(code, str(e))
        return EntryStat.from_stat(st)

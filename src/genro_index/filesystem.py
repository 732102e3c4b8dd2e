# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Filesystem capability used by the index middleware.

The middleware never touches ``os`` directly: every stat, directory read and
file read goes through a ``Filesystem`` object. ``LocalFilesystem`` is the
real implementation; its blocking calls are wrapped with ``smartasync`` so
that, awaited from the event loop, they run off-thread and never block other
requests. Tests substitute an in-memory object with the same methods.

Errors are the plain ``OSError`` subclasses raised by ``os``; interpreting
them (entry-level vs fatal) is the caller's business.
"""

from __future__ import annotations

import os
from typing import Any, Protocol, runtime_checkable

from smartasync import smartasync

__all__ = ["Filesystem", "LocalFilesystem"]


@runtime_checkable
class Filesystem(Protocol):
    """Asynchronous filesystem interface.

    ``stat`` must return an object exposing ``st_size``, ``st_mtime`` and
    ``st_mode`` (an ``os.stat_result`` or look-alike).
    """

    async def stat(self, path: str) -> Any:
        """Stat ``path``, following symlinks."""
        ...

    async def listdir(self, path: str) -> list[str]:
        """Names of the immediate children of ``path``."""
        ...

    async def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """Read a whole file as text."""
        ...


class LocalFilesystem:
    """Local disk implementation of ``Filesystem``."""

    __slots__ = ()

    @smartasync
    def stat(self, path: str) -> os.stat_result:
        """Stat ``path``."""
        return os.stat(path)

    @smartasync
    def listdir(self, path: str) -> list[str]:
        """List child names of ``path``."""
        return os.listdir(path)

    @smartasync
    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """Read content as text."""
        with open(path, encoding=encoding) as f:
            return f.read()

    def __repr__(self) -> str:
        return "LocalFilesystem()"

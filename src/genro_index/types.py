# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Type definitions for genro-index.

ASGI aliases
============
The ASGI callables are plain ``Callable`` aliases, the same shapes every ASGI
server and middleware agree on::

    Scope   = MutableMapping[str, Any]
    Message = MutableMapping[str, Any]
    Receive = Callable[[], Awaitable[Message]]
    Send    = Callable[[Message], Awaitable[None]]
    ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]

Listing hooks
=============
User-supplied callables accepted by ``DirectoryIndexMiddleware``:

FilterFunc
    ``filter(name, index, names, directory) -> bool``. Called once per
    directory child (after hidden files are dropped). ``names`` is the full
    candidate list, ``directory`` the absolute filesystem path.

SortFunc
    ``sort(a, b) -> int``. Comparator over two ``DirectoryEntry`` objects,
    negative/zero/positive like ``cmp``. The parent entry and the
    directories-first rule are applied before it is consulted.

RenderCallable
    ``render(locals) -> str`` or ``async render(locals) -> str``. A page
    template given as code instead of a string.
"""

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, MutableMapping

if TYPE_CHECKING:
    from .listing import DirectoryEntry

__all__ = [
    "Scope",
    "Message",
    "Receive",
    "Send",
    "ASGIApp",
    "FilterFunc",
    "SortFunc",
    "RenderCallable",
]

Scope = MutableMapping[str, Any]

Message = MutableMapping[str, Any]

Receive = Callable[[], Awaitable[Message]]

Send = Callable[[Message], Awaitable[None]]

ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]

FilterFunc = Callable[[str, int, list[str], str], bool]

SortFunc = Callable[["DirectoryEntry", "DirectoryEntry"], int]

RenderCallable = Callable[[Mapping[str, Any]], "str | Awaitable[str]"]

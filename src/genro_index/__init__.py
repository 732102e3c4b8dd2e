# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""genro-index - ASGI directory listing middleware.

Main components:
    DirectoryIndexMiddleware: Lists directories as HTML, plain text or JSON
    PathResolver: Request path to filesystem path, traversal-safe
    EntryLister: Concurrent, failure-tolerant directory listing
    ContentNegotiator: Accept header negotiation
    IconCatalog: File icons and their stylesheet

Middleware:
    ErrorMiddleware: Exception handling and error responses
    LoggingMiddleware: Access log

Usage:
    from genro_index import create_app

    app = create_app("./public", icons=True)

Or in front of an existing ASGI app::

    from genro_index import DirectoryIndexMiddleware, ErrorMiddleware

    app = ErrorMiddleware(DirectoryIndexMiddleware(static_app, directory="./public"))
"""

__version__ = "0.1.0"

from .app import create_app, not_found
from .datastructures import Headers, MediaRange, headers_from_scope, parse_accept
from .exceptions import (
    FilesystemFailure,
    HTTPException,
    MalformedRequest,
    NameTooLong,
    NotAcceptable,
    NotApplicable,
    TraversalAttempt,
)
from .filesystem import Filesystem, LocalFilesystem
from .icons import IconCatalog, IconDescriptor
from .listing import DirectoryEntry, DirectoryListing, EntryError, EntryLister, EntryStat
from .middleware import (
    BaseMiddleware,
    MIDDLEWARE_REGISTRY,
    middleware_chain,
)
from .middleware.errors import ErrorMiddleware
from .middleware.index import DirectoryIndexMiddleware
from .middleware.logging import LoggingMiddleware
from .negotiation import ContentNegotiator
from .options import RenderOptions
from .renderers import RENDERERS, HtmlRenderer, JsonRenderer, PlainRenderer
from .resolver import PathResolver, ResolvedPath
from .response import Response
from .types import ASGIApp, Message, Receive, Scope, Send

__all__ = [
    # Application
    "create_app",
    "not_found",
    # Middleware
    "BaseMiddleware",
    "MIDDLEWARE_REGISTRY",
    "middleware_chain",
    "DirectoryIndexMiddleware",
    "ErrorMiddleware",
    "LoggingMiddleware",
    # Pipeline components
    "PathResolver",
    "ResolvedPath",
    "EntryLister",
    "ContentNegotiator",
    "IconCatalog",
    "IconDescriptor",
    "RenderOptions",
    "RENDERERS",
    "HtmlRenderer",
    "PlainRenderer",
    "JsonRenderer",
    "Filesystem",
    "LocalFilesystem",
    # Data model
    "DirectoryEntry",
    "DirectoryListing",
    "EntryError",
    "EntryStat",
    "Headers",
    "MediaRange",
    "headers_from_scope",
    "parse_accept",
    "Response",
    # Exceptions
    "HTTPException",
    "MalformedRequest",
    "TraversalAttempt",
    "NotAcceptable",
    "NameTooLong",
    "FilesystemFailure",
    "NotApplicable",
    # ASGI types
    "ASGIApp",
    "Message",
    "Receive",
    "Scope",
    "Send",
]

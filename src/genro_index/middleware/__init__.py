# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Middleware package - ASGI middleware for genro-index."""

from __future__ import annotations

import importlib
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..types import ASGIApp, Receive, Scope, Send

MIDDLEWARE_REGISTRY: dict[str, type["BaseMiddleware"]] = {}


class BaseMiddleware(ABC):
    """Base class for all middleware. Subclasses auto-register via __init_subclass__.

    Class attributes:
        middleware_name: Registry key (default: class name).
        middleware_order: Order in chain (lower = earlier). Ranges:
            100: Core (errors)
            200: Logging/Tracing
            500-800: Request handling (index)
        middleware_default: Default on/off state. Default: False.
    """

    middleware_name: str = ""
    middleware_order: int = 500
    middleware_default: bool = False

    __slots__ = ("app",)

    def __init__(self, app: ASGIApp, **kwargs: Any) -> None:
        """Initialize middleware with wrapped app.

        Args:
            app: The ASGI app to wrap (next in chain).
            **kwargs: Middleware-specific configuration.
        """
        self.app = app

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        name = cls.middleware_name or cls.__name__
        if name in MIDDLEWARE_REGISTRY:
            raise ValueError(f"Middleware name '{name}' already registered")
        cls.middleware_name = name
        MIDDLEWARE_REGISTRY[name] = cls

    @abstractmethod
    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None: ...


def _autodiscover() -> None:
    """Import all middleware modules in this package to trigger registration."""
    package_dir = Path(__file__).parent
    for py_file in sorted(package_dir.glob("*.py")):
        if py_file.name.startswith("_"):
            continue
        importlib.import_module(f".{py_file.stem}", __package__)


def middleware_chain(
    middleware_config: str | list[str] | Mapping[str, Any] | None,
    app: ASGIApp,
) -> ASGIApp:
    """Build middleware chain from config with automatic ordering.

    Uses middleware_order class attribute for sorting (lower = earlier in chain).
    Uses middleware_default class attribute for default on/off state.

    Config format (dict)::

        {
            "logging": True,
            "index": {"directory": "./public", "icons": True},
        }

    A mapping value enables the middleware and is passed as its keyword
    options; booleans and "on"/"off" strings only switch it. A string
    ("logging, index") or a list of names enables those names without options.

    Args:
        middleware_config: Dict {name: on/off | options}, comma-separated string, or list.
        app: The innermost ASGI app.

    Returns:
        Wrapped ASGI app with middleware chain.

    Raises:
        KeyError: a configured name is not registered.
    """
    enabled_config: dict[str, bool] = {}
    options: dict[str, dict[str, Any]] = {}

    if isinstance(middleware_config, str):
        for name in middleware_config.split(","):
            name = name.strip()
            if name:
                enabled_config[name] = True
    elif isinstance(middleware_config, Mapping):
        for name, value in middleware_config.items():
            if isinstance(value, Mapping):
                enabled_config[name] = True
                options[name] = dict(value)
            else:
                enabled_config[name] = _parse_enabled(value)
    elif middleware_config:
        for name in middleware_config:
            enabled_config[name] = True

    unknown = set(enabled_config) - set(MIDDLEWARE_REGISTRY)
    if unknown:
        raise KeyError(f"Unknown middleware: {', '.join(sorted(unknown))}")

    enabled: list[tuple[int, str, type[BaseMiddleware]]] = []
    for name, cls in MIDDLEWARE_REGISTRY.items():
        if enabled_config.get(name, cls.middleware_default):
            enabled.append((cls.middleware_order, name, cls))

    enabled.sort(key=lambda x: x[0])

    # first in order = outermost wrapper
    for _order, name, cls in reversed(enabled):
        app = cls(app, **options.get(name, {}))

    return app


def _parse_enabled(value: Any) -> bool:
    """Parse on/off/true/false value to bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in ("on", "true", "yes", "1")
    return bool(value)


_autodiscover()
globals().update({cls.__name__: cls for cls in MIDDLEWARE_REGISTRY.values()})

__all__ = [
    "BaseMiddleware",
    "MIDDLEWARE_REGISTRY",
    "middleware_chain",
    *(cls.__name__ for cls in MIDDLEWARE_REGISTRY.values()),
]

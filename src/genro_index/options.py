# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Immutable configuration snapshot of a directory index middleware."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .templates import DEFAULT_STYLESHEET, DEFAULT_TEMPLATE, merge_templates

if TYPE_CHECKING:
    from .types import FilterFunc, RenderCallable, SortFunc

__all__ = ["RenderOptions", "VIEWS"]

VIEWS = ("tiles", "details")


@dataclass(frozen=True)
class RenderOptions:
    """
    Options captured once, when the middleware is constructed.

    Shared read-only by every request handled by that middleware.

    Attributes:
        root: Absolute directory being served.
        hidden: Include dot-files.
        filter: Optional name filter.
        sort: Optional entry comparator.
        icons: Embed icon classes and the icon stylesheet.
        view: ``tiles`` or ``details``.
        stylesheet: CSS file path or inline CSS.
        template: Page template path, inline string or render callable.
        templates: Token template sets ``{"html": {...}, "plain": {...}}``.
        concurrency: Maximum simultaneous stats per listing.
    """

    root: str
    hidden: bool = False
    filter: FilterFunc | None = None
    sort: SortFunc | None = None
    icons: bool = False
    view: str = "tiles"
    stylesheet: str | Path = DEFAULT_STYLESHEET
    template: str | Path | RenderCallable = DEFAULT_TEMPLATE
    templates: Mapping[str, Mapping[str, str]] = field(default_factory=lambda: merge_templates(None))
    concurrency: int = 10

    @classmethod
    def build(
        cls,
        root: str | Path,
        *,
        hidden: bool = False,
        filter: FilterFunc | None = None,
        sort: SortFunc | None = None,
        icons: bool = False,
        view: str | None = None,
        stylesheet: str | Path | None = None,
        template: str | Path | RenderCallable | None = None,
        templates: Mapping[str, Mapping[str, str]] | None = None,
        concurrency: int = 10,
    ) -> RenderOptions:
        """Validate raw option values and apply defaults.

        Raises:
            TypeError: ``root`` is empty.
            ValueError: unknown view, template set or non-positive concurrency.
        """
        if not root:
            raise TypeError("root path required")
        view = view or "tiles"
        if view not in VIEWS:
            raise ValueError(f"view must be one of {VIEWS}, got {view!r}")
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        merged = merge_templates(templates)
        return cls(
            root=os.path.abspath(os.fspath(root)),
            hidden=bool(hidden),
            filter=filter,
            sort=sort,
            icons=bool(icons),
            view=view,
            stylesheet=DEFAULT_STYLESHEET if stylesheet is None else stylesheet,
            template=DEFAULT_TEMPLATE if template is None else template,
            templates=MappingProxyType(
                {kind: MappingProxyType(tokens) for kind, tokens in merged.items()}
            ),
            concurrency=concurrency,
        )

    def as_dict(self) -> dict[str, Any]:
        """Plain-value view, for logging and debugging."""
        return {
            "root": self.root,
            "hidden": self.hidden,
            "icons": self.icons,
            "view": self.view,
            "stylesheet": str(self.stylesheet),
            "template": "<callable>" if callable(self.template) else str(self.template),
            "concurrency": self.concurrency,
        }

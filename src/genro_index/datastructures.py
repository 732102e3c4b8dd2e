# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Request-side data structures: headers and Accept media ranges.

ASGI provides headers as ``list[tuple[bytes, bytes]]`` with Latin-1 encoding.
``Headers`` wraps that list with case-insensitive, multi-value lookup.
``parse_accept`` turns one or more ``Accept`` header values into
``MediaRange`` objects ordered by client preference.

Processing Schema::

    scope["headers"]  ──►  Headers  ──getlist("accept")──►  parse_accept()
                                                               │
    "text/html;q=0.9, */*;q=0.1"  ──►  [MediaRange(text/html, q=0.9),
                                        MediaRange(*/*, q=0.1)]

Example::

    headers = headers_from_scope(scope)
    ranges = parse_accept(headers.getlist("accept"))
    ranges[0].matches("text/html")  # True
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Iterator

__all__ = ["Headers", "MediaRange", "headers_from_scope", "parse_accept"]


class Headers:
    """
    Immutable, case-insensitive HTTP headers with multi-value support.

    Names are normalized to lowercase, values preserved as-is.

    Example:
        >>> headers = Headers([(b"Accept", b"text/html"), (b"accept", b"*/*")])
        >>> headers.get("ACCEPT")
        'text/html'
        >>> headers.getlist("accept")
        ['text/html', '*/*']
    """

    __slots__ = ("_headers",)

    def __init__(self, raw_headers: Iterable[tuple[bytes, bytes]]) -> None:
        self._headers: list[tuple[str, str]] = [
            (name.decode("latin-1").lower(), value.decode("latin-1"))
            for name, value in raw_headers
        ]

    def get(self, key: str, default: str | None = None) -> str | None:
        """First value for ``key`` (case-insensitive), or ``default``."""
        key_lower = key.lower()
        for name, value in self._headers:
            if name == key_lower:
                return value
        return default

    def getlist(self, key: str) -> list[str]:
        """All values for ``key`` in arrival order."""
        key_lower = key.lower()
        return [value for name, value in self._headers if name == key_lower]

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self.get(key) is not None

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._headers:
            if name not in seen:
                seen.add(name)
                yield name

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return f"Headers({self._headers!r})"


def headers_from_scope(scope: Mapping[str, Any]) -> Headers:
    """Create Headers from an ASGI scope (empty if no ``headers`` key)."""
    return Headers(scope.get("headers", []))


@dataclass(frozen=True)
class MediaRange:
    """
    One element of an Accept header.

    Attributes:
        type: Top-level type, ``*`` for a wildcard.
        subtype: Subtype, ``*`` for a wildcard.
        quality: ``q`` parameter in [0, 1]. Zero means "not acceptable".
        order: Position in the header, used to break quality ties.
    """

    type: str
    subtype: str
    quality: float = 1.0
    order: int = 0

    @property
    def specificity(self) -> int:
        """2 for ``type/subtype``, 1 for ``type/*``, 0 for ``*/*``."""
        if self.type == "*":
            return 0
        if self.subtype == "*":
            return 1
        return 2

    def matches(self, media_type: str) -> bool:
        """True if this range covers the concrete ``media_type``."""
        main, _, sub = media_type.lower().partition("/")
        if self.type != "*" and self.type != main:
            return False
        return self.subtype == "*" or self.subtype == sub

    def __str__(self) -> str:
        return f"{self.type}/{self.subtype};q={self.quality:g}"


def parse_accept(values: str | Iterable[str] | None) -> list[MediaRange]:
    """
    Parse Accept header value(s) into media ranges.

    A missing or blank header yields ``[*/*]``. Malformed elements (no slash, bad ``q``)
    are skipped; ``q`` is clamped to [0, 1]. The result is sorted by quality
    (descending), then specificity (descending), then header position.

    Args:
        values: A header string, several header strings, or None.

    Returns:
        List of MediaRange, best first.
    """
    if values is None:
        return [MediaRange("*", "*")]
    if isinstance(values, str):
        values = [values]
    values = [value for value in values if value.strip()]
    if not values:
        return [MediaRange("*", "*")]

    ranges: list[MediaRange] = []
    order = 0
    for value in values:
        for element in value.split(","):
            media_range = _parse_element(element, order)
            if media_range is not None:
                ranges.append(media_range)
                order += 1

    ranges.sort(key=lambda r: (-r.quality, -r.specificity, r.order))
    return ranges


def _parse_element(element: str, order: int) -> MediaRange | None:
    """Parse ``type/subtype;param=value;q=0.5``; None if malformed."""
    media, *params = element.split(";")
    media = media.strip().lower()
    if not media:
        return None
    if media == "*":
        media = "*/*"
    main, slash, sub = media.partition("/")
    if not slash or not main or not sub:
        return None
    if main == "*" and sub != "*":
        return None

    quality = 1.0
    for param in params:
        key, _, raw = param.strip().partition("=")
        if key.strip().lower() != "q":
            continue
        try:
            quality = float(raw.strip())
        except ValueError:
            return None
        quality = min(max(quality, 0.0), 1.0)

    return MediaRange(main, sub, quality, order)

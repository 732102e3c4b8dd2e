# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Content negotiation between the Accept header and the listing formats."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .datastructures import MediaRange, parse_accept
from .exceptions import NotAcceptable

__all__ = ["ContentNegotiator", "SUPPORTED_MEDIA_TYPES"]

# Server preference order, used when the client ranks several types equally.
SUPPORTED_MEDIA_TYPES: tuple[str, ...] = ("text/html", "text/plain", "application/json")


class ContentNegotiator:
    """
    Pick the best supported media type for a request.

    Each offered type takes the quality of the most specific media range that
    covers it (``text/html`` beats ``text/*`` beats ``*/*``). A quality of 0
    excludes the type. Among acceptable types the highest quality wins; ties
    go to the range the client listed first, then to server order.

    Example:
        >>> negotiator = ContentNegotiator()
        >>> negotiator.select("application/json, text/*;q=0.5")
        'application/json'
    """

    __slots__ = ("offered",)

    def __init__(self, offered: Sequence[str] = SUPPORTED_MEDIA_TYPES) -> None:
        self.offered = tuple(offered)

    def select(self, accept: str | Iterable[str] | None) -> str:
        """
        Return the negotiated media type.

        Raises:
            NotAcceptable: no offered type has a positive quality.
        """
        ranges = parse_accept(accept)
        best: tuple[float, int, int] | None = None
        chosen: str | None = None
        for position, media_type in enumerate(self.offered):
            match = self._best_range(ranges, media_type)
            if match is None or match.quality <= 0:
                continue
            rank = (-match.quality, match.order, position)
            if best is None or rank < best:
                best = rank
                chosen = media_type
        if chosen is None:
            raise NotAcceptable()
        return chosen

    @staticmethod
    def _best_range(ranges: list[MediaRange], media_type: str) -> MediaRange | None:
        found: MediaRange | None = None
        for media_range in ranges:
            if not media_range.matches(media_type):
                continue
            if found is None or media_range.specificity > found.specificity:
                found = media_range
        return found

# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for ContentNegotiator."""

import pytest

from genro_index.exceptions import NotAcceptable
from genro_index.negotiation import SUPPORTED_MEDIA_TYPES, ContentNegotiator


@pytest.fixture
def negotiator():
    return ContentNegotiator()


class TestContentNegotiator:
    """Media type selection."""

    def test_server_order(self):
        assert SUPPORTED_MEDIA_TYPES == ("text/html", "text/plain", "application/json")

    @pytest.mark.parametrize("accept", [None, "", "*/*"])
    def test_anything_prefers_html(self, negotiator, accept):
        assert negotiator.select(accept) == "text/html"

    @pytest.mark.parametrize(
        "accept, expected",
        [
            ("application/json", "application/json"),
            ("text/plain", "text/plain"),
            ("text/*", "text/html"),
            ("text/plain;q=0.5, application/json", "application/json"),
            ("application/json, text/plain", "application/json"),
            ("text/plain, application/json", "text/plain"),
            ("application/*;q=0.9, text/plain;q=0.8", "application/json"),
            ("image/png, */*;q=0.1", "text/html"),
        ],
    )
    def test_select(self, negotiator, accept, expected):
        assert negotiator.select(accept) == expected

    def test_zero_quality_excludes(self, negotiator):
        """q=0 on a specific type wins over a wildcard allowing it."""
        assert negotiator.select("text/html;q=0, */*") == "text/plain"

    def test_multiple_headers(self, negotiator):
        assert negotiator.select(["image/png", "application/json"]) == "application/json"

    @pytest.mark.parametrize("accept", ["image/png", "application/xml, image/*", "*/*;q=0"])
    def test_nothing_acceptable(self, negotiator, accept):
        with pytest.raises(NotAcceptable) as exc_info:
            negotiator.select(accept)
        assert exc_info.value.status_code == 406

    def test_custom_offer(self):
        negotiator = ContentNegotiator(["application/json"])
        assert negotiator.select("*/*") == "application/json"
        with pytest.raises(NotAcceptable):
            negotiator.select("text/html")

"""Tests for providers/wikipedia.py - referee photo lookup."""

from __future__ import annotations

import httpx
import pytest

from reftrends.providers.wikipedia import WikipediaPhotoClient


def wiki_handler(search_hits, pages):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.params.get("list") == "search":
            return httpx.Response(200, json={"query": {"search": search_hits}})
        return httpx.Response(200, json={"query": {"pages": pages}})

    return handler, seen


class TestWikipediaPhotoClient:
    """Tests for WikipediaPhotoClient.fetch_photo."""

    @pytest.mark.asyncio
    async def test_returns_thumbnail(self):
        """Search hit, then page image thumbnail."""
        handler, seen = wiki_handler(
            [{"title": "Michael Oliver (referee)"}],
            {"123": {"title": "Michael Oliver (referee)", "thumbnail": {"source": "https://img/oliver.jpg"}}},
        )
        async with WikipediaPhotoClient(transport=httpx.MockTransport(handler)) as wiki:
            assert await wiki.fetch_photo("Michael Oliver") == "https://img/oliver.jpg"
        assert seen[0].url.params["srsearch"] == "Michael Oliver referee"
        assert seen[1].url.params["titles"] == "Michael Oliver (referee)"
        assert seen[1].url.params["prop"] == "pageimages"

    @pytest.mark.asyncio
    async def test_no_search_results(self):
        """No hit, no second request."""
        handler, seen = wiki_handler([], {})
        async with WikipediaPhotoClient(transport=httpx.MockTransport(handler)) as wiki:
            assert await wiki.fetch_photo("Nobody") is None
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_page_without_image(self):
        """Pages without a thumbnail give None."""
        handler, _ = wiki_handler([{"title": "Anthony Taylor"}], {"9": {"title": "Anthony Taylor"}})
        async with WikipediaPhotoClient(transport=httpx.MockTransport(handler)) as wiki:
            assert await wiki.fetch_photo("Anthony Taylor") is None

    @pytest.mark.asyncio
    async def test_http_errors_are_swallowed(self):
        """A failing API is logged and treated as no photo."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={})

        async with WikipediaPhotoClient(transport=httpx.MockTransport(handler)) as wiki:
            assert await wiki.fetch_photo("Michael Oliver") is None

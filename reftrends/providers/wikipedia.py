"""Wikipedia photo lookup for referee profiles.

Uses the public MediaWiki API; no key required. A search picks the most
relevant page, then the page image thumbnail is requested.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

WIKIPEDIA_API = "https://en.wikipedia.org/w/api.php"
THUMBNAIL_SIZE = 300
USER_AGENT = "RefTrends/0.4 (referee statistics; photo lookup)"


class WikipediaPhotoClient:
    """Fetch referee thumbnails from Wikipedia.

    Example:
        async with WikipediaPhotoClient() as wiki:
            url = await wiki.fetch_photo("Michael Oliver")
    """

    def __init__(self, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": USER_AGENT},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "WikipediaPhotoClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _query(self, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        query = {"action": "query", "format": "json", **params}
        try:
            client = await self._get_client()
            response = await client.get(WIKIPEDIA_API, params=query)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning({"wikipedia": {"event": "query_failed", "params": params, "error": str(exc)}})
            return None

    async def fetch_photo(self, referee_name: str) -> Optional[str]:
        search = await self._query(
            {"list": "search", "srsearch": f"{referee_name} referee", "srlimit": 1}
        )
        hits = ((search or {}).get("query") or {}).get("search") or []
        if not hits:
            return None
        title = hits[0].get("title")
        if not title:
            return None

        images = await self._query(
            {"titles": title, "prop": "pageimages", "pithumbsize": THUMBNAIL_SIZE}
        )
        pages = ((images or {}).get("query") or {}).get("pages") or {}
        for page in pages.values():
            thumbnail = page.get("thumbnail") or {}
            source = thumbnail.get("source")
            if source:
                return source
        return None


__all__ = ["WikipediaPhotoClient", "WIKIPEDIA_API"]

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel

from reftrends.config import ApiFootballSettings
from reftrends.shared.errors import ApiFootballError, ApiKeyMissingError

from .ratelimit import RateLimitConfig, SlidingWindowLimiter
from .types import Fixture, FixtureEvent, LeagueInfo, TeamStatistics

logger = logging.getLogger(__name__)

_RETRYABLE_STATUSES = (429, 500, 502, 503, 504)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse_rows(model: Type[ModelT], payload: List[Any], kind: str, **context: Any) -> List[ModelT]:
    """Validate each row, skipping the ones the API sent malformed."""
    rows: List[ModelT] = []
    for item in payload:
        try:
            rows.append(model.model_validate(item))
        except Exception as exc:
            logger.debug({"api_football_parse_error": {"kind": kind, **context, "error": str(exc)}})
    return rows


def format_api_date(target_date: date) -> str:
    """API-Football date format: YYYY-MM-DD."""
    return target_date.isoformat()


class ApiFootballClient:
    """
    Async HTTP client for the API-Football v3 endpoints.

    - Sends the API key in the `x-apisports-key` header
    - Every request passes through a shared sliding-window limiter
    - Retries transient HTTP errors with exponential backoff
    - Treats a non-empty `errors` field in the body as a failure
    """

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        settings: Optional[ApiFootballSettings] = None,
        limiter: Optional[SlidingWindowLimiter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or ApiFootballSettings()
        self.api_key = api_key or self.settings.key
        self.max_retries = self.settings.max_retries
        self.limiter = limiter or SlidingWindowLimiter(
            RateLimitConfig(
                max_requests=self.settings.requests_per_window,
                window_seconds=self.settings.window_seconds,
            )
        )
        limits = httpx.Limits(max_keepalive_connections=10, max_connections=20)
        self._client = httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=self.settings.timeout_seconds,
            limits=limits,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiFootballClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Public fetch helpers
    # ------------------------------------------------------------------
    async def fetch_fixtures(
        self,
        league_id: int,
        api_season: int,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Fixture]:
        params: Dict[str, Any] = {"league": league_id, "season": api_season}
        if date_from is not None:
            params["from"] = format_api_date(date_from)
        if date_to is not None:
            params["to"] = format_api_date(date_to)
        payload = await self._get_json("/fixtures", params)
        fixtures = self._parse_fixtures(payload)
        logger.debug(
            {
                "api_football_fixtures": {
                    "league": league_id,
                    "season": api_season,
                    "raw_count": len(payload),
                    "parsed_count": len(fixtures),
                }
            }
        )
        return fixtures

    async def fetch_fixtures_by_date(self, target_date: date) -> List[Fixture]:
        payload = await self._get_json("/fixtures", {"date": format_api_date(target_date)})
        return self._parse_fixtures(payload)

    async def fetch_fixture_statistics(self, fixture_id: int) -> List[TeamStatistics]:
        payload = await self._get_json("/fixtures/statistics", {"fixture": fixture_id})
        return _parse_rows(TeamStatistics, payload, "statistics", fixture=fixture_id)

    async def fetch_fixture_events(self, fixture_id: int) -> List[FixtureEvent]:
        payload = await self._get_json("/fixtures/events", {"fixture": fixture_id})
        return _parse_rows(FixtureEvent, payload, "event", fixture=fixture_id)

    async def fetch_leagues(self, *, country: Optional[str] = None) -> List[LeagueInfo]:
        params = {"country": country} if country else None
        payload = await self._get_json("/leagues", params)
        return _parse_rows(LeagueInfo, payload, "league")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Any]:
        if not self.api_key:
            raise ApiKeyMissingError("API_FOOTBALL_KEY is required to query API-Football.")
        headers = {"x-apisports-key": self.api_key}
        attempt = 0
        backoff = 0.5
        while True:
            await self.limiter.acquire()
            try:
                resp = await self._client.get(path, params=params, headers=headers)
                resp.raise_for_status()
                body = resp.json()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                if status in (401, 403):
                    raise ApiFootballError(f"API-Football rejected credentials ({status})", status=status) from exc
                if status not in _RETRYABLE_STATUSES or attempt >= self.max_retries:
                    raise ApiFootballError(f"API-Football request failed: {status} {path}", status=status) from exc
                logger.warning({"api_football_retry": {"path": path, "status": status, "attempt": attempt + 1}})
                await asyncio.sleep(backoff)
            except (httpx.RequestError, httpx.TimeoutException) as exc:
                if attempt >= self.max_retries:
                    raise ApiFootballError(f"API-Football transport error on {path}: {exc}") from exc
                logger.warning({"api_football_retry": {"path": path, "error": str(exc), "attempt": attempt + 1}})
                await asyncio.sleep(backoff)
            else:
                return self._unwrap(path, body)
            attempt += 1
            backoff *= 2

    @staticmethod
    def _unwrap(path: str, body: Any) -> List[Any]:
        if not isinstance(body, dict):
            raise ApiFootballError(f"Unexpected API-Football payload for {path}")
        errors = body.get("errors")
        # The API returns [] when clean and a dict of messages when not
        if errors:
            raise ApiFootballError(f"API-Football error on {path}: {errors}", errors=errors)
        response = body.get("response")
        return response if isinstance(response, list) else []

    def _parse_fixtures(self, payload: List[Any]) -> List[Fixture]:
        return _parse_rows(Fixture, payload, "fixture")


__all__ = [
    "ApiFootballClient",
    "format_api_date",
]

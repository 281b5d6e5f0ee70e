"""aiohttp test clients bound to the migrated test store."""

from __future__ import annotations

from typing import List

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer

from reftrends.providers.apifootball.types import Fixture
from reftrends.web import create_app


class StubApiClient:
    """Context-managed stand-in for ApiFootballClient."""

    def __init__(self, fixtures: List[Fixture] = (), error: Exception | None = None) -> None:
        self.fixtures = list(fixtures)
        self.error = error
        self.calls: List[tuple] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None

    async def close(self):
        return None

    async def fetch_fixtures_by_date(self, target_date):
        self.calls.append(("by_date", target_date))
        if self.error:
            raise self.error
        return list(self.fixtures)

    async def fetch_fixtures(self, league_id, api_season, *, date_from=None, date_to=None):
        self.calls.append(("fixtures", league_id))
        if self.error:
            raise self.error
        return []


@pytest.fixture
def stub_client():
    return StubApiClient


@pytest.fixture
def fixture_payload():
    def _build(fixture_id: int = 501, referee: str | None = "Michael Oliver, England") -> Fixture:
        return Fixture.model_validate(
            {
                "fixture": {
                    "id": fixture_id,
                    "referee": referee,
                    "date": "2026-10-17T19:45:00+00:00",
                    "venue": {"id": 1, "name": "Emirates Stadium", "city": "London"},
                    "status": {"long": "Not Started", "short": "NS"},
                },
                "league": {"id": 39, "name": "Premier League", "country": "England", "season": 2026},
                "teams": {
                    "home": {"id": 42, "name": "Arsenal", "logo": None},
                    "away": {"id": 49, "name": "Chelsea", "logo": None},
                },
                "goals": {"home": None, "away": None},
            }
        )

    return _build


@pytest_asyncio.fixture
async def make_web(settings, dbm):
    """Start an app over the test store; keyword arguments patch the web and API settings."""
    clients: List[TestClient] = []

    async def _make(*, client=None, api_key="test-key", **web_overrides) -> TestClient:
        app_settings = settings.model_copy(
            update={
                "web": settings.web.model_copy(update=web_overrides),
                "api_football": settings.api_football.model_copy(update={"key": api_key}),
            }
        )
        factory = (lambda: client) if client is not None else None
        test_client = TestClient(TestServer(create_app(app_settings, dbm, client_factory=factory)))
        await test_client.start_server()
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        await test_client.close()


@pytest_asyncio.fixture
async def web(make_web):
    return await make_web()

"""Fakes for the sync jobs: an in-memory API-Football client and payload builders."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Dict, Iterable, List, Optional

import pytest

from reftrends.providers.apifootball.types import Fixture, FixtureEvent, TeamStatistics
from reftrends.shared.errors import ApiFootballError

HOME_API_ID, AWAY_API_ID = 42, 49


def build_fixture(
    fixture_id: int,
    *,
    status: str = "FT",
    referee: Optional[str] = "Michael Oliver, England",
    date: str = "2025-09-01T15:00:00+00:00",
    home_goals: Optional[int] = 2,
    away_goals: Optional[int] = 1,
) -> Fixture:
    return Fixture.model_validate(
        {
            "fixture": {
                "id": fixture_id,
                "referee": referee,
                "date": date,
                "venue": {"id": 1, "name": "Emirates Stadium", "city": "London"},
                "status": {"long": "Match Finished" if status == "FT" else "Not Started", "short": status},
            },
            "league": {"id": 39, "name": "Premier League", "country": "England", "season": 2025},
            "teams": {
                "home": {"id": HOME_API_ID, "name": "Arsenal", "logo": None},
                "away": {"id": AWAY_API_ID, "name": "Chelsea", "logo": None},
            },
            "goals": {"home": home_goals, "away": away_goals},
        }
    )


def build_event(kind: str, detail: str, team_id: int, minute: int = 30, extra: Optional[int] = None) -> FixtureEvent:
    return FixtureEvent.model_validate(
        {
            "time": {"elapsed": minute, "extra": extra},
            "team": {"id": team_id, "name": "Team"},
            "player": {"id": 7, "name": "Player"},
            "type": kind,
            "detail": detail,
        }
    )


def build_statistics(home: Dict[str, int], away: Dict[str, int]) -> List[TeamStatistics]:
    return [
        TeamStatistics.model_validate(
            {
                "team": {"id": team_id, "name": "Team"},
                "statistics": [{"type": k, "value": v} for k, v in values.items()],
            }
        )
        for team_id, values in ((HOME_API_ID, home), (AWAY_API_ID, away))
    ]


class FakeApiClient:
    """Serves canned fixtures, events and statistics and records the calls made."""

    def __init__(
        self,
        fixtures: Iterable[Fixture] = (),
        *,
        events: Optional[Dict[int, List[FixtureEvent]]] = None,
        statistics: Optional[Dict[int, List[TeamStatistics]]] = None,
        failing: Iterable[int] = (),
        failing_leagues: Iterable[int] = (),
    ) -> None:
        self.fixtures = list(fixtures)
        self.events = events or {}
        self.statistics = statistics or {}
        self.failing = set(failing)
        self.failing_leagues = set(failing_leagues)
        self.calls: List[tuple] = []
        self.closed = False

    async def fetch_fixtures(self, league_id, api_season, *, date_from=None, date_to=None):
        self.calls.append(("fixtures", league_id, api_season, date_from, date_to))
        if league_id in self.failing_leagues:
            raise ApiFootballError("league unavailable", status=500)
        return list(self.fixtures)

    async def fetch_fixture_events(self, fixture_id):
        self.calls.append(("events", fixture_id))
        if fixture_id in self.failing:
            raise ApiFootballError("events unavailable", status=500)
        return self.events.get(fixture_id, [])

    async def fetch_fixture_statistics(self, fixture_id):
        self.calls.append(("statistics", fixture_id))
        return self.statistics.get(fixture_id, [])

    async def close(self):
        self.closed = True


class FakePhotoClient:
    def __init__(self, photos: Dict[str, str]) -> None:
        self.photos = photos
        self.lookups: List[str] = []

    async def fetch_photo(self, name):
        self.lookups.append(name)
        return self.photos.get(name)

    async def close(self):
        pass


@pytest.fixture
def api():
    """Builders and fakes for the sync tests."""
    return SimpleNamespace(
        client=FakeApiClient,
        photos=FakePhotoClient,
        fixture=build_fixture,
        event=build_event,
        statistics=build_statistics,
        home=HOME_API_ID,
        away=AWAY_API_ID,
    )

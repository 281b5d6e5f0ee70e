"""Shared fixtures: isolated settings, a migrated sqlite store and match builders."""

from __future__ import annotations

import itertools
from datetime import datetime
from types import SimpleNamespace
from typing import Iterable, Optional

import pytest
import pytest_asyncio

from reftrends.config import Settings, reset_settings
from reftrends.database import DBM, initialize
from reftrends.database import repository as repo
from reftrends.shared.records import CardEventRecord, MatchRecord, MatchStatsRecord, RefereeRef, TeamRef
from reftrends.sync import recalculate_referee_stats

ARSENAL = TeamRef(id=1, name="Arsenal", api_id=42)
CHELSEA = TeamRef(id=2, name="Chelsea", api_id=49)
TOTTENHAM = TeamRef(id=3, name="Tottenham", api_id=47)
OLIVER = RefereeRef(id=1, name="Michael Oliver", slug="michael-oliver")
TAYLOR = RefereeRef(id=2, name="Anthony Taylor", slug="anthony-taylor")


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep developer config and secrets out of the tests."""
    for name in ("API_FOOTBALL_KEY", "CRON_SECRET", "IP_HASH_SALT", "REFTRENDS_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("REFTRENDS_DATA_DIR", str(tmp_path / "data"))
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database={"path": str(tmp_path / "reftrends.db")},
        api_football={"key": "test-key"},
        sync={"fetch_photos": False, "league_delay_seconds": 0, "photo_delay_seconds": 0},
        web={"ip_hash_salt": "test-salt"},
        bets={"path": str(tmp_path / "bets.json")},
    )


@pytest_asyncio.fixture
async def dbm(settings: Settings):
    """Migrated database, disposed after the test."""
    path = initialize(settings)
    manager = DBM(settings, path)
    yield manager
    await manager.dispose()


@pytest.fixture
def make_match():
    """Build MatchRecord values with sensible defaults."""
    ids = itertools.count(1)

    def _make(
        *,
        kickoff: datetime = datetime(2025, 9, 1, 15, 0),
        status: str = "FT",
        season: int = 2026,
        league_api_id: int = 39,
        league_name: str = "Premier League",
        home: TeamRef = ARSENAL,
        away: TeamRef = CHELSEA,
        referee: Optional[RefereeRef] = OLIVER,
        home_yellow: int = 2,
        away_yellow: int = 2,
        home_red: int = 0,
        away_red: int = 0,
        home_fouls: int = 10,
        away_fouls: int = 10,
        home_penalties: int = 0,
        away_penalties: int = 0,
        home_goals: Optional[int] = 1,
        away_goals: Optional[int] = 1,
        with_stats: bool = True,
        card_events: Iterable[CardEventRecord] = (),
        match_id: Optional[int] = None,
    ) -> MatchRecord:
        stats = None
        if with_stats:
            stats = MatchStatsRecord(
                yellow_cards=home_yellow + away_yellow,
                red_cards=home_red + away_red,
                home_yellow_cards=home_yellow,
                away_yellow_cards=away_yellow,
                home_red_cards=home_red,
                away_red_cards=away_red,
                fouls=home_fouls + away_fouls,
                home_fouls=home_fouls,
                away_fouls=away_fouls,
                penalties=home_penalties + away_penalties,
                home_penalties=home_penalties,
                away_penalties=away_penalties,
            )
        return MatchRecord(
            id=match_id if match_id is not None else next(ids),
            kickoff=kickoff,
            status=status,
            season=season,
            league_api_id=league_api_id,
            league_name=league_name,
            home_team=home,
            away_team=away,
            referee=referee,
            stats=stats,
            home_goals=home_goals,
            away_goals=away_goals,
            card_events=tuple(card_events),
        )

    return _make


# (kickoff, home yellow, away yellow, home red, away red, home goals, away goals, penalties)
SEEDED_RESULTS = [
    (datetime(2025, 8, 16, 15), 2, 3, 0, 0, 2, 1, 1),
    (datetime(2025, 8, 23, 15), 1, 2, 0, 1, 0, 0, 0),
    (datetime(2025, 8, 30, 15), 3, 2, 0, 0, 1, 2, 0),
    (datetime(2025, 9, 13, 15), 2, 2, 0, 0, 3, 0, 1),
    (datetime(2025, 9, 20, 15), 1, 1, 0, 0, 1, 1, 0),
    (datetime(2025, 9, 27, 15), 4, 2, 1, 0, 2, 2, 0),
]
UPCOMING_KICKOFF = datetime(2099, 5, 1, 15)


async def seed_store(dbm: DBM) -> SimpleNamespace:
    """Premier League fixtures between Arsenal and Chelsea under Michael Oliver."""
    league_id = await repo.upsert_league(
        dbm, api_id=39, name="Premier League", country="England", logo=None, season=2026
    )
    arsenal = await repo.upsert_team(dbm, api_id=42, name="Arsenal", logo=None, league_id=league_id)
    chelsea = await repo.upsert_team(dbm, api_id=49, name="Chelsea", logo=None, league_id=league_id)
    referee_id = await repo.upsert_referee(dbm, name="Michael Oliver", slug="michael-oliver")

    match_ids = []
    for n, (kickoff, hy, ay, hr, ar, hg, ag, pens) in enumerate(SEEDED_RESULTS, start=1):
        home, away = (arsenal, chelsea) if n % 2 else (chelsea, arsenal)
        match_id = await repo.upsert_match(
            dbm,
            api_id=1000 + n,
            date=kickoff,
            venue="Emirates Stadium",
            status="FT",
            home_goals=hg,
            away_goals=ag,
            league_id=league_id,
            home_team_id=home,
            away_team_id=away,
            referee_id=referee_id,
            season=2026,
        )
        await repo.upsert_match_stats(
            dbm,
            match_id=match_id,
            yellow_cards=hy + ay,
            red_cards=hr + ar,
            home_yellow_cards=hy,
            away_yellow_cards=ay,
            home_red_cards=hr,
            away_red_cards=ar,
            fouls=22,
            home_fouls=11,
            away_fouls=11,
            penalties=pens,
            home_penalties=pens,
            away_penalties=0,
        )
        match_ids.append(match_id)

    upcoming_id = await repo.upsert_match(
        dbm,
        api_id=2001,
        date=UPCOMING_KICKOFF,
        venue=None,
        status="NS",
        home_goals=None,
        away_goals=None,
        league_id=league_id,
        home_team_id=arsenal,
        away_team_id=chelsea,
        referee_id=referee_id,
        season=2026,
    )
    return SimpleNamespace(
        league_id=league_id,
        arsenal_id=arsenal,
        chelsea_id=chelsea,
        referee_id=referee_id,
        match_ids=match_ids,
        upcoming_id=upcoming_id,
    )


@pytest_asyncio.fixture
async def seeded(dbm: DBM) -> SimpleNamespace:
    ids = await seed_store(dbm)
    await recalculate_referee_stats(dbm)
    return ids

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from reftrends.config import SyncSettings
from reftrends.database import DBM
from reftrends.database import repository as repo
from reftrends.providers.apifootball import ApiFootballClient, LeagueConfig
from reftrends.providers.apifootball.extract import (
    card_counts_from_events,
    card_counts_from_statistics,
    card_events_from_events,
    foul_counts_from_statistics,
    penalty_counts_from_events,
)
from reftrends.providers.apifootball.types import Fixture
from reftrends.shared.enums import FINISHED_STATUSES
from reftrends.shared.errors import ApiFootballError
from reftrends.shared.season import season_for_api
from reftrends.shared.text import clean_referee_name, generate_slug

logger = logging.getLogger(__name__)


@dataclass
class SyncCounts:
    fixtures: int = 0
    matches: int = 0
    stats: int = 0
    card_events: int = 0
    errors: int = 0

    def merge(self, other: "SyncCounts") -> None:
        self.fixtures += other.fixtures
        self.matches += other.matches
        self.stats += other.stats
        self.card_events += other.card_events
        self.errors += other.errors


def is_finished(fixture: Fixture) -> bool:
    return fixture.status_short in FINISHED_STATUSES or fixture.status_long in FINISHED_STATUSES


class FixtureSync:
    """
    Pulls fixtures for one league into the local database.

    - Teams and referees are upserted as fixtures are seen
    - Finished matches without stats get their cards and penalties from the
      event feed; fouls come from the statistics feed when enabled
    - A failing fixture is logged and counted, never fatal for the league
    """

    def __init__(self, dbm: DBM, client: ApiFootballClient, settings: Optional[SyncSettings] = None) -> None:
        self.dbm = dbm
        self.client = client
        self.settings = settings or SyncSettings()

    async def sync_league(
        self,
        league: LeagueConfig,
        season: int,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> SyncCounts:
        counts = SyncCounts()
        league_id = await repo.upsert_league(
            self.dbm,
            api_id=league.api_id,
            name=league.name,
            country=league.country,
            logo=None,
            season=season,
        )
        fixtures = await self.client.fetch_fixtures(
            league.api_id,
            season_for_api(season),
            date_from=date_from,
            date_to=date_to,
        )
        counts.fixtures = len(fixtures)
        for fixture in fixtures:
            try:
                await self._sync_fixture(fixture, league_id=league_id, season=season, counts=counts)
            except (ApiFootballError, SQLAlchemyError, ValueError) as exc:
                counts.errors += 1
                logger.warning(
                    {
                        "fixture_sync_error": {
                            "league": league.api_id,
                            "fixture": fixture.id,
                            "error": str(exc),
                        }
                    }
                )
        logger.info(
            {
                "league_sync": {
                    "league": league.name,
                    "season": season,
                    "fixtures": counts.fixtures,
                    "matches": counts.matches,
                    "stats": counts.stats,
                    "errors": counts.errors,
                }
            }
        )
        return counts

    async def sync_recent(self, league: LeagueConfig, season: int, *, today: Optional[date] = None) -> SyncCounts:
        today = today or date.today()
        return await self.sync_league(
            league,
            season,
            date_from=today - timedelta(days=self.settings.lookback_days),
            date_to=today,
        )

    async def _sync_fixture(self, fixture: Fixture, *, league_id: int, season: int, counts: SyncCounts) -> None:
        home = fixture.teams.home
        away = fixture.teams.away
        home_id = await repo.upsert_team(self.dbm, api_id=home.id, name=home.name, logo=home.logo, league_id=league_id)
        away_id = await repo.upsert_team(self.dbm, api_id=away.id, name=away.name, logo=away.logo, league_id=league_id)

        referee_id: Optional[int] = None
        referee_name = clean_referee_name(fixture.fixture.referee)
        if referee_name:
            slug = generate_slug(referee_name)
            if slug:
                referee_id = await repo.upsert_referee(self.dbm, name=referee_name, slug=slug)

        match_id = await repo.upsert_match(
            self.dbm,
            api_id=fixture.id,
            date=fixture.fixture.date,
            venue=fixture.fixture.venue.name,
            status=fixture.status_short or fixture.status_long,
            home_goals=fixture.goals.home,
            away_goals=fixture.goals.away,
            league_id=league_id,
            home_team_id=home_id,
            away_team_id=away_id,
            referee_id=referee_id,
            season=season,
        )
        counts.matches += 1

        if not is_finished(fixture):
            return
        if await repo.get_match_stats_id(self.dbm, match_id) is not None:
            return
        await self._fetch_stats(fixture, match_id=match_id, counts=counts)

    async def _fetch_stats(self, fixture: Fixture, *, match_id: int, counts: SyncCounts) -> None:
        home_api_id = fixture.teams.home.id
        events = await self.client.fetch_fixture_events(fixture.id)
        cards = card_counts_from_events(events, home_api_id)
        penalties = penalty_counts_from_events(events, home_api_id)
        card_rows = card_events_from_events(events, home_api_id)

        home_fouls = away_fouls = 0
        if self.settings.fetch_fouls:
            statistics = await self.client.fetch_fixture_statistics(fixture.id)
            fouls = foul_counts_from_statistics(statistics, home_api_id)
            home_fouls, away_fouls = fouls.home, fouls.away
            # event feed can lag behind the box score
            if cards.yellow + cards.red == 0 and statistics:
                cards = card_counts_from_statistics(statistics, home_api_id)

        stats_id = await repo.upsert_match_stats(
            self.dbm,
            match_id=match_id,
            yellow_cards=cards.yellow,
            red_cards=cards.red,
            home_yellow_cards=cards.home_yellow,
            away_yellow_cards=cards.away_yellow,
            home_red_cards=cards.home_red,
            away_red_cards=cards.away_red,
            fouls=home_fouls + away_fouls,
            home_fouls=home_fouls,
            away_fouls=away_fouls,
            penalties=penalties.total,
            home_penalties=penalties.home,
            away_penalties=penalties.away,
        )
        counts.stats += 1
        if card_rows:
            counts.card_events += await repo.replace_card_events(self.dbm, stats_id, card_rows)


async def sync_leagues(
    sync: FixtureSync,
    leagues: List[LeagueConfig],
    season: int,
    *,
    recent_only: bool = True,
) -> SyncCounts:
    total = SyncCounts()
    for league in leagues:
        if recent_only:
            total.merge(await sync.sync_recent(league, season))
        else:
            total.merge(await sync.sync_league(league, season))
    return total


__all__ = ["SyncCounts", "FixtureSync", "is_finished", "sync_leagues"]

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from time import monotonic
from typing import List, Optional

from reftrends.config import Settings
from reftrends.database import DBM, initialize
from reftrends.providers.apifootball import TOP_LEAGUES, ApiFootballClient, LeagueConfig
from reftrends.providers.wikipedia import WikipediaPhotoClient
from reftrends.shared.errors import ApiFootballError, ApiKeyMissingError
from reftrends.shared.season import current_season

from .backfill import sync_photos
from .fixtures import FixtureSync, SyncCounts
from .stats import recalculate_referee_stats

logger = logging.getLogger(__name__)


@dataclass
class DailySyncReport:
    success: bool = False
    season: int = 0
    leagues_processed: int = 0
    fixtures_updated: int = 0
    stats_created: int = 0
    referees_updated: int = 0
    photos_added: int = 0
    errors: List[str] = field(default_factory=list)
    duration: float = 0.0


async def run_daily_sync(
    settings: Settings,
    *,
    dbm: Optional[DBM] = None,
    client: Optional[ApiFootballClient] = None,
    photos: Optional[WikipediaPhotoClient] = None,
    leagues: Optional[List[LeagueConfig]] = None,
    today: Optional[date] = None,
) -> DailySyncReport:
    """Sync the last week of fixtures for the top leagues, then rebuild aggregates.

    A league that fails is recorded in the report and the run carries on.
    Resources passed in are left open; resources created here are closed.
    """
    started = monotonic()
    season = current_season(today)
    report = DailySyncReport(season=season)
    if not settings.api_football.key and client is None:
        raise ApiKeyMissingError("API_FOOTBALL_KEY not configured")

    own_dbm = dbm is None
    own_client = client is None
    if dbm is None:
        dbm = DBM(settings, initialize(settings))
    if client is None:
        client = ApiFootballClient(settings=settings.api_football)

    try:
        sync = FixtureSync(dbm, client, settings.sync)
        totals = SyncCounts()
        for index, league in enumerate(leagues or TOP_LEAGUES):
            if index and settings.sync.league_delay_seconds > 0:
                await asyncio.sleep(settings.sync.league_delay_seconds)
            try:
                counts = await sync.sync_recent(league, season, today=today)
            except ApiFootballError as exc:
                report.errors.append(f"{league.name}: {exc}")
                logger.error({"daily_sync_league_failed": {"league": league.name, "error": str(exc)}})
                continue
            totals.merge(counts)
            report.leagues_processed += 1

        report.fixtures_updated = totals.matches
        report.stats_created = totals.stats
        report.referees_updated = await recalculate_referee_stats(dbm, season)

        if settings.sync.fetch_photos:
            own_photos = photos is None
            photos = photos or WikipediaPhotoClient()
            try:
                report.photos_added = (await sync_photos(dbm, photos, settings.sync)).updated
            finally:
                if own_photos:
                    await photos.close()
    finally:
        if own_client:
            await client.close()
        if own_dbm:
            await dbm.dispose()

    report.success = not report.errors
    report.duration = round(monotonic() - started, 3)
    logger.info(
        {
            "daily_sync": {
                "season": report.season,
                "leagues": report.leagues_processed,
                "fixtures": report.fixtures_updated,
                "stats": report.stats_created,
                "referees": report.referees_updated,
                "errors": len(report.errors),
                "duration": report.duration,
            }
        }
    )
    return report


__all__ = ["DailySyncReport", "run_daily_sync"]

"""Catch-up jobs that fill in data the daily fixture sync left behind."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Awaitable, Callable, Optional

from reftrends.config import SyncSettings
from reftrends.database import DBM
from reftrends.database import repository as repo
from reftrends.providers.apifootball import ApiFootballClient
from reftrends.providers.apifootball.extract import card_events_from_events, penalty_counts_from_events
from reftrends.providers.wikipedia import WikipediaPhotoClient
from reftrends.shared.errors import ApiFootballError

from .stats import refresh_penalty_averages

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


@dataclass
class BackfillCounts:
    checked: int = 0
    updated: int = 0
    errors: int = 0


async def sync_penalties(
    dbm: DBM,
    client: ApiFootballClient,
    settings: Optional[SyncSettings] = None,
) -> BackfillCounts:
    """Re-read events for recent finished matches that show no penalties."""
    settings = settings or SyncSettings()
    since = repo.utcnow() - timedelta(days=settings.penalty_lookback_days)
    pending = await repo.list_fixtures_missing_penalties(dbm, since=since)
    counts = BackfillCounts(checked=len(pending))
    for fixture in pending:
        if fixture.match_stats_id is None:
            continue
        try:
            events = await client.fetch_fixture_events(fixture.fixture_api_id)
        except ApiFootballError as exc:
            counts.errors += 1
            logger.warning({"penalty_sync_error": {"fixture": fixture.fixture_api_id, "error": str(exc)}})
            continue
        tally = penalty_counts_from_events(events, fixture.home_team_api_id)
        if tally.total == 0:
            continue
        await repo.update_penalties(dbm, fixture.match_stats_id, home=tally.home, away=tally.away)
        counts.updated += 1
        logger.debug({"penalties_found": {"match": fixture.label, "home": tally.home, "away": tally.away}})

    await refresh_penalty_averages(dbm)
    logger.info({"penalty_sync": {"checked": counts.checked, "updated": counts.updated, "errors": counts.errors}})
    return counts


async def sync_card_events(
    dbm: DBM,
    client: ApiFootballClient,
    settings: Optional[SyncSettings] = None,
) -> BackfillCounts:
    """Fetch minute-by-minute card events for matches that only have totals."""
    settings = settings or SyncSettings()
    pending = await repo.list_fixtures_missing_card_events(dbm, limit=settings.card_event_batch)
    counts = BackfillCounts(checked=len(pending))
    for fixture in pending:
        if fixture.match_stats_id is None:
            continue
        try:
            events = await client.fetch_fixture_events(fixture.fixture_api_id)
        except ApiFootballError as exc:
            counts.errors += 1
            logger.warning({"card_event_sync_error": {"fixture": fixture.fixture_api_id, "error": str(exc)}})
            continue
        rows = card_events_from_events(events, fixture.home_team_api_id)
        if not rows:
            continue
        await repo.replace_card_events(dbm, fixture.match_stats_id, rows)
        counts.updated += 1
    logger.info({"card_event_sync": {"checked": counts.checked, "updated": counts.updated, "errors": counts.errors}})
    return counts


async def sync_photos(
    dbm: DBM,
    photos: WikipediaPhotoClient,
    settings: Optional[SyncSettings] = None,
    *,
    sleep_fn: SleepFn = asyncio.sleep,
) -> BackfillCounts:
    """Look up Wikipedia thumbnails for referees that have none."""
    settings = settings or SyncSettings()
    referees = await repo.list_referees_without_photo(dbm, limit=settings.photo_batch)
    counts = BackfillCounts(checked=len(referees))
    for index, referee in enumerate(referees):
        if index:
            await sleep_fn(settings.photo_delay_seconds)
        url = await photos.fetch_photo(referee.name)
        if not url:
            continue
        await repo.set_referee_photo(dbm, referee.id, url)
        counts.updated += 1
    logger.info({"photo_sync": {"checked": counts.checked, "updated": counts.updated}})
    return counts


__all__ = ["BackfillCounts", "sync_penalties", "sync_card_events", "sync_photos"]

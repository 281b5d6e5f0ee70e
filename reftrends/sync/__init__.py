"""Batch jobs that pull API-Football data into the local store."""

from .backfill import BackfillCounts, sync_card_events, sync_penalties, sync_photos
from .daily import DailySyncReport, run_daily_sync
from .fixtures import FixtureSync, SyncCounts, sync_leagues
from .stats import recalculate_referee_stats, refresh_penalty_averages

__all__ = [
    "BackfillCounts",
    "DailySyncReport",
    "FixtureSync",
    "SyncCounts",
    "recalculate_referee_stats",
    "refresh_penalty_averages",
    "run_daily_sync",
    "sync_card_events",
    "sync_leagues",
    "sync_penalties",
    "sync_photos",
]

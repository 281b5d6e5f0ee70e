"""Tests for sync/backfill.py - penalty, card event and photo catch-up jobs."""

from __future__ import annotations

from datetime import timedelta

import pytest

from reftrends.database import repository as repo
from reftrends.sync import sync_card_events, sync_penalties, sync_photos


async def add_recent_match(dbm, seeded, api_id=3001):
    """A finished match from two days ago with no penalties recorded."""
    match_id = await repo.upsert_match(
        dbm,
        api_id=api_id,
        date=repo.utcnow() - timedelta(days=2),
        venue=None,
        status="FT",
        home_goals=1,
        away_goals=0,
        league_id=seeded.league_id,
        home_team_id=seeded.arsenal_id,
        away_team_id=seeded.chelsea_id,
        referee_id=seeded.referee_id,
        season=2026,
    )
    await repo.upsert_match_stats(dbm, match_id=match_id, yellow_cards=3, home_yellow_cards=1, away_yellow_cards=2)
    return match_id


class TestSyncPenalties:
    """Tests for sync_penalties."""

    @pytest.mark.asyncio
    async def test_penalties_found(self, dbm, seeded, settings, api):
        """Recent matches are re-read and season penalty averages refreshed."""
        match_id = await add_recent_match(dbm, seeded)
        client = api.client(
            events={3001: [api.event("Goal", "Penalty", api.home, 20), api.event("Goal", "Missed Penalty", api.away, 80)]}
        )
        counts = await sync_penalties(dbm, client, settings.sync)

        assert (counts.checked, counts.updated, counts.errors) == (1, 1, 0)
        [match] = [m for m in await repo.load_match_records(dbm) if m.id == match_id]
        assert (match.stats.home_penalties, match.stats.away_penalties, match.stats.penalties) == (1, 1, 2)

        [(row, _)] = await repo.list_season_stats(dbm)
        assert row.total_penalties == 4
        assert row.avg_penalties == 0.57

    @pytest.mark.asyncio
    async def test_errors_and_empty_events(self, dbm, seeded, settings, api):
        """Failures are counted; matches without penalties stay untouched."""
        await add_recent_match(dbm, seeded, api_id=3001)
        await add_recent_match(dbm, seeded, api_id=3002)
        client = api.client(failing=[3001])
        counts = await sync_penalties(dbm, client, settings.sync)
        assert (counts.checked, counts.updated, counts.errors) == (2, 0, 1)


class TestSyncCardEvents:
    """Tests for sync_card_events."""

    @pytest.mark.asyncio
    async def test_events_stored(self, dbm, seeded, settings, api):
        """Matches with cards but no events get their timeline."""
        client = api.client(
            events={
                1001: [
                    api.event("Card", "Yellow Card", api.home, 20),
                    api.event("Card", "Red Card", api.away, 88),
                ]
            }
        )
        counts = await sync_card_events(dbm, client, settings.sync)
        assert (counts.checked, counts.updated) == (6, 1)

        records = await repo.load_match_records(dbm, with_card_events=True)
        [match] = [m for m in records if m.id == seeded.match_ids[0]]
        assert [(e.minute, e.card_type.value, e.is_home) for e in match.card_events] == [
            (20, "yellow", True),
            (88, "red", False),
        ]
        again = await sync_card_events(dbm, api.client(), settings.sync)
        assert again.checked == 5


class TestSyncPhotos:
    """Tests for sync_photos."""

    @pytest.mark.asyncio
    async def test_photos(self, dbm, seeded, settings, api):
        """Found photos are saved, with a pause between lookups."""
        await repo.upsert_referee(dbm, name="Anthony Taylor", slug="anthony-taylor")
        photos = api.photos({"Michael Oliver": "https://img/oliver.jpg"})
        pauses = []

        async def fake_sleep(seconds):
            pauses.append(seconds)

        counts = await sync_photos(dbm, photos, settings.sync, sleep_fn=fake_sleep)

        assert (counts.checked, counts.updated) == (2, 1)
        assert photos.lookups == ["Anthony Taylor", "Michael Oliver"]
        assert pauses == [0]
        referee = await repo.get_referee(dbm, seeded.referee_id)
        assert referee.photo == "https://img/oliver.jpg"

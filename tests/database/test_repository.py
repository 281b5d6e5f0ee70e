"""Tests for database/repository.py against a migrated sqlite file."""

from __future__ import annotations

import datetime as dt

import pytest
from sqlalchemy import text

from reftrends.database import initialize, repository as repo
from reftrends.database.init import current_revision
from reftrends.providers.apifootball.extract import CardEventRow
from reftrends.shared.enums import CardType


class TestInitialize:
    """Schema bootstrap."""

    @pytest.mark.asyncio
    async def test_tables_exist(self, dbm):
        """Migrations create every table, empty."""
        counts = await repo.table_counts(dbm)
        assert counts == {
            "league": 0,
            "team": 0,
            "referee": 0,
            "match": 0,
            "match_stats": 0,
            "card_event": 0,
            "referee_season_stats": 0,
            "referee_rating": 0,
        }

    @pytest.mark.asyncio
    async def test_initialize_is_repeatable(self, dbm, settings):
        """A second initialize finds the schema at head and keeps the data."""
        await repo.upsert_referee(dbm, name="Michael Oliver", slug="michael-oliver")
        head = current_revision(dbm.db_path)
        assert head == "0001_initial_schema"
        assert initialize(settings) == dbm.db_path
        assert current_revision(dbm.db_path) == head
        assert (await repo.table_counts(dbm))["referee"] == 1

    @pytest.mark.asyncio
    async def test_raw_strings_are_rejected(self, dbm):
        """Queries must be SQLAlchemy constructs."""
        with pytest.raises(TypeError):
            await dbm.read("select 1")
        rows = await dbm.read(text("select 1 as one"))
        assert rows[0]["one"] == 1

    @pytest.mark.asyncio
    async def test_writes_need_params(self, dbm):
        """Unparameterised writes are refused."""
        with pytest.raises(ValueError):
            await dbm.write(text("delete from referee"))
        written = await dbm.write(
            text("insert into referee (name, slug) values (:name, :slug)"),
            {"name": "Michael Oliver", "slug": "michael-oliver"},
        )
        assert written == 1

    @pytest.mark.asyncio
    async def test_transaction_rolls_back(self, dbm):
        """An error inside a transaction leaves nothing behind."""
        with pytest.raises(RuntimeError):
            async with dbm.transaction() as session:
                await session.execute(
                    text("insert into referee (name, slug) values (:name, :slug)"),
                    {"name": "Anthony Taylor", "slug": "anthony-taylor"},
                )
                raise RuntimeError("boom")
        assert (await repo.table_counts(dbm))["referee"] == 0


class TestUpserts:
    """Idempotent writes keyed by provider ids."""

    @pytest.mark.asyncio
    async def test_league_upsert_updates_in_place(self, dbm):
        """Second upsert of the same api id keeps the row id."""
        first = await repo.upsert_league(dbm, api_id=39, name="EPL", country="England", logo=None, season=2025)
        second = await repo.upsert_league(
            dbm, api_id=39, name="Premier League", country="England", logo="l.png", season=2026
        )
        assert first == second
        leagues = await repo.list_leagues(dbm)
        assert [(l.name, l.season, l.logo) for l in leagues] == [("Premier League", 2026, "l.png")]

    @pytest.mark.asyncio
    async def test_referee_keyed_by_slug(self, dbm):
        """Same slug, same referee."""
        a = await repo.upsert_referee(dbm, name="M. Oliver", slug="m-oliver")
        b = await repo.upsert_referee(dbm, name="M. Oliver", slug="m-oliver")
        c = await repo.upsert_referee(dbm, name="A. Taylor", slug="a-taylor")
        assert a == b != c
        assert (await repo.get_referee_by_slug(dbm, "a-taylor")).id == c

    @pytest.mark.asyncio
    async def test_match_keeps_known_referee(self, seeded, dbm):
        """A later sync without a referee does not clear the appointment."""
        await repo.upsert_match(
            dbm,
            api_id=2001,
            date=dt.datetime(2099, 5, 1, 15, tzinfo=dt.timezone.utc),
            venue="Emirates Stadium",
            status="NS",
            home_goals=None,
            away_goals=None,
            league_id=seeded.league_id,
            home_team_id=seeded.arsenal_id,
            away_team_id=seeded.chelsea_id,
            referee_id=None,
            season=2026,
        )
        upcoming = await repo.load_match_records(dbm, finished_only=False, upcoming_only=True)
        assert len(upcoming) == 1
        assert upcoming[0].referee.id == seeded.referee_id
        assert upcoming[0].venue == "Emirates Stadium"
        assert upcoming[0].kickoff == dt.datetime(2099, 5, 1, 15)

    @pytest.mark.asyncio
    async def test_match_stats_rejects_unknown_columns(self, seeded, dbm):
        """Only real tally columns are accepted."""
        with pytest.raises(ValueError):
            await repo.upsert_match_stats(dbm, match_id=seeded.match_ids[0], corners=5)

    @pytest.mark.asyncio
    async def test_match_stats_partial_update(self, seeded, dbm):
        """Upserting a subset leaves other tallies alone."""
        match_id = seeded.match_ids[0]
        stats_id = await repo.upsert_match_stats(dbm, match_id=match_id, fouls=30, home_fouls=14, away_fouls=16)
        assert stats_id == await repo.get_match_stats_id(dbm, match_id)
        [record] = [m for m in await repo.load_match_records(dbm) if m.id == match_id]
        assert record.stats.fouls == 30
        assert record.stats.yellow_cards == 5


class TestMatchRecords:
    """load_match_records filters and ordering."""

    @pytest.mark.asyncio
    async def test_finished_newest_first(self, seeded, dbm):
        """Default: finished matches, newest first."""
        records = await repo.load_match_records(dbm)
        assert len(records) == 6
        assert records[0].kickoff > records[-1].kickoff
        assert all(r.is_finished for r in records)
        assert records[0].league_name == "Premier League"
        assert records[0].referee.slug == "michael-oliver"

    @pytest.mark.asyncio
    async def test_filters(self, seeded, dbm):
        """Team, referee, season, date range and limit."""
        assert len(await repo.load_match_records(dbm, team_id=seeded.arsenal_id)) == 6
        assert len(await repo.load_match_records(dbm, referee_id=seeded.referee_id, limit=2)) == 2
        assert await repo.load_match_records(dbm, season=2025) == []
        september = await repo.load_match_records(
            dbm, date_from=dt.datetime(2025, 9, 1), date_to=dt.datetime(2025, 10, 1), newest_first=False
        )
        assert [r.kickoff.day for r in september] == [13, 20, 27]
        everything = await repo.load_match_records(dbm, finished_only=False)
        assert len(everything) == 7

    @pytest.mark.asyncio
    async def test_card_events(self, seeded, dbm):
        """Card events are attached only when asked for."""
        match_id = seeded.match_ids[0]
        stats_id = await repo.get_match_stats_id(dbm, match_id)
        rows = [
            CardEventRow(minute=70, extra_minute=None, card_type=CardType.YELLOW, team_api_id=49, player_name="B", is_home=False),
            CardEventRow(minute=10, extra_minute=None, card_type=CardType.RED, team_api_id=42, player_name="A", is_home=True),
        ]
        assert await repo.replace_card_events(dbm, stats_id, rows) == 2
        # replacing again must not duplicate
        await repo.replace_card_events(dbm, stats_id, rows)

        plain = await repo.load_match_records(dbm)
        assert all(r.card_events == () for r in plain)
        records = await repo.load_match_records(dbm, with_card_events=True)
        [record] = [r for r in records if r.id == match_id]
        assert [(e.minute, e.card_type, e.is_home) for e in record.card_events] == [
            (10, CardType.RED, True),
            (70, CardType.YELLOW, False),
        ]
        assert (await repo.table_counts(dbm))["card_event"] == 2


class TestBackfillQueues:
    """Queries that feed the backfill jobs."""

    @pytest.mark.asyncio
    async def test_missing_card_events(self, seeded, dbm):
        """Matches with cards but no events, newest first."""
        pending = await repo.list_fixtures_missing_card_events(dbm, limit=3)
        assert len(pending) == 3
        assert pending[0].fixture_api_id == 1006
        assert pending[0].label == "Chelsea vs Arsenal"
        assert pending[0].home_team_api_id == 49

    @pytest.mark.asyncio
    async def test_missing_penalties(self, seeded, dbm):
        """Finished matches since a date whose penalty tally is zero."""
        pending = await repo.list_fixtures_missing_penalties(dbm, since=dt.datetime(2025, 8, 20))
        assert sorted(p.fixture_api_id for p in pending) == [1002, 1003, 1005, 1006]
        await repo.update_penalties(dbm, pending[0].match_stats_id, home=1, away=1)
        again = await repo.list_fixtures_missing_penalties(dbm, since=dt.datetime(2025, 8, 20))
        assert len(again) == 3

    @pytest.mark.asyncio
    async def test_photos(self, seeded, dbm):
        """Referees without photos until one is set."""
        [referee] = await repo.list_referees_without_photo(dbm, limit=10)
        await repo.set_referee_photo(dbm, referee.id, "https://img/ref.jpg")
        assert await repo.list_referees_without_photo(dbm, limit=10) == []
        assert (await repo.get_referee(dbm, referee.id)).photo == "https://img/ref.jpg"


class TestSeasonStats:
    """Stored referee aggregates."""

    @pytest.mark.asyncio
    async def test_seeded_aggregate(self, seeded, dbm):
        """One row for the seeded referee with the seeded totals."""
        [(row, referee)] = await repo.list_season_stats(dbm)
        assert referee.id == seeded.referee_id
        assert (row.season, row.league_api_id, row.matches_officiated) == (2026, 39, 6)
        assert row.total_yellow_cards == 25
        assert row.total_red_cards == 2
        assert row.avg_yellow_cards == pytest.approx(4.17)
        assert row.total_penalties == 2

    @pytest.mark.asyncio
    async def test_filters(self, seeded, dbm):
        """min_matches and season filters."""
        assert await repo.list_season_stats(dbm, min_matches=7) == []
        assert await repo.list_season_stats(dbm, season=2025) == []
        assert len(await repo.list_season_stats(dbm, referee_id=seeded.referee_id)) == 1

    @pytest.mark.asyncio
    async def test_update_penalties(self, seeded, dbm):
        """Penalty columns of an existing row are patched."""
        touched = await repo.update_season_penalties(
            dbm,
            referee_id=seeded.referee_id,
            season=2026,
            league_api_id=39,
            total_penalties=4,
            avg_penalties=0.67,
            strictness_index=5.5,
        )
        assert touched == 1
        [(row, _)] = await repo.list_season_stats(dbm)
        assert (row.total_penalties, row.avg_penalties, row.strictness_index) == (4, 0.67, 5.5)


class TestRatings:
    """One rating per referee and hashed IP."""

    @pytest.mark.asyncio
    async def test_upsert_replaces_rating(self, seeded, dbm):
        """Rating again from the same IP updates the existing row."""
        await repo.upsert_rating(dbm, referee_id=seeded.referee_id, ip_hash="a", rating=2, comment=None)
        updated = await repo.upsert_rating(dbm, referee_id=seeded.referee_id, ip_hash="a", rating=5, comment="fair")
        await repo.upsert_rating(dbm, referee_id=seeded.referee_id, ip_hash="b", rating=3, comment=None)
        assert updated.rating == 5
        assert updated.comment == "fair"
        ratings = await repo.list_ratings(dbm, seeded.referee_id)
        assert sorted(r.rating for r in ratings) == [3, 5]
        assert len(await repo.list_ratings(dbm, seeded.referee_id, limit=1)) == 1
        assert len(await repo.list_ratings(dbm, seeded.referee_id, limit=None)) == 2
        assert (await repo.get_rating(dbm, seeded.referee_id, "b")).rating == 3
        assert await repo.get_rating(dbm, seeded.referee_id, "zzz") is None

    @pytest.mark.asyncio
    async def test_upsert_returns_stored_row(self, seeded, dbm):
        """The returned rating is the stored row, keeping its id and creation time on update."""
        first = await repo.upsert_rating(dbm, referee_id=seeded.referee_id, ip_hash="a", rating=2, comment=None)
        again = await repo.upsert_rating(dbm, referee_id=seeded.referee_id, ip_hash="a", rating=4, comment=None)
        assert first.id is not None
        assert again.id == first.id
        assert again.created_at == first.created_at
        assert again.rating == 4


class TestHelpers:
    """Time helpers."""

    def test_naive_utc(self):
        """Aware datetimes are converted to naive UTC."""
        aware = dt.datetime(2025, 9, 1, 17, 0, tzinfo=dt.timezone(dt.timedelta(hours=2)))
        assert repo.naive_utc(aware) == dt.datetime(2025, 9, 1, 15, 0)
        naive = dt.datetime(2025, 9, 1, 15, 0)
        assert repo.naive_utc(naive) is naive

    def test_utcnow_is_naive(self):
        """Stored times carry no tzinfo."""
        assert repo.utcnow().tzinfo is None

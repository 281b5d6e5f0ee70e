"""Tests for web/matches.py - fixtures, head to head and predictions."""

from __future__ import annotations

import pytest

from reftrends.database import repository as repo
from reftrends.shared.errors import ApiFootballError, ApiKeyMissingError


class TestHeadToHead:
    """Tests for /api/head-to-head."""

    @pytest.mark.asyncio
    async def test_history(self, web, seeded):
        """A team's record and cards under one referee."""
        resp = await web.get(f"/api/head-to-head?teamId={seeded.arsenal_id}&refereeId={seeded.referee_id}")
        assert resp.status == 200
        body = await resp.json()
        assert body["team"]["name"] == "Arsenal"
        assert body["team"]["league"] == "Premier League"
        assert body["referee"]["slug"] == "michael-oliver"
        assert len(body["matches"]) == 6
        stats = body["stats"]
        assert (stats["wins"], stats["draws"], stats["losses"]) == (1, 3, 2)
        assert stats["avg_yellow"] == 2.0
        assert body["comparison"]["percent_diff"] == 0.0

    @pytest.mark.asyncio
    async def test_missing_params(self, web):
        """Both ids are required."""
        resp = await web.get("/api/head-to-head?teamId=1")
        assert resp.status == 400
        assert (await resp.json())["error"] == "Missing refereeId"

    @pytest.mark.asyncio
    async def test_invalid_param(self, web):
        """Ids must be integers."""
        resp = await web.get("/api/head-to-head?teamId=abc&refereeId=1")
        assert resp.status == 400

    @pytest.mark.asyncio
    async def test_unknown_team(self, web, seeded):
        """Unknown ids are a 404."""
        resp = await web.get(f"/api/head-to-head?teamId=999&refereeId={seeded.referee_id}")
        assert resp.status == 404


class TestFixtures:
    """Tests for the fixture listings."""

    @pytest.mark.asyncio
    async def test_list(self, web, seeded):
        """Finished and upcoming matches, newest first."""
        body = await (await web.get("/api/fixtures")).json()
        assert len(body) == 7
        assert body[0]["id"] == seeded.upcoming_id
        assert body[0]["status"] == "NS"
        assert body[0]["referee"]["slug"] == "michael-oliver"
        assert body[1]["venue"] == "Emirates Stadium"

    @pytest.mark.asyncio
    async def test_filters(self, web, seeded):
        """League and referee filters narrow the list."""
        assert await (await web.get("/api/fixtures?refereeId=999")).json() == []
        by_league = await (await web.get(f"/api/fixtures?leagueId={seeded.league_id}")).json()
        assert len(by_league) == 7

    @pytest.mark.asyncio
    async def test_today(self, make_web, stub_client, fixture_payload):
        """Today's referee appointments come straight from the API."""
        client = stub_client([fixture_payload(501), fixture_payload(502, referee=None)])
        web = await make_web(client=client)
        body = await (await web.get("/api/fixtures/today")).json()
        assert body["count"] == 1
        [assignment] = body["assignments"]
        assert assignment["referee"] == "Michael Oliver"
        assert assignment["home_team"] == "Arsenal"
        assert client.calls[0][0] == "by_date"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error,status",
        [(ApiKeyMissingError("API_FOOTBALL_KEY not configured"), 503), (ApiFootballError("upstream down"), 502)],
    )
    async def test_today_errors(self, make_web, stub_client, error, status):
        """Provider failures map to 503 and 502."""
        web = await make_web(client=stub_client(error=error))
        resp = await web.get("/api/fixtures/today")
        assert resp.status == status
        assert (await resp.json())["error"] == str(error)


class TestPredictions:
    """Tests for value bets and the prediction endpoint."""

    @pytest.mark.asyncio
    async def test_value_bets_upcoming(self, web, seeded):
        """With nothing today the next upcoming fixtures are predicted."""
        body = await (await web.get("/api/value-bets")).json()
        assert body["is_upcoming"] is True
        [fixture] = body["fixtures"]
        assert fixture["id"] == seeded.upcoming_id
        assert fixture["referee"]["matches_officiated"] == 6
        assert fixture["prediction"]["expected_yellow_cards"] > 0
        assert fixture["prediction"]["confidence"] in ("high", "medium", "low")
        assert fixture["recommendation"]["primary_pick"]

    @pytest.mark.asyncio
    async def test_predict(self, web, seeded):
        """Prediction with both teams and their compatibility."""
        resp = await web.get(
            f"/api/predict?refereeId={seeded.referee_id}"
            f"&homeTeamId={seeded.arsenal_id}&awayTeamId={seeded.chelsea_id}"
        )
        assert resp.status == 200
        body = await resp.json()
        assert body["referee"]["name"] == "Michael Oliver"
        assert body["home_team"]["avg_yellow_received"] == 2.0
        assert body["away_team"]["matches_played"] == 6
        assert set(body["compatibility"]) == {"home", "away"}
        assert body["compatibility"]["home"]["historical_matches"] == 6
        assert 0 <= body["prediction"]["over35_probability"] <= 100

    @pytest.mark.asyncio
    async def test_predict_referee_only(self, web, seeded):
        """Teams are optional."""
        body = await (await web.get(f"/api/predict?refereeId={seeded.referee_id}")).json()
        assert body["home_team"] is None
        assert body["compatibility"] == {}

    @pytest.mark.asyncio
    async def test_predict_without_stats(self, web, dbm):
        """A referee with no aggregates cannot be predicted."""
        referee_id = await repo.upsert_referee(dbm, name="Anthony Taylor", slug="anthony-taylor")
        resp = await web.get(f"/api/predict?refereeId={referee_id}")
        assert resp.status == 404

    @pytest.mark.asyncio
    async def test_predict_requires_referee(self, web):
        """refereeId is mandatory."""
        assert (await web.get("/api/predict")).status == 400

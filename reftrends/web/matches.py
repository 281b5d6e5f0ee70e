"""Fixture, head-to-head and card prediction endpoints."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from aiohttp import web

from reftrends.analytics.head_to_head import team_referee_history
from reftrends.analytics.predictions import (
    RefereeProfile,
    calculate_compatibility_score,
    calculate_expected_cards,
    generate_betting_recommendation,
    historical_matches,
    team_profile,
)
from reftrends.database import DBM
from reftrends.database import repository as repo
from reftrends.providers.apifootball.extract import todays_assignments
from reftrends.shared.errors import NotFoundError
from reftrends.shared.records import MatchRecord
from reftrends.shared.season import current_season

from .common import CLIENT_FACTORY_KEY, DBM_KEY, json_response, query_int
from .referees import match_summary, referee_dict

logger = logging.getLogger(__name__)

FIXTURE_LIMIT = 50
TODAY_LIMIT = 20
UPCOMING_LIMIT = 10
FORM_MATCHES = 10


async def referee_profile_for(dbm: DBM, referee_id: int, season: Optional[int] = None) -> Optional[RefereeProfile]:
    """Prediction inputs for a referee: the busiest stored aggregate plus recent form.

    Prefers the given season's rows and falls back to any season.
    """
    rows = [row for row, _ in await repo.list_season_stats(dbm, referee_id=referee_id)]
    if season is not None:
        rows = [r for r in rows if r.season == season] or rows
    if not rows:
        return None
    main = max(rows, key=lambda r: r.matches_officiated)
    recent = await repo.load_match_records(dbm, referee_id=referee_id, limit=FORM_MATCHES)
    return RefereeProfile(
        avg_yellow_cards=main.avg_yellow_cards,
        avg_red_cards=main.avg_red_cards,
        matches_officiated=main.matches_officiated,
        strictness_index=main.strictness_index,
        recent_form=[float(m.yellow_cards) for m in reversed(recent) if m.has_stats],
    )


def _fixture_dict(match: MatchRecord) -> Dict[str, Any]:
    return {
        **match_summary(match),
        "home_team_logo": match.home_team.logo,
        "away_team_logo": match.away_team.logo,
        "venue": match.venue,
        "season": match.season,
        "referee": (
            {"id": match.referee.id, "name": match.referee.name, "slug": match.referee.slug}
            if match.referee
            else None
        ),
    }


async def head_to_head(request: web.Request) -> web.Response:
    dbm = request.app[DBM_KEY]
    team_id = query_int(request, "teamId", required=True)
    referee_id = query_int(request, "refereeId", required=True)

    team_row = await repo.get_team(dbm, team_id)
    referee = await repo.get_referee(dbm, referee_id)
    if team_row is None or referee is None:
        raise NotFoundError("Team or referee not found")
    team, league = team_row

    matches = await repo.load_match_records(dbm, team_id=team_id)
    history = team_referee_history(matches, team_id, referee_id)
    return json_response(
        {
            "team": {"id": team.id, "name": team.name, "logo": team.logo, "league": league.name if league else None},
            "referee": referee_dict(referee),
            "matches": history.matches,
            "stats": history.stats,
            "comparison": history.comparison,
        }
    )


async def list_fixtures(request: web.Request) -> web.Response:
    dbm = request.app[DBM_KEY]
    matches = await repo.load_match_records(
        dbm,
        finished_only=False,
        league_id=query_int(request, "leagueId"),
        referee_id=query_int(request, "refereeId"),
        limit=FIXTURE_LIMIT,
    )
    return json_response([_fixture_dict(m) for m in matches])


async def todays_fixtures(request: web.Request) -> web.Response:
    today = repo.utcnow().date()
    async with request.app[CLIENT_FACTORY_KEY]() as client:
        fixtures = await client.fetch_fixtures_by_date(today)
    assignments = todays_assignments(fixtures)
    return json_response({"assignments": assignments, "count": len(assignments), "date": today.isoformat()})


async def _predicted_fixture(dbm: DBM, match: MatchRecord, season: int) -> Dict[str, Any]:
    body = _fixture_dict(match)
    body["prediction"] = None
    body["recommendation"] = None
    if match.referee is None:
        return body
    profile = await referee_profile_for(dbm, match.referee.id, season)
    if profile is None:
        return body
    body["referee"].update(
        {
            "avg_yellow_cards": profile.avg_yellow_cards,
            "avg_red_cards": profile.avg_red_cards,
            "matches_officiated": profile.matches_officiated,
            "strictness_index": profile.strictness_index,
        }
    )
    prediction = calculate_expected_cards(profile)
    body["prediction"] = prediction
    body["recommendation"] = generate_betting_recommendation(prediction)
    return body


async def value_bets(request: web.Request) -> web.Response:
    dbm = request.app[DBM_KEY]
    now = repo.utcnow()
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    season = current_season(now.date())

    matches = await repo.load_match_records(
        dbm,
        finished_only=False,
        upcoming_only=True,
        date_from=start,
        date_to=start + timedelta(days=1),
        newest_first=False,
        limit=TODAY_LIMIT,
    )
    is_upcoming = False
    if not matches:
        is_upcoming = True
        matches = await repo.load_match_records(
            dbm,
            finished_only=False,
            upcoming_only=True,
            date_from=now,
            newest_first=False,
            limit=UPCOMING_LIMIT,
        )
    fixtures = [await _predicted_fixture(dbm, m, season) for m in matches]
    return json_response({"fixtures": fixtures, "is_upcoming": is_upcoming})


async def predict(request: web.Request) -> web.Response:
    dbm = request.app[DBM_KEY]
    referee_id = query_int(request, "refereeId", required=True)
    home_id = query_int(request, "homeTeamId")
    away_id = query_int(request, "awayTeamId")

    referee = await repo.get_referee(dbm, referee_id)
    if referee is None:
        raise NotFoundError("Referee not found")
    profile = await referee_profile_for(dbm, referee_id, current_season())
    if profile is None:
        raise NotFoundError("No statistics for this referee yet")

    home = away = None
    compatibility: Dict[str, Any] = {}
    for side, team_id in (("home", home_id), ("away", away_id)):
        if team_id is None:
            continue
        team_matches = await repo.load_match_records(dbm, team_id=team_id)
        team = team_profile(team_matches, team_id)
        if side == "home":
            home = team
        else:
            away = team
        with_ref = [m for m in team_matches if m.referee is not None and m.referee.id == referee_id]
        compatibility[side] = calculate_compatibility_score(
            historical_matches(with_ref, team_id),
            profile.avg_yellow_cards,
            team.avg_yellow_received if team else profile.avg_yellow_cards / 2,
        )

    prediction = calculate_expected_cards(profile, home, away)
    return json_response(
        {
            "referee": referee_dict(referee),
            "prediction": prediction,
            "recommendation": generate_betting_recommendation(prediction),
            "compatibility": compatibility,
            "home_team": home,
            "away_team": away,
        }
    )


def setup_routes(app: web.Application) -> None:
    app.router.add_get("/api/head-to-head", head_to_head)
    app.router.add_get("/api/fixtures", list_fixtures)
    app.router.add_get("/api/fixtures/today", todays_fixtures)
    app.router.add_get("/api/value-bets", value_bets)
    app.router.add_get("/api/predict", predict)


__all__ = ["referee_profile_for", "setup_routes"]

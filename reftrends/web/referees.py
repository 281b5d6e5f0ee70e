"""Referee listing, profile and community rating endpoints."""

from __future__ import annotations

import hashlib
import logging
from collections import Counter, defaultdict
from typing import Any, Dict, List, Optional

from aiohttp import web

from reftrends.analytics.predictions import analyze_referee_form
from reftrends.analytics.streaks import calculate_trend, detect_streaks
from reftrends.database import repository as repo
from reftrends.database.schema import Referee, RefereeSeasonStats
from reftrends.providers.apifootball import league_name
from reftrends.shared.errors import NotFoundError, ValidationError
from reftrends.shared.records import MatchRecord
from reftrends.shared.season import format_season

from .common import DBM_KEY, SETTINGS_KEY, json_response, path_int, read_json

logger = logging.getLogger(__name__)

FEATURED_LIMIT = 8
FEATURED_MIN_MATCHES = 5
TOP_STATS_MIN_MATCHES = 3
TOP_STATS_LIMIT = 5
PROFILE_RECENT_MATCHES = 10
RATINGS_WINDOW = 50
RECENT_COMMENTS = 10
MAX_COMMENT_LENGTH = 500


def referee_dict(referee: Referee) -> Dict[str, Any]:
    return {
        "id": referee.id,
        "name": referee.name,
        "slug": referee.slug,
        "nationality": referee.nationality,
        "photo": referee.photo,
    }


def season_stats_dict(row: RefereeSeasonStats) -> Dict[str, Any]:
    return {
        "season": row.season,
        "season_label": format_season(row.season),
        "league_api_id": row.league_api_id,
        "league": league_name(row.league_api_id),
        "matches_officiated": row.matches_officiated,
        "total_yellow_cards": row.total_yellow_cards,
        "total_red_cards": row.total_red_cards,
        "avg_yellow_cards": row.avg_yellow_cards,
        "avg_red_cards": row.avg_red_cards,
        "total_penalties": row.total_penalties,
        "avg_penalties": row.avg_penalties,
        "total_fouls": row.total_fouls,
        "avg_fouls": row.avg_fouls,
        "strictness_index": row.strictness_index,
        "home_bias_score": row.home_bias_score,
    }


def match_summary(match: MatchRecord) -> Dict[str, Any]:
    return {
        "id": match.id,
        "date": match.kickoff.isoformat(),
        "league": match.league_name,
        "home_team": match.home_team.name,
        "away_team": match.away_team.name,
        "home_goals": match.home_goals,
        "away_goals": match.away_goals,
        "status": match.status,
        "yellow_cards": match.yellow_cards,
        "red_cards": match.red_cards,
        "penalties": match.penalties,
    }


def form_entry(match: MatchRecord) -> Dict[str, Any]:
    return {
        "yellow_cards": match.yellow_cards,
        "red_cards": match.red_cards,
        "date": match.date.isoformat(),
        "teams": f"{match.home_team.name} vs {match.away_team.name}",
    }


def client_ip(request: web.Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.headers.get("x-real-ip") or "anonymous"


def hash_ip(ip: str, salt: str) -> str:
    return hashlib.sha256((ip + salt).encode("utf-8")).hexdigest()


async def list_referees(request: web.Request) -> web.Response:
    dbm = request.app[DBM_KEY]
    referees = await repo.list_referees(dbm)
    stats: Dict[int, List[Dict[str, Any]]] = defaultdict(list)
    for row, _ in await repo.list_season_stats(dbm):
        stats[row.referee_id].append(season_stats_dict(row))
    return json_response([{**referee_dict(r), "season_stats": stats.get(r.id, [])} for r in referees])


async def featured_referees(request: web.Request) -> web.Response:
    dbm = request.app[DBM_KEY]
    rows = await repo.list_season_stats(dbm, min_matches=FEATURED_MIN_MATCHES)
    seen: set[int] = set()
    featured: List[Dict[str, Any]] = []
    for row, referee in rows:
        if referee.id in seen:
            continue
        seen.add(referee.id)
        featured.append(
            {
                **referee_dict(referee),
                "stats": {
                    "matches_officiated": row.matches_officiated,
                    "avg_yellow_cards": row.avg_yellow_cards,
                    "avg_red_cards": row.avg_red_cards,
                    "strictness_index": row.strictness_index,
                    "league": league_name(row.league_api_id),
                },
            }
        )
        if len(featured) >= FEATURED_LIMIT:
            break

    if not featured:
        for referee in (await repo.list_referees(dbm))[:FEATURED_LIMIT]:
            featured.append({**referee_dict(referee), "stats": None})
    return json_response({"referees": featured})


async def top_stats(request: web.Request) -> web.Response:
    dbm = request.app[DBM_KEY]
    best: Dict[int, tuple[RefereeSeasonStats, Referee]] = {}
    for row, referee in await repo.list_season_stats(dbm, min_matches=TOP_STATS_MIN_MATCHES):
        current = best.get(referee.id)
        if current is None or row.matches_officiated > current[0].matches_officiated:
            best[referee.id] = (row, referee)

    rows = list(best.values())
    rankings = {
        "most_cards": sorted(rows, key=lambda r: r[0].total_yellow_cards + r[0].total_red_cards, reverse=True),
        "strictest": sorted(rows, key=lambda r: r[0].strictness_index, reverse=True),
        "most_matches": sorted(rows, key=lambda r: r[0].matches_officiated, reverse=True),
    }

    form_cache: Dict[int, List[Dict[str, Any]]] = {}

    async def entry(row: RefereeSeasonStats, referee: Referee) -> Dict[str, Any]:
        if referee.id not in form_cache:
            recent = await repo.load_match_records(dbm, referee_id=referee.id, limit=5)
            form_cache[referee.id] = [form_entry(m) for m in recent]
        return {
            **referee_dict(referee),
            "league": league_name(row.league_api_id),
            "matches_officiated": row.matches_officiated,
            "total_yellow_cards": row.total_yellow_cards,
            "total_red_cards": row.total_red_cards,
            "avg_yellow_cards": row.avg_yellow_cards,
            "avg_red_cards": row.avg_red_cards,
            "strictness_index": row.strictness_index,
            "recent_form": form_cache[referee.id],
        }

    body: Dict[str, Any] = {}
    for name, ranked in rankings.items():
        body[name] = [await entry(row, referee) for row, referee in ranked[:TOP_STATS_LIMIT]]
    return json_response(body)


async def referee_profile(request: web.Request) -> web.Response:
    dbm = request.app[DBM_KEY]
    slug = request.match_info["slug"]
    referee = await repo.get_referee_by_slug(dbm, slug)
    if referee is None:
        raise NotFoundError(f"Referee {slug!r} not found")

    season_rows = [row for row, _ in await repo.list_season_stats(dbm, referee_id=referee.id)]
    recent = await repo.load_match_records(dbm, referee_id=referee.id, limit=PROFILE_RECENT_MATCHES)
    with_stats = [m for m in recent if m.has_stats]

    total_matches = sum(r.matches_officiated for r in season_rows)
    season_avg_yellow = (
        sum(r.total_yellow_cards for r in season_rows) / total_matches if total_matches else 0.0
    )
    season_avg_total = (
        sum(r.total_yellow_cards + r.total_red_cards for r in season_rows) / total_matches
        if total_matches
        else 0.0
    )
    leagues = Counter({league_name(r.league_api_id): r.matches_officiated for r in season_rows})

    form = analyze_referee_form([m.yellow_cards for m in reversed(with_stats)], round(season_avg_yellow, 2))
    return json_response(
        {
            "referee": referee_dict(referee),
            "league": leagues.most_common(1)[0][0] if leagues else None,
            "season_stats": [season_stats_dict(r) for r in season_rows],
            "career": {
                "matches_officiated": total_matches,
                "avg_yellow_cards": round(season_avg_yellow, 2),
                "avg_total_cards": round(season_avg_total, 2),
            },
            "recent_matches": [match_summary(m) for m in recent],
            "form": form,
            "streaks": detect_streaks(with_stats, season_avg_total),
            "trend": calculate_trend(with_stats, season_avg_total),
        }
    )


def _rating_summary(ratings: List[Any]) -> Dict[str, Any]:
    total = len(ratings)
    avg = sum(r.rating for r in ratings) / total if total else 0.0
    return {"total_ratings": total, "average_rating": round(avg, 1)}


async def get_ratings(request: web.Request) -> web.Response:
    dbm = request.app[DBM_KEY]
    settings = request.app[SETTINGS_KEY]
    referee_id = path_int(request, "id")
    ratings = await repo.list_ratings(dbm, referee_id, limit=RATINGS_WINDOW)
    counts = Counter(r.rating for r in ratings)
    comments = [
        {"rating": r.rating, "comment": r.comment, "created_at": r.created_at}
        for r in ratings
        if r.comment and r.comment.strip()
    ][:RECENT_COMMENTS]
    ip_hash = hash_ip(client_ip(request), settings.web.ip_hash_salt or "")
    mine = await repo.get_rating(dbm, referee_id, ip_hash)
    return json_response(
        {
            **_rating_summary(ratings),
            "distribution": {str(star): counts.get(star, 0) for star in range(1, 6)},
            "recent_comments": comments,
            "user_rating": mine.rating if mine else None,
        }
    )


async def post_rating(request: web.Request) -> web.Response:
    dbm = request.app[DBM_KEY]
    settings = request.app[SETTINGS_KEY]
    referee_id = path_int(request, "id")
    body = await read_json(request)

    rating = body.get("rating")
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5")
    comment = body.get("comment")
    comment = str(comment).strip()[:MAX_COMMENT_LENGTH] if comment else None

    if await repo.get_referee(dbm, referee_id) is None:
        raise NotFoundError("Referee not found")

    ip_hash = hash_ip(client_ip(request), settings.web.ip_hash_salt or "")
    saved = await repo.upsert_rating(
        dbm,
        referee_id=referee_id,
        ip_hash=ip_hash,
        rating=rating,
        comment=comment or None,
    )
    everything = await repo.list_ratings(dbm, referee_id, limit=None)
    logger.info({"referee_rated": {"referee": referee_id, "rating": rating}})
    return json_response({"success": True, "rating": saved.rating, **_rating_summary(everything)})


def setup_routes(app: web.Application) -> None:
    app.router.add_get("/api/referees", list_referees)
    app.router.add_get("/api/referees/featured", featured_referees)
    app.router.add_get("/api/referees/top-stats", top_stats)
    app.router.add_get(r"/api/referees/{id:\d+}/ratings", get_ratings)
    app.router.add_post(r"/api/referees/{id:\d+}/ratings", post_rating)
    app.router.add_get("/api/referees/{slug}", referee_profile)


__all__ = ["client_ip", "hash_ip", "setup_routes"]

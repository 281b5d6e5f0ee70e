"""Analysis tool endpoints; each one runs a pure analytics function over stored matches."""

from __future__ import annotations

import logging
import math
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from aiohttp import web

from reftrends.analytics.bias import analyze_home_away_bias
from reftrends.analytics.combos import find_sure_card_combos, team_card_stats
from reftrends.analytics.derby import analyze_derbies
from reftrends.analytics.fatigue import analyze_fatigue
from reftrends.analytics.fouls import analyze_fouls
from reftrends.analytics.leagues import compare_leagues
from reftrends.analytics.penalties import analyze_penalties
from reftrends.analytics.seasonal import SeasonStatsRow, historical_seasons, seasonal_trends
from reftrends.analytics.timing import analyze_card_timing
from reftrends.analytics.value import (
    ODDS_KEYS,
    BookmakerQuote,
    compare_bookmakers,
    find_value_bets,
    simulate_bookmaker_quotes,
)
from reftrends.database import DBM
from reftrends.database import repository as repo
from reftrends.shared.errors import NotFoundError, ValidationError
from reftrends.shared.records import RefereeRef

from .common import DBM_KEY, json_response, query_int, read_json

logger = logging.getLogger(__name__)

Tool = Callable[[DBM, Optional[int]], Awaitable[Any]]


async def _finished(dbm: DBM, season: Optional[int], **kwargs: Any) -> list:
    return await repo.load_match_records(dbm, finished_only=True, season=season, **kwargs)


async def _fatigue(dbm: DBM, season: Optional[int]) -> Any:
    return analyze_fatigue(await _finished(dbm, season, newest_first=False))


async def _timing(dbm: DBM, season: Optional[int]) -> Any:
    return analyze_card_timing(await _finished(dbm, season, with_card_events=True))


async def _bias(dbm: DBM, season: Optional[int]) -> Any:
    return analyze_home_away_bias(await _finished(dbm, season))


async def _sure_cards(dbm: DBM, season: Optional[int]) -> Any:
    return {"combos": find_sure_card_combos(await _finished(dbm, season))}


async def _penalties(dbm: DBM, season: Optional[int]) -> Any:
    return analyze_penalties(await _finished(dbm, season))


async def _team_cards(dbm: DBM, season: Optional[int]) -> Any:
    return {"teams": team_card_stats(await _finished(dbm, season))}


async def _leagues(dbm: DBM, season: Optional[int]) -> Any:
    return {"leagues": compare_leagues(await _finished(dbm, season))}


async def _seasonal(dbm: DBM, season: Optional[int]) -> Any:
    return seasonal_trends(await _finished(dbm, season, newest_first=False))


async def _historical(dbm: DBM, season: Optional[int]) -> Any:
    rows = [
        SeasonStatsRow(
            referee=RefereeRef(id=referee.id, name=referee.name, slug=referee.slug, photo=referee.photo),
            season=row.season,
            league_api_id=row.league_api_id,
            matches_officiated=row.matches_officiated,
            total_yellow_cards=row.total_yellow_cards,
            total_red_cards=row.total_red_cards,
            strictness_index=row.strictness_index,
        )
        for row, referee in await repo.list_season_stats(dbm)
    ]
    # every season is needed for the comparison
    return historical_seasons(await _finished(dbm, None), rows)


async def _derbies(dbm: DBM, season: Optional[int]) -> Any:
    return analyze_derbies(await _finished(dbm, season))


async def _fouls(dbm: DBM, season: Optional[int]) -> Any:
    return analyze_fouls(await _finished(dbm, season))


TOOLS: Dict[str, Tool] = {
    "fatigue": _fatigue,
    "time-analysis": _timing,
    "home-away-bias": _bias,
    "sure-cards": _sure_cards,
    "penalty-stats": _penalties,
    "team-card-stats": _team_cards,
    "league-comparison": _leagues,
    "seasonal-trends": _seasonal,
    "historical-seasons": _historical,
    "derbies": _derbies,
    "foul-analysis": _fouls,
}


async def run_tool(request: web.Request) -> web.Response:
    name = request.match_info["name"]
    tool = TOOLS.get(name)
    if tool is None:
        raise NotFoundError(f"Unknown tool {name!r}")
    result = await tool(request.app[DBM_KEY], query_int(request, "season"))
    return json_response(result)


def _number(body: Mapping[str, Any], key: str, *, required: bool = False) -> Optional[float]:
    value = body.get(key)
    if value is None or value == "":
        if required:
            raise ValidationError(f"{key} is required")
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{key} must be a number") from exc
    if not math.isfinite(number):
        raise ValidationError(f"{key} must be a number")
    return number


def _odds(raw: Any) -> Dict[str, float]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValidationError("odds must be an object")
    odds: Dict[str, float] = {}
    for key in ODDS_KEYS:
        price = _number(raw, key)
        if price is not None:
            odds[key] = price
    return odds


async def value_finder(request: web.Request) -> web.Response:
    body = await read_json(request)
    referee_avg = _number(body, "referee_avg", required=True)
    if referee_avg < 0:
        raise ValidationError("referee_avg must not be negative")
    analysis = find_value_bets(
        referee_avg,
        _number(body, "home_avg"),
        _number(body, "away_avg"),
        _odds(body.get("odds")),
    )
    return json_response(analysis)


def _quotes(raw: Any) -> List[BookmakerQuote]:
    if not isinstance(raw, list) or not raw:
        raise ValidationError("quotes must be a non-empty list")
    quotes: List[BookmakerQuote] = []
    for item in raw:
        if not isinstance(item, dict) or not item.get("bookmaker"):
            raise ValidationError("each quote needs a bookmaker")
        prices = _odds(item)
        missing = [key for key in ODDS_KEYS if prices.get(key, 0) <= 1.0]
        if missing:
            raise ValidationError(f"{item['bookmaker']}: missing or invalid odds for {', '.join(missing)}")
        quotes.append(BookmakerQuote(bookmaker=str(item["bookmaker"]), **prices))
    return quotes


async def bookmaker_comparison(request: web.Request) -> web.Response:
    """Compare posted quotes, or simulated ones around `expected_cards`."""
    body = await read_json(request)
    if "quotes" in body:
        quotes = _quotes(body["quotes"])
    else:
        expected = _number(body, "expected_cards", required=True)
        seed = body.get("seed")
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            raise ValidationError("seed must be an integer")
        quotes = simulate_bookmaker_quotes(expected, seed=seed)
    return json_response(compare_bookmakers(quotes))


def setup_routes(app: web.Application) -> None:
    app.router.add_post("/api/tools/value-finder", value_finder)
    app.router.add_post("/api/tools/bookmaker-comparison", bookmaker_comparison)
    app.router.add_get("/api/tools/{name}", run_tool)


__all__ = ["TOOLS", "setup_routes"]

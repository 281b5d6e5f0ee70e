"""Batch sync entrypoint.

Subcommands pull API-Football data into the local store, rebuild the referee
aggregates and run the catch-up jobs. Meant to be driven by cron.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import asdict
from typing import Any, List, Optional

from dotenv import load_dotenv

from reftrends.config import Settings, load_settings, sanitize_dict
from reftrends.database import DBM, initialize
from reftrends.database import repository as repo
from reftrends.providers.apifootball import ApiFootballClient
from reftrends.providers.apifootball.config import resolve_leagues
from reftrends.providers.wikipedia import WikipediaPhotoClient
from reftrends.shared.errors import RefTrendsError
from reftrends.shared.logging import setup_logging
from reftrends.shared.season import current_season, format_season
from reftrends.sync import (
    FixtureSync,
    recalculate_referee_stats,
    run_daily_sync,
    sync_card_events,
    sync_leagues,
    sync_penalties,
    sync_photos,
)

logger = logging.getLogger(__name__)


def _print(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _client(settings: Settings) -> ApiFootballClient:
    return ApiFootballClient(settings=settings.api_football)


async def _cmd_daily(settings: Settings, dbm: DBM, args: argparse.Namespace) -> None:
    report = await run_daily_sync(settings, dbm=dbm)
    _print(asdict(report))


async def _cmd_league(settings: Settings, dbm: DBM, args: argparse.Namespace) -> None:
    leagues = resolve_leagues(args.league)
    season = args.season or current_season()
    async with _client(settings) as client:
        sync = FixtureSync(dbm, client, settings.sync)
        counts = await sync_leagues(sync, leagues, season, recent_only=args.recent)
    referees = await recalculate_referee_stats(dbm, season)
    _print({"season": format_season(season), **asdict(counts), "referees": referees})


async def _cmd_stats(settings: Settings, dbm: DBM, args: argparse.Namespace) -> None:
    _print({"referees": await recalculate_referee_stats(dbm, args.season)})


async def _cmd_penalties(settings: Settings, dbm: DBM, args: argparse.Namespace) -> None:
    async with _client(settings) as client:
        _print(asdict(await sync_penalties(dbm, client, settings.sync)))


async def _cmd_card_events(settings: Settings, dbm: DBM, args: argparse.Namespace) -> None:
    async with _client(settings) as client:
        _print(asdict(await sync_card_events(dbm, client, settings.sync)))


async def _cmd_photos(settings: Settings, dbm: DBM, args: argparse.Namespace) -> None:
    async with WikipediaPhotoClient() as photos:
        _print(asdict(await sync_photos(dbm, photos, settings.sync)))


async def _cmd_check(settings: Settings, dbm: DBM, args: argparse.Namespace) -> None:
    counts = await repo.table_counts(dbm)
    top = [
        {
            "name": referee.name,
            "season": format_season(row.season),
            "matches": row.matches_officiated,
            "avg_yellow": row.avg_yellow_cards,
            "strictness": row.strictness_index,
        }
        for row, referee in (await repo.list_season_stats(dbm))[:5]
    ]
    _print({"tables": counts, "top_referees": top})


async def _cmd_leagues(settings: Settings, dbm: DBM, args: argparse.Namespace) -> None:
    async with _client(settings) as client:
        leagues = await client.fetch_leagues(country=args.country)
    _print(
        [
            {"id": info.league.id, "name": info.league.name, "type": info.league.type, "country": info.country.name}
            for info in leagues
        ]
    )


COMMANDS = {
    "daily": _cmd_daily,
    "league": _cmd_league,
    "stats": _cmd_stats,
    "penalties": _cmd_penalties,
    "card-events": _cmd_card_events,
    "photos": _cmd_photos,
    "check": _cmd_check,
    "leagues": _cmd_leagues,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reftrends-sync", description="RefTrends data sync")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("daily", help="sync the last week of the top five leagues and rebuild stats")

    league = sub.add_parser("league", help="sync whole seasons for selected leagues")
    league.add_argument("--league", nargs="+", default=None, help="league api ids or codes (default: top five)")
    league.add_argument("--season", type=int, default=None, help="season end year, e.g. 2026 for 2025/26")
    league.add_argument("--recent", action="store_true", help="only the lookback window instead of the full season")

    stats = sub.add_parser("stats", help="recalculate referee season aggregates")
    stats.add_argument("--season", type=int, default=None)

    sub.add_parser("penalties", help="backfill penalties for recent matches")
    sub.add_parser("card-events", help="backfill minute-by-minute card events")
    sub.add_parser("photos", help="look up referee photos on Wikipedia")
    sub.add_parser("check", help="print table counts and the busiest referees")

    leagues = sub.add_parser("leagues", help="list leagues available from API-Football")
    leagues.add_argument("--country", default=None)
    return parser


async def _run(settings: Settings, args: argparse.Namespace) -> None:
    dbm = DBM(settings, initialize(settings))
    try:
        await COMMANDS[args.command](settings, dbm, args)
    finally:
        await dbm.dispose()


def main(argv: Optional[List[str]] = None) -> None:
    if os.environ.get("REFTRENDS_TEST_MODE") != "true":
        load_dotenv()
    args = build_parser().parse_args(argv)
    settings = load_settings()
    setup_logging(settings.logging)
    logger.info({"sync_start": {"command": args.command, "settings": sanitize_dict(settings.model_dump())}})
    try:
        asyncio.run(_run(settings, args))
    except (RefTrendsError, ValueError) as exc:
        logger.error({"sync_failed": {"command": args.command, "error": str(exc)}})
        sys.exit(1)


if __name__ == "__main__":
    main()

"""Scheduler hooks: an external cron calls these to refresh the store."""

from __future__ import annotations

import hmac
import logging
from dataclasses import asdict
from time import monotonic

from aiohttp import web

from reftrends.shared.errors import ApiKeyMissingError
from reftrends.shared.season import current_season
from reftrends.sync import recalculate_referee_stats, run_daily_sync

from .common import CLIENT_FACTORY_KEY, DBM_KEY, SETTINGS_KEY, json_response

logger = logging.getLogger(__name__)


def authorized(request: web.Request) -> bool:
    """With no secret configured the endpoints are open."""
    secret = request.app[SETTINGS_KEY].web.cron_secret
    if not secret:
        return True
    header = request.headers.get("Authorization", "")
    return hmac.compare_digest(header.encode("utf-8"), f"Bearer {secret}".encode("utf-8"))


async def update_stats(request: web.Request) -> web.Response:
    if not authorized(request):
        return json_response({"error": "Unauthorized"}, status=401)
    started = monotonic()
    season = current_season()
    updated = await recalculate_referee_stats(request.app[DBM_KEY], season)
    return json_response(
        {
            "success": True,
            "season": season,
            "referees_updated": updated,
            "duration": round(monotonic() - started, 3),
        }
    )


async def daily_sync(request: web.Request) -> web.Response:
    if not authorized(request):
        return json_response({"error": "Unauthorized"}, status=401)
    settings = request.app[SETTINGS_KEY]
    if not settings.api_football.key:
        raise ApiKeyMissingError("API_FOOTBALL_KEY not configured")
    async with request.app[CLIENT_FACTORY_KEY]() as client:
        report = await run_daily_sync(settings, dbm=request.app[DBM_KEY], client=client)
    logger.info({"cron_daily_sync": {"success": report.success, "errors": len(report.errors)}})
    return json_response(asdict(report), status=200 if report.success else 500)


def setup_routes(app: web.Application) -> None:
    for path, handler in (
        ("/api/cron/update-stats", update_stats),
        ("/api/cron/daily-sync", daily_sync),
    ):
        app.router.add_get(path, handler)
        app.router.add_post(path, handler)


__all__ = ["authorized", "setup_routes"]

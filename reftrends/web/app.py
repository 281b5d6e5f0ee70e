from __future__ import annotations

import logging
from typing import Optional

from aiohttp import web

from reftrends import __version__
from reftrends.config import Settings
from reftrends.database import DBM, initialize
from reftrends.providers.apifootball import ApiFootballClient

from . import cron, matches, referees, tools
from .common import CLIENT_FACTORY_KEY, DBM_KEY, SETTINGS_KEY, ClientFactory, error_middleware, json_response

logger = logging.getLogger(__name__)


async def health(request: web.Request) -> web.Response:
    return json_response({"status": "ok", "version": __version__})


async def _dispose_dbm(app: web.Application) -> None:
    await app[DBM_KEY].dispose()


def create_app(
    settings: Settings,
    dbm: Optional[DBM] = None,
    *,
    client_factory: Optional[ClientFactory] = None,
) -> web.Application:
    """Build the JSON API application.

    A DBM passed in is still disposed when the application shuts down.
    """
    if dbm is None:
        dbm = DBM(settings, initialize(settings))

    app = web.Application(middlewares=[error_middleware])
    app[SETTINGS_KEY] = settings
    app[DBM_KEY] = dbm
    app[CLIENT_FACTORY_KEY] = client_factory or (lambda: ApiFootballClient(settings=settings.api_football))

    app.router.add_get("/api/health", health)
    referees.setup_routes(app)
    matches.setup_routes(app)
    tools.setup_routes(app)
    cron.setup_routes(app)
    app.on_cleanup.append(_dispose_dbm)

    logger.info({"web_app": {"routes": len(app.router.routes())}})
    return app


__all__ = ["create_app", "health"]

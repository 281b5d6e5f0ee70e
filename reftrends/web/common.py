from __future__ import annotations

import dataclasses
import json
import logging
from datetime import date, datetime
from enum import Enum
from functools import partial
from typing import Any, Awaitable, Callable, Optional

from aiohttp import web
from pydantic import BaseModel

from reftrends.config import Settings
from reftrends.database import DBM
from reftrends.providers.apifootball import ApiFootballClient
from reftrends.shared.errors import (
    ApiFootballError,
    ApiKeyMissingError,
    NotFoundError,
    RefTrendsError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], ApiFootballClient]
Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

SETTINGS_KEY = web.AppKey("settings", Settings)
DBM_KEY = web.AppKey("dbm", DBM)
CLIENT_FACTORY_KEY = web.AppKey("client_factory", ClientFactory)


def _default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    raise TypeError(f"{type(obj).__name__} is not JSON serializable")


dumps = partial(json.dumps, default=_default)


def json_response(data: Any, *, status: int = 200) -> web.Response:
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        data = dataclasses.asdict(data)
    return web.json_response(data, status=status, dumps=dumps)


def _status_for(exc: RefTrendsError) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ApiKeyMissingError):
        return 503
    if isinstance(exc, ApiFootballError):
        return 502
    return 500


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except RefTrendsError as exc:
        status = _status_for(exc)
        if status >= 500:
            logger.error({"request_failed": {"path": request.path, "error": str(exc)}})
        return json_response({"error": str(exc)}, status=status)
    except Exception as exc:
        logger.exception({"request_crashed": {"path": request.path, "error": str(exc)}})
        return json_response({"error": "Internal server error"}, status=500)


def query_int(request: web.Request, name: str, *, required: bool = False) -> Optional[int]:
    raw = request.query.get(name)
    if raw is None or raw == "":
        if required:
            raise ValidationError(f"Missing {name}")
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValidationError(f"Invalid {name}") from exc


def path_int(request: web.Request, name: str) -> int:
    try:
        return int(request.match_info[name])
    except ValueError as exc:
        raise ValidationError(f"Invalid {name}") from exc


async def read_json(request: web.Request) -> dict:
    try:
        body = await request.json()
    except json.JSONDecodeError as exc:
        raise ValidationError("Request body must be JSON") from exc
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


__all__ = [
    "CLIENT_FACTORY_KEY",
    "DBM_KEY",
    "SETTINGS_KEY",
    "dumps",
    "error_middleware",
    "json_response",
    "path_int",
    "query_int",
    "read_json",
]

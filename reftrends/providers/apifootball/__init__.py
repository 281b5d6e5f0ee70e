"""API-Football v3 provider: client, league catalogue and payload extraction."""

from .client import ApiFootballClient, format_api_date
from .config import EXTENDED_LEAGUES, TOP_LEAGUES, LeagueConfig, league_by_id, league_name
from .ratelimit import RateLimitConfig, SlidingWindowLimiter

__all__ = [
    "ApiFootballClient",
    "format_api_date",
    "EXTENDED_LEAGUES",
    "TOP_LEAGUES",
    "LeagueConfig",
    "league_by_id",
    "league_name",
    "RateLimitConfig",
    "SlidingWindowLimiter",
]

"""Season arithmetic.

A season is identified by its end year: 2026 means 2025/26. Seasons roll
over in August. API-Football keys seasons by their start year instead.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

SEASON_ROLLOVER_MONTH = 8


def current_season(today: Optional[date] = None) -> int:
    today = today or date.today()
    if today.month < SEASON_ROLLOVER_MONTH:
        return today.year
    return today.year + 1


def format_season(season: int) -> str:
    """2026 -> '2025/26'."""
    return f"{season - 1}/{str(season)[-2:]}"


def season_for_api(season: int) -> int:
    return season - 1


def season_from_api(api_season: int) -> int:
    return api_season + 1


def is_current_season(season: int, today: Optional[date] = None) -> bool:
    return season == current_season(today)


__all__ = [
    "current_season",
    "format_season",
    "season_for_api",
    "season_from_api",
    "is_current_season",
]

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class LeagueConfig(BaseModel):
    api_id: int
    name: str
    country: str
    code: str = Field(default_factory=str)

    @model_validator(mode="after")
    def _validate(self) -> "LeagueConfig":
        if self.api_id <= 0:
            raise ValueError("api_id must be > 0")
        if not self.code:
            self.code = self.name.lower().replace(" ", "_")
        return self


TOP_LEAGUES: List[LeagueConfig] = [
    LeagueConfig(api_id=39, name="Premier League", country="England", code="epl"),
    LeagueConfig(api_id=140, name="La Liga", country="Spain", code="laliga"),
    LeagueConfig(api_id=135, name="Serie A", country="Italy", code="seriea"),
    LeagueConfig(api_id=78, name="Bundesliga", country="Germany", code="bundesliga"),
    LeagueConfig(api_id=61, name="Ligue 1", country="France", code="ligue1"),
]

EXTENDED_LEAGUES: List[LeagueConfig] = TOP_LEAGUES + [
    LeagueConfig(api_id=94, name="Primeira Liga", country="Portugal", code="primeira"),
    LeagueConfig(api_id=88, name="Eredivisie", country="Netherlands", code="eredivisie"),
    LeagueConfig(api_id=144, name="Belgian Pro League", country="Belgium", code="jupiler"),
    LeagueConfig(api_id=203, name="Süper Lig", country="Turkey", code="superlig"),
    LeagueConfig(api_id=119, name="Superliga", country="Denmark", code="superliga"),
    LeagueConfig(api_id=2, name="Champions League", country="World", code="ucl"),
    LeagueConfig(api_id=3, name="Europa League", country="World", code="uel"),
    LeagueConfig(api_id=848, name="Conference League", country="World", code="uecl"),
]

_BY_ID: Dict[int, LeagueConfig] = {league.api_id: league for league in EXTENDED_LEAGUES}


def league_by_id(api_id: int) -> Optional[LeagueConfig]:
    return _BY_ID.get(int(api_id))


def league_by_code(code: str) -> Optional[LeagueConfig]:
    normalized = code.strip().lower()
    for league in EXTENDED_LEAGUES:
        if league.code == normalized:
            return league
    return None


def league_name(api_id: int) -> str:
    league = league_by_id(api_id)
    return league.name if league else f"League {api_id}"


def resolve_leagues(selectors: Optional[List[str]] = None) -> List[LeagueConfig]:
    """Turn CLI selectors (api ids or codes) into league configs; empty means top five."""
    if not selectors:
        return list(TOP_LEAGUES)
    resolved: List[LeagueConfig] = []
    for selector in selectors:
        cfg = league_by_id(int(selector)) if str(selector).isdigit() else league_by_code(str(selector))
        if cfg is None:
            raise ValueError(f"Unknown league: {selector}")
        resolved.append(cfg)
    return resolved


__all__ = [
    "LeagueConfig",
    "TOP_LEAGUES",
    "EXTENDED_LEAGUES",
    "league_by_id",
    "league_by_code",
    "league_name",
    "resolve_leagues",
]

"""Side-by-side card and foul averages for the five top leagues."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from reftrends.providers.apifootball.config import TOP_LEAGUES
from reftrends.shared.records import MatchRecord

from .common import average

MIN_REFEREE_MATCHES = 3
TOP_REFEREES = 5


@dataclass
class LeagueReferee:
    name: str
    slug: str
    matches: int = 0
    yellow: int = 0
    red: int = 0
    avg_cards: float = 0.0


@dataclass
class LeagueComparison:
    api_id: int
    name: str
    country: str
    matches: int = 0
    total_yellow: int = 0
    total_red: int = 0
    total_fouls: int = 0
    total_penalties: int = 0
    avg_yellow: float = 0.0
    avg_red: float = 0.0
    avg_fouls: float = 0.0
    avg_penalties: float = 0.0
    avg_cards: float = 0.0
    top_referees: List[LeagueReferee] = field(default_factory=list)


def compare_leagues(matches: Iterable[MatchRecord]) -> List[LeagueComparison]:
    by_league: Dict[int, List[MatchRecord]] = {league.api_id: [] for league in TOP_LEAGUES}
    for match in matches:
        if match.has_stats and match.league_api_id in by_league:
            by_league[match.league_api_id].append(match)

    rows: List[LeagueComparison] = []
    for league in TOP_LEAGUES:
        league_matches = by_league[league.api_id]
        count = len(league_matches)
        yellow = sum(m.yellow_cards for m in league_matches)
        red = sum(m.red_cards for m in league_matches)
        fouls = sum(m.stats.fouls for m in league_matches)
        penalties = sum(m.penalties for m in league_matches)

        referees: Dict[int, LeagueReferee] = {}
        for m in league_matches:
            if m.referee is None:
                continue
            entry = referees.setdefault(m.referee.id, LeagueReferee(name=m.referee.name, slug=m.referee.slug))
            entry.matches += 1
            entry.yellow += m.yellow_cards
            entry.red += m.red_cards
        top = [r for r in referees.values() if r.matches >= MIN_REFEREE_MATCHES]
        for r in top:
            r.avg_cards = average(r.yellow + r.red, r.matches)
        top.sort(key=lambda r: -r.avg_cards)

        rows.append(
            LeagueComparison(
                api_id=league.api_id,
                name=league.name,
                country=league.country,
                matches=count,
                total_yellow=yellow,
                total_red=red,
                total_fouls=fouls,
                total_penalties=penalties,
                avg_yellow=average(yellow, count),
                avg_red=average(red, count),
                avg_fouls=average(fouls, count),
                avg_penalties=average(penalties, count),
                avg_cards=average(yellow + red, count),
                top_referees=top[:TOP_REFEREES],
            )
        )
    return rows


__all__ = ["LeagueReferee", "LeagueComparison", "compare_leagues"]

"""Per-season referee aggregates stored in referee_season_stats."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Tuple

from reftrends.shared.records import MatchRecord

RED_WEIGHT = 3.0
PENALTY_WEIGHT = 0.5


def strictness_index(avg_yellow: float, avg_red: float, avg_penalties: float = 0.0) -> float:
    return avg_yellow + RED_WEIGHT * avg_red + PENALTY_WEIGHT * avg_penalties


@dataclass
class SeasonAggregate:
    referee_id: int
    season: int
    league_api_id: int
    matches_officiated: int
    total_yellow_cards: int
    total_red_cards: int
    avg_yellow_cards: float
    avg_red_cards: float
    total_penalties: int
    avg_penalties: float
    total_fouls: int
    avg_fouls: float
    strictness_index: float
    home_bias_score: float

    def as_row(self) -> Dict[str, Any]:
        return asdict(self)


def aggregate_referee_seasons(matches: Iterable[MatchRecord]) -> List[SeasonAggregate]:
    """One aggregate per (referee, season, league) over finished matches.

    Averages divide by every match in the group, including matches whose
    stats have not been fetched yet.
    """
    groups: Dict[Tuple[int, int, int], List[MatchRecord]] = defaultdict(list)
    for match in matches:
        if match.referee is None or not match.is_finished:
            continue
        groups[(match.referee.id, match.season, match.league_api_id)].append(match)

    aggregates: List[SeasonAggregate] = []
    for (referee_id, season, league_api_id), group in groups.items():
        n = len(group)
        stats = [m.stats for m in group if m.stats is not None]
        yellow = sum(s.yellow_cards for s in stats)
        red = sum(s.red_cards for s in stats)
        penalties = sum(s.penalties for s in stats)
        fouls = sum(s.fouls for s in stats)
        home_yellow = sum(s.home_yellow_cards for s in stats)
        away_yellow = sum(s.away_yellow_cards for s in stats)
        avg_yellow = yellow / n
        avg_red = red / n
        avg_penalties = penalties / n
        aggregates.append(
            SeasonAggregate(
                referee_id=referee_id,
                season=season,
                league_api_id=league_api_id,
                matches_officiated=n,
                total_yellow_cards=yellow,
                total_red_cards=red,
                avg_yellow_cards=round(avg_yellow, 2),
                avg_red_cards=round(avg_red, 2),
                total_penalties=penalties,
                avg_penalties=round(avg_penalties, 2),
                total_fouls=fouls,
                avg_fouls=round(fouls / n, 2),
                strictness_index=round(strictness_index(avg_yellow, avg_red, avg_penalties), 2),
                home_bias_score=round((away_yellow - home_yellow) / n, 2),
            )
        )
    aggregates.sort(key=lambda a: (a.referee_id, a.season, a.league_api_id))
    return aggregates


__all__ = ["SeasonAggregate", "strictness_index", "aggregate_referee_seasons"]

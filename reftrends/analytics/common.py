from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from reftrends.providers.apifootball.config import TOP_LEAGUES
from reftrends.shared.records import MatchRecord, RefereeRef

MULTIPLE_LEAGUES = "Multiple Leagues"
LEAGUE_NAMES: Dict[int, str] = {league.api_id: league.name for league in TOP_LEAGUES}


@dataclass
class RefereeMatches:
    referee: RefereeRef
    matches: List[MatchRecord] = field(default_factory=list)

    @property
    def with_stats(self) -> List[MatchRecord]:
        return [m for m in self.matches if m.has_stats]


def group_by_referee(matches: Iterable[MatchRecord]) -> Dict[int, RefereeMatches]:
    """Bucket matches per referee, keeping the input order inside each bucket."""
    grouped: Dict[int, RefereeMatches] = {}
    for match in matches:
        if match.referee is None:
            continue
        bucket = grouped.get(match.referee.id)
        if bucket is None:
            bucket = grouped[match.referee.id] = RefereeMatches(referee=match.referee)
        bucket.matches.append(match)
    return grouped


def league_label(league_api_id: Optional[int]) -> str:
    if league_api_id is None:
        return MULTIPLE_LEAGUES
    return LEAGUE_NAMES.get(league_api_id, MULTIPLE_LEAGUES)


def main_league(matches: Sequence[MatchRecord]) -> str:
    """Label of the top-five league a referee works most, if any."""
    if not matches:
        return MULTIPLE_LEAGUES
    api_id, _ = Counter(m.league_api_id for m in matches).most_common(1)[0]
    return league_label(api_id)


def average(total: float, count: int, default: float = 0.0) -> float:
    return total / count if count > 0 else default


def rate(part: int, whole: int) -> float:
    """Percentage of `part` in `whole`, 0 when empty."""
    return part / whole * 100 if whole > 0 else 0.0


__all__ = [
    "MULTIPLE_LEAGUES",
    "LEAGUE_NAMES",
    "RefereeMatches",
    "group_by_referee",
    "league_label",
    "main_league",
    "average",
    "rate",
]

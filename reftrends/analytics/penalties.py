"""Penalty award rates per referee and per league."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from reftrends.shared.records import MatchRecord

from .common import LEAGUE_NAMES, average, group_by_referee, main_league, rate

MIN_MATCHES = 5
RECENT_LIMIT = 5


@dataclass
class PenaltyMatch:
    date: str
    home_team: str
    away_team: str
    home_penalties: int
    away_penalties: int
    total: int


@dataclass
class RefereePenalties:
    id: int
    name: str
    slug: str
    photo: Optional[str]
    league: str
    match_count: int
    total_penalties: int
    home_penalties: int
    away_penalties: int
    avg_penalties: float
    penalty_rate: float
    multi_penalty_rate: float
    matches_with_penalty: int
    matches_with_multiple: int
    home_bias: float
    recent_penalty_matches: List[PenaltyMatch]


@dataclass
class LeaguePenalties:
    name: str
    match_count: int
    total_penalties: int
    avg_penalties: float


@dataclass
class PenaltyOverall:
    total_matches: int
    total_penalties: int
    avg_penalties: float
    matches_with_penalty: int


@dataclass
class PenaltyReport:
    referees: List[RefereePenalties]
    league_stats: List[LeaguePenalties]
    overall: PenaltyOverall


def _penalty_match(match: MatchRecord) -> PenaltyMatch:
    stats = match.stats
    return PenaltyMatch(
        date=match.date.isoformat(),
        home_team=match.home_team.name,
        away_team=match.away_team.name,
        home_penalties=stats.home_penalties if stats else 0,
        away_penalties=stats.away_penalties if stats else 0,
        total=match.penalties,
    )


def analyze_penalties(matches: Iterable[MatchRecord]) -> PenaltyReport:
    """Referee and league penalty tables over finished matches."""
    matches = list(matches)
    referees: List[RefereePenalties] = []
    for group in group_by_referee(matches).values():
        if len(group.matches) < MIN_MATCHES:
            continue
        with_stats = group.with_stats
        count = len(with_stats)
        total = sum(m.penalties for m in with_stats)
        home = sum(m.stats.home_penalties for m in with_stats)
        away = sum(m.stats.away_penalties for m in with_stats)
        with_penalty = [m for m in with_stats if m.penalties > 0]
        multiple = sum(1 for m in with_stats if m.penalties > 1)
        recent = sorted(with_penalty, key=lambda m: m.kickoff, reverse=True)[:RECENT_LIMIT]
        ref = group.referee
        referees.append(
            RefereePenalties(
                id=ref.id,
                name=ref.name,
                slug=ref.slug,
                photo=ref.photo,
                league=main_league(group.matches),
                match_count=count,
                total_penalties=total,
                home_penalties=home,
                away_penalties=away,
                avg_penalties=average(total, count),
                penalty_rate=rate(len(with_penalty), count),
                multi_penalty_rate=rate(multiple, count),
                matches_with_penalty=len(with_penalty),
                matches_with_multiple=multiple,
                home_bias=rate(home, total) - 50 if total > 0 else 0.0,
                recent_penalty_matches=[_penalty_match(m) for m in recent],
            )
        )
    referees.sort(key=lambda r: -r.avg_penalties)

    unique: Dict[int, MatchRecord] = {m.id: m for m in matches if m.has_stats and m.referee is not None}
    leagues: List[LeaguePenalties] = []
    for api_id, name in LEAGUE_NAMES.items():
        league_matches = [m for m in unique.values() if m.league_api_id == api_id]
        total = sum(m.penalties for m in league_matches)
        leagues.append(
            LeaguePenalties(
                name=name,
                match_count=len(league_matches),
                total_penalties=total,
                avg_penalties=average(total, len(league_matches)),
            )
        )
    leagues.sort(key=lambda l: -l.avg_penalties)

    total_all = sum(m.penalties for m in unique.values())
    overall = PenaltyOverall(
        total_matches=len(unique),
        total_penalties=total_all,
        avg_penalties=average(total_all, len(unique)),
        matches_with_penalty=sum(1 for m in unique.values() if m.penalties > 0),
    )
    return PenaltyReport(referees=referees, league_stats=leagues, overall=overall)


__all__ = [
    "PenaltyMatch",
    "RefereePenalties",
    "LeaguePenalties",
    "PenaltyOverall",
    "PenaltyReport",
    "analyze_penalties",
]

"""How a team fares, and how often it is booked, under one referee."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Optional, Sequence

from reftrends.shared.records import MatchRecord

from .common import average, rate


@dataclass
class TeamMatch:
    id: int
    date: str
    home_team: str
    away_team: str
    home_goals: Optional[int]
    away_goals: Optional[int]
    is_home: bool
    team_yellow: int
    team_red: int
    opponent_yellow: int
    opponent_red: int
    result: Literal["W", "D", "L"]
    league: str


@dataclass
class HistoryStats:
    match_count: int
    total_yellow: int
    total_red: int
    avg_yellow: float
    avg_red: float
    wins: int
    draws: int
    losses: int
    win_rate: float
    goals_for: int
    goals_against: int
    goal_diff: int


@dataclass
class HistoryComparison:
    avg_yellow_with_ref: float
    avg_yellow_overall: float
    difference: float
    percent_diff: float


@dataclass
class TeamRefereeHistory:
    matches: List[TeamMatch]
    stats: Optional[HistoryStats]
    comparison: Optional[HistoryComparison]


def _team_match(match: MatchRecord, team_id: int) -> TeamMatch:
    is_home = match.home_team.id == team_id
    stats = match.stats
    home_yellow = stats.home_yellow_cards if stats else 0
    away_yellow = stats.away_yellow_cards if stats else 0
    home_red = stats.home_red_cards if stats else 0
    away_red = stats.away_red_cards if stats else 0
    goals_for = (match.home_goals if is_home else match.away_goals) or 0
    goals_against = (match.away_goals if is_home else match.home_goals) or 0
    if goals_for > goals_against:
        result = "W"
    elif goals_for < goals_against:
        result = "L"
    else:
        result = "D"
    return TeamMatch(
        id=match.id,
        date=match.date.isoformat(),
        home_team=match.home_team.name,
        away_team=match.away_team.name,
        home_goals=match.home_goals,
        away_goals=match.away_goals,
        is_home=is_home,
        team_yellow=home_yellow if is_home else away_yellow,
        team_red=home_red if is_home else away_red,
        opponent_yellow=away_yellow if is_home else home_yellow,
        opponent_red=away_red if is_home else home_red,
        result=result,
        league=match.league_name,
    )


def team_referee_history(matches: Sequence[MatchRecord], team_id: int, referee_id: int) -> TeamRefereeHistory:
    """`matches` are the team's finished matches, newest first, under any referee."""
    with_ref = [
        _team_match(m, team_id)
        for m in matches
        if m.referee is not None and m.referee.id == referee_id
    ]
    if not with_ref:
        return TeamRefereeHistory(matches=[], stats=None, comparison=None)

    n = len(with_ref)
    total_yellow = sum(m.team_yellow for m in with_ref)
    total_red = sum(m.team_red for m in with_ref)
    wins = sum(1 for m in with_ref if m.result == "W")
    draws = sum(1 for m in with_ref if m.result == "D")
    losses = n - wins - draws
    goals_for = sum(((m.home_goals if m.is_home else m.away_goals) or 0) for m in with_ref)
    goals_against = sum(((m.away_goals if m.is_home else m.home_goals) or 0) for m in with_ref)
    stats = HistoryStats(
        match_count=n,
        total_yellow=total_yellow,
        total_red=total_red,
        avg_yellow=total_yellow / n,
        avg_red=total_red / n,
        wins=wins,
        draws=draws,
        losses=losses,
        win_rate=rate(wins, n),
        goals_for=goals_for,
        goals_against=goals_against,
        goal_diff=goals_for - goals_against,
    )

    overall = [_team_match(m, team_id) for m in matches if m.has_stats]
    with_ref_avg = stats.avg_yellow
    overall_avg = average(sum(m.team_yellow for m in overall), len(overall))
    comparison = HistoryComparison(
        avg_yellow_with_ref=with_ref_avg,
        avg_yellow_overall=overall_avg,
        difference=with_ref_avg - overall_avg,
        percent_diff=(with_ref_avg - overall_avg) / overall_avg * 100 if overall_avg > 0 else 0.0,
    )
    return TeamRefereeHistory(matches=with_ref, stats=stats, comparison=comparison)


__all__ = [
    "TeamMatch",
    "HistoryStats",
    "HistoryComparison",
    "TeamRefereeHistory",
    "team_referee_history",
]

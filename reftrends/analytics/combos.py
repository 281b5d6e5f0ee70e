"""Referee and team pairings: which combinations reliably produce cards."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from reftrends.shared.records import MatchRecord, RefereeRef, TeamRef

from .common import average, rate

MIN_COMBO_MATCHES = 3
MIN_TEAM_MATCHES = 3
MIN_REFEREE_MATCHES = 2
BREAKDOWN_LIMIT = 5


@dataclass
class RefereeTeamCombo:
    referee_id: int
    referee_name: str
    referee_slug: str
    referee_photo: Optional[str]
    team_id: int
    team_name: str
    team_logo: Optional[str]
    league_name: str
    match_count: int
    total_yellow_cards: int
    total_red_cards: int
    avg_yellow_cards: float
    avg_red_cards: float
    over25_rate: float
    over35_rate: float
    over45_rate: float


@dataclass
class _ComboTally:
    referee: RefereeRef
    team: TeamRef
    league_name: str
    matches: int = 0
    yellow: int = 0
    red: int = 0
    over25: int = 0
    over35: int = 0
    over45: int = 0


def find_sure_card_combos(matches: Iterable[MatchRecord]) -> List[RefereeTeamCombo]:
    """Referee and team pairs with at least three meetings, best over 3.5 rate first.

    Card counts are the team's own; over rates use the match total.
    """
    tallies: Dict[Tuple[int, int], _ComboTally] = {}
    for match in matches:
        referee = match.referee
        if referee is None or match.stats is None:
            continue
        total = match.total_cards
        sides = (
            (match.home_team, match.stats.home_yellow_cards, match.stats.home_red_cards),
            (match.away_team, match.stats.away_yellow_cards, match.stats.away_red_cards),
        )
        for team, yellow, red in sides:
            key = (referee.id, team.id)
            tally = tallies.get(key)
            if tally is None:
                tally = tallies[key] = _ComboTally(referee=referee, team=team, league_name=match.league_name)
            tally.matches += 1
            tally.yellow += yellow
            tally.red += red
            tally.over25 += total > 2.5
            tally.over35 += total > 3.5
            tally.over45 += total > 4.5

    combos: List[RefereeTeamCombo] = []
    for tally in tallies.values():
        if tally.matches < MIN_COMBO_MATCHES:
            continue
        ref = tally.referee
        combos.append(
            RefereeTeamCombo(
                referee_id=ref.id,
                referee_name=ref.name,
                referee_slug=ref.slug,
                referee_photo=ref.photo,
                team_id=tally.team.id,
                team_name=tally.team.name,
                team_logo=tally.team.logo,
                league_name=tally.league_name,
                match_count=tally.matches,
                total_yellow_cards=tally.yellow,
                total_red_cards=tally.red,
                avg_yellow_cards=tally.yellow / tally.matches,
                avg_red_cards=tally.red / tally.matches,
                over25_rate=rate(tally.over25, tally.matches),
                over35_rate=rate(tally.over35, tally.matches),
                over45_rate=rate(tally.over45, tally.matches),
            )
        )
    combos.sort(key=lambda c: -c.over35_rate)
    return combos


@dataclass
class RefereeBreakdown:
    id: int
    name: str
    slug: str
    matches: int = 0
    yellow: int = 0
    red: int = 0
    avg_cards: float = 0.0


@dataclass
class TeamCardStats:
    id: int
    name: str
    logo: Optional[str]
    league: str
    total_matches: int = 0
    total_yellow: int = 0
    total_red: int = 0
    avg_yellow_per_match: float = 0.0
    avg_red_per_match: float = 0.0
    home_yellow: int = 0
    away_yellow: int = 0
    home_red: int = 0
    away_red: int = 0
    toughest_referee: Optional[RefereeBreakdown] = None
    easiest_referee: Optional[RefereeBreakdown] = None
    referee_breakdown: List[RefereeBreakdown] = field(default_factory=list)


def team_card_stats(matches: Iterable[MatchRecord]) -> List[TeamCardStats]:
    """Cards each team collects, and which referees are hardest on them."""
    teams: Dict[int, TeamCardStats] = {}
    per_referee: Dict[int, Dict[int, RefereeBreakdown]] = {}

    for match in matches:
        stats = match.stats
        if stats is None:
            continue
        sides = (
            (match.home_team, True, stats.home_yellow_cards, stats.home_red_cards),
            (match.away_team, False, stats.away_yellow_cards, stats.away_red_cards),
        )
        for team, is_home, yellow, red in sides:
            entry = teams.get(team.id)
            if entry is None:
                entry = teams[team.id] = TeamCardStats(
                    id=team.id, name=team.name, logo=team.logo, league=match.league_name
                )
                per_referee[team.id] = {}
            entry.total_matches += 1
            entry.total_yellow += yellow
            entry.total_red += red
            if is_home:
                entry.home_yellow += yellow
                entry.home_red += red
            else:
                entry.away_yellow += yellow
                entry.away_red += red

            ref = match.referee
            if ref is None:
                continue
            breakdown = per_referee[team.id].get(ref.id)
            if breakdown is None:
                breakdown = per_referee[team.id][ref.id] = RefereeBreakdown(id=ref.id, name=ref.name, slug=ref.slug)
            breakdown.matches += 1
            breakdown.yellow += yellow
            breakdown.red += red

    result: List[TeamCardStats] = []
    for team_id, entry in teams.items():
        if entry.total_matches < MIN_TEAM_MATCHES:
            continue
        entry.avg_yellow_per_match = average(entry.total_yellow, entry.total_matches)
        entry.avg_red_per_match = average(entry.total_red, entry.total_matches)
        refs = [r for r in per_referee[team_id].values() if r.matches >= MIN_REFEREE_MATCHES]
        for r in refs:
            r.avg_cards = average(r.yellow + r.red, r.matches)
        refs.sort(key=lambda r: -r.avg_cards)
        entry.toughest_referee = refs[0] if refs else None
        entry.easiest_referee = refs[-1] if len(refs) > 1 else None
        entry.referee_breakdown = refs[:BREAKDOWN_LIMIT]
        result.append(entry)

    result.sort(key=lambda t: -t.avg_yellow_per_match)
    return result


__all__ = [
    "RefereeTeamCombo",
    "RefereeBreakdown",
    "TeamCardStats",
    "find_sure_card_combos",
    "team_card_stats",
]

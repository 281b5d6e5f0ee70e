"""Card levels in rivalry fixtures against ordinary league matches."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from reftrends.shared.records import MatchRecord

from .common import average

RECENT_DERBY_MATCHES = 3


@dataclass(frozen=True)
class Derby:
    teams: Tuple[str, str]
    name: str
    league: str


DERBIES: Tuple[Derby, ...] = (
    Derby(("Manchester United", "Manchester City"), "Manchester Derby", "Premier League"),
    Derby(("Liverpool", "Everton"), "Merseyside Derby", "Premier League"),
    Derby(("Arsenal", "Tottenham"), "North London Derby", "Premier League"),
    Derby(("Chelsea", "Arsenal"), "London Derby", "Premier League"),
    Derby(("Chelsea", "Tottenham"), "London Derby", "Premier League"),
    Derby(("Liverpool", "Manchester United"), "Northwest Derby", "Premier League"),
    Derby(("Real Madrid", "Barcelona"), "El Clasico", "La Liga"),
    Derby(("Real Madrid", "Atletico Madrid"), "Madrid Derby", "La Liga"),
    Derby(("Barcelona", "Espanyol"), "Derbi Barceloni", "La Liga"),
    Derby(("Sevilla", "Real Betis"), "Seville Derby", "La Liga"),
    Derby(("Athletic Bilbao", "Real Sociedad"), "Basque Derby", "La Liga"),
    Derby(("AC Milan", "Inter"), "Derby della Madonnina", "Serie A"),
    Derby(("Juventus", "Torino"), "Derby della Mole", "Serie A"),
    Derby(("Roma", "Lazio"), "Derby della Capitale", "Serie A"),
    Derby(("Juventus", "Inter"), "Derby d'Italia", "Serie A"),
    Derby(("Napoli", "Roma"), "Derby del Sole", "Serie A"),
    Derby(("Borussia Dortmund", "Bayern Munich"), "Der Klassiker", "Bundesliga"),
    Derby(("Borussia Dortmund", "Schalke"), "Revierderby", "Bundesliga"),
    Derby(("Bayern Munich", "Bayern 1860"), "Munich Derby", "Bundesliga"),
    Derby(("Paris Saint Germain", "Marseille"), "Le Classique", "Ligue 1"),
    Derby(("Lyon", "Saint-Etienne"), "Derby Rhone-Alpes", "Ligue 1"),
    Derby(("Monaco", "Nice"), "Cote d'Azur Derby", "Ligue 1"),
)


def _names_match(team: str, pattern: str) -> bool:
    a, b = team.lower(), pattern.lower()
    return a in b or b in a


def find_derby(home_team: str, away_team: str) -> Optional[str]:
    """Name of the first known derby both teams belong to, if any."""
    if home_team == away_team:
        return None
    for derby in DERBIES:
        home_hit = any(_names_match(home_team, t) for t in derby.teams)
        away_hit = any(_names_match(away_team, t) for t in derby.teams)
        if home_hit and away_hit:
            return derby.name
    return None


@dataclass
class DerbyMatch:
    id: int
    date: str
    derby_name: str
    home_team: str
    away_team: str
    referee_id: Optional[int]
    referee_name: Optional[str]
    referee_slug: Optional[str]
    yellow_cards: int
    red_cards: int
    total_cards: int
    league: str


@dataclass
class CardAverages:
    count: int = 0
    yellow: float = 0.0
    red: float = 0.0
    total: float = 0.0


@dataclass
class RefereeDerbyStats:
    id: int
    name: str
    slug: str
    derby_matches: int = 0
    derby_cards: int = 0
    regular_matches: int = 0
    regular_cards: int = 0
    derbies: List[str] = field(default_factory=list)
    derby_avg: float = 0.0
    regular_avg: float = 0.0
    difference: float = 0.0


@dataclass
class DerbyStats:
    name: str
    match_count: int
    avg_cards: float
    avg_yellow: float
    avg_red: float
    recent_matches: List[DerbyMatch]


@dataclass
class DerbyReport:
    derby_matches: List[DerbyMatch]
    derby: CardAverages
    regular: CardAverages
    referees: List[RefereeDerbyStats]
    derby_stats: List[DerbyStats]


def _averages(rows: List[DerbyMatch]) -> CardAverages:
    n = len(rows)
    return CardAverages(
        count=n,
        yellow=average(sum(r.yellow_cards for r in rows), n),
        red=average(sum(r.red_cards for r in rows), n),
        total=average(sum(r.total_cards for r in rows), n),
    )


def analyze_derbies(matches: Iterable[MatchRecord]) -> DerbyReport:
    derbies: List[DerbyMatch] = []
    regular: List[DerbyMatch] = []
    for match in matches:
        if match.stats is None:
            continue
        name = find_derby(match.home_team.name, match.away_team.name)
        ref = match.referee
        row = DerbyMatch(
            id=match.id,
            date=match.date.isoformat(),
            derby_name=name or "",
            home_team=match.home_team.name,
            away_team=match.away_team.name,
            referee_id=ref.id if ref else None,
            referee_name=ref.name if ref else None,
            referee_slug=ref.slug if ref else None,
            yellow_cards=match.yellow_cards,
            red_cards=match.red_cards,
            total_cards=match.total_cards,
            league=match.league_name,
        )
        (derbies if name else regular).append(row)

    referees: Dict[int, RefereeDerbyStats] = {}
    for row, is_derby in [(r, True) for r in derbies] + [(r, False) for r in regular]:
        if row.referee_id is None:
            continue
        stats = referees.setdefault(
            row.referee_id,
            RefereeDerbyStats(id=row.referee_id, name=row.referee_name or "", slug=row.referee_slug or ""),
        )
        if is_derby:
            stats.derby_matches += 1
            stats.derby_cards += row.total_cards
            if row.derby_name not in stats.derbies:
                stats.derbies.append(row.derby_name)
        else:
            stats.regular_matches += 1
            stats.regular_cards += row.total_cards

    referee_list = [r for r in referees.values() if r.derby_matches >= 1]
    for r in referee_list:
        r.derby_avg = average(r.derby_cards, r.derby_matches)
        r.regular_avg = average(r.regular_cards, r.regular_matches)
        r.difference = r.derby_avg - r.regular_avg
    referee_list.sort(key=lambda r: -r.derby_matches)

    derbies.sort(key=lambda r: r.date, reverse=True)
    by_name: Dict[str, List[DerbyMatch]] = defaultdict(list)
    for row in derbies:
        by_name[row.derby_name].append(row)
    derby_stats = []
    for name, rows in by_name.items():
        avg = _averages(rows)
        derby_stats.append(
            DerbyStats(
                name=name,
                match_count=avg.count,
                avg_cards=avg.total,
                avg_yellow=avg.yellow,
                avg_red=avg.red,
                recent_matches=rows[:RECENT_DERBY_MATCHES],
            )
        )
    derby_stats.sort(key=lambda d: -d.avg_cards)

    return DerbyReport(
        derby_matches=derbies,
        derby=_averages(derbies),
        regular=_averages(regular),
        referees=referee_list,
        derby_stats=derby_stats,
    )


__all__ = [
    "DERBIES",
    "Derby",
    "DerbyMatch",
    "CardAverages",
    "RefereeDerbyStats",
    "DerbyStats",
    "DerbyReport",
    "find_derby",
    "analyze_derbies",
]

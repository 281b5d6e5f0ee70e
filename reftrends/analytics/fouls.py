"""Foul counts and how many fouls a referee lets go before reaching for a card."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from reftrends.shared.records import MatchRecord

from .common import LEAGUE_NAMES, average, group_by_referee, main_league

MIN_MATCHES = 5


@dataclass
class RefereeFouls:
    id: int
    name: str
    slug: str
    photo: Optional[str]
    league: str
    match_count: int
    total_fouls: int
    home_fouls: int
    away_fouls: int
    avg_fouls: float
    avg_yellow: float
    foul_to_card_ratio: float
    leniency_score: float
    home_foul_percent: float


@dataclass
class LeagueFouls:
    name: str
    avg_fouls: float
    avg_cards: float
    foul_to_card_ratio: float
    matches: int


@dataclass
class FoulOverall:
    total_matches: int
    total_fouls: int
    avg_fouls: float
    avg_foul_to_card: float


@dataclass
class FoulReport:
    referees: List[RefereeFouls]
    league_data: List[LeagueFouls]
    overall: FoulOverall


def _with_fouls(matches: Iterable[MatchRecord]) -> List[MatchRecord]:
    return [m for m in matches if m.stats is not None and m.stats.fouls > 0]


def analyze_fouls(matches: Iterable[MatchRecord]) -> FoulReport:
    """Only matches with a recorded foul count contribute."""
    matches = list(matches)
    referees: List[RefereeFouls] = []
    for group in group_by_referee(matches).values():
        if len(group.matches) < MIN_MATCHES:
            continue
        counted = _with_fouls(group.matches)
        if not counted:
            continue
        n = len(counted)
        fouls = sum(m.stats.fouls for m in counted)
        home = sum(m.stats.home_fouls for m in counted)
        away = sum(m.stats.away_fouls for m in counted)
        yellow = sum(m.yellow_cards for m in counted)
        cards = sum(m.total_cards for m in counted)
        avg_fouls = fouls / n
        ratio = fouls / cards if cards > 0 else avg_fouls
        ref = group.referee
        referees.append(
            RefereeFouls(
                id=ref.id,
                name=ref.name,
                slug=ref.slug,
                photo=ref.photo,
                league=main_league(group.matches),
                match_count=n,
                total_fouls=fouls,
                home_fouls=home,
                away_fouls=away,
                avg_fouls=avg_fouls,
                avg_yellow=yellow / n,
                foul_to_card_ratio=ratio,
                leniency_score=ratio,
                home_foul_percent=home / fouls * 100 if fouls > 0 else 50.0,
            )
        )
    referees.sort(key=lambda r: -r.avg_fouls)

    counted = _with_fouls(m for m in matches if m.referee is not None)
    by_league: Dict[int, List[MatchRecord]] = {}
    for m in counted:
        by_league.setdefault(m.league_api_id, []).append(m)
    leagues = []
    for api_id, rows in by_league.items():
        fouls = sum(m.stats.fouls for m in rows)
        cards = sum(m.total_cards for m in rows)
        leagues.append(
            LeagueFouls(
                name=LEAGUE_NAMES.get(api_id, f"League {api_id}"),
                avg_fouls=average(fouls, len(rows)),
                avg_cards=average(cards, len(rows)),
                foul_to_card_ratio=fouls / cards if cards > 0 else 0.0,
                matches=len(rows),
            )
        )
    leagues.sort(key=lambda l: -l.avg_fouls)

    total_fouls = sum(m.stats.fouls for m in counted)
    total_cards = sum(m.total_cards for m in counted)
    overall = FoulOverall(
        total_matches=len(counted),
        total_fouls=total_fouls,
        avg_fouls=average(total_fouls, len(counted)),
        avg_foul_to_card=total_fouls / total_cards if total_cards > 0 else 0.0,
    )
    return FoulReport(referees=referees, league_data=leagues, overall=overall)


__all__ = ["RefereeFouls", "LeagueFouls", "FoulOverall", "FoulReport", "analyze_fouls"]

"""Home/away card bias per referee.

A positive bias score means the away side collects more cards, which reads
as the referee favouring the home team.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from reftrends.shared.records import MatchRecord

from .common import average, group_by_referee, main_league

MIN_MATCHES = 5
BIASED_THRESHOLD = 0.3


@dataclass
class RefereeBias:
    id: int
    name: str
    slug: str
    photo: Optional[str]
    league: str
    match_count: int
    home_yellow: int
    away_yellow: int
    home_red: int
    away_red: int
    avg_home_cards: float
    avg_away_cards: float
    bias_score: float
    bias_percent: float
    label: str


@dataclass
class BiasSummary:
    avg_home_cards: float
    avg_away_cards: float
    home_biased: int
    away_biased: int
    neutral: int


@dataclass
class BiasReport:
    referees: List[RefereeBias]
    summary: BiasSummary


def bias_label(score: float) -> str:
    if score > 0.5:
        return "Strong Home Bias"
    if score > 0.2:
        return "Slight Home Bias"
    if score < -0.5:
        return "Strong Away Bias"
    if score < -0.2:
        return "Slight Away Bias"
    return "Neutral"


def analyze_home_away_bias(matches: Iterable[MatchRecord]) -> BiasReport:
    referees: List[RefereeBias] = []
    for group in group_by_referee(matches).values():
        if len(group.matches) < MIN_MATCHES:
            continue
        stats = [m.stats for m in group.with_stats]
        home_yellow = sum(s.home_yellow_cards for s in stats)
        away_yellow = sum(s.away_yellow_cards for s in stats)
        home_red = sum(s.home_red_cards for s in stats)
        away_red = sum(s.away_red_cards for s in stats)
        count = len(stats)
        avg_home = average(home_yellow + home_red, count)
        avg_away = average(away_yellow + away_red, count)
        score = avg_away - avg_home
        both = avg_home + avg_away
        ref = group.referee
        referees.append(
            RefereeBias(
                id=ref.id,
                name=ref.name,
                slug=ref.slug,
                photo=ref.photo,
                league=main_league(group.matches),
                match_count=count,
                home_yellow=home_yellow,
                away_yellow=away_yellow,
                home_red=home_red,
                away_red=away_red,
                avg_home_cards=avg_home,
                avg_away_cards=avg_away,
                bias_score=score,
                bias_percent=score / both * 100 if both > 0 else 0.0,
                label=bias_label(score),
            )
        )
    referees.sort(key=lambda r: -abs(r.bias_score))

    total_matches = sum(r.match_count for r in referees)
    home_biased = sum(1 for r in referees if r.bias_score > BIASED_THRESHOLD)
    away_biased = sum(1 for r in referees if r.bias_score < -BIASED_THRESHOLD)
    summary = BiasSummary(
        avg_home_cards=average(sum(r.home_yellow + r.home_red for r in referees), total_matches),
        avg_away_cards=average(sum(r.away_yellow + r.away_red for r in referees), total_matches),
        home_biased=home_biased,
        away_biased=away_biased,
        neutral=len(referees) - home_biased - away_biased,
    )
    return BiasReport(referees=referees, summary=summary)


__all__ = ["RefereeBias", "BiasSummary", "BiasReport", "bias_label", "analyze_home_away_bias"]

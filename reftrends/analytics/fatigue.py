"""Does a short rest between appointments change how many cards a referee shows?"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from reftrends.shared.records import MatchRecord

from .common import average, group_by_referee, main_league


@dataclass(frozen=True)
class RestCategory:
    min_days: int
    max_days: float
    label: str

    def contains(self, days: int) -> bool:
        return self.min_days <= days <= self.max_days


REST_CATEGORIES = (
    RestCategory(0, 3, "0-3 days (Short rest)"),
    RestCategory(4, 7, "4-7 days (Normal rest)"),
    RestCategory(8, 14, "8-14 days (Extended rest)"),
    RestCategory(15, math.inf, "15+ days (Long break)"),
)
SHORT_REST, NORMAL_REST = REST_CATEGORIES[0], REST_CATEGORIES[1]

MIN_MATCHES = 5
MIN_BUCKET_MATCHES = 2


@dataclass
class RestBucket:
    category: str
    matches: int = 0
    avg_yellow: float = 0.0
    avg_red: float = 0.0
    avg_total: float = 0.0


@dataclass
class RefereeFatigue:
    id: int
    name: str
    slug: str
    photo: Optional[str]
    league: str
    total_matches: int
    rest_data: List[RestBucket]
    fatigue_impact: Optional[float]
    short_rest_matches: int
    short_rest_avg: float
    normal_rest_avg: float


@dataclass
class GlobalRestBucket:
    category: str
    full_label: str
    matches: int
    avg_yellow: float
    avg_red: float
    avg_total: float


@dataclass
class FatigueReport:
    referees: List[RefereeFatigue]
    global_rest_data: List[GlobalRestBucket]
    most_affected: List[RefereeFatigue]
    least_affected: List[RefereeFatigue]
    total_analyzed: int
    short_rest_total: int
    normal_rest_total: int


@dataclass
class _Tally:
    matches: int = 0
    yellow: int = 0
    red: int = 0

    def add(self, match: MatchRecord) -> None:
        self.matches += 1
        self.yellow += match.yellow_cards
        self.red += match.red_cards


def _category(days: int) -> Optional[RestCategory]:
    for cat in REST_CATEGORIES:
        if cat.contains(days):
            return cat
    return None


def analyze_fatigue(matches: Iterable[MatchRecord]) -> FatigueReport:
    """Rest-day buckets per referee plus league-wide totals.

    `matches` are finished matches in any order.
    """
    global_tallies: Dict[str, _Tally] = {cat.label: _Tally() for cat in REST_CATEGORIES}
    referees: List[RefereeFatigue] = []

    for group in group_by_referee(matches).values():
        if len(group.matches) < MIN_MATCHES:
            continue
        with_stats = sorted(group.with_stats, key=lambda m: m.kickoff)
        tallies: Dict[str, _Tally] = {cat.label: _Tally() for cat in REST_CATEGORIES}
        for previous, match in zip(with_stats, with_stats[1:]):
            days = (match.kickoff - previous.kickoff).days
            cat = _category(days)
            if cat is None:
                continue
            tallies[cat.label].add(match)
            global_tallies[cat.label].add(match)

        rest_data = [
            RestBucket(
                category=cat.label,
                matches=tallies[cat.label].matches,
                avg_yellow=average(tallies[cat.label].yellow, tallies[cat.label].matches),
                avg_red=average(tallies[cat.label].red, tallies[cat.label].matches),
                avg_total=average(tallies[cat.label].yellow + tallies[cat.label].red, tallies[cat.label].matches),
            )
            for cat in REST_CATEGORIES
        ]
        short, normal = rest_data[0], rest_data[1]
        impact = None
        if short.matches >= MIN_BUCKET_MATCHES and normal.matches >= MIN_BUCKET_MATCHES:
            impact = short.avg_total - normal.avg_total
        if short.matches < MIN_BUCKET_MATCHES:
            continue
        ref = group.referee
        referees.append(
            RefereeFatigue(
                id=ref.id,
                name=ref.name,
                slug=ref.slug,
                photo=ref.photo,
                league=main_league(group.matches),
                total_matches=len(with_stats),
                rest_data=rest_data,
                fatigue_impact=impact,
                short_rest_matches=short.matches,
                short_rest_avg=short.avg_total,
                normal_rest_avg=normal.avg_total,
            )
        )

    # unknown impact sorts last
    referees.sort(key=lambda r: (r.fatigue_impact is None, -abs(r.fatigue_impact or 0.0)))

    global_rest = [
        GlobalRestBucket(
            category=cat.label.split(" ")[0],
            full_label=cat.label,
            matches=global_tallies[cat.label].matches,
            avg_yellow=average(global_tallies[cat.label].yellow, global_tallies[cat.label].matches),
            avg_red=average(global_tallies[cat.label].red, global_tallies[cat.label].matches),
            avg_total=average(
                global_tallies[cat.label].yellow + global_tallies[cat.label].red,
                global_tallies[cat.label].matches,
            ),
        )
        for cat in REST_CATEGORIES
    ]

    most = sorted(
        (r for r in referees if r.fatigue_impact is not None and r.fatigue_impact > 0),
        key=lambda r: -(r.fatigue_impact or 0.0),
    )[:5]
    least = sorted(
        (r for r in referees if r.fatigue_impact is not None and r.fatigue_impact < 0),
        key=lambda r: r.fatigue_impact or 0.0,
    )[:5]

    return FatigueReport(
        referees=referees,
        global_rest_data=global_rest,
        most_affected=most,
        least_affected=least,
        total_analyzed=len(referees),
        short_rest_total=global_tallies[SHORT_REST.label].matches,
        normal_rest_total=global_tallies[NORMAL_REST.label].matches,
    )


__all__ = [
    "REST_CATEGORIES",
    "RestBucket",
    "RefereeFatigue",
    "GlobalRestBucket",
    "FatigueReport",
    "analyze_fatigue",
]

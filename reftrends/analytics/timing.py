"""When in a match cards get shown, from the per-card event log."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from reftrends.shared.enums import CardType
from reftrends.shared.records import CardEventRecord, MatchRecord

from .common import league_label, rate

PERIODS = ("0-15", "16-30", "31-45", "45+", "46-60", "61-75", "76-90", "90+")
FIRST_HALF_PERIODS = frozenset({"0-15", "16-30", "31-45", "45+"})
MINUTE_BUCKETS = tuple(f"{start}-{start + 4}" for start in range(0, 90, 5)) + ("90+",)
MIN_REFEREE_CARDS = 10
EARLY_MINUTE = 30
LATE_MINUTE = 75


@dataclass
class PeriodStats:
    period: str
    yellow: int = 0
    red: int = 0
    total: int = 0
    percent: float = 0.0


@dataclass
class MinuteBucket:
    range: str
    yellow: int = 0
    red: int = 0
    total: int = 0


@dataclass
class RefereeTiming:
    id: int
    name: str
    slug: str
    photo: Optional[str]
    league: str
    first_half: int = 0
    second_half: int = 0
    injury_time: int = 0
    total: int = 0
    early_cards: int = 0
    late_cards: int = 0
    first_half_percent: float = 50.0
    late_card_percent: float = 0.0


@dataclass
class TimingOverall:
    total: int
    first_half: int
    second_half: int
    first_half_percent: float
    second_half_percent: float
    avg_minute: float


@dataclass
class TimingReport:
    has_data: bool
    overall: Optional[TimingOverall] = None
    by_period: List[PeriodStats] = field(default_factory=list)
    by_minute: List[MinuteBucket] = field(default_factory=list)
    referees: List[RefereeTiming] = field(default_factory=list)


def card_period(minute: int, extra_minute: Optional[int]) -> str:
    if minute <= 15:
        return "0-15"
    if minute <= 30:
        return "16-30"
    if minute <= 45:
        return "45+" if extra_minute else "31-45"
    if minute <= 60:
        return "46-60"
    if minute <= 75:
        return "61-75"
    if minute <= 90:
        return "90+" if extra_minute else "76-90"
    return "90+"


def minute_bucket(minute: int, extra_minute: Optional[int]) -> str:
    if minute >= 90 or extra_minute:
        return "90+"
    start = (minute // 5) * 5
    return f"{start}-{start + 4}"


def _bump(target, event: CardEventRecord) -> None:
    if event.card_type == CardType.YELLOW:
        target.yellow += 1
    else:
        target.red += 1
    target.total += 1


def analyze_card_timing(matches: Iterable[MatchRecord]) -> TimingReport:
    """Distribution of card minutes overall and per referee.

    Only matches loaded with their card events contribute.
    """
    periods: Dict[str, PeriodStats] = {p: PeriodStats(period=p) for p in PERIODS}
    buckets: Dict[str, MinuteBucket] = {b: MinuteBucket(range=b) for b in MINUTE_BUCKETS}
    referees: Dict[int, RefereeTiming] = {}
    total = 0
    minute_sum = 0

    for match in matches:
        for event in match.card_events:
            total += 1
            minute_sum += event.minute
            _bump(periods[card_period(event.minute, event.extra_minute)], event)
            _bump(buckets[minute_bucket(event.minute, event.extra_minute)], event)

            ref = match.referee
            if ref is None:
                continue
            stats = referees.get(ref.id)
            if stats is None:
                stats = referees[ref.id] = RefereeTiming(
                    id=ref.id,
                    name=ref.name,
                    slug=ref.slug,
                    photo=ref.photo,
                    league=league_label(match.league_api_id),
                )
            stats.total += 1
            if event.minute <= 45:
                stats.first_half += 1
                if event.extra_minute:
                    stats.injury_time += 1
            else:
                stats.second_half += 1
                if event.extra_minute or event.minute >= 90:
                    stats.injury_time += 1
            if event.minute <= EARLY_MINUTE:
                stats.early_cards += 1
            if event.minute >= LATE_MINUTE:
                stats.late_cards += 1

    if total == 0:
        return TimingReport(has_data=False)

    for stats in periods.values():
        stats.percent = rate(stats.total, total)

    first_half = sum(periods[p].total for p in FIRST_HALF_PERIODS)
    overall = TimingOverall(
        total=total,
        first_half=first_half,
        second_half=total - first_half,
        first_half_percent=rate(first_half, total),
        second_half_percent=rate(total - first_half, total),
        avg_minute=minute_sum / total,
    )

    ranked = [r for r in referees.values() if r.total >= MIN_REFEREE_CARDS]
    for r in ranked:
        r.first_half_percent = rate(r.first_half, r.total)
        r.late_card_percent = rate(r.late_cards, r.total)
    ranked.sort(key=lambda r: -r.total)

    return TimingReport(
        has_data=True,
        overall=overall,
        by_period=list(periods.values()),
        by_minute=list(buckets.values()),
        referees=ranked,
    )


__all__ = [
    "PERIODS",
    "MINUTE_BUCKETS",
    "PeriodStats",
    "MinuteBucket",
    "RefereeTiming",
    "TimingOverall",
    "TimingReport",
    "card_period",
    "minute_bucket",
    "analyze_card_timing",
]

"""Hot and cold streak detection over a referee's most recent matches."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Literal, Optional, Sequence

from reftrends.shared.records import MatchRecord

StreakKind = Literal["hot", "cold"]
Significance = Literal["high", "medium", "low"]

WINDOW = 5
MIN_MATCHES = 3


@dataclass
class Streak:
    type: StreakKind
    description: str
    matches: int
    significance: Significance
    betting_implication: str


@dataclass
class TrendAnalysis:
    last5_avg: float
    prev5_avg: float
    change: float
    percent_change: float
    direction: Literal["up", "down", "stable"]


def _count_consecutive(matches: Sequence[MatchRecord], condition: Callable[[MatchRecord], bool]) -> int:
    count = 0
    for match in matches:
        if not condition(match):
            break
        count += 1
    return count


def _significance(count: int, high_at: int = 4) -> Significance:
    return "high" if count >= high_at else "medium"


def detect_streaks(recent: Sequence[MatchRecord], season_avg_total: float) -> List[Streak]:
    """Streaks in the last five matches. `recent` is newest first."""
    if len(recent) < MIN_MATCHES:
        return []

    last5 = list(recent[:WINDOW])
    found: List[Streak] = []

    high = sum(1 for m in last5 if m.total_cards >= 5)
    if high >= 3:
        found.append(
            Streak("hot", f"{high} of last 5 matches with 5+ cards", high, _significance(high), "Consider Over 4.5 cards")
        )

    low = sum(1 for m in last5 if m.total_cards < 3)
    if low >= 3:
        found.append(
            Streak("cold", f"{low} of last 5 matches with under 3 cards", low, _significance(low), "Consider Under 3.5 cards")
        )

    over35 = _count_consecutive(last5, lambda m: m.total_cards > 3.5)
    if over35 >= 3:
        found.append(
            Streak(
                "hot",
                f"{over35} consecutive matches with over 3.5 cards",
                over35,
                _significance(over35),
                "Hot streak - Over 3.5 recommended",
            )
        )

    under35 = _count_consecutive(last5, lambda m: m.total_cards <= 3.5)
    if under35 >= 3:
        found.append(
            Streak(
                "cold",
                f"{under35} consecutive matches with under 3.5 cards",
                under35,
                _significance(under35),
                "Cold streak - Under 3.5 recommended",
            )
        )

    reds = sum(1 for m in last5 if m.red_cards > 0)
    if reds >= 2:
        found.append(
            Streak(
                "hot",
                f"Red card shown in {reds} of last 5 matches",
                reds,
                _significance(reds, high_at=3),
                "Red card market worth considering",
            )
        )

    pens = sum(1 for m in last5 if m.penalties > 0)
    if pens >= 2:
        found.append(
            Streak(
                "hot",
                f"Penalty awarded in {pens} of last 5 matches",
                pens,
                _significance(pens, high_at=3),
                "Penalty market worth considering",
            )
        )

    above = sum(1 for m in last5 if m.total_cards > season_avg_total)
    if above >= 4:
        found.append(
            Streak(
                "hot",
                f"{above} of last 5 matches above season average",
                above,
                "medium",
                "Trending above average - consider overs",
            )
        )
    elif above <= 1:
        below = len(last5) - above
        found.append(
            Streak(
                "cold",
                f"{below} of last 5 matches below season average",
                below,
                "medium",
                "Trending below average - consider unders",
            )
        )

    return found


def calculate_trend(recent: Sequence[MatchRecord], season_avg_total: float) -> Optional[TrendAnalysis]:
    """Compare the last five matches with the five before them (newest first)."""
    if len(recent) < WINDOW:
        return None
    last5_avg = sum(m.total_cards for m in recent[:WINDOW]) / WINDOW
    previous = recent[WINDOW : 2 * WINDOW]
    prev5_avg = sum(m.total_cards for m in previous) / WINDOW if len(previous) >= WINDOW else season_avg_total
    change = last5_avg - prev5_avg
    percent_change = change / prev5_avg * 100 if prev5_avg > 0 else 0.0
    if change > 0.5:
        direction = "up"
    elif change < -0.5:
        direction = "down"
    else:
        direction = "stable"
    return TrendAnalysis(
        last5_avg=round(last5_avg, 2),
        prev5_avg=round(prev5_avg, 2),
        change=round(change, 2),
        percent_change=round(percent_change, 1),
        direction=direction,
    )


__all__ = ["Streak", "TrendAnalysis", "detect_streaks", "calculate_trend"]

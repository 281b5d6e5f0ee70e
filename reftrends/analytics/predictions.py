"""Card prediction engine.

Expected cards are a weighted blend of the referee's average, the two teams'
averages and a league baseline. Over/under probabilities assume the total is
Poisson distributed around that expectation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Literal, Optional, Sequence

import numpy as np

from reftrends.shared.enums import ConfidenceLevel
from reftrends.shared.probability import poisson_cumulative_gte
from reftrends.shared.records import MatchRecord

REFEREE_WEIGHT = 0.45
TEAM_WEIGHT = 0.35
LEAGUE_WEIGHT = 0.20
DEFAULT_LEAGUE_AVG_YELLOW = 4.0
LEAGUE_AVG_RED = 0.15
FORM_ADJUSTMENT_FACTOR = 0.15


@dataclass
class RefereeProfile:
    avg_yellow_cards: float
    avg_red_cards: float
    matches_officiated: int
    strictness_index: float = 0.0
    recent_form: List[float] = field(default_factory=list)  # yellow cards, oldest first


@dataclass
class TeamProfile:
    avg_yellow_received: float
    avg_red_received: float
    matches_played: int
    avg_fouls_committed: float = 0.0


@dataclass
class Prediction:
    expected_yellow_cards: float
    expected_red_cards: float
    expected_total_cards: float
    over25_probability: float
    over35_probability: float
    over45_probability: float
    under25_probability: float
    under35_probability: float
    confidence: ConfidenceLevel
    confidence_score: int


@dataclass
class FormAnalysis:
    trend: Literal["improving", "stable", "declining"]
    trend_score: float
    avg_last5: float
    avg_season: float
    volatility: float
    form_rating: int


@dataclass
class HistoricalMatch:
    yellow_cards: int
    red_cards: int
    result: Literal["win", "draw", "loss"]
    fouls: int = 0


@dataclass
class Compatibility:
    score: int
    rating: Literal["excellent", "good", "neutral", "poor", "very_poor"]
    card_tendency: Literal["fewer", "normal", "more"]
    historical_matches: int
    avg_cards_in_history: float


@dataclass
class Recommendation:
    primary_pick: str
    primary_odds_range: str
    confidence: str
    reasoning: str
    alternative_picks: List[str] = field(default_factory=list)


def _confidence_score(
    referee: RefereeProfile,
    home: Optional[TeamProfile],
    away: Optional[TeamProfile],
) -> int:
    score = 0
    if referee.matches_officiated >= 20:
        score += 40
    elif referee.matches_officiated >= 10:
        score += 25
    elif referee.matches_officiated >= 5:
        score += 15

    if home is not None and away is not None:
        if home.matches_played >= 10 and away.matches_played >= 10:
            score += 35
        elif home.matches_played >= 5 and away.matches_played >= 5:
            score += 20
    else:
        score += 10

    if len(referee.recent_form) >= 5:
        score += 25
    return min(100, score)


def _confidence_level(score: int) -> ConfidenceLevel:
    if score >= 70:
        return ConfidenceLevel.HIGH
    if score >= 40:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def calculate_expected_cards(
    referee: RefereeProfile,
    home: Optional[TeamProfile] = None,
    away: Optional[TeamProfile] = None,
    league_avg_yellow: float = DEFAULT_LEAGUE_AVG_YELLOW,
) -> Prediction:
    expected_yellow = referee.avg_yellow_cards
    expected_red = referee.avg_red_cards

    # Team terms only make sense with both sides known
    if home is not None and away is not None:
        team_yellow = home.avg_yellow_received + away.avg_yellow_received
        team_red = home.avg_red_received + away.avg_red_received
        expected_yellow = (
            referee.avg_yellow_cards * REFEREE_WEIGHT
            + team_yellow * TEAM_WEIGHT
            + league_avg_yellow * LEAGUE_WEIGHT
        )
        expected_red = (
            referee.avg_red_cards * REFEREE_WEIGHT
            + team_red * TEAM_WEIGHT
            + LEAGUE_AVG_RED * LEAGUE_WEIGHT
        )

    if len(referee.recent_form) >= 3:
        recent_avg = float(np.mean(referee.recent_form))
        expected_yellow += (recent_avg - referee.avg_yellow_cards) * FORM_ADJUSTMENT_FACTOR

    expected_yellow = max(0.0, expected_yellow)
    expected_red = max(0.0, expected_red)
    expected_total = expected_yellow + expected_red

    over25 = poisson_cumulative_gte(expected_total, 3) * 100
    over35 = poisson_cumulative_gte(expected_total, 4) * 100
    over45 = poisson_cumulative_gte(expected_total, 5) * 100

    score = _confidence_score(referee, home, away)
    return Prediction(
        expected_yellow_cards=round(expected_yellow, 2),
        expected_red_cards=round(expected_red, 2),
        expected_total_cards=round(expected_total, 2),
        over25_probability=round(over25, 1),
        over35_probability=round(over35, 1),
        over45_probability=round(over45, 1),
        under25_probability=round(100 - over25, 1),
        under35_probability=round(100 - over35, 1),
        confidence=_confidence_level(score),
        confidence_score=score,
    )


def analyze_referee_form(recent_cards: Sequence[float], season_avg: float) -> FormAnalysis:
    """Trend and consistency of a referee's recent card counts (oldest first).

    A positive slope means more cards lately, which is reported as
    'declining' form from a bettor's point of view.
    """
    if not recent_cards:
        return FormAnalysis(
            trend="stable",
            trend_score=0.0,
            avg_last5=season_avg,
            avg_season=season_avg,
            volatility=0.0,
            form_rating=5,
        )

    values = np.asarray(recent_cards, dtype=float)
    avg_last5 = float(values.mean())

    trend_score = 0.0
    if values.size >= 3:
        x = np.arange(values.size, dtype=float)
        slope = float(np.polyfit(x, values, 1)[0])
        trend_score = max(-1.0, min(1.0, slope / 2))

    volatility = float(values.std())

    if trend_score > 0.15:
        trend = "declining"
    elif trend_score < -0.15:
        trend = "improving"
    else:
        trend = "stable"

    consistency = max(0.0, 10 - volatility * 2)
    form_rating = int(round(max(1.0, min(10.0, consistency))))

    return FormAnalysis(
        trend=trend,
        trend_score=round(trend_score, 2),
        avg_last5=round(avg_last5, 2),
        avg_season=season_avg,
        volatility=round(volatility, 2),
        form_rating=form_rating,
    )


def calculate_compatibility_score(
    history: Sequence[HistoricalMatch],
    referee_avg_yellow: float,
    team_avg_yellow: float,
) -> Compatibility:
    if not history:
        return Compatibility(
            score=50,
            rating="neutral",
            card_tendency="normal",
            historical_matches=0,
            avg_cards_in_history=0.0,
        )

    n = len(history)
    avg_cards = sum(m.yellow_cards + m.red_cards for m in history) / n
    expected = (referee_avg_yellow + team_avg_yellow) / 2
    deviation_pct = (avg_cards - expected) / expected * 100 if expected > 0 else 0.0
    win_rate = sum(1 for m in history if m.result == "win") / n * 100

    score = 50.0
    score -= deviation_pct * 0.3
    # 33.33% is the naive win rate for a three-way result
    score += (win_rate - 33.33) * 0.4
    if n >= 5:
        score += 5
    if n >= 10:
        score += 5
    score = max(0.0, min(100.0, score))

    if score >= 70:
        rating = "excellent"
    elif score >= 55:
        rating = "good"
    elif score >= 45:
        rating = "neutral"
    elif score >= 30:
        rating = "poor"
    else:
        rating = "very_poor"

    if deviation_pct <= -15:
        tendency = "fewer"
    elif deviation_pct >= 15:
        tendency = "more"
    else:
        tendency = "normal"

    return Compatibility(
        score=int(round(score)),
        rating=rating,
        card_tendency=tendency,
        historical_matches=n,
        avg_cards_in_history=round(avg_cards, 2),
    )


_CONFIDENCE_LABELS = {
    ConfidenceLevel.HIGH: "High Confidence",
    ConfidenceLevel.MEDIUM: "Medium Confidence",
    ConfidenceLevel.LOW: "Low Confidence",
}


def generate_betting_recommendation(prediction: Prediction) -> Recommendation:
    over25 = prediction.over25_probability
    over35 = prediction.over35_probability
    over45 = prediction.over45_probability
    under35 = prediction.under35_probability
    alternatives: List[str] = []

    if over45 >= 60:
        pick, odds_range = "Over 4.5 Cards", "2.00 - 2.50"
        reasoning = (
            f"Strong {over45:.0f}% probability for 5+ cards. "
            f"Referee shows {prediction.expected_total_cards:.1f} cards on average."
        )
        alternatives.append("Over 3.5 Cards (safer)")
    elif over35 >= 65:
        pick, odds_range = "Over 3.5 Cards", "1.70 - 2.00"
        reasoning = f"Good {over35:.0f}% probability for 4+ cards based on historical data."
        if over45 >= 40:
            alternatives.append("Over 4.5 Cards (value)")
        alternatives.append("Over 2.5 Cards (safer)")
    elif over25 >= 70:
        pick, odds_range = "Over 2.5 Cards", "1.40 - 1.60"
        reasoning = f"High {over25:.0f}% probability for 3+ cards. Conservative but reliable."
    elif under35 >= 60:
        pick, odds_range = "Under 3.5 Cards", "1.80 - 2.20"
        reasoning = f"{under35:.0f}% probability for under 4 cards. Lenient referee expected."
        alternatives.append("Under 4.5 Cards (safer)")
    else:
        pick, odds_range = "Skip - No Clear Edge", "N/A"
        reasoning = "Probabilities are too close to call. Wait for better opportunity."

    return Recommendation(
        primary_pick=pick,
        primary_odds_range=odds_range,
        confidence=_CONFIDENCE_LABELS[prediction.confidence],
        reasoning=reasoning,
        alternative_picks=alternatives,
    )


def team_profile(matches: Iterable[MatchRecord], team_id: int) -> Optional[TeamProfile]:
    """Cards and fouls a team picks up per match, over matches with stats."""
    yellow = red = fouls = played = 0
    for match in matches:
        if match.stats is None:
            continue
        if match.home_team.id == team_id:
            yellow += match.stats.home_yellow_cards
            red += match.stats.home_red_cards
            fouls += match.stats.home_fouls
        elif match.away_team.id == team_id:
            yellow += match.stats.away_yellow_cards
            red += match.stats.away_red_cards
            fouls += match.stats.away_fouls
        else:
            continue
        played += 1
    if not played:
        return None
    return TeamProfile(
        avg_yellow_received=yellow / played,
        avg_red_received=red / played,
        matches_played=played,
        avg_fouls_committed=fouls / played,
    )


def historical_matches(matches: Iterable[MatchRecord], team_id: int) -> List[HistoricalMatch]:
    """The team's own cards and result in each match, for compatibility scoring."""
    history: List[HistoricalMatch] = []
    for match in matches:
        is_home = match.home_team.id == team_id
        if not is_home and match.away_team.id != team_id:
            continue
        stats = match.stats
        goals_for = (match.home_goals if is_home else match.away_goals) or 0
        goals_against = (match.away_goals if is_home else match.home_goals) or 0
        if goals_for > goals_against:
            result = "win"
        elif goals_for < goals_against:
            result = "loss"
        else:
            result = "draw"
        history.append(
            HistoricalMatch(
                yellow_cards=(stats.home_yellow_cards if is_home else stats.away_yellow_cards) if stats else 0,
                red_cards=(stats.home_red_cards if is_home else stats.away_red_cards) if stats else 0,
                result=result,
                fouls=(stats.home_fouls if is_home else stats.away_fouls) if stats else 0,
            )
        )
    return history


__all__ = [
    "RefereeProfile",
    "TeamProfile",
    "Prediction",
    "FormAnalysis",
    "HistoricalMatch",
    "Compatibility",
    "Recommendation",
    "calculate_expected_cards",
    "analyze_referee_form",
    "calculate_compatibility_score",
    "generate_betting_recommendation",
    "historical_matches",
    "team_profile",
]

"""Tests for analytics/predictions.py - expected cards, form, compatibility and picks."""

from __future__ import annotations

import pytest

from reftrends.analytics.predictions import (
    HistoricalMatch,
    Prediction,
    RefereeProfile,
    TeamProfile,
    analyze_referee_form,
    calculate_compatibility_score,
    calculate_expected_cards,
    generate_betting_recommendation,
    historical_matches,
    team_profile,
)
from reftrends.shared.enums import ConfidenceLevel
from reftrends.shared.probability import poisson_cumulative_gte
from reftrends.shared.records import TeamRef


def prediction(over25: float, over35: float, over45: float, confidence=ConfidenceLevel.MEDIUM) -> Prediction:
    return Prediction(
        expected_yellow_cards=4.0,
        expected_red_cards=0.2,
        expected_total_cards=4.2,
        over25_probability=over25,
        over35_probability=over35,
        over45_probability=over45,
        under25_probability=round(100 - over25, 1),
        under35_probability=round(100 - over35, 1),
        confidence=confidence,
        confidence_score=50,
    )


class TestExpectedCards:
    """Tests for calculate_expected_cards."""

    def test_referee_only(self):
        """Without both teams the referee averages are used as is."""
        result = calculate_expected_cards(RefereeProfile(avg_yellow_cards=4.0, avg_red_cards=0.2, matches_officiated=25))
        assert result.expected_yellow_cards == 4.0
        assert result.expected_red_cards == 0.2
        assert result.expected_total_cards == 4.2
        assert result.over35_probability == round(poisson_cumulative_gte(4.2, 4) * 100, 1)
        assert result.under35_probability == round(100 - poisson_cumulative_gte(4.2, 4) * 100, 1)
        assert result.over25_probability > result.over35_probability > result.over45_probability
        # 40 for 20+ matches, 10 for unknown teams
        assert result.confidence_score == 50
        assert result.confidence == ConfidenceLevel.MEDIUM

    def test_one_team_is_ignored(self):
        """A single team profile does not change the blend."""
        referee = RefereeProfile(avg_yellow_cards=4.0, avg_red_cards=0.2, matches_officiated=25)
        home = TeamProfile(avg_yellow_received=3.0, avg_red_received=0.5, matches_played=12)
        assert calculate_expected_cards(referee, home).expected_yellow_cards == 4.0

    def test_weighted_blend(self):
        """45% referee, 35% teams, 20% league baseline."""
        referee = RefereeProfile(avg_yellow_cards=4.0, avg_red_cards=0.2, matches_officiated=25)
        home = TeamProfile(avg_yellow_received=2.0, avg_red_received=0.1, matches_played=12)
        away = TeamProfile(avg_yellow_received=1.5, avg_red_received=0.1, matches_played=12)
        result = calculate_expected_cards(referee, home, away)
        assert result.expected_yellow_cards == pytest.approx(3.825, abs=0.01)
        assert result.expected_red_cards == pytest.approx(0.19, abs=0.005)
        assert result.confidence_score == 75
        assert result.confidence == ConfidenceLevel.HIGH

    def test_recent_form_adjustment(self):
        """Recent form pulls the yellow expectation by 15% of the gap."""
        referee = RefereeProfile(
            avg_yellow_cards=4.0, avg_red_cards=0.0, matches_officiated=3, recent_form=[6.0, 6.0, 6.0]
        )
        result = calculate_expected_cards(referee)
        assert result.expected_yellow_cards == pytest.approx(4.3)
        assert result.confidence == ConfidenceLevel.LOW

    def test_full_confidence_is_capped(self):
        """Score never exceeds 100."""
        referee = RefereeProfile(
            avg_yellow_cards=4.0, avg_red_cards=0.2, matches_officiated=30, recent_form=[4, 4, 4, 4, 4]
        )
        team = TeamProfile(avg_yellow_received=2.0, avg_red_received=0.1, matches_played=20)
        result = calculate_expected_cards(referee, team, team)
        assert result.confidence_score == 100


class TestRefereeForm:
    """Tests for analyze_referee_form."""

    def test_no_data(self):
        """Neutral defaults around the season average."""
        form = analyze_referee_form([], 3.9)
        assert form.trend == "stable"
        assert form.avg_last5 == 3.9
        assert form.form_rating == 5

    def test_rising_cards_read_as_declining(self):
        """More cards lately is declining form."""
        form = analyze_referee_form([2, 3, 4, 5, 6], 4.0)
        assert form.trend == "declining"
        assert form.trend_score == pytest.approx(0.5)
        assert form.avg_last5 == 4.0
        assert form.volatility == pytest.approx(1.41)
        assert form.form_rating == 7

    def test_falling_cards_read_as_improving(self):
        """Fewer cards lately is improving form."""
        assert analyze_referee_form([6, 5, 4, 3, 2], 4.0).trend == "improving"

    def test_consistent(self):
        """Flat series: stable with top consistency."""
        form = analyze_referee_form([4, 4, 4], 4.0)
        assert form.trend == "stable"
        assert form.volatility == 0.0
        assert form.form_rating == 10

    def test_two_matches_have_no_slope(self):
        """Fewer than three values give no trend."""
        assert analyze_referee_form([1, 7], 4.0).trend_score == 0.0


class TestCompatibility:
    """Tests for calculate_compatibility_score."""

    def test_no_history(self):
        """Neutral when the pair never met."""
        result = calculate_compatibility_score([], 4.0, 2.0)
        assert (result.score, result.rating, result.card_tendency) == (50, "neutral", "normal")

    def test_few_cards_and_wins(self):
        """Few cards and all wins is an excellent pairing."""
        history = [HistoricalMatch(yellow_cards=1, red_cards=0, result="win") for _ in range(5)]
        result = calculate_compatibility_score(history, 4.0, 2.0)
        assert result.score == 100
        assert result.rating == "excellent"
        assert result.card_tendency == "fewer"
        assert result.historical_matches == 5
        assert result.avg_cards_in_history == 1.0

    def test_many_cards_and_losses(self):
        """Heavy bookings and defeats score at the bottom."""
        history = [HistoricalMatch(yellow_cards=5, red_cards=0, result="loss") for _ in range(2)]
        result = calculate_compatibility_score(history, 2.0, 2.0)
        assert result.score == 0
        assert result.rating == "very_poor"
        assert result.card_tendency == "more"


class TestRecommendation:
    """Tests for generate_betting_recommendation."""

    def test_over45(self):
        """Strong 5+ probability."""
        rec = generate_betting_recommendation(prediction(95, 85, 65, ConfidenceLevel.HIGH))
        assert rec.primary_pick == "Over 4.5 Cards"
        assert rec.alternative_picks == ["Over 3.5 Cards (safer)"]
        assert rec.confidence == "High Confidence"

    def test_over35_with_value_alternative(self):
        """Over 3.5 with the 4.5 line as value."""
        rec = generate_betting_recommendation(prediction(85, 70, 45))
        assert rec.primary_pick == "Over 3.5 Cards"
        assert rec.primary_odds_range == "1.70 - 2.00"
        assert rec.alternative_picks == ["Over 4.5 Cards (value)", "Over 2.5 Cards (safer)"]

    def test_over25(self):
        """Conservative over."""
        rec = generate_betting_recommendation(prediction(75, 50, 25))
        assert rec.primary_pick == "Over 2.5 Cards"
        assert rec.alternative_picks == []

    def test_under35(self):
        """Lenient referee."""
        rec = generate_betting_recommendation(prediction(60, 35, 15, ConfidenceLevel.LOW))
        assert rec.primary_pick == "Under 3.5 Cards"
        assert rec.alternative_picks == ["Under 4.5 Cards (safer)"]
        assert rec.confidence == "Low Confidence"

    def test_skip(self):
        """No clear edge."""
        rec = generate_betting_recommendation(prediction(65, 50, 30))
        assert rec.primary_pick == "Skip - No Clear Edge"
        assert rec.primary_odds_range == "N/A"


class TestTeamHistory:
    """Tests for team_profile and historical_matches."""

    def test_team_profile_uses_own_side(self, make_match):
        """Cards and fouls are the team's own, home or away."""
        arsenal = TeamRef(id=1, name="Arsenal")
        chelsea = TeamRef(id=2, name="Chelsea")
        matches = [
            make_match(home=arsenal, away=chelsea, home_yellow=3, away_yellow=1, home_fouls=12, away_fouls=8),
            make_match(home=chelsea, away=arsenal, home_yellow=2, away_yellow=1, away_red=1, home_fouls=9, away_fouls=10),
            make_match(home=arsenal, away=chelsea, with_stats=False),
        ]
        profile = team_profile(matches, arsenal.id)
        assert profile.matches_played == 2
        assert profile.avg_yellow_received == 2.0
        assert profile.avg_red_received == 0.5
        assert profile.avg_fouls_committed == 11.0

    def test_team_profile_without_matches(self, make_match):
        """No matches with stats gives None."""
        assert team_profile([make_match(with_stats=False)], 1) is None
        assert team_profile([make_match()], 99) is None

    def test_historical_results(self, make_match):
        """Results come from the team's point of view."""
        arsenal = TeamRef(id=1, name="Arsenal")
        chelsea = TeamRef(id=2, name="Chelsea")
        matches = [
            make_match(home=arsenal, away=chelsea, home_goals=2, away_goals=0, home_yellow=1),
            make_match(home=chelsea, away=arsenal, home_goals=2, away_goals=0, away_yellow=4),
            make_match(home=chelsea, away=arsenal, home_goals=1, away_goals=1),
        ]
        history = historical_matches(matches, arsenal.id)
        assert [h.result for h in history] == ["win", "loss", "draw"]
        assert [h.yellow_cards for h in history] == [1, 4, 2]

"""Tests for analytics/referee_stats.py - per-season referee aggregates."""

from __future__ import annotations

import pytest

from reftrends.analytics.referee_stats import aggregate_referee_seasons, strictness_index
from reftrends.shared.records import RefereeRef

OLIVER = RefereeRef(id=1, name="Michael Oliver", slug="michael-oliver")


def test_strictness_index():
    """Yellows plus weighted reds and penalties."""
    assert strictness_index(4.0, 0.5, 1.0) == 6.0
    assert strictness_index(4.0, 0.5) == 5.5


class TestAggregateRefereeSeasons:
    """Tests for aggregate_referee_seasons."""

    @pytest.fixture
    def aggregates(self, make_match):
        matches = [
            make_match(referee=OLIVER, home_yellow=3, away_yellow=1, home_red=1, home_penalties=1),
            make_match(referee=OLIVER, home_yellow=2, away_yellow=2),
            make_match(referee=OLIVER, with_stats=False),
            make_match(referee=OLIVER, status="NS"),
            make_match(referee=OLIVER, season=2025),
            make_match(referee=None),
        ]
        return aggregate_referee_seasons(matches)

    def test_grouping(self, aggregates):
        """One row per referee, season and league, finished matches only."""
        assert [(a.referee_id, a.season, a.league_api_id) for a in aggregates] == [(1, 2025, 39), (1, 2026, 39)]

    def test_averages_over_all_matches(self, aggregates):
        """Averages divide by every finished match, with or without stats."""
        current = aggregates[1]
        assert current.matches_officiated == 3
        assert (current.total_yellow_cards, current.total_red_cards) == (8, 1)
        assert current.avg_yellow_cards == 2.67
        assert current.avg_red_cards == 0.33
        assert current.total_penalties == 1
        assert current.total_fouls == 40
        assert current.avg_fouls == 13.33
        assert current.strictness_index == 3.83
        assert current.home_bias_score == -0.67
        assert current.as_row()["referee_id"] == 1

"""Tests for analytics/timing.py - when cards are shown."""

from __future__ import annotations

import pytest

from reftrends.analytics.timing import PERIODS, analyze_card_timing, card_period, minute_bucket
from reftrends.shared.enums import CardType
from reftrends.shared.records import CardEventRecord


def card(minute: int, extra=None, red: bool = False, home: bool = True) -> CardEventRecord:
    return CardEventRecord(
        minute=minute,
        extra_minute=extra,
        card_type=CardType.RED if red else CardType.YELLOW,
        is_home=home,
    )


class TestPeriods:
    """Period and minute bucketing."""

    @pytest.mark.parametrize(
        "minute,extra,expected",
        [
            (1, None, "0-15"),
            (15, None, "0-15"),
            (16, None, "16-30"),
            (45, None, "31-45"),
            (45, 3, "45+"),
            (46, None, "46-60"),
            (75, None, "61-75"),
            (90, None, "76-90"),
            (90, 5, "90+"),
            (120, None, "90+"),
        ],
    )
    def test_card_period(self, minute, extra, expected):
        """Stoppage time gets its own period in each half."""
        assert card_period(minute, extra) == expected

    def test_minute_bucket(self):
        """Five minute buckets with a stoppage bucket."""
        assert minute_bucket(0, None) == "0-4"
        assert minute_bucket(44, None) == "40-44"
        assert minute_bucket(45, 2) == "90+"
        assert minute_bucket(93, None) == "90+"


class TestAnalyzeCardTiming:
    """Tests for analyze_card_timing."""

    def test_no_events(self, make_match):
        """Matches without events give an empty report."""
        report = analyze_card_timing([make_match()])
        assert report.has_data is False
        assert report.overall is None

    def test_distribution(self, make_match):
        """Overall split, period counts and per-referee timing."""
        events = [
            card(10),
            card(25),
            card(45, extra=2),
            card(50, red=True, home=False),
            card(80),
            card(90, extra=3),
        ]
        matches = [make_match(card_events=events), make_match(card_events=events)]
        report = analyze_card_timing(matches)

        assert report.has_data
        assert [p.period for p in report.by_period] == list(PERIODS)
        by_period = {p.period: p for p in report.by_period}
        assert by_period["45+"].total == 2
        assert by_period["46-60"].red == 2
        assert by_period["90+"].percent == pytest.approx(2 / 12 * 100)

        overall = report.overall
        assert overall.total == 12
        assert overall.first_half == 6
        assert overall.second_half == 6
        assert overall.first_half_percent == 50.0
        assert overall.avg_minute == pytest.approx((10 + 25 + 45 + 50 + 80 + 90) / 6)

        [ref] = report.referees
        assert ref.total == 12
        assert ref.injury_time == 4
        assert ref.early_cards == 4
        assert ref.late_cards == 4
        assert ref.late_card_percent == pytest.approx(4 / 12 * 100)
        assert ref.league == "Premier League"

    def test_referee_minimum(self, make_match):
        """Referees under ten cards are left out of the ranking."""
        report = analyze_card_timing([make_match(card_events=[card(10), card(60)])])
        assert report.has_data
        assert report.referees == []
        assert report.overall.total == 2

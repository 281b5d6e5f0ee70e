"""Tests for analytics/value.py - value bets and bookmaker comparison."""

from __future__ import annotations

import math

import pytest

from reftrends.analytics.value import (
    BOOKMAKERS,
    BookmakerQuote,
    compare_bookmakers,
    expected_yellow_cards,
    find_value_bets,
    quote_margin,
    simulate_bookmaker_quotes,
    value_rating,
)


class TestExpectedYellowCards:
    """Tests for expected_yellow_cards."""

    def test_weighted_blend(self):
        """Half referee, a quarter for each team."""
        assert expected_yellow_cards(4.0, 2.0, 2.0) == 3.0

    def test_team_defaults(self):
        """Missing or zero team averages fall back to 1.5."""
        assert expected_yellow_cards(4.0) == 2.75
        assert expected_yellow_cards(4.0, 0.0, None) == 2.75


class TestFindValueBets:
    """Tests for find_value_bets."""

    def test_value_detection(self):
        """Our Poisson probability against the implied one."""
        analysis = find_value_bets(4.0, 2.0, 2.0, {"over35": 3.0, "under35": 1.2, "over25": 1.0})
        over35 = (1 - math.exp(-3) * (1 + 3 + 4.5 + 4.5)) * 100

        assert analysis.expected_yellow == 3.0
        assert analysis.over35 == pytest.approx(over35)
        assert analysis.over25 > analysis.over35 > analysis.over45

        over, under = analysis.values
        assert over.market == "Over 3.5 Yellow"
        assert over.implied_prob == pytest.approx(100 / 3)
        assert over.our_prob == pytest.approx(over35)
        assert over.ev == pytest.approx((over35 / 100 * 3.0 - 1) * 100)
        assert over.is_value is True

        assert under.market == "Under 3.5 Yellow"
        assert under.our_prob == pytest.approx(100 - over35)
        assert under.is_value is False

    def test_no_odds(self):
        """Probabilities are still reported without prices."""
        analysis = find_value_bets(4.0, None, None, {})
        assert analysis.values == []
        assert 0 < analysis.over45 < 100


class TestValueRating:
    """Tests for value_rating."""

    @pytest.mark.parametrize(
        "odds,label",
        [(2.0, "best"), (1.97, "good"), (1.92, "average"), (1.8, "poor")],
    )
    def test_bands(self, odds, label):
        """Distance from the best price, in percent."""
        assert value_rating(odds, 2.0) == label


def quote(name, **prices):
    base = dict(over25=1.5, under25=2.6, over35=2.2, under35=1.7, over45=3.0, under45=1.35)
    base.update(prices)
    return BookmakerQuote(bookmaker=name, **base)


class TestCompareBookmakers:
    """Tests for compare_bookmakers."""

    def test_best_prices_and_arbitrage(self):
        """Best price per market and a two-way arbitrage on 3.5."""
        a = quote("Book A")
        b = quote("Book B", over25=1.4, under25=2.9, over35=1.9, under35=2.0, over45=2.8, under45=1.4)
        comparison = compare_bookmakers([a, b])

        assert comparison.best["over25"].bookmaker == "Book A"
        assert comparison.best["under25"].bookmaker == "Book B"
        assert comparison.best["over35"].value == 2.2

        [arb] = comparison.arbitrage
        assert arb.market == "3.5 Cards"
        assert (arb.over_bookmaker, arb.under_bookmaker) == ("Book A", "Book B")
        assert arb.profit == pytest.approx(4.76, abs=0.01)

    def test_margin(self):
        """Average two-way margin over the three lines."""
        a = quote("Book A")
        assert quote_margin(a) == pytest.approx(5.6, abs=0.01)
        compare_bookmakers([a])
        assert a.margin == quote_margin(a)


class TestSimulateBookmakerQuotes:
    """Tests for simulate_bookmaker_quotes."""

    def test_seeded_quotes(self):
        """One quote per bookmaker, repeatable with a seed."""
        quotes = simulate_bookmaker_quotes(3.0, seed=7)
        assert [q.bookmaker for q in quotes] == list(BOOKMAKERS)
        assert quotes == simulate_bookmaker_quotes(3.0, seed=7)
        for q in quotes:
            assert q.over25 > 1.0 and q.under45 > 1.0
            assert 0 < q.margin < 6

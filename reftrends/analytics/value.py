"""Value detection against bookmaker card-market prices.

Our probabilities come from a Poisson model around an expected yellow-card
count; a price is value when our probability beats the implied one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from reftrends.shared.probability import book_margin, eu_to_implied_prob, poisson_over_probability

REFEREE_SHARE = 0.5
TEAM_SHARE = 0.25
DEFAULT_TEAM_AVG_YELLOW = 1.5

LINES: Tuple[float, ...] = (2.5, 3.5, 4.5)
# odds keys as sent by clients: over25, under25, ...
ODDS_KEYS: Tuple[str, ...] = tuple(f"{side}{str(line).replace('.', '')}" for line in LINES for side in ("over", "under"))

BOOKMAKERS: Tuple[str, ...] = (
    "Bet365",
    "William Hill",
    "Betfair",
    "Unibet",
    "1xBet",
    "Pinnacle",
    "Betway",
    "888sport",
)


@dataclass
class ValueBet:
    market: str
    our_prob: float
    implied_prob: float
    odds: float
    ev: float
    is_value: bool


@dataclass
class ValueAnalysis:
    expected_yellow: float
    over25: float
    over35: float
    over45: float
    values: List[ValueBet] = field(default_factory=list)


def expected_yellow_cards(
    referee_avg: float,
    home_avg: Optional[float] = None,
    away_avg: Optional[float] = None,
) -> float:
    home = home_avg if home_avg else DEFAULT_TEAM_AVG_YELLOW
    away = away_avg if away_avg else DEFAULT_TEAM_AVG_YELLOW
    return referee_avg * REFEREE_SHARE + home * TEAM_SHARE + away * TEAM_SHARE


def _line_key(side: str, line: float) -> str:
    return f"{side}{str(line).replace('.', '')}"


def find_value_bets(
    referee_avg: float,
    home_avg: Optional[float],
    away_avg: Optional[float],
    odds: Mapping[str, float],
) -> ValueAnalysis:
    """Compare model probabilities with the quoted prices.

    `odds` maps keys such as ``over35`` to decimal odds; missing keys and
    prices at or below 1.0 are skipped. Probabilities and EV are percentages.
    """
    expected = expected_yellow_cards(referee_avg, home_avg, away_avg)
    over = {line: poisson_over_probability(expected, line) * 100 for line in LINES}
    analysis = ValueAnalysis(
        expected_yellow=expected,
        over25=over[2.5],
        over35=over[3.5],
        over45=over[4.5],
    )
    for line in LINES:
        for side in ("over", "under"):
            price = odds.get(_line_key(side, line))
            if price is None or float(price) <= 1.0:
                continue
            price = float(price)
            ours = over[line] if side == "over" else 100 - over[line]
            implied = eu_to_implied_prob(price) * 100
            analysis.values.append(
                ValueBet(
                    market=f"{side.capitalize()} {line} Yellow",
                    our_prob=ours,
                    implied_prob=implied,
                    odds=price,
                    ev=((ours / 100) * price - 1) * 100,
                    is_value=ours > implied,
                )
            )
    return analysis


@dataclass
class BookmakerQuote:
    bookmaker: str
    over25: float
    under25: float
    over35: float
    under35: float
    over45: float
    under45: float
    margin: float = 0.0

    def price(self, key: str) -> float:
        return float(getattr(self, key))


@dataclass
class BestPrice:
    value: float
    bookmaker: str


@dataclass
class Arbitrage:
    market: str
    over_bookmaker: str
    over_odds: float
    under_bookmaker: str
    under_odds: float
    profit: float


@dataclass
class BookmakerComparison:
    quotes: List[BookmakerQuote]
    best: Dict[str, BestPrice]
    arbitrage: List[Arbitrage]


def quote_margin(quote: BookmakerQuote) -> float:
    """Average two-way margin over the three lines, in percent."""
    margins = [
        book_margin(quote.price(_line_key("over", line)), quote.price(_line_key("under", line)))
        for line in LINES
    ]
    return round(sum(margins) / len(margins), 2)


def value_rating(odds: float, best_value: float) -> str:
    diff = (best_value - odds) / best_value * 100 if best_value > 0 else 0.0
    if diff == 0:
        return "best"
    if diff < 2:
        return "good"
    if diff < 5:
        return "average"
    return "poor"


def compare_bookmakers(quotes: Sequence[BookmakerQuote]) -> BookmakerComparison:
    """Best price per side and line, plus any two-way arbitrage."""
    quotes = list(quotes)
    for quote in quotes:
        quote.margin = quote_margin(quote)

    best: Dict[str, BestPrice] = {}
    for key in ODDS_KEYS:
        top = BestPrice(value=0.0, bookmaker="")
        for quote in quotes:
            if quote.price(key) > top.value:
                top = BestPrice(value=quote.price(key), bookmaker=quote.bookmaker)
        best[key] = top

    arbitrage: List[Arbitrage] = []
    for line in LINES:
        best_over = best[_line_key("over", line)]
        best_under = best[_line_key("under", line)]
        if best_over.value <= 0 or best_under.value <= 0:
            continue
        total_implied = 1 / best_over.value + 1 / best_under.value
        if total_implied < 1:
            arbitrage.append(
                Arbitrage(
                    market=f"{line} Cards",
                    over_bookmaker=best_over.bookmaker,
                    over_odds=best_over.value,
                    under_bookmaker=best_under.bookmaker,
                    under_odds=best_under.value,
                    profit=round((1 / total_implied - 1) * 100, 2),
                )
            )
    return BookmakerComparison(quotes=quotes, best=best, arbitrage=arbitrage)


def simulate_bookmaker_quotes(expected_cards: float, seed: Optional[int] = None) -> List[BookmakerQuote]:
    """Plausible prices from a handful of books, each with a 3-8% margin draw."""
    rng = np.random.default_rng(seed)
    quotes: List[BookmakerQuote] = []
    for bookmaker in BOOKMAKERS:
        margin = float(rng.uniform(0.03, 0.08))
        adjusted = expected_cards + float(rng.uniform(-0.05, 0.05))
        prices: Dict[str, float] = {}
        for line, base in zip(LINES, (0.3, 0.5, 0.7)):
            prob = min(0.95, max(0.05, base + (adjusted - line) * 0.15))
            prices[_line_key("over", line)] = round(1 / prob * (1 - margin / 2), 2)
            prices[_line_key("under", line)] = round(1 / (1 - prob) * (1 - margin / 2), 2)
        quote = BookmakerQuote(bookmaker=bookmaker, **prices)
        quote.margin = quote_margin(quote)
        quotes.append(quote)
    return quotes


__all__ = [
    "LINES",
    "ODDS_KEYS",
    "BOOKMAKERS",
    "ValueBet",
    "ValueAnalysis",
    "BookmakerQuote",
    "BestPrice",
    "Arbitrage",
    "BookmakerComparison",
    "expected_yellow_cards",
    "find_value_bets",
    "quote_margin",
    "value_rating",
    "compare_bookmakers",
    "simulate_bookmaker_quotes",
]

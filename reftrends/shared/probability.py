"""Probability utilities shared by predictions and the odds tools.

Card counts are modelled as Poisson variables; bookmaker prices are decimal
(EU) odds.

Safe math and bounds:
- EU odds must be > 1.0; otherwise a ValueError is raised.
- A non-positive Poisson rate is treated as a point mass at zero.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Tuple


def eu_to_implied_prob(odds_eu: float) -> float:
    """Convert decimal (EU) odds to implied probability.

    Raises ValueError if odds_eu <= 1.0.
    """
    o = float(odds_eu)
    if not (o > 1.0):
        raise ValueError("decimal odds must be > 1.0")
    return 1.0 / o


def normalize_vector(probs: Iterable[float]) -> Tuple[List[float], float]:
    """Normalize a sequence of probabilities to unit sum and return overround."""
    raw = [float(p) for p in probs]
    if any(p <= 0.0 for p in raw):
        raise ValueError("probabilities must be > 0")
    s = sum(raw)
    overround = s - 1.0
    return [p / s for p in raw], overround


def book_margin(over_odds: float, under_odds: float) -> float:
    """Bookmaker margin on a two-way market, in percent."""
    return (eu_to_implied_prob(over_odds) + eu_to_implied_prob(under_odds) - 1.0) * 100.0


def expected_value(prob: float, odds_eu: float) -> float:
    """Expected profit per unit staked."""
    return prob * float(odds_eu) - 1.0


def poisson_pmf(k: int, lam: float) -> float:
    if k < 0:
        return 0.0
    if lam <= 0.0:
        return 1.0 if k == 0 else 0.0
    # log space keeps large k finite
    return math.exp(k * math.log(lam) - lam - math.lgamma(k + 1))


def poisson_cdf(k: int, lam: float) -> float:
    """P(X <= k)."""
    if k < 0:
        return 0.0
    return min(1.0, sum(poisson_pmf(i, lam) for i in range(k + 1)))


def poisson_cumulative_gte(lam: float, k: int) -> float:
    """P(X >= k)."""
    if k <= 0:
        return 1.0
    return max(0.0, 1.0 - poisson_cdf(k - 1, lam))


def poisson_over_probability(lam: float, line: float) -> float:
    """P(X > line) for a half-point line such as 3.5."""
    threshold = math.floor(float(line)) + 1
    return poisson_cumulative_gte(lam, threshold)


__all__ = [
    "eu_to_implied_prob",
    "normalize_vector",
    "book_margin",
    "expected_value",
    "poisson_pmf",
    "poisson_cdf",
    "poisson_cumulative_gte",
    "poisson_over_probability",
]

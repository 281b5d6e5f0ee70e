"""Local bet ledger: record card-market bets, settle them and track returns."""

from .tracker import DEFAULT_MARKET, MARKET_OPTIONS, RESULTS, Bet, BetStats, BetTracker, CurrentStreak

__all__ = [
    "Bet",
    "BetStats",
    "BetTracker",
    "CurrentStreak",
    "DEFAULT_MARKET",
    "MARKET_OPTIONS",
    "RESULTS",
]

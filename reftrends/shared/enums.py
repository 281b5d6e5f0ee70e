from __future__ import annotations

from enum import Enum


class CardType(str, Enum):
    YELLOW = "yellow"
    RED = "red"


class BetResult(str, Enum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"
    VOID = "void"


class ConfidenceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


FINISHED_STATUSES = frozenset({"FT", "Match Finished"})
UPCOMING_STATUSES = frozenset({"NS", "TBD", "Not Started", "Scheduled"})


__all__ = [
    "CardType",
    "BetResult",
    "ConfidenceLevel",
    "FINISHED_STATUSES",
    "UPCOMING_STATUSES",
]

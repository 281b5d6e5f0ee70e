from .base import Base, CardType, card_type_enum, metadata
from .match import CardEvent, Match, MatchStats
from .reference import League, Referee, Team
from .stats import RefereeRating, RefereeSeasonStats

__all__ = [
    "Base",
    "CardType",
    "card_type_enum",
    "metadata",
    "CardEvent",
    "League",
    "Match",
    "MatchStats",
    "Referee",
    "RefereeRating",
    "RefereeSeasonStats",
    "Team",
]

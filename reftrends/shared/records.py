"""Plain records handed from the repository to the analytics functions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Tuple

from .enums import FINISHED_STATUSES, CardType


@dataclass(frozen=True)
class TeamRef:
    id: int
    name: str
    api_id: Optional[int] = None
    logo: Optional[str] = None


@dataclass(frozen=True)
class RefereeRef:
    id: int
    name: str
    slug: str
    photo: Optional[str] = None
    nationality: Optional[str] = None


@dataclass(frozen=True)
class CardEventRecord:
    minute: int
    card_type: CardType
    is_home: bool
    extra_minute: Optional[int] = None
    team_api_id: Optional[int] = None
    player_name: Optional[str] = None


@dataclass(frozen=True)
class MatchStatsRecord:
    yellow_cards: int = 0
    red_cards: int = 0
    home_yellow_cards: int = 0
    away_yellow_cards: int = 0
    home_red_cards: int = 0
    away_red_cards: int = 0
    fouls: int = 0
    home_fouls: int = 0
    away_fouls: int = 0
    penalties: int = 0
    home_penalties: int = 0
    away_penalties: int = 0

    @property
    def total_cards(self) -> int:
        return self.yellow_cards + self.red_cards

    @property
    def home_cards(self) -> int:
        return self.home_yellow_cards + self.home_red_cards

    @property
    def away_cards(self) -> int:
        return self.away_yellow_cards + self.away_red_cards


@dataclass(frozen=True)
class MatchRecord:
    id: int
    kickoff: datetime
    status: str
    season: int
    league_api_id: int
    league_name: str
    home_team: TeamRef
    away_team: TeamRef
    referee: Optional[RefereeRef] = None
    stats: Optional[MatchStatsRecord] = None
    home_goals: Optional[int] = None
    away_goals: Optional[int] = None
    venue: Optional[str] = None
    card_events: Tuple[CardEventRecord, ...] = field(default_factory=tuple)

    @property
    def date(self) -> date:
        return self.kickoff.date()

    @property
    def is_finished(self) -> bool:
        return self.status in FINISHED_STATUSES

    @property
    def has_stats(self) -> bool:
        return self.stats is not None

    @property
    def total_cards(self) -> int:
        return self.stats.total_cards if self.stats else 0

    @property
    def yellow_cards(self) -> int:
        return self.stats.yellow_cards if self.stats else 0

    @property
    def red_cards(self) -> int:
        return self.stats.red_cards if self.stats else 0

    @property
    def penalties(self) -> int:
        return self.stats.penalties if self.stats else 0


__all__ = [
    "TeamRef",
    "RefereeRef",
    "CardEventRecord",
    "MatchStatsRecord",
    "MatchRecord",
]

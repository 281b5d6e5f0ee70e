"""Turn raw API-Football events and statistics into per-match tallies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from reftrends.shared.enums import CardType
from reftrends.shared.text import clean_referee_name

from .types import Fixture, FixtureEvent, RefereeAssignment, TeamStatistics

YELLOW_DETAILS = frozenset({"Yellow Card"})
RED_DETAILS = frozenset({"Red Card", "Second Yellow card"})
PENALTY_DETAILS = frozenset({"Penalty", "Missed Penalty"})


@dataclass
class CardTally:
    home_yellow: int = 0
    away_yellow: int = 0
    home_red: int = 0
    away_red: int = 0

    @property
    def yellow(self) -> int:
        return self.home_yellow + self.away_yellow

    @property
    def red(self) -> int:
        return self.home_red + self.away_red


@dataclass
class FoulTally:
    home: int = 0
    away: int = 0

    @property
    def total(self) -> int:
        return self.home + self.away


@dataclass
class PenaltyTally:
    home: int = 0
    away: int = 0

    @property
    def total(self) -> int:
        return self.home + self.away


@dataclass
class CardEventRow:
    minute: int
    extra_minute: int | None
    card_type: CardType
    team_api_id: int | None
    player_name: str | None
    is_home: bool


def card_counts_from_events(events: Iterable[FixtureEvent], home_team_id: int) -> CardTally:
    """Count cards per side. Anything not attributed to the home team is away."""
    tally = CardTally()
    for event in events:
        if event.type != "Card":
            continue
        is_home = event.team.id == home_team_id
        if event.detail in YELLOW_DETAILS:
            if is_home:
                tally.home_yellow += 1
            else:
                tally.away_yellow += 1
        elif event.detail in RED_DETAILS:
            if is_home:
                tally.home_red += 1
            else:
                tally.away_red += 1
    return tally


def penalty_counts_from_events(events: Iterable[FixtureEvent], home_team_id: int) -> PenaltyTally:
    """Scored and missed penalties both count as awarded."""
    tally = PenaltyTally()
    for event in events:
        if event.detail not in PENALTY_DETAILS:
            continue
        if event.team.id == home_team_id:
            tally.home += 1
        else:
            tally.away += 1
    return tally


def card_counts_from_statistics(stats: Sequence[TeamStatistics], home_team_id: int) -> CardTally:
    tally = CardTally()
    for team_stats in stats:
        yellow = team_stats.value("Yellow Cards")
        red = team_stats.value("Red Cards")
        if team_stats.team.id == home_team_id:
            tally.home_yellow += yellow
            tally.home_red += red
        else:
            tally.away_yellow += yellow
            tally.away_red += red
    return tally


def foul_counts_from_statistics(stats: Sequence[TeamStatistics], home_team_id: int) -> FoulTally:
    tally = FoulTally()
    for team_stats in stats:
        fouls = team_stats.value("Fouls")
        if team_stats.team.id == home_team_id:
            tally.home += fouls
        else:
            tally.away += fouls
    return tally


def card_events_from_events(events: Iterable[FixtureEvent], home_team_id: int) -> List[CardEventRow]:
    rows: List[CardEventRow] = []
    for event in events:
        if event.type != "Card":
            continue
        if event.detail in YELLOW_DETAILS:
            card_type = CardType.YELLOW
        elif event.detail in RED_DETAILS:
            card_type = CardType.RED
        else:
            continue
        rows.append(
            CardEventRow(
                minute=event.time.elapsed or 0,
                extra_minute=event.time.extra,
                card_type=card_type,
                team_api_id=event.team.id,
                player_name=event.player.name,
                is_home=event.team.id == home_team_id,
            )
        )
    return rows


def todays_assignments(fixtures: Iterable[Fixture]) -> List[RefereeAssignment]:
    assignments: List[RefereeAssignment] = []
    for fixture in fixtures:
        referee = clean_referee_name(fixture.fixture.referee)
        if not referee:
            continue
        assignments.append(
            RefereeAssignment(
                fixture_id=fixture.id,
                referee=referee,
                home_team=fixture.teams.home.name,
                away_team=fixture.teams.away.name,
                league_id=fixture.league.id,
                league_name=fixture.league.name,
                kickoff=fixture.fixture.date,
                venue=fixture.fixture.venue.name,
            )
        )
    assignments.sort(key=lambda a: a.kickoff)
    return assignments


__all__ = [
    "CardTally",
    "FoulTally",
    "PenaltyTally",
    "CardEventRow",
    "card_counts_from_events",
    "card_counts_from_statistics",
    "foul_counts_from_statistics",
    "penalty_counts_from_events",
    "card_events_from_events",
    "todays_assignments",
]

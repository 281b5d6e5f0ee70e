"""Pydantic models for the API-Football v3 payloads we consume."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _ApiModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Venue(_ApiModel):
    id: Optional[int] = None
    name: Optional[str] = None
    city: Optional[str] = None


class FixtureStatus(_ApiModel):
    long: str = ""
    short: str = ""
    elapsed: Optional[int] = None


class FixtureInfo(_ApiModel):
    id: int
    referee: Optional[str] = None
    date: datetime
    venue: Venue = Field(default_factory=Venue)
    status: FixtureStatus = Field(default_factory=FixtureStatus)


class FixtureLeague(_ApiModel):
    id: int
    name: str
    country: Optional[str] = None
    logo: Optional[str] = None
    season: int


class TeamInfo(_ApiModel):
    id: int
    name: str
    logo: Optional[str] = None


class FixtureTeams(_ApiModel):
    home: TeamInfo
    away: TeamInfo


class Goals(_ApiModel):
    home: Optional[int] = None
    away: Optional[int] = None


class Fixture(_ApiModel):
    fixture: FixtureInfo
    league: FixtureLeague
    teams: FixtureTeams
    goals: Goals = Field(default_factory=Goals)

    @property
    def id(self) -> int:
        return self.fixture.id

    @property
    def status_short(self) -> str:
        return self.fixture.status.short

    @property
    def status_long(self) -> str:
        return self.fixture.status.long


class StatisticEntry(_ApiModel):
    type: str
    value: Union[int, float, str, None] = None

    def as_int(self) -> int:
        if self.value is None:
            return 0
        if isinstance(self.value, str):
            # possession style values ("54%") are not counts
            digits = self.value.rstrip("%").strip()
            return int(float(digits)) if digits.replace(".", "", 1).isdigit() else 0
        return int(self.value)


class TeamStatistics(_ApiModel):
    team: TeamInfo
    statistics: List[StatisticEntry] = Field(default_factory=list)

    def value(self, stat_type: str) -> int:
        for entry in self.statistics:
            if entry.type == stat_type:
                return entry.as_int()
        return 0


class EventTime(_ApiModel):
    elapsed: Optional[int] = None
    extra: Optional[int] = None


class EventTeam(_ApiModel):
    id: Optional[int] = None
    name: Optional[str] = None


class EventPlayer(_ApiModel):
    id: Optional[int] = None
    name: Optional[str] = None


class FixtureEvent(_ApiModel):
    time: EventTime = Field(default_factory=EventTime)
    team: EventTeam = Field(default_factory=EventTeam)
    player: EventPlayer = Field(default_factory=EventPlayer)
    type: str = ""
    detail: str = ""


class LeagueCountry(_ApiModel):
    name: Optional[str] = None
    code: Optional[str] = None


class LeagueDetails(_ApiModel):
    id: int
    name: str
    type: Optional[str] = None
    logo: Optional[str] = None


class LeagueInfo(_ApiModel):
    league: LeagueDetails
    country: LeagueCountry = Field(default_factory=LeagueCountry)


class RefereeAssignment(_ApiModel):
    fixture_id: int
    referee: str
    home_team: str
    away_team: str
    league_id: int
    league_name: str
    kickoff: datetime
    venue: Optional[str] = None


__all__ = [
    "Fixture",
    "FixtureEvent",
    "FixtureInfo",
    "FixtureLeague",
    "FixtureStatus",
    "FixtureTeams",
    "Goals",
    "LeagueInfo",
    "RefereeAssignment",
    "StatisticEntry",
    "TeamInfo",
    "TeamStatistics",
    "Venue",
]

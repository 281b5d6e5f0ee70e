"""Reference tables: leagues, teams, referees."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class League(Base):
    __tablename__ = "league"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Internal identifier for a league or competition",
    )
    api_id: Mapped[int] = mapped_column(
        Integer,
        unique=True,
        nullable=False,
        comment="API-Football league id (e.g. 39 for the Premier League)",
    )
    name: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        comment="League display name",
    )
    country: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Country the league belongs to ('World' for UEFA competitions)",
    )
    logo: Mapped[Optional[str]] = mapped_column(
        String(512),
        nullable=True,
        comment="Logo URL as served by the provider",
    )
    season: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Most recently synced season (end year)",
    )


class Team(Base):
    __tablename__ = "team"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Internal identifier for a team",
    )
    api_id: Mapped[int] = mapped_column(
        Integer,
        unique=True,
        nullable=False,
        comment="API-Football team id",
    )
    name: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        comment="Team display name",
    )
    logo: Mapped[Optional[str]] = mapped_column(
        String(512),
        nullable=True,
        comment="Crest URL as served by the provider",
    )
    league_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("league.id", ondelete="SET NULL"),
        nullable=True,
        comment="League the team was last seen in (fk to league)",
    )


class Referee(Base):
    __tablename__ = "referee"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Internal identifier for a referee",
    )
    api_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        unique=True,
        nullable=True,
        comment="Provider referee id; fixtures only carry names so this is usually unset",
    )
    name: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        comment="Referee name without the nationality suffix",
    )
    slug: Mapped[str] = mapped_column(
        String(160),
        unique=True,
        nullable=False,
        comment="URL slug derived from the name; the natural key for upserts",
    )
    nationality: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        comment="Referee nationality when known",
    )
    photo: Mapped[Optional[str]] = mapped_column(
        String(512),
        nullable=True,
        comment="Thumbnail URL (Wikipedia page image)",
    )


__all__ = ["League", "Team", "Referee"]

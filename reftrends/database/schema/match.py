"""Match tables: fixtures, per-match card/foul/penalty tallies and card events."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, CardType, card_type_enum


class Match(Base):
    __tablename__ = "match"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Internal identifier for a match",
    )
    api_id: Mapped[int] = mapped_column(
        Integer,
        unique=True,
        nullable=False,
        comment="API-Football fixture id",
    )
    date: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        comment="Kickoff time (UTC, naive)",
    )
    venue: Mapped[Optional[str]] = mapped_column(
        String(128),
        nullable=True,
        comment="Stadium name",
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Provider status ('FT', 'NS', 'Match Finished', ...)",
    )
    home_goals: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    away_goals: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    league_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("league.id", ondelete="CASCADE"),
        nullable=False,
        comment="Competition (fk to league)",
    )
    home_team_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("team.id", ondelete="CASCADE"),
        nullable=False,
    )
    away_team_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("team.id", ondelete="CASCADE"),
        nullable=False,
    )
    referee_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("referee.id", ondelete="SET NULL"),
        nullable=True,
        comment="Appointed referee; unknown until the provider publishes it",
    )
    season: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Season end year (2026 = 2025/26)",
    )

    __table_args__ = (
        Index("ix_match_referee_date", "referee_id", "date"),
        Index("ix_match_date", "date"),
    )


class MatchStats(Base):
    __tablename__ = "match_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("match.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        comment="One tally row per match (fk to match)",
    )
    yellow_cards: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    red_cards: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Straight reds and second yellows",
    )
    home_yellow_cards: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    away_yellow_cards: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    home_red_cards: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    away_red_cards: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    fouls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    home_fouls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    away_fouls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    penalties: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Penalties awarded (scored or missed)",
    )
    home_penalties: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    away_penalties: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class CardEvent(Base):
    __tablename__ = "card_event"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_stats_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("match_stats.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    minute: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Elapsed minute of the booking",
    )
    extra_minute: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Stoppage-time minute (45+2 -> minute 45, extra 2)",
    )
    card_type: Mapped[CardType] = mapped_column(card_type_enum, nullable=False)
    team_api_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    player_name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    is_home: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


__all__ = ["Match", "MatchStats", "CardEvent"]

"""Derived referee aggregates and community ratings."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class RefereeSeasonStats(Base):
    __tablename__ = "referee_season_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    referee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("referee.id", ondelete="CASCADE"),
        nullable=False,
    )
    season: Mapped[int] = mapped_column(Integer, nullable=False, comment="Season end year")
    league_api_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="API-Football league id the aggregate is scoped to",
    )
    matches_officiated: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_yellow_cards: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_red_cards: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    avg_yellow_cards: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    avg_red_cards: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_penalties: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    avg_penalties: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_fouls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    avg_fouls: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    strictness_index: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
        comment="avg yellow + 3 * avg red + 0.5 * avg penalties",
    )
    home_bias_score: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
        comment="(away yellows - home yellows) per match; positive favours the home side",
    )

    __table_args__ = (
        UniqueConstraint(
            "referee_id",
            "season",
            "league_api_id",
            name="uq_referee_season_stats_referee_season_league",
        ),
    )


class RefereeRating(Base):
    __tablename__ = "referee_rating"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    referee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("referee.id", ondelete="CASCADE"),
        nullable=False,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False, comment="1 to 5 stars")
    comment: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    ip_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="sha256(ip + salt); one rating per visitor per referee",
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        UniqueConstraint("referee_id", "ip_hash", name="uq_referee_rating_referee_ip"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="rating_range"),
    )


__all__ = ["RefereeSeasonStats", "RefereeRating"]

"""Create league, team, referee, match, stats and rating tables

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-12-02 09:15:00
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "league",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("api_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("country", sa.String(length=64), nullable=False),
        sa.Column("logo", sa.String(length=512), nullable=True),
        sa.Column("season", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_league"),
        sa.UniqueConstraint("api_id", name="uq_league_api_id"),
    )
    op.create_table(
        "team",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("api_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("logo", sa.String(length=512), nullable=True),
        sa.Column("league_id", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_team"),
        sa.UniqueConstraint("api_id", name="uq_team_api_id"),
        sa.ForeignKeyConstraint(
            ["league_id"], ["league.id"], name="fk_team_league_id_league", ondelete="SET NULL"
        ),
    )
    op.create_table(
        "referee",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("api_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("slug", sa.String(length=160), nullable=False),
        sa.Column("nationality", sa.String(length=64), nullable=True),
        sa.Column("photo", sa.String(length=512), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_referee"),
        sa.UniqueConstraint("api_id", name="uq_referee_api_id"),
        sa.UniqueConstraint("slug", name="uq_referee_slug"),
    )
    op.create_table(
        "match",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("api_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("venue", sa.String(length=128), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("home_goals", sa.Integer(), nullable=True),
        sa.Column("away_goals", sa.Integer(), nullable=True),
        sa.Column("league_id", sa.Integer(), nullable=False),
        sa.Column("home_team_id", sa.Integer(), nullable=False),
        sa.Column("away_team_id", sa.Integer(), nullable=False),
        sa.Column("referee_id", sa.Integer(), nullable=True),
        sa.Column("season", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_match"),
        sa.UniqueConstraint("api_id", name="uq_match_api_id"),
        sa.ForeignKeyConstraint(["league_id"], ["league.id"], name="fk_match_league_id_league", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["home_team_id"], ["team.id"], name="fk_match_home_team_id_team", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["away_team_id"], ["team.id"], name="fk_match_away_team_id_team", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["referee_id"], ["referee.id"], name="fk_match_referee_id_referee", ondelete="SET NULL"
        ),
    )
    op.create_index("ix_match_referee_date", "match", ["referee_id", "date"])
    op.create_index("ix_match_date", "match", ["date"])

    op.create_table(
        "match_stats",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("match_id", sa.Integer(), nullable=False),
        sa.Column("yellow_cards", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("red_cards", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("home_yellow_cards", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("away_yellow_cards", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("home_red_cards", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("away_red_cards", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("fouls", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("home_fouls", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("away_fouls", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("penalties", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("home_penalties", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("away_penalties", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id", name="pk_match_stats"),
        sa.UniqueConstraint("match_id", name="uq_match_stats_match_id"),
        sa.ForeignKeyConstraint(
            ["match_id"], ["match.id"], name="fk_match_stats_match_id_match", ondelete="CASCADE"
        ),
    )
    op.create_table(
        "card_event",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("match_stats_id", sa.Integer(), nullable=False),
        sa.Column("minute", sa.Integer(), nullable=False),
        sa.Column("extra_minute", sa.Integer(), nullable=True),
        sa.Column("card_type", sa.String(length=6), nullable=False),
        sa.Column("team_api_id", sa.Integer(), nullable=True),
        sa.Column("player_name", sa.String(length=128), nullable=True),
        sa.Column("is_home", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id", name="pk_card_event"),
        sa.ForeignKeyConstraint(
            ["match_stats_id"],
            ["match_stats.id"],
            name="fk_card_event_match_stats_id_match_stats",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_card_event_match_stats_id", "card_event", ["match_stats_id"])

    op.create_table(
        "referee_season_stats",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("referee_id", sa.Integer(), nullable=False),
        sa.Column("season", sa.Integer(), nullable=False),
        sa.Column("league_api_id", sa.Integer(), nullable=False),
        sa.Column("matches_officiated", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_yellow_cards", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_red_cards", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("avg_yellow_cards", sa.Float(), nullable=False, server_default="0"),
        sa.Column("avg_red_cards", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_penalties", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("avg_penalties", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_fouls", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("avg_fouls", sa.Float(), nullable=False, server_default="0"),
        sa.Column("strictness_index", sa.Float(), nullable=False, server_default="0"),
        sa.Column("home_bias_score", sa.Float(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id", name="pk_referee_season_stats"),
        sa.UniqueConstraint(
            "referee_id",
            "season",
            "league_api_id",
            name="uq_referee_season_stats_referee_season_league",
        ),
        sa.ForeignKeyConstraint(
            ["referee_id"],
            ["referee.id"],
            name="fk_referee_season_stats_referee_id_referee",
            ondelete="CASCADE",
        ),
    )
    op.create_table(
        "referee_rating",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("referee_id", sa.Integer(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.String(length=500), nullable=True),
        sa.Column("ip_hash", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_referee_rating"),
        sa.UniqueConstraint("referee_id", "ip_hash", name="uq_referee_rating_referee_ip"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_referee_rating_rating_range"),
        sa.ForeignKeyConstraint(
            ["referee_id"],
            ["referee.id"],
            name="fk_referee_rating_referee_id_referee",
            ondelete="CASCADE",
        ),
    )


def downgrade() -> None:
    op.drop_table("referee_rating")
    op.drop_table("referee_season_stats")
    op.drop_index("ix_card_event_match_stats_id", table_name="card_event")
    op.drop_table("card_event")
    op.drop_table("match_stats")
    op.drop_index("ix_match_date", table_name="match")
    op.drop_index("ix_match_referee_date", table_name="match")
    op.drop_table("match")
    op.drop_table("referee")
    op.drop_table("team")
    op.drop_table("league")

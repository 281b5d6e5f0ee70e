from __future__ import annotations

import datetime as dt
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_upsert
from sqlalchemy.orm import aliased

from reftrends.shared.enums import FINISHED_STATUSES, UPCOMING_STATUSES
from reftrends.shared.records import (
    CardEventRecord,
    MatchRecord,
    MatchStatsRecord,
    RefereeRef,
    TeamRef,
)

from .dbm import DBM
from .schema import (
    CardEvent,
    League,
    Match,
    MatchStats,
    Referee,
    RefereeRating,
    RefereeSeasonStats,
    Team,
)


def naive_utc(value: dt.datetime) -> dt.datetime:
    """SQLite has no timezone support; everything is stored as naive UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(dt.timezone.utc).replace(tzinfo=None)


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


# ----------------------------------------------------------------------
# Reference upserts
# ----------------------------------------------------------------------
async def upsert_league(
    dbm: DBM,
    *,
    api_id: int,
    name: str,
    country: str,
    logo: str | None,
    season: int,
) -> int:
    stmt = sqlite_upsert(League).values(api_id=api_id, name=name, country=country, logo=logo, season=season)
    stmt = stmt.on_conflict_do_update(
        index_elements=[League.api_id],  # type: ignore[arg-type]
        set_={"name": name, "country": country, "logo": logo, "season": season},
    )
    async with dbm.transaction() as session:
        await session.execute(stmt)
        return (await session.execute(select(League.id).where(League.api_id == api_id))).scalar_one()


async def upsert_team(
    dbm: DBM,
    *,
    api_id: int,
    name: str,
    logo: str | None,
    league_id: int | None,
) -> int:
    stmt = sqlite_upsert(Team).values(api_id=api_id, name=name, logo=logo, league_id=league_id)
    stmt = stmt.on_conflict_do_update(
        index_elements=[Team.api_id],  # type: ignore[arg-type]
        set_={"name": name, "logo": logo, "league_id": league_id},
    )
    async with dbm.transaction() as session:
        await session.execute(stmt)
        return (await session.execute(select(Team.id).where(Team.api_id == api_id))).scalar_one()


async def upsert_referee(dbm: DBM, *, name: str, slug: str) -> int:
    """Referees are keyed by slug since fixtures only carry the referee name."""
    stmt = sqlite_upsert(Referee).values(name=name, slug=slug)
    stmt = stmt.on_conflict_do_update(
        index_elements=[Referee.slug],  # type: ignore[arg-type]
        set_={"name": name},
    )
    async with dbm.transaction() as session:
        await session.execute(stmt)
        return (await session.execute(select(Referee.id).where(Referee.slug == slug))).scalar_one()


async def upsert_match(
    dbm: DBM,
    *,
    api_id: int,
    date: dt.datetime,
    venue: str | None,
    status: str,
    home_goals: int | None,
    away_goals: int | None,
    league_id: int,
    home_team_id: int,
    away_team_id: int,
    referee_id: int | None,
    season: int,
) -> int:
    values = {
        "api_id": api_id,
        "date": naive_utc(date),
        "venue": venue,
        "status": status,
        "home_goals": home_goals,
        "away_goals": away_goals,
        "league_id": league_id,
        "home_team_id": home_team_id,
        "away_team_id": away_team_id,
        "referee_id": referee_id,
        "season": season,
    }
    update_values = {k: v for k, v in values.items() if k != "api_id"}
    # A later sync without a referee must not erase a known appointment
    if referee_id is None:
        update_values.pop("referee_id")
    stmt = sqlite_upsert(Match).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[Match.api_id],  # type: ignore[arg-type]
        set_=update_values,
    )
    async with dbm.transaction() as session:
        await session.execute(stmt)
        return (await session.execute(select(Match.id).where(Match.api_id == api_id))).scalar_one()


# ----------------------------------------------------------------------
# Match stats and card events
# ----------------------------------------------------------------------
async def get_match_stats_id(dbm: DBM, match_id: int) -> Optional[int]:
    async with dbm.session() as session:
        result = await session.execute(select(MatchStats.id).where(MatchStats.match_id == match_id))
        return result.scalar_one_or_none()


async def upsert_match_stats(dbm: DBM, *, match_id: int, **tallies: int) -> int:
    allowed = {c.name for c in MatchStats.__table__.columns} - {"id", "match_id"}
    unknown = set(tallies) - allowed
    if unknown:
        raise ValueError(f"Unknown match_stats columns: {sorted(unknown)}")
    stmt = sqlite_upsert(MatchStats).values(match_id=match_id, **tallies)
    if tallies:
        stmt = stmt.on_conflict_do_update(
            index_elements=[MatchStats.match_id],  # type: ignore[arg-type]
            set_=tallies,
        )
    else:
        stmt = stmt.on_conflict_do_nothing(index_elements=[MatchStats.match_id])  # type: ignore[arg-type]
    async with dbm.transaction() as session:
        await session.execute(stmt)
        result = await session.execute(select(MatchStats.id).where(MatchStats.match_id == match_id))
        return result.scalar_one()


async def replace_card_events(dbm: DBM, match_stats_id: int, rows: Sequence[Any]) -> int:
    """Replace the card events of one match; rows carry CardEventRow fields."""
    async with dbm.transaction() as session:
        existing = await session.execute(select(CardEvent).where(CardEvent.match_stats_id == match_stats_id))
        for event in existing.scalars().all():
            await session.delete(event)
        for row in rows:
            session.add(
                CardEvent(
                    match_stats_id=match_stats_id,
                    minute=row.minute,
                    extra_minute=row.extra_minute,
                    card_type=row.card_type,
                    team_api_id=row.team_api_id,
                    player_name=row.player_name,
                    is_home=row.is_home,
                )
            )
    return len(rows)


@dataclass(frozen=True)
class PendingFixture:
    """A stored match the sync jobs still need provider data for."""

    match_id: int
    match_stats_id: Optional[int]
    fixture_api_id: int
    home_team_api_id: int
    label: str


async def list_fixtures_missing_card_events(dbm: DBM, *, limit: int) -> List[PendingFixture]:
    Home = aliased(Team)
    Away = aliased(Team)
    has_events = select(CardEvent.id).where(CardEvent.match_stats_id == MatchStats.id).exists()
    stmt = (
        select(Match.id, MatchStats.id, Match.api_id, Home.api_id, Home.name, Away.name)
        .join(MatchStats, MatchStats.match_id == Match.id)
        .join(Home, Match.home_team_id == Home.id)
        .join(Away, Match.away_team_id == Away.id)
        .where(~has_events)
        .where(MatchStats.yellow_cards + MatchStats.red_cards > 0)
        .order_by(Match.date.desc())
        .limit(limit)
    )
    async with dbm.session() as session:
        rows = (await session.execute(stmt)).all()
    return [
        PendingFixture(
            match_id=row[0],
            match_stats_id=row[1],
            fixture_api_id=row[2],
            home_team_api_id=row[3],
            label=f"{row[4]} vs {row[5]}",
        )
        for row in rows
    ]


async def list_fixtures_missing_penalties(dbm: DBM, *, since: dt.datetime) -> List[PendingFixture]:
    Home = aliased(Team)
    Away = aliased(Team)
    stmt = (
        select(Match.id, MatchStats.id, Match.api_id, Home.api_id, Home.name, Away.name)
        .join(MatchStats, MatchStats.match_id == Match.id)
        .join(Home, Match.home_team_id == Home.id)
        .join(Away, Match.away_team_id == Away.id)
        .where(Match.status.in_(FINISHED_STATUSES))
        .where(Match.date >= naive_utc(since))
        .where(MatchStats.penalties == 0)
        .order_by(Match.date.desc())
    )
    async with dbm.session() as session:
        rows = (await session.execute(stmt)).all()
    return [
        PendingFixture(
            match_id=row[0],
            match_stats_id=row[1],
            fixture_api_id=row[2],
            home_team_api_id=row[3],
            label=f"{row[4]} vs {row[5]}",
        )
        for row in rows
    ]


async def update_penalties(dbm: DBM, match_stats_id: int, *, home: int, away: int) -> None:
    stmt = (
        update(MatchStats)
        .where(MatchStats.id == match_stats_id)
        .values(penalties=home + away, home_penalties=home, away_penalties=away)
    )
    async with dbm.transaction() as session:
        await session.execute(stmt)


async def list_referees_without_photo(dbm: DBM, *, limit: int) -> List[Referee]:
    stmt = select(Referee).where(Referee.photo.is_(None)).order_by(Referee.name).limit(limit)
    async with dbm.session() as session:
        return list((await session.execute(stmt)).scalars().all())


async def set_referee_photo(dbm: DBM, referee_id: int, photo: str) -> None:
    async with dbm.transaction() as session:
        await session.execute(update(Referee).where(Referee.id == referee_id).values(photo=photo))


# ----------------------------------------------------------------------
# Referee season aggregates
# ----------------------------------------------------------------------
async def upsert_referee_season_stats(dbm: DBM, rows: Iterable[Mapping[str, Any]]) -> int:
    count = 0
    async with dbm.transaction() as session:
        for row in rows:
            values = dict(row)
            stmt = sqlite_upsert(RefereeSeasonStats).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=[
                    RefereeSeasonStats.referee_id,
                    RefereeSeasonStats.season,
                    RefereeSeasonStats.league_api_id,
                ],  # type: ignore[arg-type]
                set_={
                    k: v
                    for k, v in values.items()
                    if k not in ("referee_id", "season", "league_api_id")
                },
            )
            await session.execute(stmt)
            count += 1
    return count


async def update_season_penalties(
    dbm: DBM,
    *,
    referee_id: int,
    season: int,
    league_api_id: int,
    total_penalties: int,
    avg_penalties: float,
    strictness_index: float,
) -> int:
    """Patch the penalty columns of an existing aggregate; returns rows touched."""
    stmt = (
        update(RefereeSeasonStats)
        .where(RefereeSeasonStats.referee_id == referee_id)
        .where(RefereeSeasonStats.season == season)
        .where(RefereeSeasonStats.league_api_id == league_api_id)
        .values(
            total_penalties=total_penalties,
            avg_penalties=avg_penalties,
            strictness_index=strictness_index,
        )
    )
    async with dbm.transaction() as session:
        result = await session.execute(stmt)
        return result.rowcount or 0


async def list_season_stats(
    dbm: DBM,
    *,
    season: int | None = None,
    min_matches: int = 0,
    referee_id: int | None = None,
) -> List[tuple[RefereeSeasonStats, Referee]]:
    stmt = select(RefereeSeasonStats, Referee).join(Referee, RefereeSeasonStats.referee_id == Referee.id)
    if season is not None:
        stmt = stmt.where(RefereeSeasonStats.season == season)
    if min_matches:
        stmt = stmt.where(RefereeSeasonStats.matches_officiated >= min_matches)
    if referee_id is not None:
        stmt = stmt.where(RefereeSeasonStats.referee_id == referee_id)
    stmt = stmt.order_by(
        RefereeSeasonStats.matches_officiated.desc(),
        RefereeSeasonStats.strictness_index.desc(),
    )
    async with dbm.session() as session:
        return [(row[0], row[1]) for row in (await session.execute(stmt)).all()]


# ----------------------------------------------------------------------
# Lookups
# ----------------------------------------------------------------------
async def list_referees(dbm: DBM) -> List[Referee]:
    async with dbm.session() as session:
        return list((await session.execute(select(Referee).order_by(Referee.name))).scalars().all())


async def get_referee(dbm: DBM, referee_id: int) -> Optional[Referee]:
    async with dbm.session() as session:
        return await session.get(Referee, referee_id)


async def get_referee_by_slug(dbm: DBM, slug: str) -> Optional[Referee]:
    async with dbm.session() as session:
        result = await session.execute(select(Referee).where(Referee.slug == slug))
        return result.scalar_one_or_none()


async def get_team(dbm: DBM, team_id: int) -> Optional[tuple[Team, Optional[League]]]:
    stmt = select(Team, League).outerjoin(League, Team.league_id == League.id).where(Team.id == team_id)
    async with dbm.session() as session:
        row = (await session.execute(stmt)).first()
    if row is None:
        return None
    return row[0], row[1]


async def list_leagues(dbm: DBM) -> List[League]:
    async with dbm.session() as session:
        return list((await session.execute(select(League).order_by(League.name))).scalars().all())


async def table_counts(dbm: DBM) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    async with dbm.session() as session:
        for model in (League, Team, Referee, Match, MatchStats, CardEvent, RefereeSeasonStats, RefereeRating):
            result = await session.execute(select(func.count()).select_from(model))
            counts[model.__tablename__] = int(result.scalar_one())
    return counts


# ----------------------------------------------------------------------
# Match records for analytics
# ----------------------------------------------------------------------
async def load_match_records(
    dbm: DBM,
    *,
    finished_only: bool = True,
    upcoming_only: bool = False,
    referee_id: int | None = None,
    team_id: int | None = None,
    league_id: int | None = None,
    season: int | None = None,
    date_from: dt.datetime | None = None,
    date_to: dt.datetime | None = None,
    with_card_events: bool = False,
    newest_first: bool = True,
    limit: int | None = None,
) -> List[MatchRecord]:
    Home = aliased(Team)
    Away = aliased(Team)
    stmt = (
        select(Match, League, Home, Away, Referee, MatchStats)
        .join(League, Match.league_id == League.id)
        .join(Home, Match.home_team_id == Home.id)
        .join(Away, Match.away_team_id == Away.id)
        .outerjoin(Referee, Match.referee_id == Referee.id)
        .outerjoin(MatchStats, MatchStats.match_id == Match.id)
    )
    if finished_only:
        stmt = stmt.where(Match.status.in_(FINISHED_STATUSES))
    if upcoming_only:
        stmt = stmt.where(Match.status.in_(UPCOMING_STATUSES))
    if referee_id is not None:
        stmt = stmt.where(Match.referee_id == referee_id)
    if team_id is not None:
        stmt = stmt.where(or_(Match.home_team_id == team_id, Match.away_team_id == team_id))
    if league_id is not None:
        stmt = stmt.where(Match.league_id == league_id)
    if season is not None:
        stmt = stmt.where(Match.season == season)
    if date_from is not None:
        stmt = stmt.where(Match.date >= naive_utc(date_from))
    if date_to is not None:
        stmt = stmt.where(Match.date < naive_utc(date_to))
    stmt = stmt.order_by(Match.date.desc() if newest_first else Match.date.asc(), Match.id)
    if limit is not None:
        stmt = stmt.limit(limit)

    async with dbm.session() as session:
        rows = (await session.execute(stmt)).all()
        events_by_stats: Dict[int, List[CardEventRecord]] = defaultdict(list)
        if with_card_events:
            stats_ids = [row[5].id for row in rows if row[5] is not None]
            if stats_ids:
                events = await session.execute(
                    select(CardEvent)
                    .where(CardEvent.match_stats_id.in_(stats_ids))
                    .order_by(CardEvent.minute, CardEvent.id)
                )
                for event in events.scalars().all():
                    events_by_stats[event.match_stats_id].append(
                        CardEventRecord(
                            minute=event.minute,
                            extra_minute=event.extra_minute,
                            card_type=event.card_type,
                            is_home=event.is_home,
                            team_api_id=event.team_api_id,
                            player_name=event.player_name,
                        )
                    )

    records: List[MatchRecord] = []
    for match, league, home, away, referee, stats in rows:
        records.append(
            MatchRecord(
                id=match.id,
                kickoff=match.date,
                status=match.status,
                season=match.season,
                league_api_id=league.api_id,
                league_name=league.name,
                home_team=TeamRef(id=home.id, name=home.name, api_id=home.api_id, logo=home.logo),
                away_team=TeamRef(id=away.id, name=away.name, api_id=away.api_id, logo=away.logo),
                referee=_referee_ref(referee),
                stats=_stats_record(stats),
                home_goals=match.home_goals,
                away_goals=match.away_goals,
                venue=match.venue,
                card_events=tuple(events_by_stats.get(stats.id, ())) if stats is not None else (),
            )
        )
    return records


def _referee_ref(referee: Optional[Referee]) -> Optional[RefereeRef]:
    if referee is None:
        return None
    return RefereeRef(
        id=referee.id,
        name=referee.name,
        slug=referee.slug,
        photo=referee.photo,
        nationality=referee.nationality,
    )


def _stats_record(stats: Optional[MatchStats]) -> Optional[MatchStatsRecord]:
    if stats is None:
        return None
    return MatchStatsRecord(
        yellow_cards=stats.yellow_cards,
        red_cards=stats.red_cards,
        home_yellow_cards=stats.home_yellow_cards,
        away_yellow_cards=stats.away_yellow_cards,
        home_red_cards=stats.home_red_cards,
        away_red_cards=stats.away_red_cards,
        fouls=stats.fouls,
        home_fouls=stats.home_fouls,
        away_fouls=stats.away_fouls,
        penalties=stats.penalties,
        home_penalties=stats.home_penalties,
        away_penalties=stats.away_penalties,
    )


# ----------------------------------------------------------------------
# Ratings
# ----------------------------------------------------------------------
async def list_ratings(dbm: DBM, referee_id: int, *, limit: int | None = 50) -> List[RefereeRating]:
    stmt = (
        select(RefereeRating)
        .where(RefereeRating.referee_id == referee_id)
        .order_by(RefereeRating.created_at.desc(), RefereeRating.id.desc())
        .limit(limit)
    )
    async with dbm.session() as session:
        return list((await session.execute(stmt)).scalars().all())


async def get_rating(dbm: DBM, referee_id: int, ip_hash: str) -> Optional[RefereeRating]:
    stmt = select(RefereeRating).where(
        and_(RefereeRating.referee_id == referee_id, RefereeRating.ip_hash == ip_hash)
    )
    async with dbm.session() as session:
        return (await session.execute(stmt)).scalar_one_or_none()


async def upsert_rating(
    dbm: DBM,
    *,
    referee_id: int,
    ip_hash: str,
    rating: int,
    comment: str | None,
) -> RefereeRating:
    now = utcnow()
    stmt = sqlite_upsert(RefereeRating).values(
        referee_id=referee_id,
        ip_hash=ip_hash,
        rating=rating,
        comment=comment,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[RefereeRating.referee_id, RefereeRating.ip_hash],  # type: ignore[arg-type]
        set_={"rating": rating, "comment": comment, "updated_at": now},
    )
    stored = select(RefereeRating).where(
        and_(RefereeRating.referee_id == referee_id, RefereeRating.ip_hash == ip_hash)
    )
    async with dbm.transaction() as session:
        await session.execute(stmt)
        return (await session.execute(stored)).scalar_one()


__all__ = [
    "PendingFixture",
    "naive_utc",
    "utcnow",
    "upsert_league",
    "upsert_team",
    "upsert_referee",
    "upsert_match",
    "get_match_stats_id",
    "upsert_match_stats",
    "replace_card_events",
    "list_fixtures_missing_card_events",
    "list_fixtures_missing_penalties",
    "update_penalties",
    "list_referees_without_photo",
    "set_referee_photo",
    "upsert_referee_season_stats",
    "update_season_penalties",
    "list_season_stats",
    "list_referees",
    "get_referee",
    "get_referee_by_slug",
    "get_team",
    "list_leagues",
    "table_counts",
    "load_match_records",
    "list_ratings",
    "get_rating",
    "upsert_rating",
]

"""Month-by-month and season-by-season card trends."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Literal, Optional, Sequence

from reftrends.shared.records import MatchRecord, RefereeRef

from .common import LEAGUE_NAMES, average

MIN_TREND_MATCHES = 10
TOP_REFEREE_LIMIT = 10
TREND_THRESHOLD = 0.3
STRICTNESS_CHANGE_PERCENT = 10
MIN_HISTORY_MATCHES = 10
COMPARISON_LIMIT = 20


@dataclass
class MonthlyTrend:
    month: str
    matches: int = 0
    total_yellow: int = 0
    total_red: int = 0
    avg_yellow: float = 0.0
    avg_red: float = 0.0


@dataclass
class LeagueMonth:
    month: str
    matches: int = 0
    total_yellow: int = 0
    total_red: int = 0
    avg_cards: float = 0.0


@dataclass
class LeagueMonthly:
    league: str
    data: List[LeagueMonth]


@dataclass
class RefereeMonth:
    month: str
    avg_cards: float
    matches: int


@dataclass
class RefereeTrend:
    id: int
    name: str
    slug: str
    total_matches: int
    avg_cards: float
    first_half_avg: float
    second_half_avg: float
    trend_change: float
    trend: Literal["increasing", "decreasing", "stable"]
    monthly_data: List[RefereeMonth]


@dataclass
class SeasonSummary:
    total_matches: int
    total_yellow: int
    total_red: int


@dataclass
class SeasonalReport:
    monthly_trends: List[MonthlyTrend]
    league_monthly_data: List[LeagueMonthly]
    top_referees: List[RefereeTrend]
    season_summary: SeasonSummary


def _month_key(match: MatchRecord) -> str:
    return match.kickoff.strftime("%Y-%m")


def seasonal_trends(matches: Sequence[MatchRecord]) -> SeasonalReport:
    """Monthly card averages plus the trend of the ten busiest referees."""
    monthly: Dict[str, MonthlyTrend] = {}
    league_monthly: Dict[int, Dict[str, LeagueMonth]] = defaultdict(dict)
    per_referee: Dict[int, List[MatchRecord]] = defaultdict(list)
    referees: Dict[int, RefereeRef] = {}

    for match in sorted(matches, key=lambda m: m.kickoff):
        if match.stats is None:
            continue
        key = _month_key(match)
        month = monthly.setdefault(key, MonthlyTrend(month=match.kickoff.strftime("%b %Y")))
        month.matches += 1
        month.total_yellow += match.yellow_cards
        month.total_red += match.red_cards

        lm = league_monthly[match.league_api_id].setdefault(key, LeagueMonth(month=match.kickoff.strftime("%b")))
        lm.matches += 1
        lm.total_yellow += match.yellow_cards
        lm.total_red += match.red_cards

        if match.referee is not None:
            referees[match.referee.id] = match.referee
            per_referee[match.referee.id].append(match)

    for month in monthly.values():
        month.avg_yellow = average(month.total_yellow, month.matches)
        month.avg_red = average(month.total_red, month.matches)

    league_rows: List[LeagueMonthly] = []
    for api_id, months in league_monthly.items():
        for lm in months.values():
            lm.avg_cards = average(lm.total_yellow + lm.total_red, lm.matches)
        league_rows.append(
            LeagueMonthly(
                league=LEAGUE_NAMES.get(api_id, f"League {api_id}"),
                data=[months[k] for k in sorted(months)],
            )
        )

    busiest = sorted(
        (rid for rid, ms in per_referee.items() if len(ms) >= MIN_TREND_MATCHES),
        key=lambda rid: -len(per_referee[rid]),
    )[:TOP_REFEREE_LIMIT]
    top: List[RefereeTrend] = []
    for rid in busiest:
        ref_matches = per_referee[rid]
        midpoint = len(ref_matches) // 2
        first, second = ref_matches[:midpoint], ref_matches[midpoint:]
        first_avg = average(sum(m.total_cards for m in first), len(first))
        second_avg = average(sum(m.total_cards for m in second), len(second))
        change = second_avg - first_avg
        if change > TREND_THRESHOLD:
            trend = "increasing"
        elif change < -TREND_THRESHOLD:
            trend = "decreasing"
        else:
            trend = "stable"

        by_month: Dict[str, List[MatchRecord]] = defaultdict(list)
        for m in ref_matches:
            by_month[_month_key(m)].append(m)
        ref = referees[rid]
        top.append(
            RefereeTrend(
                id=ref.id,
                name=ref.name,
                slug=ref.slug,
                total_matches=len(ref_matches),
                avg_cards=average(sum(m.total_cards for m in ref_matches), len(ref_matches)),
                first_half_avg=first_avg,
                second_half_avg=second_avg,
                trend_change=change,
                trend=trend,
                monthly_data=[
                    RefereeMonth(
                        month=by_month[k][0].kickoff.strftime("%b"),
                        avg_cards=average(sum(m.total_cards for m in by_month[k]), len(by_month[k])),
                        matches=len(by_month[k]),
                    )
                    for k in sorted(by_month)
                ],
            )
        )

    summary = SeasonSummary(
        total_matches=len(matches),
        total_yellow=sum(m.yellow_cards for m in matches),
        total_red=sum(m.red_cards for m in matches),
    )
    return SeasonalReport(
        monthly_trends=[monthly[k] for k in sorted(monthly)],
        league_monthly_data=league_rows,
        top_referees=top,
        season_summary=summary,
    )


# ----------------------------------------------------------------------
# Season over season
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class SeasonStatsRow:
    """One stored referee aggregate, as read from referee_season_stats."""

    referee: RefereeRef
    season: int
    league_api_id: int
    matches_officiated: int
    total_yellow_cards: int
    total_red_cards: int
    strictness_index: float


@dataclass
class SeasonData:
    season: int
    match_count: int
    avg_yellow: float
    avg_red: float
    total_cards: int


@dataclass
class RefereeSeason:
    season: int
    matches: int
    avg_yellow: float
    avg_red: float
    strictness: float


@dataclass
class RefereeSeasonComparison:
    id: int
    name: str
    slug: str
    photo: Optional[str]
    seasons: List[RefereeSeason]
    trend: Literal["stricter", "lenient", "stable"]
    change_percent: float


@dataclass
class HistoricalReport:
    has_multiple_seasons: bool
    seasons: List[SeasonData] = field(default_factory=list)
    referee_comparisons: List[RefereeSeasonComparison] = field(default_factory=list)
    league_seasons: Dict[str, List[SeasonData]] = field(default_factory=dict)


def _season_data(season: int, matches: Sequence[MatchRecord]) -> SeasonData:
    yellow = sum(m.yellow_cards for m in matches)
    red = sum(m.red_cards for m in matches)
    return SeasonData(
        season=season,
        match_count=len(matches),
        avg_yellow=average(yellow, len(matches)),
        avg_red=average(red, len(matches)),
        total_cards=yellow + red,
    )


def _compare_referee(rows: Sequence[SeasonStatsRow]) -> RefereeSeasonComparison:
    grouped: Dict[int, List[SeasonStatsRow]] = defaultdict(list)
    for row in rows:
        grouped[row.season].append(row)

    seasons: List[RefereeSeason] = []
    for season in sorted(grouped, reverse=True):
        bucket = grouped[season]
        played = sum(r.matches_officiated for r in bucket)
        seasons.append(
            RefereeSeason(
                season=season,
                matches=played,
                avg_yellow=average(sum(r.total_yellow_cards for r in bucket), played),
                avg_red=average(sum(r.total_red_cards for r in bucket), played),
                strictness=average(sum(r.strictness_index for r in bucket), len(bucket)),
            )
        )

    trend = "stable"
    change = 0.0
    latest, previous = seasons[0].strictness, seasons[1].strictness
    if previous > 0:
        change = (latest - previous) / previous * 100
        if change > STRICTNESS_CHANGE_PERCENT:
            trend = "stricter"
        elif change < -STRICTNESS_CHANGE_PERCENT:
            trend = "lenient"

    ref = rows[0].referee
    return RefereeSeasonComparison(
        id=ref.id,
        name=ref.name,
        slug=ref.slug,
        photo=ref.photo,
        seasons=seasons,
        trend=trend,
        change_percent=change,
    )


def historical_seasons(
    matches: Iterable[MatchRecord],
    season_stats: Iterable[SeasonStatsRow],
) -> HistoricalReport:
    """Compare card levels across seasons; needs at least two seasons of data."""
    by_season: Dict[int, List[MatchRecord]] = defaultdict(list)
    for match in matches:
        if match.has_stats:
            by_season[match.season].append(match)
    seasons = sorted(by_season, reverse=True)
    if len(seasons) < 2:
        return HistoricalReport(has_multiple_seasons=False)

    overall = [_season_data(season, by_season[season]) for season in seasons]

    per_referee: Dict[int, List[SeasonStatsRow]] = defaultdict(list)
    for row in season_stats:
        per_referee[row.referee.id].append(row)
    comparisons = [
        _compare_referee(rows)
        for rows in per_referee.values()
        if len({r.season for r in rows}) >= 2
        and sum(r.matches_officiated for r in rows) >= MIN_HISTORY_MATCHES
    ]
    comparisons.sort(key=lambda c: -abs(c.change_percent))

    league_seasons: Dict[str, List[SeasonData]] = {}
    for api_id, name in LEAGUE_NAMES.items():
        rows = []
        for season in seasons:
            league_matches = [m for m in by_season[season] if m.league_api_id == api_id]
            if league_matches:
                rows.append(_season_data(season, league_matches))
        league_seasons[name] = rows

    return HistoricalReport(
        has_multiple_seasons=True,
        seasons=overall,
        referee_comparisons=comparisons[:COMPARISON_LIMIT],
        league_seasons=league_seasons,
    )


__all__ = [
    "MonthlyTrend",
    "LeagueMonth",
    "LeagueMonthly",
    "RefereeMonth",
    "RefereeTrend",
    "SeasonSummary",
    "SeasonalReport",
    "SeasonStatsRow",
    "SeasonData",
    "RefereeSeason",
    "RefereeSeasonComparison",
    "HistoricalReport",
    "seasonal_trends",
    "historical_seasons",
]

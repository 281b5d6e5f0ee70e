from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from reftrends.analytics.referee_stats import aggregate_referee_seasons, strictness_index
from reftrends.database import DBM
from reftrends.database import repository as repo
from reftrends.shared.records import MatchRecord

logger = logging.getLogger(__name__)


async def recalculate_referee_stats(dbm: DBM, season: Optional[int] = None) -> int:
    """Rebuild referee_season_stats from finished matches.

    Returns the number of referees whose aggregates were written.
    """
    matches = await repo.load_match_records(dbm, finished_only=True, season=season, newest_first=False)
    aggregates = aggregate_referee_seasons(matches)
    await repo.upsert_referee_season_stats(dbm, (agg.as_row() for agg in aggregates))
    referees = len({agg.referee_id for agg in aggregates})
    logger.info(
        {
            "referee_stats_recalculated": {
                "season": season,
                "matches": len(matches),
                "rows": len(aggregates),
                "referees": referees,
            }
        }
    )
    return referees


async def refresh_penalty_averages(dbm: DBM, season: Optional[int] = None) -> int:
    """Recompute the penalty columns over matches that have stats.

    Card averages are left as they are; strictness is rebuilt from the stored
    card averages plus the new penalty average.
    """
    matches = await repo.load_match_records(dbm, finished_only=True, season=season)
    groups: Dict[Tuple[int, int, int], List[MatchRecord]] = defaultdict(list)
    for match in matches:
        if match.referee is None or not match.has_stats:
            continue
        groups[(match.referee.id, match.season, match.league_api_id)].append(match)

    stored = {
        (row.referee_id, row.season, row.league_api_id): row
        for row, _ in await repo.list_season_stats(dbm, season=season)
    }
    updated = 0
    for key, group in groups.items():
        row = stored.get(key)
        if row is None:
            continue
        total = sum(m.penalties for m in group)
        avg = total / len(group)
        updated += await repo.update_season_penalties(
            dbm,
            referee_id=key[0],
            season=key[1],
            league_api_id=key[2],
            total_penalties=total,
            avg_penalties=round(avg, 2),
            strictness_index=round(strictness_index(row.avg_yellow_cards, row.avg_red_cards, avg), 2),
        )
    logger.info({"penalty_averages_refreshed": {"season": season, "rows": updated}})
    return updated


__all__ = ["recalculate_referee_stats", "refresh_penalty_averages"]

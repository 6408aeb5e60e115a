"""
Per-league ingestion: collect rows from the sports APIs and upsert them.
Each league runs on its own; a failure is logged and the next league proceeds.
"""
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import structlog

from config.constants import (
    League, PLAYER_PROPS_TABLES, PROP_CONFLICT_KEY, TEAM_CONFLICT_KEY, TEAM_STATS_TABLES
)
from data.models.schemas import SyncResult
from data.collectors import epl_stats, mlb_stats, nba_stats, nhl_stats
from data.storage.supabase_client import SupabaseStore

logger = structlog.get_logger()

# (teams, props) collectors; teams are persisted before props are fetched
Collectors = Tuple[Callable[[], list], Callable[[], list]]

COLLECTORS: Dict[str, Collectors] = {
    League.NBA: (nba_stats.collect_teams, nba_stats.collect_props),
    League.NHL: (nhl_stats.collect_teams, nhl_stats.collect_props),
    League.MLB: (mlb_stats.collect_teams, mlb_stats.collect_props),
    League.EPL: (epl_stats.collect_teams, epl_stats.collect_props),
}


def _persist(
    store: Optional[SupabaseStore],
    table: str,
    rows: List[dict],
    on_conflict: str,
    league: str,
    kind: str,
    dry_run: bool = False
) -> int:
    if not rows:
        logger.info("nothing_to_upsert", league=league, kind=kind)
        return 0
    if dry_run:
        logger.info("dry_run_skip_upsert", league=league, kind=kind, table=table, count=len(rows))
        return len(rows)
    count = store.upsert(table, rows, on_conflict=on_conflict)
    logger.info("upserted", league=league, kind=kind, table=table, count=count)
    return count


def _warn_if_missing_endpoint(league: str, error: Exception) -> None:
    # Free BallDontLie tiers answer 404 for endpoints outside the plan
    if "404" in str(error):
        logger.warning("endpoint_maybe_unavailable", league=league)


def sync_league(league: str, store: Optional[SupabaseStore], dry_run: bool = False) -> SyncResult:
    """Collect and upsert one league's team stats and player props.

    Args:
        league: League key
        store: Target store; may be None when dry_run is set
        dry_run: Collect and log without writing

    Returns:
        SyncResult with upsert counts. A props failure after the teams were
        written is recorded in result.error and the team count is kept.

    Raises:
        Any team collector/store error; callers isolate leagues.
    """
    collect_teams, collect_props = COLLECTORS[league]
    logger.info("league_sync_started", league=league)

    result = SyncResult(league=league)
    result.teams_upserted = _persist(
        store, TEAM_STATS_TABLES[league], [t.to_row() for t in collect_teams()],
        TEAM_CONFLICT_KEY, league, "teams", dry_run)

    try:
        props = collect_props()
        result.props_upserted = _persist(
            store, PLAYER_PROPS_TABLES[league], [p.to_row() for p in props],
            PROP_CONFLICT_KEY, league, "props", dry_run)
    except Exception as e:
        logger.error(f"{league}_props_failed", league=league, teams=result.teams_upserted,
                     error=str(e), exc_info=True)
        _warn_if_missing_endpoint(league, e)
        result.error = str(e)
        return result

    logger.info("league_sync_finished", league=league,
                teams=result.teams_upserted, props=result.props_upserted)
    return result


def sync_leagues(
    leagues: Sequence[str],
    store: Optional[SupabaseStore],
    dry_run: bool = False
) -> List[SyncResult]:
    """Sync several leagues, isolating failures per league."""
    results = []
    for league in leagues:
        try:
            results.append(sync_league(league, store, dry_run=dry_run))
        except Exception as e:
            logger.error(f"{league}_sync_failed", league=league, error=str(e), exc_info=True)
            _warn_if_missing_endpoint(league, e)
            results.append(SyncResult(league=league, error=str(e)))
    return results

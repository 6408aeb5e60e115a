"""
Dashboard data context.
Loads the four blobs the dashboard renders (NBA, NHL and MLB stats plus
predictions) from the store, caches them and supports a manual refresh.
"""
from datetime import date, datetime
from typing import Optional
import structlog

from config.settings import get_settings
from config.constants import League, PICKS_TABLE, PLAYER_PROPS_TABLES, TEAM_STATS_TABLES
from data.models.schemas import DashboardSnapshot
from data.cache import DataCache, get_cache
from data.storage.supabase_client import SupabaseStore
from output.formatter import format_league_stats, format_predictions

logger = structlog.get_logger()
settings = get_settings()

LOAD_ERROR = "Error fetching data"
DASHBOARD_LEAGUES = (League.NBA, League.NHL, League.MLB)


class SportsDataContext:
    """Fetch-once view over the stored stats, with refresh()."""

    def __init__(
        self,
        store: SupabaseStore,
        game_date: Optional[date] = None,
        cache: Optional[DataCache] = None
    ):
        self.store = store
        self.game_date = game_date
        self.cache = cache or get_cache()
        self.snapshot = DashboardSnapshot(loading=True)

    @property
    def loading(self) -> bool:
        return self.snapshot.loading

    @property
    def error(self) -> Optional[str]:
        return self.snapshot.error

    def _cache_key(self) -> str:
        return f"dashboard:{(self.game_date or date.today()).isoformat()}"

    def _league_blob(self, league: str) -> dict:
        teams = self.store.select(TEAM_STATS_TABLES[league], order="team_name.asc")
        props = self.store.select(
            PLAYER_PROPS_TABLES[league],
            order="prop_value.desc",
            limit=settings.dashboard_props_limit
        )
        return format_league_stats(league, teams, props)

    def _predictions_blob(self) -> dict:
        pick_date = (self.game_date or date.today()).isoformat()
        rows = self.store.select(
            PICKS_TABLE,
            filters=[("pick_date", "eq", pick_date)],
            order="confidence.desc"
        )
        return format_predictions(rows)

    def load(self, force: bool = False) -> DashboardSnapshot:
        """Load all blobs, from cache unless force is set.

        Errors never propagate: the snapshot carries the error flag instead.
        """
        key = self._cache_key()
        if not force:
            cached = self.cache.get(key)
            if cached is not None:
                self.snapshot = cached
                return cached

        self.snapshot = DashboardSnapshot(loading=True)

        try:
            blobs = {league: self._league_blob(league) for league in DASHBOARD_LEAGUES}
            snapshot = DashboardSnapshot(
                nba_stats=blobs[League.NBA],
                nhl_stats=blobs[League.NHL],
                mlb_stats=blobs[League.MLB],
                predictions=self._predictions_blob(),
                loading=False,
                loaded_at=datetime.now(),
            )
        except Exception as e:
            logger.error("dashboard_load_failed", error=str(e), exc_info=True)
            self.snapshot = DashboardSnapshot(loading=False, error=LOAD_ERROR)
            return self.snapshot

        self.cache.cache_dashboard(key, snapshot)
        self.snapshot = snapshot
        logger.info("dashboard_loaded", key=key)
        return snapshot

    def refresh(self) -> DashboardSnapshot:
        """Drop the cached blobs and reload from the store."""
        self.cache.delete(self._cache_key())
        return self.load(force=True)

"""
Sports Stats Dashboard Backend - Main Entry Point

Runs the two jobs that keep the dashboard tables fresh:
1. Update: fetch NBA/NHL/MLB/EPL team stats and player props and upsert them
2. Picks: read today's slate and team rows, generate AI picks, replace
   today's ai_picks rows and flag the Bets of the Day

Usage:
    python main.py                      # Update all leagues, then generate picks
    python main.py --league nba         # Update one league (repeatable)
    python main.py --picks-only         # Only regenerate today's picks
    python main.py --show               # Print what the dashboard would show
    python main.py --schedule           # Start scheduler for automated runs
"""
import argparse
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Sequence
import structlog

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from config.settings import get_settings, ConfigurationError
from config.constants import ALL_LEAGUES, PICK_LEAGUES, PICKS_TABLE, TEAM_STATS_TABLES
from data.models.schemas import GamePrediction, SyncResult
from data.collectors.schedule import get_todays_matchups
from data.storage.supabase_client import SupabaseStore
from data.sync import sync_leagues
from data.dashboard import SportsDataContext
from analysis.pick_engine import generate_predictions
from output.ranker import select_bets_of_the_day
from output.formatter import build_pick_rows, format_bets_text, format_predictions, format_snapshot_text

settings = get_settings()

# Configure logging
logging.basicConfig(format="%(message)s", stream=sys.stdout, level=settings.log_level.upper())

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger()


def get_store() -> SupabaseStore:
    """Build the store, failing fast when credentials are missing."""
    if not settings.has_supabase_credentials():
        raise ConfigurationError("Supabase environment variables not set.")
    return SupabaseStore.from_settings()


def run_update(
    leagues: Optional[Sequence[str]] = None,
    dry_run: bool = False,
    store: Optional[SupabaseStore] = None
) -> List[SyncResult]:
    """Ingestion job: collect and upsert every requested league.

    Returns:
        One SyncResult per league, failed leagues included
    """
    leagues = list(leagues or settings.enabled_leagues)
    logger.info("update_started", leagues=leagues, dry_run=dry_run,
                timestamp=datetime.now().isoformat())

    if store is None:
        store = get_store()

    results = sync_leagues(leagues, store, dry_run=dry_run)

    failed = [r.league for r in results if not r.ok]
    logger.info("update_completed",
                succeeded=len(results) - len(failed),
                failed=failed,
                timestamp=datetime.now().isoformat())
    return results


def collect_predictions(
    store: SupabaseStore,
    game_date: date,
    leagues: Sequence[str] = PICK_LEAGUES
) -> List[GamePrediction]:
    """Generate predictions for every pick league; a failing league is skipped."""
    predictions = []
    for league in leagues:
        if league not in PICK_LEAGUES:
            continue
        try:
            matchups = get_todays_matchups(league, game_date)
            if not matchups:
                logger.info("no_games_today", league=league, date=str(game_date))
                continue
            team_rows = store.select(TEAM_STATS_TABLES[league])
            predictions.extend(generate_predictions(league, matchups, team_rows))
        except Exception as e:
            logger.error(f"{league}_picks_failed", league=league, error=str(e), exc_info=True)
    return predictions


def run_picks(
    game_date: Optional[date] = None,
    dry_run: bool = False,
    store: Optional[SupabaseStore] = None,
    leagues: Sequence[str] = PICK_LEAGUES
) -> List[dict]:
    """Picks job: replace today's ai_picks rows with a fresh set.

    Existing rows for the date are only deleted when new rows are ready,
    so a day with no predictions keeps whatever was stored earlier.

    Returns:
        The ai_picks rows that were (or in a dry run, would be) inserted
    """
    if game_date is None:
        game_date = date.today()
    logger.info("picks_started", date=str(game_date), dry_run=dry_run)

    if store is None:
        store = get_store()

    predictions = collect_predictions(store, game_date, leagues)
    if not predictions:
        logger.warning("no_predictions", date=str(game_date))
        print(f"No games with stats available for {game_date}")
        return []

    bets = select_bets_of_the_day(predictions)
    rows = build_pick_rows(predictions, bets, game_date)

    if dry_run:
        logger.info("dry_run_skip_picks_write", rows=len(rows))
    else:
        store.delete(PICKS_TABLE, filters=[("pick_date", "eq", game_date.isoformat())])
        try:
            store.insert(PICKS_TABLE, rows)
        except Exception as e:
            # The day's old rows are already gone; the next run rewrites them
            logger.error("picks_insert_failed", date=game_date.isoformat(), rows=len(rows),
                         error=str(e), exc_info=True)
            raise
        logger.info("picks_stored", rows=len(rows), bets_of_the_day=len(bets))

    print("\n" + format_bets_text(format_predictions(rows)["betsOfTheDay"]))

    logger.info("picks_completed", predictions=len(predictions), rows=len(rows),
                timestamp=datetime.now().isoformat())
    return rows


def show_dashboard(game_date: Optional[date] = None, store: Optional[SupabaseStore] = None) -> int:
    """Print the dashboard view; returns a process exit code."""
    context = SportsDataContext(store or get_store(), game_date=game_date)
    snapshot = context.load()
    print(format_snapshot_text(snapshot))
    return 1 if snapshot.error else 0


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date (expected YYYY-MM-DD): {value}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Sports Stats Dashboard - data ingestion and AI picks"
    )
    parser.add_argument(
        "--schedule",
        action="store_true",
        help="Start scheduler for automated runs"
    )
    parser.add_argument(
        "--league",
        action="append",
        choices=ALL_LEAGUES,
        help="League to update (repeatable). Defaults to all enabled leagues"
    )
    parser.add_argument(
        "--picks-only",
        action="store_true",
        help="Skip ingestion and only regenerate picks"
    )
    parser.add_argument(
        "--skip-picks",
        action="store_true",
        help="Run ingestion without generating picks"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and compute without writing to the database"
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Print the dashboard view and exit"
    )
    parser.add_argument(
        "--date",
        type=parse_date,
        help="Game date for picks and the dashboard (YYYY-MM-DD)"
    )

    args = parser.parse_args(argv)

    if args.picks_only and args.skip_picks:
        parser.error("--picks-only and --skip-picks are mutually exclusive")

    try:
        if args.schedule:
            from delivery.scheduler import run_scheduler
            print("Starting sports stats scheduler...")
            print(f"Updates run at hour '{settings.update_hour}', minute {settings.update_minute:02d}; "
                  f"picks at {settings.picks_hour}:{settings.picks_minute:02d} {settings.schedule_timezone}")
            run_scheduler()
            return 0

        if args.show:
            return show_dashboard(args.date)

        store = None if args.dry_run and not settings.has_supabase_credentials() else get_store()

        if not args.picks_only:
            if store is None:
                # Without credentials a dry run can still exercise the collectors
                results = sync_leagues(args.league or settings.enabled_leagues, None, dry_run=True)
            else:
                results = run_update(args.league, dry_run=args.dry_run, store=store)
            for result in results:
                status = "ok" if result.ok else f"failed ({result.error})"
                print(f"{result.league.upper()}: {result.teams_upserted} teams, "
                      f"{result.props_upserted} props - {status}")
            if results and not any(r.ok for r in results):
                logger.error("all_leagues_failed")
                return 1

        if not args.skip_picks:
            if store is None:
                print("Skipping picks: Supabase credentials are required to read team stats")
            else:
                rows = run_picks(args.date, dry_run=args.dry_run, store=store)
                print(f"\nGenerated {len(rows)} picks")

    except ConfigurationError as e:
        logger.error("configuration_error", error=str(e))
        print(f"Configuration error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

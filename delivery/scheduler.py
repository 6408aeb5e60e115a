"""
Scheduler for the recurring ingestion and daily picks jobs.
Both jobs are cron-triggered in the configured timezone via APScheduler.
"""
from typing import Callable, Union
import pytz
import structlog

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from config.settings import get_settings

logger = structlog.get_logger()
settings = get_settings()

UPDATE_JOB_ID = "stats_update"
PICKS_JOB_ID = "daily_picks"


def get_scheduler(blocking: bool = True):
    """BlockingScheduler for the standalone service, BackgroundScheduler otherwise."""
    return BlockingScheduler() if blocking else BackgroundScheduler()


def _add_cron_job(
    scheduler,
    run_func: Callable,
    job_id: str,
    name: str,
    hour: Union[int, str],
    minute: int
):
    # One instance at a time; missed runs collapse into a single catch-up run
    scheduler.add_job(
        run_func,
        trigger=CronTrigger(hour=hour, minute=minute, timezone=pytz.timezone(settings.schedule_timezone)),
        id=job_id,
        name=name,
        max_instances=1,
        coalesce=True,
        replace_existing=True
    )
    logger.info("job_scheduled", job=job_id, hour=str(hour), minute=minute,
                timezone=settings.schedule_timezone)


def setup_update_schedule(scheduler, run_func, job_id: str = UPDATE_JOB_ID):
    """Schedule league ingestion on the update_hour cron expression (every 6 hours by default)."""
    _add_cron_job(scheduler, run_func, job_id, "Sports Stats Update",
                  settings.update_hour, settings.update_minute)


def setup_picks_schedule(scheduler, run_func, job_id: str = PICKS_JOB_ID):
    """Schedule the daily AI picks run.

    Args:
        scheduler: APScheduler instance
        run_func: Pick generation function
        job_id: Unique job identifier
    """
    _add_cron_job(scheduler, run_func, job_id, "Daily AI Picks",
                  settings.picks_hour, settings.picks_minute)


def _guarded(job_name: str, run_func):
    """Wrap a job so a failed run is logged and the scheduler keeps going."""
    def job():
        try:
            run_func()
        except Exception as e:
            logger.error("scheduled_job_failed", job=job_name, error=str(e), exc_info=True)
    job.__name__ = job_name
    return job


def run_scheduler():
    """Run both jobs until interrupted."""
    from main import run_update, run_picks

    scheduler = get_scheduler(blocking=True)
    setup_update_schedule(scheduler, _guarded(UPDATE_JOB_ID, run_update))
    setup_picks_schedule(scheduler, _guarded(PICKS_JOB_ID, run_picks))

    logger.info("scheduler_starting", jobs=[UPDATE_JOB_ID, PICKS_JOB_ID])
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("scheduler_stopped")
        scheduler.shutdown()


if __name__ == "__main__":
    run_scheduler()

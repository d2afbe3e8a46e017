"""APScheduler setup for the alert poll and the daily summary check.

Jobs run on the application's event loop so they share the in-memory caches
and single-flight fetches with request handlers.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from aurora_go.config import settings

logger = logging.getLogger(__name__)

_scheduler: AsyncIOScheduler | None = None


async def _run_alert_poll():
    from aurora_go.services.space_weather_ingest import get_current_reading, wait_for_alert_check
    try:
        await get_current_reading()
        await wait_for_alert_check()
    except Exception as e:
        logger.error("Alert poll job failed: %s", e)


async def _run_daily_summary_check():
    from aurora_go.services.space_weather_ingest import summary_generator
    try:
        await summary_generator.tick()
    except Exception as e:
        logger.error("Daily summary job failed: %s", e)


def start_scheduler():
    global _scheduler
    _scheduler = AsyncIOScheduler()

    _scheduler.add_job(
        _run_alert_poll,
        "interval",
        minutes=settings.alert_poll_interval,
        id="alert_poll",
        name="Space weather poll and GO alerts",
        max_instances=1,
    )

    _scheduler.add_job(
        _run_daily_summary_check,
        "interval",
        minutes=1,
        id="daily_summary",
        name="Daily aurora summary",
        max_instances=1,
    )

    _scheduler.start()
    logger.info(
        "Scheduler started: telemetry poll every %d min, daily summary at %02d:00 %s",
        settings.alert_poll_interval,
        settings.daily_summary_hour,
        settings.observer_timezone,
    )


def stop_scheduler():
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
        _scheduler = None

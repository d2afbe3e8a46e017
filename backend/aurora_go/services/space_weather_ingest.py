"""Orchestrates fetching space-weather and sky data and producing decisions."""

import asyncio
import logging
from datetime import datetime, timezone

from aurora_go.config import settings
from aurora_go.schemas.decision import Decision
from aurora_go.schemas.sky import CloudConditions, DarknessInfo, OvationForecast
from aurora_go.schemas.space_weather import SpaceWeatherReading
from aurora_go.services import darkness, noaa_client, open_meteo_client, telemetry
from aurora_go.services.alert_scheduler import AlertScheduler
from aurora_go.services.cache import TTLCache
from aurora_go.services.daily_summary import DailySummaryGenerator
from aurora_go.services.decision_engine import decide
from aurora_go.services.mailer import Mailer
from aurora_go.services.summary_store import SummaryStore

logger = logging.getLogger(__name__)

TELEMETRY_KEY = "current"
OVATION_KEY = "grid"

# In-memory caches per upstream (short TTLs, shared by all observers)
_telemetry_cache = TTLCache(settings.telemetry_cache_ttl, name="telemetry")
_cloud_cache = TTLCache(settings.cloud_cache_ttl, name="clouds")
_ovation_cache = TTLCache(settings.ovation_cache_ttl, name="ovation")

mailer = Mailer()
alert_scheduler = AlertScheduler(mailer)
summary_store = SummaryStore()
summary_generator = DailySummaryGenerator(mailer, summary_store)

_alert_task: asyncio.Task | None = None


async def _fetch_reading() -> SpaceWeatherReading:
    """Fetch plasma, magnetometer and storm scales concurrently and normalise them."""
    plasma, mag, scales = await asyncio.gather(
        noaa_client.fetch_plasma(),
        noaa_client.fetch_mag(),
        noaa_client.fetch_scales(),
        return_exceptions=True,
    )

    if isinstance(scales, Exception):
        logger.warning("Storm scales unavailable: %s", scales)
        scales = None

    failures = [r for r in (plasma, mag) if isinstance(r, Exception)]
    if failures:
        logger.warning("Solar wind telemetry unavailable: %s", failures[0])
        return telemetry.fallback_reading(f"telemetry unavailable: {failures[0]}")

    reading = telemetry.normalize(plasma, mag, scales, fetched_at=datetime.now(timezone.utc))
    if not reading.degraded:
        logger.info(
            "Telemetry: Bz %.1f nT, speed %.0f km/s, similarity %d%%",
            reading.bz, reading.speed, reading.similarity,
        )
    return reading


async def _check_alert(reading: SpaceWeatherReading):
    try:
        await alert_scheduler.check(reading)
    except Exception as e:
        logger.error("Alert check failed: %s", e)


def _schedule_alert_check(reading: SpaceWeatherReading):
    """Run the alert check off the request path, one at a time.

    While a check (and its mail dispatch) is still running, later readings are
    skipped; the cooldown it is about to record would reject them anyway.
    """
    global _alert_task
    if _alert_task is not None and not _alert_task.done():
        return
    _alert_task = asyncio.create_task(_check_alert(reading))


async def wait_for_alert_check():
    """Block until the most recently scheduled alert check has finished."""
    if _alert_task is not None:
        await _alert_task


async def get_current_reading() -> SpaceWeatherReading:
    """Latest reading. Fallback readings are served but never cached.

    Every live reading served, cached or fresh, is offered to the alert check.
    """
    reading = await _telemetry_cache.get_or_fetch(
        TELEMETRY_KEY,
        _fetch_reading,
        should_cache=lambda r: not r.degraded,
    )
    if not reading.degraded:
        _schedule_alert_check(reading)
    return reading


async def get_clouds(latitude: float, longitude: float) -> CloudConditions:
    key = f"{latitude:.2f},{longitude:.2f}"
    clouds = await _cloud_cache.get_or_fetch(
        key, lambda: open_meteo_client.fetch_clouds(latitude, longitude)
    )
    if clouds is None:
        return open_meteo_client.assume_clear(latitude, longitude)
    return clouds


async def get_ovation(latitude: float, longitude: float) -> OvationForecast | None:
    grid = await _ovation_cache.get_or_fetch(OVATION_KEY, noaa_client.fetch_ovation_grid)
    if grid is None:
        return None
    return noaa_client.ovation_at(grid, latitude, longitude)


def get_darkness(latitude: float, longitude: float) -> DarknessInfo:
    return darkness.get_darkness_info(latitude, longitude)


async def get_decision(latitude: float, longitude: float) -> Decision:
    """Fan out to all sources for one observer and run the decision rules."""
    reading, clouds, ovation = await asyncio.gather(
        get_current_reading(),
        get_clouds(latitude, longitude),
        get_ovation(latitude, longitude),
    )
    now = datetime.now(timezone.utc)
    dark = darkness.get_darkness_info(latitude, longitude, now)
    return decide(reading, dark, latitude, clouds=clouds, ovation=ovation, now=now)


def reset_caches():
    global _alert_task
    _alert_task = None
    _telemetry_cache.clear()
    _cloud_cache.clear()
    _ovation_cache.clear()

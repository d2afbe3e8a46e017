"""Retrospective summary of the previous day's aurora conditions.

Runs once a day at 08:00 in the observer's timezone. The scheduler checks
every minute; anything within ±5 minutes of the target counts, and the
persisted last-sent date stops a restart inside the window from sending twice.

Verdicts:
  EXCELLENT  peak similarity >= 50 and min Bz < -10 nT
  GOOD       peak similarity >= 35 and min Bz < -5 nT
  MODERATE   peak similarity >= 20 or min Bz < -3 nT
  QUIET      otherwise
"""

import asyncio
import logging
import math
from datetime import date, datetime, timedelta, timezone
from typing import Callable
from zoneinfo import ZoneInfo

from aurora_go.config import settings
from aurora_go.errors import UpstreamUnavailable
from aurora_go.schemas.summary import DailyStats, DailySummary, MetricStats
from aurora_go.services import noaa_client, similarity
from aurora_go.services.mailer import Mailer
from aurora_go.services.notifications import render_daily_summary
from aurora_go.services.summary_store import SummaryStore
from aurora_go.services.telemetry import (
    M_BT, M_BX, M_BY, M_BZ, M_TIME, P_DENSITY, P_SPEED, P_TEMPERATURE, P_TIME,
    dynamic_pressure, parse_number, parse_time_tag,
)

logger = logging.getLogger(__name__)

GOOD_BZ_THRESHOLD = -5.0

VERDICTS: list[tuple[str, str]] = [
    ("EXCELLENT", "Outstanding aurora conditions! Visible at mid-latitudes."),
    ("GOOD", "Good aurora activity! Visible at higher latitudes."),
    ("MODERATE", "Some aurora activity possible at high latitudes."),
    ("QUIET", "Minimal aurora activity. Better luck next time!"),
]


def classify_verdict(peak_similarity: int, min_bz: float) -> tuple[str, str]:
    if peak_similarity >= 50 and min_bz < -10:
        return VERDICTS[0]
    if peak_similarity >= 35 and min_bz < -5:
        return VERDICTS[1]
    if peak_similarity >= 20 or min_bz < -3:
        return VERDICTS[2]
    return VERDICTS[3]


def in_trigger_window(now_local: datetime, hour: int, window_minutes: int) -> bool:
    target = now_local.replace(hour=hour, minute=0, second=0, microsecond=0)
    return abs(now_local - target) <= timedelta(minutes=window_minutes)


def summarize_day(
    plasma: list[list],
    mag: list[list],
    day: date,
    tz: ZoneInfo,
) -> DailySummary | None:
    """Summarise one local calendar day, or None if the feeds have no rows for it."""
    plasma_day = _rows_for_day(plasma, day, tz)
    mag_day = _rows_for_day(mag, day, tz)
    if not plasma_day or not mag_day:
        return None

    speeds = _column(plasma_day, P_SPEED)
    densities = _column(plasma_day, P_DENSITY)
    bz_values = _column(mag_day, M_BZ)
    bt_values = _column(mag_day, M_BT)

    stats = DailyStats(
        date=day,
        data_points=len(plasma_day),
        speed=_stats(speeds, digits=0),
        density=_stats(densities),
        bz=_stats(bz_values),
        bt=_stats(bt_values),
    )

    good_minutes = sum(1 for bz in bz_values if bz < GOOD_BZ_THRESHOLD)
    peak_similarity, peak_time = _peak_similarity(plasma_day, mag_day)
    min_bz = min(bz_values) if bz_values else 0.0
    verdict, description = classify_verdict(peak_similarity, min_bz)

    return DailySummary(
        stats=stats,
        good_bz_minutes=good_minutes,
        good_bz_hours=round(good_minutes / 60, 1),
        peak_similarity=peak_similarity,
        peak_time=peak_time,
        verdict=verdict,
        description=description,
    )


def _peak_similarity(plasma_day: list[list], mag_day: list[list]) -> tuple[int, datetime | None]:
    """Highest per-minute similarity over plasma/mag samples sharing a time tag.

    The sustained-duration bonus is left out since it needs a rolling window.
    """
    mag_by_time = {str(m[M_TIME]): m for m in mag_day}
    peak, peak_time = 0, None

    for p in plasma_day:
        m = mag_by_time.get(str(p[P_TIME]))
        if m is None:
            continue
        density = parse_number(_cell(p, P_DENSITY))
        speed = parse_number(_cell(p, P_SPEED))
        bz = parse_number(_cell(m, M_BZ))
        if density is None or speed is None or bz is None:
            continue
        temperature = parse_number(_cell(p, P_TEMPERATURE)) or 0.0
        bt = parse_number(_cell(m, M_BT))
        if bt is None:
            bx = parse_number(_cell(m, M_BX)) or 0.0
            by = parse_number(_cell(m, M_BY)) or 0.0
            bt = math.sqrt(bx * bx + by * by + bz * bz)

        _, sim = similarity.compute(
            bz=bz,
            speed=speed,
            density=density,
            bt=bt,
            pressure=dynamic_pressure(density, speed),
            temperature=temperature,
            bz_south_minutes=None,
        )
        if sim > peak:
            peak, peak_time = sim, parse_time_tag(p[P_TIME])

    return peak, peak_time


def _rows_for_day(rows, day: date, tz: ZoneInfo) -> list[list]:
    if not isinstance(rows, list):
        return []
    selected = []
    for row in rows[1:]:
        if not isinstance(row, (list, tuple)) or not row:
            continue
        ts = parse_time_tag(row[0])
        if ts is not None and ts.astimezone(tz).date() == day:
            selected.append(row)
    return selected


def _column(rows: list[list], index: int) -> list[float]:
    values = (parse_number(_cell(r, index)) for r in rows)
    return [v for v in values if v is not None]


def _cell(row, index: int):
    return row[index] if len(row) > index else None


def _stats(values: list[float], digits: int = 1) -> MetricStats | None:
    if not values:
        return None
    return MetricStats(
        min=round(min(values), digits),
        max=round(max(values), digits),
        avg=round(sum(values) / len(values), digits),
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DailySummaryGenerator:
    def __init__(
        self,
        mailer: Mailer,
        store: SummaryStore,
        timezone_name: str | None = None,
        hour: int | None = None,
        window_minutes: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.mailer = mailer
        self.store = store
        self.timezone_name = timezone_name or settings.observer_timezone
        self.tz = ZoneInfo(self.timezone_name)
        self.hour = settings.daily_summary_hour if hour is None else hour
        self.window_minutes = (
            settings.daily_summary_window_minutes if window_minutes is None else window_minutes
        )
        self._clock = clock

    def local_now(self) -> datetime:
        return self._clock().astimezone(self.tz)

    def is_due(self) -> bool:
        now_local = self.local_now()
        if not in_trigger_window(now_local, self.hour, self.window_minutes):
            return False
        return self.store.get_last_sent_date() != now_local.date()

    async def tick(self) -> DailySummary | None:
        """Called every minute by the scheduler."""
        if not self.is_due():
            return None
        return await self.run()

    async def run(self) -> DailySummary | None:
        """Summarise yesterday (local), email it, and record today as sent."""
        today = self.local_now().date()
        yesterday = today - timedelta(days=1)
        logger.info("Generating aurora summary for %s", yesterday)

        try:
            plasma, mag = await asyncio.gather(noaa_client.fetch_plasma(), noaa_client.fetch_mag())
        except UpstreamUnavailable as e:
            logger.warning("Daily summary skipped, telemetry unavailable: %s", e)
            return None

        summary = summarize_day(plasma, mag, yesterday, self.tz)
        if summary is None:
            logger.info("Daily summary skipped, no data for %s", yesterday)
            return None

        subject, body = render_daily_summary(summary, self.timezone_name)
        try:
            emailed = await self.mailer.send(subject, body)
        except Exception as e:
            logger.error("Daily summary dispatch raised: %s", e)
            emailed = False

        self.store.set_last_sent_date(today)
        self.store.save_summary(summary, emailed=emailed)
        logger.info(
            "Daily summary for %s: %s (peak %d%%, emailed=%s)",
            yesterday, summary.verdict, summary.peak_similarity, emailed,
        )
        return summary

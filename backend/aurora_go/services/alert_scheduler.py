"""Cooldown- and darkness-gated GO alert dispatch.

A reading qualifies when similarity >= 40 and Bz < -5 nT. At most one alert is
sent per cooldown window, and never while it is light at the alert reference
location. A failed send leaves the cooldown unconsumed, so the next qualifying
reading retries.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from aurora_go.config import settings
from aurora_go.schemas.space_weather import SpaceWeatherReading
from aurora_go.services import darkness
from aurora_go.services.mailer import Mailer
from aurora_go.services.notifications import render_alert

logger = logging.getLogger(__name__)

ALERT_MIN_SIMILARITY = 40
ALERT_MAX_BZ = -5.0


@dataclass
class AlertState:
    last_alert_at: datetime | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AlertScheduler:
    def __init__(
        self,
        mailer: Mailer,
        state: AlertState | None = None,
        cooldown_minutes: int | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.mailer = mailer
        self.state = state or AlertState()
        self.cooldown = timedelta(
            minutes=settings.email_cooldown if cooldown_minutes is None else cooldown_minutes
        )
        self.latitude = settings.alert_latitude if latitude is None else latitude
        self.longitude = settings.alert_longitude if longitude is None else longitude
        self._clock = clock

    def qualifies(self, reading: SpaceWeatherReading) -> bool:
        return (
            not reading.degraded
            and reading.similarity >= ALERT_MIN_SIMILARITY
            and reading.bz < ALERT_MAX_BZ
        )

    def cooldown_elapsed(self, now: datetime) -> bool:
        last = self.state.last_alert_at
        return last is None or now - last > self.cooldown

    async def check(self, reading: SpaceWeatherReading) -> bool:
        """Dispatch an alert if the reading warrants one. Returns True if sent."""
        now = self._clock()
        if not self.qualifies(reading) or not self.cooldown_elapsed(now):
            return False
        if not self.mailer.enabled:
            logger.debug("Alert conditions met but email is disabled")
            return False

        if not darkness.can_view_aurora(self.latitude, self.longitude, now):
            logger.info(
                "GO conditions (similarity %d%%, Bz %.1f nT) but daylight at alert location, not alerting",
                reading.similarity, reading.bz,
            )
            return False

        subject, body = render_alert(reading)
        try:
            sent = await self.mailer.send(subject, body)
        except Exception as e:
            logger.error("Alert dispatch raised: %s", e)
            sent = False

        if sent:
            self.state.last_alert_at = now
            logger.info("Aurora alert sent (similarity %d%%, Bz %.1f nT)", reading.similarity, reading.bz)
        else:
            logger.warning("Aurora alert not delivered; cooldown not consumed")
        return sent

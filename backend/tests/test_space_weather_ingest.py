"""Tests for reading orchestration and the off-request alert check."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from aurora_go.errors import UpstreamUnavailable
from aurora_go.services import space_weather_ingest
from aurora_go.services.alert_scheduler import AlertState

PLASMA = [["time_tag", "density", "speed", "temperature"]] + [
    [f"2024-05-10 17:{m:02d}:00.000", "15.0", "700.0", "300000"] for m in range(30)
]
MAG = [["time_tag", "bx_gsm", "by_gsm", "bz_gsm", "lon_gsm", "lat_gsm", "bt"]] + [
    [f"2024-05-10 17:{m:02d}:00.000", "0.0", "0.0", "-22.0", "0", "0", "25.0"] for m in range(30)
]


class BlockingMailer:
    """Mailer whose send hangs until released, like a stalled SMTP connect."""

    def __init__(self):
        self.enabled = True
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.sent = 0

    async def send(self, subject: str, html: str) -> bool:
        self.started.set()
        await self.release.wait()
        self.sent += 1
        return True


@pytest.fixture(autouse=True)
async def clean_state():
    space_weather_ingest.reset_caches()
    yield
    task = space_weather_ingest._alert_task
    if task is not None and not task.done():
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
    space_weather_ingest.reset_caches()


def _patch_telemetry(plasma=PLASMA, mag=MAG):
    plasma_mock = AsyncMock(side_effect=plasma) if isinstance(plasma, Exception) else AsyncMock(return_value=plasma)
    return (
        patch("aurora_go.services.noaa_client.fetch_plasma", plasma_mock),
        patch("aurora_go.services.noaa_client.fetch_mag", AsyncMock(return_value=mag)),
        patch("aurora_go.services.noaa_client.fetch_scales", AsyncMock(return_value=None)),
    )


@pytest.mark.asyncio
async def test_slow_alert_dispatch_does_not_delay_reading():
    mailer = BlockingMailer()
    p_plasma, p_mag, p_scales = _patch_telemetry()
    with p_plasma, p_mag, p_scales, \
         patch.object(space_weather_ingest.alert_scheduler, "mailer", mailer), \
         patch.object(space_weather_ingest.alert_scheduler, "state", AlertState()), \
         patch("aurora_go.services.alert_scheduler.darkness.can_view_aurora", return_value=True):
        reading = await asyncio.wait_for(space_weather_ingest.get_current_reading(), timeout=1.0)
        assert reading.source == "live"

        # Dispatch is underway in the background, not finished
        await asyncio.wait_for(mailer.started.wait(), timeout=1.0)
        assert mailer.sent == 0

        mailer.release.set()
        await space_weather_ingest.wait_for_alert_check()
        assert mailer.sent == 1
        assert space_weather_ingest.alert_scheduler.state.last_alert_at is not None


@pytest.mark.asyncio
async def test_cached_reading_still_offered_to_alert_check():
    check = AsyncMock(return_value=False)
    p_plasma, p_mag, p_scales = _patch_telemetry()
    with p_plasma as plasma_mock, p_mag, p_scales, \
         patch.object(space_weather_ingest.alert_scheduler, "check", check):
        await space_weather_ingest.get_current_reading()
        await space_weather_ingest.wait_for_alert_check()
        await space_weather_ingest.get_current_reading()
        await space_weather_ingest.wait_for_alert_check()

    assert plasma_mock.await_count == 1
    assert check.await_count == 2


@pytest.mark.asyncio
async def test_overlapping_alert_checks_are_skipped():
    release = asyncio.Event()

    async def slow_check(reading):
        await release.wait()
        return True

    check = AsyncMock(side_effect=slow_check)
    p_plasma, p_mag, p_scales = _patch_telemetry()
    with p_plasma, p_mag, p_scales, \
         patch.object(space_weather_ingest.alert_scheduler, "check", check):
        await space_weather_ingest.get_current_reading()
        await asyncio.sleep(0)
        await space_weather_ingest.get_current_reading()
        release.set()
        await space_weather_ingest.wait_for_alert_check()

    assert check.await_count == 1


@pytest.mark.asyncio
async def test_fallback_reading_never_checked_for_alerts():
    check = AsyncMock(return_value=False)
    p_plasma, p_mag, p_scales = _patch_telemetry(plasma=UpstreamUnavailable("timeout"))
    with p_plasma, p_mag, p_scales, \
         patch.object(space_weather_ingest.alert_scheduler, "check", check):
        reading = await space_weather_ingest.get_current_reading()

    assert reading.degraded
    check.assert_not_called()

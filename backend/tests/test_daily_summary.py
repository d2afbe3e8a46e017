"""Tests for the daily aurora summary: statistics, verdicts, trigger window and persistence."""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from aurora_go.database import init_db
from aurora_go.services.daily_summary import (
    DailySummaryGenerator,
    classify_verdict,
    in_trigger_window,
    summarize_day,
)
from aurora_go.services.summary_store import SummaryStore

PACIFIC = ZoneInfo("America/Los_Angeles")
PLASMA_HEADER = ["time_tag", "density", "speed", "temperature"]
MAG_HEADER = ["time_tag", "bx_gsm", "by_gsm", "bz_gsm", "lon_gsm", "lat_gsm", "bt"]

# 08:00 PDT on May 11, 2024; "yesterday" is May 10 local
SUMMARY_TIME = datetime(2024, 5, 11, 15, 0, tzinfo=timezone.utc)


class FakeMailer:
    def __init__(self):
        self.enabled = True
        self.sent: list[tuple[str, str]] = []

    async def send(self, subject: str, html: str) -> bool:
        self.sent.append((subject, html))
        return True


@pytest.fixture
def store():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool,
    )
    init_db(bind=engine)
    return SummaryStore(session_factory=sessionmaker(bind=engine))


def _make_generator(store, now=SUMMARY_TIME, mailer=None):
    return DailySummaryGenerator(
        mailer or FakeMailer(), store,
        timezone_name="America/Los_Angeles", hour=8, window_minutes=5,
        clock=lambda: now,
    )


def _stamp(t: datetime) -> str:
    return t.strftime("%Y-%m-%d %H:%M:%S.000")


def _storm_feeds(start=datetime(2024, 5, 10, 20, 0, tzinfo=timezone.utc), minutes=30):
    """Half an hour of strong southward Bz during the afternoon of May 10 (Pacific)."""
    plasma, mag = [PLASMA_HEADER], [MAG_HEADER]
    for i in range(minutes):
        t = _stamp(start + timedelta(minutes=i))
        plasma.append([t, "15.0", "700.0", "300000"])
        mag.append([t, "0.0", "0.0", "-22.0" if i < 20 else "-2.0", "0", "0", "25.0"])
    # Next local day; must not be counted
    late = _stamp(datetime(2024, 5, 11, 8, 0, tzinfo=timezone.utc))
    plasma.append([late, "50.0", "900.0", "900000"])
    mag.append([late, "0.0", "0.0", "-40.0", "0", "0", "45.0"])
    return plasma, mag


# --- Verdicts and trigger window ---

def test_classify_verdict():
    assert classify_verdict(60, -12.0)[0] == "EXCELLENT"
    assert classify_verdict(60, -8.0)[0] == "GOOD"
    assert classify_verdict(40, -6.0)[0] == "GOOD"
    assert classify_verdict(25, 0.0)[0] == "MODERATE"
    assert classify_verdict(10, -4.0)[0] == "MODERATE"
    assert classify_verdict(10, -1.0)[0] == "QUIET"


def test_trigger_window():
    base = datetime(2024, 5, 11, 8, 0, tzinfo=PACIFIC)
    assert in_trigger_window(base, 8, 5)
    assert in_trigger_window(base + timedelta(minutes=4), 8, 5)
    assert in_trigger_window(base - timedelta(minutes=4), 8, 5)
    assert not in_trigger_window(base + timedelta(minutes=6), 8, 5)
    assert not in_trigger_window(base.replace(hour=14), 8, 5)


# --- Statistics ---

def test_summarize_day_stats_and_peak():
    plasma, mag = _storm_feeds()
    summary = summarize_day(plasma, mag, date(2024, 5, 10), PACIFIC)

    assert summary is not None
    assert summary.stats.data_points == 30
    assert summary.stats.speed.max == 700
    assert summary.stats.bz.min == -22.0
    assert summary.stats.bz.max == -2.0
    assert summary.good_bz_minutes == 20
    assert summary.good_bz_hours == 0.3
    assert summary.peak_similarity >= 50
    assert summary.peak_time == datetime(2024, 5, 10, 20, 0, tzinfo=timezone.utc)
    assert summary.verdict == "EXCELLENT"


def test_summarize_day_without_rows_returns_none():
    plasma, mag = _storm_feeds()
    assert summarize_day(plasma, mag, date(2024, 5, 1), PACIFIC) is None
    assert summarize_day([PLASMA_HEADER], [MAG_HEADER], date(2024, 5, 10), PACIFIC) is None


def test_summarize_day_skips_non_numeric_values():
    plasma, mag = _storm_feeds(minutes=3)
    t = _stamp(datetime(2024, 5, 10, 21, 0, tzinfo=timezone.utc))
    plasma.append([t, None, None, None])
    mag.append([t, None, None, None, None, None, None])
    summary = summarize_day(plasma, mag, date(2024, 5, 10), PACIFIC)
    assert summary.stats.data_points == 4
    assert summary.stats.density.avg == 15.0


# --- Generator ---

@pytest.mark.asyncio
async def test_run_without_data_does_not_mark_sent(store):
    mailer = FakeMailer()
    generator = _make_generator(store, mailer=mailer)
    with patch("aurora_go.services.noaa_client.fetch_plasma", AsyncMock(return_value=[PLASMA_HEADER])), \
         patch("aurora_go.services.noaa_client.fetch_mag", AsyncMock(return_value=[MAG_HEADER])):
        result = await generator.run()

    assert result is None
    assert mailer.sent == []
    assert store.get_last_sent_date() is None
    assert store.latest_summary() is None


@pytest.mark.asyncio
async def test_tick_sends_and_records_once(store):
    plasma, mag = _storm_feeds()
    mailer = FakeMailer()
    generator = _make_generator(store, mailer=mailer)
    with patch("aurora_go.services.noaa_client.fetch_plasma", AsyncMock(return_value=plasma)), \
         patch("aurora_go.services.noaa_client.fetch_mag", AsyncMock(return_value=mag)):
        first = await generator.tick()
        second = await generator.tick()

    assert first is not None
    assert first.stats.date == date(2024, 5, 10)
    assert second is None
    assert len(mailer.sent) == 1
    assert "Aurora Daily Summary: EXCELLENT conditions on 2024-05-10" in mailer.sent[0][0]
    assert store.get_last_sent_date() == date(2024, 5, 11)

    latest = store.latest_summary()
    assert latest.verdict == "EXCELLENT"
    assert latest.stats.date == date(2024, 5, 10)


@pytest.mark.asyncio
async def test_tick_outside_window_does_nothing(store):
    generator = _make_generator(store, now=SUMMARY_TIME + timedelta(hours=3))
    fetch = AsyncMock()
    with patch("aurora_go.services.noaa_client.fetch_plasma", fetch):
        assert await generator.tick() is None
    fetch.assert_not_called()


def test_last_sent_date_round_trip(store):
    assert store.get_last_sent_date() is None
    store.set_last_sent_date(date(2024, 5, 11))
    store.set_last_sent_date(date(2024, 5, 12))
    assert store.get_last_sent_date() == date(2024, 5, 12)

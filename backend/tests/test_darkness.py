"""Tests for solar altitude and darkness classification."""

from datetime import datetime, timezone

from aurora_go.services import darkness

EQUINOX_NOON = datetime(2024, 3, 20, 12, 0, tzinfo=timezone.utc)
EQUINOX_MIDNIGHT = datetime(2024, 3, 20, 0, 0, tzinfo=timezone.utc)


def test_equator_noon_is_day():
    info = darkness.get_darkness_info(0.0, 0.0, EQUINOX_NOON)
    assert info.level == "day"
    assert info.solar_altitude_deg > 80
    assert not info.can_view_aurora


def test_equator_midnight_is_night():
    info = darkness.get_darkness_info(0.0, 0.0, EQUINOX_MIDNIGHT)
    assert info.level == "night"
    assert info.can_view_aurora
    assert info.hours_until_dark is None


def test_classify_levels():
    assert darkness.classify(-20.0)[0] == "night"
    assert darkness.classify(-15.0)[0] == "nautical"
    assert darkness.classify(-8.0) == ("civil", "Civil twilight - only bright aurora visible", True)
    assert darkness.classify(-3.0)[0] == "horizon"
    assert darkness.classify(-3.0)[2] is False
    assert darkness.classify(10.0)[0] == "day"


def test_hours_until_dark_after_equinox_noon():
    """Sunset at the equator is ~18:00 UTC on lon 0; -6° follows about 25 min later."""
    hours = darkness.hours_until_dark(0.0, 0.0, EQUINOX_NOON)
    assert 6.0 < hours <= 7.0
    # Refined to quarter hours
    assert (hours * 4) == int(hours * 4)


def test_hours_until_dark_when_already_dark():
    assert darkness.hours_until_dark(0.0, 0.0, EQUINOX_MIDNIGHT) == 0.0


def test_polar_day_never_gets_dark():
    when = datetime(2024, 6, 21, 12, 0, tzinfo=timezone.utc)
    info = darkness.get_darkness_info(80.0, 0.0, when)
    assert not info.can_view_aurora
    assert info.hours_until_dark is None


def test_naive_datetime_treated_as_utc():
    naive = datetime(2024, 3, 20, 12, 0)
    assert darkness.solar_altitude(0.0, 0.0, naive) == darkness.solar_altitude(0.0, 0.0, EQUINOX_NOON)

"""Solar altitude and sky-darkness classification for aurora viewing.

Uses a simplified solar position model (cosine declination approximation and a
longitude-based solar noon), which is accurate to a degree or two. That is
plenty for deciding whether the sky is dark enough.

Darkness levels:
  night     sun < -18°   full darkness
  nautical  sun < -12°   dark enough for aurora
  civil     sun < -6°    only bright aurora visible (still counts as viewable)
  horizon   sun < 0°     too bright
  day       sun >= 0°
"""

import math
from datetime import datetime, timedelta, timezone

from aurora_go.schemas.sky import DarknessInfo

VIEWABLE_ALTITUDE_DEG = -6.0
MAX_LOOKAHEAD_HOURS = 18

_LEVELS: list[tuple[float, str, str]] = [
    (-18.0, "night", "Full darkness - ideal for aurora"),
    (-12.0, "nautical", "Nautical twilight - good for aurora"),
    (-6.0, "civil", "Civil twilight - only bright aurora visible"),
    (0.0, "horizon", "Sun near horizon - too bright"),
]


def solar_altitude(latitude: float, longitude: float, when: datetime) -> float:
    """Approximate solar altitude in degrees for a location and instant."""
    when = _as_utc(when)
    day_of_year = when.timetuple().tm_yday
    declination = -23.45 * math.cos(math.radians(360 / 365 * (day_of_year + 10)))

    utc_hours = when.hour + when.minute / 60 + when.second / 3600
    solar_noon_utc = 12 - longitude / 15
    hour_angle = (utc_hours - solar_noon_utc) * 15

    lat_rad = math.radians(latitude)
    dec_rad = math.radians(declination)
    sin_alt = (
        math.sin(lat_rad) * math.sin(dec_rad)
        + math.cos(lat_rad) * math.cos(dec_rad) * math.cos(math.radians(hour_angle))
    )
    return math.degrees(math.asin(max(-1.0, min(1.0, sin_alt))))


def classify(altitude: float) -> tuple[str, str, bool]:
    """Return (level, description, can_view_aurora) for a solar altitude."""
    for threshold, level, description in _LEVELS:
        if altitude < threshold:
            return level, description, altitude < VIEWABLE_ALTITUDE_DEG
    return "day", f"Daytime (sun +{altitude:.1f}°) - aurora not visible", False


def can_view_aurora(latitude: float, longitude: float, when: datetime) -> bool:
    return solar_altitude(latitude, longitude, when) < VIEWABLE_ALTITUDE_DEG


def get_darkness_info(
    latitude: float,
    longitude: float,
    when: datetime | None = None,
) -> DarknessInfo:
    when = _as_utc(when or datetime.now(timezone.utc))
    altitude = solar_altitude(latitude, longitude, when)
    level, description, viewable = classify(altitude)
    return DarknessInfo(
        solar_altitude_deg=round(altitude, 1),
        level=level,
        description=description,
        can_view_aurora=viewable,
        hours_until_dark=None if viewable else hours_until_dark(latitude, longitude, when),
    )


def hours_until_dark(latitude: float, longitude: float, when: datetime) -> float | None:
    """Hours until the sky next becomes dark enough for aurora.

    Steps forward an hour at a time, then refines the last hour in 15-minute
    increments. Returns None when darkness does not arrive within 18 hours
    (polar day).
    """
    when = _as_utc(when)
    if can_view_aurora(latitude, longitude, when):
        return 0.0

    for hour in range(1, MAX_LOOKAHEAD_HOURS + 1):
        if can_view_aurora(latitude, longitude, when + timedelta(hours=hour)):
            for quarter in range(1, 4):
                minutes = (hour - 1) * 60 + quarter * 15
                if can_view_aurora(latitude, longitude, when + timedelta(minutes=minutes)):
                    return minutes / 60
            return float(hour)
    return None


def _as_utc(when: datetime) -> datetime:
    if when.tzinfo is None:
        return when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc)

"""Equatorward aurora visibility boundary.

Returns the minimum |latitude| at which aurora should be visible. The official
NOAA G-scale wins when it reports an active storm; otherwise a Bz/speed ladder
is used. Thresholds lean high so the engine errs toward fewer false GOs.
"""

from aurora_go.schemas.space_weather import SpaceWeatherReading

QUIET_LATITUDE = 67.0

G_SCALE_LATITUDE: dict[int, float] = {
    5: 30.0,  # Florida/Texas
    4: 35.0,  # southern US
    3: 45.0,  # northern US
    2: 50.0,  # Canada border
    1: 55.0,  # northern states
}

# (bz below, speed above, latitude); speed None means any speed
BZ_LADDER: list[tuple[float, float | None, float]] = [
    (-25.0, 600.0, 35.0),
    (-20.0, 500.0, 40.0),
    (-15.0, 450.0, 45.0),
    (-10.0, 400.0, 50.0),
    (-8.0, None, 55.0),
    (-5.0, None, 58.0),
    (-3.0, None, 62.0),
]


def visible_latitude(bz: float, speed: float, g_scale: int | None = None) -> float:
    if g_scale:
        return G_SCALE_LATITUDE[max(1, min(5, g_scale))]

    for bz_below, speed_above, latitude in BZ_LADDER:
        if bz < bz_below and (speed_above is None or speed > speed_above):
            return latitude
    return QUIET_LATITUDE


def for_reading(reading: SpaceWeatherReading) -> float:
    return visible_latitude(reading.bz, reading.speed, reading.storm_scale.observed)

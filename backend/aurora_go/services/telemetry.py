"""Normalises raw DSCOVR/ACE plasma and magnetometer rows into a reading.

Plasma rows:       [time_tag, density, speed, temperature]
Magnetometer rows: [time_tag, bx_gsm, by_gsm, bz_gsm, lon_gsm, lat_gsm, bt]

Both feeds start with a header row. Only the last 10 rows are considered for
the "current" values; the last 60 magnetometer rows (one per minute) drive the
southward-duration count.
"""

import logging
import math
from datetime import datetime, timezone

from aurora_go.errors import NoValidData
from aurora_go.schemas.space_weather import SpaceWeatherReading, StormScale
from aurora_go.services import similarity

logger = logging.getLogger(__name__)

RECENT_ROWS = 10
SOUTHWARD_WINDOW = 60
SOUTHWARD_BZ_THRESHOLD = -3.0
PROTON_MASS_FACTOR = 1.6726e-6  # nPa per (p/cm³ · (km/s)²)

# Plasma column indices
P_TIME, P_DENSITY, P_SPEED, P_TEMPERATURE = 0, 1, 2, 3
# Magnetometer column indices
M_TIME, M_BX, M_BY, M_BZ, M_BT = 0, 1, 2, 3, 6


def normalize(
    plasma: list[list],
    mag: list[list],
    scales: dict | None = None,
    fetched_at: datetime | None = None,
) -> SpaceWeatherReading:
    """Build a reading from raw feeds, or a flagged fallback if they are unusable."""
    try:
        return build_reading(plasma, mag, scales, fetched_at)
    except Exception as e:
        logger.warning("Telemetry processing failed, using fallback reading: %s", e)
        return fallback_reading(f"telemetry processing failed: {e}")


def build_reading(
    plasma: list[list],
    mag: list[list],
    scales: dict | None = None,
    fetched_at: datetime | None = None,
) -> SpaceWeatherReading:
    """Strict variant of ``normalize``: raises ``NoValidData`` on empty feeds."""
    plasma_rows = _data_rows(plasma)
    mag_rows = _data_rows(mag)

    recent_plasma = [
        p for p in plasma_rows[-RECENT_ROWS:]
        if parse_number(_col(p, P_DENSITY)) is not None
        and parse_number(_col(p, P_SPEED)) is not None
    ]
    recent_mag = [
        m for m in mag_rows[-RECENT_ROWS:]
        if parse_number(_col(m, M_BZ)) is not None
    ]
    if not recent_plasma or not recent_mag:
        raise NoValidData(
            f"no valid rows (plasma={len(recent_plasma)}, mag={len(recent_mag)})"
        )

    latest_plasma = recent_plasma[-1]
    latest_mag = recent_mag[-1]

    density = round(_num_or_zero(latest_plasma, P_DENSITY), 1)
    speed = round(_num_or_zero(latest_plasma, P_SPEED), 1)
    temperature = round(_num_or_zero(latest_plasma, P_TEMPERATURE))

    bx = round(_num_or_zero(latest_mag, M_BX), 1)
    by = round(_num_or_zero(latest_mag, M_BY), 1)
    bz = round(_num_or_zero(latest_mag, M_BZ), 1)
    bt_raw = parse_number(_col(latest_mag, M_BT))
    bt = round(bt_raw if bt_raw is not None else math.sqrt(bx * bx + by * by + bz * bz), 1)

    pressure = dynamic_pressure(density, speed)
    south_minutes = southward_minutes(mag_rows)

    scores, sim = similarity.compute(
        bz=bz,
        speed=speed,
        density=density,
        bt=bt,
        pressure=pressure,
        temperature=temperature,
        bz_south_minutes=south_minutes,
    )

    return SpaceWeatherReading(
        time=str(_col(latest_plasma, P_TIME)),
        source="live",
        speed=speed,
        density=density,
        temperature=temperature,
        bx=bx,
        by=by,
        bz=bz,
        bt=bt,
        pressure=pressure,
        clock_angle=clock_angle(by, bz),
        bz_south_minutes=south_minutes,
        aurora_power=round(abs(bz) * pressure * 2),
        scores=scores,
        similarity=sim,
        storm_scale=parse_storm_scale(scales),
        fetched_at=fetched_at or datetime.now(timezone.utc),
    )


def fallback_reading(reason: str) -> SpaceWeatherReading:
    """Quiet-conditions placeholder, explicitly tagged as degraded."""
    scores, sim = similarity.compute(
        bz=-1.5, speed=380.0, density=4.5, bt=5.2, pressure=1.2, temperature=95000.0,
    )
    return SpaceWeatherReading(
        time=datetime.now(timezone.utc).isoformat(),
        source="fallback",
        degraded=True,
        degraded_reason=reason,
        speed=380.0,
        density=4.5,
        temperature=95000.0,
        bx=2.1,
        by=3.8,
        bz=-1.5,
        bt=5.2,
        pressure=1.2,
        clock_angle=45.0,
        bz_south_minutes=0,
        aurora_power=1,
        scores=scores,
        similarity=sim,
        storm_scale=StormScale(observed=0),
        fetched_at=datetime.now(timezone.utc),
    )


def dynamic_pressure(density: float, speed: float) -> float:
    return round(PROTON_MASS_FACTOR * density * speed * speed, 2)


def clock_angle(by: float, bz: float) -> float:
    """IMF clock angle in [0, 360); 180° is purely southward."""
    angle = (math.degrees(math.atan2(by, bz)) + 360) % 360
    return round(angle, 1) % 360


def southward_minutes(mag_rows: list[list]) -> int:
    count = 0
    for row in mag_rows[-SOUTHWARD_WINDOW:]:
        bz = parse_number(_col(row, M_BZ))
        if bz is not None and bz < SOUTHWARD_BZ_THRESHOLD:
            count += 1
    return count


def parse_storm_scale(scales: dict | None) -> StormScale:
    """Parse the NOAA scales product: "0" is current observed, "1" is today's forecast."""
    if not isinstance(scales, dict):
        return StormScale()

    current = scales.get("0") or {}
    predicted = scales.get("1") or {}
    return StormScale(
        observed=_g_level(current),
        observed_text=(current.get("G") or {}).get("Text") or "none",
        observed_time=_stamp(current),
        predicted=_g_level(predicted),
        predicted_text=(predicted.get("G") or {}).get("Text") or "none",
        predicted_time=_stamp(predicted),
    )


def parse_number(value) -> float | None:
    """Numeric value of a feed cell, or None for missing/non-numeric/non-finite."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_time_tag(value) -> datetime | None:
    """Parse a SWPC time tag ("2024-05-10 17:00:00.000") as an aware UTC datetime."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _data_rows(rows) -> list[list]:
    if not isinstance(rows, list) or len(rows) < 2:
        return []
    return [r for r in rows[1:] if isinstance(r, (list, tuple))]


def _col(row, index: int):
    return row[index] if len(row) > index else None


def _num_or_zero(row, index: int) -> float:
    value = parse_number(_col(row, index))
    return value if value is not None else 0.0


def _g_level(entry: dict) -> int:
    scale = (entry.get("G") or {}).get("Scale")
    level = parse_number(scale)
    if level is None:
        return 0
    return max(0, min(5, int(level)))


def _stamp(entry: dict) -> str | None:
    if entry.get("DateStamp") and entry.get("TimeStamp"):
        return f"{entry['DateStamp']}T{entry['TimeStamp']}Z"
    return None

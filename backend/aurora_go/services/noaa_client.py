import logging

import httpx

from aurora_go.config import settings
from aurora_go.errors import UpstreamUnavailable
from aurora_go.schemas.sky import OvationForecast

logger = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": "AuroraGo/1.0",
    "Accept": "application/json",
}


async def fetch_json(url: str, timeout: float | None = None):
    """GET a SWPC product. Raises UpstreamUnavailable on any transport or parse error."""
    try:
        async with httpx.AsyncClient(headers=HEADERS, timeout=timeout or settings.telemetry_timeout) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.json()
    except (httpx.HTTPError, ValueError) as e:
        raise UpstreamUnavailable(f"{url}: {e}") from e


async def fetch_plasma() -> list[list]:
    return await fetch_json(settings.plasma_url)


async def fetch_mag() -> list[list]:
    return await fetch_json(settings.mag_url)


async def fetch_scales() -> dict:
    return await fetch_json(settings.scales_url)


async def fetch_ovation_grid() -> dict | None:
    """Fetch the OVATION aurora probability grid (updated roughly every 30 min)."""
    try:
        data = await fetch_json(settings.ovation_url, timeout=settings.secondary_timeout)
    except UpstreamUnavailable as e:
        logger.warning("OVATION fetch failed: %s", e)
        return None
    if not isinstance(data, dict) or not data.get("coordinates"):
        logger.warning("OVATION payload missing coordinates")
        return None
    return data


def ovation_at(grid: dict, latitude: float, longitude: float) -> OvationForecast:
    """Probability at the observer and the best nearby poleward probability.

    Grid entries are ``[lon, lat, probability]`` with longitude in 0-359.
    """
    round_lat = round(latitude)
    round_lon = round(((longitude % 360) + 360) % 360)

    closest_prob = 0.0
    min_dist = float("inf")
    nearby_max = 0.0
    nearby_max_lat = None

    for coord in grid.get("coordinates", []):
        try:
            c_lon, c_lat, prob = float(coord[0]), float(coord[1]), float(coord[2])
        except (TypeError, ValueError, IndexError):
            continue

        d_lon = abs(c_lon - round_lon)
        d_lon = min(d_lon, 360 - d_lon)
        dist = abs(c_lat - round_lat) + d_lon
        if dist < min_dist:
            min_dist = dist
            closest_prob = prob

        # Aurora low on the poleward horizon is visible from up to ~15° away
        if d_lon <= 30 and round_lat < c_lat <= round_lat + 15:
            if prob > nearby_max:
                nearby_max = prob
                nearby_max_lat = c_lat

    at_location = int(round(closest_prob))
    nearby = int(round(nearby_max))
    return OvationForecast(
        observation_time=grid.get("Observation Time"),
        forecast_time=grid.get("Forecast Time"),
        at_location=at_location,
        nearby_max=nearby,
        nearby_max_lat=nearby_max_lat,
        viewable=at_location >= 5 or nearby >= 20,
    )

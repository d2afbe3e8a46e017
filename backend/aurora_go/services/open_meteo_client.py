import logging
from datetime import datetime, timezone

import httpx

from aurora_go.config import settings
from aurora_go.schemas.sky import CloudConditions

logger = logging.getLogger(__name__)

TREND_DELTA_PCT = 10


async def fetch_clouds(latitude: float, longitude: float) -> CloudConditions | None:
    """Fetch current layered cloud cover plus a 6-hour low-cloud outlook."""
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "current": "cloud_cover,cloud_cover_low,cloud_cover_mid,cloud_cover_high,visibility,weather_code",
        "hourly": "cloud_cover,cloud_cover_low",
        "forecast_hours": 6,
        "timezone": "auto",
    }
    try:
        async with httpx.AsyncClient(timeout=settings.secondary_timeout) as client:
            resp = await client.get(settings.open_meteo_url, params=params)
            resp.raise_for_status()
            data = resp.json()
            current = data.get("current", {}) or {}
            hourly_low = [
                v for v in (data.get("hourly", {}) or {}).get("cloud_cover_low", [])
                if v is not None
            ]

            return CloudConditions(
                latitude=latitude,
                longitude=longitude,
                total=current.get("cloud_cover") or 0,
                low=current.get("cloud_cover_low") or 0,
                mid=current.get("cloud_cover_mid") or 0,
                high=current.get("cloud_cover_high") or 0,
                visibility_m=current.get("visibility") or 10000,
                weather_code=current.get("weather_code") or 0,
                trend=cloud_trend(hourly_low),
                forecast_low=hourly_low,
                time=current.get("time") or datetime.now(timezone.utc).isoformat(),
            )
    except Exception as e:
        logger.warning("Open-Meteo cloud fetch failed for %.2f,%.2f: %s", latitude, longitude, e)
        return None


def assume_clear(latitude: float, longitude: float) -> CloudConditions:
    """Neutral stand-in used when cloud data is unavailable."""
    return CloudConditions(latitude=latitude, longitude=longitude, trend="unknown", degraded=True)


def cloud_trend(hourly_low: list[float]) -> str:
    if len(hourly_low) < 2:
        return "unknown"
    first, last = hourly_low[0], hourly_low[-1]
    if last - first > TREND_DELTA_PCT:
        return "increasing"
    if first - last > TREND_DELTA_PCT:
        return "clearing"
    return "stable"

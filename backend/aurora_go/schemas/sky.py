from pydantic import BaseModel


class CloudConditions(BaseModel):
    latitude: float
    longitude: float
    total: float = 0.0  # %
    low: float = 0.0
    mid: float = 0.0
    high: float = 0.0
    visibility_m: float = 10000.0
    weather_code: int = 0
    trend: str = "unknown"  # clearing, increasing, stable, unknown
    forecast_low: list[float] = []
    time: str | None = None
    degraded: bool = False


class OvationForecast(BaseModel):
    observation_time: str | None = None
    forecast_time: str | None = None
    at_location: int = 0  # % probability at the observer grid point
    nearby_max: int = 0  # % max within the poleward viewing region
    nearby_max_lat: float | None = None
    viewable: bool = False


class DarknessInfo(BaseModel):
    solar_altitude_deg: float
    level: str  # night, nautical, civil, horizon, day
    description: str
    can_view_aurora: bool
    hours_until_dark: float | None = None

from fastapi import APIRouter, Query

from aurora_go.config import settings
from aurora_go.schemas.decision import Decision
from aurora_go.schemas.sky import CloudConditions, DarknessInfo
from aurora_go.schemas.space_weather import SpaceWeatherReading
from aurora_go.services import space_weather_ingest

router = APIRouter(prefix="/space-weather", tags=["space-weather"])


def _lat(default: float | None = None):
    return Query(default if default is not None else settings.observer_latitude, ge=-90, le=90)


def _lon(default: float | None = None):
    return Query(default if default is not None else settings.observer_longitude, ge=-180, le=180)


@router.get("/current", response_model=SpaceWeatherReading)
async def get_current():
    """Latest solar wind reading with G4 similarity scores."""
    return await space_weather_ingest.get_current_reading()


@router.get("/clouds", response_model=CloudConditions)
async def get_clouds(lat: float = _lat(), lon: float = _lon()):
    return await space_weather_ingest.get_clouds(lat, lon)


@router.get("/ovation")
async def get_ovation(lat: float = _lat(), lon: float = _lon()):
    """OVATION aurora probability at and poleward of the observer."""
    forecast = await space_weather_ingest.get_ovation(lat, lon)
    if forecast is None:
        return {"error": "No data"}
    return forecast


@router.get("/darkness", response_model=DarknessInfo)
async def get_darkness(lat: float = _lat(), lon: float = _lon()):
    return space_weather_ingest.get_darkness(lat, lon)


@router.get("/decision", response_model=Decision)
async def get_decision(lat: float = _lat(), lon: float = _lon()):
    """GO / NO_GO verdict for an observer."""
    return await space_weather_ingest.get_decision(lat, lon)

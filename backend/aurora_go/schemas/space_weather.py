from datetime import datetime

from pydantic import BaseModel


class StormBaseline(BaseModel):
    """Reference values from the May 10-11, 2024 G4 storm."""

    model_config = {"frozen": True}

    speed: float = 750.0  # km/s
    density: float = 25.0  # p/cm³
    bz: float = -30.0  # nT
    bt: float = 40.0  # nT
    pressure: float = 15.0  # nPa
    temperature: float = 500000.0  # K


STORM_BASELINE = StormBaseline()


class ComponentScores(BaseModel):
    bz: int = 0
    speed: int = 0
    density: int = 0
    bt: int = 0
    pressure: int = 0
    temperature: int = 0


class StormScale(BaseModel):
    observed: int | None = None  # G0-G5, None when the scales feed is unavailable
    observed_text: str = "none"
    observed_time: str | None = None
    predicted: int = 0
    predicted_text: str = "none"
    predicted_time: str | None = None


class SpaceWeatherReading(BaseModel):
    model_config = {"frozen": True}

    time: str
    source: str = "live"  # live, fallback
    degraded: bool = False
    degraded_reason: str | None = None

    speed: float  # km/s
    density: float  # p/cm³
    temperature: float  # K
    bx: float  # nT
    by: float
    bz: float
    bt: float

    pressure: float  # nPa
    clock_angle: float  # degrees, 0-360
    bz_south_minutes: int = 0
    aurora_power: int = 0  # GW estimate

    scores: ComponentScores = ComponentScores()
    similarity: int = 0  # 0-99
    storm_scale: StormScale = StormScale()
    baseline: StormBaseline = STORM_BASELINE
    fetched_at: datetime | None = None

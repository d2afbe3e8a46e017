from datetime import date, datetime

from pydantic import BaseModel


class MetricStats(BaseModel):
    min: float
    max: float
    avg: float


class DailyStats(BaseModel):
    date: date
    data_points: int = 0
    speed: MetricStats | None = None
    density: MetricStats | None = None
    bz: MetricStats | None = None
    bt: MetricStats | None = None


class DailySummary(BaseModel):
    stats: DailyStats
    good_bz_minutes: int = 0
    good_bz_hours: float = 0.0
    peak_similarity: int = 0
    peak_time: datetime | None = None
    verdict: str  # EXCELLENT, GOOD, MODERATE, QUIET
    description: str = ""
from datetime import datetime

from pydantic import BaseModel


class Decision(BaseModel):
    verdict: str  # GO, NO_GO
    reason_code: str
    reason: str
    action: str = ""
    confidence: str  # low, medium, high
    contributing_factors: list[str] = []
    go_score: int | None = None
    visible_latitude: float | None = None
    latitude_margin: float | None = None
    sky_clarity: int | None = None
    decided_at: datetime | None = None

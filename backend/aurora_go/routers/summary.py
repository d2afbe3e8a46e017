from fastapi import APIRouter, HTTPException

from aurora_go.schemas.summary import DailySummary
from aurora_go.services import space_weather_ingest

router = APIRouter(prefix="/summary", tags=["summary"])


@router.get("/latest", response_model=DailySummary)
async def get_latest_summary():
    summary = space_weather_ingest.summary_store.latest_summary()
    if summary is None:
        raise HTTPException(status_code=404, detail="No daily summary recorded yet")
    return summary

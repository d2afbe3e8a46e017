import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from aurora_go.config import settings
from aurora_go.database import init_db

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    from aurora_go.tasks.scheduler import start_scheduler, stop_scheduler
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(
    title="Aurora GO",
    description="GO / NO-GO aurora viewing decisions from real-time space weather",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from aurora_go.routers import space_weather, summary  # noqa: E402

app.include_router(space_weather.router, prefix="/api/v1")
app.include_router(summary.router, prefix="/api/v1")


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/v1/admin/daily-summary")
async def trigger_daily_summary():
    """Manually generate (and email) yesterday's summary."""
    from aurora_go.services.space_weather_ingest import summary_generator
    result = await summary_generator.run()
    if result is None:
        return {"status": "skipped"}
    return {"status": "generated", "verdict": result.verdict, "date": result.stats.date.isoformat()}

from sqlalchemy import Boolean, Column, Date, DateTime, Float, Integer, String, JSON
from sqlalchemy.sql import func

from aurora_go.database import Base


class DailySummaryRecord(Base):
    __tablename__ = "daily_summaries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    summary_date = Column(Date, nullable=False, index=True)
    verdict = Column(String(20), nullable=False)  # EXCELLENT, GOOD, MODERATE, QUIET
    description = Column(String(200))
    peak_similarity = Column(Integer, nullable=False)
    peak_time = Column(DateTime)
    good_bz_minutes = Column(Integer)
    min_bz = Column(Float)
    data_points = Column(Integer)
    stats_json = Column(JSON)
    emailed = Column(Boolean, default=False)
    created_at = Column(DateTime, server_default=func.now())
